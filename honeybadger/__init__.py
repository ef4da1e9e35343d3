import logging

from . import config as _config
from .config import Configuration
from .version import __version__

logger = logging.getLogger("honeybadger")
logger.addHandler(logging.NullHandler())

__all__ = [
    "Configuration",
    "configuration",
    "set_configuration",
    "reset_configuration",
    "configure",
    "__version__",
]


def configuration():
    """
    Return the process-wide configuration, creating one with defaults on
    first use.
    """
    return _config.current()


def set_configuration(value):
    """
    Replace the process-wide configuration. ``None`` clears it so the next
    call to :func:`configuration` starts again from the defaults.
    """
    _config.replace(value)


def reset_configuration():
    set_configuration(None)


def configure(func=None, **kwargs):
    """
    Apply options to the process-wide configuration.

    Keyword options are assigned first, then ``func`` (if given) is called
    with the configuration so it can mutate it directly::

        def setup(config):
            config.api_key = "abc123"
            config.ignore.append("MyError")

        honeybadger.configure(setup, environment_name="production")
    """
    config = configuration()
    config.set_config_from_dict(kwargs)
    if func is not None:
        func(config)
    return config
