import os
import logging
import sysconfig

from dataclasses import dataclass, field, fields
from typing import List, Callable, Any, Dict, Optional, Union, get_args, get_origin

from .version import __version__

logger = logging.getLogger("honeybadger")

DEFAULT_PARAMS_FILTERS = ["password", "password_confirmation"]

IGNORE_DEFAULT = [
    "Http404",
    "PermissionDenied",
    "SuspiciousOperation",
    "DisallowedHost",
    "NotFound",
    "MethodNotAllowed",
    "HTTPNotFound",
]

DEVELOPMENT_ENVIRONMENTS = ["development", "test", "cucumber"]

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _package_roots():
    paths = sysconfig.get_paths()
    roots = {paths.get("purelib"), paths.get("platlib")}
    return sorted((r for r in roots if r), key=len, reverse=True)


def _strip_project_root(line):
    # Reads the process-wide configuration, creating it on first use.
    root = current().project_root
    if line and root:
        return line.replace(str(root), "[PROJECT_ROOT]")
    return line


def _strip_dot_slash(line):
    if line and line.startswith("./"):
        return line[2:]
    return line


def _strip_package_roots(line):
    if not line:
        return line
    for root in _package_roots():
        line = line.replace(root, "[PACKAGE_ROOT]")
    return line


def _notifier_prefixes():
    prefixes = [_PACKAGE_DIR + os.sep]
    for root in _package_roots():
        if _PACKAGE_DIR.startswith(root):
            prefixes.append("[PACKAGE_ROOT]" + _PACKAGE_DIR[len(root):] + os.sep)
    project_root = current().project_root
    if project_root and _PACKAGE_DIR.startswith(str(project_root)):
        prefixes.append(
            "[PROJECT_ROOT]" + _PACKAGE_DIR[len(str(project_root)):] + os.sep
        )
    return prefixes


def _drop_notifier_frames(line):
    if line and any(p in line for p in _notifier_prefixes()):
        return None
    return line


DEFAULT_BACKTRACE_FILTERS = [
    _strip_project_root,
    _strip_dot_slash,
    _strip_package_roots,
    _drop_notifier_frames,
]

Filter = Union[str, Callable[..., Any]]


@dataclass
class BaseConfig:
    proxy_host: Optional[str] = None
    proxy_port: Optional[int] = None
    proxy_user: Optional[str] = None
    proxy_pass: Optional[str] = None
    project_root: Optional[str] = None
    environment_name: Optional[str] = None
    logger: Any = None
    notifier_version: str = __version__
    notifier_name: str = "Honeybadger Notifier"
    notifier_url: str = "https://github.com/honeybadger-io/honeybadger-python"
    secure: bool = True
    host: str = "api.honeybadger.io"
    http_open_timeout: int = 2
    http_read_timeout: int = 5
    ignore_by_filters: List[Filter] = field(default_factory=list)
    ignore_user_agent: List[Filter] = field(default_factory=list)
    params_filters: List[Filter] = field(
        default_factory=lambda: list(DEFAULT_PARAMS_FILTERS)
    )
    backtrace_filters: List[Filter] = field(
        default_factory=lambda: list(DEFAULT_BACKTRACE_FILTERS)
    )
    ignore: List[str] = field(default_factory=lambda: list(IGNORE_DEFAULT))
    framework: str = "Standalone"
    source_extract_radius: int = 2
    async_: Optional[Callable[..., Any]] = None
    send_request_session: bool = True
    debug: bool = False
    development_environments: List[str] = field(
        default_factory=lambda: list(DEVELOPMENT_ENVIRONMENTS)
    )
    api_key: Optional[str] = None


# Public option names, in mapping order.
OPTIONS = (
    "api_key",
    "backtrace_filters",
    "development_environments",
    "environment_name",
    "host",
    "http_open_timeout",
    "http_read_timeout",
    "ignore",
    "ignore_by_filters",
    "ignore_user_agent",
    "notifier_name",
    "notifier_url",
    "notifier_version",
    "params_filters",
    "project_root",
    "port",
    "protocol",
    "proxy_host",
    "proxy_pass",
    "proxy_port",
    "proxy_user",
    "secure",
    "source_extract_radius",
    "async",
    "send_request_session",
    "debug",
    "framework",
    "logger",
)

ALIASES = {"async": "async_"}

# Options that can be assigned but are not dataclass fields.
_EXTRA_SETTERS = (
    "port",
    "ignore_only",
    "ignore_user_agent_only",
    "current_user_method",
)

# Options holding callables or handles that have no string form.
_ENV_SKIPPED = ("logger", "async_", "backtrace_filters", "ignore_by_filters")


def _coerce_env(typ, value):
    if get_origin(typ) is Union:
        args = [a for a in get_args(typ) if a is not type(None)]
        if len(args) == 1:
            typ = args[0]
    if typ == list or get_origin(typ) is list:
        return value.split(",")
    elif typ == bool:
        return value.lower() in ("true", "1", "yes")
    elif typ == int:
        return int(value)
    return value


class Configuration(BaseConfig):
    """
    Options used by the notifier to build and deliver error reports.

    Values are taken from the defaults, then ``HONEYBADGER_<OPTION>``
    environment variables, then keyword arguments. Nothing is validated or
    coerced on assignment.

    Instances are not synchronized. When one configuration is shared between
    threads, concurrent mutation (e.g. two threads appending to the same
    filter list) must be coordinated by the caller.
    """

    def __init__(self, **kwargs):
        self._port = None
        unknown = set(self._attribute_name(k) for k in kwargs) - self._settable()
        if unknown:
            message = f"Unknown Configuration option(s): {', '.join(sorted(unknown))}"
            logger.warning(message)
            raise AttributeError(message)

        super().__init__()
        self.set_12factor_config()
        self.set_config_from_dict(kwargs)

    @staticmethod
    def _attribute_name(name):
        return ALIASES.get(name, name)

    def _settable(self):
        return {f.name for f in fields(self)} | set(_EXTRA_SETTERS)

    def set_12factor_config(self):
        env_fields = [(f.name, f.type) for f in fields(self) if f.name not in _ENV_SKIPPED]
        env_fields.append(("port", int))

        for name, typ in env_fields:
            env_name = f"HONEYBADGER_{name.upper()}"
            env_val = os.environ.get(env_name)
            if env_val is None:
                continue
            try:
                val = _coerce_env(typ, env_val)
            except ValueError:
                logger.debug("Ignoring malformed %s=%r", env_name, env_val)
                continue
            logger.debug("Setting %s from %s", name, env_name)
            setattr(self, name, val)

    def set_config_from_dict(self, config: Dict[str, Any]):
        settable = self._settable()
        for k, v in config.items():
            name = self._attribute_name(k)
            if name not in settable:
                message = f"Unknown Configuration option: {k}"
                logger.warning(message)
                raise AttributeError(message)
            setattr(self, name, v)

    # Derived values
    #
    @property
    def port(self):
        if self._port is not None:
            return self._port
        return 443 if self.secure else 80

    @port.setter
    def port(self, value):
        self._port = value

    @property
    def protocol(self):
        return "https" if self.secure else "http"

    # Async handler
    #
    def set_async(self, value=None, block=None):
        """
        Set the async handler. Works as a decorator; a ``block`` passed along
        with a value takes precedence over it.
        """
        handler = block if block is not None else value
        self.async_ = handler
        return handler

    def is_async(self):
        return self.async_ is not None

    # Filters
    #
    def filter_backtrace(self, func):
        self.backtrace_filters.append(func)
        return func

    def ignore_by_filter(self, func):
        self.ignore_by_filters.append(func)
        return func

    def set_ignore_only(self, value):
        self.ignore = _as_list(value)

    def set_ignore_user_agent_only(self, value):
        self.ignore_user_agent = _as_list(value)

    ignore_only = property(lambda self: self.ignore, set_ignore_only)
    ignore_user_agent_only = property(
        lambda self: self.ignore_user_agent, set_ignore_user_agent_only
    )

    @property
    def current_user_method(self):
        return None

    @current_user_method.setter
    def current_user_method(self, value):
        logger.debug("current_user_method is not supported; ignoring %r", value)

    # Environment
    #
    def is_public(self):
        return (
            not self.environment_name
            or self.environment_name not in self.development_environments
        )

    def is_dev(self):
        return not self.is_public()

    # Mapping interface
    #
    def to_dict(self):
        return {name: self[name] for name in OPTIONS}

    to_hash = to_dict

    def merge(self, other):
        return {**self.to_dict(), **other}

    def keys(self):
        return list(OPTIONS)

    def __getitem__(self, name):
        if name not in OPTIONS:
            raise KeyError(name)
        return getattr(self, self._attribute_name(name))

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._port == other._port and self.to_dict() == other.to_dict()

    __hash__ = None

    def __repr__(self):
        options = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"{type(self).__name__}({options})"

    def __contains__(self, name):
        return name in OPTIONS

    def __iter__(self):
        return iter(OPTIONS)


def _as_list(value):
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


_configuration: Optional[Configuration] = None


def current() -> Configuration:
    global _configuration
    if _configuration is None:
        _configuration = Configuration()
    return _configuration


def replace(config: Optional[Configuration]):
    global _configuration
    _configuration = config or None
