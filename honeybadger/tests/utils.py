from functools import wraps

import honeybadger


def with_config(config):
    """
    Decorator to configure the process-wide configuration for a test, and
    reset it after.
    Usage:
        @with_config({"project_root": "/srv/app"})
        def test_...():
            ...
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            honeybadger.reset_configuration()
            honeybadger.configure(**config)
            try:
                return fn(*args, **kwargs)
            finally:
                honeybadger.reset_configuration()

        return wrapper

    return decorator
