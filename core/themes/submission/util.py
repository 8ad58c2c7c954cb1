"""Access to application configuration and globals."""

import os
from typing import Any, Optional, Mapping

from flask import current_app, g, has_app_context


def get_application_config(app: Optional[Any] = None) -> Mapping[str, Any]:
    """
    Get a configuration from the current app, or fall back to env.

    Parameters
    ----------
    app : :class:`flask.Flask`

    Returns
    -------
    dict-like
        This is either the current Flask application configuration, or
        ``os.environ``. Either of these should support the ``get()`` and
        ``setdefault()`` methods.

    """
    if app is not None:
        return app.config
    if has_app_context():
        return current_app.config
    return os.environ


def get_application_global() -> Optional[Any]:
    """Get the current application global, if running in a Flask app."""
    if has_app_context():
        return g
    return None


def config_flag(key: str, default: bool = False) -> bool:
    """Interpret a configuration parameter as a boolean."""
    return bool(int(get_application_config().get(key, int(default))))
