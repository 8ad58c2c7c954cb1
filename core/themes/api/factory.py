"""Application factory for the theme submission API."""

import logging
from typing import Any, Mapping, Optional

from flask import Flask, jsonify, Response
from werkzeug.exceptions import HTTPException

from themes import submission
from themes.submission import config

from . import routes

logger = logging.getLogger(__name__)

CATEGORIES = {
    400: 'ValidationError',
    401: 'Unauthenticated',
    403: 'AuthorizationError',
    404: 'NotFound',
    409: 'ConflictError',
}
"""Error categories shown to clients, by HTTP status."""


def jsonify_exception(error: HTTPException) -> Response:
    """Render an HTTP exception as JSON, with its category."""
    exc_resp = error.get_response()
    status_code = exc_resp.status_code
    if status_code >= 500:
        logger.error('Request failed: %s', error.description,
                     exc_info=getattr(error, 'original_exception', None))
    category = CATEGORIES.get(status_code,
                              'InternalError' if status_code >= 500
                              else type(error).__name__)
    response = jsonify(reason=error.description, category=category)
    response.status_code = status_code
    return response


def create_web_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Initialize an instance of the theme submission API."""
    app = Flask('themes.api')
    app.config.from_object(config)
    if overrides:
        app.config.update(overrides)
    logging.basicConfig(level=app.config['LOGLEVEL'])
    submission.init_app(app)

    app.register_blueprint(routes.blueprint)
    app.register_error_handler(HTTPException, jsonify_exception)
    return app
