"""Provides the theme submission and moderation API."""

import logging
from functools import wraps
from typing import Any, Callable

from flask import Blueprint, jsonify, request, Response
from werkzeug.exceptions import Unauthorized

from themes.submission.auth import resolve_user, get_bearer
from themes.submission.exceptions import Unauthenticated

from .controllers import submissions, moderation, users

logger = logging.getLogger(__name__)

blueprint = Blueprint('api', __name__, url_prefix='')


@blueprint.before_request
def authenticate() -> None:
    """Resolve the bearer token on the request to the current user."""
    token = get_bearer(request.headers.get('Authorization'))
    try:
        request.user = resolve_user(token)
    except Unauthenticated as e:
        raise Unauthorized(str(e)) from e
    logger.debug('Request by user %s', request.user.user_id)


def json_response(func: Callable) -> Callable:
    """Generate a wrapper for routes that JSONifies the response body."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Response:
        r_body, r_status, r_headers = func(*args, **kwargs)
        response = jsonify(r_body)
        response.status_code = r_status
        response.headers.extend(r_headers)
        return response
    return wrapper


def _json() -> Any:
    return request.get_json(silent=True)


# Submissions.

@blueprint.route('/submissions', methods=['POST'])
@json_response
def create_submission() -> Response:
    """Accept a new submission."""
    return submissions.create_submission(_json(), request.user)


@blueprint.route('/submissions', methods=['GET'])
@json_response
def list_submissions() -> Response:
    """List submissions for review."""
    return submissions.list_submissions(request.args, request.user)


@blueprint.route('/submissions/<int:submission_id>', methods=['GET'])
@json_response
def get_submission(submission_id: int) -> Response:
    """Get the current state of a submission."""
    return submissions.get_submission(submission_id, request.user)


@blueprint.route('/submissions/<int:submission_id>/suggestions',
                 methods=['GET'])
@json_response
def get_suggestions(submission_id: int) -> Response:
    """Suggest tags for a submission."""
    return submissions.get_suggestions(submission_id, request.user)


@blueprint.route('/users/@me/submissions', methods=['GET'])
@json_response
def list_own_submissions() -> Response:
    """List the submissions of the current user."""
    return submissions.list_own_submissions(request.user)


# Moderation.

@blueprint.route('/submissions/<int:submission_id>/approve',
                 methods=['POST'])
@json_response
def approve(submission_id: int) -> Response:
    """Approve a submission."""
    return moderation.approve(_json(), submission_id, request.user)


@blueprint.route('/submissions/<int:submission_id>/reject', methods=['POST'])
@json_response
def reject(submission_id: int) -> Response:
    """Reject a submission."""
    return moderation.reject(_json(), submission_id, request.user)


@blueprint.route('/users/ban', methods=['POST'])
@json_response
def set_standing() -> Response:
    """Ban or unban a user."""
    return moderation.set_standing(_json(), request.user)


@blueprint.route('/admin/announcement', methods=['POST'])
@json_response
def announce() -> Response:
    """Send an announcement to everyone."""
    return moderation.announce(_json(), request.user)


# Users.

@blueprint.route('/users/validate', methods=['POST'])
@json_response
def validate_users() -> Response:
    """Check contributor ids."""
    return users.validate_users(_json(), request.user)


@blueprint.route('/users/@me/notifications', methods=['GET'])
@json_response
def list_notifications() -> Response:
    """Get the notifications of the current user."""
    return users.list_notifications(request.user)


@blueprint.route('/users/@me/notifications/mark-read', methods=['POST'])
@json_response
def mark_notifications_read() -> Response:
    """Mark the notifications of the current user as read."""
    return users.mark_notifications_read(request.user)
