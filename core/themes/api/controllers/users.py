"""Controllers for users and their notifications."""

from http import HTTPStatus as status
from typing import Any

from themes.submission import dispatch
from themes.submission.contributors import validate_contributors
from themes.submission.domain import User, ValidateUsersRequest

from .util import Response, handle_errors, notification_to_json


@handle_errors
def validate_users(data: Any, user: User) -> Response:
    """Resolve contributor ids; report those that could not be resolved."""
    request = ValidateUsersRequest.from_dict(data)
    batch = validate_contributors(request.users, user)
    return {
        'contributors': batch.contributors,
        'validatedUsers': {
            uid: {'username': profile.username, 'avatar': profile.avatar}
            for uid, profile in batch.validated_users.items()
        },
        'failed': [{'id': f.user_id, 'reason': f.reason}
                   for f in batch.failures]
    }, status.OK, {}


@handle_errors
def list_notifications(user: User) -> Response:
    """Get the most recent notifications of the authenticated user."""
    notifications = dispatch.list_notifications(user.user_id)
    return {
        'notifications': [notification_to_json(n) for n in notifications],
        'unread': len([n for n in notifications if not n.read])
    }, status.OK, {}


@handle_errors
def mark_notifications_read(user: User) -> Response:
    """Mark every notification of the authenticated user as read."""
    count = dispatch.mark_all_read(user.user_id)
    return {'success': True, 'marked': count}, status.OK, {}
