"""Helpers for API controllers."""

import logging
from functools import wraps
from typing import Any, Callable, Dict, Tuple

from werkzeug.exceptions import BadRequest, Unauthorized, Forbidden, \
    NotFound, Conflict, InternalServerError, ServiceUnavailable

from themes.submission import exceptions as ex
from themes.submission.domain import Submission, Notification
from themes.submission.services.store import Unavailable
from themes.submission.serializer import DomainJSONEncoder

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], int, Dict[str, str]]

_encoder = DomainJSONEncoder()


def handle_errors(func: Callable[..., Response]) -> Callable[..., Response]:
    """Translate exceptions from the submission core to HTTP exceptions."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Response:
        try:
            return func(*args, **kwargs)
        except ex.Unauthenticated as e:
            raise Unauthorized(str(e)) from e
        except ex.AuthorizationError as e:
            raise Forbidden(str(e)) from e
        except ex.NotFound as e:
            raise NotFound(str(e)) from e
        except ex.ConflictError as e:
            raise Conflict(str(e)) from e
        except ex.ValidationError as e:
            raise BadRequest(str(e)) from e
        except Unavailable as e:
            logger.error('Database unavailable: %s', e)
            raise ServiceUnavailable('Please try again later') from e
        except ex.SaveError as e:
            logger.error('Problem interacting with database: (%s) %s',
                         str(type(e)), str(e))
            raise InternalServerError('Problem interacting with'
                                      ' database') from e
    return wrapper


def submission_to_json(submission: Submission) -> Dict[str, Any]:
    """Render a submission as a JSON-friendly dict."""
    moderator = submission.moderator
    return {
        'id': submission.submission_id,
        'title': submission.title,
        'description': submission.description,
        'sourceLink': submission.source_link,
        'content': submission.content,
        'previewImage': submission.preview_image,
        'contributors': list(submission.contributors),
        'validatedUsers': {
            uid: {'username': user.username, 'avatar': user.avatar}
            for uid, user in submission.validated_users.items()
        },
        'state': submission.state,
        'moderator': _encoder.default(moderator) if moderator else None,
        'reason': submission.reason,
        'submittedBy': submission.submitted_by,
        'submittedAt': _encoder.default(submission.submitted_at),
        'tags': list(submission.tags),
    }


def notification_to_json(notification: Notification) -> Dict[str, Any]:
    """Render a notification as a JSON-friendly dict."""
    return {
        'id': notification.notification_id,
        'userId': notification.user_id,
        'type': notification.type.value,
        'message': notification.message,
        'reason': notification.reason,
        'themeId': notification.submission_id,
        'themeName': notification.title,
        'createdAt': _encoder.default(notification.created),
        'read': notification.read,
    }

