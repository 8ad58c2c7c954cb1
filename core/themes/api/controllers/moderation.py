"""Controllers for moderation actions."""

import logging
from http import HTTPStatus as status
from typing import Any

from themes.submission import core, dispatch
from themes.submission.auth import require_admin
from themes.submission.domain import User, ApproveRequest, RejectRequest, \
    BanRequest, AnnouncementRequest, standing_request

from .util import Response, handle_errors, submission_to_json

logger = logging.getLogger(__name__)


@handle_errors
def approve(data: Any, submission_id: int, user: User) -> Response:
    """Approve a pending submission with moderator-confirmed tags."""
    request = ApproveRequest.from_dict(data, submission_id=submission_id)
    submission = core.approve(request.submission_id, request.tags, user)
    return submission_to_json(submission), status.OK, {}


@handle_errors
def reject(data: Any, submission_id: int, user: User) -> Response:
    """Reject a pending submission, and maybe ban its submitter."""
    request = RejectRequest.from_dict(data or {}, submission_id=submission_id)
    submission = core.reject(request.submission_id, request.reason, user,
                             ban_user=request.ban_user,
                             ban_reason=request.ban_reason)
    return submission_to_json(submission), status.OK, {}


@handle_errors
def set_standing(data: Any, user: User) -> Response:
    """Ban or unban a user."""
    require_admin(user)
    request = standing_request(data)
    if isinstance(request, BanRequest):
        target = dispatch.ban(request.user_id, request.reason, user)
    else:
        target = dispatch.unban(request.user_id, user)
    return {'userId': target.user_id,
            'bannedFromSubmissions': target.banned_from_submissions,
            'banReason': target.ban_reason}, status.OK, {}


@handle_errors
def announce(data: Any, user: User) -> Response:
    """Send an announcement to every user."""
    require_admin(user)
    request = AnnouncementRequest.from_dict(data)
    delivered = dispatch.announce(request.title, request.message)
    return {'delivered': delivered}, status.OK, {}
