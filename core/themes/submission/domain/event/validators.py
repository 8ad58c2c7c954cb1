"""Reusable validators for events."""

from typing import Optional

from .base import Event
from ..submission import Submission
from ...exceptions import InvalidEvent, AuthorizationError, ConflictError


def creator_is_admin(event: Event, submission: Optional[Submission]) -> None:
    """
    Verify that the creator of the event has moderation privileges.

    Raises
    ------
    :class:`.AuthorizationError`
        Raised if the creator is not an admin.

    """
    if not event.creator.admin:
        raise AuthorizationError('Only admins may moderate submissions')


def creator_is_not_banned(event: Event,
                          submission: Optional[Submission]) -> None:
    """Banned users cannot make submissions."""
    if event.creator.banned_from_submissions:
        raise AuthorizationError('You are banned from submitting themes')


def submission_is_pending(event: Event, submission: Submission) -> None:
    """
    Verify that the submission has not yet been moderated.

    Raises
    ------
    :class:`.ConflictError`
        Raised if the submission is approved or rejected already.

    """
    if not submission.is_pending:
        raise ConflictError(f'Submission {submission.submission_id} is'
                            f' {submission.state}, not pending', event)


def not_blank(event: Event, name: str, value: Optional[str]) -> None:
    """The value must contain something other than whitespace."""
    if not value or not value.strip():
        raise InvalidEvent(event, f"{name} is required")
