"""Data structures for user notifications."""

from typing import Optional
from datetime import datetime
from enum import Enum

from dataclasses import dataclass, field

from .util import get_tzaware_utc_now, coerce_datetime


class NotificationType(Enum):
    """Kinds of notification that a user can receive."""

    THEME_APPROVED = 'theme_approved'
    THEME_REJECTED = 'theme_rejected'
    USER_BANNED = 'user_banned'
    USER_UNBANNED = 'user_unbanned'
    ANNOUNCEMENT = 'announcement'


@dataclass
class Notification:
    """
    A one-way message to a user.

    Notifications are never edited after they are created, except that
    :attr:`read` may go from ``False`` to ``True``.
    """

    user_id: str
    type: NotificationType
    message: str
    reason: Optional[str] = None
    submission_id: Optional[int] = None
    title: Optional[str] = None
    """Title of the submission that the notification is about, if any."""

    created: datetime = field(default_factory=get_tzaware_utc_now)
    read: bool = False
    notification_id: Optional[int] = None

    def __post_init__(self) -> None:
        """Make sure that :attr:`.type` is a :class:`.NotificationType`."""
        if not isinstance(self.type, NotificationType):
            self.type = NotificationType(self.type)
        self.created = coerce_datetime(self.created)
