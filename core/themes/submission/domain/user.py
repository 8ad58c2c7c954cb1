"""Data structures for users and their standing."""

from typing import Any, Optional
from datetime import datetime

from dataclasses import dataclass, field

from .util import coerce_datetime

__all__ = ('User', 'Moderator', 'ValidatedUser', 'Standing')


@dataclass
class ValidatedUser:
    """Snapshot of a user profile, taken when a submission is made."""

    id: str
    username: str = field(default_factory=str)
    avatar: str = field(default_factory=str)


@dataclass
class Moderator:
    """Snapshot of the admin who made a moderation decision."""

    id: str
    name: str = field(default_factory=str)
    avatar: str = field(default_factory=str)


@dataclass
class Standing:
    """The submission ban status of a user."""

    banned: bool = False
    reason: Optional[str] = None
    banned_at: Optional[datetime] = None
    banned_by: Optional[Moderator] = None

    def __post_init__(self) -> None:
        """Check nested types."""
        if isinstance(self.banned_by, dict):
            self.banned_by = Moderator(**self.banned_by)
        self.banned_at = coerce_datetime(self.banned_at)


@dataclass
class User:
    """
    A user known to the portal.

    User records are created by the identity provider callback. The ban fields
    are only changed by moderation (see :mod:`.dispatch`).
    """

    user_id: str
    username: str = field(default_factory=str)
    avatar: str = field(default_factory=str)
    admin: bool = False
    banned_from_submissions: bool = False
    ban_reason: Optional[str] = None
    banned_at: Optional[datetime] = None
    banned_by: Optional[Moderator] = None

    def __post_init__(self) -> None:
        """Check nested types."""
        self.user_id = str(self.user_id)
        if isinstance(self.banned_by, dict):
            self.banned_by = Moderator(**self.banned_by)
        self.banned_at = coerce_datetime(self.banned_at)

    def __eq__(self, other: Any) -> bool:
        """Users are the same user if they have the same identifier."""
        if not isinstance(other, User):
            return False
        return self.user_id == other.user_id

    @property
    def standing(self) -> Standing:
        """Current ban status of the user."""
        return Standing(banned=self.banned_from_submissions,
                        reason=self.ban_reason,
                        banned_at=self.banned_at,
                        banned_by=self.banned_by)

    def snapshot(self) -> ValidatedUser:
        """Capture the current profile for attribution on a submission."""
        return ValidatedUser(id=self.user_id, username=self.username,
                             avatar=self.avatar)

    def as_moderator(self) -> Moderator:
        """Capture the current profile of an acting admin."""
        return Moderator(id=self.user_id, name=self.username,
                         avatar=self.avatar)
