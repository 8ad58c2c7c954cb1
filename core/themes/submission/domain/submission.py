"""Data structures for submissions."""

from typing import Optional, Dict, List
from datetime import datetime

from dataclasses import dataclass, field

from .user import Moderator, ValidatedUser
from .util import get_tzaware_utc_now, dict_coerce, coerce_datetime


@dataclass
class Submission:
    """
    Represents a theme submission.

    A submission is created ``pending`` and receives exactly one moderation
    decision, after which it is either ``approved`` (with tags) or
    ``rejected`` (with a reason). Both decision states are terminal.
    """

    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    STATES = (PENDING, APPROVED, REJECTED)

    submission_id: Optional[int] = None
    title: str = field(default_factory=str)
    description: str = field(default_factory=str)
    source_link: str = field(default_factory=str)
    """Canonical download origin of the theme."""

    content: str = field(default_factory=str)
    """
    Base64-encoded theme source.

    Only ever decoded for display and analysis; see :mod:`.suggestions`.
    """

    preview_image: str = field(default_factory=str)
    """URL or ``data:`` URL of the preview image."""

    contributors: List[str] = field(default_factory=list)
    """User ids credited for the submission. The submitter comes first."""

    validated_users: Dict[str, ValidatedUser] = field(default_factory=dict)
    """Profiles of the contributors as they were at submission time."""

    state: str = PENDING
    moderator: Optional[Moderator] = None
    reason: Optional[str] = None
    submitted_by: Optional[str] = None
    submitted_at: datetime = field(default_factory=get_tzaware_utc_now)
    tags: List[str] = field(default_factory=list)
    decided_at: Optional[datetime] = None
    updated: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Check nested types."""
        if isinstance(self.moderator, dict):
            self.moderator = Moderator(**self.moderator)
        self.validated_users = dict_coerce(ValidatedUser,
                                           self.validated_users)
        self.submitted_at = coerce_datetime(self.submitted_at)
        self.decided_at = coerce_datetime(self.decided_at)
        self.updated = coerce_datetime(self.updated)

    @property
    def is_pending(self) -> bool:
        """Indicate whether the submission still awaits a decision."""
        return self.state == self.PENDING

    @property
    def is_approved(self) -> bool:
        return self.state == self.APPROVED

    @property
    def is_rejected(self) -> bool:
        return self.state == self.REJECTED

    @property
    def is_publishable(self) -> bool:
        """An approved submission may be promoted to the public listing."""
        return self.is_approved and self.moderator is not None

    def is_submitter(self, user_id: str) -> bool:
        """Check whether ``user_id`` submitted this theme."""
        return self.submitted_by is not None and self.submitted_by == user_id
