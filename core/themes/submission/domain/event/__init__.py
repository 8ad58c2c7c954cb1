"""
Commands/events that change submissions.

- Events provide methods to update a submission based on the event data.
- Events provide validation methods for event data.
- Events collect the side effects of a change via bound callbacks.

Writing new events/commands
===========================

Events/commands are implemented as classes that inherit from :class:`.Event`.
It should:

- Be a dataclass (i.e. be decorated with :func:`.util.event_dataclass`).
- Define (using :func:`dataclasses.field`) associated data.
- Implement a validation method with the signature
  ``validate(self, submission: Submission) -> None``.
- Implement a projection method with the signature
  ``project(self, submission: Submission) -> Submission:`` that mutates
  the passed :class:`.domain.submission.Submission` instance.
  The projection *must not* generate side-effects. If you need to generate a
  side-effect, bind a callback that yields :class:`.Intent` objects (see
  :mod:`..rules`).

Moderation lifecycle
====================

A submission is created ``pending`` by :class:`.CreateSubmission`. It then
receives exactly one of :class:`.ApproveSubmission` or
:class:`.RejectSubmission`. Both check that the creator is an admin first,
and that the submission is still pending second; there is no transition out
of ``approved`` or ``rejected``.
"""

import re
import logging
from typing import Optional, List, Dict

from dataclasses import field
import bleach

from ...exceptions import InvalidEvent
from ...util import get_application_config
from ..user import ValidatedUser
from ..submission import Submission
from ..util import dict_coerce, normalize_tags
from .base import Event, EventType
from .util import event_dataclass
from . import validators

logger = logging.getLogger(__name__)


@event_dataclass()
class CreateSubmission(Event):
    """
    Creation of a new :class:`.domain.submission.Submission`.

    The submission is attributed to :attr:`.creator`, who is always the first
    contributor regardless of what :attr:`.contributors` contains.
    """

    NAME = "create submission"
    NAMED = "submission created"

    title: str = field(default='')
    description: str = field(default='')
    source_link: str = field(default='')
    content: str = field(default='')
    preview_image: str = field(default='')
    contributors: List[str] = field(default_factory=list)
    validated_users: Dict[str, ValidatedUser] = field(default_factory=dict)

    MIN_TITLE_LENGTH = 3
    MAX_TITLE_LENGTH = 100

    def __post_init__(self) -> None:
        """Perform some light cleanup on the provided values."""
        super(CreateSubmission, self).__post_init__()
        self.title = re.sub(r"\s+", " ", self.title or '').strip()
        self.description = (self.description or '').strip()
        self.source_link = (self.source_link or '').strip()
        self.validated_users = dict_coerce(ValidatedUser,
                                           self.validated_users)

    def validate(self, submission: Optional[Submission] = None) -> None:
        """Validate creation of a submission."""
        validators.creator_is_not_banned(self, submission)
        self._acceptable_title()
        validators.not_blank(self, "Description", self.description)
        validators.not_blank(self, "Preview image", self.preview_image)
        validators.not_blank(self, "Source link", self.source_link)
        validators.not_blank(self, "Content", self.content)

    def project(self, submission: None = None) -> Submission:
        """Create a new :class:`.domain.submission.Submission`."""
        submitter = self.creator.user_id
        contributors = [submitter] + [uid for uid in self.contributors
                                      if uid != submitter]
        validated = {uid: user for uid, user in self.validated_users.items()
                     if uid in contributors}
        validated[submitter] = self.creator.snapshot()
        return Submission(
            title=self.title,
            description=self.description,
            source_link=self.source_link,
            content=self.content,
            preview_image=self.preview_image,
            contributors=list(dict.fromkeys(contributors)),
            validated_users=validated,
            state=Submission.PENDING,
            submitted_by=submitter,
            submitted_at=self.created
        )

    def _acceptable_title(self) -> None:
        N = len(self.title)
        if N < self.MIN_TITLE_LENGTH:
            raise InvalidEvent(self, "Title must be longer than"
                                     f" {self.MIN_TITLE_LENGTH} characters")
        if N > self.MAX_TITLE_LENGTH:
            raise InvalidEvent(self, "Title must not be longer than"
                                     f" {self.MAX_TITLE_LENGTH} characters")
        if len(bleach.clean(self.title, tags=set(), strip=True)) < N:
            raise InvalidEvent(self, "Title may not contain HTML")


@event_dataclass()
class ApproveSubmission(Event):
    """
    An admin approves a pending submission.

    The approved submission carries the tags confirmed by the moderator, and
    may be published to the public theme listing.
    """

    NAME = "approve submission"
    NAMED = "submission approved"

    tags: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Deduplicate and cap the tags."""
        super(ApproveSubmission, self).__post_init__()
        limit = int(get_application_config().get('MAX_TAGS', 5))
        self.tags = normalize_tags(self.tags, limit)

    def validate(self, submission: Submission) -> None:
        """Only admins may approve, and only pending submissions."""
        validators.creator_is_admin(self, submission)
        validators.submission_is_pending(self, submission)

    def project(self, submission: Submission) -> Submission:
        """Set the state, tags, and moderator."""
        submission.state = Submission.APPROVED
        submission.tags = list(self.tags)
        submission.moderator = self.creator.as_moderator()
        submission.decided_at = self.created
        return submission


@event_dataclass()
class RejectSubmission(Event):
    """
    An admin rejects a pending submission.

    The contributors and submitter are removed from the rejected submission.
    Callbacks see the submission as it was before rejection, so the submitter
    can still be notified (and banned, if :attr:`.ban_user` is set).
    """

    NAME = "reject submission"
    NAMED = "submission rejected"

    reason: str = field(default='')
    ban_user: bool = False
    ban_reason: str = field(default='')

    def __post_init__(self) -> None:
        """Fall back to the default reason."""
        super(RejectSubmission, self).__post_init__()
        self.reason = (self.reason or '').strip()
        self.ban_reason = (self.ban_reason or '').strip()
        if not self.reason:
            self.reason = str(get_application_config().get(
                'DEFAULT_REJECTION_REASON', "No reason provided"
            ))

    def validate(self, submission: Submission) -> None:
        """Only admins may reject, and only pending submissions."""
        validators.creator_is_admin(self, submission)
        validators.submission_is_pending(self, submission)

    def project(self, submission: Submission) -> Submission:
        """Set the state, reason, moderator, and scrub the submitter."""
        submission.state = Submission.REJECTED
        submission.reason = self.reason
        submission.moderator = self.creator.as_moderator()
        submission.decided_at = self.created
        submission.contributors = []
        submission.submitted_by = None
        return submission


__all__ = ('Event', 'EventType', 'CreateSubmission', 'ApproveSubmission',
           'RejectSubmission')
