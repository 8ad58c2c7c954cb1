"""SQLAlchemy ORM classes for the submission store."""

from typing import Optional, Dict, Any
from datetime import datetime
from pytz import UTC
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

from ... import domain
from .util import FriendlyJSON

Base = declarative_base()


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops timezones; everything we store is in UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _snapshot(value: Any) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    return {'id': value.id, 'name': value.name, 'avatar': value.avatar}


class Submission(Base):    # type: ignore
    """Persisted state of a theme submission."""

    __tablename__ = 'submissions'

    submission_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    source_link = Column(Text)
    content = Column(Text)
    preview_image = Column(Text)
    contributors = Column(FriendlyJSON)
    validated_users = Column(FriendlyJSON)
    state = Column(String(16), nullable=False, index=True,
                   default=domain.Submission.PENDING)
    moderator = Column(FriendlyJSON)
    reason = Column(Text)
    submitted_by = Column(String(32), index=True)
    submitted_at = Column(DateTime, nullable=False)
    tags = Column(FriendlyJSON)
    decided_at = Column(DateTime)
    updated = Column(DateTime)

    @classmethod
    def from_domain(cls, submission: domain.Submission) -> 'Submission':
        """Generate a new row from a :class:`.domain.Submission`."""
        row = cls()
        row.submitted_at = submission.submitted_at
        row.update_from(submission)
        return row

    def update_from(self, submission: domain.Submission) -> None:
        """Copy the mutable state of a :class:`.domain.Submission`."""
        for key, value in self.values_for(submission).items():
            setattr(self, key, value)

    @staticmethod
    def values_for(submission: domain.Submission) -> Dict[str, Any]:
        """Column values for the (mutable) state of a submission."""
        return {
            'title': submission.title,
            'description': submission.description,
            'source_link': submission.source_link,
            'content': submission.content,
            'preview_image': submission.preview_image,
            'contributors': list(submission.contributors),
            'validated_users': {
                uid: {'id': user.id, 'username': user.username,
                      'avatar': user.avatar}
                for uid, user in submission.validated_users.items()
            },
            'state': submission.state,
            'moderator': _snapshot(submission.moderator),
            'reason': submission.reason,
            'submitted_by': submission.submitted_by,
            'tags': list(submission.tags),
            'decided_at': submission.decided_at,
            'updated': submission.updated,
        }

    def to_domain(self) -> domain.Submission:
        """Generate a :class:`.domain.Submission` from this row."""
        return domain.Submission(
            submission_id=self.submission_id,
            title=self.title,
            description=self.description or '',
            source_link=self.source_link or '',
            content=self.content or '',
            preview_image=self.preview_image or '',
            contributors=list(self.contributors or []),
            validated_users=dict(self.validated_users or {}),
            state=self.state,
            moderator=self.moderator,
            reason=self.reason,
            submitted_by=self.submitted_by,
            submitted_at=_utc(self.submitted_at),
            tags=list(self.tags or []),
            decided_at=_utc(self.decided_at),
            updated=_utc(self.updated)
        )


class User(Base):    # type: ignore
    """A user known to the portal, and their submission standing."""

    __tablename__ = 'users'

    user_id = Column(String(32), primary_key=True)
    username = Column(String(255), default='')
    avatar = Column(Text, default='')
    admin = Column(Boolean, nullable=False, default=False)
    banned_from_submissions = Column(Boolean, nullable=False, default=False)
    ban_reason = Column(Text)
    banned_at = Column(DateTime)
    banned_by = Column(FriendlyJSON)

    def to_domain(self) -> domain.User:
        """Generate a :class:`.domain.User` from this row."""
        return domain.User(
            user_id=self.user_id,
            username=self.username or '',
            avatar=self.avatar or '',
            admin=bool(self.admin),
            banned_from_submissions=bool(self.banned_from_submissions),
            ban_reason=self.ban_reason,
            banned_at=_utc(self.banned_at),
            banned_by=self.banned_by
        )

    def set_standing(self, standing: domain.Standing) -> None:
        """Overwrite the ban fields; an unbanned user has none of them set."""
        self.banned_from_submissions = standing.banned
        if standing.banned:
            self.ban_reason = standing.reason
            self.banned_at = standing.banned_at
            self.banned_by = _snapshot(standing.banned_by)
        else:
            self.ban_reason = None
            self.banned_at = None
            self.banned_by = None


class Notification(Base):    # type: ignore
    """A message to a user."""

    __tablename__ = 'notifications'

    notification_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    message = Column(Text, nullable=False)
    reason = Column(Text)
    submission_id = Column(Integer)
    title = Column(String(255))
    created = Column(DateTime, nullable=False)
    read = Column(Boolean, nullable=False, default=False)

    def to_domain(self) -> domain.Notification:
        """Generate a :class:`.domain.Notification` from this row."""
        return domain.Notification(
            notification_id=self.notification_id,
            user_id=self.user_id,
            type=self.type,
            message=self.message,
            reason=self.reason,
            submission_id=self.submission_id,
            title=self.title,
            created=_utc(self.created),
            read=bool(self.read)
        )


class OutboxIntent(Base):    # type: ignore
    """A side effect waiting to be carried out."""

    __tablename__ = 'outbox'

    intent_id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(16), nullable=False)
    payload = Column(FriendlyJSON, nullable=False)
    submission_id = Column(Integer)
    created = Column(DateTime, nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text)
    dispatched = Column(DateTime, index=True)

    def to_domain(self) -> domain.Intent:
        """Generate a :class:`.domain.Intent` from this row."""
        return domain.intent_factory(self.kind, **self.payload)
