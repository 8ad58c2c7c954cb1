"""
Request payloads for submission and moderation actions.

Each action has its own request type. A request is validated as a whole,
against a JSON Schema, before anything is done with it; a payload that fails
validation raises :class:`.ValidationError` and has no effect.
"""

import re
from typing import Any, Dict, List, Optional, Type, TypeVar

from dataclasses import dataclass, field
import jsonschema

from ..exceptions import ValidationError

USER_ID = r'^[0-9]{17,20}$'
"""Pattern for user identifiers (snowflakes)."""

_user_id = {'type': 'string', 'pattern': USER_ID}

R = TypeVar('R', bound='Request')


def is_user_id(value: Any) -> bool:
    """Check whether ``value`` looks like a user identifier."""
    return isinstance(value, str) and re.match(USER_ID, value) is not None


class Request:
    """Base for request payloads."""

    SCHEMA: Dict[str, Any] = {'type': 'object'}

    @classmethod
    def validate(cls, data: Any) -> None:
        """
        Validate raw request data against :attr:`SCHEMA`.

        Raises
        ------
        :class:`.ValidationError`
            Raised if ``data`` does not conform to the schema.

        """
        try:
            jsonschema.validate(data, cls.SCHEMA)
        except jsonschema.exceptions.ValidationError as e:
            # A summary of the exception is on the first line of the repr.
            msg = str(e).split('\n')[0]
            raise ValidationError(f'Invalid request: {msg}') from e

    @classmethod
    def from_dict(cls: Type[R], data: Any, **extra: Any) -> R:
        """Validate ``data`` and build a request instance from it."""
        cls.validate(data)
        return cls._build(data, **extra)

    @classmethod
    def _build(cls: Type[R], data: dict, **extra: Any) -> R:
        raise NotImplementedError('Must be implemented by subclass')


@dataclass
class SubmissionRequest(Request):
    """A new theme submission, as sent by the submission wizard."""

    SCHEMA = {
        'type': 'object',
        'properties': {
            'title': {'type': 'string', 'minLength': 1},
            'description': {'type': 'string', 'minLength': 1},
            'sourceLink': {'type': 'string', 'minLength': 1},
            'file': {'type': 'string', 'minLength': 1},
            'content': {'type': 'string'},
            'contributors': {'type': 'array', 'items': {'type': 'string'}},
        },
        'required': ['title', 'description', 'sourceLink', 'file']
    }

    title: str
    description: str
    source_link: str
    preview_image: str
    content: Optional[str] = None
    contributors: List[str] = field(default_factory=list)

    @classmethod
    def _build(cls, data: dict, **extra: Any) -> 'SubmissionRequest':
        return cls(title=data['title'],
                   description=data['description'],
                   source_link=data['sourceLink'],
                   preview_image=data['file'],
                   content=data.get('content') or None,
                   contributors=list(data.get('contributors', [])))


@dataclass
class ApproveRequest(Request):
    """An admin approves a submission, with tags."""

    SCHEMA = {
        'type': 'object',
        'properties': {
            'tags': {'type': 'array', 'items': {'type': 'string'}},
        },
        'required': ['tags']
    }

    submission_id: int
    tags: List[str] = field(default_factory=list)

    @classmethod
    def _build(cls, data: dict, **extra: Any) -> 'ApproveRequest':
        return cls(submission_id=extra['submission_id'], tags=data['tags'])


@dataclass
class RejectRequest(Request):
    """An admin rejects a submission, optionally banning the submitter."""

    SCHEMA = {
        'type': 'object',
        'properties': {
            'reason': {'type': 'string'},
            'banUser': {'type': 'boolean'},
            'banReason': {'type': 'string'},
        }
    }

    submission_id: int
    reason: str = field(default_factory=str)
    ban_user: bool = False
    ban_reason: str = field(default_factory=str)

    @classmethod
    def _build(cls, data: dict, **extra: Any) -> 'RejectRequest':
        return cls(submission_id=extra['submission_id'],
                   reason=data.get('reason', ''),
                   ban_user=data.get('banUser', False),
                   ban_reason=data.get('banReason', ''))


@dataclass
class BanRequest(Request):
    """An admin bans a user from making submissions."""

    SCHEMA = {
        'type': 'object',
        'properties': {
            'userId': _user_id,
            'action': {'const': 'ban'},
            'reason': {'type': 'string'},
        },
        'required': ['userId', 'action']
    }

    user_id: str
    reason: str = field(default_factory=str)

    @classmethod
    def _build(cls, data: dict, **extra: Any) -> 'BanRequest':
        return cls(user_id=data['userId'], reason=data.get('reason', ''))


@dataclass
class UnbanRequest(Request):
    """An admin lifts a submission ban."""

    SCHEMA = {
        'type': 'object',
        'properties': {
            'userId': _user_id,
            'action': {'const': 'unban'},
        },
        'required': ['userId', 'action']
    }

    user_id: str

    @classmethod
    def _build(cls, data: dict, **extra: Any) -> 'UnbanRequest':
        return cls(user_id=data['userId'])


@dataclass
class AnnouncementRequest(Request):
    """An admin sends an announcement to every user."""

    SCHEMA = {
        'type': 'object',
        'properties': {
            'title': {'type': 'string', 'minLength': 1},
            'message': {'type': 'string', 'minLength': 1},
        },
        'required': ['title', 'message']
    }

    title: str
    message: str

    @classmethod
    def _build(cls, data: dict, **extra: Any) -> 'AnnouncementRequest':
        return cls(title=data['title'], message=data['message'])


@dataclass
class ValidateUsersRequest(Request):
    """A submitter asks which of a list of user ids are known users."""

    SCHEMA = {
        'type': 'object',
        'properties': {
            'users': {'type': 'array', 'items': {'type': 'string'}},
        },
        'required': ['users']
    }

    users: List[str] = field(default_factory=list)

    @classmethod
    def _build(cls, data: dict, **extra: Any) -> 'ValidateUsersRequest':
        return cls(users=list(data['users']))


_standing_requests: Dict[str, Type[Request]] = {
    'ban': BanRequest,
    'unban': UnbanRequest,
}


def standing_request(data: Any) -> Request:
    """
    Build a :class:`.BanRequest` or :class:`.UnbanRequest` from its action.

    Raises
    ------
    :class:`.ValidationError`
        Raised if the action is missing or unknown, or the payload is invalid.

    """
    action = data.get('action') if isinstance(data, dict) else None
    if action not in _standing_requests:
        raise ValidationError("Invalid action. Must be 'ban' or 'unban'")
    return _standing_requests[action].from_dict(data)
