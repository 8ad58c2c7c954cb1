"""Exceptions raised during submission handling and moderation."""

from typing import TypeVar, Optional

EventType = TypeVar('EventType')


class Unauthenticated(Exception):
    """Missing or invalid bearer credential; re-authenticate and retry."""


class AuthorizationError(Exception):
    """The authenticated user may not perform the requested action."""


class ValidationError(ValueError):
    """Malformed input; the caller must correct it and resubmit."""


class InvalidEvent(ValidationError):
    """Raised when an invalid event is encountered."""

    def __init__(self, event: EventType, message: str = '') -> None:
        """Use the :class:`.Event` to build an error message."""
        self.event = event
        self.message = message
        r = f"Invalid {event.event_type}: {message}"  # type: ignore
        super(InvalidEvent, self).__init__(r)


class ConflictError(RuntimeError):
    """The submission is not in the state the operation expects."""

    def __init__(self, message: str = '',
                 event: Optional[EventType] = None) -> None:
        self.event = event
        self.message = message
        super(ConflictError, self).__init__(message)


class NotFound(LookupError):
    """Base for lookups of records that do not exist."""


class NoSuchSubmission(NotFound):
    """An operation was performed on/for a submission that does not exist."""


class NoSuchUser(NotFound):
    """An operation was performed on/for a user that does not exist."""


class SaveError(RuntimeError):
    """Failed to persist submission state."""


class NothingToDo(RuntimeError):
    """There is nothing to do."""
