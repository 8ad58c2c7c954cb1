"""
Side-effect intents.

An intent describes a side effect of a moderation decision. Intents are
written to the outbox in the same transaction as the decision itself, and are
carried out afterwards by :mod:`.dispatch`.
"""

from typing import Optional, Dict, Any, Type, ClassVar

from dataclasses import dataclass, field, asdict

from .notification import NotificationType
from .user import Moderator


@dataclass
class Intent:
    """Base class for outbox intents."""

    KIND: ClassVar[str] = 'intent'

    user_id: str

    def to_payload(self) -> Dict[str, Any]:
        """Generate the stored representation of the intent."""
        return asdict(self)


@dataclass
class Notify(Intent):
    """Append a notification for :attr:`.user_id`."""

    KIND: ClassVar[str] = 'notify'

    type: NotificationType = NotificationType.ANNOUNCEMENT
    message: str = field(default_factory=str)
    reason: Optional[str] = None
    submission_id: Optional[int] = None
    title: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, NotificationType):
            self.type = NotificationType(self.type)

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload['type'] = self.type.value
        return payload


@dataclass
class Ban(Intent):
    """Ban :attr:`.user_id` from making submissions."""

    KIND: ClassVar[str] = 'ban'

    reason: Optional[str] = None
    moderator: Optional[Moderator] = None

    def __post_init__(self) -> None:
        if isinstance(self.moderator, dict):
            self.moderator = Moderator(**self.moderator)


_intent_types: Dict[str, Type[Intent]] = {
    Notify.KIND: Notify,
    Ban.KIND: Ban,
}


def intent_factory(kind: str, **data: Any) -> Intent:
    """Instantiate an :class:`.Intent` from its stored representation."""
    if kind not in _intent_types:
        raise ValueError(f'No such intent kind: {kind}')
    return _intent_types[kind](**data)
