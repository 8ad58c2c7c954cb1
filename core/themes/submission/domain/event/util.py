"""Dataclass decorator for event classes."""

from typing import Any, Callable, Tuple

import dataclasses


def _identity(event: Any) -> Tuple[Any, ...]:
    creator = getattr(event.creator, 'user_id', None)
    return (event.event_type, event.created, creator, event.submission_id)


def _hash(self: Any) -> int:
    return hash(_identity(self))


def _eq(self: Any, other: Any) -> bool:
    if not hasattr(other, 'event_type'):
        return NotImplemented
    return bool(_identity(self) == _identity(other))


def event_dataclass(**kwargs: Any) -> Callable[[type], type]:
    """
    Make an event class a dataclass.

    Two events are the same event if they are of the same type, were applied
    at the same moment by the same user, to the same submission. Their
    payloads are not compared.
    """
    def inner(cls: type) -> type:
        new_cls = dataclasses.dataclass(**kwargs)(cls)
        setattr(new_cls, '__hash__', _hash)
        setattr(new_cls, '__eq__', _eq)
        return new_cls
    return inner
