"""Provides :class:`.Event`, the base class for submission commands."""

import copy
import hashlib
import logging
from datetime import datetime
from typing import Optional, Callable, Iterable, List, ClassVar, \
    NamedTuple, Any

from dataclasses import field

from ...util import config_flag
from ..user import User
from ..submission import Submission
from ..outbox import Intent
from .util import event_dataclass

logger = logging.getLogger(__name__)

Condition = Callable[[Any, Optional[Submission], Submission], bool]
Callback = Callable[[Any, Optional[Submission], Submission], Iterable[Intent]]


class Rule(NamedTuple):
    """A callback, and the condition under which it produces intents."""

    name: str
    condition: Condition
    callback: Callback


def always(event: Any, before: Optional[Submission],
           after: Submission) -> bool:
    return True


class EventType(type):
    """Metaclass for :class:`.Event`; gives each event class its own rules."""

    def __init__(cls, name: str, bases: tuple, attrs: dict) -> None:
        super(EventType, cls).__init__(name, bases, attrs)
        cls._rules: List[Rule] = []


@event_dataclass()
class Event(metaclass=EventType):
    """
    A command that changes a :class:`.domain.submission.Submission`.

    Subclasses add the data they need, and implement:

    - ``validate(submission)``, raising :class:`.InvalidEvent`,
      :class:`.AuthorizationError` or :class:`.ConflictError` if the event
      cannot be applied to ``submission``;
    - ``project(submission)``, changing ``submission`` and returning it.

    Side effects are not performed by events. Instead, rules bound with
    :meth:`bind` describe them as intents (see :class:`.Intent`), which
    :meth:`consequences` collects once the event has been applied.
    """

    NAME = 'base event'
    NAMED = 'base event'

    _rules: ClassVar[List[Rule]]

    creator: User
    """The user who issued the command."""

    created: Optional[datetime] = field(default=None)
    """When the command was applied."""

    submission_id: Optional[int] = field(default=None)
    """The target submission; not known before a submission is created."""

    committed: bool = field(default=False)
    """Set once the outcome of the command has been stored."""

    before: Optional[Submission] = None
    after: Optional[Submission] = None

    event_type: str = field(default_factory=str)

    def __post_init__(self) -> None:
        self.event_type = type(self).__name__
        if isinstance(self.creator, dict):
            self.creator = User(**self.creator)

    @property
    def event_id(self) -> str:
        """Digest of the event type, creator and time of application."""
        if self.created is None:
            raise RuntimeError('Event not yet applied')
        key = ':'.join([self.created.isoformat(), self.event_type,
                        str(self.creator.user_id)])
        return hashlib.sha1(key.encode('utf-8')).hexdigest()

    def apply(self, submission: Optional[Submission] = None) -> Submission:
        """
        Validate the event, and project the new state of the submission.

        ``submission`` itself is left untouched; :attr:`before` and
        :attr:`after` are copies.
        """
        self.before = copy.deepcopy(submission)
        self.validate(submission)    # type: ignore
        self.after = self.project(copy.deepcopy(submission))  # type: ignore
        self.after.updated = self.created
        if self.submission_id is None:
            self.submission_id = self.after.submission_id
        elif self.after.submission_id is None:
            self.after.submission_id = self.submission_id
        return self.after

    def validate(self, submission: Submission) -> None:
        raise NotImplementedError('Must be implemented by subclass')

    def project(self, submission: Submission) -> Submission:
        raise NotImplementedError('Must be implemented by subclass')

    @classmethod
    def bind(cls, condition: Optional[Condition] = None) \
            -> Callable[[Callback], Callback]:
        """
        Bind a rule to this event class (and its subclasses).

        .. code-block:: python

           @ApproveSubmission.bind(condition=has_submitter)
           def notify_approved(event, before, after):
               yield Notify(...)

        The rule gets the event and the submission before and after the event
        was applied, and returns (or yields) :class:`.Intent` objects.
        ``condition`` has the same signature, and returns whether the rule
        applies.
        """
        def decorator(func: Callback) -> Callback:
            name = f'{func.__module__}.{func.__name__}'
            cls._rules.append(Rule(name, condition or always, func))
            return func
        return decorator

    def rules(self) -> Iterable[Rule]:
        """Rules that apply to this event, most general first."""
        for klass in reversed(type(self).__mro__):
            yield from getattr(klass, '_rules', [])

    def consequences(self) -> List[Intent]:
        """
        Collect the side-effect intents of this (applied) event.

        Rules see the submission as it was *before* the event, so data that
        the projection removes (e.g. the submitter, on rejection) is still
        available to them. No intents are collected if ``ENABLE_CALLBACKS``
        is off.
        """
        assert self.after is not None, 'Event must be applied first'
        if not config_flag('ENABLE_CALLBACKS', True):
            return []
        intents: List[Intent] = []
        for rule in self.rules():
            if not rule.condition(self, self.before, self.after):
                continue
            logger.debug('Rule %s applies to %s', rule.name, self.event_type)
            intents.extend(rule.callback(self, self.before, self.after))
        return intents
