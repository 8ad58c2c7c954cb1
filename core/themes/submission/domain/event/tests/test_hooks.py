"""Test callback hook functionality on :class:`Event`."""

from unittest import TestCase, mock
from datetime import datetime

from pytz import UTC

from ...submission import Submission
from ...user import User
from ...outbox import Notify
from ..base import Event
from ..util import event_dataclass


def build():
    @event_dataclass()
    class ParentEvent(Event):
        def validate(self, submission):
            pass

        def project(self, submission):
            return submission or Submission(submission_id=1)

    @event_dataclass()
    class ChildEvent(ParentEvent):
        pass

    @event_dataclass()
    class OtherEvent(ParentEvent):
        pass

    return ParentEvent, ChildEvent, OtherEvent


class TestConsequences(TestCase):
    """Tests for :func:`Event.bind` and :meth:`Event.consequences`."""

    def setUp(self):
        """Set up a creator."""
        self.user = User('100000000000000001', admin=True)

    def test_callback_is_bound_to_class(self):
        """A callback runs only for events of the class it is bound to."""
        _, ChildEvent, OtherEvent = build()
        intent = Notify(user_id='1', message='hi')
        callback = mock.MagicMock(return_value=[intent], __name__='test')
        ChildEvent.bind()(callback)

        event = ChildEvent(creator=self.user)
        event.apply(None)
        self.assertEqual(event.consequences(), [intent])

        other = OtherEvent(creator=self.user)
        other.apply(None)
        self.assertEqual(other.consequences(), [])
        self.assertEqual(callback.call_count, 1)

    def test_callback_inheritance(self):
        """Callbacks bound to a parent class apply to child classes."""
        ParentEvent, ChildEvent, _ = build()
        callback = mock.MagicMock(return_value=[], __name__='test')
        ParentEvent.bind()(callback)

        event = ChildEvent(creator=self.user)
        event.apply(None)
        event.consequences()
        self.assertEqual(callback.call_count, 1)

    def test_condition(self):
        """A callback is not called if its condition is not met."""
        _, ChildEvent, _ = build()
        callback = mock.MagicMock(return_value=[], __name__='test')
        ChildEvent.bind(lambda *a: False)(callback)

        event = ChildEvent(creator=self.user)
        event.apply(None)
        self.assertEqual(event.consequences(), [])
        callback.assert_not_called()

    @mock.patch.dict('os.environ', {'ENABLE_CALLBACKS': '0'})
    def test_callbacks_disabled(self):
        """No callbacks are called if they are disabled."""
        _, ChildEvent, _ = build()
        callback = mock.MagicMock(return_value=[], __name__='test')
        ChildEvent.bind()(callback)

        event = ChildEvent(creator=self.user)
        event.apply(None)
        self.assertEqual(event.consequences(), [])
        callback.assert_not_called()

    def test_event_identity(self):
        """Events are identified by type, time, creator and submission."""
        _, ChildEvent, OtherEvent = build()
        now = datetime.now(UTC)
        a = ChildEvent(creator=self.user, created=now, submission_id=1)
        b = ChildEvent(creator=self.user, created=now, submission_id=1)
        c = OtherEvent(creator=self.user, created=now, submission_id=1)
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertNotEqual(a, c)
        self.assertEqual(a.event_id, b.event_id)
