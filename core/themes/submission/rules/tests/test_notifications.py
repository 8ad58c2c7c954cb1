"""Tests for :mod:`themes.submission.rules.notifications`."""

from datetime import datetime
from unittest import TestCase

from pytz import UTC

from ...domain import User, Submission, Notify, Ban, NotificationType
from ...domain.event import ApproveSubmission, RejectSubmission

ADMIN = User(user_id='100000000000000001', username='mod', admin=True)


def pending(submitted_by='200000000000000002') -> Submission:
    return Submission(submission_id=4, title='Midnight', content='',
                      submitted_by=submitted_by,
                      contributors=[submitted_by] if submitted_by else [])


class TestModerationRules(TestCase):
    """Moderation decisions notify the submitter."""

    def setUp(self):
        self.created = datetime.now(UTC)

    def test_approved(self):
        """Approval yields one notification for the submitter."""
        event = ApproveSubmission(creator=ADMIN, tags=['dark'],
                                  created=self.created)
        event.apply(pending())
        intents = event.consequences()
        self.assertEqual(len(intents), 1)
        self.assertIsInstance(intents[0], Notify)
        self.assertEqual(intents[0].type, NotificationType.THEME_APPROVED)
        self.assertEqual(intents[0].user_id, '200000000000000002')
        self.assertEqual(intents[0].submission_id, 4)

    def test_rejected(self):
        """The submitter is notified although the rejection scrubs them."""
        event = RejectSubmission(creator=ADMIN, reason='Broken',
                                 created=self.created)
        after = event.apply(pending())
        self.assertFalse(after.submitted_by)
        intents = event.consequences()
        self.assertEqual(len(intents), 1)
        self.assertEqual(intents[0].user_id, '200000000000000002')
        self.assertEqual(intents[0].reason, 'Broken')
        self.assertEqual(intents[0].title, 'Midnight')

    def test_rejected_with_ban(self):
        """Asking for a ban adds a ban intent with the moderator."""
        event = RejectSubmission(creator=ADMIN, reason='Spam', ban_user=True,
                                 ban_reason='Spamming', created=self.created)
        event.apply(pending())
        notify, ban = event.consequences()
        self.assertIsInstance(notify, Notify)
        self.assertIsInstance(ban, Ban)
        self.assertEqual(ban.reason, 'Spamming')
        self.assertEqual(ban.moderator.id, ADMIN.user_id)

    def test_no_submitter(self):
        """A submission with no submitter notifies nobody."""
        event = ApproveSubmission(creator=ADMIN, tags=[],
                                  created=self.created)
        event.apply(pending(submitted_by=None))
        self.assertEqual(event.consequences(), [])
