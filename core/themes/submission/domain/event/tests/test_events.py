"""Tests for submission commands."""

from unittest import TestCase
from datetime import datetime

from pytz import UTC

from ....exceptions import InvalidEvent, AuthorizationError, ConflictError
from ...submission import Submission
from ...user import User, ValidatedUser
from .. import CreateSubmission, ApproveSubmission, RejectSubmission


def pending_submission(**kwargs) -> Submission:
    data = dict(submission_id=7, title='Midnight Blue',
                description='A dark theme', source_link='https://x.io/a.css',
                content='Ym9keSB7fQ==', preview_image='https://x.io/a.png',
                contributors=['200000000000000002', '300000000000000003'],
                submitted_by='200000000000000002')
    data.update(kwargs)
    return Submission(**data)


class TestCreateSubmission(TestCase):
    """Tests for :class:`.CreateSubmission`."""

    def setUp(self):
        """Set up a submitter."""
        self.user = User('200000000000000002', username='jane',
                         avatar='jane.png')
        self.data = dict(title='Midnight Blue', description='A dark theme',
                         source_link='https://x.io/a.css',
                         content='Ym9keSB7fQ==',
                         preview_image='https://x.io/a.png')

    def test_short_title(self):
        """The title must have at least three characters."""
        self.data['title'] = 'Hi'
        event = CreateSubmission(creator=self.user, **self.data)
        with self.assertRaises(InvalidEvent) as ctx:
            event.apply(None)
        self.assertIn("Title must be longer than 3", str(ctx.exception))

    def test_whitespace_is_collapsed(self):
        """Whitespace does not count toward the title length."""
        self.data['title'] = '  a   b  '
        event = CreateSubmission(creator=self.user, **self.data)
        self.assertEqual(event.title, 'a b')
        event.apply(None)

        self.data['title'] = ' a   '
        event = CreateSubmission(creator=self.user, **self.data)
        with self.assertRaises(InvalidEvent):
            event.apply(None)

    def test_html_title(self):
        """HTML is not allowed in titles."""
        self.data['title'] = '<b>Midnight</b> Blue'
        event = CreateSubmission(creator=self.user, **self.data)
        with self.assertRaises(InvalidEvent):
            event.apply(None)

    def test_missing_fields(self):
        """Description, source link, content and preview are required."""
        for key in ('description', 'source_link', 'content',
                    'preview_image'):
            data = dict(self.data, **{key: '   '})
            event = CreateSubmission(creator=self.user, **data)
            with self.assertRaises(InvalidEvent, msg=f'{key} is required'):
                event.apply(None)

    def test_banned_creator(self):
        """A banned user cannot submit."""
        self.user.banned_from_submissions = True
        event = CreateSubmission(creator=self.user, **self.data)
        with self.assertRaises(AuthorizationError):
            event.apply(None)

    def test_submitter_is_first_contributor(self):
        """The submitter is always credited, first, and only once."""
        other = ValidatedUser('300000000000000003', 'bob', 'bob.png')
        event = CreateSubmission(
            creator=self.user,
            contributors=['300000000000000003', '200000000000000002'],
            validated_users={other.id: other,
                             '200000000000000002': {'id': 'forged'}},
            **self.data
        )
        event.created = datetime.now(UTC)
        after = event.apply(None)
        self.assertEqual(after.contributors,
                         ['200000000000000002', '300000000000000003'])
        self.assertEqual(after.validated_users['200000000000000002'],
                         self.user.snapshot(),
                         "The submitter's profile comes from the session")
        self.assertEqual(after.submitted_by, '200000000000000002')
        self.assertEqual(after.submitted_at, event.created)
        self.assertTrue(after.is_pending)
        self.assertIsNone(after.moderator)
        self.assertEqual(after.tags, [])


class TestApproveSubmission(TestCase):
    """Tests for :class:`.ApproveSubmission`."""

    def setUp(self):
        """Set up an admin and a regular user."""
        self.admin = User('100000000000000001', username='mod', admin=True)
        self.user = User('200000000000000002', username='jane')

    def test_approve(self):
        """An admin approves a pending submission."""
        event = ApproveSubmission(creator=self.admin, tags=['dark', 'theme'])
        event.created = datetime.now(UTC)
        before = pending_submission()
        after = event.apply(before)
        self.assertEqual(after.state, Submission.APPROVED)
        self.assertEqual(after.tags, ['dark', 'theme'])
        self.assertEqual(after.moderator.id, self.admin.user_id)
        self.assertEqual(after.moderator.name, 'mod')
        self.assertTrue(after.is_publishable)
        self.assertTrue(before.is_pending, 'The prior state is not mutated')

    def test_tags_are_normalized(self):
        """Tags are deduplicated and capped at five."""
        tags = ['dark', ' dark ', '', 'a', 'b', 'c', 'd', 'e', 'f']
        event = ApproveSubmission(creator=self.admin, tags=tags)
        self.assertEqual(event.tags, ['dark', 'a', 'b', 'c', 'd'])
        self.assertEqual(len(set(event.tags)), len(event.tags))

    def test_not_admin(self):
        """Only admins may approve."""
        event = ApproveSubmission(creator=self.user, tags=['dark'])
        with self.assertRaises(AuthorizationError):
            event.apply(pending_submission())

    def test_admin_check_comes_first(self):
        """A non-admin is refused even if the submission is not pending."""
        event = ApproveSubmission(creator=self.user)
        with self.assertRaises(AuthorizationError):
            event.apply(pending_submission(state=Submission.APPROVED))

    def test_not_pending(self):
        """Decided submissions cannot be approved."""
        for state in (Submission.APPROVED, Submission.REJECTED):
            event = ApproveSubmission(creator=self.admin)
            with self.assertRaises(ConflictError):
                event.apply(pending_submission(state=state))


class TestRejectSubmission(TestCase):
    """Tests for :class:`.RejectSubmission`."""

    def setUp(self):
        """Set up an admin and a regular user."""
        self.admin = User('100000000000000001', username='mod', admin=True)
        self.user = User('200000000000000002', username='jane')

    def test_reject(self):
        """Rejection records the reason and scrubs the submitter."""
        event = RejectSubmission(creator=self.admin, reason='Broken CSS')
        event.created = datetime.now(UTC)
        after = event.apply(pending_submission())
        self.assertEqual(after.state, Submission.REJECTED)
        self.assertEqual(after.reason, 'Broken CSS')
        self.assertEqual(after.moderator.id, self.admin.user_id)
        self.assertEqual(after.contributors, [])
        self.assertIsNone(after.submitted_by)
        self.assertEqual(event.before.submitted_by, '200000000000000002',
                         'The state before rejection still has the submitter')

    def test_default_reason(self):
        """A blank reason falls back to the default."""
        event = RejectSubmission(creator=self.admin, reason='  ')
        self.assertEqual(event.reason, 'No reason provided')

    def test_not_admin(self):
        """Only admins may reject."""
        event = RejectSubmission(creator=self.user, reason='nope')
        before = pending_submission()
        with self.assertRaises(AuthorizationError):
            event.apply(before)
        self.assertTrue(before.is_pending)

    def test_already_rejected(self):
        """A submission is rejected at most once."""
        event = RejectSubmission(creator=self.admin)
        with self.assertRaises(ConflictError):
            event.apply(pending_submission(state=Submission.REJECTED))
