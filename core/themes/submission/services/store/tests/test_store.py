"""Tests for :mod:`.services.store`."""

from unittest import TestCase
from datetime import datetime

from pytz import UTC

from ....domain import User, Submission, Notification, NotificationType, \
    Standing, Moderator, Notify, Ban
from ....exceptions import NoSuchSubmission, NoSuchUser
from ....tests.util import in_memory_db, ADMIN_ID, USER_ID, OTHER_ID
from ... import store
from .. import transaction, ConsistencyError, models


def new_submission(**kwargs) -> Submission:
    data = dict(title='Midnight Blue', description='dark',
                source_link='https://x.io/a.css', content='Ym9keSB7fQ==',
                preview_image='https://x.io/a.png',
                contributors=[USER_ID], submitted_by=USER_ID,
                validated_users={USER_ID: {'id': USER_ID,
                                           'username': 'jane',
                                           'avatar': 'jane.png'}})
    data.update(kwargs)
    return Submission(**data)


class TestSubmissions(TestCase):
    """Storing and transitioning submissions."""

    def test_create_and_get(self):
        """A stored submission gets an id, and can be loaded."""
        with in_memory_db():
            with transaction():
                created = store.create_submission(new_submission())
            self.assertIsNotNone(created.submission_id)

            loaded = store.get_submission(created.submission_id)
            self.assertEqual(loaded.title, 'Midnight Blue')
            self.assertEqual(loaded.state, Submission.PENDING)
            self.assertEqual(loaded.contributors, [USER_ID])
            self.assertEqual(loaded.validated_users[USER_ID].username,
                             'jane')
            self.assertIsNotNone(loaded.submitted_at.tzinfo)

    def test_get_nonexistant(self):
        """Loading a submission that does not exist raises NoSuchSubmission."""
        with in_memory_db():
            with self.assertRaises(NoSuchSubmission):
                store.get_submission(1234)

    def test_transition(self):
        """The transition is applied only from the expected state."""
        with in_memory_db():
            with transaction():
                created = store.create_submission(new_submission())
            sid = created.submission_id

            after = store.get_submission(sid)
            after.state = Submission.APPROVED
            after.tags = ['dark']
            after.moderator = Moderator(ADMIN_ID, 'mod', 'mod.png')
            intent = Notify(user_id=USER_ID,
                            type=NotificationType.THEME_APPROVED,
                            message='ok', submission_id=sid)
            with transaction():
                ids = store.transition_submission(sid, Submission.PENDING,
                                                  after, [intent])
            self.assertEqual(len(ids), 1)
            loaded = store.get_submission(sid)
            self.assertEqual(loaded.state, Submission.APPROVED)
            self.assertEqual(loaded.tags, ['dark'])
            self.assertEqual(loaded.moderator.name, 'mod')

            after.state = Submission.REJECTED
            with self.assertRaises(ConsistencyError):
                with transaction():
                    store.transition_submission(sid, Submission.PENDING,
                                                after, [intent])
            self.assertEqual(store.get_submission(sid).state,
                             Submission.APPROVED,
                             'A stale transition changes nothing')
            with transaction():
                pending = store.get_undispatched()
            self.assertEqual(len(pending), 1,
                             'Intents of a stale transition are not stored')

    def test_list_submissions(self):
        """Submissions can be listed by state and by submitter."""
        with in_memory_db():
            with transaction():
                store.create_submission(new_submission(title='one'))
                store.create_submission(new_submission(
                    title='two', submitted_by=OTHER_ID,
                    submitted_at=datetime(2030, 1, 1, tzinfo=UTC)
                ))
            self.assertEqual(len(store.list_submissions()), 2)
            self.assertEqual(store.list_submissions()[0].title, 'two',
                             'Newest first')
            mine = store.list_submissions(submitted_by=USER_ID)
            self.assertEqual([s.title for s in mine], ['one'])
            self.assertEqual(
                len(store.list_submissions(state=Submission.APPROVED)), 0
            )


class TestUsers(TestCase):
    """Storing users and their standing."""

    def test_ban_and_unban(self):
        """Ban fields are all set when banned, and all unset when not."""
        with in_memory_db():
            with transaction():
                store.store_user(User(USER_ID, username='jane'))
            with transaction():
                store.update_user_ban_status(USER_ID, Standing(
                    banned=True, reason='spam',
                    banned_at=datetime.now(UTC),
                    banned_by=Moderator(ADMIN_ID, 'mod')
                ))
            user = store.get_user(USER_ID)
            self.assertTrue(user.banned_from_submissions)
            self.assertEqual(user.ban_reason, 'spam')
            self.assertEqual(user.banned_by.id, ADMIN_ID)

            with transaction():
                store.update_user_ban_status(USER_ID, Standing(banned=False))
            user = store.get_user(USER_ID)
            self.assertFalse(user.banned_from_submissions)
            self.assertIsNone(user.ban_reason)
            self.assertIsNone(user.banned_at)
            self.assertIsNone(user.banned_by)

    def test_unknown_user(self):
        """Unknown users raise NoSuchUser."""
        with in_memory_db():
            with self.assertRaises(NoSuchUser):
                store.get_user(USER_ID)
            with self.assertRaises(NoSuchUser):
                with transaction():
                    store.update_user_ban_status(USER_ID, Standing())

    def test_list_all_user_ids(self):
        """All user ids are listed."""
        with in_memory_db():
            with transaction():
                store.store_user(User(USER_ID))
                store.store_user(User(ADMIN_ID, admin=True))
            self.assertEqual(store.list_all_user_ids(), [ADMIN_ID, USER_ID])


class TestNotifications(TestCase):
    """Appending, listing and reading notifications."""

    def test_mark_all_read(self):
        """Only unread notifications of the user are marked read."""
        with in_memory_db():
            with transaction():
                for i in range(3):
                    store.append_notification(Notification(
                        USER_ID, NotificationType.ANNOUNCEMENT, f'hi {i}'
                    ))
                store.append_notification(Notification(
                    OTHER_ID, NotificationType.ANNOUNCEMENT, 'hi'
                ))
            with transaction():
                self.assertEqual(store.mark_all_read(USER_ID), 3)
            with transaction():
                self.assertEqual(store.mark_all_read(USER_ID), 0)
            self.assertTrue(all(n.read for n in
                                store.list_notifications(USER_ID)))
            self.assertFalse(store.list_notifications(OTHER_ID)[0].read)

    def test_list_notifications(self):
        """Notifications are listed newest first, up to the limit."""
        with in_memory_db():
            with transaction():
                for i in range(5):
                    store.append_notification(Notification(
                        USER_ID, NotificationType.ANNOUNCEMENT, f'hi {i}',
                        created=datetime(2030, 1, i + 1, tzinfo=UTC)
                    ))
            notifications = store.list_notifications(USER_ID, limit=2)
            self.assertEqual([n.message for n in notifications],
                             ['hi 4', 'hi 3'])
            self.assertEqual(notifications[0].type,
                             NotificationType.ANNOUNCEMENT)


class TestOutbox(TestCase):
    """Writing, claiming and failing intents."""

    def test_claim_once(self):
        """An intent can be claimed only once."""
        with in_memory_db():
            ban = Ban(user_id=USER_ID, reason='spam',
                      moderator=Moderator(ADMIN_ID, 'mod'))
            with transaction():
                intent_id, = store.enqueue([ban])
            with transaction():
                (found_id, found), = store.get_undispatched([intent_id])
            self.assertEqual(found_id, intent_id)
            self.assertEqual(found, ban)

            with transaction():
                self.assertTrue(store.claim_intent(intent_id))
            with transaction():
                self.assertFalse(store.claim_intent(intent_id))
                self.assertEqual(store.get_undispatched(), [])

    def test_record_failure(self):
        """Failed intents are retried until the maximum number of attempts."""
        with in_memory_db() as session:
            with transaction():
                intent_id, = store.enqueue([Notify(user_id=USER_ID)])
            for _ in range(2):
                with transaction():
                    store.record_failure(intent_id, 'boom')
            row = session.get(models.OutboxIntent, intent_id)
            self.assertEqual(row.attempts, 2)
            self.assertEqual(row.last_error, 'boom')
            with transaction():
                self.assertEqual(len(store.get_undispatched(max_attempts=3)),
                                 1)
                self.assertEqual(store.get_undispatched(max_attempts=2), [])
