"""Tests for :mod:`themes.submission.dispatch`."""

from unittest import TestCase, mock

from flask import current_app

from ..domain import NotificationType, Notification
from ..exceptions import NoSuchUser, AuthorizationError
from ..services import store
from ..services.store import TransactionFailed
from .. import dispatch
from .util import in_memory_db, add_user, ADMIN_ID, USER_ID, OTHER_ID, \
    UNKNOWN_ID


class TestBan(TestCase):
    """Tests for :func:`.dispatch.ban` and :func:`.dispatch.unban`."""

    def test_ban_is_idempotent(self):
        """Banning twice overwrites the standing; one notification each."""
        with in_memory_db():
            admin = add_user(ADMIN_ID, 'mod', admin=True)
            add_user(USER_ID, 'jane')

            dispatch.ban(USER_ID, '', admin)
            user = store.get_user(USER_ID)
            self.assertTrue(user.banned_from_submissions)
            self.assertEqual(user.ban_reason, 'Banned by moderator')

            dispatch.ban(USER_ID, 'spam', admin)
            user = store.get_user(USER_ID)
            self.assertTrue(user.banned_from_submissions)
            self.assertEqual(user.ban_reason, 'spam')

            notifications = dispatch.list_notifications(USER_ID)
            self.assertEqual(len(notifications), 2)
            self.assertTrue(all(n.type is NotificationType.USER_BANNED
                                for n in notifications))

    def test_unban(self):
        """Unbanning clears every ban field, even if not banned."""
        with in_memory_db():
            admin = add_user(ADMIN_ID, 'mod', admin=True)
            add_user(USER_ID, 'jane')
            dispatch.unban(USER_ID, admin)
            dispatch.ban(USER_ID, 'spam', admin)
            dispatch.unban(USER_ID, admin)

            user = store.get_user(USER_ID)
            self.assertFalse(user.banned_from_submissions)
            self.assertIsNone(user.ban_reason)
            self.assertIsNone(user.banned_by)
            types = [n.type for n in dispatch.list_notifications(USER_ID)]
            self.assertEqual(types.count(NotificationType.USER_UNBANNED), 2)
            self.assertEqual(types.count(NotificationType.USER_BANNED), 1)

    def test_unknown_user(self):
        """Banning a user that does not exist writes nothing."""
        with in_memory_db():
            admin = add_user(ADMIN_ID, 'mod', admin=True)
            with self.assertRaises(NoSuchUser):
                dispatch.ban(UNKNOWN_ID, 'spam', admin)
            with self.assertRaises(NoSuchUser):
                dispatch.unban(UNKNOWN_ID, admin)
            self.assertEqual(dispatch.list_notifications(UNKNOWN_ID), [])

    def test_not_admin(self):
        """Only admins may ban."""
        with in_memory_db():
            user = add_user(USER_ID, 'jane')
            add_user(OTHER_ID, 'bob')
            with self.assertRaises(AuthorizationError):
                dispatch.ban(OTHER_ID, 'spam', user)
            self.assertFalse(store.get_user(OTHER_ID).banned_from_submissions)


class TestAnnounce(TestCase):
    """Tests for :func:`.dispatch.announce`."""

    def test_announce(self):
        """One announcement per known user."""
        with in_memory_db():
            for user_id in (ADMIN_ID, USER_ID, OTHER_ID):
                add_user(user_id)
            delivered = dispatch.announce('Maintenance', 'Downtime at 2am')
            self.assertEqual(delivered, 3)
            for user_id in (ADMIN_ID, USER_ID, OTHER_ID):
                notification, = dispatch.list_notifications(user_id)
                self.assertEqual(notification.type,
                                 NotificationType.ANNOUNCEMENT)
                self.assertEqual(notification.message, 'Maintenance')
                self.assertEqual(notification.reason, 'Downtime at 2am')

    def test_announce_again(self):
        """Announcing again notifies everyone again."""
        with in_memory_db():
            add_user(USER_ID)
            dispatch.announce('Maintenance', 'Downtime at 2am')
            dispatch.announce('Maintenance', 'Downtime at 2am')
            self.assertEqual(len(dispatch.list_notifications(USER_ID)), 2)

    def test_partial_delivery(self):
        """A failure for one user does not stop the others."""
        with in_memory_db():
            for user_id in (ADMIN_ID, USER_ID, OTHER_ID):
                add_user(user_id)
            append = store.append_notification

            def flaky(notification: Notification) -> Notification:
                if notification.user_id == USER_ID:
                    raise TransactionFailed('nope')
                return append(notification)

            with mock.patch.object(store, 'append_notification', flaky):
                delivered = dispatch.announce('Maintenance', 'Soon')
            self.assertEqual(delivered, 2)
            self.assertEqual(dispatch.list_notifications(USER_ID), [])
            self.assertEqual(len(dispatch.list_notifications(OTHER_ID)), 1)


class TestReading(TestCase):
    """Listing and reading notifications."""

    def test_mark_all_read(self):
        """Marking read is reported, and does not happen twice."""
        with in_memory_db():
            dispatch.notify(USER_ID, NotificationType.ANNOUNCEMENT, 'a')
            dispatch.notify(USER_ID, NotificationType.ANNOUNCEMENT, 'b')
            self.assertEqual(dispatch.mark_all_read(USER_ID), 2)
            self.assertEqual(dispatch.mark_all_read(USER_ID), 0)
            self.assertTrue(all(n.read for n in
                                dispatch.list_notifications(USER_ID)))

    def test_limit(self):
        """The number of listed notifications is limited by configuration."""
        with in_memory_db():
            current_app.config['NOTIFICATION_LIMIT'] = 3
            for i in range(5):
                dispatch.notify(USER_ID, NotificationType.ANNOUNCEMENT,
                                str(i))
            self.assertEqual(len(dispatch.list_notifications(USER_ID)), 3)
