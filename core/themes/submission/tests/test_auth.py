"""Tests for :mod:`themes.submission.auth`."""

from unittest import TestCase

import jwt

from ..exceptions import Unauthenticated, AuthorizationError
from ..auth import resolve_user, encode_token, get_bearer, require_admin, \
    require_not_banned
from .util import in_memory_db, add_user, USER_ID, UNKNOWN_ID


class TestResolveUser(TestCase):
    """Tests for :func:`.resolve_user`."""

    def test_resolve(self):
        """A valid token resolves to the stored user."""
        with in_memory_db():
            add_user(USER_ID, 'jane', banned=True)
            user = resolve_user(encode_token(USER_ID))
            self.assertEqual(user.user_id, USER_ID)
            self.assertTrue(user.banned_from_submissions,
                            'Standing comes from the store, not the token')

    def test_invalid(self):
        """Missing, malformed, expired and forged tokens are refused."""
        with in_memory_db():
            add_user(USER_ID, 'jane')
            forged = jwt.encode({'user_id': USER_ID}, 'not the secret',
                                algorithm='HS256')
            for token in (None, '', 'foo.bar.baz', forged,
                          encode_token(USER_ID, expires_in=-10)):
                with self.assertRaises(Unauthenticated):
                    resolve_user(token)

    def test_unknown_user(self):
        """A token for a user that does not exist is refused."""
        with in_memory_db():
            with self.assertRaises(Unauthenticated):
                resolve_user(encode_token(UNKNOWN_ID))

    def test_bearer(self):
        """The token is taken from the Authorization header."""
        self.assertEqual(get_bearer('Bearer abc'), 'abc')
        self.assertEqual(get_bearer('abc'), 'abc')
        self.assertIsNone(get_bearer(None))
        self.assertIsNone(get_bearer('Bearer '))


class TestRequirements(TestCase):
    """Tests for the authorization checks."""

    def test_checks(self):
        """Admin and ban checks raise AuthorizationError."""
        with in_memory_db():
            user = add_user(USER_ID, 'jane', banned=True)
            with self.assertRaises(AuthorizationError):
                require_admin(user)
            with self.assertRaises(AuthorizationError):
                require_not_banned(user)
            admin = add_user(UNKNOWN_ID, 'mod', admin=True)
            self.assertIs(require_admin(admin), admin)
            self.assertIs(require_not_banned(admin), admin)
