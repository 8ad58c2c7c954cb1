"""
Authentication and authorization for submission and moderation actions.

Bearer tokens are JWTs signed with ``JWT_SECRET`` that identify a user by the
``user_id`` claim. :func:`resolve_user` turns a token into the *current* user
record, so that admin and ban flags are always read from the store rather
than from the token.
"""

import logging
from datetime import timedelta
from typing import Optional

import jwt

from .domain import User
from .domain.util import get_tzaware_utc_now
from .exceptions import Unauthenticated, AuthorizationError, NoSuchUser
from .services import store
from .util import get_application_config

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'


def _secret() -> str:
    return str(get_application_config().get('JWT_SECRET', 'foosecret'))


def encode_token(user_id: str, expires_in: Optional[int] = None) -> str:
    """Issue a bearer token for a user."""
    if expires_in is None:
        expires_in = int(get_application_config().get('JWT_EXPIRES', 604800))
    now = get_tzaware_utc_now()
    claims = {'user_id': str(user_id), 'iat': now,
              'exp': now + timedelta(seconds=expires_in)}
    return jwt.encode(claims, _secret(), algorithm=ALGORITHM)


def get_bearer(header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization`` header."""
    if not header:
        return None
    token = header.replace('Bearer ', '', 1).strip()
    return token or None


def resolve_user(token: Optional[str]) -> User:
    """
    Get the user identified by a bearer token.

    Raises
    ------
    :class:`.Unauthenticated`
        Raised if the token is missing, invalid, expired, or refers to a
        user that does not exist.

    """
    if not token:
        raise Unauthenticated('Cannot check authorization without token')
    try:
        claims = jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except jwt.exceptions.InvalidTokenError as e:
        logger.debug('Rejected token: %s', e)
        raise Unauthenticated('Given token is not authorized') from e
    user_id = claims.get('user_id')
    if not user_id:
        raise Unauthenticated('Given token is not authorized')
    try:
        return store.get_user(user_id)
    except NoSuchUser as e:
        raise Unauthenticated('Given token is not authorized') from e


def require_admin(user: User) -> User:
    """Raise :class:`.AuthorizationError` unless ``user`` is an admin."""
    if not user.admin:
        raise AuthorizationError('Unauthorized - Admin access required')
    return user


def require_not_banned(user: User) -> User:
    """Raise :class:`.AuthorizationError` if ``user`` may not submit."""
    if user.banned_from_submissions:
        raise AuthorizationError('You are banned from submitting themes')
    return user
