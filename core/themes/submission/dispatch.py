"""
Carries out the side effects of moderation decisions.

Side effects are notifications and changes to the submission standing of a
user. Those that follow from a submission transition are written to the
outbox as intents (:class:`.Intent`) in the same transaction as the
transition (see :func:`.core.save`), and are carried out afterwards by
:func:`drain_outbox`.
An intent is claimed in the same transaction in which its effect is written,
so a claimed intent has always been carried out exactly once; an intent whose
effect failed stays in the outbox and is picked up by the next drain.

The success of a moderation decision never depends on its side effects:
failures here are logged and recorded on the intent, not raised.

Standalone actions (:func:`ban`, :func:`unban`, :func:`announce`) are
requested directly by an admin.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Type

from flask import Flask

from .auth import require_admin
from .domain import User, Moderator, Standing, Notification, \
    NotificationType, Intent, Notify, Ban
from .domain.util import get_tzaware_utc_now
from .exceptions import NoSuchUser
from .services import store
from .services.store import StoreException, transaction
from .util import get_application_config, config_flag

logger = logging.getLogger(__name__)

BANNED_MESSAGE = 'You have been banned from submitting themes.'
UNBANNED_MESSAGE = 'Your ban from submitting themes has been lifted.'


def notify(user_id: str, type: NotificationType, message: str,
           reason: Optional[str] = None, submission_id: Optional[int] = None,
           title: Optional[str] = None) -> Notification:
    """Append one unread notification for a user."""
    with transaction():
        return store.append_notification(
            Notification(user_id=user_id, type=type, message=message,
                         reason=reason, submission_id=submission_id,
                         title=title)
        )


def ban(user_id: str, reason: Optional[str], moderator: User) -> User:
    """
    Ban a user from making submissions.

    Banning a user who is already banned overwrites the ban reason, time and
    moderator. Either way, the user gets exactly one ``user_banned``
    notification.

    Parameters
    ----------
    user_id : str
    reason : str
        Falls back to ``DEFAULT_BAN_REASON`` if blank.
    moderator : :class:`.User`
        The acting user; must be an admin.

    Returns
    -------
    :class:`.User`
        The updated user record.

    Raises
    ------
    :class:`.AuthorizationError`
        Raised if ``moderator`` is not an admin.
    :class:`.NoSuchUser`
        Raised if there is no such user; nothing is written.

    """
    require_admin(moderator)
    reason = (reason or '').strip() or str(get_application_config().get(
        'DEFAULT_BAN_REASON', 'Banned by moderator'
    ))
    with transaction():
        user = _set_standing(user_id, reason, moderator.as_moderator())
        intent_ids = store.enqueue([
            Notify(user_id=user.user_id, type=NotificationType.USER_BANNED,
                   message=BANNED_MESSAGE, reason=reason)
        ])
    logger.info('User %s banned by %s', user_id, moderator.user_id)
    dispatch(intent_ids)
    return user


def unban(user_id: str, moderator: User) -> User:
    """
    Lift the submission ban of a user.

    Unbanning a user who is not banned succeeds; the user still gets exactly
    one ``user_unbanned`` notification.

    Raises
    ------
    :class:`.AuthorizationError`
        Raised if ``moderator`` is not an admin.
    :class:`.NoSuchUser`
        Raised if there is no such user; nothing is written.

    """
    require_admin(moderator)
    with transaction():
        user = store.update_user_ban_status(user_id, Standing(banned=False))
        intent_ids = store.enqueue([
            Notify(user_id=user.user_id, type=NotificationType.USER_UNBANNED,
                   message=UNBANNED_MESSAGE)
        ])
    logger.info('User %s unbanned by %s', user_id, moderator.user_id)
    dispatch(intent_ids)
    return user


def announce(title: str, message: str) -> int:
    """
    Send an announcement to every known user.

    Each notification is written on its own. If some of them cannot be
    written, the others are still delivered; the failures are logged and not
    retried. Running the same announcement again notifies everyone again.

    Returns
    -------
    int
        The number of users who were notified.

    """
    user_ids = store.list_all_user_ids()
    delivered = 0
    for user_id in user_ids:
        try:
            notify(user_id, NotificationType.ANNOUNCEMENT, title,
                   reason=message)
        except StoreException as e:
            logger.error('Could not deliver announcement to %s: %s',
                         user_id, e)
            continue
        delivered += 1
    logger.info('Announcement "%s" delivered to %i of %i users', title,
                delivered, len(user_ids))
    return delivered


def mark_all_read(user_id: str) -> int:
    """Mark every notification of a user as read."""
    with transaction():
        return store.mark_all_read(user_id)


def list_notifications(user_id: str,
                       limit: Optional[int] = None) -> List[Notification]:
    """Get the most recent notifications of a user, newest first."""
    if limit is None:
        limit = int(get_application_config().get('NOTIFICATION_LIMIT', 50))
    return store.list_notifications(user_id, limit=limit)


# Outbox.

def dispatch(intent_ids: Iterable[int]) -> None:
    """
    Carry out freshly written intents.

    If ``ENABLE_ASYNC`` is set, the intents are handed to the worker;
    otherwise they are drained right away, in this thread.
    """
    intent_ids = list(intent_ids)
    if not intent_ids:
        return
    if config_flag('ENABLE_ASYNC'):
        from .tasks import send_drain
        send_drain(intent_ids)
        return
    drain_outbox(intent_ids)


def drain_outbox(intent_ids: Optional[Iterable[int]] = None,
                 limit: Optional[int] = None) -> int:
    """
    Carry out intents that have not been carried out yet.

    Parameters
    ----------
    intent_ids : iterable
        If given, only these intents are considered.
    limit : int
        Maximum number of intents to handle. Defaults to
        ``OUTBOX_BATCH_SIZE``.

    Returns
    -------
    int
        The number of intents that were carried out by this call.

    """
    config = get_application_config()
    if limit is None:
        limit = int(config.get('OUTBOX_BATCH_SIZE', 100))
    max_attempts = int(config.get('OUTBOX_MAX_ATTEMPTS', 10))
    with transaction():
        pending = store.get_undispatched(intent_ids, limit=limit,
                                         max_attempts=max_attempts)
    done = 0
    for intent_id, intent in pending:
        try:
            with transaction():
                if not store.claim_intent(intent_id):
                    logger.debug('Intent %s already dispatched', intent_id)
                    continue
                execute(intent)
        except Exception as e:
            logger.exception('Failed to carry out intent %s (%s)',
                             intent_id, intent.KIND)
            _record_failure(intent_id, e)
            continue
        logger.debug('Dispatched intent %s: %s', intent_id, intent)
        done += 1
    return done


def execute(intent: Intent) -> None:
    """Write the effect of an intent, in the current transaction."""
    try:
        executor = _executors[type(intent)]
    except KeyError as e:
        raise ValueError(f'No executor for {type(intent).__name__}') from e
    executor(intent)


def _record_failure(intent_id: int, error: Exception) -> None:
    try:
        with transaction():
            store.record_failure(intent_id, f'{type(error).__name__}: {error}')
    except StoreException as e:
        logger.error('Could not record failure of intent %s: %s',
                     intent_id, e)


def _set_standing(user_id: str, reason: str,
                  moderator: Optional[Moderator]) -> User:
    standing = Standing(banned=True, reason=reason,
                        banned_at=get_tzaware_utc_now(), banned_by=moderator)
    return store.update_user_ban_status(user_id, standing)


def _execute_notify(intent: Notify) -> None:
    store.append_notification(
        Notification(user_id=intent.user_id, type=intent.type,
                     message=intent.message, reason=intent.reason,
                     submission_id=intent.submission_id, title=intent.title)
    )


def _execute_ban(intent: Ban) -> None:
    try:
        _set_standing(intent.user_id, intent.reason or '', intent.moderator)
    except NoSuchUser:
        logger.warning('Cannot ban user %s: no such user', intent.user_id)
        return
    store.append_notification(
        Notification(user_id=intent.user_id,
                     type=NotificationType.USER_BANNED,
                     message=BANNED_MESSAGE, reason=intent.reason)
    )


_executors: Dict[Type[Intent], Callable] = {
    Notify: _execute_notify,
    Ban: _execute_ban,
}


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('ENABLE_ASYNC', 0)
    app.config.setdefault('OUTBOX_BATCH_SIZE', 100)
    app.config.setdefault('OUTBOX_MAX_ATTEMPTS', 10)
    app.config.setdefault('NOTIFICATION_LIMIT', 50)
