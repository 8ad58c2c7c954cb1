"""
Persistence of submissions, users, notifications, and the outbox.

Functions in this module that write data do **not** commit; the caller is
expected to use the :func:`.util.transaction` context manager so that related
writes (e.g. a submission transition and its side-effect intents) are
committed or rolled back together.

The moderation state machine relies on :func:`transition_submission`, which
changes a submission with a single conditional ``UPDATE`` keyed on the
submission id *and* its expected current state. Of several concurrent
transitions of the same submission only the first one matches; the others
raise :class:`.ConsistencyError`.
"""

import logging
from typing import List, Optional, Iterable, Tuple, Callable, Any
from functools import wraps
from datetime import datetime

from retry import retry
from flask import Flask
from sqlalchemy.exc import OperationalError

from ...domain import Submission, User, Notification, Standing, Intent
from ...domain.util import get_tzaware_utc_now
from ...exceptions import NoSuchSubmission, NoSuchUser
from .models import Base
from .exceptions import StoreException, TransactionFailed, Unavailable, \
    ConsistencyError
from .util import transaction, current_session, current_engine, db
from . import models

logger = logging.getLogger(__name__)


def handle_operational_errors(func: Callable) -> Callable:
    """Catch SQLAlchemy OperationalErrors and raise :class:`.Unavailable`."""
    @wraps(func)
    def inner(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except OperationalError as e:
            raise Unavailable('Submission database unavailable') from e
    return inner


# Submissions.

@handle_operational_errors
def create_submission(submission: Submission) -> Submission:
    """
    Store a new submission.

    Returns
    -------
    :class:`.domain.Submission`
        The submission, with its newly assigned :attr:`.submission_id`.

    """
    session = current_session()
    row = models.Submission.from_domain(submission)
    session.add(row)
    session.flush()     # Get the ID.
    submission.submission_id = row.submission_id
    return submission


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_submission(submission_id: int) -> Submission:
    """
    Get the current state of a submission.

    Raises
    ------
    :class:`.NoSuchSubmission`
        Raised when there is no submission with ``submission_id``.

    """
    row = current_session().get(models.Submission, submission_id)
    if row is None:
        raise NoSuchSubmission(f'Submission {submission_id} not found')
    return row.to_domain()


@handle_operational_errors
def transition_submission(submission_id: int, expected_state: str,
                          after: Submission,
                          intents: Iterable[Intent] = ()) -> List[int]:
    """
    Change a submission, if and only if it is still in ``expected_state``.

    The new state and the side-effect ``intents`` are written in the current
    transaction.

    Returns
    -------
    list
        Identifiers of the outbox intents that were written.

    Raises
    ------
    :class:`.ConsistencyError`
        Raised if the submission is no longer in ``expected_state``; nothing
        is written.

    """
    session = current_session()
    n = session.query(models.Submission) \
        .filter(models.Submission.submission_id == submission_id) \
        .filter(models.Submission.state == expected_state) \
        .update(models.Submission.values_for(after),
                synchronize_session=False)
    if n != 1:
        raise ConsistencyError(f'Submission {submission_id} is not'
                               f' {expected_state}')
    return enqueue(intents, submission_id=submission_id)


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def list_submissions(state: Optional[str] = None,
                     submitted_by: Optional[str] = None) -> List[Submission]:
    """Get submissions, newest first, optionally by state and/or submitter."""
    query = current_session().query(models.Submission)
    if state is not None:
        query = query.filter(models.Submission.state == state)
    if submitted_by is not None:
        query = query.filter(models.Submission.submitted_by == submitted_by)
    query = query.order_by(models.Submission.submitted_at.desc())
    return [row.to_domain() for row in query]


# Users.

@handle_operational_errors
def store_user(user: User) -> User:
    """Create or update a user record (e.g. from the identity provider)."""
    session = current_session()
    row = session.get(models.User, user.user_id)
    if row is None:
        row = models.User(user_id=user.user_id)
        session.add(row)
    row.username = user.username
    row.avatar = user.avatar
    row.admin = user.admin
    row.set_standing(user.standing)
    session.flush()
    return row.to_domain()


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_user(user_id: str) -> User:
    """
    Get a user record.

    Raises
    ------
    :class:`.NoSuchUser`
        Raised when there is no user with ``user_id``.

    """
    row = current_session().get(models.User, str(user_id))
    if row is None:
        raise NoSuchUser(f'User {user_id} not found')
    return row.to_domain()


@handle_operational_errors
def update_user_ban_status(user_id: str, standing: Standing) -> User:
    """
    Overwrite the ban status of a user.

    Raises
    ------
    :class:`.NoSuchUser`
        Raised when there is no user with ``user_id``.

    """
    session = current_session()
    row = session.get(models.User, str(user_id))
    if row is None:
        raise NoSuchUser(f'User {user_id} not found')
    row.set_standing(standing)
    session.flush()
    return row.to_domain()


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def list_all_user_ids() -> List[str]:
    """Get the identifiers of all known users."""
    query = current_session().query(models.User.user_id) \
        .order_by(models.User.user_id)
    return [user_id for user_id, in query]


# Notifications.

@handle_operational_errors
def append_notification(notification: Notification) -> Notification:
    """Add a notification for a user."""
    session = current_session()
    row = models.Notification(
        user_id=notification.user_id,
        type=notification.type.value,
        message=notification.message,
        reason=notification.reason,
        submission_id=notification.submission_id,
        title=notification.title,
        created=notification.created,
        read=False
    )
    session.add(row)
    session.flush()
    notification.notification_id = row.notification_id
    return notification


@handle_operational_errors
def mark_all_read(user_id: str) -> int:
    """Mark every unread notification of a user as read; count the changes."""
    n = current_session().query(models.Notification) \
        .filter(models.Notification.user_id == str(user_id)) \
        .filter(models.Notification.read.is_(False)) \
        .update({'read': True}, synchronize_session=False)
    return int(n)


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def list_notifications(user_id: str, limit: int = 50) -> List[Notification]:
    """Get the most recent notifications of a user, newest first."""
    query = current_session().query(models.Notification) \
        .filter(models.Notification.user_id == str(user_id)) \
        .order_by(models.Notification.created.desc(),
                  models.Notification.notification_id.desc()) \
        .limit(limit)
    return [row.to_domain() for row in query]


# Outbox.

@handle_operational_errors
def enqueue(intents: Iterable[Intent],
            submission_id: Optional[int] = None) -> List[int]:
    """Write side-effect intents to the outbox."""
    session = current_session()
    rows = [models.OutboxIntent(kind=intent.KIND,
                                payload=intent.to_payload(),
                                submission_id=submission_id,
                                created=get_tzaware_utc_now(),
                                attempts=0)
            for intent in intents]
    session.add_all(rows)
    session.flush()
    return [row.intent_id for row in rows]


@handle_operational_errors
def get_undispatched(intent_ids: Optional[Iterable[int]] = None,
                     limit: int = 100,
                     max_attempts: Optional[int] = None) \
        -> List[Tuple[int, Intent]]:
    """Get intents that have not been carried out yet, oldest first."""
    query = current_session().query(models.OutboxIntent) \
        .filter(models.OutboxIntent.dispatched.is_(None))
    if intent_ids is not None:
        query = query.filter(
            models.OutboxIntent.intent_id.in_(list(intent_ids))
        )
    if max_attempts is not None:
        query = query.filter(models.OutboxIntent.attempts < max_attempts)
    query = query.order_by(models.OutboxIntent.intent_id).limit(limit)
    return [(row.intent_id, row.to_domain()) for row in query]


@handle_operational_errors
def claim_intent(intent_id: int) -> bool:
    """
    Mark an intent as dispatched, unless someone else already has.

    The caller must carry out the intent in the same transaction.
    """
    n = current_session().query(models.OutboxIntent) \
        .filter(models.OutboxIntent.intent_id == intent_id) \
        .filter(models.OutboxIntent.dispatched.is_(None)) \
        .update({'dispatched': get_tzaware_utc_now()},
                synchronize_session=False)
    return n == 1


@handle_operational_errors
def record_failure(intent_id: int, error: str) -> None:
    """Count a failed attempt to carry out an intent."""
    row = current_session().get(models.OutboxIntent, intent_id)
    if row is None:
        return
    row.attempts = (row.attempts or 0) + 1
    row.last_error = error


def init_app(app: Flask) -> None:
    """Register the SQLAlchemy extension to an application."""
    db.init_app(app)

    @app.teardown_request
    def teardown_request(exception: Optional[BaseException]) -> None:
        if exception:
            db.session.rollback()
        db.session.remove()


def create_all() -> None:
    """Create all tables in the database."""
    Base.metadata.create_all(current_engine())


def drop_all() -> None:
    """Drop all tables in the database."""
    Base.metadata.drop_all(current_engine())
