"""Core persistence methods for submissions and moderation decisions."""

import logging
from typing import List, Optional, Iterable

from flask import Flask

from .domain.submission import Submission
from .domain.user import User
from .domain.event import Event, CreateSubmission, ApproveSubmission, \
    RejectSubmission
from .domain.util import get_tzaware_utc_now
from .auth import require_admin
from .services import store
from .services.store import transaction, ConsistencyError, TransactionFailed
from .exceptions import ConflictError, SaveError, NothingToDo
from . import dispatch

logger = logging.getLogger(__name__)


def load(submission_id: int) -> Submission:
    """
    Load the current state of a submission.

    Parameters
    ----------
    submission_id : int
        Submission identifier.

    Returns
    -------
    :class:`.domain.submission.Submission`

    Raises
    ------
    :class:`.NoSuchSubmission`
        Raised when a submission with the passed ID cannot be found.

    """
    return store.get_submission(submission_id)


def load_submissions(state: Optional[str] = None,
                     submitted_by: Optional[str] = None) -> List[Submission]:
    """Load submissions, newest first, by state and/or submitter."""
    return store.list_submissions(state=state, submitted_by=submitted_by)


def create(event: CreateSubmission) -> Submission:
    """
    Create a new submission from a :class:`.CreateSubmission`.

    Raises
    ------
    :class:`.InvalidEvent`
        Raised if the event data are invalid; nothing is stored.
    :class:`.AuthorizationError`
        Raised if the creator is banned from making submissions.
    :class:`.SaveError`
        There was a problem persisting the submission.

    """
    event.created = get_tzaware_utc_now()
    logger.debug('Apply event %s: %s', event.event_id, event.NAME)
    after = event.apply(None)
    try:
        with transaction():
            after = store.create_submission(after)
    except TransactionFailed as e:
        raise SaveError('Failed to store submission') from e
    event.submission_id = after.submission_id
    event.committed = True
    logger.info('Created submission %s by %s', after.submission_id,
                after.submitted_by)
    return after


def save(event: Event, submission_id: Optional[int] = None) -> Submission:
    """
    Apply a moderation event to a submission, and persist the result.

    The pending-state check and the state change are a single conditional
    update, keyed on the submission and the state in which the event was
    validated. If another decision was stored in the meantime, nothing is
    written and :class:`.ConflictError` is raised. The side-effect intents of
    the event are written in the same transaction, and carried out once it
    is committed.

    Parameters
    ----------
    event : :class:`.Event`
        Event to apply and persist.
    submission_id : int
        The unique ID for the submission. If not provided, the
        :attr:`.Event.submission_id` of the event is used.

    Returns
    -------
    :class:`.domain.submission.Submission`
        The state of the submission after the event was applied.

    Raises
    ------
    :class:`.NoSuchSubmission`
        Raised if there is no such submission.
    :class:`.AuthorizationError`
        Raised if the creator of the event may not perform it.
    :class:`.ConflictError`
        Raised if the submission is not (or no longer) in a state that
        allows the event.
    :class:`.InvalidEvent`
        Raised if the event data are invalid.
    :class:`.SaveError`
        There was a problem persisting the new state.

    """
    if submission_id is None:
        submission_id = event.submission_id
    if submission_id is None:
        raise NothingToDo('Unable to determine submission')
    event.submission_id = submission_id

    before = load(submission_id)
    # The event ID depends on the creation time, so set it before applying.
    event.created = get_tzaware_utc_now()
    logger.debug('Apply event %s: %s', event.event_id, event.NAME)
    after = event.apply(before)     # Raises before anything is written.
    intents = event.consequences()

    try:
        with transaction():
            intent_ids = store.transition_submission(
                submission_id, before.state, after, intents
            )
    except ConsistencyError as e:
        raise ConflictError(f'Submission {submission_id} was moderated'
                            ' concurrently', event) from e
    except TransactionFailed as e:
        raise SaveError(f'Failed to save submission {submission_id}') from e
    event.committed = True
    logger.info('Submission %s is %s (moderator %s)', submission_id,
                after.state, event.creator.user_id)

    dispatch.dispatch(intent_ids)
    return after


def approve(submission_id: int, tags: Iterable[str],
            creator: User) -> Submission:
    """Approve a pending submission with moderator-confirmed tags."""
    require_admin(creator)     # Before the submission is looked up.
    return save(ApproveSubmission(creator=creator, tags=list(tags)),
                submission_id=submission_id)


def reject(submission_id: int, reason: Optional[str], creator: User,
           ban_user: bool = False,
           ban_reason: Optional[str] = None) -> Submission:
    """Reject a pending submission, and optionally ban its submitter."""
    require_admin(creator)
    event = RejectSubmission(creator=creator, reason=reason or '',
                             ban_user=ban_user, ban_reason=ban_reason or '')
    return save(event, submission_id=submission_id)


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    store.init_app(app)
    dispatch.init_app(app)
    app.config.setdefault('ENABLE_CALLBACKS', 1)
    app.config.setdefault('MAX_TAGS', 5)
