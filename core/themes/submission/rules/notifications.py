"""Rules that notify (and possibly ban) submitters of moderation decisions."""

import logging
from typing import Iterable

from ..domain.event import ApproveSubmission, RejectSubmission
from ..domain.notification import NotificationType
from ..domain.outbox import Intent, Notify, Ban
from ..domain.submission import Submission
from ..util import get_application_config

logger = logging.getLogger(__name__)


def has_submitter(event: object, before: Submission,
                  after: Submission) -> bool:
    """Only submissions that still know their submitter can notify anyone."""
    if before is None or not before.submitted_by:
        logger.warning('Submission %s has no submitter; nobody to notify',
                       getattr(after, 'submission_id', None))
        return False
    return True


@ApproveSubmission.bind(condition=has_submitter)
def notify_approved(event: ApproveSubmission, before: Submission,
                    after: Submission) -> Iterable[Intent]:
    """Tell the submitter that their theme was approved."""
    yield Notify(user_id=before.submitted_by,
                 type=NotificationType.THEME_APPROVED,
                 message=f'Your theme "{after.title}" has been approved.',
                 submission_id=after.submission_id,
                 title=after.title)


@RejectSubmission.bind(condition=has_submitter)
def notify_rejected(event: RejectSubmission, before: Submission,
                    after: Submission) -> Iterable[Intent]:
    """
    Tell the submitter that their theme was rejected, and why.

    The submitter is taken from the state *before* rejection, since the
    rejected submission no longer records it. If the moderator asked for the
    submitter to be banned, the ban is an intent of the same decision.
    """
    yield Notify(user_id=before.submitted_by,
                 type=NotificationType.THEME_REJECTED,
                 message=f'Your theme "{before.title}" has been rejected.',
                 reason=after.reason,
                 submission_id=after.submission_id,
                 title=before.title)
    if event.ban_user:
        reason = event.ban_reason or str(get_application_config().get(
            'DEFAULT_REJECTION_BAN_REASON', 'Rejected multiple times'
        ))
        yield Ban(user_id=before.submitted_by, reason=reason,
                  moderator=event.creator.as_moderator())
