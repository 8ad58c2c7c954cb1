"""
Resolution of contributor ids entered by a submitter.

Submitters credit other users by typing or pasting their ids. Each unique id
is looked up in the user directory; the ones that resolve are credited (with
a snapshot of their profile as it is now), and the ones that don't are
reported back one by one. One bad id never fails the whole batch.

The submitter is always credited, first, from the authenticated session. An
id typed by the submitter is never taken as proof of who the submitter is.
"""

import re
import logging
from typing import Callable, Dict, Iterable, List, Optional

from dataclasses import dataclass, field

from .domain.request import is_user_id
from .domain.user import User, ValidatedUser
from .exceptions import NotFound
from .services import store

logger = logging.getLogger(__name__)

Lookup = Callable[[str], User]

MALFORMED = 'malformed'
UNKNOWN = 'unknown'


@dataclass
class Failure:
    """An id that could not be credited."""

    user_id: str
    reason: str
    """Either ``malformed`` or ``unknown``."""


@dataclass
class ContributorBatch:
    """The outcome of resolving a batch of contributor ids."""

    contributors: List[str] = field(default_factory=list)
    validated_users: Dict[str, ValidatedUser] = field(default_factory=dict)
    failures: List[Failure] = field(default_factory=list)

    @property
    def failed_ids(self) -> List[str]:
        return [failure.user_id for failure in self.failures]


def parse_bulk(text: str) -> List[str]:
    """Split pasted input into raw ids, on commas and whitespace."""
    return [part for part in re.split(r'[\s,]+', text or '') if part]


def validate_contributors(raw_ids: Iterable[str],
                          submitter: Optional[User] = None,
                          lookup: Optional[Lookup] = None) -> ContributorBatch:
    """
    Resolve contributor ids against the user directory.

    Parameters
    ----------
    raw_ids : iterable
        Ids as entered; may contain blanks, duplicates and malformed ids.
    submitter : :class:`.User`
        The authenticated user. If given, they are the first contributor,
        and their own id in ``raw_ids`` is ignored.
    lookup : callable
        Resolves an id to a :class:`.User`, raising :class:`.NotFound` if
        there is no such user. Defaults to :func:`.store.get_user`.

    Returns
    -------
    :class:`.ContributorBatch`

    """
    if lookup is None:
        lookup = store.get_user
    batch = ContributorBatch()
    if submitter is not None:
        batch.contributors.append(submitter.user_id)
        batch.validated_users[submitter.user_id] = submitter.snapshot()

    seen = set(batch.contributors)
    for raw in raw_ids:
        user_id = (raw or '').strip()
        if not user_id or user_id in seen:
            continue
        seen.add(user_id)
        if not is_user_id(user_id):
            batch.failures.append(Failure(user_id, MALFORMED))
            continue
        try:
            user = lookup(user_id)
        except NotFound:
            batch.failures.append(Failure(user_id, UNKNOWN))
            continue
        batch.contributors.append(user.user_id)
        batch.validated_users[user.user_id] = user.snapshot()

    if batch.failures:
        logger.debug('Could not credit %i of the given ids: %s',
                     len(batch.failures), batch.failed_ids)
    return batch
