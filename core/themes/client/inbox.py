"""
Notification inbox for the current user.

Notifications are fetched through the :class:`.PortalClient` and kept for a
while in a :class:`NotificationCache`. What the user sees is the committed
state (as last confirmed by the server) with any pending change laid over
it; a pending change is only committed when the server confirms it, and is
dropped if the server refuses or cannot be reached.
"""

import time
import logging
from typing import Any, Callable, List, Optional

from themes.submission.exceptions import Unauthenticated

from .api import PortalClient, RequestFailed

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

MARK_ALL_READ = 'mark_all_read'


class NotificationCache(object):
    """Holds the last fetched notifications for ``ttl`` seconds."""

    def __init__(self, ttl: float = 60, clock: Clock = time.monotonic) -> None:
        self.ttl = ttl
        self.clock = clock
        self._value: Optional[List[dict]] = None
        self._stored_at: Optional[float] = None

    def get(self) -> Optional[List[dict]]:
        """Get the cached notifications, or ``None`` if stale or empty."""
        if self._stored_at is None:
            return None
        if self.clock() - self._stored_at >= self.ttl:
            self.invalidate()
            return None
        return self._value

    def put(self, value: List[dict]) -> None:
        self._value = value
        self._stored_at = self.clock()

    def invalidate(self) -> None:
        self._value = None
        self._stored_at = None


def reduce(notifications: List[dict], action: str) -> List[dict]:
    """Get the notifications as they are after ``action``."""
    if action == MARK_ALL_READ:
        return [dict(n, read=True) for n in notifications]
    raise ValueError(f'Unknown action: {action}')


class NotificationInbox(object):
    """The notifications of the user that ``client`` is authenticated as."""

    def __init__(self, client: PortalClient,
                 cache: Optional[NotificationCache] = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else NotificationCache()
        self._committed: List[dict] = []
        self._pending: Optional[str] = None

    @property
    def notifications(self) -> List[dict]:
        """Notifications as the user should see them, newest first."""
        if self._pending is not None:
            return reduce(self._committed, self._pending)
        return list(self._committed)

    @property
    def unread_count(self) -> int:
        return len([n for n in self.notifications if not n['read']])

    def refresh(self, force: bool = False) -> List[dict]:
        """
        Load notifications, from the cache if it is fresh.

        Raises
        ------
        :class:`.RequestFailed`
            Raised if the notifications cannot be fetched; the inbox keeps
            what it had.

        """
        cached = None if force else self.cache.get()
        if cached is None:
            cached = self.client.notifications()['notifications']
            self.cache.put(cached)
        self._committed = list(cached)
        return self.notifications

    def mark_all_read(self) -> bool:
        """
        Mark every notification as read.

        The change shows right away, and is kept only if the server confirms
        it.

        Returns
        -------
        bool
            Whether the server confirmed the change.

        """
        if self._pending is not None:
            return False
        self._pending = MARK_ALL_READ
        try:
            response: Any = self.client.mark_all_read()
        except (RequestFailed, Unauthenticated) as e:
            logger.error('Could not mark notifications as read: %s', e)
            self._pending = None
            return False
        if not response.get('success'):
            self._pending = None
            return False
        self._committed = reduce(self._committed, MARK_ALL_READ)
        self._pending = None
        self.cache.put(self._committed)
        return True
