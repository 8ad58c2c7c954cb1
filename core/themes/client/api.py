"""
Provides an HTTP client for the theme submission and moderation API.

Error responses are mapped back onto the exceptions of
:mod:`themes.submission.exceptions`, so that callers handle a refused
request the same way whether they talk to the core in-process or over HTTP.
"""

import json
import logging
from http import HTTPStatus as status
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from themes.submission.exceptions import Unauthenticated, \
    AuthorizationError, NotFound, ConflictError, ValidationError

logger = logging.getLogger(__name__)


class RequestFailed(IOError):
    """The API could not be reached, or failed; the request may be retried."""


class PortalClient(object):
    """A session with the API, on behalf of one authenticated user."""

    def __init__(self, endpoint: str, token: str,
                 session: Optional[requests.Session] = None) -> None:
        """Create a new HTTP session, unless one is provided."""
        self.endpoint = endpoint
        self.token = token
        if session is None:
            session = requests.Session()
            retry = Retry(total=3, read=3, connect=3, status=3,
                          backoff_factor=0.5,
                          status_forcelist=[502, 503, 504],
                          allowed_methods=['GET'])
            adapter = HTTPAdapter(max_retries=retry)
            session.mount('http://', adapter)
            session.mount('https://', adapter)
        self._session = session

    @staticmethod
    def _reason(response: requests.Response) -> str:
        try:
            return str(response.json().get('reason', response.reason))
        except (ValueError, AttributeError):
            return str(response.reason)

    @classmethod
    def _handle(cls, response: requests.Response) -> dict:
        logger.debug('Handle response: %i', response.status_code)
        code = response.status_code
        if code == status.UNAUTHORIZED:
            raise Unauthenticated(cls._reason(response))
        if code == status.FORBIDDEN:
            raise AuthorizationError(cls._reason(response))
        if code == status.NOT_FOUND:
            raise NotFound(cls._reason(response))
        if code == status.CONFLICT:
            raise ConflictError(cls._reason(response))
        if code == status.BAD_REQUEST:
            raise ValidationError(cls._reason(response))
        if code >= 400:
            raise RequestFailed(f'Request failed ({code}): '
                                f'{cls._reason(response)}')
        try:
            data: dict = response.json()
        except json.decoder.JSONDecodeError as e:
            raise RequestFailed(f'Failed to parse response: {e}') from e
        return data

    def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        url = urljoin(self.endpoint, path)
        logger.debug('%s %s', method, url)
        headers = {'Authorization': f'Bearer {self.token}'}
        try:
            response = self._session.request(method, url, headers=headers,
                                             **kwargs)
        except requests.RequestException as e:
            raise RequestFailed(f'Could not reach {url}: {e}') from e
        return self._handle(response)

    def _get(self, path: str, **params: Any) -> dict:
        return self._request('GET', path, params=params or None)

    def _post(self, path: str, data: Optional[dict] = None) -> dict:
        return self._request('POST', path, json=data or {})

    # Submissions.

    def submit(self, title: str, description: str, source_link: str,
               preview_image: str, contributors: Iterable[str] = (),
               content: Optional[str] = None) -> dict:
        """Submit a theme; returns ``{id, submission, failed}``."""
        payload: Dict[str, Any] = {
            'title': title,
            'description': description,
            'sourceLink': source_link,
            'file': preview_image,
            'contributors': list(contributors)
        }
        if content is not None:
            payload['content'] = content
        return self._post('submissions', payload)

    def get_submission(self, submission_id: int) -> dict:
        return self._get(f'submissions/{submission_id}')

    def list_submissions(self, state: Optional[str] = None) -> List[dict]:
        params = {'state': state} if state else {}
        return self._get('submissions', **params)['submissions']

    def my_submissions(self) -> List[dict]:
        return self._get('users/@me/submissions')['submissions']

    def suggestions(self, submission_id: int) -> List[str]:
        return self._get(f'submissions/{submission_id}/suggestions')['tags']

    # Moderation.

    def approve(self, submission_id: int, tags: Iterable[str]) -> dict:
        return self._post(f'submissions/{submission_id}/approve',
                          {'tags': list(tags)})

    def reject(self, submission_id: int, reason: str = '',
               ban_user: bool = False, ban_reason: str = '') -> dict:
        return self._post(f'submissions/{submission_id}/reject',
                          {'reason': reason, 'banUser': ban_user,
                           'banReason': ban_reason})

    def ban(self, user_id: str, reason: str = '') -> dict:
        return self._post('users/ban', {'userId': user_id, 'action': 'ban',
                                        'reason': reason})

    def unban(self, user_id: str) -> dict:
        return self._post('users/ban', {'userId': user_id, 'action': 'unban'})

    def announce(self, title: str, message: str) -> int:
        """Send an announcement; returns the number of users notified."""
        return self._post('admin/announcement',
                          {'title': title, 'message': message})['delivered']

    # Users.

    def validate_users(self, user_ids: Iterable[str]) -> dict:
        """Resolve contributor ids; ``failed`` lists ``{id, reason}``."""
        return self._post('users/validate', {'users': list(user_ids)})

    def notifications(self) -> dict:
        """Get ``{notifications, unread}`` for the current user."""
        return self._get('users/@me/notifications')

    def mark_all_read(self) -> dict:
        return self._post('users/@me/notifications/mark-read')
