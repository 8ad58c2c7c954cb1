"""
Integration with upstream hosts of theme source files.

GitHub ``blob``/``tree`` links are resolved through the GitHub contents API;
anything else is fetched as-is. The retrieved text is returned as base64, the
encoding in which submissions carry their content.
"""

import re
import base64
import logging
from typing import Optional, NamedTuple
from urllib.parse import urlparse

import requests

from ...util import get_application_config, get_application_global

logger = logging.getLogger(__name__)

GITHUB_BLOB = re.compile(
    r'github\.com/([^/]+)/([^/]+)/(?:blob|tree)/([^/]+)/(.+)'
)
HTML_PREFIXES = ('<!doctype', '<html', '<head', '<body', '<?xml')


class FetchFailed(IOError):
    """The source could not be retrieved."""


class NotStylesheet(ValueError):
    """The retrieved document is HTML rather than a stylesheet."""


class GitHubPath(NamedTuple):
    """Location of a file in a GitHub repository."""

    owner: str
    repo: str
    branch: str
    path: str


def parse_github_url(url: str) -> Optional[GitHubPath]:
    """Extract the repository location from a GitHub ``blob`` URL."""
    match = GITHUB_BLOB.search(url)
    if match is None:
        return None
    return GitHubPath(*match.groups())


def is_raw_html(content: str) -> bool:
    """Check whether ``content`` looks like an HTML (or XML) document."""
    return content.strip().lower().startswith(HTML_PREFIXES)


class SourceService:
    """Fetches theme source text from the web."""

    USER_AGENT = 'theme-submission-core'

    def __init__(self, github_endpoint: str = 'https://api.github.com',
                 github_token: Optional[str] = None, timeout: float = 15,
                 verify: bool = True,
                 session: Optional[requests.Session] = None) -> None:
        self._github = github_endpoint.rstrip('/')
        self._token = github_token
        self._timeout = timeout
        self._verify = verify
        self._session = session or requests.Session()
        self._session.headers.update({'User-Agent': self.USER_AGENT})

    @classmethod
    def init_app(cls, app: object = None) -> None:
        """Set default configuration params for an application instance."""
        config = get_application_config(app)
        config.setdefault('GITHUB_API_ENDPOINT', 'https://api.github.com')
        config.setdefault('GITHUB_TOKEN', None)
        config.setdefault('SOURCE_FETCH_TIMEOUT', 15)
        config.setdefault('SOURCE_VERIFY', True)

    @classmethod
    def get_session(cls, app: object = None) -> 'SourceService':
        """Create a new :class:`.SourceService` from configuration."""
        config = get_application_config(app)
        return cls(
            github_endpoint=config.get('GITHUB_API_ENDPOINT',
                                       'https://api.github.com'),
            github_token=config.get('GITHUB_TOKEN'),
            timeout=float(config.get('SOURCE_FETCH_TIMEOUT', 15)),
            verify=bool(int(config.get('SOURCE_VERIFY', 1)))
        )

    @classmethod
    def current_session(cls) -> 'SourceService':
        """Get/create :class:`.SourceService` for this context."""
        g = get_application_global()
        if not g:
            return cls.get_session()
        if 'source' not in g:
            g.source = cls.get_session()   # type: ignore
        return g.source    # type: ignore

    def fetch(self, url: str) -> str:
        """
        Retrieve the source at ``url``.

        Returns
        -------
        str
            Base64-encoded UTF-8 text of the source.

        Raises
        ------
        :class:`.FetchFailed`
            Raised if the source could not be retrieved.
        :class:`.NotStylesheet`
            Raised if the retrieved content is an HTML document.

        """
        if not url or urlparse(url).scheme not in ('http', 'https'):
            raise FetchFailed(f'Not a fetchable URL: {url}')
        location = parse_github_url(url)
        if location is not None:
            text = self._fetch_github(location)
        else:
            text = self._fetch_raw(url)
        if is_raw_html(text):
            raise NotStylesheet('Content appears to be raw HTML. Please'
                                ' provide a direct link to the CSS file.')
        return base64.b64encode(text.encode('utf-8')).decode('ascii')

    def _get(self, url: str, **kwargs: object) -> requests.Response:
        try:
            resp = self._session.get(url, timeout=self._timeout,
                                     verify=self._verify, **kwargs)
        except requests.exceptions.RequestException as e:
            raise FetchFailed(f'Failed to fetch from {url}: {e}') from e
        if not resp.ok:
            raise FetchFailed(f'Failed to fetch from {url}:'
                              f' HTTP {resp.status_code}')
        return resp

    def _fetch_raw(self, url: str) -> str:
        logger.debug('Fetch raw source from %s', url)
        return self._get(url).text

    def _fetch_github(self, location: GitHubPath) -> str:
        url = (f'{self._github}/repos/{location.owner}/{location.repo}'
               f'/contents/{location.path}')
        headers = {'Accept': 'application/vnd.github+json'}
        if self._token:
            headers['Authorization'] = f'Bearer {self._token}'
        logger.debug('Fetch source from GitHub: %s', location)
        data = self._get(url, headers=headers,
                         params={'ref': location.branch}).json()
        if not data.get('content'):
            raise FetchFailed('No content found in GitHub API response')
        return base64.b64decode(data['content']).decode('utf-8')
