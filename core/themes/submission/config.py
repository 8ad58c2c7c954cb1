"""Submission core configuration parameters."""

from os import environ
import warnings

LOGLEVEL = int(environ.get('LOGLEVEL', '20'))
"""
Logging verbosity.

See `https://docs.python.org/3/library/logging.html#levels`_.
"""

JWT_SECRET = environ.get('JWT_SECRET', 'foosecret')
"""Secret key for signing + verifying authentication JWTs."""

if JWT_SECRET == 'foosecret':
    warnings.warn('JWT_SECRET is not set; authn/z may not work correctly!')

JWT_EXPIRES = int(environ.get('JWT_EXPIRES', '604800'))
"""Lifetime (seconds) of tokens issued by :func:`.auth.encode_token`."""

ENABLE_CALLBACKS = bool(int(environ.get('ENABLE_CALLBACKS', '1')))
"""
Enable/disable the :func:`Event.bind` feature.

Moderation notifications are produced by bound callbacks; disabling them
suppresses every side effect of approve/reject.
"""

ENABLE_ASYNC = bool(int(environ.get('ENABLE_ASYNC', '0')))
"""
Hand outbox intents to the worker instead of draining them in-thread.

If disabled, intents written by a transition are dispatched right after the
transition commits, in the request thread.
"""

# --- DATABASE CONFIGURATION ---

DATABASE_URI = environ.get('DATABASE_URI', 'sqlite:///')
"""Full database URI for the submission store."""

SQLALCHEMY_DATABASE_URI = DATABASE_URI
"""Full database URI for the submission store."""

SQLALCHEMY_TRACK_MODIFICATIONS = False
"""Track modifications feature should always be disabled."""

# --- WORKER CONFIGURATION ---

REDIS_ENDPOINT = environ.get('REDIS_ENDPOINT', 'localhost:6379')
"""Hostname and port of the Redis instance used as broker/backend."""

BROKER_URL = environ.get('BROKER_URL', f'redis://{REDIS_ENDPOINT}/0')
"""URL of the Celery broker."""

RESULT_BACKEND = environ.get('RESULT_BACKEND', f'redis://{REDIS_ENDPOINT}/0')
"""URL of the Celery result backend."""

QUEUE_NAME_PREFIX = environ.get('QUEUE_NAME_PREFIX', 'theme-submission-')
"""Prefix for worker queue names."""

# --- MODERATION ---

MAX_TAGS = int(environ.get('MAX_TAGS', '5'))
"""Maximum number of tags that an approved submission may carry."""

DEFAULT_REJECTION_REASON = "No reason provided"
"""Used when a moderator rejects a submission without giving a reason."""

DEFAULT_BAN_REASON = "Banned by moderator"
"""Used when a moderator bans a user without giving a reason."""

DEFAULT_REJECTION_BAN_REASON = "Rejected multiple times"
"""Used when a user is banned while rejecting their submission."""

NOTIFICATION_LIMIT = int(environ.get('NOTIFICATION_LIMIT', '50'))
"""Maximum number of notifications returned to a user."""

OUTBOX_BATCH_SIZE = int(environ.get('OUTBOX_BATCH_SIZE', '100'))
"""Maximum number of outbox intents dispatched per drain."""

OUTBOX_MAX_ATTEMPTS = int(environ.get('OUTBOX_MAX_ATTEMPTS', '10'))
"""Intents that failed this many times are no longer picked up."""

# --- TAG HEURISTICS ---

THEME_LENGTH_THRESHOLD = int(environ.get('THEME_LENGTH_THRESHOLD', '500'))
"""Content longer than this (in characters) is classified as a theme."""

DARK_LUMINANCE_THRESHOLD = int(environ.get('DARK_LUMINANCE_THRESHOLD', '128'))
"""Preview images with a mean luminance below this are classified as dark."""

IMAGE_FETCH_TIMEOUT = float(environ.get('IMAGE_FETCH_TIMEOUT', '10'))
"""Timeout (seconds) when downloading preview images for analysis."""

# --- SOURCE RETRIEVAL ---

SOURCE_FETCH_TIMEOUT = float(environ.get('SOURCE_FETCH_TIMEOUT', '15'))
"""Timeout (seconds) when fetching theme source from ``sourceLink``."""

GITHUB_TOKEN = environ.get('GITHUB_TOKEN')
"""Optional token for the GitHub contents API."""

GITHUB_API_ENDPOINT = environ.get('GITHUB_API_ENDPOINT',
                                  'https://api.github.com')
"""Root of the GitHub REST API."""

SOURCE_VERIFY = bool(int(environ.get('SOURCE_VERIFY', '1')))
"""Enable/disable TLS certificate verification when fetching sources."""

if not SOURCE_VERIFY:
    warnings.warn('Certificate verification for source retrieval is'
                  ' disabled; this should not be disabled in production.')
