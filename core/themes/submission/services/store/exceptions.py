"""Exceptions raised by :mod:`themes.submission.services.store`."""


class StoreException(RuntimeError):
    """Base for store service exceptions."""


class TransactionFailed(StoreException):
    """Raised when there was a problem committing changes to the database."""


class Unavailable(StoreException):
    """The database is not available."""


class ConsistencyError(StoreException):
    """Attempted to persist stale state (the expected state did not hold)."""
