"""Database integration and transactions for :mod:`.services.store`."""

import logging
from contextlib import contextmanager
from typing import Optional, Generator, Any

from flask import Flask
import sqlalchemy.types as types
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.session import Session
from flask_sqlalchemy import SQLAlchemy

from .exceptions import StoreException, TransactionFailed
from ... import serializer

logger = logging.getLogger(__name__)


class StoreSQLAlchemy(SQLAlchemy):
    """Flask-SQLAlchemy extension bound to the submission database."""

    def init_app(self, app: Flask) -> None:
        """Use ``DATABASE_URI`` unless SQLAlchemy is configured directly."""
        config = app.config
        config.setdefault('SQLALCHEMY_DATABASE_URI',
                          config.get('DATABASE_URI', 'sqlite://'))
        config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
        options = config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', {})
        if not config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
            # Native JSON columns go through the domain encoder too.
            options.setdefault('json_serializer', serializer.dumps)
            options.setdefault('json_deserializer', serializer.loads)
            options.setdefault('pool_pre_ping', True)
        super(StoreSQLAlchemy, self).init_app(app)


db: SQLAlchemy = StoreSQLAlchemy()


class JSONText(types.TypeDecorator):
    """JSON stored as text, for SQLite."""

    impl = types.TEXT
    cache_ok = True

    def process_bind_param(self, value: Optional[Any],
                           dialect: Any) -> Optional[str]:
        return None if value is None else serializer.dumps(value)

    def process_result_value(self, value: Optional[str],
                             dialect: Any) -> Optional[Any]:
        return None if value is None else serializer.loads(value)


FriendlyJSON = types.JSON().with_variant(JSONText, 'sqlite')
"""Native JSON where the database has it, JSON text on SQLite."""


def current_engine() -> Engine:
    return db.engine


def current_session() -> Session:
    """Get the database session of the current application context."""
    return db.session()


@contextmanager
def transaction() -> Generator:
    """
    Run the enclosed block in a database transaction.

    The transaction is committed if the block completes, and rolled back
    otherwise. Database errors are raised as :class:`.TransactionFailed`;
    anything else is re-raised as is.
    """
    session = current_session()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        logger.debug('Rolling back after database error: %s', e)
        session.rollback()
        raise TransactionFailed('Failed to execute transaction') from e
    except BaseException as e:
        if isinstance(e, StoreException):
            logger.debug('Rolling back: %s', e)
        session.rollback()
        raise
