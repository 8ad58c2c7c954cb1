"""Helpers for tests that need a database."""

from contextlib import contextmanager
from typing import Optional, List

from flask import Flask

from ..domain import User
from ..domain.event import CreateSubmission
from ..domain.submission import Submission
from ..services import store
from ..services.store import transaction
from .. import core, init_app

ADMIN_ID = '100000000000000001'
USER_ID = '200000000000000002'
OTHER_ID = '300000000000000003'
UNKNOWN_ID = '900000000000000009'


@contextmanager
def in_memory_db(app: Optional[Flask] = None):
    """Provide an in-memory sqlite database for testing purposes."""
    if app is None:
        app = Flask('foo')
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config.setdefault('ENABLE_ASYNC', 0)
    app.config.setdefault('ENABLE_CALLBACKS', 1)
    if 'sqlalchemy' not in app.extensions:
        init_app(app)
    with app.app_context():
        store.create_all()
        try:
            yield store.current_session()
        finally:
            store.drop_all()


def add_user(user_id: str, username: str = 'someone', admin: bool = False,
             banned: bool = False) -> User:
    """Store a user record."""
    with transaction():
        return store.store_user(User(user_id=user_id, username=username,
                                     avatar=f'{username}.png', admin=admin,
                                     banned_from_submissions=banned))


def add_submission(submitter: User, title: str = 'Midnight Blue',
                   contributors: Optional[List[str]] = None) -> Submission:
    """Create a pending submission."""
    return core.create(CreateSubmission(
        creator=submitter,
        title=title,
        description='A dark theme with blue accents.',
        source_link='https://example.com/midnight.css',
        content='Ym9keSB7IGNvbG9yOiBibHVlOyB9',
        preview_image='https://example.com/midnight.png',
        contributors=contributors or []
    ))
