"""
Entry-point for the outbox worker.

The worker is a Celery application consuming the Redis queue to which
:func:`.tasks.send_drain` posts; each task drains part of the outbox (see
:mod:`.dispatch`) inside this module's Flask application context.

Run it with ``celery -A themes.submission.worker.worker_app worker``.
"""

from flask import Flask

from . import init_app, config
from .tasks import get_or_create_worker_app

app = Flask('themes.submission.worker')
app.config.from_object(config)
app.app_context().push()
init_app(app)

worker_app = get_or_create_worker_app()
