"""
Asynchronous draining of the outbox.

If ``ENABLE_ASYNC`` is set, :func:`.dispatch.dispatch` does not carry out
new intents in the request thread, but sends a task to the worker (see
:mod:`.worker`) that drains them.
"""

import logging
from typing import Iterable, List, Optional

from celery import Celery, Task

from .util import get_application_config, get_application_global
from . import config, dispatch

logger = logging.getLogger(__name__)

DRAIN_TASK = 'outbox.drain'


def create_worker_app() -> Celery:
    """Initialize the worker application."""
    app_config = get_application_config()
    result_backend = app_config.get('RESULT_BACKEND', config.RESULT_BACKEND)
    broker = app_config.get('BROKER_URL', config.BROKER_URL)
    prefix = app_config.get('QUEUE_NAME_PREFIX', config.QUEUE_NAME_PREFIX)
    celery_app = Celery('themes.submission',
                        backend=result_backend,
                        broker=broker)
    celery_app.conf.task_serializer = 'json'
    celery_app.conf.accept_content = ['json']
    celery_app.conf.task_default_queue = f'{prefix}worker'
    register_tasks(celery_app)
    return celery_app


def get_or_create_worker_app() -> Celery:
    """
    Get the current worker app, or create one.

    Uses the Flask application global to keep track of the worker app.
    """
    g = get_application_global()
    if not g:
        return create_worker_app()
    if 'worker' not in g:
        g.worker = create_worker_app()
    return g.worker


def register_tasks(celery_app: Celery) -> None:
    """Register the outbox tasks with a worker application."""
    @celery_app.task(name=DRAIN_TASK, bind=True)
    def drain(self: Task, intent_ids: Optional[List[int]] = None) -> int:
        """Carry out intents in the outbox."""
        done = dispatch.drain_outbox(intent_ids)
        logger.debug('Task %s dispatched %i intents', self.request.id, done)
        return done


def send_drain(intent_ids: Iterable[int]) -> None:
    """Ask the worker to carry out some intents."""
    worker_app = get_or_create_worker_app()
    worker_app.send_task(DRAIN_TASK, (list(intent_ids),))
