"""
Core library for theme submission and moderation.

Users submit CSS themes; admins review them and either approve them (with
tags) or reject them (with a reason, and possibly a ban of the submitter).
Approved submissions may be promoted to the public theme listing.

Commands
========

Changes to submissions are made by creating and saving commands (a.k.a.
events, see :mod:`.domain.event`), rather than by changing submissions
directly:

.. code-block:: python

   from themes.submission import core, ApproveSubmission

   submission = core.save(ApproveSubmission(creator=admin, tags=['dark']),
                          submission_id=42)

An event validates itself against the current state of the submission
(raising :class:`.AuthorizationError`, :class:`.ConflictError` or
:class:`.InvalidEvent`), and then projects the new state.

Moderation lifecycle
====================

A submission is ``pending`` until an admin decides on it, once: it is then
``approved`` or ``rejected``, for good. Concurrent decisions on the same
submission are serialized by a conditional update in the store (see
:func:`.services.store.transition_submission`); the loser gets a
:class:`.ConflictError`.

Side effects
============

Rules bound to the moderation events (see :mod:`.rules`) produce side-effect
intents: notifications to the submitter, and bans. Intents are stored in an
outbox together with the decision, and carried out afterwards by
:mod:`.dispatch`, either in-thread or by the worker (see :mod:`.tasks`).
A decision never fails because one of its side effects did.
"""

import logging

from flask import Flask

from .domain import *
from .domain.event import *
from .exceptions import *
from . import core, dispatch, rules
from .services import SourceService


def init_app(app: Flask) -> None:
    """Configure an application instance to use the submission core."""
    core.init_app(app)
    SourceService.init_app(app)
    level = int(app.config.get('LOGLEVEL', logging.INFO))
    logging.getLogger(__name__).setLevel(level)
