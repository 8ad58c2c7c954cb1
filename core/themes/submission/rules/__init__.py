"""
Side-effect rules bound to moderation events.

These are callbacks that produce intents (:class:`.Intent`) when an event
is saved. See :func:`.domain.Event.bind` for mechanics.

Binding callbacks relies on decorators; registration is a side-effect of
importing the module in which they are defined. Any module that defines rules
must therefore be imported here.
"""

from . import notifications
