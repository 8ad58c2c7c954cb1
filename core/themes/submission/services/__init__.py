"""Persistence and external service integrations."""

from . import store
from .source import SourceService
