"""Retrieval of theme source from a submission's ``sourceLink``."""

from .source import SourceService, FetchFailed, NotStylesheet
