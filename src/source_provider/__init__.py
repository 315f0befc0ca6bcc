"""Fetch package sources from a registry, a git repository or a local directory."""

from source_provider.core.errors import (
    FetchError,
    MaterializeError,
    NotFetchedError,
    SourceError,
)
from source_provider.core.provider import SourceProvider
from source_provider.fetch.workspace import Workspace

__version__ = "0.1.0"

__all__ = [
    "FetchError",
    "MaterializeError",
    "NotFetchedError",
    "SourceError",
    "SourceProvider",
    "Workspace",
]
