"""Source provider facade and errors."""

from source_provider.core.errors import (
    FetchError,
    MaterializeError,
    NotFetchedError,
    SourceError,
)
from source_provider.core.provider import SourceProvider

__all__ = ["FetchError", "MaterializeError", "NotFetchedError", "SourceError", "SourceProvider"]
