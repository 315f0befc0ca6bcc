"""Exceptions raised while fetching and materializing sources."""

from pathlib import Path


class SourceError(Exception):
    """Base class for source provider failures."""


class FetchError(SourceError):
    """Fetching a source into the workspace failed.

    Attributes:
        origin: Human-readable description of the source that failed
    """

    def __init__(self, origin: str, reason: str):
        self.origin = origin
        self.reason = reason
        super().__init__(f"failed to fetch {origin}: {reason}")


class MaterializeError(SourceError):
    """Placing a copy of a source at a destination failed.

    Attributes:
        path: The path the failure is about (source or destination)
    """

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class NotFetchedError(MaterializeError):
    """Materialize was called before the source was fetched."""

    def __init__(self, origin: str, path: Path):
        self.origin = origin
        super().__init__(path, f"{origin} has not been fetched into the workspace")
