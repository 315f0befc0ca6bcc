"""Interfaces for the clients that sources fetch through."""

from pathlib import Path
from typing import Protocol


class RegistryClient(Protocol):
    """Downloads package archives from a registry."""

    def download(self, name: str, version: str) -> bytes:
        """Download the archive for an exact package version.

        Args:
            name: Package name
            version: Exact version string, passed through verbatim

        Returns:
            Raw archive bytes

        Raises:
            RegistryNotFoundError: If the registry has no such version
            httpx.HTTPError: On transport or server failures
        """
        ...


class VcsClient(Protocol):
    """Maintains local clones of version-controlled repositories."""

    def clone(self, url: str, dest: Path) -> None:
        """Clone ``url`` into the (nonexistent) directory ``dest``."""
        ...

    def update(self, path: Path) -> None:
        """Bring an existing clone in line with its remote's HEAD.

        Local changes and divergent history are discarded.
        """
        ...

    def head(self, path: Path) -> str:
        """Return the commit SHA checked out in the clone at ``path``."""
        ...
