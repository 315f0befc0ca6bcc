"""The SourceProvider facade over registry, git and local sources."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from source_provider.core.errors import MaterializeError, NotFetchedError
from source_provider.fetch.workspace import Workspace
from source_provider.sources.base import SourceVariant
from source_provider.sources.local import LocalDirectory
from source_provider.sources.registry import RegistryPackage
from source_provider.sources.repository import GitRepository
from source_provider.utils.paths import remove_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceProvider:
    """Source code of a package, from exactly one kind of origin.

    Build one with :meth:`from_registry`, :meth:`from_repository` or
    :meth:`from_local_directory`, then call :meth:`fetch` once and
    :meth:`materialize` as many times as needed. Constructors perform no I/O.

    The provider only holds what identifies its origin. Fetched sources are
    kept in the :class:`Workspace` passed to each call.
    """

    variant: SourceVariant

    @classmethod
    def from_registry(cls, name: str, version: str) -> "SourceProvider":
        """Source of an exact package version from the registry.

        The version is used verbatim; no resolution or "latest" lookup
        happens.
        """
        return cls(RegistryPackage(name, version))

    @classmethod
    def from_repository(cls, url: str) -> "SourceProvider":
        """Source of a git repository. The full clone URL is required."""
        return cls(GitRepository(url))

    @classmethod
    def from_local_directory(cls, path: Union[str, Path]) -> "SourceProvider":
        """Source of a directory on the local filesystem.

        The directory does not need to exist until :meth:`materialize`.
        """
        return cls(LocalDirectory(Path(path)))

    def __str__(self) -> str:
        return str(self.variant)

    def fetch(self, workspace: Workspace) -> None:
        """Fetch the source and cache it in the workspace.

        Reaches out to the network for registry and git sources. Safe to call
        repeatedly: a cached registry package is not downloaded again, and a
        cached clone is updated in place.

        Raises:
            FetchError: If the source cannot be retrieved
        """
        self.variant.fetch(workspace)

    def is_fetched(self, workspace: Workspace) -> bool:
        """Check whether :meth:`materialize` can run without fetching first."""
        return self.variant.is_fetched(workspace)

    def materialize(self, workspace: Workspace, destination: Union[str, Path]) -> None:
        """Place a fresh copy of the source at ``destination``.

        **Anything already at ``destination`` is deleted first**, whether it is
        a file or a whole directory tree. If copying fails part way, the
        partial tree is left behind.

        Args:
            workspace: Workspace the source was fetched into
            destination: Path to create the copy at

        Raises:
            NotFetchedError: If :meth:`fetch` has not been called yet; the
                destination is left untouched
            MaterializeError: If the destination cannot be cleared or filled
        """
        destination = Path(destination)
        if not self.variant.is_fetched(workspace):
            raise NotFetchedError(str(self), destination)

        if destination.exists() or destination.is_symlink():
            logger.info("source directory %s already exists, cleaning it up", destination)
            try:
                remove_path(destination)
            except OSError as e:
                raise MaterializeError(
                    destination, f"could not remove existing destination ({e})"
                ) from e

        self.variant.copy_source_to(workspace, destination)

    def purge(self, workspace: Workspace) -> None:
        """Remove this source's cached copy from the workspace, if any."""
        self.variant.purge(workspace)

    def commit(self, workspace: Workspace) -> Optional[str]:
        """Return the fetched commit SHA for git sources, otherwise None."""
        return self.variant.commit(workspace)
