"""Sources read straight from a directory on the local filesystem."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from source_provider.core.errors import MaterializeError
from source_provider.fetch.workspace import Workspace
from source_provider.utils.paths import copy_tree


@dataclass(frozen=True)
class LocalDirectory:
    """A directory that is its own source of truth.

    Nothing is cached: fetching does nothing and every copy reads the
    directory as it is at that moment.
    """

    path: Path

    def __str__(self) -> str:
        return f"local directory {self.path}"

    def fetch(self, workspace: Workspace) -> None:
        pass

    def is_fetched(self, workspace: Workspace) -> bool:
        return True

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        if not self.path.exists():
            raise MaterializeError(self.path, "local source directory does not exist")
        if not self.path.is_dir():
            raise MaterializeError(self.path, "local source is not a directory")

        try:
            copy_tree(self.path, dest)
        except OSError as e:
            raise MaterializeError(self.path, f"could not copy to {dest} ({e})") from e

    def purge(self, workspace: Workspace) -> None:
        pass

    def commit(self, workspace: Workspace) -> Optional[str]:
        return None
