"""Interface shared by every kind of source."""

from pathlib import Path
from typing import Optional, Protocol

from source_provider.fetch.workspace import Workspace


class SourceVariant(Protocol):
    """One origin of source code, driven by SourceProvider."""

    def fetch(self, workspace: Workspace) -> None:
        """Retrieve the source into the workspace, if it needs retrieving."""
        ...

    def is_fetched(self, workspace: Workspace) -> bool:
        """Check whether the source can be copied out right now."""
        ...

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        """Copy the source into ``dest``, which does not exist yet."""
        ...

    def purge(self, workspace: Workspace) -> None:
        """Drop whatever the workspace holds for this source."""
        ...

    def commit(self, workspace: Workspace) -> Optional[str]:
        """Return the revision of the fetched source, if it has one."""
        ...
