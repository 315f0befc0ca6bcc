"""Sources cloned from a git repository."""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from source_provider.core.errors import FetchError, MaterializeError, NotFetchedError
from source_provider.fetch.git import GitCommandError
from source_provider.fetch.workspace import Workspace
from source_provider.utils.paths import copy_tree

logger = logging.getLogger(__name__)

VCS_METADATA = (".git",)


@dataclass(frozen=True)
class GitRepository:
    """A git repository, tracked at whatever its remote HEAD points to.

    The URL is handed to git verbatim; only the cache key uses a normalized
    form of it.
    """

    url: str

    def __str__(self) -> str:
        return f"git repository {self.url}"

    def fetch(self, workspace: Workspace) -> None:
        entry = workspace.git_entry(self.url)
        clone = workspace.source_dir(entry)
        vcs = workspace.vcs_client

        try:
            if workspace.has_entry(entry) and clone.is_dir():
                vcs.update(clone)
            else:
                # Leftovers of an interrupted clone
                workspace.remove_entry(entry)
                vcs.clone(self.url, clone)
            commit = vcs.head(clone)
            workspace.write_metadata(
                entry, kind=workspace.GIT_KIND, url=self.url, commit=commit
            )
        except GitCommandError as e:
            raise FetchError(str(self), str(e)) from e
        except OSError as e:
            raise FetchError(str(self), f"could not update workspace clone ({e})") from e

        logger.info("%s is at commit %s", self, commit)

    def is_fetched(self, workspace: Workspace) -> bool:
        entry = workspace.git_entry(self.url)
        return workspace.has_entry(entry) and workspace.source_dir(entry).is_dir()

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        entry = workspace.git_entry(self.url)
        clone = workspace.source_dir(entry)
        if not clone.is_dir():
            raise NotFetchedError(str(self), dest)

        try:
            copy_tree(clone, dest, ignore=shutil.ignore_patterns(*VCS_METADATA))
        except OSError as e:
            raise MaterializeError(dest, f"could not copy {self} ({e})") from e

    def purge(self, workspace: Workspace) -> None:
        workspace.remove_entry(workspace.git_entry(self.url))

    def commit(self, workspace: Workspace) -> Optional[str]:
        metadata = workspace.read_metadata(workspace.git_entry(self.url))
        if metadata is None:
            return None
        return metadata.get("commit")
