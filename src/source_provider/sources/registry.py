"""Sources downloaded from a package registry."""

import hashlib
import io
import logging
import shutil
import tarfile
import tempfile
import zlib
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Optional

import httpx

from source_provider.core.errors import FetchError, MaterializeError, NotFetchedError
from source_provider.fetch.http import RegistryNotFoundError
from source_provider.fetch.workspace import Workspace
from source_provider.utils.paths import copy_tree, ensure_dir

logger = logging.getLogger(__name__)


class OutsideTopLevelError(tarfile.FilterError):
    """Archive member not under the expected top-level directory."""

    def __init__(self, top_level: str, tarinfo: tarfile.TarInfo):
        self.top_level = top_level
        self.tarinfo = tarinfo
        super().__init__(f"{tarinfo.name!r} is outside the {top_level!r} directory")


def _strip_top_level(
    top_level: str, member: tarfile.TarInfo, dest_path: str
) -> Optional[tarfile.TarInfo]:
    """Extraction filter dropping the archive's ``<name>-<version>/`` prefix.

    The data filter runs on the renamed member so links are checked against
    the location they are actually written to.
    """
    top, _, name = member.name.rstrip("/").partition("/")
    if top != top_level:
        raise OutsideTopLevelError(top_level, member)
    if not name:
        if member.isdir():
            return None
        raise OutsideTopLevelError(top_level, member)

    changes = {"name": name}
    if member.islnk():
        link_top, _, linkname = member.linkname.partition("/")
        if link_top != top_level or not linkname:
            raise OutsideTopLevelError(top_level, member)
        changes["linkname"] = linkname
    return tarfile.data_filter(member.replace(**changes, deep=False), dest_path)


def unpack_archive(data: bytes, dest: Path, top_level: str) -> None:
    """Extract a gzip'd package tarball into ``dest``.

    Every member must live under the single ``top_level`` directory, which is
    stripped. Absolute paths and links escaping ``dest`` are rejected.

    Raises:
        tarfile.TarError: If the data is not a valid archive
        OSError: If writing fails
    """
    ensure_dir(dest)
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
        archive.extractall(path=dest, filter=partial(_strip_top_level, top_level))


@dataclass(frozen=True)
class RegistryPackage:
    """An exact version of a package published to a registry."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"registry package {self.name} {self.version}"

    def fetch(self, workspace: Workspace) -> None:
        entry = workspace.registry_entry(self.name, self.version)
        if workspace.has_entry(entry):
            logger.debug("%s already cached at %s", self, entry)
            return

        try:
            data = workspace.registry_client.download(self.name, self.version)
        except (RegistryNotFoundError, httpx.HTTPError) as e:
            raise FetchError(str(self), str(e)) from e

        # Extract beside the final location so the entry only appears complete
        staging = Path(
            tempfile.mkdtemp(prefix=f".{entry.name}-", dir=ensure_dir(entry.parent))
        )
        try:
            unpack_archive(
                data, workspace.source_dir(staging), f"{self.name}-{self.version}"
            )
            workspace.write_metadata(
                staging,
                kind=workspace.REGISTRY_KIND,
                name=self.name,
                version=self.version,
                sha256=hashlib.sha256(data).hexdigest(),
            )
            workspace.remove_entry(entry)
            staging.rename(entry)
        except (tarfile.TarError, EOFError, zlib.error) as e:
            raise FetchError(str(self), f"not a valid package archive ({e})") from e
        except OSError as e:
            raise FetchError(str(self), f"could not store archive in workspace ({e})") from e
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

        logger.info("cached %s at %s", self, entry)

    def is_fetched(self, workspace: Workspace) -> bool:
        return workspace.has_entry(workspace.registry_entry(self.name, self.version))

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        entry = workspace.registry_entry(self.name, self.version)
        if not workspace.has_entry(entry):
            raise NotFetchedError(str(self), dest)

        try:
            copy_tree(workspace.source_dir(entry), dest)
        except OSError as e:
            raise MaterializeError(dest, f"could not copy {self} ({e})") from e

    def purge(self, workspace: Workspace) -> None:
        workspace.remove_entry(workspace.registry_entry(self.name, self.version))

    def commit(self, workspace: Workspace) -> Optional[str]:
        return None
