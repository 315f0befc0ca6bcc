"""Workspace cache that fetched sources are stored in."""

import hashlib
import json
import logging
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator, Optional
from urllib.parse import urlsplit, urlunsplit

from source_provider.fetch.protocols import RegistryClient, VcsClient
from source_provider.utils.paths import ensure_dir, expand_path

if TYPE_CHECKING:
    from source_provider.config.schema import SettingsConfig

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def normalize_git_url(url: str) -> str:
    """Normalize a repository URL for use as a cache identity.

    Strips whitespace, trailing slashes and a trailing ``.git``, and
    lowercases the scheme and host. Paths keep their case.
    """
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]

    parts = urlsplit(url)
    if parts.scheme and parts.netloc:
        url = urlunsplit(
            (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, parts.fragment)
        )
    return url


def _safe(value: str) -> str:
    return _UNSAFE_CHARS.sub("-", value).strip("-")


class Workspace:
    """On-disk cache of fetched sources.

    Entries live under ``<root>/<kind>/<key>/``, with the fetched tree in a
    ``source/`` subdirectory and a metadata file beside it. An entry counts as
    present once its metadata file has been written, so an interrupted fetch
    never looks like a cache hit.

    The workspace also carries the clients sources use to fetch. Access is not
    locked; callers sharing a workspace between processes must serialize
    fetches of the same origin themselves.
    """

    METADATA_FILE = ".cache-metadata.json"
    SOURCE_DIR = "source"
    REGISTRY_KIND = "registry"
    GIT_KIND = "git"

    def __init__(
        self,
        root: Path,
        registry_client: Optional[RegistryClient] = None,
        vcs_client: Optional[VcsClient] = None,
    ):
        """Initialize the workspace.

        Args:
            root: Root directory of the cache (e.g., ~/.cache/source-provider)
            registry_client: Client used to download registry packages
                (default: HttpRegistryClient)
            vcs_client: Client used to clone repositories (default: GitClient)
        """
        self.root = expand_path(str(root))
        ensure_dir(self.root)

        if registry_client is None:
            from source_provider.fetch.http import HttpRegistryClient

            registry_client = HttpRegistryClient()
        if vcs_client is None:
            from source_provider.fetch.git import GitClient

            vcs_client = GitClient()

        self.registry_client = registry_client
        self.vcs_client = vcs_client

    @classmethod
    def from_settings(cls, settings: "SettingsConfig") -> "Workspace":
        """Create a workspace and its clients from configuration settings."""
        from source_provider.fetch.git import GitClient
        from source_provider.fetch.http import HttpRegistryClient

        return cls(
            Path(settings.workspace_dir),
            registry_client=HttpRegistryClient(
                base_url=settings.registry_url,
                user_agent=settings.user_agent,
                timeout=settings.timeout,
            ),
            vcs_client=GitClient(executable=settings.git_executable),
        )

    def registry_key(self, name: str, version: str) -> str:
        """Generate the cache key for a registry package version.

        Args:
            name: Package name
            version: Exact package version

        Returns:
            Directory name combining a readable prefix with a hash
        """
        identifier = f"{name}@{version}"
        hash_digest = hashlib.sha256(identifier.encode()).hexdigest()[:16]
        return f"{_safe(name)}-{_safe(version)}-{hash_digest}"

    def git_key(self, url: str) -> str:
        """Generate the cache key for a repository URL.

        Args:
            url: Repository URL, normalized before hashing

        Returns:
            Directory name combining a readable prefix with a hash
        """
        normalized = normalize_git_url(url)
        hash_digest = hashlib.sha256(normalized.encode()).hexdigest()[:16]

        # Keep the last two path components (usually owner/repo) readable
        parts = urlsplit(normalized)
        tail = "/".join((parts.path or normalized).strip("/").split("/")[-2:])
        prefix = _safe(tail) or "repo"
        return f"{prefix}-{hash_digest}"

    def registry_entry(self, name: str, version: str) -> Path:
        """Return the entry directory for a registry package version."""
        return self.root / self.REGISTRY_KIND / self.registry_key(name, version)

    def git_entry(self, url: str) -> Path:
        """Return the entry directory for a repository URL."""
        return self.root / self.GIT_KIND / self.git_key(url)

    def source_dir(self, entry: Path) -> Path:
        """Return the directory holding the fetched tree of an entry."""
        return entry / self.SOURCE_DIR

    def has_entry(self, entry: Path) -> bool:
        """Check whether an entry has been completely fetched."""
        return (entry / self.METADATA_FILE).is_file()

    def write_metadata(self, entry: Path, **fields: Any) -> None:
        """Record metadata for an entry, marking it complete.

        A ``fetched_at`` timestamp is added to the given fields.

        Raises:
            OSError: If writing fails
        """
        metadata = {"fetched_at": datetime.now(timezone.utc).isoformat(), **fields}
        ensure_dir(entry)
        metadata_path = entry / self.METADATA_FILE
        metadata_path.write_text(json.dumps(metadata, indent=2))

    def read_metadata(self, entry: Path) -> Optional[dict[str, Any]]:
        """Read an entry's metadata.

        Returns:
            The metadata dictionary, or None if missing or unreadable
        """
        metadata_path = entry / self.METADATA_FILE
        if not metadata_path.exists():
            return None

        try:
            data = json.loads(metadata_path.read_text())
        except (json.JSONDecodeError, OSError):
            return None
        return data if isinstance(data, dict) else None

    def remove_entry(self, entry: Path) -> None:
        """Delete an entry and everything in it.

        Raises:
            OSError: If removal fails
        """
        if entry.exists():
            logger.info("removing cache entry %s", entry)
            shutil.rmtree(entry)

    def entries(self) -> Iterator[tuple[str, Path, dict[str, Any]]]:
        """Iterate over complete entries.

        Yields:
            Tuples of (kind, entry path, metadata), sorted by kind then key
        """
        for kind in (self.REGISTRY_KIND, self.GIT_KIND):
            kind_dir = self.root / kind
            if not kind_dir.is_dir():
                continue
            for entry in sorted(kind_dir.iterdir()):
                if not entry.is_dir():
                    continue
                metadata = self.read_metadata(entry)
                if metadata is not None:
                    yield kind, entry, metadata

    def clear(self) -> None:
        """Remove all cached sources.

        Raises:
            OSError: If clearing the cache fails
        """
        if self.root.exists():
            for item in self.root.iterdir():
                if item.is_dir():
                    shutil.rmtree(item)
                else:
                    item.unlink(missing_ok=True)
