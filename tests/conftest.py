"""Shared pytest fixtures for source provider tests."""

import io
import tarfile
from pathlib import Path

import pytest

from source_provider.fetch.git import GitCommandError
from source_provider.fetch.http import RegistryNotFoundError
from source_provider.fetch.workspace import Workspace


def build_crate(name: str, version: str, files: dict[str, str]) -> bytes:
    """Build a gzip'd tarball laid out like a published crate."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        top = tarfile.TarInfo(f"{name}-{version}")
        top.type = tarfile.DIRTYPE
        top.mode = 0o755
        archive.addfile(top)
        for rel_path, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{name}-{version}/{rel_path}")
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def snapshot(root: Path) -> dict[str, bytes]:
    """Map every file under root (relative path) to its contents."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class FakeRegistryClient:
    """Registry client serving in-memory archives and counting downloads."""

    def __init__(self):
        self.archives: dict[tuple[str, str], bytes] = {}
        self.calls: list[tuple[str, str]] = []

    def publish(self, name: str, version: str, files: dict[str, str]) -> None:
        self.archives[(name, version)] = build_crate(name, version, files)

    def download(self, name: str, version: str) -> bytes:
        self.calls.append((name, version))
        try:
            return self.archives[(name, version)]
        except KeyError:
            raise RegistryNotFoundError(name, version) from None


class FakeVcsClient:
    """VCS client writing in-memory trees and recording clone/update calls."""

    def __init__(self):
        self.remotes: dict[str, dict[str, str]] = {}
        self.clones: list[str] = []
        self.updates: list[Path] = []
        self._origins: dict[Path, str] = {}
        self._revisions: dict[str, int] = {}

    def push(self, url: str, files: dict[str, str]) -> None:
        self.remotes[url] = files
        self._revisions[url] = self._revisions.get(url, 0) + 1

    def _checkout(self, url: str, dest: Path) -> None:
        for item in list(dest.iterdir()) if dest.exists() else []:
            if item.name != ".git" and item.is_file():
                item.unlink()
        for rel_path, content in self.remotes[url].items():
            target = dest / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        (dest / ".git").mkdir(parents=True, exist_ok=True)
        (dest / ".git" / "HEAD").write_text("ref: refs/heads/main\n")

    def clone(self, url: str, dest: Path) -> None:
        self.clones.append(url)
        if url not in self.remotes:
            raise GitCommandError(["git", "clone", url], 128, "repository not found")
        self._origins[dest] = url
        self._checkout(url, dest)

    def update(self, path: Path) -> None:
        self.updates.append(path)
        self._checkout(self._origins[path], path)

    def head(self, path: Path) -> str:
        url = self._origins[path]
        return f"{self._revisions[url]:040x}"


@pytest.fixture
def registry_client():
    """Provide an in-memory registry with one published crate."""
    client = FakeRegistryClient()
    client.publish(
        "demo",
        "1.2.3",
        {
            "Cargo.toml": '[package]\nname = "demo"\nversion = "1.2.3"\n',
            "src/lib.rs": "pub fn demo() {}\n",
        },
    )
    return client


@pytest.fixture
def vcs_client():
    """Provide an in-memory VCS with one repository."""
    client = FakeVcsClient()
    client.push(
        "https://example.com/org/repo.git",
        {
            "Cargo.toml": '[package]\nname = "repo"\n',
            "src/main.rs": "fn main() {}\n",
        },
    )
    return client


@pytest.fixture
def workspace(tmp_path, registry_client, vcs_client):
    """Provide a workspace wired to the fake clients."""
    return Workspace(
        tmp_path / "workspace",
        registry_client=registry_client,
        vcs_client=vcs_client,
    )


@pytest.fixture
def local_crate_dir(tmp_path):
    """Create a local crate with a manifest and a library source."""
    crate_dir = tmp_path / "pkgA"
    (crate_dir / "src").mkdir(parents=True)
    (crate_dir / "Cargo.toml").write_text('[package]\nname = "pkgA"\nversion = "0.1.0"\n')
    (crate_dir / "src" / "lib.rs").write_text("pub fn answer() -> u32 { 42 }\n")
    return crate_dir
