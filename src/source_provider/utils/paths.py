"""Path utilities for expanding, removing and copying filesystem trees."""

import shutil
from pathlib import Path
from typing import Callable, Optional


def expand_path(path: str) -> Path:
    """Expand and normalize a path, resolving ~ and relative paths.

    Args:
        path: Path string that may contain ~ or be relative

    Returns:
        Absolute Path object
    """
    return Path(path).expanduser().resolve()


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists

    Returns:
        The path that was ensured
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree.

    Symlinks are unlinked, never followed.

    Raises:
        OSError: If removal fails
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def copy_tree(
    source: Path,
    dest: Path,
    ignore: Optional[Callable[[str, list[str]], set[str]]] = None,
) -> Path:
    """Recursively copy a directory into a new directory.

    Symlinks are copied as symlinks. ``dest`` must not exist yet; its parent
    directories are created as needed.

    Args:
        source: Directory to copy from
        dest: Directory to create
        ignore: Optional ``shutil.copytree`` ignore callable

    Returns:
        The destination path

    Raises:
        OSError: If the copy fails
    """
    ensure_dir(dest.parent)
    shutil.copytree(source, dest, symlinks=True, ignore=ignore)
    return dest
