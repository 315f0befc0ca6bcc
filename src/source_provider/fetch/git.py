"""VCS client driving the ``git`` executable."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """A git invocation exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stderr: str):
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"{' '.join(args)} failed (rc={returncode}): {stderr.strip()[:500]}"
        )


class GitClient:
    """Clones and updates repositories with the git command line."""

    def __init__(self, executable: str = "git", env: Optional[dict[str, str]] = None):
        """Initialize the git client.

        Args:
            executable: git binary to run
            env: Extra environment variables for every git invocation
        """
        self.executable = executable
        self.env = {
            **os.environ,
            # Fail on missing credentials instead of waiting for input
            "GIT_TERMINAL_PROMPT": "0",
            **(env or {}),
        }

    def _run(self, *args: str, cwd: Optional[Path] = None) -> str:
        cmd = [self.executable, *args]
        logger.debug("running %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=self.env,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitCommandError(cmd, 127, str(e)) from e

        if result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, result.stderr)
        return result.stdout

    def clone(self, url: str, dest: Path) -> None:
        """Clone ``url`` into ``dest``.

        Raises:
            GitCommandError: If the clone fails
        """
        logger.info("cloning %s into %s", url, dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        self._run("clone", "--quiet", url, str(dest))

    def update(self, path: Path) -> None:
        """Fetch the remote's HEAD and reset the working tree to it.

        Raises:
            GitCommandError: If fetching or resetting fails
        """
        logger.info("updating clone at %s", path)
        self._run("fetch", "--quiet", "origin", "HEAD", cwd=path)
        self._run("reset", "--quiet", "--hard", "FETCH_HEAD", cwd=path)
        self._run("clean", "-fdx", "--quiet", cwd=path)

    def head(self, path: Path) -> str:
        """Return the commit SHA of HEAD in the clone at ``path``.

        Raises:
            GitCommandError: If the revision cannot be resolved
        """
        return self._run("rev-parse", "HEAD", cwd=path).strip()
