"""Read the staged (index) content of a file through the git CLI.

A snapshot counts as blessed only once a human has staged it, so the baseline
comes from the index rather than the working tree. This module is the only
place that talks to git.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Protocol

from blesstest.kernel.errors import VcsError
from blesstest.kernel.run_cmd import TimeoutExpired, run_subprocess_bytes

_LOGGER = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = 30.0


class BaselineIndex(Protocol):
    """Narrow read-only view of the version-control index."""

    def get_staged_content(self, path: Path) -> bytes | None:
        """Return staged bytes for path, or None if never staged."""
        ...


class GitIndex:
    """BaselineIndex backed by `git ls-files --stage` and `git cat-file`."""

    def __init__(
        self,
        repo_root: Path | None = None,
        *,
        git: str = "git",
        timeout_s: float | None = _DEFAULT_TIMEOUT_S,
    ) -> None:
        """Create a git-backed index reader.

        Args:
            repo_root: Work tree root. Discovered per path when None.
            git: git executable name or path.
            timeout_s: Timeout for each git call.
        """
        self._repo_root = repo_root.resolve() if repo_root is not None else None
        self._git = git
        self._timeout_s = timeout_s
        self._roots: dict[Path, Path] = {}
        self._lock = threading.Lock()

    def _git_output(self, args: list[str], cwd: Path) -> bytes:
        """Run one git command and return stdout bytes.

        Args:
            args: Arguments after the git executable.
            cwd: Directory to run git in.

        Returns:
            Raw stdout.

        Raises:
            VcsError: If git is missing, times out, or exits non-zero.
        """
        argv = [self._git, *args]
        try:
            result = run_subprocess_bytes(argv, cwd=cwd, timeout=self._timeout_s)
        except FileNotFoundError as exc:
            raise VcsError(
                f"Failed to execute git: {exc}. Is git installed and in PATH?",
                data={"argv": argv},
            ) from exc
        except TimeoutExpired as exc:
            raise VcsError(
                f"`git {args[0]}` timed out after {self._timeout_s}s",
                data={"argv": argv},
            ) from exc
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise VcsError(
                f"`git {args[0]}` failed (exit code: {result.returncode}): {stderr}",
                data={"argv": argv, "returncode": result.returncode},
            )
        return result.stdout

    def repo_root_for(self, path: Path) -> Path:
        """Return the work tree root containing path.

        Args:
            path: Absolute file path (may not exist yet).

        Returns:
            Resolved work tree root.

        Raises:
            VcsError: If path is not inside a git work tree.
        """
        if self._repo_root is not None:
            return self._repo_root
        start = path.parent
        while not start.exists() and start != start.parent:
            start = start.parent
        with self._lock:
            cached = self._roots.get(start)
        if cached is not None:
            return cached
        out = self._git_output(["rev-parse", "--show-toplevel"], cwd=start)
        root_str = out.decode("utf-8", errors="surrogateescape").strip()
        if not root_str:
            raise VcsError(
                "Failed to determine git root directory", data={"path": str(path)}
            )
        root = Path(root_str).resolve()
        with self._lock:
            self._roots[start] = root
        return root

    def get_staged_content(self, path: Path) -> bytes | None:
        """Return the bytes staged in the index for path.

        Args:
            path: File path inside the work tree.

        Returns:
            Staged bytes, or None if the path has no index entry.

        Raises:
            VcsError: On git failure, unmerged entries, or a path outside the
                work tree.
        """
        abs_path = path.resolve()
        root = self.repo_root_for(abs_path)
        try:
            rel = abs_path.relative_to(root).as_posix()
        except ValueError:
            raise VcsError(
                f"Path {abs_path} is not inside git root {root}",
                data={"path": str(abs_path), "git_root": str(root)},
            ) from None

        listing = self._git_output(
            ["ls-files", "--stage", "-z", "--", f":(literal){rel}"], cwd=root
        )
        oid: str | None = None
        for record in listing.split(b"\0"):
            if not record:
                continue
            meta, _, entry_path = record.partition(b"\t")
            if entry_path.decode("utf-8", errors="surrogateescape") != rel:
                continue
            _mode, entry_oid, stage = meta.decode("ascii").split(" ")
            if stage != "0":
                raise VcsError(
                    f"Snapshot '{rel}' has unresolved merge conflicts in the index",
                    data={"path": rel, "stage": stage},
                )
            oid = entry_oid
        if oid is None:
            _LOGGER.debug("No index entry for %s", rel)
            return None
        _LOGGER.debug("Reading staged blob %s for %s", oid, rel)
        return self._git_output(["cat-file", "blob", oid], cwd=root)
