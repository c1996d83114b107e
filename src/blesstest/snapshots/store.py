"""Snapshot files on disk plus their staged baseline."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from blesstest.kernel.atomic_write import atomic_write_bytes
from blesstest.kernel.errors import SnapshotStoreError
from blesstest.snapshots.git_index import BaselineIndex

_LOGGER = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".json"
_CASE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def is_valid_case_name(name: str) -> bool:
    """Return True if name can be used as a snapshot file stem."""
    return bool(_CASE_NAME_RE.match(name)) and ".." not in name


class SnapshotStore:
    """One `{snapshot_dir}/{name}.json` file per test case."""

    def __init__(self, snapshot_dir: Path, index: BaselineIndex) -> None:
        """Create store rooted at snapshot_dir.

        Args:
            snapshot_dir: Directory holding snapshot files (created on write).
            index: Source of staged baseline content.
        """
        self._snapshot_dir = snapshot_dir.resolve()
        self._index = index

    @property
    def snapshot_dir(self) -> Path:
        """Resolved snapshot directory."""
        return self._snapshot_dir

    def path_for(self, name: str) -> Path:
        """Return the snapshot path for a case name.

        Args:
            name: Test case name.

        Returns:
            Absolute snapshot path inside snapshot_dir.

        Raises:
            ValueError: If name is not a safe file stem.
        """
        if not is_valid_case_name(name):
            raise ValueError(f"Invalid case name for snapshot file: {name!r}")
        path = self._snapshot_dir / f"{name}{SNAPSHOT_SUFFIX}"
        if path.parent != self._snapshot_dir:
            raise ValueError(f"Snapshot path escapes snapshot dir: {name!r}")
        return path

    def read_working(self, path: Path) -> bytes | None:
        """Read current on-disk content; None if the file does not exist.

        Raises:
            SnapshotStoreError: On any other filesystem error.
        """
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to read snapshot '{path}': {exc}", data={"path": str(path)}
            ) from exc

    def read_baseline(self, path: Path) -> bytes | None:
        """Read the staged content of path; None if never staged.

        Raises:
            VcsError: If the index cannot be queried.
        """
        return self._index.get_staged_content(path)

    def write_working(self, path: Path, content: bytes) -> None:
        """Atomically overwrite the on-disk snapshot.

        Args:
            path: Snapshot path from path_for().
            content: Canonical snapshot bytes.

        Raises:
            SnapshotStoreError: If the directory or file cannot be written.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_bytes(path, content, temp_prefix=path.stem)
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to write snapshot '{path}': {exc}", data={"path": str(path)}
            ) from exc
        _LOGGER.debug("Wrote snapshot %s (%d bytes)", path, len(content))
