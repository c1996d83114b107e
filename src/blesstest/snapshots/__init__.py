"""Snapshot files and their version-control baseline."""

from blesstest.snapshots.git_index import BaselineIndex, GitIndex
from blesstest.snapshots.store import SNAPSHOT_SUFFIX, SnapshotStore, is_valid_case_name

__all__ = [
    "SNAPSHOT_SUFFIX",
    "BaselineIndex",
    "GitIndex",
    "SnapshotStore",
    "is_valid_case_name",
]
