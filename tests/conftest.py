"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from blesstest.harness.registry import HarnessRegistry
from blesstest.snapshots.store import SnapshotStore
from tests.unit.helpers import FakeIndex, build_registry


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary workspace root. Snapshot dir lives under it."""
    return tmp_path


@pytest.fixture
def snapshot_dir(workspace_root: Path) -> Path:
    """Snapshot directory (not created up front)."""
    return workspace_root / "blessed"


@pytest.fixture
def fake_index() -> FakeIndex:
    """Empty in-memory staged index."""
    return FakeIndex()


@pytest.fixture
def store(snapshot_dir: Path, fake_index: FakeIndex) -> SnapshotStore:
    """Snapshot store backed by the in-memory index."""
    return SnapshotStore(snapshot_dir, fake_index)


@pytest.fixture
def registry() -> HarnessRegistry:
    """Fresh registry with the add and explode harnesses."""
    return build_registry()
