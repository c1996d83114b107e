"""GitIndex against a real throwaway repository."""

import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from blesstest.engine.compare import CaseRunner
from blesstest.engine.results import ResultKind
from blesstest.kernel.errors import VcsError
from blesstest.manifest.models import TestCase
from blesstest.snapshots.git_index import GitIndex
from blesstest.snapshots.store import SnapshotStore
from tests.unit.helpers import build_registry

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git not installed"),
]


def _git(repo: Path, *args: str, stdin: bytes | None = None) -> bytes:
    return subprocess.run(
        ["git", *args], cwd=repo, input=stdin, capture_output=True, check=True
    ).stdout


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """Fresh git work tree."""
    root = tmp_path / "repo"
    root.mkdir()
    _git(root, "init", "-q")
    return root


def test_unstaged_file_has_no_baseline(repo: Path):
    """A file that exists only in the working tree is not blessed."""
    path = repo / "blessed" / "case.json"
    path.parent.mkdir()
    path.write_bytes(b'{"result":3}\n')

    assert GitIndex().get_staged_content(path) is None


def test_staged_content_not_working_content(repo: Path):
    """Staged bytes win over later working-tree edits."""
    path = repo / "blessed" / "case.json"
    path.parent.mkdir()
    path.write_bytes(b'{"result":3}\n')
    _git(repo, "add", "blessed/case.json")
    path.write_bytes(b'{"result":4}\n')

    assert GitIndex().get_staged_content(path) == b'{"result":3}\n'
    assert GitIndex(repo).get_staged_content(path) == b'{"result":3}\n'


def test_staged_empty_file_is_present(repo: Path):
    """An empty staged blob is distinct from no entry."""
    path = repo / "empty.json"
    path.write_bytes(b"")
    _git(repo, "add", "empty.json")

    assert GitIndex().get_staged_content(path) == b""


def test_path_prefix_is_not_a_match(repo: Path):
    """Staging a.json.bak does not bless a.json."""
    (repo / "a.json.bak").write_bytes(b"x")
    _git(repo, "add", "a.json.bak")

    assert GitIndex().get_staged_content(repo / "a.json") is None


def test_glob_characters_are_literal(repo: Path):
    """Pathspec magic in names is not expanded."""
    (repo / "a1.json").write_bytes(b"x")
    _git(repo, "add", "a1.json")

    assert GitIndex().get_staged_content(repo / "a?.json") is None


def test_unmerged_entry_is_vcs_error(repo: Path):
    """Conflict stages in the index are an infrastructure failure."""
    blob = repo / "conflict.json"
    blob.write_bytes(b"theirs\n")
    oid = _git(repo, "hash-object", "-w", "conflict.json").decode().strip()
    _git(
        repo,
        "update-index",
        "--index-info",
        stdin=(
            f"100644 {oid} 2\tconflict.json\n100644 {oid} 3\tconflict.json\n"
        ).encode(),
    )

    with pytest.raises(VcsError, match="merge conflicts"):
        GitIndex().get_staged_content(blob)


def test_path_outside_repository_is_vcs_error(tmp_path: Path):
    """Asking outside any work tree fails instead of reporting missing."""
    outside = tmp_path / "plain"
    outside.mkdir()

    with pytest.raises(VcsError):
        GitIndex().get_staged_content(outside / "case.json")


def test_path_outside_configured_root_is_vcs_error(repo: Path, tmp_path: Path):
    """An explicit repo_root rejects paths it does not contain."""
    with pytest.raises(VcsError, match="is not inside git root"):
        GitIndex(repo).get_staged_content(tmp_path / "elsewhere.json")


def test_missing_git_executable_is_vcs_error(repo: Path):
    """A missing git binary is reported, not treated as 'never staged'."""
    index = GitIndex(git="definitely-not-a-git-binary")
    with pytest.raises(VcsError, match="Failed to execute git"):
        index.get_staged_content(repo / "case.json")


def test_bless_workflow_end_to_end(repo: Path):
    """Run, stage, rerun: missing -> pass -> mismatch after a param change."""
    registry = build_registry()
    store = SnapshotStore(repo / "blessed", GitIndex())
    runner = CaseRunner(registry, store)
    case = TestCase(name="add_basic", harness="add", params={"a": 1, "b": 2})

    first = runner.run_case(case)
    assert first.outcome.kind == ResultKind.MISSING_BASELINE

    _git(repo, "add", "blessed/add_basic.json")
    assert runner.run_case(case).outcome.kind == ResultKind.PASS

    changed = case.model_copy(update={"params": {"a": 1, "b": 5}})
    mismatch = runner.run_case(changed)
    assert mismatch.outcome.kind == ResultKind.CONTENT_MISMATCH
    assert mismatch.outcome.expected == '{"result":3}\n'
    assert mismatch.outcome.actual == '{"result":6}\n'


@pytest.mark.skipif(sys.platform != "linux", reason="needs byte-oriented file names")
def test_repo_root_with_non_utf8_name(tmp_path: Path):
    """A work tree whose path is not valid UTF-8 still resolves."""
    root = tmp_path / os.fsdecode(b"repo-\xff")
    root.mkdir()
    _git(root, "init", "-q")
    path = root / "case.json"
    path.write_bytes(b"1\n")
    _git(root, "add", "case.json")

    assert GitIndex().get_staged_content(path) == b"1\n"
