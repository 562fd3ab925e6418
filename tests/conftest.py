"""
Shared pytest fixtures for Git Space Analyzer tests.

Provides an in-memory object store that answers the same queries as
GitObjectStore without running git, plus helpers for building small
repository snapshots.
"""

import shutil
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Set

import pytest

from git_space_analyzer.config import AnalysisConfig
from git_space_analyzer.errors import QueryFailedError
from git_space_analyzer.models import (
    BranchHead,
    BranchRef,
    ObjectKind,
    ObjectRecord,
    TreeEntry,
)
from git_space_analyzer.services.object_store import GitObjectStore

MIB = 1024 * 1024


class FakeObjectStore(GitObjectStore):
    """GitObjectStore answering from in-memory data.

    Only the symbolic-ref query reaches _run(), so primary branch
    resolution runs through the real fallback logic.
    """

    def __init__(
        self,
        repository_path: Path,
        config: Optional[AnalysisConfig] = None,
        objects: Sequence[ObjectRecord] = (),
        branches: Sequence[str] = (),
        heads: Optional[Dict[str, str]] = None,
        trees: Optional[Dict[str, List[TreeEntry]]] = None,
        remote_head: Optional[str] = None,
        dates: Optional[Dict[str, str]] = None,
        failing_trees: Optional[Set[str]] = None,
        footprint: int = 0,
    ):
        super().__init__(repository_path, config or AnalysisConfig())
        self.objects = list(objects)
        self.branch_names = list(branches)
        self.heads = dict(heads or {})
        self.trees = dict(trees or {})
        self.remote_head = remote_head
        self.dates = dict(dates or {})
        self.failing_trees = set(failing_trees or ())
        self.footprint = footprint
        self.list_tree_calls: List[str] = []

    def _run(self, *args: str) -> str:
        if args[0] == "symbolic-ref" and self.remote_head is not None:
            return f"refs/remotes/{self.config.remote_name}/{self.remote_head}"
        raise QueryFailedError(["git", *args], 128, "fatal: not available")

    def list_branches(self) -> List[BranchRef]:
        return [
            BranchRef(name=name, is_remote=name.startswith(self.config.remote_prefix))
            for name in self.branch_names
        ]

    def list_branch_heads(self) -> List[BranchHead]:
        return [
            BranchHead(name=name, commit_id=commit)
            for name, commit in self.heads.items()
        ]

    def stream_all_objects(self) -> Iterator[ObjectRecord]:
        return iter(self.objects)

    def list_tree(self, commit_id: str) -> List[TreeEntry]:
        self.list_tree_calls.append(commit_id)
        if commit_id in self.failing_trees or commit_id not in self.trees:
            raise QueryFailedError(["git", "ls-tree", "-r", "-z", commit_id], 128)
        return list(self.trees[commit_id])

    def last_commit_date(self, branch: str):
        if branch not in self.dates:
            raise QueryFailedError(["git", "log", "-1", branch], 128)
        return datetime.fromisoformat(self.dates[branch])

    def repository_footprint_bytes(self) -> int:
        return self.footprint


def blob(object_id: str, size: int) -> ObjectRecord:
    return ObjectRecord(id=object_id, kind=ObjectKind.BLOB, size=size)


@pytest.fixture
def repo_dir(tmp_path) -> Path:
    """A directory carrying a .git marker."""
    repository = tmp_path / "repo"
    (repository / ".git").mkdir(parents=True)
    return repository


@pytest.fixture
def make_store(repo_dir):
    """Factory for FakeObjectStore instances rooted at repo_dir."""

    def _make(**kwargs) -> FakeObjectStore:
        return FakeObjectStore(repo_dir, **kwargs)

    return _make


@pytest.fixture
def make_blob():
    return blob


@pytest.fixture
def feature_branch_store(make_store):
    """One 15 MiB blob reachable only from feature/x; main holds a small file."""
    return make_store(
        objects=[
            blob("a" * 40, 15 * MIB),
            blob("b" * 40, 100),
            ObjectRecord(id="c" * 40, kind=ObjectKind.TREE, size=20 * MIB),
        ],
        branches=["main", "feature/x"],
        heads={"feature/x": "f" * 40, "main": "e" * 40},
        trees={
            "f" * 40: [
                TreeEntry(object_id="a" * 40, path="big.bin"),
                TreeEntry(object_id="b" * 40, path="README.md"),
            ],
            "e" * 40: [TreeEntry(object_id="b" * 40, path="README.md")],
        },
        dates={
            "main": "2024-01-02T10:00:00+00:00",
            "feature/x": "2024-01-03T10:00:00+00:00",
        },
        footprint=16 * MIB,
    )


def _git(repository: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repository,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path):
    """An empty git repository on branch main with a committer identity."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    repository = tmp_path / "real-repo"
    repository.mkdir()
    _git(repository, "init", "-q")
    _git(repository, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repository, "config", "user.email", "tests@example.com")
    _git(repository, "config", "user.name", "Tests")
    _git(repository, "config", "commit.gpgsign", "false")
    return repository


@pytest.fixture
def git():
    """Run a git command inside a repository and return its stdout."""
    return _git
