"""
Tests for GitObjectStore query parsing.

git is never executed: run_git_command and stream_git_lines are patched
in the adapter module and answer with canned output.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from git_space_analyzer.config import AnalysisConfig
from git_space_analyzer.errors import BackendUnavailableError, QueryFailedError
from git_space_analyzer.models import BranchHead, ObjectKind, TreeEntry
from git_space_analyzer.services.object_store import GitObjectStore

RUN = "git_space_analyzer.services.object_store.run_git_command"
STREAM = "git_space_analyzer.services.object_store.stream_git_lines"


def _responder(responses):
    """Build a run_git_command replacement keyed by the git subcommand args."""

    def _run(cmd, cwd, timeout=None, max_output_bytes=None):
        key = tuple(cmd[1:])
        if key not in responses:
            raise QueryFailedError(cmd, 128, "fatal: unexpected command")
        value = responses[key]
        if isinstance(value, Exception):
            raise value
        return value

    return _run


@pytest.fixture
def store(tmp_path):
    return GitObjectStore(tmp_path, AnalysisConfig(git_timeout=30, max_output_bytes=4096))


LOCAL = ("for-each-ref", "--format=%(refname) %(symref)", "refs/heads/")
REMOTE = ("for-each-ref", "--format=%(refname) %(symref)", "refs/remotes/")
SYMREF = ("symbolic-ref", "refs/remotes/origin/HEAD")


class TestListBranches:
    def test_local_before_remote_without_duplicates(self, store):
        responses = {
            LOCAL: "refs/heads/main \nrefs/heads/feature/x \n",
            REMOTE: (
                "refs/remotes/origin/main \n"
                "refs/remotes/origin/feature/x \n"
                "refs/remotes/main \n"
            ),
        }
        with patch(RUN, side_effect=_responder(responses)):
            branches = store.list_branches()

        assert [(b.name, b.is_remote) for b in branches] == [
            ("main", False),
            ("feature/x", False),
            ("origin/main", True),
            ("origin/feature/x", True),
        ]

    def test_symbolic_remote_heads_are_skipped(self, store):
        responses = {
            LOCAL: "",
            REMOTE: (
                "refs/remotes/origin/HEAD refs/remotes/origin/dev\n"
                "refs/remotes/origin/dev \n"
                "refs/remotes/upstream/HEAD refs/remotes/upstream/main\n"
                "refs/remotes/upstream/main \n"
            ),
        }
        with patch(RUN, side_effect=_responder(responses)):
            branches = store.list_branches()

        assert [(b.name, b.is_remote) for b in branches] == [
            ("origin/dev", True),
            ("upstream/main", True),
        ]

    def test_only_branch_namespaces_are_listed(self, store):
        responses = {
            LOCAL: "refs/heads/main \nrefs/tags/v1 \n",
            REMOTE: "",
        }
        with patch(RUN, side_effect=_responder(responses)):
            assert [b.name for b in store.list_branches()] == ["main"]

    def test_query_failure_propagates(self, store):
        with patch(RUN, side_effect=BackendUnavailableError("git missing")):
            with pytest.raises(BackendUnavailableError):
                store.list_branches()

    def test_queries_pass_configured_limits(self, store, tmp_path):
        with patch(RUN, side_effect=_responder({LOCAL: "", REMOTE: ""})) as mock_run:
            store.list_branches()

        _, kwargs = mock_run.call_args
        assert kwargs["cwd"] == tmp_path
        assert kwargs["timeout"] == 30
        assert kwargs["max_output_bytes"] == 4096


class TestListBranchHeads:
    def test_parses_for_each_ref_output(self, store):
        output = "1111 refs/heads/main\n2222 refs/heads/feature/x\n"
        key = ("for-each-ref", "--format=%(objectname) %(refname)", "refs/heads/")
        with patch(RUN, side_effect=_responder({key: output})):
            heads = store.list_branch_heads()

        assert heads == [
            BranchHead(name="main", commit_id="1111"),
            BranchHead(name="feature/x", commit_id="2222"),
        ]

    def test_empty_repository_has_no_heads(self, store):
        key = ("for-each-ref", "--format=%(objectname) %(refname)", "refs/heads/")
        with patch(RUN, side_effect=_responder({key: ""})):
            assert store.list_branch_heads() == []


class TestStreamAllObjects:
    def test_parses_batch_check_lines(self, store):
        lines = [
            "aaa blob 2048",
            "bbb tree 120",
            "ccc commit 250",
            "ddd tag 140",
            "garbage line",
            "eee blob notanumber",
        ]
        with patch(STREAM, return_value=iter(lines)) as mock_stream:
            records = list(store.stream_all_objects())

        assert [(r.id, r.kind, r.size) for r in records] == [
            ("aaa", ObjectKind.BLOB, 2048),
            ("bbb", ObjectKind.TREE, 120),
            ("ccc", ObjectKind.COMMIT, 250),
            ("ddd", ObjectKind.TAG, 140),
        ]
        cmd = mock_stream.call_args[0][0]
        assert cmd == ["git", "cat-file", "--batch-check", "--batch-all-objects"]


class TestListTree:
    def test_parses_nul_separated_entries(self, store):
        output = (
            "100644 blob aaa\tREADME.md\0"
            "100755 blob bbb\tbin/run tool.sh\0"
            "160000 commit ccc\tvendor/submodule\0"
            "100644 blob ddd\tdocs/notes\twith tab.txt"
        )
        with patch(RUN, side_effect=_responder({("ls-tree", "-r", "-z", "c1"): output})):
            entries = store.list_tree("c1")

        assert entries == [
            TreeEntry(object_id="aaa", path="README.md"),
            TreeEntry(object_id="bbb", path="bin/run tool.sh"),
            TreeEntry(object_id="ddd", path="docs/notes\twith tab.txt"),
        ]


class TestLastCommitDate:
    def test_parses_strict_iso_date(self, store):
        key = ("log", "-1", "--format=%cI", "main", "--")
        with patch(RUN, side_effect=_responder({key: "2024-03-05T08:15:00+02:00"})):
            date = store.last_commit_date("main")

        assert date == datetime(2024, 3, 5, 8, 15, tzinfo=timezone(timedelta(hours=2)))


class TestResolvePrimaryBranch:
    def test_uses_symbolic_remote_head(self, store):
        with patch(RUN, side_effect=_responder({SYMREF: "refs/remotes/origin/trunk"})):
            assert store.resolve_primary_branch(["main"]) == "trunk"

    def test_falls_back_to_develop(self, store):
        with patch(RUN, side_effect=_responder({})):
            assert store.resolve_primary_branch(["develop", "feature/x"]) == "develop"

    def test_falls_back_to_literal_main(self, store):
        with patch(RUN, side_effect=_responder({})):
            assert store.resolve_primary_branch(["feature/x"]) == "main"

    def test_priority_order_main_master_develop(self, store):
        with patch(RUN, side_effect=_responder({})):
            assert store.resolve_primary_branch(["develop", "origin/master"]) == "master"
            assert store.resolve_primary_branch(["master", "origin/main"]) == "main"

    def test_lists_branches_when_names_not_given(self, store):
        responses = {
            LOCAL: "refs/heads/feature/x ",
            REMOTE: "refs/remotes/origin/master ",
        }
        with patch(RUN, side_effect=_responder(responses)):
            assert store.resolve_primary_branch() == "master"

    def test_never_raises_when_git_is_unavailable(self, store):
        with patch(RUN, side_effect=BackendUnavailableError("git missing")):
            assert store.resolve_primary_branch() == "main"


class TestRepositoryFootprint:
    def test_sums_loose_and_packed_kib(self, store):
        output = (
            "count: 12\nsize: 48\nin-pack: 300\npacks: 1\n"
            "size-pack: 1024\nprune-packable: 0\ngarbage: 0\nsize-garbage: 0"
        )
        with patch(RUN, side_effect=_responder({("count-objects", "-v"): output})):
            assert store.repository_footprint_bytes() == (48 + 1024) * 1024

    def test_returns_zero_on_failure(self, store):
        with patch(RUN, side_effect=_responder({})):
            assert store.repository_footprint_bytes() == 0
