"""
Git object store adapter.

Thin query layer over the git executable: branch enumeration, a full
scan of every object in the store, recursive tree listings, primary
branch resolution and on-disk footprint. All git access of the
analysis services goes through GitObjectStore.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from ..config import AnalysisConfig
from ..errors import GitSpaceAnalyzerError
from ..models import BranchHead, BranchRef, ObjectKind, ObjectRecord, TreeEntry
from ..utils.git_runner import run_git_command, stream_git_lines

logger = logging.getLogger(__name__)

PRIMARY_BRANCH_CANDIDATES = ("main", "master", "develop")
DEFAULT_PRIMARY_BRANCH = "main"
HEADS_PREFIX = "refs/heads/"
REMOTES_PREFIX = "refs/remotes/"


class GitObjectStore:
    """Queries a git repository's refs and object database."""

    def __init__(self, repository_path: Path, config: AnalysisConfig):
        """Initialize the adapter.

        Args:
            repository_path: Root directory of the git repository
            config: Effective analysis configuration
        """
        self.repository_path = Path(repository_path)
        self.config = config

    def _run(self, *args: str) -> str:
        return run_git_command(
            ["git", *args],
            cwd=self.repository_path,
            timeout=self.config.git_timeout,
            max_output_bytes=self.config.max_output_bytes,
        )

    def _stream(self, *args: str) -> Iterator[str]:
        return stream_git_lines(
            ["git", *args],
            cwd=self.repository_path,
            timeout=self.config.git_timeout,
        )

    def _list_refs(self, namespace: str) -> List[str]:
        """Names of the concrete refs under namespace, with the namespace removed.

        Symbolic refs such as refs/remotes/<remote>/HEAD are skipped.
        """
        output = self._run("for-each-ref", "--format=%(refname) %(symref)", namespace)
        names: List[str] = []
        for line in output.splitlines():
            ref_name, _, symref = line.strip().partition(" ")
            if not ref_name.startswith(namespace) or symref:
                continue
            name = ref_name[len(namespace):]
            if name and not name.endswith("/HEAD"):
                names.append(name)
        return names

    def list_branches(self) -> List[BranchRef]:
        """List local then remote-tracking branch names without duplicates.

        Only refs under refs/heads/ and refs/remotes/ count, so a detached
        HEAD is never reported as a branch.

        Raises:
            BackendUnavailableError: If git cannot be run
            QueryFailedError: If a branch listing fails
        """
        local_names = self._list_refs(HEADS_PREFIX)
        remote_names = self._list_refs(REMOTES_PREFIX)

        seen = set()
        branches: List[BranchRef] = []
        for names, from_remote in ((local_names, False), (remote_names, True)):
            for name in names:
                if name in seen:
                    continue
                seen.add(name)
                branches.append(BranchRef(name=name, is_remote=from_remote))
        return branches

    def list_branch_heads(self) -> List[BranchHead]:
        """List every local branch with the commit its head ref points at."""
        output = self._run(
            "for-each-ref", "--format=%(objectname) %(refname)", HEADS_PREFIX
        )
        heads: List[BranchHead] = []
        for line in output.splitlines():
            commit_id, _, ref_name = line.strip().partition(" ")
            if not commit_id or not ref_name.startswith(HEADS_PREFIX):
                continue
            heads.append(
                BranchHead(name=ref_name[len(HEADS_PREFIX):], commit_id=commit_id)
            )
        return heads

    def stream_all_objects(self) -> Iterator[ObjectRecord]:
        """Yield every object in the store, reachable or not, exactly once.

        The returned iterator is single-pass; call again for a new scan.
        """
        for line in self._stream("cat-file", "--batch-check", "--batch-all-objects"):
            parts = line.split()
            if len(parts) != 3:
                logger.debug(f"Skipping unexpected cat-file line: {line!r}")
                continue
            object_id, kind, size = parts
            try:
                yield ObjectRecord(id=object_id, kind=ObjectKind(kind), size=int(size))
            except ValueError:
                logger.debug(f"Skipping unparseable object record: {line!r}")

    def list_tree(self, commit_id: str) -> List[TreeEntry]:
        """Recursively list the blobs of a commit's tree with their paths."""
        output = self._run("ls-tree", "-r", "-z", commit_id)
        entries: List[TreeEntry] = []
        for record in output.split("\0"):
            meta, tab, path = record.partition("\t")
            if not tab:
                continue
            parts = meta.split()
            # Submodule entries are commits, not blobs
            if len(parts) != 3 or parts[1] != ObjectKind.BLOB.value:
                continue
            entries.append(TreeEntry(object_id=parts[2], path=path))
        return entries

    def last_commit_date(self, branch: str) -> datetime:
        """Return the committer date of a branch's most recent commit."""
        output = self._run("log", "-1", "--format=%cI", branch, "--")
        return datetime.fromisoformat(output.strip())

    def resolve_primary_branch(
        self, branch_names: Optional[Iterable[str]] = None
    ) -> str:
        """Name the repository's primary branch. Never raises.

        Uses the remote's symbolic HEAD when it is set. Otherwise returns
        the first of main, master, develop that occurs within any branch
        name, and finally the literal "main".

        Args:
            branch_names: Branch names to search in the fallback; listed
                from the store when omitted
        """
        remote_head_ref = f"refs/remotes/{self.config.remote_name}/HEAD"
        try:
            target = self._run("symbolic-ref", remote_head_ref)
            prefix = f"refs/remotes/{self.config.remote_name}/"
            if target.startswith(prefix) and len(target) > len(prefix):
                return target[len(prefix):]
        except GitSpaceAnalyzerError as e:
            logger.debug(f"No symbolic remote HEAD, falling back: {e}")

        if branch_names is None:
            try:
                branch_names = [branch.name for branch in self.list_branches()]
            except GitSpaceAnalyzerError as e:
                logger.warning(f"Could not list branches for primary branch lookup: {e}")
                branch_names = []

        names = list(branch_names)
        for candidate in PRIMARY_BRANCH_CANDIDATES:
            if any(candidate in name for name in names):
                return candidate
        return DEFAULT_PRIMARY_BRANCH

    def repository_footprint_bytes(self) -> int:
        """Loose plus packed object storage in bytes; 0 when unavailable."""
        try:
            output = self._run("count-objects", "-v")
        except GitSpaceAnalyzerError as e:
            logger.warning(f"Could not determine repository size: {e}")
            return 0

        total = 0
        for line in output.splitlines():
            key, _, value = line.partition(":")
            if key.strip() in ("size", "size-pack"):
                try:
                    # count-objects reports KiB
                    total += int(value.strip()) * 1024
                except ValueError:
                    logger.debug(f"Ignoring unparseable count-objects line: {line!r}")
        return total
