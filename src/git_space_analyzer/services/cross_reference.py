"""
Cross-reference large blobs against branch heads.

Each local branch head's tree is listed exactly once and turned into an
object id -> path index. Every candidate blob is then resolved with
dictionary probes, so the number of git queries grows with the number
of branches, not with branches times candidates.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..errors import GitSpaceAnalyzerError
from ..models import AnalysisWarning, LargeFile, ObjectRecord, TreeEntry
from ..utils.formatting import format_bytes
from .object_store import GitObjectStore

logger = logging.getLogger(__name__)

DELETED_PATH_TEMPLATE = "<deleted-file-{short_id}>"


@dataclass
class BranchIndex:
    """Blob ids reachable from one branch head, mapped to their first path."""

    name: str
    commit_id: str
    paths: Dict[str, str]


@dataclass
class CrossReferenceResult:
    """Resolved large files plus the recoverable failures met on the way."""

    large_files: List[LargeFile] = field(default_factory=list)
    warnings: List[AnalysisWarning] = field(default_factory=list)


def index_tree(entries: List[TreeEntry]) -> Dict[str, str]:
    """Map each blob id to the first path it appears under."""
    paths: Dict[str, str] = {}
    for entry in entries:
        paths.setdefault(entry.object_id, entry.path)
    return paths


def placeholder_path(object_id: str) -> str:
    return DELETED_PATH_TEMPLATE.format(short_id=object_id[:8])


class CrossReferenceResolver:
    """Determines which branches hold each large blob and under which path."""

    def __init__(self, store: GitObjectStore, primary_branch: str):
        """Initialize the resolver.

        Args:
            store: Object store adapter for the repository
            primary_branch: Name of the repository's primary branch
        """
        self.store = store
        self.primary_branch = primary_branch

    def build_branch_indexes(self, warnings: List[AnalysisWarning]) -> List[BranchIndex]:
        """List each local branch head's tree once.

        A head whose tree cannot be listed is skipped and recorded as a
        warning. Failing to enumerate the heads at all is fatal.
        """
        indexes: List[BranchIndex] = []
        for head in self.store.list_branch_heads():
            try:
                entries = self.store.list_tree(head.commit_id)
            except GitSpaceAnalyzerError as e:
                message = f"Could not list tree of branch {head.name}: {e}"
                logger.warning(message)
                warnings.append(
                    AnalysisWarning(scope="branch", subject=head.name, message=message)
                )
                continue
            indexes.append(
                BranchIndex(
                    name=head.name, commit_id=head.commit_id, paths=index_tree(entries)
                )
            )
        logger.info(f"Indexed {len(indexes)} branch heads")
        return indexes

    def _primary_paths(
        self, indexes: List[BranchIndex], warnings: List[AnalysisWarning]
    ) -> Optional[Dict[str, str]]:
        for index in indexes:
            if index.name == self.primary_branch:
                return index.paths

        # Primary branch may exist only as a remote-tracking ref
        revisions = [
            self.primary_branch,
            f"{self.store.config.remote_prefix}{self.primary_branch}",
        ]
        last_error: Optional[GitSpaceAnalyzerError] = None
        for revision in revisions:
            try:
                return index_tree(self.store.list_tree(revision))
            except GitSpaceAnalyzerError as e:
                last_error = e

        message = (
            f"Could not list tree of primary branch {self.primary_branch}: {last_error}"
        )
        logger.warning(message)
        warnings.append(
            AnalysisWarning(
                scope="primary-branch", subject=self.primary_branch, message=message
            )
        )
        return None

    def _resolve_candidate(
        self,
        candidate: ObjectRecord,
        indexes: List[BranchIndex],
        primary_paths: Optional[Dict[str, str]],
    ) -> LargeFile:
        branches: List[str] = []
        commits: List[str] = []
        branch_path: Optional[str] = None
        for index in indexes:
            path = index.paths.get(candidate.id)
            if path is None:
                continue
            branches.append(index.name)
            commits.append(index.commit_id)
            if branch_path is None:
                branch_path = path

        path = primary_paths.get(candidate.id) if primary_paths else None
        if path is None:
            path = branch_path or placeholder_path(candidate.id)

        return LargeFile(
            id=candidate.id,
            size=candidate.size,
            formatted_size=format_bytes(candidate.size),
            path=path,
            referencing_branches=tuple(branches),
            referencing_commits=tuple(commits),
            is_on_primary_branch=self.primary_branch in branches,
        )

    def resolve(self, candidates: List[ObjectRecord]) -> CrossReferenceResult:
        """Resolve every candidate, keeping the input order.

        A candidate that cannot be resolved is dropped with a warning.
        """
        result = CrossReferenceResult()
        if not candidates:
            return result

        indexes = self.build_branch_indexes(result.warnings)
        primary_paths = self._primary_paths(indexes, result.warnings)

        for candidate in candidates:
            try:
                result.large_files.append(
                    self._resolve_candidate(candidate, indexes, primary_paths)
                )
            except Exception as e:
                message = f"Could not analyze object {candidate.id}: {e}"
                logger.warning(message)
                result.warnings.append(
                    AnalysisWarning(scope="candidate", subject=candidate.id, message=message)
                )
        return result
