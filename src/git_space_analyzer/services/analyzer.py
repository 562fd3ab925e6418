"""
Analysis orchestration.

GitSpaceAnalyzer sequences one analysis run: branch enumeration, the
large blob scan, cross-referencing, branch summaries, recommendations
and the final report. Each run owns its results; nothing is shared
between runs.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..config import AnalysisConfig
from ..errors import NotARepositoryError
from ..models import AnalysisReport, AnalysisSummary, AnalysisWarning, BranchSummary, LargeFile
from ..utils.git_runner import is_git_repository
from .branch_analysis import BranchAnalyzer, filter_branches
from .cross_reference import CrossReferenceResolver
from .large_object_finder import LargeObjectFinder
from .object_store import GitObjectStore
from .recommendations import generate_recommendations

logger = logging.getLogger(__name__)


def build_summary(
    large_files: Sequence[LargeFile], branches: Sequence[BranchSummary]
) -> AnalysisSummary:
    """Aggregate counts and reclaimable bytes for the report header."""
    computed = [branch for branch in branches if branch.large_files_computed]
    return AnalysisSummary(
        total_files=len(large_files),
        total_branches=len(branches),
        largest_file=large_files[0] if large_files else None,
        branches_with_large_files=(
            sum(1 for branch in computed if branch.large_files) if computed else None
        ),
        estimated_cleanup_savings=sum(
            file.size for file in large_files if not file.is_on_primary_branch
        ),
    )


class GitSpaceAnalyzer:
    """Finds oversized blobs in a repository and recommends cleanups."""

    def __init__(
        self,
        repository_path: Union[str, Path],
        config: Optional[AnalysisConfig] = None,
        store: Optional[GitObjectStore] = None,
    ):
        """Initialize the analyzer.

        Args:
            repository_path: Root directory of the git repository
            config: Effective configuration; defaults when omitted
            store: Object store adapter; a GitObjectStore over
                repository_path when omitted

        Raises:
            NotARepositoryError: If repository_path has no .git marker
        """
        self.repository_path = Path(repository_path)
        if not is_git_repository(self.repository_path):
            raise NotARepositoryError(self.repository_path)

        self.config = config or AnalysisConfig()
        self.store = store or GitObjectStore(self.repository_path, self.config)

    def analyze(self) -> AnalysisReport:
        """Run a complete analysis.

        Raises:
            BackendUnavailableError: If git cannot be run
            QueryFailedError: If a repository-wide query fails
        """
        logger.info(f"Starting analysis of {self.repository_path}")
        warnings: List[AnalysisWarning] = []

        all_branches = self.store.list_branches()
        branches = filter_branches(all_branches, self.config.include_branches)
        logger.info(f"Found {len(branches)} branches")

        candidates = LargeObjectFinder(self.store, self.config).find()

        primary_branch = self.store.resolve_primary_branch(
            [branch.name for branch in all_branches]
        )
        logger.info(f"Primary branch: {primary_branch}")

        cross_references = CrossReferenceResolver(self.store, primary_branch).resolve(
            candidates
        )
        warnings.extend(cross_references.warnings)
        large_files = cross_references.large_files
        logger.info(f"Found {len(large_files)} large files")

        branch_analysis = BranchAnalyzer(self.store).analyze(branches)
        warnings.extend(branch_analysis.warnings)

        recommendations = generate_recommendations(large_files, branch_analysis.branches)
        summary = build_summary(large_files, branch_analysis.branches)
        total_size = self.store.repository_footprint_bytes()

        return AnalysisReport(
            repository_path=str(self.repository_path),
            total_size=total_size,
            primary_branch=primary_branch,
            large_files=tuple(large_files),
            branches=tuple(branch_analysis.branches),
            recommendations=tuple(recommendations),
            summary=summary,
            warnings=tuple(warnings),
        )
