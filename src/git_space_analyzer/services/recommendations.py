"""Cleanup recommendations derived from the cross-referenced large files."""

from typing import Iterable, List, Sequence

from ..models import (
    BranchSummary,
    LargeFile,
    Recommendation,
    RecommendationCategory,
    Severity,
)
from ..utils.formatting import MEBIBYTE

VERY_LARGE_FILE_BYTES = 10 * MEBIBYTE

BINARY_ARTIFACT_EXTENSIONS = (
    "jar",
    "war",
    "ear",
    "zip",
    "tar",
    "gz",
    "exe",
    "dll",
    "so",
    "dylib",
    "a",
    "lib",
)
_BINARY_SUFFIXES = tuple(f".{ext}" for ext in BINARY_ARTIFACT_EXTENSIONS)


def is_binary_artifact(path: str) -> bool:
    """Case-insensitive suffix match against known build artifact extensions."""
    return path.lower().endswith(_BINARY_SUFFIXES)


def _total_size(files: Iterable[LargeFile]) -> int:
    return sum(file.size for file in files)


def generate_recommendations(
    large_files: Sequence[LargeFile],
    branches: Sequence[BranchSummary] = (),
) -> List[Recommendation]:
    """Apply the cleanup heuristics in their fixed order.

    Order: files missing from the primary branch, files over 10 MiB,
    then likely binary artifacts. A heuristic matching no file emits
    nothing. Savings are exact byte sums of the matching files.

    Args:
        large_files: Cross-referenced large files
        branches: Branch summaries of the same run

    Returns:
        Recommendations in emission order
    """
    recommendations: List[Recommendation] = []

    off_primary = [file for file in large_files if not file.is_on_primary_branch]
    if off_primary:
        recommendations.append(
            Recommendation(
                category=RecommendationCategory.OVERSIZED_HISTORICAL,
                severity=Severity.HIGH,
                description=(
                    f"{len(off_primary)} large files exist only in non-main branches"
                ),
                estimated_savings_bytes=_total_size(off_primary),
                is_actionable=True,
                suggested_action=(
                    "Consider removing these files from historical commits "
                    "using git filter-repo or BFG Repo-Cleaner"
                ),
            )
        )

    very_large = [file for file in large_files if file.size > VERY_LARGE_FILE_BYTES]
    if very_large:
        recommendations.append(
            Recommendation(
                category=RecommendationCategory.VERY_LARGE_FILE,
                severity=Severity.HIGH,
                description=f"{len(very_large)} very large files (>10MB) found",
                estimated_savings_bytes=_total_size(very_large),
                is_actionable=True,
                suggested_action=(
                    "Consider using Git LFS for these files or removing them "
                    "if no longer needed"
                ),
            )
        )

    artifacts = [file for file in large_files if is_binary_artifact(file.path)]
    if artifacts:
        recommendations.append(
            Recommendation(
                category=RecommendationCategory.BINARY_ARTIFACT,
                severity=Severity.MEDIUM,
                description=f"{len(artifacts)} potential binary artifacts found",
                estimated_savings_bytes=_total_size(artifacts),
                is_actionable=True,
                suggested_action=(
                    "Review if these build artifacts should be in version control"
                ),
            )
        )

    return recommendations
