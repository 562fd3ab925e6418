"""
Data model for repository space analysis.

All values are immutable dataclasses without behavior beyond
serialization, so that any renderer (terminal, HTML, editor tree view)
can consume an AnalysisReport directly.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .utils.formatting import format_bytes


class ObjectKind(str, Enum):
    """Type of an object in the git object store."""

    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"
    TAG = "tag"


class RecommendationCategory(str, Enum):
    OVERSIZED_HISTORICAL = "oversized-historical"
    VERY_LARGE_FILE = "very-large-file"
    BINARY_ARTIFACT = "binary-artifact"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ObjectRecord:
    """One object reported by the object store scan."""

    id: str
    kind: ObjectKind
    size: int


@dataclass(frozen=True)
class TreeEntry:
    """A blob reachable from a commit's tree, with its path at that commit."""

    object_id: str
    path: str


@dataclass(frozen=True)
class BranchRef:
    """A branch name as listed by the store."""

    name: str
    is_remote: bool


@dataclass(frozen=True)
class BranchHead:
    """A local branch and the commit its head ref points at."""

    name: str
    commit_id: str


@dataclass(frozen=True)
class LargeFile:
    """
    A blob at or above the size threshold, with its cross-references.

    Attributes:
        id: Content address of the blob
        size: Size in bytes
        formatted_size: Human-readable size
        path: Path on the primary branch, on a referencing branch, or a
            `<deleted-file-...>` placeholder when no branch head holds it
        referencing_branches: Local branches whose head tree contains the blob
        referencing_commits: Head commits of those branches, in the same order
        is_on_primary_branch: Whether the primary branch is among
            referencing_branches
    """

    id: str
    size: int
    formatted_size: str
    path: str
    referencing_branches: Tuple[str, ...] = ()
    referencing_commits: Tuple[str, ...] = ()
    is_on_primary_branch: bool = False


@dataclass(frozen=True)
class BranchSummary:
    """
    Per-branch entry of the report.

    Size figures and the branch's large-file list are not yet computed:
    size_bytes and unique_size_bytes stay None, large_files stays empty
    and large_files_computed is False.
    """

    name: str
    is_remote: bool
    last_commit_date: Optional[datetime] = None
    large_files: Tuple[LargeFile, ...] = ()
    size_bytes: Optional[int] = None
    unique_size_bytes: Optional[int] = None
    large_files_computed: bool = False


@dataclass(frozen=True)
class Recommendation:
    category: RecommendationCategory
    severity: Severity
    description: str
    estimated_savings_bytes: int
    is_actionable: bool
    suggested_action: Optional[str] = None

    @property
    def estimated_savings_formatted(self) -> str:
        return format_bytes(self.estimated_savings_bytes)


@dataclass(frozen=True)
class AnalysisWarning:
    """A recoverable failure recorded while analyzing one item."""

    scope: str  # "branch", "candidate", "primary-branch", "timestamp"
    subject: str
    message: str


@dataclass(frozen=True)
class AnalysisSummary:
    """
    Aggregate figures of one analysis run.

    oldest_large_file is not yet computed and is always None.
    branches_with_large_files is None unless some branch summary has
    its large files computed.
    """

    total_files: int
    total_branches: int
    largest_file: Optional[LargeFile]
    branches_with_large_files: Optional[int]
    estimated_cleanup_savings: int
    oldest_large_file: Optional[LargeFile] = None

    @property
    def estimated_cleanup_savings_formatted(self) -> str:
        return format_bytes(self.estimated_cleanup_savings)


@dataclass(frozen=True)
class AnalysisReport:
    """Complete result of analyzing one repository."""

    repository_path: str
    total_size: int
    primary_branch: str
    large_files: Tuple[LargeFile, ...]
    branches: Tuple[BranchSummary, ...]
    recommendations: Tuple[Recommendation, ...]
    summary: AnalysisSummary
    warnings: Tuple[AnalysisWarning, ...] = field(default=())

    @property
    def total_size_formatted(self) -> str:
        return format_bytes(self.total_size)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report into JSON-serializable primitives."""
        data = asdict(self, dict_factory=_plain_dict)
        data["total_size_formatted"] = self.total_size_formatted
        data["summary"][
            "estimated_cleanup_savings_formatted"
        ] = self.summary.estimated_cleanup_savings_formatted
        for rec_dict, rec in zip(data["recommendations"], self.recommendations):
            rec_dict["estimated_savings_formatted"] = rec.estimated_savings_formatted
        return data


def _plain_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, tuple):
        return [_plain_value(item) for item in value]
    return value


def _plain_dict(items: List[Tuple[str, Any]]) -> Dict[str, Any]:
    return {key: _plain_value(value) for key, value in items}
