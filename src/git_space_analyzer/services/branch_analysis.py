"""Per-branch summaries for the analysis report."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import GitSpaceAnalyzerError
from ..models import AnalysisWarning, BranchRef, BranchSummary
from .object_store import GitObjectStore

logger = logging.getLogger(__name__)


@dataclass
class BranchAnalysisResult:
    branches: List[BranchSummary] = field(default_factory=list)
    warnings: List[AnalysisWarning] = field(default_factory=list)


def filter_branches(
    branches: List[BranchRef], include_branches: Optional[List[str]]
) -> List[BranchRef]:
    """Keep only the requested branches; None keeps all of them."""
    if include_branches is None:
        return list(branches)
    wanted = set(include_branches)
    return [branch for branch in branches if branch.name in wanted]


class BranchAnalyzer:
    """Builds a BranchSummary for every listed branch.

    Only the remote flag and the last commit date are computed. Branch
    sizes and per-branch large-file lists are left as not computed.
    """

    def __init__(self, store: GitObjectStore):
        self.store = store

    def analyze(self, branches: List[BranchRef]) -> BranchAnalysisResult:
        result = BranchAnalysisResult()
        for branch in branches:
            last_commit_date = None
            try:
                last_commit_date = self.store.last_commit_date(branch.name)
            except (GitSpaceAnalyzerError, ValueError) as e:
                # Remote-only or unreadable branches have no accessible date
                message = f"Could not read last commit date of {branch.name}: {e}"
                logger.warning(message)
                result.warnings.append(
                    AnalysisWarning(scope="timestamp", subject=branch.name, message=message)
                )

            result.branches.append(
                BranchSummary(
                    name=branch.name,
                    is_remote=branch.is_remote,
                    last_commit_date=last_commit_date,
                )
            )
        return result
