"""Large object discovery over a full scan of the object store."""

import heapq
import logging
from typing import Iterable, List

from ..config import AnalysisConfig
from ..models import ObjectKind, ObjectRecord
from .object_store import GitObjectStore

logger = logging.getLogger(__name__)


def select_large_blobs(
    objects: Iterable[ObjectRecord], threshold: int, max_results: int
) -> List[ObjectRecord]:
    """Pick the largest blobs whose size is at least threshold.

    Result is ordered by size descending; equal sizes keep the order in
    which they were seen. At most max_results records are returned.
    """
    qualifying = (
        record
        for record in objects
        if record.kind is ObjectKind.BLOB and record.size >= threshold
    )
    # nlargest is stable and equivalent to sorted(..., reverse=True)[:n]
    return heapq.nlargest(max_results, qualifying, key=lambda record: record.size)


class LargeObjectFinder:
    """Finds blobs above the configured size threshold."""

    def __init__(self, store: GitObjectStore, config: AnalysisConfig):
        self.store = store
        self.config = config

    def find(self) -> List[ObjectRecord]:
        """Scan every object in the store once and return the large blobs."""
        candidates = select_large_blobs(
            self.store.stream_all_objects(),
            threshold=self.config.threshold,
            max_results=self.config.max_results,
        )
        logger.info(
            f"Found {len(candidates)} blobs of at least {self.config.threshold} bytes"
        )
        return candidates
