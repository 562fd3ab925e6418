"""Analysis services: object store adapter, finder, resolver, recommendations."""

from .analyzer import GitSpaceAnalyzer
from .object_store import GitObjectStore

__all__ = [
    "GitSpaceAnalyzer",
    "GitObjectStore",
]
