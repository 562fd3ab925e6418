"""
Git Space Analyzer - find oversized blobs in a git repository's object store.

Scans every object in the store, cross-references large blobs against
branch heads and the primary branch, and turns the result into ranked
cleanup recommendations.
"""

__version__ = "1.0.0"
