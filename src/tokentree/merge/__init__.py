"""
Document merging for tokentree.
"""

from tokentree.merge.merge import (
    ConflictKind,
    DocumentMerger,
    MergeConflict,
    MergeOptions,
    MergeResult,
    merge_all,
    merge_documents,
    safe_merge,
)

__all__ = [
    "ConflictKind",
    "DocumentMerger",
    "MergeConflict",
    "MergeOptions",
    "MergeResult",
    "merge_all",
    "merge_documents",
    "safe_merge",
]
