"""
Core tokentree components.

This package provides the fundamental building blocks shared by every other
layer: type aliases, tree node classes, and canonical path helpers.
"""

from tokentree.core.path_utils import (
    PathIndex,
    build_path,
    build_path_index,
    node_name,
    split_segments,
    validate_path_format,
)
from tokentree.core.tree_node import AnyNode, GroupNode, TokenNode, TreeNode
from tokentree.core.types import (
    Adjacency,
    TokenDocument,
    TokenScalar,
    TokenValue,
    is_group,
    is_metadata_key,
    is_token,
)

__all__ = [
    "TreeNode",
    "TokenNode",
    "GroupNode",
    "AnyNode",
    "TokenDocument",
    "TokenValue",
    "TokenScalar",
    "Adjacency",
    "is_token",
    "is_group",
    "is_metadata_key",
    "PathIndex",
    "build_path",
    "build_path_index",
    "node_name",
    "split_segments",
    "validate_path_format",
]
