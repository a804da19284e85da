"""
Tree building, traversal and querying for tokentree.
"""

from tokentree.structure.builder import BuildResult, BuildWarning, TreeBuilder, build_tree
from tokentree.structure.query import (
    TreeStatistics,
    find_all_tokens,
    find_dependencies,
    find_dependents,
    find_tokens_by_type,
    find_tokens_with_references,
    find_unresolved_tokens,
    get_group,
    get_statistics,
    get_token,
    tree_to_document,
)
from tokentree.structure.traversal import (
    find_all_nodes,
    find_node,
    get_ancestors,
    get_siblings,
    traverse,
    visit_groups,
    visit_tokens,
    walk,
)

__all__ = [
    "TreeBuilder",
    "BuildResult",
    "BuildWarning",
    "build_tree",
    "traverse",
    "visit_tokens",
    "visit_groups",
    "walk",
    "find_node",
    "find_all_nodes",
    "get_ancestors",
    "get_siblings",
    "get_token",
    "get_group",
    "find_all_tokens",
    "find_tokens_by_type",
    "find_tokens_with_references",
    "find_unresolved_tokens",
    "find_dependencies",
    "find_dependents",
    "TreeStatistics",
    "get_statistics",
    "tree_to_document",
]
