"""
Query helpers over built token trees.

Lookups by path, type and reference state, dependency walks over the
references recorded on token nodes, tree statistics, and conversion of a tree
back into a nested document.
"""

import copy
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from tokentree.core.path_utils import split_segments
from tokentree.core.tree_node import AnyNode, GroupNode, TokenNode
from tokentree.core.types import (
    DESCRIPTION_KEY,
    EXTENSIONS_KEY,
    TYPE_KEY,
    VALUE_KEY,
    TokenDocument,
)
from tokentree.structure.traversal import find_all_nodes, traverse


def _lookup(root: GroupNode, path: str) -> AnyNode | None:
    """Descend from the root one segment at a time."""
    current: AnyNode = root
    for segment in split_segments(path):
        if not isinstance(current, GroupNode) or segment not in current.children:
            return None
        current = current.children[segment]
    return current


def get_token(root: GroupNode, path: str) -> TokenNode | None:
    """Return the token at ``path``, or None if absent or a group."""
    node = _lookup(root, path)
    return node if isinstance(node, TokenNode) else None


def get_group(root: GroupNode, path: str) -> GroupNode | None:
    """Return the group at ``path``; the empty path returns the root."""
    node = _lookup(root, path)
    return node if isinstance(node, GroupNode) else None


def find_all_tokens(root: AnyNode) -> list[TokenNode]:
    return find_all_nodes(root, lambda n: isinstance(n, TokenNode))


def find_tokens_by_type(root: AnyNode, token_type: str) -> list[TokenNode]:
    return find_all_nodes(
        root, lambda n: isinstance(n, TokenNode) and n.token_type == token_type
    )


def find_tokens_with_references(root: AnyNode) -> list[TokenNode]:
    return find_all_nodes(root, lambda n: isinstance(n, TokenNode) and n.has_references)


def find_unresolved_tokens(root: AnyNode) -> list[TokenNode]:
    return find_all_nodes(root, lambda n: isinstance(n, TokenNode) and not n.resolved)


def find_dependencies(root: GroupNode, path: str) -> list[str]:
    """
    Collect every token path that ``path`` depends on, directly or transitively.

    Params:
        root: Tree to search
        path: Canonical path of the starting token

    Returns:
        Dependency paths in breadth-first discovery order, excluding ``path``
        itself. References to missing tokens are included but not followed.
    """
    seen: set[str] = {path}
    ordered: list[str] = []
    queue = deque([path])
    while queue:
        token = get_token(root, queue.popleft())
        if token is None:
            continue
        for reference in token.references:
            if reference not in seen:
                seen.add(reference)
                ordered.append(reference)
                queue.append(reference)
    return ordered


def find_dependents(root: GroupNode, path: str) -> list[str]:
    """Return the paths of tokens that reference ``path`` directly."""
    return [token.path for token in find_all_tokens(root) if path in token.references]


@dataclass
class TreeStatistics:
    """Summary counts over a token tree."""

    token_count: int = 0
    group_count: int = 0
    tokens_by_type: dict[str, int] = field(default_factory=dict)
    max_depth: int = 0
    tokens_with_references: int = 0
    unresolved_tokens: int = 0

    @property
    def total_nodes(self) -> int:
        return self.token_count + self.group_count


def get_statistics(root: GroupNode) -> TreeStatistics:
    """
    Count tokens, groups and reference state across a tree.

    The root group itself is not counted; depth is measured in path segments.

    Params:
        root: Tree to summarize

    Returns:
        TreeStatistics for the tree
    """
    stats = TreeStatistics()

    def count(node: AnyNode) -> None:
        if node is root:
            return
        stats.max_depth = max(stats.max_depth, len(split_segments(node.path)))
        if isinstance(node, GroupNode):
            stats.group_count += 1
            return
        stats.token_count += 1
        type_key = node.token_type or "untyped"
        stats.tokens_by_type[type_key] = stats.tokens_by_type.get(type_key, 0) + 1
        if node.has_references:
            stats.tokens_with_references += 1
        if not node.resolved:
            stats.unresolved_tokens += 1

    traverse(root, count)
    return stats


def _node_metadata(node: AnyNode) -> dict[str, Any]:
    entries: dict[str, Any] = {}
    if node.description is not None:
        entries[DESCRIPTION_KEY] = node.description
    if node.extensions is not None:
        entries[EXTENSIONS_KEY] = copy.deepcopy(node.extensions)
    return entries


def tree_to_document(root: GroupNode, use_resolved: bool = False) -> TokenDocument:
    """
    Rebuild a nested token document from a tree.

    Group ``$type`` is written only where a group declares a type different
    from its parent's, so inherited types are not repeated on every level.
    Token ``$type`` is written only where it differs from the enclosing group's.

    Params:
        root: Tree to convert
        use_resolved: Emit ``resolved_value`` for resolved tokens instead of the raw value

    Returns:
        New document; values are deep copies of the tree's values
    """
    document: TokenDocument = {}
    # Work list of (group node, output mapping)
    pending: list[tuple[GroupNode, dict[str, Any]]] = [(root, document)]
    while pending:
        group, output = pending.pop()
        parent_type = group.parent.group_type if group.parent is not None else None
        if group.group_type is not None and group.group_type != parent_type:
            output[TYPE_KEY] = group.group_type
        output.update(_node_metadata(group))

        for name, child in group.children.items():
            if isinstance(child, GroupNode):
                child_output: dict[str, Any] = {}
                output[name] = child_output
                pending.append((child, child_output))
                continue

            value = child.resolved_value if use_resolved and child.resolved else child.value
            token: dict[str, Any] = {VALUE_KEY: copy.deepcopy(value)}
            if child.token_type is not None and child.token_type != group.group_type:
                token[TYPE_KEY] = child.token_type
            token.update(_node_metadata(child))
            output[name] = token

    return document
