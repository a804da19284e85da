"""
Traversal helpers for token trees.

Visitors return ``False`` to stop a traversal early; any other return value
(including ``None``) continues it.
"""

from collections.abc import Callable
from typing import Literal

from tokentree.core.tree_node import AnyNode, GroupNode, TokenNode

TraversalOrder = Literal["pre", "post"]
NodeVisitor = Callable[[AnyNode], bool | None]


def traverse(node: AnyNode, visitor: NodeVisitor, order: TraversalOrder = "pre") -> bool:
    """
    Walk a tree depth-first, calling ``visitor`` on every node.

    Params:
        node: Node to start from
        visitor: Callback; returning False stops the whole traversal
        order: "pre" visits a group before its children, "post" after them

    Returns:
        False if the traversal was stopped by the visitor, True otherwise
    """
    # Stack entries: (node, children already expanded)
    stack: list[tuple[AnyNode, bool]] = [(node, False)]
    while stack:
        current, expanded = stack.pop()
        if expanded:
            if visitor(current) is False:
                return False
            continue

        if order == "pre" and visitor(current) is False:
            return False

        if order == "post":
            stack.append((current, True))
        if isinstance(current, GroupNode):
            stack.extend((child, False) for child in reversed(list(current.children.values())))

    return True


def visit_tokens(node: AnyNode, visitor: Callable[[TokenNode], bool | None]) -> None:
    """Visit only token nodes, in pre-order."""
    traverse(node, lambda n: visitor(n) if isinstance(n, TokenNode) else True)


def visit_groups(node: AnyNode, visitor: Callable[[GroupNode], bool | None]) -> None:
    """Visit only group nodes, in pre-order."""
    traverse(node, lambda n: visitor(n) if isinstance(n, GroupNode) else True)


def walk(
    node: AnyNode,
    enter: NodeVisitor | None = None,
    leave: NodeVisitor | None = None,
) -> None:
    """
    Walk a tree with enter and leave callbacks.

    Returning False from ``enter`` skips the node's subtree (and its ``leave``
    call) without stopping the rest of the walk.

    Params:
        node: Node to start from
        enter: Called before a node's children
        leave: Called after a node's children
    """
    if enter is not None and enter(node) is False:
        return
    if isinstance(node, GroupNode):
        for child in node.children.values():
            walk(child, enter, leave)
    if leave is not None:
        leave(node)


def find_node(root: AnyNode, path_or_predicate: str | Callable[[AnyNode], bool]) -> AnyNode | None:
    """
    Find the first node matching a canonical path or a predicate.

    Params:
        root: Node to search from
        path_or_predicate: Canonical path, or a callable returning True for a match

    Returns:
        Matching node, or None
    """
    if isinstance(path_or_predicate, str):
        path = path_or_predicate

        def predicate(candidate: AnyNode) -> bool:
            return candidate.path == path

    else:
        predicate = path_or_predicate

    found: list[AnyNode] = []

    def check(candidate: AnyNode) -> bool:
        if predicate(candidate):
            found.append(candidate)
            return False
        return True

    traverse(root, check)
    return found[0] if found else None


def find_all_nodes(root: AnyNode, predicate: Callable[[AnyNode], bool]) -> list[AnyNode]:
    """Return every node matching ``predicate`` in pre-order."""
    nodes: list[AnyNode] = []
    traverse(root, lambda n: nodes.append(n) if predicate(n) else None)
    return nodes


def get_ancestors(node: AnyNode) -> list[GroupNode]:
    """Return the enclosing groups of a node, nearest first."""
    ancestors = []
    current = node.parent
    while current is not None:
        ancestors.append(current)
        current = current.parent
    return ancestors


def get_siblings(node: AnyNode) -> list[AnyNode]:
    """Return the other children of a node's parent."""
    if node.parent is None:
        return []
    return [child for name, child in node.parent.children.items() if name != node.name]
