"""
Tree node classes for tokentree.

A built document is a tree of `GroupNode` containers holding `TokenNode`
leaves. Ownership runs strictly from parent to children through the
``children`` mapping; ``parent`` is a lookup-only back-reference and is kept
out of ``repr`` and equality so that the tree never compares or prints
recursively.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from tokentree.core.types import TokenValue


@dataclass(eq=False)
class TreeNode:
    """Common attributes of every node in a token tree."""

    path: str
    name: str
    parent: Optional["GroupNode"] = field(default=None, repr=False, compare=False)
    metadata: dict[str, Any] = field(default_factory=dict)

    kind = "node"

    @property
    def description(self) -> str | None:
        return self.metadata.get("description")

    @property
    def extensions(self) -> dict[str, Any] | None:
        return self.metadata.get("extensions")

    @property
    def depth(self) -> int:
        """Number of ancestors between this node and the root."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth


@dataclass(eq=False)
class TokenNode(TreeNode):
    """
    Leaf node carrying a token value.

    Params:
        token_type: Own ``$type`` or the type inherited from the nearest group
        value: Raw ``$value`` as written in the document
        references: Canonical dot-paths referenced from the value
        raw_references: Reference strings exactly as written
        external_references: Cross-file references, kept raw for the project layer
        resolved: True once every reference has been replaced
        resolved_value: Value with references substituted, when resolved
    """

    token_type: str | None = None
    value: TokenValue = None
    references: list[str] = field(default_factory=list)
    raw_references: list[str] = field(default_factory=list)
    external_references: list[str] = field(default_factory=list)
    resolved: bool = False
    resolved_value: TokenValue = None

    kind = "token"

    @property
    def has_references(self) -> bool:
        return bool(self.references or self.external_references)


@dataclass(eq=False)
class GroupNode(TreeNode):
    """Interior node holding named child tokens and groups."""

    group_type: str | None = None
    children: dict[str, Union["GroupNode", TokenNode]] = field(default_factory=dict)

    kind = "group"

    @property
    def tokens(self) -> dict[str, TokenNode]:
        return {
            name: child
            for name, child in self.children.items()
            if isinstance(child, TokenNode)
        }

    @property
    def groups(self) -> dict[str, "GroupNode"]:
        return {
            name: child
            for name, child in self.children.items()
            if isinstance(child, GroupNode)
        }

    @property
    def is_root(self) -> bool:
        return self.parent is None and self.path == ""

    def add_child(self, child: Union["GroupNode", TokenNode]) -> None:
        """Attach a child node, setting its parent back-reference."""
        child.parent = self
        self.children[child.name] = child


AnyNode = GroupNode | TokenNode
