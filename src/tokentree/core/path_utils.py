"""
Canonical path utilities for tokentree.

Token and group paths are dot-separated strings such as ``color.brand.primary``.
This module holds the helpers that build and split those paths and the
`PathIndex`, a flat lookup table over a raw document that the resolver uses for
constant-time target lookups.
"""

from dataclasses import dataclass, field
from typing import Any

from tokentree.core.types import (
    PATH_SEPARATOR,
    TokenDocument,
    is_metadata_key,
    is_token,
)
from tokentree.exceptions import PathValidationError


def build_path(parent_path: str, key: str) -> str:
    """Join a parent path and a child key; the root path is the empty string."""
    return f"{parent_path}{PATH_SEPARATOR}{key}" if parent_path else key


def split_segments(path: str) -> list[str]:
    """Split a canonical path into its segments; the root path has none."""
    return path.split(PATH_SEPARATOR) if path else []


def node_name(path: str) -> str:
    """Return the last segment of a path, or ``root`` for the empty path."""
    return path.rsplit(PATH_SEPARATOR, 1)[-1] if path else "root"


def validate_path_format(path: str) -> None:
    """
    Validate that a string is a well-formed canonical token path.

    Params:
        path: Path to check

    Raises:
        PathValidationError: If the path is empty or has empty or sigil-prefixed segments
    """
    if not path:
        raise PathValidationError(path, "path cannot be empty")
    for segment in path.split(PATH_SEPARATOR):
        if not segment:
            raise PathValidationError(path, "path contains an empty segment")
        if is_metadata_key(segment):
            raise PathValidationError(
                path, f"segment '{segment}' uses the reserved '$' prefix"
            )


@dataclass
class PathIndex:
    """
    Flat lookup table over a token document.

    Params:
        tokens: Token path -> raw token mapping
        groups: Paths of every non-root group
    """

    tokens: dict[str, dict[str, Any]] = field(default_factory=dict)
    groups: set[str] = field(default_factory=set)

    def get_token(self, path: str) -> dict[str, Any] | None:
        return self.tokens.get(path)

    def has_path(self, path: str) -> bool:
        return path in self.tokens or path in self.groups


def build_path_index(document: TokenDocument) -> PathIndex:
    """
    Index every token and group of a document by canonical path.

    Params:
        document: Raw nested token document

    Returns:
        PathIndex over the document; the document itself is not copied
    """
    index = PathIndex()
    # Iterative walk; group nesting depth is unbounded
    stack: list[tuple[Any, str]] = [(document, "")]
    while stack:
        node, path = stack.pop()
        if not isinstance(node, dict):
            continue

        if is_token(node):
            index.tokens[path] = node
            continue

        if path:
            index.groups.add(path)

        children = [
            (value, build_path(path, key))
            for key, value in node.items()
            if not is_metadata_key(key)
        ]
        stack.extend(reversed(children))

    return index
