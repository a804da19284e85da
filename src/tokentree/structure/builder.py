"""
Document tree building for tokentree.

This module converts a raw nested token document into a tree of `GroupNode`
and `TokenNode` objects, propagating inherited ``$type`` values and extracting
references as it goes.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from tokentree.core.path_utils import build_path, node_name
from tokentree.core.tree_node import GroupNode, TokenNode
from tokentree.core.types import (
    DESCRIPTION_KEY,
    EXTENSIONS_KEY,
    TYPE_KEY,
    VALUE_KEY,
    TokenDocument,
    is_metadata_key,
    is_token,
)
from tokentree.references import collect_references

logger = logging.getLogger(__name__)


@dataclass
class BuildWarning:
    """A document entry that was skipped because it is neither token nor group."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class BuildResult:
    """Root of the built tree plus any non-fatal warnings collected on the way."""

    root: GroupNode
    warnings: list[BuildWarning] = field(default_factory=list)


class TreeBuilder:
    """Builder turning a raw token document into a typed node tree.

    Responsibilities:
    - Classify every non-``$`` entry as a token (has ``$value``) or a group
    - Propagate group ``$type`` to descendants that do not declare their own
    - Extract local and cross-file references from token values
    - Record ambiguous entries as warnings and skip them

    The input document is never mutated; token values on the tree are copies.
    """

    def __init__(self, document: TokenDocument):
        self._document = document
        self._warnings: list[BuildWarning] = []

    @property
    def warnings(self) -> list[BuildWarning]:
        return list(self._warnings)

    def build(self) -> BuildResult:
        """Build the tree.

        Returns:
            BuildResult with the root group (path ``""``) and collected warnings.
        """
        self._warnings = []
        root = GroupNode(path="", name=node_name(""))
        if not isinstance(self._document, dict):
            self._warn("", f"document root must be a mapping, got {type(self._document).__name__}")
            return BuildResult(root=root, warnings=self.warnings)

        # Work list of (raw group mapping, group node, inherited type)
        pending: list[tuple[dict[str, Any], GroupNode, str | None]] = [
            (self._document, root, None)
        ]
        while pending:
            raw_group, group, inherited_type = pending.pop()
            group_type = self._process_group_metadata(raw_group, group, inherited_type)
            subgroups = []
            for key, value in raw_group.items():
                if is_metadata_key(key):
                    continue
                path = build_path(group.path, key)
                if is_token(value):
                    group.add_child(self._create_token_node(key, path, value, group_type))
                elif isinstance(value, dict):
                    child = GroupNode(path=path, name=key)
                    group.add_child(child)
                    subgroups.append((value, child, group_type))
                else:
                    self._warn(
                        path,
                        f"entry is neither a token nor a group ({type(value).__name__}); skipped",
                    )
            pending.extend(reversed(subgroups))

        logger.debug(
            "Built token tree with %d top-level entries and %d warnings",
            len(root.children),
            len(self._warnings),
        )
        return BuildResult(root=root, warnings=self.warnings)

    def _process_group_metadata(
        self, raw_group: dict[str, Any], group: GroupNode, inherited_type: str | None
    ) -> str | None:
        """Copy group metadata onto the node and return the type its children inherit."""
        own_type = raw_group.get(TYPE_KEY)
        if own_type is not None and not isinstance(own_type, str):
            self._warn(group.path, f"group $type must be a string, got {type(own_type).__name__}")
            own_type = None
        group.group_type = own_type or inherited_type
        group.metadata = self._extract_metadata(raw_group)
        return group.group_type

    def _create_token_node(
        self, name: str, path: str, raw_token: dict[str, Any], inherited_type: str | None
    ) -> TokenNode:
        """Create a token node, extracting its references.

        Params:
            name: Key of the token within its group
            path: Canonical path of the token
            raw_token: Token mapping containing ``$value``
            inherited_type: Type inherited from the enclosing groups

        Returns:
            TokenNode with references extracted and initial resolution state set
        """
        value = copy.deepcopy(raw_token[VALUE_KEY])
        scan = collect_references(value)

        own_type = raw_token.get(TYPE_KEY)
        token_type = own_type if isinstance(own_type, str) else inherited_type

        resolved = not scan.local and not scan.external
        return TokenNode(
            path=path,
            name=name,
            metadata=self._extract_metadata(raw_token),
            token_type=token_type,
            value=value,
            references=scan.local,
            raw_references=scan.raw_local,
            external_references=scan.external,
            resolved=resolved,
            resolved_value=copy.deepcopy(value) if resolved else None,
        )

    @staticmethod
    def _extract_metadata(raw: dict[str, Any]) -> dict[str, Any]:
        metadata: dict[str, Any] = {}
        if DESCRIPTION_KEY in raw:
            metadata["description"] = raw[DESCRIPTION_KEY]
        if EXTENSIONS_KEY in raw:
            metadata["extensions"] = copy.deepcopy(raw[EXTENSIONS_KEY])
        return metadata

    def _warn(self, path: str, message: str) -> None:
        warning = BuildWarning(path=path, message=message)
        self._warnings.append(warning)
        logger.warning("Skipping token document entry %s", warning)


def build_tree(document: TokenDocument) -> GroupNode:
    """
    Build a token tree from a raw document.

    Params:
        document: Nested token document

    Returns:
        Root GroupNode; warnings are logged and available via `TreeBuilder`
    """
    return TreeBuilder(document).build().root
