"""
Layered merging of token documents.

Later documents override earlier ones. Groups merge key by key, tokens merge
field by field, and composite token values merge key by key. Arrays and
scalars are always replaced. Shape and type disagreements never raise: the
overlay wins, and `safe_merge` additionally reports each disagreement as a
`MergeConflict`.
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from attrs import frozen
from pydantic import BaseModel, Field

from tokentree.core.path_utils import build_path
from tokentree.core.types import (
    EXTENSIONS_KEY,
    TYPE_KEY,
    VALUE_KEY,
    TokenDocument,
    is_group,
    is_metadata_key,
    is_token,
)

logger = logging.getLogger(__name__)


class MergeOptions(BaseModel):
    """
    Options controlling a merge.

    Params:
        max_depth: Nesting level at which subtrees stop merging and the
            overlay subtree replaces the base subtree
    """

    max_depth: int = Field(64, ge=1)


class ConflictKind(Enum):
    type_mismatch = "type-mismatch"
    value_conflict = "value-conflict"
    group_token_conflict = "group-token-conflict"


@frozen
class MergeConflict:
    path: str
    kind: ConflictKind
    base_value: Any
    overlay_value: Any
    message: str
    winner: str = "overlay"


@dataclass
class MergeResult:
    document: TokenDocument
    conflicts: list[MergeConflict] = field(default_factory=list)


def _value_shape(value: Any) -> str:
    if isinstance(value, dict):
        return "composite"
    if isinstance(value, list):
        return "list"
    return "scalar"


class DocumentMerger:
    """Merges an overlay document onto a base document.

    Neither input is mutated; every value in the output is a copy. Conflicts
    are collected on every run and exposed through `conflicts`.
    """

    def __init__(self, options: MergeOptions | None = None):
        self._options = options or MergeOptions()
        self.conflicts: list[MergeConflict] = []

    def merge(self, base: Any, overlay: Any) -> Any:
        self.conflicts = []
        merged = self._merge_nodes(base, overlay, "", None, 0)
        if self.conflicts:
            logger.debug("Merge resolved %d conflicts in favour of the overlay", len(self.conflicts))
        return merged

    def _merge_nodes(
        self, base: Any, overlay: Any, path: str, parent_type: str | None, depth: int
    ) -> Any:
        if depth >= self._options.max_depth:
            return copy.deepcopy(overlay)

        if is_token(base) and is_token(overlay):
            return self._merge_tokens(base, overlay, path, parent_type, depth)
        if is_group(base) and is_group(overlay):
            return self._merge_groups(base, overlay, path, parent_type, depth)

        if isinstance(base, dict) and isinstance(overlay, dict):
            base_kind = "token" if is_token(base) else "group"
            overlay_kind = "token" if is_token(overlay) else "group"
            self._record(
                path,
                ConflictKind.group_token_conflict,
                base,
                overlay,
                f"Cannot merge {base_kind} with {overlay_kind}",
            )
        return copy.deepcopy(overlay)

    def _merge_groups(
        self,
        base: dict[str, Any],
        overlay: dict[str, Any],
        path: str,
        parent_type: str | None,
        depth: int,
    ) -> dict[str, Any]:
        base_type, overlay_type = base.get(TYPE_KEY), overlay.get(TYPE_KEY)
        if base_type and overlay_type and base_type != overlay_type:
            self._record(
                path,
                ConflictKind.type_mismatch,
                base_type,
                overlay_type,
                f"Group type mismatch: '{base_type}' vs '{overlay_type}'",
            )
        effective_type = overlay_type or base_type or parent_type
        merged: dict[str, Any] = {}
        for key, base_value in base.items():
            if key not in overlay:
                merged[key] = copy.deepcopy(base_value)
            elif key == EXTENSIONS_KEY:
                merged[key] = self._merge_objects(base_value, overlay[key], depth + 1)
            elif is_metadata_key(key):
                merged[key] = copy.deepcopy(overlay[key])
            else:
                merged[key] = self._merge_nodes(
                    base_value, overlay[key], build_path(path, key), effective_type, depth + 1
                )
        for key, overlay_value in overlay.items():
            if key not in base:
                merged[key] = copy.deepcopy(overlay_value)
        return merged

    def _merge_tokens(
        self,
        base: dict[str, Any],
        overlay: dict[str, Any],
        path: str,
        parent_type: str | None,
        depth: int,
    ) -> dict[str, Any]:
        base_type = base.get(TYPE_KEY) or parent_type
        overlay_type = overlay.get(TYPE_KEY) or parent_type
        if base_type and overlay_type and base_type != overlay_type:
            self._record(
                path,
                ConflictKind.type_mismatch,
                base_type,
                overlay_type,
                f"Type mismatch: '{base_type}' vs '{overlay_type}'",
            )

        base_value, overlay_value = base[VALUE_KEY], overlay[VALUE_KEY]
        if _value_shape(base_value) != _value_shape(overlay_value):
            self._record(
                path,
                ConflictKind.value_conflict,
                base_value,
                overlay_value,
                f"Cannot merge {_value_shape(base_value)} value with {_value_shape(overlay_value)} value",
            )

        merged = copy.deepcopy(base)
        for key, value in overlay.items():
            if key in (VALUE_KEY, EXTENSIONS_KEY) and key in base:
                merged[key] = self._merge_objects(base[key], value, depth + 1)
            else:
                merged[key] = copy.deepcopy(value)
        return merged

    def _merge_objects(self, base: Any, overlay: Any, depth: int) -> Any:
        """Key-wise merge of plain mappings; anything else is replaced by the overlay."""
        if depth >= self._options.max_depth:
            return copy.deepcopy(overlay)
        if not isinstance(base, dict) or not isinstance(overlay, dict):
            return copy.deepcopy(overlay)
        merged = copy.deepcopy(base)
        for key, value in overlay.items():
            if key in base:
                merged[key] = self._merge_objects(base[key], value, depth + 1)
            else:
                merged[key] = copy.deepcopy(value)
        return merged

    def _record(
        self, path: str, kind: ConflictKind, base_value: Any, overlay_value: Any, message: str
    ) -> None:
        self.conflicts.append(
            MergeConflict(
                path=path,
                kind=kind,
                base_value=copy.deepcopy(base_value),
                overlay_value=copy.deepcopy(overlay_value),
                message=message,
            )
        )


def merge_documents(
    base: TokenDocument, overlay: TokenDocument, options: MergeOptions | None = None
) -> TokenDocument:
    """
    Merge ``overlay`` onto ``base``, the overlay winning every disagreement.

    Params:
        base: Lower-precedence document
        overlay: Higher-precedence document
        options: Merge options

    Returns:
        New merged document
    """
    return DocumentMerger(options).merge(base, overlay)


def merge_all(documents: list[TokenDocument], options: MergeOptions | None = None) -> TokenDocument:
    """
    Left-fold a list of documents with `merge_documents`; later documents win.

    Params:
        documents: Documents in precedence order, lowest first
        options: Merge options

    Returns:
        Merged document; empty for an empty list
    """
    merged: TokenDocument = {}
    for document in documents:
        merged = merge_documents(merged, document, options)
    return merged


def safe_merge(
    base: TokenDocument, overlay: TokenDocument, options: MergeOptions | None = None
) -> MergeResult:
    """
    Merge like `merge_documents` and report every conflict that was resolved.

    Params:
        base: Lower-precedence document
        overlay: Higher-precedence document
        options: Merge options

    Returns:
        MergeResult with the merged document and the conflicts found
    """
    merger = DocumentMerger(options)
    document = merger.merge(base, overlay)
    return MergeResult(document=document, conflicts=list(merger.conflicts))
