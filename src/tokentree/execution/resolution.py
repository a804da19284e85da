"""
Reference resolution for token documents.

The resolver walks a raw document and replaces every reference with the
resolved value of its target, producing a new document. Failures (missing
targets, cycles, over-long chains, unparseable pointers) are collected as
`ResolutionError` entries instead of being raised, so one run always yields a
complete report.
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from tokentree.core.path_utils import (
    PathIndex,
    build_path,
    build_path_index,
    validate_path_format,
)
from tokentree.core.tree_node import GroupNode
from tokentree.core.types import (
    PATH_SEPARATOR,
    REF_KEY,
    VALUE_KEY,
    TokenDocument,
    is_metadata_key,
)
from tokentree.exceptions import InvalidReferenceError, PathValidationError
from tokentree.references.extract import (
    POINTER_PREFIX,
    classify_string_reference,
    is_cross_file_reference,
    is_pointer_object,
    normalize_reference,
    parse_pointer,
)
from tokentree.structure.builder import build_tree
from tokentree.structure.query import find_all_tokens, tree_to_document

logger = logging.getLogger(__name__)


class ResolveOptions(BaseModel):
    """
    Options controlling a resolution run.

    Params:
        preserve_on_error: Keep the original reference when it cannot be
            resolved; when False the value becomes None
        max_depth: Number of reference hops at which a chain fails with a
            depth error
        partial: Report success when the only errors are missing references
    """

    preserve_on_error: bool = True
    max_depth: int = Field(10, ge=1)
    partial: bool = False


class ErrorKind(Enum):
    missing = "missing"
    circular = "circular"
    depth = "depth"
    invalid = "invalid"


@dataclass
class ResolutionError:
    """
    One reference that could not be resolved.

    Params:
        kind: Failure category
        path: Token whose value holds the broken reference; for depth
            errors, the token being resolved
        message: Human-readable description
        reference: Reference as written
        chain: Reference chain leading to the failure (circular and depth errors)
        file_path: Source file, for project-level resolution
        target_file: Referenced file, for cross-file failures
    """

    kind: ErrorKind
    path: str
    message: str
    reference: str | None = None
    chain: list[str] = field(default_factory=list)
    file_path: str | None = None
    target_file: str | None = None

    def __str__(self) -> str:
        location = f"{self.file_path}:{self.path}" if self.file_path else self.path
        return f"[{self.kind.value}] {location}: {self.message}"


@dataclass
class ResolveResult:
    """
    Outcome of resolving a document.

    Params:
        tokens: New document with references replaced
        errors: Every failure encountered, one entry per broken reference
        success: True without errors, or in partial mode with only missing references
        resolved: Token path -> final value, for tokens that resolved completely
        chains: Token path -> longest reference chain followed from it
    """

    tokens: TokenDocument
    errors: list[ResolutionError] = field(default_factory=list)
    success: bool = True
    resolved: dict[str, Any] = field(default_factory=dict)
    chains: dict[str, list[str]] = field(default_factory=dict)

    def errors_of_kind(self, kind: ErrorKind) -> list[ResolutionError]:
        return [error for error in self.errors if error.kind == kind]


class ReferenceResolver:
    """Single-use resolver over one raw document.

    The path index is built once per run. Each reference expansion carries its
    own chain, which starts with the token being resolved. Only resolutions
    that produced no errors are memoized, so a failure deep inside one chain
    does not leak into shorter chains through the same tokens.

    A broken reference is reported once, against the token whose value holds
    it. Every token above it in a chain keeps its own reference as written.
    Depth errors depend on where a chain starts and are reported against the
    token being resolved.
    """

    def __init__(self, document: TokenDocument, options: ResolveOptions):
        self._document = document
        self._options = options
        self._index: PathIndex = build_path_index(document)
        self._errors: list[ResolutionError] = []
        self._reported: set[tuple[ErrorKind, str, str]] = set()
        self._resolved: dict[str, Any] = {}
        self._chains: dict[str, list[str]] = {}
        self._memo: dict[str, Any] = {}
        self._memo_chains: dict[str, list[str]] = {}

    def resolve(self) -> ResolveResult:
        tokens = self._resolve_document()
        only_missing = all(error.kind == ErrorKind.missing for error in self._errors)
        success = not self._errors or (self._options.partial and only_missing)

        logger.debug(
            "Resolved %d tokens with %d errors", len(self._resolved), len(self._errors)
        )
        return ResolveResult(
            tokens=tokens,
            errors=list(self._errors),
            success=success,
            resolved=self._resolved,
            chains=self._chains,
        )

    def _resolve_document(self) -> TokenDocument:
        if not isinstance(self._document, dict):
            return copy.deepcopy(self._document)

        output: TokenDocument = {}
        # Work list of (raw mapping, output mapping, path)
        pending: list[tuple[dict[str, Any], dict[str, Any], str]] = [
            (self._document, output, "")
        ]
        while pending:
            raw, target, path = pending.pop()
            children = []
            for key, value in raw.items():
                if key == VALUE_KEY:
                    target[key] = self._resolve_token(path, value)
                elif is_metadata_key(key) or not isinstance(value, dict):
                    target[key] = copy.deepcopy(value)
                else:
                    child: dict[str, Any] = {}
                    target[key] = child
                    children.append((value, child, build_path(path, key)))
            # Reversed so entries are resolved in document order
            pending.extend(reversed(children))
        return output

    def _resolve_token(self, path: str, raw_value: Any) -> Any:
        """Resolve the value of the token at ``path`` for the output document."""
        if path in self._memo:
            value = copy.deepcopy(self._memo[path])
            chain = self._memo_chains[path]
            ok = True
        else:
            value, tail, ok = self._resolve_value(raw_value, [path])
            chain = [path, *tail]
            if ok:
                self._memo[path] = copy.deepcopy(value)
                self._memo_chains[path] = chain

        if len(chain) > 1:
            self._chains[path] = chain
        if ok:
            self._resolved[path] = copy.deepcopy(value)
        return value

    def _resolve_value(self, value: Any, chain: list[str]) -> tuple[Any, list[str], bool]:
        """
        Resolve every reference inside a value.

        Params:
            value: Raw value (scalar, list, composite mapping or pointer object)
            chain: Paths of the tokens currently being expanded, outermost first

        Returns:
            Tuple of (resolved value, longest chain followed below ``chain``,
            whether every reference inside the value resolved)
        """
        if isinstance(value, str):
            return self._resolve_string(value, chain)

        if isinstance(value, list):
            items = []
            longest: list[str] = []
            all_ok = True
            for item in value:
                resolved, tail, ok = self._resolve_value(item, chain)
                items.append(resolved)
                longest = max(longest, tail, key=len)
                all_ok = all_ok and ok
            return items, longest, all_ok

        if isinstance(value, dict):
            if is_pointer_object(value):
                return self._resolve_pointer(value, chain)
            fields = {}
            longest = []
            all_ok = True
            for key, item in value.items():
                fields[key], tail, ok = self._resolve_value(item, chain)
                longest = max(longest, tail, key=len)
                all_ok = all_ok and ok
            return fields, longest, all_ok

        return value, [], True

    def _resolve_string(self, value: str, chain: list[str]) -> tuple[Any, list[str], bool]:
        local_path, cross_file = classify_string_reference(value)
        if cross_file is not None:
            return self._cross_file_failure(value, value, chain), [], False
        if local_path is None:
            return value, [], True
        return self._follow(local_path, value, value, chain)

    def _resolve_pointer(
        self, pointer_object: dict[str, Any], chain: list[str]
    ) -> tuple[Any, list[str], bool]:
        pointer = pointer_object[REF_KEY]
        if is_cross_file_reference(pointer):
            return self._cross_file_failure(pointer, pointer_object, chain), [], False
        try:
            if POINTER_PREFIX in pointer or not pointer.strip():
                target = PATH_SEPARATOR.join(parse_pointer(pointer))
            else:
                target = normalize_reference(pointer)
        except InvalidReferenceError as error:
            return self._fail(ErrorKind.invalid, chain[-1], pointer, pointer_object, str(error)), [], False
        return self._follow(target, pointer, pointer_object, chain)

    def _follow(
        self, target: str, reference: str, original: Any, chain: list[str]
    ) -> tuple[Any, list[str], bool]:
        """
        Follow one reference to its target token.

        Params:
            target: Canonical path of the referenced token
            reference: Reference as written, for error reporting
            original: Value to keep in place if the reference fails
            chain: Active chain; its last entry holds the reference

        Returns:
            Tuple of (resolved value, chain followed starting at ``target``,
            whether the target resolved)
        """
        holder = chain[-1]
        if target in chain:
            cycle = [*chain, target]
            message = f"Circular reference detected: {' -> '.join(cycle)}"
            return self._fail(ErrorKind.circular, holder, reference, original, message, cycle), [target], False

        try:
            validate_path_format(target)
        except PathValidationError as error:
            return self._fail(ErrorKind.invalid, holder, reference, original, str(error)), [], False

        token = self._index.get_token(target)
        if token is None:
            if self._index.has_path(target):
                message = f"Reference to group {{{target}}}; only tokens can be referenced"
            else:
                message = f"Reference to non-existent token: {{{target}}}"
            return self._fail(ErrorKind.missing, holder, reference, original, message), [], False

        # len(chain) counts hops up to and including this one
        hops_below = len(self._memo_chains[target]) - 1 if target in self._memo else 0
        if len(chain) + hops_below >= self._options.max_depth:
            message = f"Maximum reference depth ({self._options.max_depth}) reached"
            return self._fail(
                ErrorKind.depth, chain[0], reference, original, message, [*chain, target]
            ), [target], False

        if target in self._memo:
            return copy.deepcopy(self._memo[target]), list(self._memo_chains[target]), True

        value, tail, ok = self._resolve_value(token[VALUE_KEY], [*chain, target])
        followed = [target, *tail]
        if not ok:
            return self._fallback(original), followed, False
        self._memo[target] = copy.deepcopy(value)
        self._memo_chains[target] = followed
        return value, followed, True

    def _cross_file_failure(self, reference: str, original: Any, chain: list[str]) -> Any:
        message = f"Cross-file reference {reference} cannot be resolved within a single document"
        return self._fail(ErrorKind.missing, chain[-1], reference, original, message)

    def _fallback(self, original: Any) -> Any:
        return copy.deepcopy(original) if self._options.preserve_on_error else None

    def _fail(
        self,
        kind: ErrorKind,
        path: str,
        reference: str,
        original: Any,
        message: str,
        error_chain: list[str] | None = None,
    ) -> Any:
        """Record an error against ``path`` once and return the fallback value."""
        key = (kind, path, reference)
        if key not in self._reported:
            self._reported.add(key)
            self._errors.append(
                ResolutionError(
                    kind=kind,
                    path=path,
                    message=message,
                    reference=reference,
                    chain=error_chain or [],
                )
            )
            logger.debug("Reference %s from %s failed: %s", reference, path, message)
        return self._fallback(original)


def resolve_references(
    document: TokenDocument, options: ResolveOptions | None = None, **overrides: Any
) -> ResolveResult:
    """
    Resolve every reference in a token document.

    Params:
        document: Raw nested token document; never mutated
        options: Resolution options; defaults are used when omitted
        **overrides: Individual option values applied on top of ``options``

    Returns:
        ResolveResult with the new document and any errors

    Raises:
        pydantic.ValidationError: If an override is invalid (e.g. ``max_depth=0``)
    """
    base = options.model_dump() if options is not None else {}
    effective = ResolveOptions(**{**base, **overrides})
    return ReferenceResolver(document, effective).resolve()


def resolve_tree(
    root: GroupNode, options: ResolveOptions | None = None, **overrides: Any
) -> tuple[GroupNode, ResolveResult]:
    """
    Resolve a built tree without mutating it.

    Params:
        root: Tree to resolve
        options: Resolution options
        **overrides: Individual option values applied on top of ``options``

    Returns:
        Tuple of (new tree whose tokens carry ``resolved``/``resolved_value``,
        the underlying ResolveResult)
    """
    document = tree_to_document(root)
    result = resolve_references(document, options, **overrides)

    resolved_root = build_tree(document)
    for token in find_all_tokens(resolved_root):
        if token.path in result.resolved:
            token.resolved = True
            token.resolved_value = copy.deepcopy(result.resolved[token.path])
    return resolved_root, result
