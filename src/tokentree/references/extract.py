"""
Reference recognition and normalization.

Two reference syntaxes are supported and both normalize to a canonical
dot-path:

- Brace form: a string that is exactly ``{color.brand.primary}``. Strings that
  mix literal text and braces (``"calc({a} + 1px)"``) are not references.
- Pointer form: ``{"$ref": "#/color/brand/primary/$value"}``; the trailing
  ``/$value`` is dropped and slashes become dots.

References whose target lives in another file (relative paths, ``file://``
URIs, ``http(s)://`` URLs) are recognized here but resolved by the project
layer.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from tokentree.core.types import PATH_SEPARATOR, REF_KEY, VALUE_KEY
from tokentree.exceptions import InvalidReferenceError

BRACE_REFERENCE_PATTERN = re.compile(r"^\{([^}]+)\}$")

POINTER_PREFIX = "#/"
URL_PREFIXES = ("http://", "https://", "file://")


def extract_reference(raw: str) -> str | None:
    """
    Extract the path from a whole-string brace reference.

    Params:
        raw: Candidate string value

    Returns:
        Text between the braces, or None when the string is not exactly one reference

    Examples:
        "{color.primary}" -> "color.primary"
        "calc({space.base} * 2)" -> None
    """
    if not isinstance(raw, str):
        return None
    match = BRACE_REFERENCE_PATTERN.match(raw)
    return match.group(1) if match else None


def format_reference(path: str) -> str:
    """Render a canonical path in brace form."""
    return f"{{{path}}}"


def is_pointer_object(value: Any) -> bool:
    """Check for a ``{"$ref": "..."}`` structural pointer object."""
    return isinstance(value, dict) and isinstance(value.get(REF_KEY), str)


def has_references(value: Any) -> bool:
    """
    Check whether a value contains a reference anywhere within it.

    Scans strings, lists, composite mappings and pointer objects recursively.
    Intended for validation and linting; extraction uses
    `extract_references_from_value`.

    Params:
        value: Any token value

    Returns:
        True if at least one brace reference or pointer object is present
    """
    if isinstance(value, str):
        return extract_reference(value) is not None
    if isinstance(value, list):
        return any(has_references(item) for item in value)
    if isinstance(value, dict):
        if is_pointer_object(value):
            return True
        return any(has_references(item) for item in value.values())
    return False


def normalize_reference(ref: str) -> str:
    """
    Normalize any supported reference spelling to a canonical dot-path.

    Handles:
        - brace form: "{a.b}" -> "a.b"
        - pointer form: "#/a/b/$value" -> "a.b"
        - file-qualified forms: "base.json#/a/b" or "base.json#a.b" -> "a.b"
        - already-dotted paths are returned unchanged

    Params:
        ref: Reference string in any supported spelling

    Returns:
        Canonical dot-path. Normalizing a canonical path is a no-op.
    """
    normalized = ref
    inner = extract_reference(normalized)
    if inner is not None:
        normalized = inner

    if POINTER_PREFIX in normalized:
        normalized = normalized[normalized.index(POINTER_PREFIX):]
    elif "#" in normalized:
        normalized = normalized.split("#", 1)[1]

    if normalized.startswith(POINTER_PREFIX):
        segments = normalized[len(POINTER_PREFIX):].split("/")
        if segments and segments[-1] == VALUE_KEY:
            segments = segments[:-1]
        return PATH_SEPARATOR.join(segment for segment in segments if segment)

    return normalized


def parse_pointer(ref: str) -> list[str]:
    """
    Split a structural pointer into path segments.

    Params:
        ref: Pointer such as "#/color/primary/$value", optionally file-qualified

    Returns:
        Path segments with the trailing "$value" removed

    Raises:
        InvalidReferenceError: If the string is not a pointer or has empty segments
    """
    if POINTER_PREFIX not in ref:
        raise InvalidReferenceError(ref, "structural pointers must contain '#/'")

    body = ref[ref.index(POINTER_PREFIX) + len(POINTER_PREFIX):]
    segments = body.split("/")
    if segments and segments[-1] == VALUE_KEY:
        segments = segments[:-1]
    if not segments or any(not segment for segment in segments):
        raise InvalidReferenceError(ref, "pointer has an empty path segment")
    return segments


def is_cross_file_reference(ref: str) -> bool:
    """
    Classify a reference as pointing into another file.

    A reference is cross-file when, after removing braces, it is an absolute URL
    or contains a path separator outside of a same-document ``#/`` pointer.

    Params:
        ref: Raw reference string

    Returns:
        True for cross-file references
    """
    inner = extract_reference(ref)
    candidate = inner if inner is not None else ref
    if candidate.startswith(URL_PREFIXES):
        return True
    if candidate.startswith(POINTER_PREFIX):
        return False
    file_part = candidate.split("#", 1)[0]
    return "/" in file_part


def split_cross_file_reference(ref: str) -> tuple[str, str]:
    """
    Split a cross-file reference into its file part and canonical token path.

    Params:
        ref: Reference such as "../base.json#color.primary" or
            "https://example.com/tokens.json#/color/primary"

    Returns:
        Tuple of (file part, canonical token path); the token path is empty
        when the reference addresses a whole file
    """
    inner = extract_reference(ref)
    candidate = inner if inner is not None else ref
    if "#" not in candidate:
        return candidate, ""
    file_part, fragment = candidate.split("#", 1)
    if fragment.startswith("/"):
        fragment = normalize_reference(f"#{fragment}")
    return file_part, fragment


def classify_string_reference(value: str) -> tuple[str | None, str | None]:
    """
    Classify a string token value.

    Params:
        value: String found inside a token value

    Returns:
        Tuple of (canonical local path, raw cross-file reference); at most one is set
    """
    inner = extract_reference(value)
    if inner is not None:
        if is_cross_file_reference(value):
            return None, value
        return normalize_reference(inner), None
    # Bare strings only count when they address a token inside a JSON file
    file_part, separator, _ = value.partition("#")
    if separator and file_part.endswith(".json") and is_cross_file_reference(value):
        return None, value
    return None, None


def extract_references_from_value(value: Any) -> list[str]:
    """
    Collect the canonical path of every local reference inside a value.

    Params:
        value: Token value; composite mappings and lists are walked recursively

    Returns:
        Canonical paths in discovery order, duplicates preserved
    """
    return collect_references(value).local


@dataclass
class ReferenceScan:
    """References found in one token value, in discovery order."""

    local: list[str] = field(default_factory=list)
    raw_local: list[str] = field(default_factory=list)
    external: list[str] = field(default_factory=list)


def collect_references(value: Any) -> ReferenceScan:
    """
    Collect local and cross-file references from a value.

    Params:
        value: Token value to scan

    Returns:
        ReferenceScan with canonical local paths, the local references as
        written, and raw cross-file references
    """
    scan = ReferenceScan()
    stack = [value]
    while stack:
        current = stack.pop()
        if isinstance(current, str):
            path, cross_file = classify_string_reference(current)
            if path is not None:
                scan.local.append(path)
                scan.raw_local.append(current)
            elif cross_file is not None:
                scan.external.append(cross_file)
        elif isinstance(current, list):
            stack.extend(reversed(current))
        elif isinstance(current, dict):
            if is_pointer_object(current):
                pointer = current[REF_KEY]
                if is_cross_file_reference(pointer):
                    scan.external.append(pointer)
                else:
                    scan.local.append(normalize_reference(pointer))
                    scan.raw_local.append(pointer)
            else:
                stack.extend(reversed(list(current.values())))
    return scan


def extract_references_from_token(token: Any) -> list[str]:
    """
    Collect the canonical local references of a raw token mapping.

    Params:
        token: Raw token mapping (with ``$value``)

    Returns:
        Canonical paths referenced from the token's value; empty for non-tokens
    """
    if not isinstance(token, dict) or VALUE_KEY not in token:
        return []
    return extract_references_from_value(token[VALUE_KEY])
