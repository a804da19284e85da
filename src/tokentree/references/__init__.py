"""
Reference recognition for tokentree.

Pure functions that recognize the brace and pointer reference syntaxes and
normalize them to canonical dot-paths.
"""

from tokentree.references.extract import (
    BRACE_REFERENCE_PATTERN,
    ReferenceScan,
    collect_references,
    extract_reference,
    extract_references_from_token,
    extract_references_from_value,
    format_reference,
    has_references,
    is_cross_file_reference,
    is_pointer_object,
    normalize_reference,
    parse_pointer,
    split_cross_file_reference,
)

__all__ = [
    "BRACE_REFERENCE_PATTERN",
    "ReferenceScan",
    "collect_references",
    "extract_reference",
    "extract_references_from_token",
    "extract_references_from_value",
    "format_reference",
    "has_references",
    "is_cross_file_reference",
    "is_pointer_object",
    "normalize_reference",
    "parse_pointer",
    "split_cross_file_reference",
]
