"""
Core type definitions for tokentree.

This module contains the type aliases and reserved key names shared by the
builder, resolver and merger so that every layer agrees on what a token
document looks like.
"""

from typing import Any

TokenScalar = str | int | float | bool | None

TokenValue = TokenScalar | list | dict

TokenDocument = dict[str, Any]

Adjacency = dict[str, set[str]]

# Reserved sigil and the metadata keys built on it
SIGIL = "$"
VALUE_KEY = "$value"
TYPE_KEY = "$type"
DESCRIPTION_KEY = "$description"
EXTENSIONS_KEY = "$extensions"
REF_KEY = "$ref"

PATH_SEPARATOR = "."


def is_metadata_key(key: str) -> bool:
    """Return True for keys carrying metadata rather than child names."""
    return key.startswith(SIGIL)


def is_token(obj: Any) -> bool:
    """Check whether a document entry is a token (a mapping with ``$value``)."""
    return isinstance(obj, dict) and VALUE_KEY in obj


def is_group(obj: Any) -> bool:
    """Check whether a document entry is a group (a mapping without ``$value``)."""
    return isinstance(obj, dict) and VALUE_KEY not in obj
