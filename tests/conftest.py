"""
Shared test fixtures and utilities for the tokentree test suite.
"""

import pytest


def build_chain(length: int, prefix: str = "t") -> dict:
    """Build a document where token N references token N+1 and the last one is concrete.

    Usage:
        build_chain(3) -> {"t1": {"$value": "{t2}"}, "t2": {"$value": "{t3}"}, "t3": {"$value": "end"}}
    """
    document = {}
    for position in range(1, length):
        document[f"{prefix}{position}"] = {"$value": f"{{{prefix}{position + 1}}}"}
    document[f"{prefix}{length}"] = {"$value": "end"}
    return document


@pytest.fixture
def make_chain():
    return build_chain


@pytest.fixture
def color_document():
    """Small themed palette with a typed group, aliases and a composite token."""
    return {
        "color": {
            "$type": "color",
            "$description": "Brand palette",
            "base": {
                "red": {"$value": "#ff0000"},
                "blue": {"$value": "#0000ff", "$description": "Primary blue"},
            },
            "primary": {"$value": "{color.base.blue}"},
            "danger": {"$value": {"$ref": "#/color/base/red/$value"}},
        },
        "shadow": {
            "card": {
                "$type": "shadow",
                "$value": {
                    "offsetX": "0",
                    "offsetY": "2px",
                    "blur": "4px",
                    "color": "{color.primary}",
                },
            }
        },
    }


@pytest.fixture
def diamond_document():
    return {
        "a": {"$value": "{b}"},
        "b": {"$value": "{c}"},
        "c": {"$value": "x"},
        "d": {"$value": "{b}"},
    }


@pytest.fixture
def cyclic_document():
    return {
        "a": {"$value": "{b}"},
        "b": {"$value": "{a}"},
        "plain": {"$value": "1px"},
    }


class InMemoryFiles:
    """Fake FileReader/FileWriter collaborator backed by a dict."""

    def __init__(self, documents: dict | None = None):
        self.documents = dict(documents or {})
        self.reads: list[str] = []
        self.writes: list[str] = []

    def read(self, path: str) -> dict:
        self.reads.append(path)
        return self.documents[path]

    def write(self, path: str, document: dict) -> None:
        self.writes.append(path)
        self.documents[path] = document


@pytest.fixture
def in_memory_files():
    return InMemoryFiles
