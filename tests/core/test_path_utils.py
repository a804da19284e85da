"""
Tests for canonical path helpers and the document path index.
"""

import pytest

from tokentree.core import (
    build_path,
    build_path_index,
    node_name,
    split_segments,
    validate_path_format,
)
from tokentree.exceptions import PathValidationError, TokenTreeError


class TestPathHelpers:
    """Building and splitting dot-separated paths."""

    def test_build_path_from_root(self):
        """The root path is empty, so children of the root have bare names."""
        assert build_path("", "color") == "color"
        assert build_path("color", "primary") == "color.primary"

    def test_segments_names_and_parents(self):
        """Segment helpers treat the empty path as the root."""
        assert split_segments("") == []
        assert split_segments("a.b.c") == ["a", "b", "c"]
        assert node_name("") == "root"
        assert node_name("a.b.c") == "c"


class TestValidatePathFormat:
    """Path validation raises PathValidationError for malformed paths."""

    @pytest.mark.parametrize("path", ["", "a..b", ".a", "a.$value"])
    def test_invalid_paths_rejected(self, path):
        """Empty paths, empty segments and sigil segments are invalid."""
        with pytest.raises(PathValidationError) as exc_info:
            validate_path_format(path)
        assert exc_info.value.path == path
        assert isinstance(exc_info.value, TokenTreeError)

    def test_valid_path_accepted(self):
        """A well-formed path passes silently."""
        validate_path_format("color.brand.primary")


class TestPathIndex:
    """The flat index the resolver uses for target lookups."""

    def test_indexes_tokens_groups_and_inherited_types(self, color_document):
        """Tokens and groups are indexed by path."""
        index = build_path_index(color_document)

        assert index.get_token("color.base.red") == {"$value": "#ff0000"}
        assert "color.base" in index.groups
        assert index.has_path("color.base")
        assert not index.has_path("color.missing")

    def test_groups_are_not_tokens(self, color_document):
        """Looking up a group path as a token returns None."""
        index = build_path_index(color_document)
        assert index.get_token("color.base") is None

    def test_non_mapping_entries_are_ignored(self):
        """Scalars at child keys are neither tokens nor groups."""
        index = build_path_index({"stray": 5, "ok": {"$value": 1}})
        assert list(index.tokens) == ["ok"]
        assert index.groups == set()
