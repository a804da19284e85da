"""
Tests for building token trees from raw documents.
"""

import copy
import logging

from tokentree.core import GroupNode, TokenNode
from tokentree.structure import TreeBuilder, build_tree, get_group, get_token


class TestTreeShape:
    """Classification of document entries into tokens and groups."""

    def test_root_group(self, color_document):
        """The root group has the empty path, the name root and no parent."""
        root = build_tree(color_document)
        assert isinstance(root, GroupNode)
        assert root.path == ""
        assert root.name == "root"
        assert root.parent is None

    def test_tokens_and_groups(self, color_document):
        """Mappings with $value become tokens, other mappings become groups."""
        root = build_tree(color_document)

        assert isinstance(get_group(root, "color.base"), GroupNode)
        red = get_token(root, "color.base.red")
        assert isinstance(red, TokenNode)
        assert red.value == "#ff0000"
        assert red.parent is get_group(root, "color.base")

    def test_metadata_keys_are_not_children(self, color_document):
        """Sigil keys never become child nodes."""
        root = build_tree(color_document)
        color = get_group(root, "color")
        assert "$type" not in color.children
        assert "$description" not in color.children
        assert color.description == "Brand palette"

    def test_token_metadata(self, color_document):
        """Descriptions are copied onto token nodes."""
        root = build_tree(color_document)
        assert get_token(root, "color.base.blue").description == "Primary blue"


class TestTypeInheritance:
    """Group $type propagation."""

    def test_inherited_type(self, color_document):
        """Tokens without their own $type inherit the nearest group type."""
        root = build_tree(color_document)
        assert get_token(root, "color.base.red").token_type == "color"
        assert get_group(root, "color.base").group_type == "color"

    def test_own_type_wins(self):
        """A token's own $type overrides the inherited one."""
        root = build_tree(
            {"size": {"$type": "dimension", "ratio": {"$type": "number", "$value": 1.5}}}
        )
        assert get_token(root, "size.ratio").token_type == "number"

    def test_untyped(self, diamond_document):
        """Without any $type the token type stays None."""
        assert get_token(build_tree(diamond_document), "c").token_type is None


class TestReferenceExtraction:
    """References are extracted while building."""

    def test_brace_and_pointer_references(self, color_document):
        """Both syntaxes produce canonical paths; raw strings are kept as written."""
        root = build_tree(color_document)

        primary = get_token(root, "color.primary")
        assert primary.references == ["color.base.blue"]
        assert primary.raw_references == ["{color.base.blue}"]

        danger = get_token(root, "color.danger")
        assert danger.references == ["color.base.red"]
        assert danger.raw_references == ["#/color/base/red/$value"]

    def test_composite_references(self, color_document):
        """References nested in composite values are found."""
        card = get_token(build_tree(color_document), "shadow.card")
        assert card.references == ["color.primary"]

    def test_initial_resolution_state(self, color_document):
        """Tokens without references start resolved with their value."""
        root = build_tree(color_document)

        red = get_token(root, "color.base.red")
        assert red.resolved
        assert red.resolved_value == "#ff0000"

        primary = get_token(root, "color.primary")
        assert not primary.resolved
        assert primary.resolved_value is None

    def test_cross_file_references_kept_apart(self):
        """References into other files are stored raw and not as local paths."""
        token = get_token(build_tree({"a": {"$value": "{../base.json#color.red}"}}), "a")
        assert token.references == []
        assert token.external_references == ["{../base.json#color.red}"]
        assert not token.resolved


class TestWarnings:
    """Ambiguous entries are reported and skipped."""

    def test_scalar_child_is_skipped(self, caplog):
        """A scalar at a child key is not a token or group and produces a warning."""
        document = {"color": {"red": {"$value": "#f00"}, "oops": "#0f0", "list": [1, 2]}}

        with caplog.at_level(logging.WARNING, logger="tokentree.structure.builder"):
            result = TreeBuilder(document).build()

        assert list(result.root.children["color"].children) == ["red"]
        assert [warning.path for warning in result.warnings] == ["color.oops", "color.list"]
        assert "color.oops" in caplog.text

    def test_non_mapping_document(self):
        """A non-mapping document yields an empty root and one warning."""
        result = TreeBuilder(["not", "a", "document"]).build()
        assert result.root.children == {}
        assert len(result.warnings) == 1

    def test_non_string_group_type(self):
        """A non-string group $type is ignored with a warning."""
        result = TreeBuilder({"g": {"$type": 5, "t": {"$value": 1}}}).build()
        assert result.root.children["g"].children["t"].token_type is None
        assert result.warnings[0].path == "g"


class TestPurity:
    """Building never mutates its input."""

    def test_input_unchanged(self, color_document):
        """The document is identical before and after building."""
        before = copy.deepcopy(color_document)
        root = build_tree(color_document)
        get_token(root, "shadow.card").value["blur"] = "99px"
        assert color_document == before
