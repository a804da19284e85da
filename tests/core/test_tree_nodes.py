"""
Tests for token tree node classes.
"""

from tokentree.core import GroupNode, TokenNode, is_group, is_metadata_key, is_token


class TestNodeShapes:
    """Classification helpers for raw document entries."""

    def test_token_and_group_detection(self):
        """A mapping with $value is a token; a mapping without it is a group."""
        assert is_token({"$value": 1})
        assert not is_token({"a": {"$value": 1}})
        assert is_group({"a": {"$value": 1}})
        assert not is_group("not a mapping")

    def test_metadata_keys(self):
        """Only sigil-prefixed keys are metadata."""
        assert is_metadata_key("$type")
        assert not is_metadata_key("type")


class TestGroupNode:
    """Parent and child relations on group nodes."""

    def test_add_child_sets_parent(self):
        """Adding a child records the back-reference without copying the child."""
        root = GroupNode(path="", name="root")
        group = GroupNode(path="color", name="color")
        token = TokenNode(path="color.red", name="red", value="#f00")

        root.add_child(group)
        group.add_child(token)

        assert root.is_root
        assert not group.is_root
        assert token.parent is group
        assert root.children["color"] is group
        assert token.depth == 2

    def test_tokens_and_groups_views(self):
        """The views split children by node kind."""
        root = GroupNode(path="", name="root")
        root.add_child(GroupNode(path="size", name="size"))
        root.add_child(TokenNode(path="gap", name="gap", value="4px"))

        assert list(root.tokens) == ["gap"]
        assert list(root.groups) == ["size"]

    def test_repr_excludes_parent(self):
        """The parent back-reference is not part of repr, so printing never recurses."""
        root = GroupNode(path="", name="root")
        token = TokenNode(path="x", name="x", value=1)
        root.add_child(token)
        assert "parent" not in repr(token)


class TestTokenNode:
    """Token metadata accessors and reference flags."""

    def test_metadata_properties(self):
        """Description and extensions are read from metadata."""
        token = TokenNode(
            path="a",
            name="a",
            metadata={"description": "Alpha", "extensions": {"com.example": {"x": 1}}},
        )
        assert token.description == "Alpha"
        assert token.extensions == {"com.example": {"x": 1}}
        assert token.kind == "token"

    def test_has_references(self):
        """Local and cross-file references both count."""
        assert TokenNode(path="a", name="a", references=["b"]).has_references
        assert TokenNode(
            path="a", name="a", external_references=["../base.json#x"]
        ).has_references
        assert not TokenNode(path="a", name="a", value=3).has_references
