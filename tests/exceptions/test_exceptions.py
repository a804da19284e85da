"""
Tests for the tokentree exception hierarchy.
"""

from tokentree.exceptions import (
    DuplicateResolverError,
    InvalidReferenceError,
    PathValidationError,
    TokenTreeError,
    UnknownResolverError,
)


class TestExceptions:
    """Tests for exception attributes and messages."""

    def test_all_errors_share_base(self):
        """Test that every exception derives from TokenTreeError."""
        for error in (
            InvalidReferenceError("#/", "empty"),
            PathValidationError("", "empty"),
            DuplicateResolverError("upft"),
            UnknownResolverError("x", []),
        ):
            assert isinstance(error, TokenTreeError)

    def test_invalid_reference_message(self):
        """Test that the message names the reference and the reason."""
        error = InvalidReferenceError("#/a//b", "pointer has an empty path segment")
        assert error.reference == "#/a//b"
        assert error.reason == "pointer has an empty path segment"
        assert str(error) == "Invalid reference '#/a//b': pointer has an empty path segment"

    def test_unknown_resolver_lists_available(self):
        """Test that the unknown-resolver message names the registered resolvers."""
        error = UnknownResolverError("tokens-studio", ["upft"])
        assert error.available == ["upft"]
        assert "upft" in str(error)
