"""
Exception classes for tokentree.

Missing references, cycles and merge conflicts are ordinary results and are
reported through result objects. The exceptions defined here cover the
conditions that cannot be represented that way: malformed reference syntax,
invalid paths, and misuse of caller-owned registries.
"""


class TokenTreeError(Exception):
    """Base exception for all tokentree errors."""

    pass


class InvalidReferenceError(TokenTreeError):
    """Raised when a reference string cannot be parsed at all."""

    def __init__(self, reference: str, reason: str):
        """
        Initialize the exception.

        Params:
            reference: The malformed reference string
            reason: Why the reference could not be parsed
        """
        self.reference = reference
        self.reason = reason
        super().__init__(f"Invalid reference '{reference}': {reason}")


class PathValidationError(TokenTreeError):
    """Raised when path validation fails."""

    def __init__(self, path: str, reason: str):
        """
        Initialize the exception.

        Params:
            path: The invalid path
            reason: Why the path is invalid
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path '{path}': {reason}")


class DuplicateResolverError(TokenTreeError):
    """Raised when registering a manifest resolver under a name already in use."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Manifest resolver '{name}' is already registered")


class UnknownResolverError(TokenTreeError):
    """Raised when looking up a manifest resolver that was never registered."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(
            f"Manifest resolver '{name}' is not registered. Available resolvers: {available}"
        )
