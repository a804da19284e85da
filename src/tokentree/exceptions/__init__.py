"""
tokentree exception classes.

This package provides all exception types used throughout tokentree for
consistent error handling and reporting.
"""

from tokentree.exceptions.core import (
    DuplicateResolverError,
    InvalidReferenceError,
    PathValidationError,
    TokenTreeError,
    UnknownResolverError,
)

__all__ = [
    "TokenTreeError",
    "InvalidReferenceError",
    "PathValidationError",
    "DuplicateResolverError",
    "UnknownResolverError",
]
