"""
Reference resolution for tokentree documents and trees.
"""

from tokentree.execution.resolution import (
    ErrorKind,
    ReferenceResolver,
    ResolutionError,
    ResolveOptions,
    ResolveResult,
    resolve_references,
    resolve_tree,
)

__all__ = [
    "ErrorKind",
    "ReferenceResolver",
    "ResolutionError",
    "ResolveOptions",
    "ResolveResult",
    "resolve_references",
    "resolve_tree",
]
