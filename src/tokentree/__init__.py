"""
tokentree - reference resolution and dependency analysis for design token documents

tokentree builds trees from DTCG token documents, resolves references between
tokens and files, detects reference cycles and merges layered documents.
"""

from importlib.metadata import version

from tokentree.core import GroupNode, TokenNode
from tokentree.execution import (
    ErrorKind,
    ResolutionError,
    ResolveOptions,
    ResolveResult,
    resolve_references,
    resolve_tree,
)
from tokentree.graph import (
    CycleDetectionResult,
    DependencyGraph,
    build_dependency_graph,
    detect_cycles,
)
from tokentree.merge import MergeConflict, MergeOptions, MergeResult, merge_all, merge_documents, safe_merge
from tokentree.project import Project, build_project, resolve_project
from tokentree.references import extract_reference, has_references, normalize_reference
from tokentree.structure import build_tree, tree_to_document

__version__ = version("tokentree")

__all__ = [
    "__version__",
    "TokenNode",
    "GroupNode",
    "build_tree",
    "tree_to_document",
    "extract_reference",
    "has_references",
    "normalize_reference",
    "DependencyGraph",
    "build_dependency_graph",
    "CycleDetectionResult",
    "detect_cycles",
    "ErrorKind",
    "ResolutionError",
    "ResolveOptions",
    "ResolveResult",
    "resolve_references",
    "resolve_tree",
    "MergeConflict",
    "MergeOptions",
    "MergeResult",
    "merge_documents",
    "merge_all",
    "safe_merge",
    "Project",
    "build_project",
    "resolve_project",
]
