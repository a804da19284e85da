"""
Multi-file projects, manifest file sets and collaborator interfaces.
"""

from tokentree.project.collaborators import (
    FileReader,
    FileWriter,
    SchemaIssue,
    SchemaValidationResult,
    SchemaValidator,
)
from tokentree.project.manifest import (
    Manifest,
    ManifestResolverRegistry,
    Modifier,
    TokenSet,
    build_permutation_document,
    parse_manifest,
    permutation_id,
    resolve_permutation_files,
)
from tokentree.project.project import (
    CrossFileReference,
    Project,
    ProjectResolveResult,
    TokenFile,
    build_cross_file_references,
    build_file_dependency_graph,
    build_project,
    detect_circular_dependencies,
    get_resolution_order,
    resolve_project,
    resolve_target_file,
    validate_cross_file_references,
)

__all__ = [
    "FileReader",
    "FileWriter",
    "SchemaIssue",
    "SchemaValidationResult",
    "SchemaValidator",
    "Manifest",
    "ManifestResolverRegistry",
    "Modifier",
    "TokenSet",
    "build_permutation_document",
    "parse_manifest",
    "permutation_id",
    "resolve_permutation_files",
    "CrossFileReference",
    "Project",
    "ProjectResolveResult",
    "TokenFile",
    "build_cross_file_references",
    "build_file_dependency_graph",
    "build_project",
    "detect_circular_dependencies",
    "get_resolution_order",
    "resolve_project",
    "resolve_target_file",
    "validate_cross_file_references",
]
