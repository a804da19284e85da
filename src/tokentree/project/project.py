"""
Multi-file token projects.

A project holds one built tree per file. References whose target lives in
another file are collected as `CrossFileReference` entries and lifted into a
file-level dependency graph, which is ordered and checked for cycles with the
same algorithms used for tokens.
"""

import copy
import logging
import posixpath
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tokentree.core.path_utils import build_path_index
from tokentree.core.tree_node import GroupNode
from tokentree.core.types import REF_KEY, VALUE_KEY, Adjacency, TokenDocument
from tokentree.execution.resolution import (
    ErrorKind,
    ResolutionError,
    ResolveOptions,
    ResolveResult,
    resolve_references,
)
from tokentree.graph.cycles import find_cycles, topological_sort
from tokentree.project.collaborators import FileWriter, SchemaValidationResult, SchemaValidator
from tokentree.references.extract import (
    URL_PREFIXES,
    classify_string_reference,
    is_cross_file_reference,
    is_pointer_object,
    split_cross_file_reference,
)
from tokentree.structure.builder import BuildWarning, TreeBuilder
from tokentree.structure.query import find_all_tokens

logger = logging.getLogger(__name__)


@dataclass
class CrossFileReference:
    """
    A reference from a token in one file to a token in another.

    Params:
        from_token: Canonical path of the referencing token
        to_file: Target file, relative to the project base path, or a URL
        to_token: Canonical path inside the target file; empty for whole-file references
        reference: Reference as written
        resolved: Set once the reference has been substituted
    """

    from_token: str
    to_file: str
    to_token: str
    reference: str
    resolved: bool = False


@dataclass
class TokenFile:
    path: str
    document: TokenDocument
    tree: GroupNode
    warnings: list[BuildWarning] = field(default_factory=list)
    cross_file_references: list[CrossFileReference] = field(default_factory=list)


@dataclass
class Project:
    """
    A set of token files sharing one base path.

    Params:
        base_path: Directory relative targets are resolved against
        files: File path -> TokenFile, in input order
        cross_file_references: File path -> references leaving that file
        dependency_graph: File path -> files it references
        validation: File path -> schema validation outcome, when a validator was used
    """

    base_path: str
    files: dict[str, TokenFile] = field(default_factory=dict)
    cross_file_references: dict[str, list[CrossFileReference]] = field(default_factory=dict)
    dependency_graph: Adjacency = field(default_factory=dict)
    validation: dict[str, SchemaValidationResult] = field(default_factory=dict)


def normalize_file_path(path: str) -> str:
    """Normalize a file path to POSIX separators without ``./`` noise."""
    if path.startswith(URL_PREFIXES):
        return path
    return posixpath.normpath(path.replace("\\", "/"))


def resolve_target_file(file_part: str, base_path: str) -> str:
    """
    Resolve the file part of a cross-file reference.

    Params:
        file_part: File portion of the reference (before ``#``)
        base_path: Project base path

    Returns:
        URLs and ``file://`` URIs unchanged; relative paths resolved against
        ``base_path`` and expressed relative to it with POSIX separators
    """
    if file_part.startswith(URL_PREFIXES):
        return file_part
    base = normalize_file_path(base_path or ".")
    joined = posixpath.normpath(posixpath.join(base, normalize_file_path(file_part)))
    return posixpath.relpath(joined, base)


def build_project(
    documents: Mapping[str, TokenDocument],
    base_path: str = ".",
    validator: SchemaValidator | None = None,
) -> Project:
    """
    Build a project from already-loaded documents.

    Params:
        documents: File path -> parsed document, in load order
        base_path: Directory relative references resolve against
        validator: Optional schema validator run over each document first

    Returns:
        Project with trees, cross-file references and the file dependency graph
    """
    project = Project(base_path=base_path)
    for raw_path, document in documents.items():
        path = normalize_file_path(raw_path)
        if validator is not None:
            outcome = validator.validate(document)
            project.validation[path] = outcome
            if not outcome.valid:
                logger.warning(
                    "Token file %s failed schema validation with %d issues",
                    path,
                    len(outcome.errors),
                )
        result = TreeBuilder(document).build()
        project.files[path] = TokenFile(
            path=path, document=document, tree=result.root, warnings=result.warnings
        )

    build_cross_file_references(project)
    build_file_dependency_graph(project)
    return project


def build_cross_file_references(project: Project) -> dict[str, list[CrossFileReference]]:
    """
    Collect every cross-file reference of every file in the project.

    Params:
        project: Project to scan; its reference tables are replaced

    Returns:
        File path -> cross-file references, only for files that have some
    """
    project.cross_file_references = {}
    for path, token_file in project.files.items():
        references = []
        for token in find_all_tokens(token_file.tree):
            for raw in token.external_references:
                file_part, token_part = split_cross_file_reference(raw)
                references.append(
                    CrossFileReference(
                        from_token=token.path,
                        to_file=resolve_target_file(file_part, project.base_path),
                        to_token=token_part,
                        reference=raw,
                    )
                )
        token_file.cross_file_references = references
        if references:
            project.cross_file_references[path] = references
    return project.cross_file_references


def build_file_dependency_graph(project: Project) -> Adjacency:
    """
    Lift cross-file references into a file-level graph.

    Every file is a node; edges only point at files loaded into the project.
    """
    graph: Adjacency = {path: set() for path in project.files}
    for from_file, references in project.cross_file_references.items():
        for reference in references:
            if reference.to_file in project.files:
                graph[from_file].add(reference.to_file)
    project.dependency_graph = graph
    return graph


def get_resolution_order(project: Project) -> list[str]:
    """
    Order files so that referenced files come before the files using them.

    Files on or behind a file-level cycle cannot be ordered; they are appended
    in input order.
    """
    ordered, blocked = topological_sort(project.dependency_graph, nodes=project.files)
    return ordered + blocked


def detect_circular_dependencies(project: Project) -> list[list[str]]:
    """Return each file-level cycle as a list of file paths."""
    return find_cycles(project.dependency_graph, nodes=project.files)


def validate_cross_file_references(project: Project) -> list[ResolutionError]:
    """
    Check that every cross-file reference points at a loaded file and token.

    Params:
        project: Project to check

    Returns:
        One ``missing`` error per dangling reference
    """
    indexes = {path: build_path_index(f.document) for path, f in project.files.items()}
    errors = []
    for from_file, references in project.cross_file_references.items():
        for reference in references:
            problem = _cross_file_problem(reference, indexes)
            if problem:
                errors.append(
                    ResolutionError(
                        kind=ErrorKind.missing,
                        path=reference.from_token,
                        message=problem,
                        reference=reference.reference,
                        file_path=from_file,
                        target_file=reference.to_file,
                    )
                )
    return errors


def _cross_file_problem(reference: CrossFileReference, indexes: Mapping[str, Any]) -> str | None:
    index = indexes.get(reference.to_file)
    if index is None:
        return f"Referenced file {reference.to_file} is not part of the project"
    if not reference.to_token:
        return f"Reference {reference.reference} does not name a token"
    if index.get_token(reference.to_token) is None:
        return f"Token {reference.to_token} not found in {reference.to_file}"
    return None


@dataclass
class ProjectResolveResult:
    """
    Outcome of resolving every file of a project.

    Params:
        documents: File path -> resolved document
        file_results: File path -> single-document ResolveResult
        errors: All errors, each carrying its ``file_path``
        success: Same rule as single-document resolution, over all errors
        order: Order the files were processed in
    """

    documents: dict[str, TokenDocument] = field(default_factory=dict)
    file_results: dict[str, ResolveResult] = field(default_factory=dict)
    errors: list[ResolutionError] = field(default_factory=list)
    success: bool = True
    order: list[str] = field(default_factory=list)

    def write_to(self, writer: FileWriter) -> None:
        """Hand every resolved document to a file writer, in resolution order."""
        for path in self.order:
            writer.write(path, self.documents[path])


class _CrossFileSubstitution:
    """Replaces the cross-file references of one file with already-resolved values."""

    def __init__(self, project: Project, path: str, resolved: Mapping[str, Any]):
        self._path = path
        self._targets = {
            reference.reference: reference
            for reference in project.cross_file_references.get(path, [])
        }
        self._resolved = resolved
        self.failures: dict[str, tuple[str, str]] = {}

    def apply(self, document: TokenDocument) -> TokenDocument:
        return self._substitute(document, in_value=False)

    def _substitute(self, node: Any, in_value: bool) -> Any:
        if isinstance(node, list):
            return [self._substitute(item, in_value) for item in node]
        if not isinstance(node, dict):
            if in_value and isinstance(node, str):
                _, cross_file = classify_string_reference(node)
                if cross_file is not None:
                    return self._lookup(cross_file, node)
            return copy.deepcopy(node)
        if in_value and is_pointer_object(node) and is_cross_file_reference(node[REF_KEY]):
            return self._lookup(node[REF_KEY], node)
        return {
            key: self._substitute(value, in_value or key == VALUE_KEY)
            for key, value in node.items()
        }

    def _lookup(self, raw: str, original: Any) -> Any:
        reference = self._targets.get(raw)
        target_document = self._resolved.get(reference.to_file) if reference else None
        token = None
        if target_document is not None and reference.to_token:
            token = build_path_index(target_document).get_token(reference.to_token)

        if token is None:
            to_file = reference.to_file if reference else raw
            if target_document is None:
                reason = f"Referenced file {to_file} is not resolved in this project"
            elif not reference.to_token:
                reason = f"Reference {raw} does not name a token"
            else:
                reason = f"Token {reference.to_token} not found in {to_file}"
            self.failures[raw] = (to_file, reason)
            logger.warning("Cross-file reference %s in %s failed: %s", raw, self._path, reason)
            return copy.deepcopy(original)

        reference.resolved = True
        return copy.deepcopy(token[VALUE_KEY])


def resolve_project(
    project: Project, options: ResolveOptions | None = None, **overrides: Any
) -> ProjectResolveResult:
    """
    Resolve every file of a project, cross-file references included.

    Files are processed in resolution order. Before a file is resolved, each of
    its cross-file references is replaced with the target token's value from
    the already-resolved target file; the single-document resolver then
    handles the remaining local references.

    Params:
        project: Project built with `build_project`
        options: Resolution options applied to every file
        **overrides: Individual option values applied on top of ``options``

    Returns:
        ProjectResolveResult with one resolved document per file
    """
    base = options.model_dump() if options is not None else {}
    effective = ResolveOptions(**{**base, **overrides})
    outcome = ProjectResolveResult(order=get_resolution_order(project))

    for path in outcome.order:
        substitution = _CrossFileSubstitution(project, path, outcome.documents)
        document = substitution.apply(project.files[path].document)
        result = resolve_references(document, effective)

        for error in result.errors:
            error.file_path = path
            if error.reference in substitution.failures:
                error.target_file, error.message = substitution.failures[error.reference]

        outcome.documents[path] = result.tokens
        outcome.file_results[path] = result
        outcome.errors.extend(result.errors)

    only_missing = all(error.kind == ErrorKind.missing for error in outcome.errors)
    outcome.success = not outcome.errors or (effective.partial and only_missing)
    logger.debug(
        "Resolved %d files with %d errors", len(outcome.documents), len(outcome.errors)
    )
    return outcome

