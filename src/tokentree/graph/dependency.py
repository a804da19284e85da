"""
Token dependency graph construction.

Edges point from a token to each token its value references ("a depends on
b"). Only tokens that reference something, and the paths they reference,
appear in the graph.
"""

from dataclasses import dataclass, field

from tokentree.core.path_utils import build_path_index
from tokentree.core.tree_node import GroupNode
from tokentree.core.types import Adjacency, TokenDocument
from tokentree.references import extract_references_from_token
from tokentree.structure.query import find_all_tokens


@dataclass
class DependencyGraph:
    """
    Forward and reverse adjacency over canonical token paths.

    Params:
        dependencies: Path -> paths it references
        dependents: Path -> paths that reference it
    """

    dependencies: Adjacency = field(default_factory=dict)
    dependents: Adjacency = field(default_factory=dict)

    def add_edge(self, source: str, target: str) -> None:
        self.dependencies.setdefault(source, set()).add(target)
        self.dependents.setdefault(target, set()).add(source)

    def nodes(self) -> list[str]:
        """Every path appearing as a source or target, in first-seen order."""
        seen: dict[str, None] = {}
        for source, targets in self.dependencies.items():
            seen.setdefault(source)
            for target in sorted(targets):
                seen.setdefault(target)
        return list(seen)

    def edges(self) -> list[tuple[str, str]]:
        return [
            (source, target)
            for source, targets in self.dependencies.items()
            for target in sorted(targets)
        ]

    def is_empty(self) -> bool:
        return not self.dependencies


def get_all_references(document: TokenDocument) -> dict[str, list[str]]:
    """
    Map every referencing token of a raw document to its canonical references.

    Params:
        document: Raw nested token document

    Returns:
        Token path -> referenced paths, for tokens with at least one reference
    """
    index = build_path_index(document)
    references: dict[str, list[str]] = {}
    for path, token in index.tokens.items():
        found = extract_references_from_token(token)
        if found:
            references[path] = found
    return references


def build_dependency_graph(source: GroupNode | TokenDocument) -> DependencyGraph:
    """
    Build the dependency graph of a tree or a raw document.

    Params:
        source: Built tree root, or a raw nested document

    Returns:
        DependencyGraph; empty when nothing references anything
    """
    graph = DependencyGraph()
    if isinstance(source, GroupNode):
        pairs = ((token.path, token.references) for token in find_all_tokens(source))
    else:
        pairs = get_all_references(source).items()

    for path, references in pairs:
        for reference in references:
            graph.add_edge(path, reference)
    return graph
