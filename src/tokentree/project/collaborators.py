"""
Interfaces of the collaborators that surround the resolution engine.

Reading and writing files, format detection and schema validation are done
by the caller. The project and manifest layers only talk to these protocols.
"""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from tokentree.core.types import TokenDocument


@dataclass
class SchemaIssue:
    """One structural problem reported by a schema validator."""

    path: str
    message: str


@dataclass
class SchemaValidationResult:
    valid: bool
    errors: list[SchemaIssue] = field(default_factory=list)


@runtime_checkable
class FileReader(Protocol):
    def read(self, path: str) -> TokenDocument:
        """Return the parsed document stored at ``path``."""
        ...


@runtime_checkable
class FileWriter(Protocol):
    def write(self, path: str, document: TokenDocument) -> None:
        """Persist ``document`` at ``path``."""
        ...


@runtime_checkable
class SchemaValidator(Protocol):
    def validate(self, document: TokenDocument) -> SchemaValidationResult:
        """Check the structure of a token or manifest document."""
        ...
