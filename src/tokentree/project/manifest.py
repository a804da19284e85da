"""
Manifest file sets and permutations.

A manifest lists base token sets and modifiers (themes, densities, ...) whose
options add further files. This module reads only what is needed to compute
the ordered file list of one permutation and to merge those files into a
single document.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from attrs import field, frozen

from tokentree.core.types import TokenDocument
from tokentree.exceptions import DuplicateResolverError, UnknownResolverError
from tokentree.merge.merge import MergeOptions, merge_all
from tokentree.project.collaborators import FileReader

logger = logging.getLogger(__name__)

WILDCARD = "*"

Selection = Mapping[str, str | list[str]]


def _strings(items: Any) -> tuple[str, ...]:
    if not isinstance(items, list):
        return ()
    return tuple(item for item in items if isinstance(item, str))


@frozen
class TokenSet:
    name: str
    files: tuple[str, ...]
    metadata: dict[str, Any] = field(factory=dict)


@frozen
class Modifier:
    """
    A manifest modifier.

    Params:
        name: Modifier key in the manifest
        constraint: "oneOf" (exactly one option) or "anyOf" (any subset)
        options: Declared option names
        values: Option -> files it adds; the ``*`` entry applies to any option
        default: Option used when a selection does not mention this modifier
    """

    name: str
    constraint: str
    options: tuple[str, ...]
    values: dict[str, tuple[str, ...]] = field(factory=dict)
    default: str | None = None

    def files_for(self, option: str) -> tuple[str, ...]:
        if option in self.values:
            return self.values[option]
        return self.values.get(WILDCARD, ())


@frozen
class Manifest:
    path: str
    name: str
    sets: tuple[TokenSet, ...] = ()
    modifiers: dict[str, Modifier] = field(factory=dict)

    def get_set(self, name: str) -> TokenSet | None:
        return next((token_set for token_set in self.sets if token_set.name == name), None)


def _parse_modifier(name: str, data: Mapping[str, Any]) -> Modifier | None:
    for constraint in ("oneOf", "anyOf"):
        if isinstance(data.get(constraint), list):
            break
    else:
        return None

    raw_values = data.get("values")
    values = {}
    if isinstance(raw_values, Mapping):
        values = {option: _strings(files) for option, files in raw_values.items()}
    default = data.get("default")
    return Modifier(
        name=name,
        constraint=constraint,
        options=_strings(data[constraint]),
        values=values,
        default=default if isinstance(default, str) else None,
    )


def parse_manifest(data: Any, manifest_path: str = "manifest.json") -> Manifest | None:
    """
    Read the file-set structure of a manifest.

    Params:
        data: Parsed manifest document
        manifest_path: Path the manifest was loaded from

    Returns:
        Manifest, or None when ``data`` has no ``sets`` list
    """
    if not isinstance(data, Mapping) or not isinstance(data.get("sets"), list):
        return None

    sets = []
    for position, raw_set in enumerate(data["sets"]):
        if not isinstance(raw_set, Mapping):
            logger.warning("Skipping manifest set %d in %s: not a mapping", position, manifest_path)
            continue
        name = raw_set.get("name")
        sets.append(
            TokenSet(
                name=name if isinstance(name, str) else f"set-{position}",
                files=_strings(raw_set.get("files")),
                metadata={k: v for k, v in raw_set.items() if k not in ("name", "files")},
            )
        )

    modifiers = {}
    raw_modifiers = data.get("modifiers")
    if isinstance(raw_modifiers, Mapping):
        for name, raw_modifier in raw_modifiers.items():
            modifier = _parse_modifier(name, raw_modifier) if isinstance(raw_modifier, Mapping) else None
            if modifier is None:
                logger.warning("Skipping manifest modifier %s in %s: no oneOf/anyOf", name, manifest_path)
                continue
            modifiers[name] = modifier

    name = data.get("name")
    return Manifest(
        path=manifest_path,
        name=name if isinstance(name, str) else "Unknown Manifest",
        sets=tuple(sets),
        modifiers=modifiers,
    )


def _selected_options(modifier: Modifier, selection: Selection) -> list[str]:
    chosen = selection.get(modifier.name, modifier.default)
    if chosen is None:
        return []
    if chosen == WILDCARD and modifier.constraint == "anyOf":
        return list(modifier.options)
    if isinstance(chosen, str):
        return [chosen]
    return list(chosen)


def resolve_permutation_files(manifest: Manifest, selection: Selection) -> list[str]:
    """
    List the files of one permutation, lowest precedence first.

    Base set files come first in manifest order, followed by the files of each
    selected modifier option. Duplicates keep their first position.

    Params:
        manifest: Parsed manifest
        selection: Modifier name -> chosen option (or options, for anyOf)

    Returns:
        Ordered, duplicate-free file list
    """
    files: dict[str, None] = {}
    for token_set in manifest.sets:
        files.update(dict.fromkeys(token_set.files))
    for modifier in manifest.modifiers.values():
        for option in _selected_options(modifier, selection):
            files.update(dict.fromkeys(modifier.files_for(option)))
    return list(files)


def permutation_id(selection: Selection) -> str:
    """
    Build a stable identifier for a modifier selection.

    Examples:
        {"theme": "dark", "density": "compact"} -> "density-compact&theme-dark"
    """
    parts = []
    for name, chosen in selection.items():
        rendered = chosen if isinstance(chosen, str) else ",".join(chosen)
        parts.append(f"{name}-{rendered}")
    return "&".join(sorted(parts))


def build_permutation_document(
    manifest: Manifest,
    selection: Selection,
    reader: FileReader,
    options: MergeOptions | None = None,
) -> TokenDocument:
    """
    Read and merge the files of one permutation.

    Params:
        manifest: Parsed manifest
        selection: Modifier selection
        reader: Collaborator returning the parsed document of a file path
        options: Merge options

    Returns:
        Single merged document; later files override earlier ones
    """
    files = resolve_permutation_files(manifest, selection)
    logger.debug("Permutation %s uses %d files", permutation_id(selection), len(files))
    return merge_all([reader.read(path) for path in files], options)


ManifestHandler = Callable[..., Any]


class ManifestResolverRegistry:
    """Caller-owned mapping of manifest format names to handlers.

    Responsibilities:
      - Register handlers under unique names.
      - Look handlers up, failing loudly for unknown names.

    Notes:
      - Nothing in the resolution engine consults a registry; orchestration
        code creates one and passes it where it is needed.
    """

    def __init__(self, handlers: Mapping[str, ManifestHandler] | None = None):
        self._handlers: dict[str, ManifestHandler] = {}
        for name, handler in (handlers or {}).items():
            self.register(name, handler)

    def register(self, name: str, handler: ManifestHandler) -> None:
        """Register a handler.

        Raises:
            DuplicateResolverError: If ``name`` is already registered.
        """
        if name in self._handlers:
            raise DuplicateResolverError(name)
        self._handlers[name] = handler

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def get(self, name: str) -> ManifestHandler:
        """Return the handler registered under ``name``.

        Raises:
            UnknownResolverError: If nothing is registered under ``name``.
        """
        if name not in self._handlers:
            raise UnknownResolverError(name, self.names())
        return self._handlers[name]

    def names(self) -> list[str]:
        return list(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
