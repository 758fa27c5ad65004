"""Path resolution utilities for mapping raw import tokens to files in the tree."""

import logging
import posixpath
from typing import AbstractSet, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from graph.model import ROOT, ImportKind, Resolution

logger = logging.getLogger(__name__)


class AliasMap:
    """
    Prefix -> target directory mappings for shorthand imports.

    Targets are relative to the base directory ("." is the base itself).
    An absolute target is kept absolute and treated as outside the base;
    merge_options rewrites absolute targets relative to the base first.
    Prefixes are matched longest first so a specific prefix is never shadowed
    by a shorter one.
    """

    def __init__(self, aliases: Iterable[Tuple[str, str]] = ()):
        normalized = []
        for prefix, target in aliases:
            if not prefix:
                continue
            target = target.replace("\\", "/") or ROOT
            normalized.append((prefix, posixpath.normpath(target)))
        self._aliases: Tuple[Tuple[str, str], ...] = tuple(
            sorted(normalized, key=lambda item: (-len(item[0]), item[0]))
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "AliasMap":
        return cls(mapping.items())

    def match(self, token: str) -> Optional[Tuple[str, str]]:
        """Return the (prefix, target) of the longest prefix of token, if any."""
        for prefix, target in self._aliases:
            if token.startswith(prefix):
                return prefix, target
        return None

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._aliases)

    def __len__(self) -> int:
        return len(self._aliases)

    def __bool__(self) -> bool:
        return bool(self._aliases)

    def __repr__(self) -> str:
        return f"AliasMap({list(self._aliases)!r})"


def is_relative_token(token: str) -> bool:
    """Check if a token starts with a same-directory or parent-directory marker."""
    return token in (".", "..") or token.startswith(("./", "../"))


def _escapes_base(path: str) -> bool:
    return path == ".." or path.startswith("../") or path.startswith("/")


def match_source_file(
    path: str,
    source_files: AbstractSet[str],
    extensions: Sequence[str],
) -> Optional[str]:
    """
    Find the in-tree file a normalized path refers to.

    Tries, in order: the exact path, the path with each extension appended,
    and an ``index`` file with each extension inside the path.

    Returns:
        The matching relative file path, or None.
    """
    if path in source_files:
        return path
    if path != ROOT:
        for ext in extensions:
            candidate = path + ext
            if candidate in source_files:
                return candidate
    for ext in extensions:
        candidate = posixpath.normpath(posixpath.join(path, "index" + ext))
        if candidate in source_files:
            return candidate
    return None


def _resolve_path(
    token: str,
    path: str,
    kind: ImportKind,
    source_files: AbstractSet[str],
    extensions: Sequence[str],
) -> Optional[Resolution]:
    normalized = posixpath.normpath(path)
    if _escapes_base(normalized):
        logger.debug("Discarding %r: resolves outside the base directory", token)
        return None
    match = match_source_file(normalized, source_files, extensions)
    if match is not None:
        return Resolution(token, match, kind, exists=True)
    return Resolution(token, normalized, kind, exists=False)


def resolve_import(
    token: str,
    importer_dir: str,
    source_files: AbstractSet[str],
    extensions: Sequence[str],
    aliases: Optional[AliasMap] = None,
) -> Optional[Resolution]:
    """
    Resolve a raw import token.

    Relative tokens are resolved against the importing file's directory;
    otherwise the alias map is consulted; anything else is external and kept
    verbatim. Internal imports with no matching file keep their normalized
    path so broken imports stay visible.

    Args:
        token: Raw token captured by an import pattern.
        importer_dir: Directory of the importing file, relative to the base.
        source_files: Relative paths of all in-scope files.
        extensions: Extensions to try appending, in order.
        aliases: Alias map, or None/empty when aliases are disabled.

    Returns:
        Resolution, or None when the token points outside the base directory.
    """
    if is_relative_token(token):
        return _resolve_path(
            token,
            posixpath.join(importer_dir, token),
            ImportKind.RELATIVE,
            source_files,
            extensions,
        )

    if aliases:
        matched = aliases.match(token)
        if matched is not None:
            prefix, target = matched
            remainder = token[len(prefix):].lstrip("/")
            return _resolve_path(
                token,
                posixpath.join(target, remainder),
                ImportKind.ALIAS,
                source_files,
                extensions,
            )

    return Resolution(token, token, ImportKind.EXTERNAL)
