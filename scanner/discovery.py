"""File discovery utilities for scanning repositories."""

import logging
import os
import stat
from collections import Counter
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .errors import ScanError

logger = logging.getLogger(__name__)


DEFAULT_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs")
DEFAULT_SKIP_DIRS = frozenset({
    "node_modules", ".git",
    ".next", "dist", "build", "_generated",
    "coverage", ".turbo", ".cache",
})

# Extension -> language family, shown in the extension census
LANGUAGE_FAMILIES = MappingProxyType({
    ".js": "JavaScript", ".jsx": "JavaScript", ".mjs": "JavaScript", ".cjs": "JavaScript",
    ".ts": "TypeScript", ".tsx": "TypeScript",
    ".py": "Python", ".pyi": "Python",
    ".go": "Go",
    ".rs": "Rust",
    ".java": "Java", ".kt": "Kotlin",
    ".rb": "Ruby",
    ".clj": "Clojure", ".cljs": "Clojure", ".cljc": "Clojure",
    ".zig": "Zig",
    ".c": "C/C++", ".h": "C/C++", ".cpp": "C/C++", ".hpp": "C/C++",
})


def iter_files(
    root: Path,
    skip_dirs: Optional[Iterable[str]] = None,
    strict: bool = True,
) -> Iterator[Path]:
    """
    Iterate over regular files in a directory tree.

    Args:
        root: Root directory to scan.
        skip_dirs: Directory basenames to prune at any depth.
                   If None, uses DEFAULT_SKIP_DIRS.
        strict: If True, any unreadable entry aborts the walk with ScanError.
                If False, the entry is logged and skipped.

    Yields:
        Path objects for every regular file, in sorted order per directory.
    """
    skip: Set[str] = set(DEFAULT_SKIP_DIRS if skip_dirs is None else skip_dirs)
    root = root.resolve()
    seen: Set[Path] = set()

    def _fail(path: Path, exc: OSError) -> None:
        if strict:
            raise ScanError(
                f"Cannot read {path}: {exc.strerror or exc}",
                {"path": str(path)},
            ) from exc
        logger.warning("Skipping unreadable entry %s: %s", path, exc)

    def _walk(current: Path) -> Iterator[Path]:
        real = current.resolve()
        if real in seen:
            logger.debug("Skipping already visited directory %s", current)
            return
        seen.add(real)

        try:
            entries = sorted(current.iterdir())
        except OSError as exc:
            _fail(current, exc)
            return

        for entry in entries:
            try:
                mode = entry.stat().st_mode
            except OSError as exc:
                _fail(entry, exc)
                continue

            if stat.S_ISDIR(mode):
                if entry.name in skip:
                    continue
                yield from _walk(entry)
            elif stat.S_ISREG(mode):
                yield entry

    yield from _walk(root)


def walk_files(
    root: Path,
    skip_dirs: Optional[Iterable[str]] = None,
    strict: bool = True,
) -> List[Path]:
    """Return every regular file under root (see iter_files)."""
    return list(iter_files(root, skip_dirs=skip_dirs, strict=strict))


def count_extensions(files: Iterable[Path]) -> Dict[str, int]:
    """
    Count files per extension, most common first.

    Files without an extension are not counted.
    """
    counts = Counter(path.suffix for path in files if path.suffix)
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def get_relative_path(file_path: Path, root: Path) -> str:
    """Get the POSIX path of file_path relative to root ("." for root itself)."""
    rel = os.path.relpath(file_path, Path(root).resolve())
    return rel.replace(os.sep, "/")
