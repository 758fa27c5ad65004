"""Graph builder that orchestrates scanning and dependency record construction."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import (
    AbstractSet, Dict, Iterable, List, Optional, Pattern, Sequence, Union,
)

from graph.model import DependencyRecord, ScanResult, directory_of
from .discovery import DEFAULT_SKIP_DIRS, get_relative_path, walk_files
from .errors import ScanError
from .parser import compile_patterns, extract_file_imports
from .resolver import AliasMap, resolve_import

logger = logging.getLogger(__name__)


def build_directory_tree(source_files: Iterable[str]) -> Dict[str, List[str]]:
    """Group relative file paths by containing directory ("." for the root)."""
    tree: Dict[str, List[str]] = {}
    for rel in source_files:
        tree.setdefault(directory_of(rel), []).append(rel.rsplit("/", 1)[-1])
    return tree


def build_dependency_record(
    rel_path: str,
    tokens: Iterable[str],
    source_files: AbstractSet[str],
    extensions: Sequence[str],
    aliases: Optional[AliasMap] = None,
) -> DependencyRecord:
    """Resolve every raw token of one file and build its dependency record."""
    importer_dir = directory_of(rel_path)
    resolutions = []
    for token in tokens:
        resolution = resolve_import(token, importer_dir, source_files, extensions, aliases)
        if resolution is not None:
            resolutions.append(resolution)
    return DependencyRecord.from_resolutions(resolutions)


def scan_codebase(
    base_dir: Path,
    extensions: Optional[Iterable[str]] = None,
    import_patterns: Optional[Iterable[Union[str, Pattern[str]]]] = None,
    skip_dirs: Optional[Iterable[str]] = None,
    aliases: Optional[AliasMap] = None,
    jobs: int = 1,
    strict: bool = True,
) -> ScanResult:
    """
    Scan a directory tree and build its dependency records.

    Args:
        base_dir: Root of the scan; every output path is relative to it.
        extensions: Extensions of in-scope files, in resolution order.
        import_patterns: Regexes whose first group is the import target.
        skip_dirs: Directory basenames to prune (default: DEFAULT_SKIP_DIRS).
        aliases: Alias map for non-relative shorthand imports, or None.
        jobs: Number of threads reading files. Output does not depend on it.
        strict: Abort on unreadable entries and files instead of skipping them.

    Returns:
        ScanResult. Empty when no extensions or no patterns are supplied.

    Raises:
        ScanError: If the walk or a file read fails in strict mode.
        ConfigError: If an import pattern is invalid.
    """
    base_dir = base_dir.resolve()
    ext = tuple(extensions or ())
    patterns = compile_patterns(import_patterns or ())
    if not ext or not patterns:
        logger.info("Nothing in scope (extensions=%d, patterns=%d)", len(ext), len(patterns))
        return ScanResult.empty(base_dir)

    if skip_dirs is None:
        skip_dirs = DEFAULT_SKIP_DIRS

    files: List[Path] = [
        path for path in walk_files(base_dir, skip_dirs=skip_dirs, strict=strict)
        if path.suffix in ext
    ]
    rel_paths = [get_relative_path(path, base_dir) for path in files]
    source_set = frozenset(rel_paths)
    logger.debug("Found %d source file(s) under %s", len(rel_paths), base_dir)

    def _process(index: int) -> DependencyRecord:
        try:
            tokens = extract_file_imports(files[index], patterns)
        except OSError as exc:
            if strict:
                raise ScanError(
                    f"Cannot read {files[index]}: {exc.strerror or exc}",
                    {"path": str(files[index])},
                ) from exc
            logger.warning("Skipping unreadable file %s: %s", files[index], exc)
            tokens = []
        return build_dependency_record(rel_paths[index], tokens, source_set, ext, aliases)

    indices = range(len(files))
    if jobs > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=min(jobs, len(files))) as executor:
            # map() yields in submission order, so the merge is deterministic
            records = list(executor.map(_process, indices))
    else:
        records = [_process(i) for i in indices]

    return ScanResult(
        base_dir=base_dir,
        directory_tree=build_directory_tree(rel_paths),
        source_files=tuple(rel_paths),
        dependencies=dict(zip(rel_paths, records)),
    )
