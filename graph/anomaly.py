"""Detection and exclusion of directories that look vendored or generated."""

import logging
import posixpath
from typing import Iterable, List, Mapping, NamedTuple, Sequence

from .model import ROOT, ScanResult, is_within

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 50


class SuspiciousDirectory(NamedTuple):
    """A directory with an unusually high number of files directly inside."""

    directory: str
    count: int


def detect_suspicious_dirs(
    tree: Mapping[str, Sequence[str]],
    threshold: int = DEFAULT_THRESHOLD,
) -> List[SuspiciousDirectory]:
    """
    Find non-root directories whose direct file count reaches threshold.

    Args:
        tree: Directory tree (directory -> file basenames).
        threshold: Minimum direct file count to flag.

    Returns:
        Flagged directories, largest first (ties by name).
    """
    flagged = [
        SuspiciousDirectory(directory, len(files))
        for directory, files in tree.items()
        if directory != ROOT and len(files) >= threshold
    ]
    flagged.sort(key=lambda s: (-s.count, s.directory))
    return flagged


def filter_scan(scan: ScanResult, exclude_dirs: Iterable[str]) -> ScanResult:
    """
    Remove excluded directories (and everything nested under them) from a scan.

    Entries are normalized ("./vendor/" is "vendor") and the root itself is
    never excluded. The input scan is left untouched. With nothing to exclude
    the same scan is returned.
    """
    excluded = [posixpath.normpath(d.strip("/")) for d in exclude_dirs]
    excluded = [d for d in excluded if d != ROOT]
    if not excluded:
        return scan

    def _kept(path: str) -> bool:
        return not any(is_within(path, d) for d in excluded)

    logger.info("Excluding %s", ", ".join(excluded))
    return ScanResult(
        base_dir=scan.base_dir,
        directory_tree={d: files for d, files in scan.directory_tree.items() if _kept(d)},
        source_files=tuple(f for f in scan.source_files if _kept(f)),
        dependencies={f: r for f, r in scan.dependencies.items() if _kept(f)},
    )
