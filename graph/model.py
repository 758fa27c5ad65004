"""Data model for scan results and directory-level dependency graphs."""

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path
from types import MappingProxyType
from typing import (
    Dict, FrozenSet, Generic, Iterable, Iterator, List, Mapping, Set, Tuple, TypeVar,
)

T = TypeVar("T")

ROOT = "."
MAX_EDGE_EXAMPLES = 3


class OrderedSet(Generic[T]):
    """A set that remembers insertion order."""

    def __init__(self, items: Iterable[T] = ()):
        self._items: Dict[T, None] = {}
        for item in items:
            self.add(item)

    def add(self, item: T) -> bool:
        """Add item; return False if it was already present."""
        if item in self._items:
            return False
        self._items[item] = None
        return True

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"


# ---------------------------------------------------------------------------
# Path helpers (relative POSIX paths, "." is the base directory)
# ---------------------------------------------------------------------------


def directory_of(path: str) -> str:
    """Return the directory containing a relative file path."""
    return posixpath.dirname(path) or ROOT


def is_within(path: str, directory: str) -> bool:
    """Check if a relative path equals or is nested under directory."""
    if directory == ROOT:
        return True
    return path == directory or path.startswith(directory + "/")


def ancestors(directory: str) -> List[str]:
    """Return the proper ancestors of a directory, outermost first, root excluded."""
    if directory == ROOT:
        return []
    parts = directory.split("/")
    return ["/".join(parts[:i]) for i in range(1, len(parts))]


def parent_module(directory: str) -> str:
    """
    Return the directory one segment above, or the directory itself at top level.

    ``a/b/c`` -> ``a/b``, ``a`` -> ``a``, ``.`` -> ``.``
    """
    parent = posixpath.dirname(directory)
    return parent or directory


def package_name(token: str) -> str:
    """Reduce an external import token to its package name (``@scope/name`` or ``name``)."""
    parts = token.split("/")
    if token.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


# ---------------------------------------------------------------------------
# Per-file records
# ---------------------------------------------------------------------------


class ImportKind(str, Enum):
    """How a raw import token was interpreted."""

    RELATIVE = "relative"
    ALIAS = "alias"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Resolution:
    """A raw import token and the target it resolved to."""

    token: str
    target: str
    kind: ImportKind
    exists: bool = False

    @property
    def internal(self) -> bool:
        """True for relative and alias imports (attributable to the tree)."""
        return self.kind is not ImportKind.EXTERNAL


@dataclass(frozen=True)
class DependencyRecord:
    """
    Import views of a single source file.

    all_targets: every target, deduplicated, first-seen order.
    resolved: targets of internal imports confirmed to exist in the tree.
    raw_pairs: (token as written, target) for each kept import.
    """

    resolutions: Tuple[Resolution, ...] = ()
    all_targets: Tuple[str, ...] = ()
    resolved: Tuple[str, ...] = ()
    raw_pairs: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_resolutions(cls, resolutions: Iterable[Resolution]) -> "DependencyRecord":
        """Build the three views from resolutions in extraction order."""
        kept = tuple(resolutions)
        all_targets: OrderedSet[str] = OrderedSet()
        resolved: OrderedSet[str] = OrderedSet()
        for resolution in kept:
            all_targets.add(resolution.target)
            if resolution.internal and resolution.exists:
                resolved.add(resolution.target)
        return cls(
            resolutions=kept,
            all_targets=tuple(all_targets),
            resolved=tuple(resolved),
            raw_pairs=tuple((r.token, r.target) for r in kept),
        )


# ---------------------------------------------------------------------------
# Directory graph
# ---------------------------------------------------------------------------


class DirectoryGraph:
    """
    Directory-to-directory import edges.

    Built in one step from finished dependency records and not modified
    afterwards. Only resolved imports whose target directory differs from the
    importing file's directory produce an edge.
    """

    def __init__(
        self,
        edges: Mapping[str, Iterable[str]] = MappingProxyType({}),
        counts: Mapping[Tuple[str, str], int] = MappingProxyType({}),
        examples: Mapping[Tuple[str, str], Iterable[str]] = MappingProxyType({}),
    ):
        self._edges: Dict[str, FrozenSet[str]] = {
            source: frozenset(targets) for source, targets in edges.items() if targets
        }
        self._counts: Dict[Tuple[str, str], int] = dict(counts)
        self._examples: Dict[Tuple[str, str], Tuple[str, ...]] = {
            key: tuple(files) for key, files in examples.items()
        }

    @classmethod
    def from_records(cls, records: Mapping[str, DependencyRecord]) -> "DirectoryGraph":
        """Derive the graph from per-file dependency records."""
        edges: Dict[str, Set[str]] = {}
        counts: Dict[Tuple[str, str], int] = {}
        examples: Dict[Tuple[str, str], OrderedSet[str]] = {}

        for file_path, record in records.items():
            source_dir = directory_of(file_path)
            for target in record.resolved:
                target_dir = directory_of(target)
                if target_dir == source_dir:
                    continue
                edges.setdefault(source_dir, set()).add(target_dir)
                key = (source_dir, target_dir)
                counts[key] = counts.get(key, 0) + 1
                files = examples.setdefault(key, OrderedSet())
                if len(files) < MAX_EDGE_EXAMPLES:
                    files.add(file_path)

        return cls(edges, counts, examples)

    @property
    def edges(self) -> Dict[str, FrozenSet[str]]:
        """Return adjacency mapping (source directory -> target directories)."""
        return dict(self._edges)

    def targets(self, directory: str) -> FrozenSet[str]:
        """Directories that directory imports from."""
        return self._edges.get(directory, frozenset())

    def sources(self, directory: str) -> Set[str]:
        """Directories that import from directory."""
        return {source for source, targets in self._edges.items() if directory in targets}

    def has_edge(self, source: str, target: str) -> bool:
        return target in self._edges.get(source, frozenset())

    def import_count(self, source: str, target: str) -> int:
        """Number of resolved imports behind an edge."""
        return self._counts.get((source, target), 0)

    def examples(self, source: str, target: str) -> Tuple[str, ...]:
        """Up to three importing files behind an edge, first-seen order."""
        return self._examples.get((source, target), ())

    def iter_edges(self) -> Iterator[Tuple[str, str]]:
        """Iterate over all edges as (source, target), sorted."""
        for source in sorted(self._edges):
            for target in sorted(self._edges[source]):
                yield source, target

    def mutual_dependencies(self) -> List[Tuple[str, str]]:
        """
        Directory pairs that import from each other.

        Each pair is reported once, smaller name first.
        """
        mutual = []
        for source, target in self.iter_edges():
            if source < target and self.has_edge(target, source):
                mutual.append((source, target))
        return mutual

    def isolated(self, directories: Iterable[str]) -> List[str]:
        """Non-root directories with no incoming or outgoing edges."""
        connected: Set[str] = set(self._edges)
        for targets in self._edges.values():
            connected.update(targets)
        return sorted(d for d in directories if d != ROOT and d not in connected)

    def __len__(self) -> int:
        """Return the number of edges."""
        return sum(len(targets) for targets in self._edges.values())

    def __repr__(self) -> str:
        return f"DirectoryGraph(directories={len(self._edges)}, edges={len(self)})"


# ---------------------------------------------------------------------------
# Scan result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanResult:
    """
    Everything one scan learned about a tree.

    directory_tree: relative directory -> basenames of in-scope files directly inside.
    source_files: relative paths of in-scope files, walk order.
    dependencies: relative file path -> DependencyRecord, walk order.
    """

    base_dir: Path
    directory_tree: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    source_files: Tuple[str, ...] = ()
    dependencies: Mapping[str, DependencyRecord] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "directory_tree", MappingProxyType(
            {d: tuple(files) for d, files in self.directory_tree.items()}
        ))
        object.__setattr__(self, "source_files", tuple(self.source_files))
        object.__setattr__(self, "dependencies", MappingProxyType(dict(self.dependencies)))

    @classmethod
    def empty(cls, base_dir: Path) -> "ScanResult":
        """A scan that had nothing in scope."""
        return cls(base_dir=base_dir)

    @property
    def is_empty(self) -> bool:
        return not self.source_files

    @cached_property
    def source_file_set(self) -> FrozenSet[str]:
        return frozenset(self.source_files)

    @property
    def directories(self) -> List[str]:
        """Populated directories: root first, then lexicographic."""
        others = sorted(d for d in self.directory_tree if d != ROOT)
        return ([ROOT] if ROOT in self.directory_tree else []) + others

    @cached_property
    def directory_graph(self) -> DirectoryGraph:
        return DirectoryGraph.from_records(self.dependencies)

    def mutual_dependencies(self) -> List[Tuple[str, str]]:
        return self.directory_graph.mutual_dependencies()

    def external_usage(self) -> Dict[str, Set[str]]:
        """
        External packages and the directories that import them.

        Sorted by number of importing directories, most used first.
        """
        usage: Dict[str, Set[str]] = {}
        for file_path, record in self.dependencies.items():
            for resolution in record.resolutions:
                if resolution.internal:
                    continue
                usage.setdefault(package_name(resolution.target), set()).add(
                    directory_of(file_path)
                )
        return dict(sorted(usage.items(), key=lambda item: (-len(item[1]), item[0])))

    def __repr__(self) -> str:
        return (
            f"ScanResult(directories={len(self.directory_tree)}, "
            f"files={len(self.source_files)}, "
            f"edges={len(self.directory_graph)})"
        )
