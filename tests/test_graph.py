"""Tests for graph data model and anomaly detection."""

from pathlib import Path

from graph.anomaly import detect_suspicious_dirs, filter_scan
from graph.model import (
    DependencyRecord,
    DirectoryGraph,
    ImportKind,
    OrderedSet,
    Resolution,
    ScanResult,
    ancestors,
    directory_of,
    is_within,
    package_name,
    parent_module,
)


def _rel(token, target, exists=True):
    return Resolution(token, target, ImportKind.RELATIVE, exists=exists)


def _ext(token):
    return Resolution(token, token, ImportKind.EXTERNAL)


def _scan(records, tree=None):
    """Build a ScanResult from {file: [resolutions]}."""
    dependencies = {f: DependencyRecord.from_resolutions(r) for f, r in records.items()}
    if tree is None:
        tree = {}
        for file_path in records:
            tree.setdefault(directory_of(file_path), []).append(file_path.rsplit("/", 1)[-1])
    return ScanResult(
        base_dir=Path("/repo"),
        directory_tree=tree,
        source_files=tuple(records),
        dependencies=dependencies,
    )


class TestOrderedSet:
    """Tests for insertion-ordered deduplication."""

    def test_keeps_first_seen_order(self):
        """Test order and deduplication."""
        items = OrderedSet(["b", "a", "b", "c", "a"])

        assert list(items) == ["b", "a", "c"]
        assert len(items) == 3
        assert "c" in items

    def test_add_reports_new_items(self):
        """Test the add return value."""
        items = OrderedSet()

        assert items.add("x")
        assert not items.add("x")


class TestPathHelpers:
    """Tests for relative path helpers."""

    def test_directory_of(self):
        assert directory_of("a/b/c.ts") == "a/b"
        assert directory_of("c.ts") == "."

    def test_is_within(self):
        assert is_within("a/b", "a")
        assert is_within("a", "a")
        assert not is_within("ab", "a")
        assert is_within("anything", ".")

    def test_ancestors(self):
        assert ancestors("a/b/c") == ["a", "a/b"]
        assert ancestors("a") == []
        assert ancestors(".") == []

    def test_parent_module(self):
        assert parent_module("a/b/c") == "a/b"
        assert parent_module("a") == "a"
        assert parent_module(".") == "."

    def test_package_name(self):
        assert package_name("lodash/fp") == "lodash"
        assert package_name("@scope/pkg/sub") == "@scope/pkg"
        assert package_name("react") == "react"


class TestDependencyRecord:
    """Tests for the three per-file views."""

    def test_views(self):
        """Test all / resolved / raw pair views."""
        record = DependencyRecord.from_resolutions([
            _rel("./a", "x/a.ts"),
            _rel("./a.ts", "x/a.ts"),
            _rel("./missing", "x/missing", exists=False),
            _ext("react"),
        ])

        assert record.all_targets == ("x/a.ts", "x/missing", "react")
        assert record.resolved == ("x/a.ts",)
        assert record.raw_pairs == (
            ("./a", "x/a.ts"),
            ("./a.ts", "x/a.ts"),
            ("./missing", "x/missing"),
            ("react", "react"),
        )

    def test_all_view_has_no_duplicates(self):
        """Test deduplication of the all view."""
        record = DependencyRecord.from_resolutions([_ext("a"), _ext("b"), _rel("./a", "a")])

        assert len(record.all_targets) == len(set(record.all_targets))


class TestDirectoryGraph:
    """Tests for directory-level edges."""

    def test_edges_from_resolved_only(self):
        """Test that unresolved, external and same-directory imports add no edge."""
        scan = _scan({
            "a/x.ts": [
                _rel("../b/y", "b/y.ts"),
                _rel("./z", "a/z.ts"),
                _rel("../c/gone", "c/gone", exists=False),
                _ext("react"),
            ],
            "a/z.ts": [],
            "b/y.ts": [],
        })

        assert scan.directory_graph.edges == {"a": frozenset({"b"})}

    def test_subdirectory_import_is_an_edge(self):
        """Test that a different directory, even nested, produces an edge."""
        scan = _scan({"a/x.ts": [_rel("./sub/y", "a/sub/y.ts")], "a/sub/y.ts": []})

        assert scan.directory_graph.has_edge("a", "a/sub")

    def test_mutual_reported_once(self):
        """Test symmetric detection with one report per pair."""
        scan = _scan({
            "a/x.ts": [_rel("../b/y", "b/y.ts")],
            "b/y.ts": [_rel("../a/x", "a/x.ts")],
            "c/z.ts": [_rel("../a/x", "a/x.ts")],
        })

        assert scan.mutual_dependencies() == [("a", "b")]

    def test_counts_and_examples(self):
        """Test edge weights and example files."""
        records = {
            f"a/f{i}.ts": [_rel(f"../b/y{i}", f"b/y{i}.ts")] for i in range(5)
        }
        graph = DirectoryGraph.from_records(_scan(records).dependencies)

        assert graph.import_count("a", "b") == 5
        assert graph.examples("a", "b") == ("a/f0.ts", "a/f1.ts", "a/f2.ts")
        assert graph.sources("b") == {"a"}
        assert len(graph) == 1

    def test_isolated_directories(self):
        """Test islands exclude connected and root directories."""
        scan = _scan({
            "main.ts": [],
            "a/x.ts": [_rel("../b/y", "b/y.ts")],
            "b/y.ts": [],
            "c/z.ts": [],
        })

        assert scan.directory_graph.isolated(scan.directory_tree) == ["c"]

    def test_external_usage(self):
        """Test grouping of external imports by package."""
        scan = _scan({
            "a/x.ts": [_ext("react"), _ext("@scope/pkg/sub")],
            "b/y.ts": [_ext("react-dom/client"), _ext("react")],
        })

        usage = scan.external_usage()

        assert list(usage)[0] == "react"
        assert usage["react"] == {"a", "b"}
        assert usage["@scope/pkg"] == {"a"}


class TestScanResult:
    """Tests for the scan result container."""

    def test_directories_root_first(self):
        """Test page order: root, then lexicographic."""
        scan = _scan({"z/a.ts": [], "main.ts": [], "b/c.ts": [], "b/d/e.ts": []})

        assert scan.directories == [".", "b", "b/d", "z"]

    def test_empty(self):
        scan = ScanResult.empty(Path("/repo"))

        assert scan.is_empty
        assert scan.directories == []
        assert scan.mutual_dependencies() == []

    def test_repr(self):
        scan = _scan({"a/x.ts": [_rel("../b/y", "b/y.ts")], "b/y.ts": []})

        assert "files=2" in repr(scan)
        assert "edges=1" in repr(scan)


class TestAnomalyDetection:
    """Tests for suspicious directory detection."""

    def test_threshold_is_inclusive(self):
        """Test that exactly the threshold is flagged and one less is not."""
        tree = {
            "vendor": [f"f{i}.js" for i in range(50)],
            "src": [f"f{i}.js" for i in range(49)],
        }

        suspicious = detect_suspicious_dirs(tree)

        assert [(s.directory, s.count) for s in suspicious] == [("vendor", 50)]

    def test_custom_threshold_sorted_by_count(self):
        """Test ordering by descending count."""
        tree = {"small": ["a"] * 5, "big": ["a"] * 60, "mid": ["a"] * 10}

        suspicious = detect_suspicious_dirs(tree, threshold=5)

        assert [s.directory for s in suspicious] == ["big", "mid", "small"]

    def test_ignores_root(self):
        """Test that the root directory is never flagged."""
        tree = {".": [f"file{i}.js" for i in range(100)]}

        assert detect_suspicious_dirs(tree) == []

    def test_counts_direct_files_only(self):
        """Test that nested files do not count toward a parent."""
        tree = {"lib": ["a.js"], "lib/gen": [f"g{i}.js" for i in range(49)]}

        assert detect_suspicious_dirs(tree) == []


class TestFilterScan:
    """Tests for excluding directories from a scan."""

    def _vendor_scan(self):
        records = {f"vendor/v{i}.js": [] for i in range(3)}
        records["vendor/deep/x.js"] = []
        records["vendorized/keep.js"] = []
        records["src/app.js"] = [_rel("../vendor/v0", "vendor/v0.js")]
        return _scan(records)

    def test_removes_excluded_directory(self):
        """Test that nothing at or under vendor survives."""
        filtered = filter_scan(self._vendor_scan(), ["vendor"])

        assert not any(f.startswith("vendor/") for f in filtered.source_files)
        assert not any(d == "vendor" or d.startswith("vendor/") for d in filtered.directory_tree)
        assert not any(f.startswith("vendor/") for f in filtered.dependencies)
        assert "vendorized/keep.js" in filtered.source_files
        assert "src/app.js" in filtered.dependencies

    def test_original_untouched(self):
        """Test that filtering produces a new result."""
        scan = self._vendor_scan()

        filtered = filter_scan(scan, ["vendor/"])

        assert filtered is not scan
        assert "vendor/v0.js" in scan.source_files
        assert "vendor" in scan.directory_tree

    def test_empty_exclusion_returns_scan(self):
        scan = self._vendor_scan()

        assert filter_scan(scan, []) is scan

    def test_exclusion_entries_are_normalized(self):
        """Test that dotted and slashed spellings exclude the same directory."""
        scan = self._vendor_scan()

        for entry in ("./vendor", "vendor/", "./vendor/deep/..", "vendor//"):
            filtered = filter_scan(scan, [entry])

            assert not any(f.startswith("vendor/") for f in filtered.source_files)
            assert "vendorized/keep.js" in filtered.source_files

    def test_root_entry_excludes_nothing(self):
        scan = self._vendor_scan()

        assert filter_scan(scan, ["./", "."]) is scan
