"""JSON exporter for scan results (machine-friendly format)."""

import json
from typing import Any, Dict, List, Optional, Sequence

from graph.anomaly import DEFAULT_THRESHOLD, SuspiciousDirectory, detect_suspicious_dirs
from graph.model import ScanResult


def to_json(
    scan: ScanResult,
    indent: int = 2,
    excluded: Optional[Sequence[SuspiciousDirectory]] = None,
    threshold: int = DEFAULT_THRESHOLD,
) -> str:
    """
    Convert a scan result to JSON format.

    Args:
        scan: The scan result to export.
        indent: JSON indentation level.
        excluded: Directories removed by auto-exclusion.
        threshold: File count that marks a remaining directory as suspicious.

    Returns:
        JSON string with the tree, per-file views and directory edges.
    """
    files: Dict[str, Any] = {}
    for file_path, record in scan.dependencies.items():
        files[file_path] = {
            "all": list(record.all_targets),
            "resolved": list(record.resolved),
            "imports": [
                {
                    "token": r.token,
                    "target": r.target,
                    "kind": r.kind.value,
                    "exists": r.exists,
                }
                for r in record.resolutions
            ],
        }

    graph = scan.directory_graph
    edges: List[Dict[str, Any]] = []
    for source, target in graph.iter_edges():
        edges.append({
            "source": source,
            "target": target,
            "count": graph.import_count(source, target),
            "examples": list(graph.examples(source, target)),
        })

    data: Dict[str, Any] = {
        "base_dir": str(scan.base_dir),
        "directories": {d: list(names) for d, names in scan.directory_tree.items()},
        "source_files": list(scan.source_files),
        "files": files,
        "edges": edges,
        "mutual": [list(pair) for pair in graph.mutual_dependencies()],
        "excluded": [
            {"directory": s.directory, "count": s.count} for s in (excluded or ())
        ],
        "suspicious": [
            {"directory": s.directory, "count": s.count}
            for s in detect_suspicious_dirs(scan.directory_tree, threshold)
        ],
    }

    return json.dumps(data, indent=indent)
