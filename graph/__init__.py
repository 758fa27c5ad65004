"""Dependency graph model and anomaly detection."""

from .model import (
    DependencyRecord,
    DirectoryGraph,
    ImportKind,
    OrderedSet,
    Resolution,
    ScanResult,
)
from .anomaly import SuspiciousDirectory, detect_suspicious_dirs, filter_scan

__all__ = [
    "DependencyRecord",
    "DirectoryGraph",
    "ImportKind",
    "OrderedSet",
    "Resolution",
    "ScanResult",
    "SuspiciousDirectory",
    "detect_suspicious_dirs",
    "filter_scan",
]
