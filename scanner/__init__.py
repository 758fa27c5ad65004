"""Scanner module for file discovery, import extraction and resolution."""

from .discovery import iter_files, walk_files, count_extensions
from .parser import extract_imports, extract_file_imports, compile_patterns
from .resolver import AliasMap, resolve_import
from .builder import scan_codebase

__all__ = [
    "iter_files",
    "walk_files",
    "count_extensions",
    "extract_imports",
    "extract_file_imports",
    "compile_patterns",
    "AliasMap",
    "resolve_import",
    "scan_codebase",
]
