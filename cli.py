#!/usr/bin/env python3
"""
archtest interview CLI

Scans a codebase for import-like statements, maps which directories depend
on which, and prints a report for reviewing architectural boundaries with
the developer.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler

from exporters import to_full_report, to_json, to_walkthrough_page
from graph.anomaly import DEFAULT_THRESHOLD, detect_suspicious_dirs, filter_scan
from scanner.builder import scan_codebase
from scanner.config import (
    ScanConfig, find_config, load_config, merge_options, parse_alias,
)
from scanner.discovery import LANGUAGE_FAMILIES, count_extensions, walk_files
from scanner.errors import ArchtestError

logger = logging.getLogger("archtest")

MAX_CENSUS_EXTENSIONS = 15
LOW_COVERAGE_RATIO = 0.1


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr through a rich handler."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=verbose,
        rich_tracebacks=True,
    )
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def _split_csv(values: Optional[List[str]]) -> Optional[List[str]]:
    if not values:
        return None
    items = [item.strip() for value in values for item in value.split(",")]
    return [item for item in items if item]


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="archtest",
        description="Scan a codebase's imports and generate an architectural interview.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  archtest --ext .ts,.tsx                      # Full report for a TypeScript project
  archtest src --ext .ts --alias @/=src        # Resolve '@/...' imports into src/
  archtest --ext .go --import-pattern '^\\s*"([^"]+)"'
  archtest --ext .py --import-pattern 'from\\s+(\\S+)\\s+import'
  archtest --ext .ts --page 1                  # Walk through one directory per page
  archtest --ext .ts -f json -o scan.json      # JSON output to file

Settings can be persisted in .archtest.yml (scan: extensions, import-patterns,
skip-dirs, aliases). CLI flags always override the config file.
        """,
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Base directory to scan (default: current directory)",
    )

    # Scanning options
    parser.add_argument(
        "--ext",
        action="append",
        default=None,
        help="Comma-separated file extensions to scan (e.g. .ts,.tsx)",
    )
    parser.add_argument(
        "--skip-ext",
        action="append",
        default=None,
        help="Comma-separated extensions to drop from the scan",
    )
    parser.add_argument(
        "--import-pattern",
        action="append",
        default=None,
        help="Regex extracting imports, capture group 1 = target (repeatable)",
    )
    parser.add_argument(
        "--skip",
        action="append",
        default=None,
        help="Comma-separated directory names to skip (adds to defaults)",
    )
    parser.add_argument(
        "--alias",
        action="append",
        default=None,
        metavar="PREFIX=DIR",
        help="Map an import prefix to a directory (repeatable)",
    )
    parser.add_argument(
        "--no-aliases",
        action="store_true",
        help="Disable alias resolution, including aliases from the config file",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to the config file (default: nearest .archtest.yml)",
    )
    parser.add_argument(
        "--full",
        action="store_true",
        help="Disable auto-exclusion of large (likely vendored) directories",
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=DEFAULT_THRESHOLD,
        help=f"File count that marks a directory as vendored (default: {DEFAULT_THRESHOLD})",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Threads used to read files (default: 1)",
    )
    parser.add_argument(
        "--best-effort",
        action="store_true",
        help="Skip unreadable entries instead of aborting the scan",
    )

    # Output options
    parser.add_argument(
        "--page",
        type=int,
        default=None,
        help="Show one page of the walkthrough (1 = overview)",
    )
    parser.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--ascii-style",
        choices=["tree", "ascii"],
        default="tree",
        help="Tree style: 'tree' (Unicode) or 'ascii' (pure ASCII)",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")

    parsed = parser.parse_args(args)
    if parsed.format == "json" and parsed.page is not None:
        parser.error("--page cannot be combined with --format json")
    return parsed


def _load_config(parsed, root: Path) -> ScanConfig:
    if parsed.config:
        return load_config(Path(parsed.config))
    path = find_config(root)
    if path is None:
        return ScanConfig()
    return load_config(path)


def _extension_guidance(root: Path, files: List[Path]) -> str:
    counts = count_extensions(files)
    common = [(ext, n) for ext, n in counts.items() if n >= 2]
    lines = []
    if common:
        top = common[:MAX_CENSUS_EXTENSIONS]
        summary = ", ".join(
            f"{ext} ({n}{', ' + LANGUAGE_FAMILIES[ext] if ext in LANGUAGE_FAMILIES else ''})"
            for ext, n in top
        )
        more = len(common) - len(top)
        lines.append(f"Extensions found: {summary}" + (f", ...and {more} more" if more > 0 else ""))
    else:
        lines.append(f"No files found in {root}")
    top_ext = next(iter(counts), ".js")
    lines.append("")
    lines.append(f"No extensions selected. Use --ext {top_ext} to scan {top_ext[1:].upper()} files,")
    lines.append("or set scan.extensions in .archtest.yml.")
    return "\n".join(lines)


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)
    setup_logging(verbose=parsed.verbose, quiet=parsed.quiet)

    root = Path(parsed.root).resolve()
    if not root.is_dir():
        print(f"Error: '{parsed.root}' is not a directory", file=sys.stderr)
        return 1

    try:
        config = _load_config(parsed, root)
        aliases: Dict[str, str] = dict(parse_alias(a) for a in parsed.alias or ())
        options = merge_options(
            config,
            extensions=_split_csv(parsed.ext),
            skip_extensions=_split_csv(parsed.skip_ext),
            import_patterns=parsed.import_pattern,
            skip_dirs=_split_csv(parsed.skip),
            aliases=aliases,
            no_aliases=parsed.no_aliases,
            base_dir=root,
        )

        all_files = walk_files(root, skip_dirs=options.skip_dirs, strict=not parsed.best_effort)
        if not options.extensions:
            print(_extension_guidance(root, all_files))
            return 0

        if options.extensions_source == "config":
            logger.info("Scanning (from %s): %s", config.path, ", ".join(options.extensions))

        scan = scan_codebase(
            root,
            extensions=options.extensions,
            import_patterns=options.import_patterns,
            skip_dirs=options.skip_dirs,
            aliases=options.aliases,
            jobs=parsed.jobs,
            strict=not parsed.best_effort,
        )
    except ArchtestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    excluded = []
    if not parsed.full:
        excluded = detect_suspicious_dirs(scan.directory_tree, parsed.threshold)
        if excluded:
            scan = filter_scan(scan, [s.directory for s in excluded])

    if all_files and len(scan.source_files) < len(all_files) * LOW_COVERAGE_RATIO:
        logger.warning(
            "Only scanning %d of %d files. Use --ext to include other extensions.",
            len(scan.source_files), len(all_files),
        )

    if parsed.format == "json":
        output = to_json(scan, excluded=excluded, threshold=parsed.threshold)
    elif parsed.page is not None:
        output = to_walkthrough_page(scan, parsed.page, style=parsed.ascii_style)
    else:
        output = to_full_report(scan, style=parsed.ascii_style, excluded=excluded)

    if parsed.output:
        try:
            output_path = Path(parsed.output)
            output_path.write_text(output, encoding="utf-8")
            print(f"Output written to: {output_path}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
