"""Text exporters: directory tree overview and the full interview report."""

from typing import Dict, List, NamedTuple, Optional, Sequence, Set

from graph.anomaly import SuspiciousDirectory
from graph.model import (
    ROOT, DependencyRecord, Resolution, ScanResult, ancestors,
)


class Glyphs(NamedTuple):
    branch: str
    last: str
    vertical: str
    space: str
    arrow: str
    both_ways: str
    rule: str


# Unicode tree characters
UNICODE = Glyphs("├── ", "└── ", "│   ", "    ", "→", "↔", "─")

# ASCII fallback characters
ASCII = Glyphs("|-- ", "\\-- ", "|   ", "    ", "->", "<->", "-")

RULE_WIDTH = 50
MAX_EXTERNAL_PACKAGES = 10


def get_glyphs(style: str = "tree") -> Glyphs:
    """Select the character set: "tree" (Unicode) or "ascii" (pure ASCII)."""
    return ASCII if style == "ascii" else UNICODE


def plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{'' if count == 1 else suffix}"


def dir_label(directory: str) -> str:
    """Display label for a directory: "(root)" or "path/"."""
    return "(root)" if directory == ROOT else f"{directory}/"


def target_lookup(record: DependencyRecord) -> Dict[str, Resolution]:
    """Map each target of a record to the first resolution that produced it."""
    lookup: Dict[str, Resolution] = {}
    for resolution in record.resolutions:
        lookup.setdefault(resolution.target, resolution)
    return lookup


def render_directory_tree(scan: ScanResult, style: str = "tree") -> List[str]:
    """
    Render the directory tree with direct file counts.

    Every ancestor of a populated directory is shown, even when it holds no
    files itself, so the tree is always connected.

    Returns:
        Output lines (no trailing blank line).
    """
    glyphs = get_glyphs(style)

    all_dirs: Set[str] = set()
    for directory in scan.directory_tree:
        if directory != ROOT:
            all_dirs.add(directory)
            all_dirs.update(ancestors(directory))

    children: Dict[str, List[str]] = {}
    for directory in sorted(all_dirs):
        parent = directory.rsplit("/", 1)[0] if "/" in directory else ROOT
        children.setdefault(parent, []).append(directory)

    def _count(directory: str) -> str:
        return plural(len(scan.directory_tree.get(directory, ())), "file")

    lines = [f"{dir_label(ROOT)}  {_count(ROOT)}"]

    def _render(directory: str, prefix: str) -> None:
        kids = children.get(directory, [])
        for i, child in enumerate(kids):
            is_last = i == len(kids) - 1
            connector = glyphs.last if is_last else glyphs.branch
            name = child.rsplit("/", 1)[-1]
            lines.append(f"{prefix}{connector}{name}/  {_count(child)}")
            _render(child, prefix + (glyphs.space if is_last else glyphs.vertical))

    _render(ROOT, "")
    return lines


def render_exclusion_notice(excluded: Sequence[SuspiciousDirectory]) -> List[str]:
    """Lines explaining which directories were auto-excluded."""
    lines = []
    for suspicious in excluded:
        lines.append(
            f"Excluded: {dir_label(suspicious.directory)} "
            f"({plural(suspicious.count, 'file')}, likely vendored or generated)"
        )
    if excluded:
        lines.append("Use --full to include excluded directories.")
    return lines


def _render_dependency_map(scan: ScanResult, glyphs: Glyphs) -> List[str]:
    lines = ["Dependency Map", ""]
    shown = 0
    for file_path, record in scan.dependencies.items():
        if not record.all_targets:
            continue
        shown += 1
        lookup = target_lookup(record)
        lines.append(f"  {file_path}")
        for target in record.all_targets:
            resolution = lookup[target]
            note = " (not found)" if resolution.internal and not resolution.exists else ""
            lines.append(f"    {glyphs.arrow} {target}{note}")
    if not shown:
        lines.append("  No imports found.")
    lines.append("")
    return lines


def _render_interview_guide(
    mutual: Sequence[tuple],
    externals: Dict[str, Set[str]],
    glyphs: Glyphs,
) -> List[str]:
    lines = [glyphs.rule * RULE_WIDTH, "", "Interview Guide",
             "Use these questions to discover architectural rules with the developer.", ""]
    number = 1

    lines.extend([
        f"{number}. Module Boundaries",
        "   For each directory that has incoming dependencies:",
        '   "Should other code import directly into this directory,',
        '    or should it go through a barrel/index file?"',
        "",
    ])
    number += 1

    if mutual:
        lines.append(f"{number}. Bidirectional Coupling")
        for a, b in mutual:
            lines.append(f'   "{dir_label(a)} and {dir_label(b)} import from each other.')
            lines.append("    Should one of them be independent of the other?")
            lines.append('    Which direction should the dependency flow?"')
        lines.append("")
        number += 1

    lines.extend([
        f"{number}. Layer Isolation",
        '   "Are there layers in this codebase (e.g., API, business logic,',
        "    database, UI)? Should lower layers be forbidden from importing",
        '    higher layers?"',
        "",
    ])
    number += 1

    lines.append(f"{number}. External Dependencies")
    if externals:
        lines.append("   Most-used external packages:")
        for package, dirs in list(externals.items())[:MAX_EXTERNAL_PACKAGES]:
            word = "directory" if len(dirs) == 1 else "directories"
            lines.append(f"     {package} (used in {len(dirs)} {word})")
        lines.append("")
        lines.append('   "Should any of these packages be restricted to specific')
        lines.append("    directories? For example, should database drivers only")
        lines.append('    be imported in the database layer?"')
    else:
        lines.append("   No external packages detected.")
    lines.append("")
    number += 1

    lines.extend([
        f"{number}. Strategy & Plugin Patterns",
        '   "Are there parts of the codebase that are meant to be',
        "    swappable or pluggable (strategies, adapters, providers)?",
        '    Should they be forbidden from importing each other?"',
        "",
    ])
    return lines


def to_full_report(
    scan: ScanResult,
    style: str = "tree",
    excluded: Optional[Sequence[SuspiciousDirectory]] = None,
) -> str:
    """
    Render the complete interview report.

    Sections: directory tree, per-file dependency map, mutual dependencies,
    isolated directories, then the interview guide.

    Args:
        scan: Scan result to render.
        style: "tree" (Unicode) or "ascii".
        excluded: Directories removed by auto-exclusion, for the notice.

    Returns:
        Report text.
    """
    glyphs = get_glyphs(style)
    graph = scan.directory_graph
    mutual = graph.mutual_dependencies()

    lines: List[str] = [
        "archtest interview: Codebase Analysis",
        glyphs.rule * RULE_WIDTH,
        "",
    ]

    notice = render_exclusion_notice(excluded or ())
    if notice:
        lines.extend(notice)
        lines.append("")

    lines.append("Directory Tree")
    lines.append("")
    lines.extend(render_directory_tree(scan, style))
    lines.append("")
    lines.append(f"  {plural(len(scan.source_files), 'source file')} total")
    lines.append("")

    lines.extend(_render_dependency_map(scan, glyphs))

    lines.append("Mutual Dependencies (bidirectional coupling)")
    lines.append("")
    if mutual:
        for a, b in mutual:
            lines.append(f"  {dir_label(a)} {glyphs.both_ways} {dir_label(b)}")
    else:
        lines.append("  None found.")
    lines.append("")

    islands = graph.isolated(scan.directory_tree)
    if islands:
        lines.append("Isolated Directories (no cross-directory imports)")
        lines.append("")
        for directory in islands:
            lines.append(f"  {dir_label(directory)}")
        lines.append("")

    lines.extend(_render_interview_guide(mutual, scan.external_usage(), glyphs))

    lines.extend([
        glyphs.rule * RULE_WIDTH,
        "",
        "Next Steps",
        "  1. Discuss the questions above with the developer",
        "  2. For each boundary they confirm, write an archtest rule",
        "  3. Save rules to .archtest.yml and run archtest",
        "",
    ])
    return "\n".join(lines)
