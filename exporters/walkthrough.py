"""Paginated walkthrough: an overview page, then one page per directory."""

from typing import List, Tuple

from graph.model import (
    ROOT, ScanResult, Resolution, directory_of, is_within, parent_module,
)
from .ascii_exporter import (
    RULE_WIDTH, dir_label, get_glyphs, plural, render_directory_tree,
)


def page_count(scan: ScanResult) -> int:
    """Overview page plus one page per populated directory."""
    return 1 + len(scan.directory_tree)


def outgoing_imports(scan: ScanResult, directory: str) -> List[Tuple[str, List[Resolution]]]:
    """
    Files of a directory with imports that leave it.

    Targets in the same directory or a subdirectory are internal and dropped.
    External packages have no directory and are not counted.

    Returns:
        (file path, outgoing resolutions) pairs, files in tree order.
    """
    result = []
    for name in scan.directory_tree.get(directory, ()):
        file_path = name if directory == ROOT else f"{directory}/{name}"
        record = scan.dependencies.get(file_path)
        if record is None:
            continue
        seen = set()
        outgoing = []
        for resolution in record.resolutions:
            if not resolution.internal or resolution.target in seen:
                continue
            seen.add(resolution.target)
            if not is_within(directory_of(resolution.target), directory):
                outgoing.append(resolution)
        if outgoing:
            result.append((file_path, outgoing))
    return result


def _overview_page(scan: ScanResult, total: int, style: str) -> List[str]:
    glyphs = get_glyphs(style)
    lines = [f"Page 1/{total}: Overview", glyphs.rule * RULE_WIDTH, "",
             "Directory Tree", ""]
    lines.extend(render_directory_tree(scan, style))
    lines.append("")
    lines.append(f"  {plural(len(scan.source_files), 'source file')} total")
    lines.append("")
    if scan.directories:
        lines.append("Pages")
        for number, directory in enumerate(scan.directories, start=2):
            lines.append(f"  {number}. {dir_label(directory)}")
        lines.append("")
    return lines


def _directory_page(scan: ScanResult, directory: str, number: int, total: int,
                    style: str) -> List[str]:
    glyphs = get_glyphs(style)
    parent = parent_module(directory)
    lines = [
        f"Page {number}/{total}: {dir_label(directory)}",
        glyphs.rule * RULE_WIDTH,
        f"{plural(len(scan.directory_tree.get(directory, ())), 'file')}, "
        f"parent module {dir_label(parent)}",
        "",
    ]

    files = outgoing_imports(scan, directory)
    if not files:
        lines.append("  No cross-directory imports.")
        lines.append("")
        return lines

    for file_path, resolutions in files:
        lines.append(f"  {file_path}")
        for resolution in resolutions:
            scope = "within" if is_within(directory_of(resolution.target), parent) else "leaves"
            missing = " (not found)" if not resolution.exists else ""
            lines.append(
                f"    {resolution.token} {glyphs.arrow} {resolution.target}{missing}"
                f"  [{scope} {dir_label(parent)}]"
            )
        lines.append("")
    return lines


def to_walkthrough_page(scan: ScanResult, page: int, style: str = "tree") -> str:
    """
    Render one page of the walkthrough.

    Page 1 is the directory tree overview; page n (n >= 2) covers the
    (n - 1)th directory, root first and the rest in lexicographic order.

    Args:
        scan: Scan result to render.
        page: 1-indexed page number.
        style: "tree" (Unicode) or "ascii".

    Returns:
        Page text. A page outside the valid range yields a message saying so.
    """
    total = page_count(scan)
    if page < 1 or page > total:
        return (
            f"Page {page} is out of range: the walkthrough has "
            f"{plural(total, 'page')} (1-{total})."
        )
    if page == 1:
        lines = _overview_page(scan, total, style)
    else:
        directory = scan.directories[page - 2]
        lines = _directory_page(scan, directory, page, total, style)

    if page < total:
        lines.append(f"Next: --page {page + 1}")
    else:
        lines.append("End of walkthrough.")
    return "\n".join(lines)
