"""Exporters for rendering scan results in various output formats."""

from .ascii_exporter import render_directory_tree, to_full_report
from .walkthrough import page_count, to_walkthrough_page
from .json_exporter import to_json

__all__ = [
    "render_directory_tree",
    "to_full_report",
    "page_count",
    "to_walkthrough_page",
    "to_json",
]
