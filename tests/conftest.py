"""Shared fixtures for building throwaway source trees."""

from pathlib import Path
from typing import Callable, Dict

import pytest


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Return a helper that writes {relative path: content} under tmp_path."""

    def _make(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make
