"""Regex-based extraction of raw import tokens from source files."""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Pattern, Sequence, Tuple, Union

from graph.model import OrderedSet
from .errors import ConfigError

logger = logging.getLogger(__name__)


# Capture group 1 is the import target in every pattern
DEFAULT_IMPORT_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)"""),            # require('...')
    re.compile(r"""(?:import|export)\s+.*?\s+from\s+['"]([^'"]+)['"]"""),  # import/export ... from '...'
    re.compile(r"""^import\s+['"]([^'"]+)['"]""", re.MULTILINE),         # import '...' (side-effect)
)


def compile_patterns(
    sources: Iterable[Union[str, Pattern[str]]],
) -> Tuple[Pattern[str], ...]:
    """
    Compile import extraction patterns.

    Strings are compiled with re.MULTILINE so ``^`` anchors at each line.
    Already compiled patterns are kept as they are.

    Raises:
        ConfigError: If a pattern is not a valid regex or has no capturing group.
    """
    compiled: List[Pattern[str]] = []
    for source in sources:
        if isinstance(source, str):
            try:
                pattern = re.compile(source, re.MULTILINE)
            except re.error as exc:
                raise ConfigError(
                    f"Invalid import pattern: {exc}", {"pattern": source}
                ) from exc
        else:
            pattern = source
        if pattern.groups < 1:
            raise ConfigError(
                "Import pattern needs a capturing group for the import target",
                {"pattern": pattern.pattern},
            )
        compiled.append(pattern)
    return tuple(compiled)


def extract_imports(content: str, patterns: Sequence[Pattern[str]]) -> List[str]:
    """
    Extract raw import tokens from file content.

    Patterns are applied in order; every non-overlapping match contributes its
    first capturing group. Empty captures are ignored and a token is kept only
    the first time it is seen.

    Args:
        content: File content.
        patterns: Compiled patterns, each with at least one capturing group.

    Returns:
        Deduplicated tokens in first-seen order.
    """
    tokens: OrderedSet[str] = OrderedSet()
    for pattern in patterns:
        for match in pattern.finditer(content):
            token = match.group(1)
            if token:
                tokens.add(token)
    return list(tokens)


def read_source(file_path: Path) -> str:
    """Read a source file as UTF-8, replacing undecodable bytes."""
    return file_path.read_text(encoding="utf-8", errors="replace")


def extract_file_imports(file_path: Path, patterns: Sequence[Pattern[str]]) -> List[str]:
    """Read a file and extract its raw import tokens."""
    tokens = extract_imports(read_source(file_path), patterns)
    logger.debug("%s: %d import token(s)", file_path, len(tokens))
    return tokens
