"""Scan configuration: .archtest.yml loading, lookup and merging with CLI flags."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .discovery import DEFAULT_SKIP_DIRS
from .errors import ConfigError
from .parser import DEFAULT_IMPORT_PATTERNS
from .resolver import AliasMap

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".archtest.yml"


@dataclass
class ScanConfig:
    """Scan settings read from a config file. None means "not set"."""

    extensions: Optional[List[str]] = None
    import_patterns: Optional[List[str]] = None
    skip_dirs: Optional[List[str]] = None
    aliases: Optional[Dict[str, str]] = None
    aliases_disabled: bool = False
    path: Optional[Path] = None


@dataclass
class ScanOptions:
    """Fully merged settings handed to scan_codebase."""

    extensions: Tuple[str, ...] = ()
    import_patterns: Tuple[Any, ...] = DEFAULT_IMPORT_PATTERNS
    skip_dirs: frozenset = DEFAULT_SKIP_DIRS
    aliases: AliasMap = field(default_factory=AliasMap)
    extensions_source: Optional[str] = None  # "cli", "config" or None


def normalize_extensions(values: Iterable[str]) -> List[str]:
    """Strip whitespace and make sure every extension starts with a dot."""
    result = []
    for value in values:
        value = value.strip()
        if not value:
            continue
        result.append(value if value.startswith(".") else "." + value)
    return result


def find_config(start: Path) -> Optional[Path]:
    """
    Look for .archtest.yml in start and then each of its parents.

    Returns:
        Path of the first config file found, or None.
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _string_list(value: Any, key: str, path: Path) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings", {"file": str(path)})
    return list(value)


def parse_config(data: Any, path: Path) -> ScanConfig:
    """Validate a loaded YAML document and turn it into a ScanConfig."""
    if data is None:
        return ScanConfig(path=path)
    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping", {"file": str(path)})

    config = ScanConfig(path=path)

    if "skip" in data:
        config.skip_dirs = _string_list(data["skip"], "skip", path)

    scan = data.get("scan")
    if scan is None:
        return config
    if not isinstance(scan, dict):
        raise ConfigError("'scan' must be a mapping", {"file": str(path)})

    if "extensions" in scan:
        config.extensions = normalize_extensions(
            _string_list(scan["extensions"], "scan.extensions", path)
        )
    if "import-patterns" in scan:
        config.import_patterns = _string_list(
            scan["import-patterns"], "scan.import-patterns", path
        )
    if "skip-dirs" in scan:
        # scan.skip-dirs wins over the legacy top-level skip list
        config.skip_dirs = _string_list(scan["skip-dirs"], "scan.skip-dirs", path)

    aliases = scan.get("aliases")
    if aliases is False:
        config.aliases_disabled = True
    elif aliases is not None:
        if not isinstance(aliases, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in aliases.items()
        ):
            raise ConfigError(
                "'scan.aliases' must map prefixes to directories", {"file": str(path)}
            )
        config.aliases = dict(aliases)

    return config


def load_config(path: Path) -> ScanConfig:
    """
    Load a scan config file.

    Raises:
        ConfigError: If the file cannot be read or is not valid.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config: {exc.strerror or exc}", {"file": str(path)}) from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML: {exc}", {"file": str(path)}) from exc
    config = parse_config(data, path)
    logger.debug("Loaded scan config from %s", path)
    return config


def relative_alias_target(target: str, base_dir: Path) -> str:
    """
    Express an absolute alias target relative to base_dir.

    Relative targets are returned unchanged. A target outside base_dir comes
    back as a ``../`` path, which the resolver discards as an escape.
    """
    if not Path(target).is_absolute():
        return target
    rel = os.path.relpath(Path(target).resolve(), Path(base_dir).resolve())
    return rel.replace(os.sep, "/")


def merge_options(
    config: Optional[ScanConfig] = None,
    extensions: Optional[Iterable[str]] = None,
    skip_extensions: Optional[Iterable[str]] = None,
    import_patterns: Optional[Iterable[str]] = None,
    skip_dirs: Optional[Iterable[str]] = None,
    aliases: Optional[Dict[str, str]] = None,
    no_aliases: bool = False,
    base_dir: Optional[Path] = None,
) -> ScanOptions:
    """
    Merge CLI values over config values over defaults.

    Skip directories always add to DEFAULT_SKIP_DIRS. CLI aliases are merged
    over config aliases (same prefix: CLI wins). With base_dir given,
    absolute alias targets are rewritten relative to it.
    """
    config = config or ScanConfig()
    options = ScanOptions()

    cli_ext = normalize_extensions(extensions) if extensions else None
    if cli_ext:
        options.extensions = tuple(cli_ext)
        options.extensions_source = "cli"
    elif config.extensions:
        options.extensions = tuple(config.extensions)
        options.extensions_source = "config"

    if skip_extensions and options.extensions:
        dropped = set(normalize_extensions(skip_extensions))
        options.extensions = tuple(e for e in options.extensions if e not in dropped)

    patterns = list(import_patterns or ())
    if patterns:
        options.import_patterns = tuple(patterns)
    elif config.import_patterns:
        options.import_patterns = tuple(config.import_patterns)

    extra_skip = list(skip_dirs or ()) or list(config.skip_dirs or ())
    options.skip_dirs = DEFAULT_SKIP_DIRS | frozenset(extra_skip)

    if no_aliases:
        return options
    merged = {} if config.aliases_disabled else dict(config.aliases or {})
    merged.update(aliases or {})
    if base_dir is not None:
        merged = {p: relative_alias_target(t, base_dir) for p, t in merged.items()}
    options.aliases = AliasMap.from_mapping(merged)

    return options


def parse_alias(value: str) -> Tuple[str, str]:
    """Parse a PREFIX=DIR alias argument."""
    prefix, sep, target = value.partition("=")
    if not sep or not prefix:
        raise ConfigError(f"Alias must look like PREFIX=DIR, got {value!r}")
    return prefix, target or "."
