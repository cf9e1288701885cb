from __future__ import annotations

"""
Scanner configuration: which rules run, which annotation names count as
nullability annotations, and which directories are skipped.

Settings are read from a `nullscan.toml` file or from the `[tool.nullscan]`
table of a `pyproject.toml`, found by walking up from the working directory:

    [tool.nullscan]
    annotations = ["NonNull", "Nullable"]          # replaces the default set
    extra-annotations = ["org.jspecify.annotations.Nullable"]
    severity = "error"
    ignore-dirs = ["target", "generated"]

Without a file the defaults apply.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from nullscan.rules.annotations import DEFAULT_NULLABILITY_ANNOTATIONS, AnnotationMatcher
from nullscan.rules.base import Rule
from nullscan.rules.nullability import AnnotationPresenceRule
from nullscan.traversal import DEFAULT_IGNORE_DIRS

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "nullscan.toml"
PYPROJECT_FILENAME = "pyproject.toml"
SEVERITIES = ("error", "warning", "info")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or is invalid."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


@dataclass
class Config:
    """
    Scanner configuration.

    rules are built from annotations and severity by build_config(); edit
    those through build_config() rather than by hand so they stay in sync.
    """

    rules: Sequence[Rule] = field(default_factory=list)
    annotations: tuple[str, ...] = DEFAULT_NULLABILITY_ANNOTATIONS
    severity: str = "warning"
    ignore_dirs: frozenset[str] = frozenset(DEFAULT_IGNORE_DIRS)


def build_config(
    annotations: Optional[Iterable[str]] = None,
    extra_annotations: Iterable[str] = (),
    severity: str = "warning",
    ignore_dirs: Optional[Iterable[str]] = None,
) -> Config:
    """Assemble a Config and instantiate its rules."""
    names = tuple(DEFAULT_NULLABILITY_ANNOTATIONS if annotations is None else annotations)
    names = tuple(dict.fromkeys((*names, *extra_annotations)))
    if not names:
        logger.warning("Annotation set is empty; every declaration will be reported")
    rules: List[Rule] = [
        AnnotationPresenceRule(matcher=AnnotationMatcher(names), severity=severity),
    ]
    return Config(
        rules=rules,
        annotations=names,
        severity=severity,
        ignore_dirs=frozenset(DEFAULT_IGNORE_DIRS if ignore_dirs is None else ignore_dirs),
    )


def get_default_config() -> Config:
    """Return the configuration used when no config file is found."""
    return build_config()


def get_enabled_rules(config: Config | None = None) -> Sequence[Rule]:
    """Return the list of enabled rules from the given config (or default config)."""
    if config is None:
        config = get_default_config()
    return config.rules


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", path=path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}", path=path) from e


def _has_tool_table(path: Path) -> bool:
    try:
        data = _read_toml(path)
    except ConfigError as e:
        logger.warning("Skipping unreadable %s: %s", path, e)
        return False
    return "nullscan" in data.get("tool", {})


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """
    Find the nearest configuration file by walking up from start (default: cwd).

    In each directory nullscan.toml wins over pyproject.toml, and a
    pyproject.toml only counts if it has a [tool.nullscan] table.
    """
    if start is None:
        start = Path.cwd()
    start = start.resolve()
    if start.is_file():
        start = start.parent

    for directory in [start, *start.parents]:
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        candidate = directory / PYPROJECT_FILENAME
        if candidate.is_file() and _has_tool_table(candidate):
            return candidate
    return None


def _string_list(data: dict[str, Any], key: str, path: Path) -> Optional[list[str]]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings", path=path)
    return value


def parse_config(data: dict[str, Any], path: Path) -> Config:
    """Validate a [tool.nullscan] style table and build a Config from it."""
    annotations = _string_list(data, "annotations", path)
    extra = _string_list(data, "extra-annotations", path) or []
    ignore_dirs = _string_list(data, "ignore-dirs", path)

    severity = data.get("severity", "warning")
    if not isinstance(severity, str) or severity.lower() not in SEVERITIES:
        raise ConfigError(
            f"severity must be one of {', '.join(SEVERITIES)}, got {severity!r}",
            path=path,
        )

    unknown = sorted(set(data) - {"annotations", "extra-annotations", "ignore-dirs", "severity"})
    if unknown:
        logger.warning("%s: ignoring unknown key(s): %s", path, ", ".join(unknown))

    return build_config(
        annotations=annotations,
        extra_annotations=extra,
        severity=severity.lower(),
        ignore_dirs=ignore_dirs,
    )


def load_config(path: Optional[Path] = None, start: Optional[Path] = None) -> Config:
    """
    Load configuration from an explicit file, or discover one from start.

    Raises:
        ConfigError: If the file cannot be read or holds invalid values.
    """
    if path is None:
        path = find_config_file(start)
    if path is None:
        logger.debug("No configuration file found; using defaults")
        return get_default_config()

    data = _read_toml(path)
    if path.name == PYPROJECT_FILENAME:
        data = data.get("tool", {}).get("nullscan", {})
    if not isinstance(data, dict):
        raise ConfigError("[tool.nullscan] must be a table", path=path)

    logger.info("Loaded configuration from %s", path)
    return parse_config(data, path)
