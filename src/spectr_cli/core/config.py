"""Project configuration loaded from ``spectr.yaml``.

The file is searched for from the start directory upwards; the directory
holding it becomes the project root. Without a config file the defaults
apply and the start directory is the project root.

Example ``spectr.yaml``::

    root_dir: spectr
    validation:
      strictness: strict
      workers: 4
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import ruamel.yaml
from ruamel.yaml.error import YAMLError

from spectr_cli.validation.strictness import Strictness

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "spectr.yaml"
DEFAULT_ROOT_DIR = "spectr"

_INVALID_ROOT_DIR_PARTS = ("/", "\\", "..", "*")


class ConfigError(Exception):
    """``spectr.yaml`` is unreadable or holds an invalid value."""


@dataclass(frozen=True)
class SpectrConfig:
    """Resolved project configuration."""

    project_root: Path
    root_dir: str = DEFAULT_ROOT_DIR
    strictness: Strictness = Strictness.STRICT
    workers: int = 1
    config_path: Path | None = None

    @property
    def root_path(self) -> Path:
        """Directory holding ``specs/`` and ``changes/``."""
        return self.project_root / self.root_dir


def find_config_file(start: Path) -> Path | None:
    """Return the nearest ``spectr.yaml`` at or above ``start``."""
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> SpectrConfig:
    """Load configuration for the project containing ``start``.

    Args:
        start: Directory to search from (defaults to the working directory)

    Returns:
        The resolved configuration; defaults when no config file exists.

    Raises:
        ConfigError: If the config file is malformed or holds invalid values.
    """
    start = (start or Path.cwd()).resolve()
    config_path = find_config_file(start)
    if config_path is None:
        logger.debug("No %s found above %s, using defaults", CONFIG_FILENAME, start)
        return SpectrConfig(project_root=start)

    logger.debug("Loading configuration from %s", config_path)
    data = _read_yaml(config_path)
    try:
        return _build_config(data, config_path)
    except ConfigError as exc:
        raise ConfigError(f"invalid configuration in {config_path}: {exc}") from exc


def _read_yaml(config_path: Path) -> dict[str, Any]:
    yaml = ruamel.yaml.YAML(typ="safe")
    try:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.load(f)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"failed to read config file {config_path}: {exc}") from exc
    except YAMLError as exc:
        raise ConfigError(f"failed to parse YAML in {config_path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a YAML mapping")
    return data


def _build_config(data: dict[str, Any], config_path: Path) -> SpectrConfig:
    root_dir = data.get("root_dir") or DEFAULT_ROOT_DIR
    validate_root_dir(root_dir)

    validation = data.get("validation") or {}
    if not isinstance(validation, dict):
        raise ConfigError("'validation' must be a mapping")

    raw_strictness = validation.get("strictness", Strictness.STRICT.value)
    try:
        strictness = Strictness(str(raw_strictness).lower())
    except ValueError:
        choices = ", ".join(s.value for s in Strictness)
        raise ConfigError(
            f"invalid strictness '{raw_strictness}' (expected one of: {choices})"
        ) from None

    workers = validation.get("workers", 1)
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ConfigError(f"workers must be a positive integer, got {workers!r}")

    return SpectrConfig(
        project_root=config_path.parent,
        root_dir=root_dir,
        strictness=strictness,
        workers=workers,
        config_path=config_path,
    )


def validate_root_dir(root_dir: Any) -> None:
    """Ensure ``root_dir`` is a plain, visible directory name."""
    if not isinstance(root_dir, str) or not root_dir.strip():
        raise ConfigError("root_dir cannot be empty")
    found = [part for part in _INVALID_ROOT_DIR_PARTS if part in root_dir]
    if found:
        raise ConfigError(
            "root_dir must be a simple directory name "
            f"(found invalid characters: {', '.join(found)})"
        )
    if root_dir.startswith("."):
        raise ConfigError("root_dir cannot start with '.' (hidden directories not allowed)")
