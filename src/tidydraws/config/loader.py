"""Load tidydraws settings from YAML files.

Files are merged in order, later files overriding earlier ones key by key,
and ``$VAR`` / ``${VAR}`` references in string values are expanded from the
environment. When no file is given, ``$TIDYDRAWS_CONFIG`` may name one or
more files (separated by ``os.pathsep``); otherwise defaults apply.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import yaml

from .schema import AppConfig

logger = structlog.get_logger(__name__)

CONFIG_ENV_VAR = "TIDYDRAWS_CONFIG"

PathLike = str | Path


def _merge_sections(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive dict merge; lists and scalars in ``override`` replace ``base``."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge_sections(current, value)
        else:
            merged[key] = value
    return merged


def _expand(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {key: _expand(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand(item) for item in value]
    return value


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        content = yaml.safe_load(f)
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(content).__name__}")
    return content


def config_paths(paths: PathLike | Iterable[PathLike] | None = None) -> list[Path]:
    """Resolve the config files to read, falling back to ``$TIDYDRAWS_CONFIG``."""
    if paths is None:
        env = os.environ.get(CONFIG_ENV_VAR, "")
        return [Path(p) for p in env.split(os.pathsep) if p]
    if isinstance(paths, (str, Path)):
        return [Path(paths)]
    return [Path(p) for p in paths]


def load_config(paths: PathLike | Iterable[PathLike] | None = None) -> AppConfig:
    """Build an AppConfig from zero or more YAML files.

    Raises:
        pydantic.ValidationError: A value fails the schema.
        ValueError: A file is not a YAML mapping.
        yaml.YAMLError: A file is not valid YAML.
    """
    data: dict[str, Any] = {}
    resolved = config_paths(paths)
    for path in resolved:
        data = _merge_sections(data, _read_yaml(path))
    config = AppConfig(**_expand(data))
    logger.debug("config_loaded", files=[str(p) for p in resolved])
    return config
