"""
Project configuration — loads .pylineage.yaml and provides defaults.

Supports:
- exclude: paths (relative to the root) pruned from discovery
- ignore: gitignore-style patterns (augments .gitignore)
- cache: {enabled, dir}
- workers: size of the extraction thread pool
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".pylineage.yaml", ".pylineage.yml")


@dataclass
class ProjectConfig:
    """Project configuration from .pylineage.yaml."""
    exclude: list[str] = field(default_factory=list)
    ignore: list[str] = field(default_factory=list)
    cache_enabled: bool = True
    cache_dir: Optional[str] = None  # default: <root>/.pylineage-cache
    workers: Optional[int] = None  # default: executor default

    @classmethod
    def load(cls, project_root: Path) -> "ProjectConfig":
        """Load config from the project root, or return defaults."""
        for filename in CONFIG_FILENAMES:
            config_path = Path(project_root) / filename
            if config_path.exists():
                break
        else:
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", config_path, e)
            return cls()

        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a mapping", config_path)
            return cls()

        try:
            return cls._from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring invalid config %s: %s", config_path, e)
            return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "ProjectConfig":
        """Build a config, raising TypeError/ValueError on a bad value."""
        cache = data.get("cache")
        if cache is None:
            cache = {}
        elif isinstance(cache, bool):
            cache = {"enabled": cache}
        elif not isinstance(cache, dict):
            raise TypeError(f"'cache' must be a mapping or a boolean, not {type(cache).__name__}")

        enabled = cache.get("enabled", True)
        if not isinstance(enabled, bool):
            raise TypeError("'cache.enabled' must be true or false")
        cache_dir = cache.get("dir")
        if cache_dir is not None and not isinstance(cache_dir, str):
            raise TypeError("'cache.dir' must be a string")

        workers = data.get("workers")
        if workers is not None and (isinstance(workers, bool) or not isinstance(workers, int) or workers < 1):
            raise ValueError(f"'workers' must be a positive integer, not {workers!r}")

        return cls(
            exclude=_string_list(data, "exclude"),
            ignore=_string_list(data, "ignore"),
            cache_enabled=enabled,
            cache_dir=cache_dir,
            workers=workers,
        )


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError(f"'{key}' must be a list of strings")
    return list(value)
