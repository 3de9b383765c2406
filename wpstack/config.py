"""Project configuration for wpstack."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .errors import ConfigError


CONFIG_FILENAME = "wpstack.yaml"


class Config:
    """Optional per-project YAML configuration.

    Lookup order (higher priority first):
    1. Values in the project's wpstack.yaml
    2. Built-in defaults passed by the caller

    Nested sections (``site``, ``theme``, ``services``, ``readiness``) are read
    with dotted keys, e.g. ``config.get("site.url")``.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config.

        Args:
            config_path: Config file to use. If None, uses ./wpstack.yaml.
        """
        self.config_path = Path(config_path) if config_path else Path.cwd() / CONFIG_FILENAME
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file; a missing file means all defaults."""
        if not self.config_path.exists():
            self._data = {}
            return
        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {self.config_path} must be a mapping, got {type(data).__name__}")
        self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    @property
    def project_dir(self) -> Path:
        return self.config_path.parent

    @classmethod
    def for_project(cls, project_dir: Optional[Path] = None) -> "Config":
        """Load ``wpstack.yaml`` from ``project_dir`` (default: cwd)."""
        base = Path(project_dir) if project_dir else Path.cwd()
        return cls(config_path=base / CONFIG_FILENAME)
