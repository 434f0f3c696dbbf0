"""Configuration loader for MyHub.

Handles loading and merging configuration from multiple sources.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..paths import METADATA_DIR
from ..utils.env import get_global_myhub_dir
from ..utils.fs import safe_json_load
from .types import HubConfig


CONFIG_NAME = "config.json"


class ConfigLoader:
    """Loads and manages MyHub configuration."""

    def __init__(self, project_root: Path | None = None):
        """Initialize config loader.

        Args:
            project_root: Repository root (for repository-local config)
        """
        self.project_root = project_root
        self._config: HubConfig | None = None

    @property
    def config(self) -> HubConfig:
        """Get loaded configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> HubConfig:
        """Load configuration from all sources.

        Priority (highest to lowest):
        1. Repository config (.myhub/config.json)
        2. Global config (~/.myhub/config.json)
        3. Default values

        Returns:
            Merged HubConfig
        """
        merged: dict[str, Any] = {}

        global_config_path = get_global_myhub_dir() / CONFIG_NAME
        if global_config_path.exists():
            global_data = safe_json_load(global_config_path, {})
            if isinstance(global_data, dict):
                merged = self._deep_merge(merged, global_data)

        if self.project_root:
            project_config_path = self.project_root / METADATA_DIR / CONFIG_NAME
            if project_config_path.exists():
                project_data = safe_json_load(project_config_path, {})
                if isinstance(project_data, dict):
                    merged = self._deep_merge(merged, project_data)

        return HubConfig.from_dict(merged)

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Deep merge two dictionaries.

        Args:
            base: Base dictionary
            override: Dictionary to merge (takes precedence)

        Returns:
            Merged dictionary
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
