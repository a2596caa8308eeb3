"""
Settings storage management for phone-migrator.

This module provides YAML-based configuration file persistence with:
- Automatic directory creation
- Dataclass to dict conversion for serialization
- Default Settings when no configuration exists
"""

import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any

import yaml

from .models import Settings

logger = logging.getLogger(__name__)


class SettingsStorage:
    """
    Settings storage manager.

    Handles loading and saving Settings objects to YAML configuration files.
    Configuration is stored at ~/.phone-migrator/config.yaml by default.

    Attributes:
        config_dir: Directory path for configuration files.
        config_file: Path to the main configuration file.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """
        Initialize the settings storage.

        Args:
            config_dir: Optional path to configuration directory.
                       Defaults to ~/.phone-migrator/
        """
        self.config_dir = config_dir or Path.home() / ".phone-migrator"
        self.config_file = self.config_dir / "config.yaml"

    def exists(self) -> bool:
        """Check whether a configuration file is present."""
        return self.config_file.exists()

    def load(self) -> Settings:
        """
        Load settings from the configuration file.

        Returns:
            Settings object loaded from config file, or default Settings
            if the configuration file does not exist.

        Raises:
            ValueError: If the file is not a YAML mapping
        """
        if not self.config_file.exists():
            return Settings()

        with open(self.config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"{self.config_file} must contain a YAML mapping")

        return self._dict_to_settings(data)

    def save(self, settings: Settings) -> None:
        """
        Save settings to the configuration file.

        Creates the configuration directory if it does not exist.

        Args:
            settings: Settings object to save.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w", encoding="utf-8") as f:
            yaml.dump(asdict(settings), f, default_flow_style=False, allow_unicode=True, sort_keys=False)

        logger.debug(f"Settings saved to {self.config_file}")

    def _dict_to_settings(self, data: dict[str, Any]) -> Settings:
        """
        Convert a dictionary to a Settings object.

        Unknown keys are ignored with a warning; missing keys keep their
        defaults.

        Args:
            data: Dictionary loaded from YAML file.

        Returns:
            Settings object with values from the dictionary.
        """
        known = {f.name: f for f in fields(Settings)}
        defaults = asdict(Settings())
        values: dict[str, Any] = {}

        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown setting '{key}' in {self.config_file}")
                continue
            default = defaults[key]
            try:
                values[key] = type(default)(value)
            except (TypeError, ValueError):
                logger.warning(f"Invalid value for '{key}': {value!r}; using {default!r}")

        return Settings(**values)
