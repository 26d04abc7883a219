"""
Configuration Manager - Handle diff viewer settings persistence
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "DIFFVIEW_CONFIG_DIR"


def is_valid_timeout(value: Any) -> bool:
    """True for a positive int or float (bools excluded)"""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def read_timeout(section: dict, key: str, default: float) -> float:
    """Timeout setting in seconds, or `default` when the stored value is unusable"""
    value = section.get(key, default)
    if not is_valid_timeout(value):
        logger.warning("Ignoring invalid timeout %s=%r, using %s", key, value, default)
        return default
    return float(value)


class ConfigManager:
    """Manage configuration persistence"""

    _instance = None
    _config_file = None

    def __init__(self):
        try:
            # 1st: environment variable
            config_dir = os.environ.get(CONFIG_DIR_ENV)

            # 2nd: ~/.diffview
            if not config_dir:
                try:
                    config_dir = os.path.expanduser("~/.diffview")
                except Exception:
                    config_dir = None

            if config_dir:
                config_path = Path(config_dir)
                try:
                    config_path.mkdir(parents=True, exist_ok=True)
                    self._config_file = config_path / "config.json"
                except OSError as e:
                    logger.warning("Cannot write to %s: %s", config_dir, e)
                    self._config_file = None

            # Last resort: system temp dir
            if not self._config_file:
                tmp_dir = Path(tempfile.gettempdir()) / "diffview"
                tmp_dir.mkdir(parents=True, exist_ok=True)
                self._config_file = tmp_dir / "config.json"
                logger.info("Using temporary config path: %s", self._config_file)

        except OSError as e:
            logger.error("Cannot prepare a config directory: %s", e)
            self._config_file = Path(tempfile.gettempdir()) / "diffview_config_fallback.json"

        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    @classmethod
    def reset_instance(cls):
        """Drop the singleton so the next access re-reads the environment"""
        cls._instance = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, filling in missing sections"""
        config = self._default_config()
        if not self._config_file.exists():
            return config

        try:
            with open(self._config_file, encoding="utf-8") as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Error loading config %s: %s", self._config_file, e)
            return config

        if not isinstance(stored, dict):
            logger.warning("Ignoring config %s: not a JSON object", self._config_file)
            return config

        for key, value in stored.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key] = {**config[key], **value}
            else:
                config[key] = value
        return config

    def _default_config(self) -> dict[str, Any]:
        """Get default configuration"""
        return {
            "repoRoot": ".",
            "logLevel": "INFO",
            "git": {"statusTimeout": 3.0, "diffTimeout": 6.0},
            "view": {"default": "split", "alignment": "positional"},
            "specFilter": {
                "prefixes": ["vibe-docs/spec/"],
                "suffixes": [".spec.mdx"],
            },
            "remote": {"baseUrl": "", "timeout": 10.0},
            "server": {"host": "127.0.0.1", "port": 8000},
        }

    def get_config(self) -> dict[str, Any]:
        """Get current configuration"""
        # Reload config from file to ensure we have the latest
        self._config = self._load_config()
        return self._config.copy()

    def save_config(self, config: dict[str, Any]):
        """Save configuration to file"""
        self._config.update(config)

        self._config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}")

    def get(self, key: str, default=None):
        """Get specific config value"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set specific config value"""
        self._config[key] = value
        self.save_config(self._config)
