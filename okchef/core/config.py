"""
Configuration management for okchef.
Loads settings from config.json and provides access to configuration values.
"""

import copy
import json
import os
import logging
from typing import Dict, Any, Optional


PATTERNS_SHEET_URL = (
    "https://docs.google.com/spreadsheets/d/"
    "1ZF_G0QflsjcEMOp7E9bYmprFHcvU-zl0gFKNekioL6w/pub?output=csv"
)

DEFAULT_CONFIG: Dict[str, Any] = {
    "logs_path": "data/logs/",
    "logging": {
        "level": "INFO",
        "file": "okchef.log",
        "quiet": ["urllib3"],
    },
    "recipes_path": "data/recipes/",
    "resolver": {
        "backend": "patterns",
        "wake_token_mode": "required",
        "wake_token": r"ok[\s,.!]*chef",
        "out_of_range": "pass_through",
        "recovery_text": None,
    },
    "patterns": {
        "url": PATTERNS_SHEET_URL,
        "timeout": 10.0,
        "refresh_on_start": True,
    },
    "apiai": {
        "access_token": "",
        "base_url": "https://api.api.ai/v1",
        "lang": "fr",
    },
    "speech": {
        "settle_timeout": 2.0,
    },
}


class Config:
    """
    Configuration manager for okchef.
    Loads settings from config.json and provides typed access.
    """

    def __init__(self, config_path: Optional[str] = "config.json"):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration JSON file, or None to use
                the defaults without touching the filesystem
        """
        self.logger = logging.getLogger("okchef.config")
        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self.load()

    def load(self) -> bool:
        """
        Load configuration from JSON file.
        Creates default config if file doesn't exist.

        Returns:
            True if loaded successfully, False otherwise
        """
        if self.config_path is None:
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return False

        try:
            if os.path.exists(self.config_path):
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                if not isinstance(loaded, dict):
                    raise ValueError("top-level JSON value must be an object")
                self.config = self._merge(copy.deepcopy(DEFAULT_CONFIG), loaded)
                self.logger.info(f"Configuration loaded from {self.config_path}")
                return True
            else:
                self.logger.warning(f"Config file not found: {self.config_path}, using defaults")
                self._create_default_config()
                return False
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading configuration: {e}", exc_info=True)
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return False

    def _create_default_config(self):
        """Create default configuration."""
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        self.save()
        self.logger.info("Created default configuration file")

    @classmethod
    def _merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                cls._merge(base[key], value)
            else:
                base[key] = value
        return base

    def save(self) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if saved successfully, False otherwise
        """
        if self.config_path is None:
            return False
        try:
            parent = os.path.dirname(self.config_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)
            self.logger.info(f"Configuration saved to {self.config_path}")
            return True
        except OSError as e:
            self.logger.error(f"Error saving configuration: {e}", exc_info=True)
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation (e.g., "resolver.wake_token").

        Args:
            key: Configuration key (supports dot notation for nested keys)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set configuration value using dot notation.
        Intermediate sections are created as needed.
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    # Convenience properties
    @property
    def logs_path(self) -> str:
        """Get logs path."""
        return self.get("logs_path", "data/logs/")

    @property
    def log_level(self) -> str:
        """Get log level name for the okchef logger."""
        return str(self.get("logging.level", "INFO")).upper()

    @property
    def log_file(self) -> str:
        return self.get("logging.file", "okchef.log")

    @property
    def recipes_path(self) -> str:
        """Get directory of extra JSON recipes."""
        return self.get("recipes_path", "data/recipes/")

    @property
    def backend(self) -> str:
        """Get resolver backend name ("patterns" or "apiai")."""
        return self.get("resolver.backend", "patterns")

    @property
    def patterns_url(self) -> str:
        """Get remote pattern feed URL."""
        return self.get("patterns.url", "")

    @property
    def patterns_timeout(self) -> float:
        """Get pattern feed HTTP timeout in seconds."""
        return float(self.get("patterns.timeout", 10.0))

    @property
    def refresh_on_start(self) -> bool:
        """Whether to refresh the pattern table at startup."""
        return bool(self.get("patterns.refresh_on_start", True))

    @property
    def settle_timeout(self) -> float:
        """Get the utterance settle timeout in seconds."""
        return float(self.get("speech.settle_timeout", 2.0))
