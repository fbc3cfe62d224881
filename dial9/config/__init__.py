"""Simple YAML configuration loader for Dial9 call history."""

import os
import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "base_url": "https://connectapi.dial9.co.uk",
        "timeout_seconds": 30,
    },
    "playback": {
        "progress_interval_seconds": 0.1,
        "chunk_frames": 1024,
        "topic": "playback.state",
    },
    "storage": {
        "export_directory": "exports",
    },
    "credentials": {
        "save_details": False,
        "service_name": "com.dial9.callhistory",
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/dial9.log",
        "console_output": True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Dial9Config:
    """Dial9 configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used and relative paths resolve against the
                        current directory.
        """
        if config_path is None:
            self.config_file: Optional[Path] = None
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _merge(DEFAULT_CONFIG, loaded)

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        export_dir = config['storage']['export_directory']
        if not os.path.isabs(export_dir):
            config['storage']['export_directory'] = str(config_dir / export_dir)

        log_path = config['logging']['file_path']
        if not os.path.isabs(log_path):
            config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'api.base_url').

        Args:
            key_path: Dot-separated key path (e.g., 'playback.progress_interval_seconds')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'credentials.save_details')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        # Set the final value
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_export_directory(self) -> str:
        """Get export directory path."""
        export_dir = self.get('storage.export_directory', 'exports')
        return str(Path(export_dir).absolute())

    def get_api_base_url(self) -> str:
        base_url = self.get('api.base_url')
        if not base_url:
            raise ValueError("api.base_url is not configured")
        return str(base_url)
