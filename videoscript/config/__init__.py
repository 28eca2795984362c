"""Simple YAML configuration loader for VideoScript."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_STAGES = [
    "Analyzing video format...",
    "Extracting audio track...",
    "Processing with AI speech recognition...",
    "Applying language detection...",
    "Generating final transcription...",
]

DEFAULTS: Dict[str, Any] = {
    "upload": {
        "step": 10,
        "tick_interval_ms": 200,
        "endpoint": None,
        "chunk_size": 64 * 1024,
        "timeout_ms": None,
    },
    "pipeline": {
        "settle_delay_ms": 1000,
        "result_delay_ms": 2000,
    },
    "processing": {
        "stage_interval_ms": 1500,
        "stages": DEFAULT_STAGES,
        "timeout_ms": None,
    },
    "result": {
        "default_duration_seconds": 45,
    },
    "language": {
        "default": "auto",
        "fallback": "English",
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/videoscript.log",
        "console_output": True,
    },
    "export": {
        "output_directory": "data/exports",
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class VideoScriptConfig:
    """VideoScript configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults are used.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULTS)
            return

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
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _deep_merge(DEFAULTS, loaded)

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        export_dir = config['export'].get('output_directory')
        if export_dir and not os.path.isabs(export_dir):
            config['export']['output_directory'] = str(config_dir / export_dir)

        log_path = config['logging'].get('file_path')
        if log_path and not os.path.isabs(log_path):
            config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'upload.tick_interval_ms').

        Args:
            key_path: Dot-separated key path
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
            key_path: Dot-separated path to config value (e.g., 'language.default')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_stages(self) -> list:
        """Get processing stage labels. Raises ValueError if the list is empty."""
        stages = self.get('processing.stages')
        if not stages:
            raise ValueError("processing.stages must list at least one stage")
        return [str(label) for label in stages]

    def get_export_directory(self) -> str:
        """Get export directory path."""
        export_dir = self.get('export.output_directory', 'data/exports')
        return str(Path(export_dir).absolute())
