"""Configuration management for the du-browser server."""

import os
import yaml
from typing import Dict, Any, Optional
from .config_validator import ConfigValidator


class ConfigManager:
    """Manages configuration loading and validation for du-browser."""

    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.expanduser("~/.du-browser/config.yaml"),
        os.path.expanduser("~/.du-browser/config.yml"),
        "/etc/du-browser/config.yaml",
        "/etc/du-browser/config.yml"
    ]

    DEFAULTS = {
        'scan': {
            'base_path': '.',
            'follow_symlinks': False
        },
        'server': {
            'host': '0.0.0.0',
            'port': 8099,
            'apology_timeout_seconds': 2.0
        },
        'cache': {
            'duration_seconds': 30.0
        },
        'logging': {
            'level': 'INFO',
            'file': None
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to config file. If not provided,
                        will search in default locations.
        """
        self.config_path = config_path
        self.config_data: Dict[str, Any] = {}
        self.validator = ConfigValidator()

    def load_config(self, overrides: Optional[Dict[str, Dict[str, Any]]] = None) -> Dict[str, Any]:
        """Load configuration from file, falling back to defaults.

        Args:
            overrides: Section/key values that take precedence over the file,
                e.g. from command-line options. None values are ignored.

        Returns:
            Dictionary containing configuration data.

        Raises:
            FileNotFoundError: If an explicitly given config file does not exist.
            ValueError: If config file is invalid.
        """
        config_file = self._find_config_file()

        self.config_data = {}
        if config_file:
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    self.config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in config file {config_file}: {e}")
            except OSError as e:
                raise ValueError(f"Error reading config file {config_file}: {e}")

        if not isinstance(self.config_data, dict):
            raise ValueError(f"Config file {config_file} must contain a mapping")

        for section, values in (overrides or {}).items():
            section_data = self.config_data.setdefault(section, {})
            if isinstance(section_data, dict):
                section_data.update({k: v for k, v in values.items() if v is not None})

        self.validator.validate(self.config_data)

        self._set_defaults()

        return self.config_data

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file.

        Returns:
            Path to configuration file, or None when no default location has one.

        Raises:
            FileNotFoundError: If the explicitly given config file is missing.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        return None

    def _set_defaults(self):
        """Set default values for optional configuration parameters."""
        for section, section_defaults in self.DEFAULTS.items():
            if section not in self.config_data:
                self.config_data[section] = {}
            for key, value in section_defaults.items():
                if key not in self.config_data[section]:
                    self.config_data[section][key] = value

    def get_scan_config(self) -> Dict[str, Any]:
        return self.config_data.get('scan', {})

    def get_server_config(self) -> Dict[str, Any]:
        return self.config_data.get('server', {})

    def get_cache_config(self) -> Dict[str, Any]:
        return self.config_data.get('cache', {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})
