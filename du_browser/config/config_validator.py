"""Configuration validation for du-browser."""

from typing import Dict, Any


class ConfigValidator:
    """Validates du-browser configuration."""

    KNOWN_SECTIONS = ['scan', 'server', 'cache', 'logging']
    LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")

        self._validate_structure(config)
        self._validate_scan_config(config.get('scan', {}))
        self._validate_server_config(config.get('server', {}))
        self._validate_cache_config(config.get('cache', {}))
        self._validate_logging_config(config.get('logging', {}))

    def _validate_structure(self, config: Dict[str, Any]) -> None:
        """Check that every known section present is a mapping.

        Raises:
            ValueError: If a section is not a dictionary.
        """
        for section in self.KNOWN_SECTIONS:
            if section in config and not isinstance(config[section], dict):
                raise ValueError(f"Configuration section '{section}' must be a dictionary")

    def _validate_scan_config(self, scan_config: Dict[str, Any]) -> None:
        if 'base_path' in scan_config and not scan_config['base_path']:
            raise ValueError("Scan base_path cannot be empty")

    def _validate_server_config(self, server_config: Dict[str, Any]) -> None:
        """Validate server configuration.

        Raises:
            ValueError: If port or apology timeout are invalid.
        """
        if 'port' in server_config:
            try:
                port = int(server_config['port'])
                if not (1 <= port <= 65535):
                    raise ValueError()
            except (ValueError, TypeError):
                raise ValueError(f"Server configuration has invalid port: {server_config['port']}")

        if 'apology_timeout_seconds' in server_config:
            self._validate_duration('server', 'apology_timeout_seconds',
                                    server_config['apology_timeout_seconds'])

    def _validate_cache_config(self, cache_config: Dict[str, Any]) -> None:
        if 'duration_seconds' in cache_config:
            self._validate_duration('cache', 'duration_seconds', cache_config['duration_seconds'])

    def _validate_logging_config(self, logging_config: Dict[str, Any]) -> None:
        level = logging_config.get('level')
        if level is not None and str(level).upper() not in self.LOG_LEVELS:
            raise ValueError(f"Logging configuration has invalid level: {level}")

    def _validate_duration(self, section: str, key: str, value: Any) -> None:
        try:
            seconds = float(value)
            if seconds < 0:
                raise ValueError()
        except (ValueError, TypeError):
            raise ValueError(f"Configuration {section}.{key} must be a non-negative number: {value}")
