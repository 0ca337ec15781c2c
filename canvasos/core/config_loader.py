"""
CanvasOS Configuration Loader

Configuration management for the virtual desktop:
- JSON configuration file loading
- Default value handling
- Runtime configuration updates
- Type-safe access to configuration values
"""

import json
import threading
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Optional

from canvasos.exceptions import ConfigurationError


@dataclass
class SystemConfig:
    """Identification settings."""
    name: str = "CanvasOS"
    version: str = "1.0.0"


@dataclass
class FilesystemConfig:
    """Virtual filesystem and snapshot storage settings."""
    storage_key: str = "os-filesystem"
    store_path: Optional[str] = None  # None keeps the snapshot in memory
    strict_saves: bool = False


@dataclass
class ShellConfig:
    """Shell settings."""
    user: str = "user"
    hostname: str = "virtual-os"
    banner: str = "Welcome to Virtual OS Terminal"
    banner_hint: str = 'Type "help" for available commands'


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "WARNING"
    log_file: Optional[str] = None
    console_output: bool = True


@dataclass
class Config:
    """
    Main configuration container.

    Holds every configuration section with type-safe access.
    """
    system: SystemConfig = field(default_factory=SystemConfig)
    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """
    Configuration loader and manager.

    Handles loading configuration from JSON files and providing runtime
    configuration access.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('canvasos.json')
        >>> print(config.filesystem.storage_key)
        os-filesystem
    """

    _instance: Optional['ConfigLoader'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConfigLoader':
        """Singleton pattern for configuration access."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = Config()
                cls._instance._loaded = False
            return cls._instance

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigurationError: If the file cannot be loaded or parsed
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                config_path=config_path
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in configuration file: {e}",
                config_path=config_path
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read configuration file: {e}",
                config_path=config_path
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration root must be an object",
                config_path=config_path
            )

        self._config = self._parse_config(data)
        self._loaded = True
        return self._config

    def _parse_config(self, data: dict[str, Any]) -> Config:
        """Parse configuration data into Config object."""
        config = Config()

        for section in fields(Config):
            section_data = data.get(section.name)
            if section_data is None:
                continue
            if not isinstance(section_data, dict):
                raise ConfigurationError(
                    f"Configuration section '{section.name}' must be an object"
                )

            defaults = getattr(config, section.name)
            values = {}
            for f in fields(defaults):
                default = getattr(defaults, f.name)
                value = section_data.get(f.name, default)
                self._check_type(f"{section.name}.{f.name}", value, default)
                values[f.name] = value
            setattr(config, section.name, type(defaults)(**values))

        return config

    @staticmethod
    def _check_type(key: str, value: Any, default: Any) -> None:
        """
        Reject a value whose type differs from the field's default.

        Fields defaulting to None are optional strings.

        Raises:
            ConfigurationError: If the value has the wrong type
        """
        if default is None:
            valid = value is None or isinstance(value, str)
            expected = 'a string or null'
        else:
            valid = type(value) is type(default)
            expected = f"of type {type(default).__name__}"

        if not valid:
            raise ConfigurationError(
                f"Configuration value '{key}' must be {expected}, "
                f"got {value!r}"
            )

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        if not self._loaded:
            return Config()
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'filesystem.storage_key')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        obj: Any = self._config

        for part in key.split('.'):
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default

        return obj

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        Args:
            key: Dot-notation key (e.g., 'filesystem.strict_saves')
            value: Value to set

        Note:
            This modifies configuration at runtime but does not
            persist changes to disk.
        """
        parts = key.split('.')
        obj: Any = self._config

        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise ConfigurationError(f"Invalid configuration key: {key}")

        final_key = parts[-1]
        if hasattr(obj, final_key):
            setattr(obj, final_key, value)
            self._loaded = True
        else:
            raise ConfigurationError(f"Invalid configuration key: {key}")

    def reset(self) -> None:
        """Drop loaded settings and return to defaults."""
        self._config = Config()
        self._loaded = False

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self._config)


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config object with current settings
    """
    return ConfigLoader().config
