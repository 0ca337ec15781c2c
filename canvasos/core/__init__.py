"""
CanvasOS Core Module

Shared configuration for every subsystem.
"""

from .config_loader import (
    ConfigLoader,
    Config,
    SystemConfig,
    FilesystemConfig,
    ShellConfig,
    LoggingConfig,
    get_config,
)

__all__ = [
    'ConfigLoader',
    'Config',
    'SystemConfig',
    'FilesystemConfig',
    'ShellConfig',
    'LoggingConfig',
    'get_config',
]
