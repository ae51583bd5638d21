"""Configuration management package.

Centralized configuration access with defaults, YAML file loading and
environment variable overrides.
"""

from cellband.config.config_manager import ConfigManager
from cellband.config.config_models import (
    Config,
    SerialConfig,
    TelemetryConfig,
    LoggingConfig,
    LogLevel
)

__all__ = [
    'ConfigManager',
    'Config',
    'SerialConfig',
    'TelemetryConfig',
    'LoggingConfig',
    'LogLevel',
]
