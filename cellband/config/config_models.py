"""Configuration data models for Cell Band Inspector.

All sections are frozen dataclasses with defaults that work without any
config.yaml.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any


class LogLevel(Enum):
    """Logging level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SerialConfig:
    """Modem AT port settings."""
    port: Optional[str] = None
    default_baud: int = 115200
    timeout: int = 30
    retry_attempts: int = 3
    retry_delay: int = 1000  # milliseconds


@dataclass(frozen=True)
class TelemetryConfig:
    """Band telemetry extraction settings."""
    min_response_length: int = 100
    dbus_destination: str = "org.ofono"
    dbus_object_path: str = "/ril_0"
    oracle_timeout: int = 5  # seconds


@dataclass(frozen=True)
class LoggingConfig:
    """AT traffic logging settings."""
    enabled: bool = False
    level: LogLevel = LogLevel.INFO
    log_to_file: bool = False
    log_to_console: bool = True
    log_file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class Config:
    """Complete configuration object with all sections."""
    serial: SerialConfig = field(default_factory=SerialConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain nested dictionary (enums become their values)."""
        def convert_value(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, list):
                return [convert_value(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert_value(v) for k, v in obj.items()}
            return obj

        return convert_value(asdict(self))
