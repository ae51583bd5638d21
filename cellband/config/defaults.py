"""Default configuration values for zero-config operation."""

from cellband.config.config_models import (
    Config,
    SerialConfig,
    TelemetryConfig,
    LoggingConfig,
    LogLevel
)


def get_default_config() -> Config:
    """Get default configuration.

    Default Values:
        - Serial: no fixed port, 115200 baud, 30s timeout, 3 retries 1s apart
        - Telemetry: replies of 100 characters or fewer carry no data;
          oFono at org.ofono /ril_0, 5s D-Bus timeout
        - Logging: disabled; INFO to console when enabled
    """
    return Config(
        serial=SerialConfig(
            port=None,
            default_baud=115200,
            timeout=30,
            retry_attempts=3,
            retry_delay=1000
        ),
        telemetry=TelemetryConfig(
            min_response_length=100,
            dbus_destination="org.ofono",
            dbus_object_path="/ril_0",
            oracle_timeout=5
        ),
        logging=LoggingConfig(
            enabled=False,
            level=LogLevel.INFO,
            log_to_file=False,
            log_to_console=True,
            log_file_path=None,  # ~/.cellband/logs/comm_{timestamp}.log
            max_file_size_mb=10,
            backup_count=5
        )
    )
