"""Configuration manager for Cell Band Inspector.

Singleton access to the application configuration, layered as
defaults -> config.yaml -> CELLBAND_* environment variables, validated
against the JSON schema and optionally hot-reloaded when the file changes.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List, Callable
from copy import deepcopy
import os
import signal
import time

import yaml
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileModifiedEvent

from cellband.config.config_models import (
    Config,
    SerialConfig,
    TelemetryConfig,
    LoggingConfig,
    LogLevel
)
from cellband.config.defaults import get_default_config
from cellband.config.config_schema import ConfigSchema

ENV_PREFIX = "CELLBAND_"


class ConfigFileEventHandler(FileSystemEventHandler):
    """Reloads configuration when config.yaml is modified."""

    def __init__(self, config_manager: 'ConfigManager', config_path: Path, debounce_seconds: float = 2.0):
        super().__init__()
        self.config_manager = config_manager
        self.config_path = config_path
        self._last_reload_time = 0.0
        self._debounce_seconds = debounce_seconds

    def on_modified(self, event):
        if not isinstance(event, FileModifiedEvent):
            return
        if Path(event.src_path).resolve() != self.config_path.resolve():
            return

        current_time = time.time()
        if current_time - self._last_reload_time < self._debounce_seconds:
            return
        self._last_reload_time = current_time

        print(f"Configuration file changed: {self.config_path}")
        if self.config_manager.reload(self.config_path):
            print("Configuration reloaded successfully")
        else:
            print("Configuration reload failed - using previous configuration")


class ConfigManager:
    """Singleton configuration manager.

    Loading order:
    1. Defaults
    2. config.yaml (explicit path, ./config.yaml or ~/.cellband/config.yaml)
    3. CELLBAND_<SECTION>_<KEY> environment variables
    4. JSON schema validation (ValueError on failure)

    Example:
        >>> manager = ConfigManager.initialize(enable_hot_reload=False)
        >>> manager.get_config().serial.default_baud
        115200
    """

    _instance: Optional['ConfigManager'] = None

    def __init__(self):
        """Private constructor. Use instance() or initialize()."""
        if ConfigManager._instance is not None:
            raise RuntimeError("Use ConfigManager.instance() instead of constructor")
        self._config: Optional[Config] = None
        self._config_source: Dict[str, str] = {}
        self._config_path: Optional[Path] = None
        self._file_observer: Optional[Observer] = None
        self._watch_enabled = False
        self._reload_callbacks: List[Callable[[], None]] = []

    @classmethod
    def instance(cls) -> 'ConfigManager':
        """Get the singleton.

        Raises:
            RuntimeError: initialize() has not been called
        """
        if cls._instance is None:
            raise RuntimeError("ConfigManager not initialized. Call initialize() first.")
        return cls._instance

    @classmethod
    def initialize(cls,
                   config_path: Optional[Path] = None,
                   skip_validation: bool = False,
                   enable_hot_reload: bool = True) -> 'ConfigManager':
        """Load configuration and return the singleton.

        Args:
            config_path: config.yaml to load; searched for when None
            skip_validation: Skip schema validation
            enable_hot_reload: Watch the loaded file for changes

        Raises:
            ValueError: Merged configuration fails validation
        """
        if cls._instance is None:
            cls._instance = cls()
        manager = cls._instance

        config_source: Dict[str, str] = {}
        config_dict = get_default_config().to_dict()
        cls._mark_source(config_source, config_dict, "default")

        if config_path is None:
            config_path = cls._search_config_paths()

        loaded_path = None
        if config_path and Path(config_path).exists():
            config_path = Path(config_path)
            try:
                file_config = cls._load_from_file(config_path)
                config_dict = cls._merge_configs(config_dict, file_config)
                cls._mark_source(config_source, file_config, "file")
                loaded_path = config_path
            except (OSError, yaml.YAMLError) as e:
                print(f"Warning: Failed to load config from {config_path}: {e}")
                print("Using defaults only")

        env_overrides = cls._apply_env_overrides(config_dict)
        if env_overrides:
            config_dict = cls._merge_configs(config_dict, env_overrides)
            cls._mark_source(config_source, env_overrides, "env")

        if not skip_validation:
            is_valid, validation_errors = ConfigSchema.validate_config(config_dict, strict=False)
            if not is_valid:
                raise ValueError("Configuration validation failed:\n" + "\n".join(
                    f"  - {error}" for error in validation_errors
                ))

        manager._config = cls._dict_to_config(config_dict)
        manager._config_source = config_source
        manager._config_path = loaded_path

        if enable_hot_reload and manager._config_path:
            manager.enable_hot_reload()

        manager._register_sighup_handler()
        return manager

    @staticmethod
    def _search_config_paths() -> Optional[Path]:
        search_paths = [
            Path("./config.yaml"),
            Path.home() / ".cellband" / "config.yaml"
        ]
        for path in search_paths:
            if path.is_file():
                return path
        return None

    @staticmethod
    def _load_from_file(path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f)
        return config_dict or {}

    @staticmethod
    def _apply_env_overrides(current: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Collect CELLBAND_<SECTION>_<KEY> overrides.

        Values are coerced to the type of the setting they replace, e.g.
        CELLBAND_SERIAL_DEFAULT_BAUD=9600 gives an int and
        CELLBAND_LOGGING_ENABLED=yes gives True.
        """
        current = current or {}
        overrides: Dict[str, Dict[str, Any]] = {}

        for env_name, env_value in os.environ.items():
            if not env_name.startswith(ENV_PREFIX):
                continue

            parts = env_name[len(ENV_PREFIX):].lower().split('_', 1)
            if len(parts) != 2:
                continue
            section, key = parts

            existing = current.get(section, {}).get(key) if isinstance(current.get(section), dict) else None
            overrides.setdefault(section, {})[key] = ConfigManager._parse_env_value(env_value, existing)

        return overrides

    @staticmethod
    def _parse_env_value(value: str, existing: Any = None) -> Any:
        lowered = value.strip().lower()

        if isinstance(existing, bool) or (existing is None and lowered in ('true', 'false', 'yes', 'no', 'on', 'off')):
            if lowered in ('true', '1', 'yes', 'on'):
                return True
            if lowered in ('false', '0', 'no', 'off'):
                return False
            return value

        if lowered in ('none', 'null'):
            return None

        if isinstance(existing, int) or existing is None:
            try:
                return int(value)
            except ValueError:
                pass

        return value

    @staticmethod
    def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        merged = deepcopy(base)
        for section, section_values in override.items():
            if isinstance(section_values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(section_values)
            else:
                merged[section] = section_values
        return merged

    @staticmethod
    def _mark_source(sources: Dict[str, str], config: Dict[str, Any], source: str) -> None:
        for section, section_values in config.items():
            if isinstance(section_values, dict):
                for key in section_values:
                    sources[f"{section}.{key}"] = source

    @staticmethod
    def _dict_to_config(config_dict: Dict[str, Any]) -> Config:
        defaults = get_default_config()

        def get_level(value: Any) -> LogLevel:
            if isinstance(value, LogLevel):
                return value
            try:
                return LogLevel(str(value).upper())
            except ValueError:
                return defaults.logging.level

        serial_dict = config_dict.get('serial') or {}
        serial = SerialConfig(
            port=serial_dict.get('port', defaults.serial.port),
            default_baud=serial_dict.get('default_baud', defaults.serial.default_baud),
            timeout=serial_dict.get('timeout', defaults.serial.timeout),
            retry_attempts=serial_dict.get('retry_attempts', defaults.serial.retry_attempts),
            retry_delay=serial_dict.get('retry_delay', defaults.serial.retry_delay)
        )

        telemetry_dict = config_dict.get('telemetry') or {}
        telemetry = TelemetryConfig(
            min_response_length=telemetry_dict.get('min_response_length', defaults.telemetry.min_response_length),
            dbus_destination=telemetry_dict.get('dbus_destination', defaults.telemetry.dbus_destination),
            dbus_object_path=telemetry_dict.get('dbus_object_path', defaults.telemetry.dbus_object_path),
            oracle_timeout=telemetry_dict.get('oracle_timeout', defaults.telemetry.oracle_timeout)
        )

        log_dict = config_dict.get('logging') or {}
        logging = LoggingConfig(
            enabled=log_dict.get('enabled', defaults.logging.enabled),
            level=get_level(log_dict.get('level', defaults.logging.level)),
            log_to_file=log_dict.get('log_to_file', defaults.logging.log_to_file),
            log_to_console=log_dict.get('log_to_console', defaults.logging.log_to_console),
            log_file_path=log_dict.get('log_file_path', defaults.logging.log_file_path),
            max_file_size_mb=log_dict.get('max_file_size_mb', defaults.logging.max_file_size_mb),
            backup_count=log_dict.get('backup_count', defaults.logging.backup_count)
        )

        return Config(serial=serial, telemetry=telemetry, logging=logging)

    def get_config(self) -> Config:
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call initialize() first.")
        return self._config

    def get_source(self, dotted_key: str) -> str:
        """Where a setting came from: "default", "file", "env" or "unknown"."""
        return self._config_source.get(dotted_key, "unknown")

    def reload(self, config_path: Optional[Path] = None) -> bool:
        """Reload from file and environment.

        Returns:
            True on success; False if the new configuration was rejected, in
            which case the previous configuration stays active
        """
        if config_path is None:
            config_path = self._config_path

        old_config = self._config
        old_source = dict(self._config_source)
        old_config_path = self._config_path

        was_watching = self._watch_enabled
        if was_watching:
            self.disable_hot_reload()

        try:
            ConfigManager.initialize(config_path, skip_validation=False, enable_hot_reload=False)
            success = True
        except ValueError as e:
            print(f"Error reloading configuration: {e}")
            print("Rolling back to previous configuration")
            self._config = old_config
            self._config_source = old_source
            self._config_path = old_config_path
            success = False

        if was_watching and self._config_path:
            self.enable_hot_reload()

        if success:
            for callback in list(self._reload_callbacks):
                try:
                    callback()
                except Exception as e:
                    print(f"Error in reload callback: {e}")

        return success

    def validate(self) -> List[str]:
        """Validation errors for the active configuration (empty if valid)."""
        if self._config is None:
            return ["Configuration not loaded"]
        _, errors = ConfigSchema.validate_config(self._config.to_dict(), strict=True)
        return errors

    def show_config(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Configuration values with their source.

        Example:
            {"serial": {"default_baud": {"value": 115200, "source": "default"}}}
        """
        config_dict = self.get_config().to_dict()
        return {
            section: {
                key: {"value": value, "source": self.get_source(f"{section}.{key}")}
                for key, value in section_values.items()
            }
            for section, section_values in config_dict.items()
        }

    def enable_hot_reload(self) -> bool:
        """Start watching the loaded config file with watchdog."""
        if not self._config_path:
            print("Warning: Cannot enable hot reload - no config file loaded")
            return False

        if self._watch_enabled:
            return True

        try:
            event_handler = ConfigFileEventHandler(self, self._config_path)
            self._file_observer = Observer()
            self._file_observer.schedule(event_handler, str(self._config_path.parent), recursive=False)
            self._file_observer.start()
            self._watch_enabled = True
            return True
        except OSError as e:
            print(f"Error enabling hot reload: {e}")
            self._file_observer = None
            return False

    def disable_hot_reload(self) -> None:
        if not self._watch_enabled:
            return

        if self._file_observer:
            self._file_observer.stop()
            self._file_observer.join(timeout=2.0)
            self._file_observer = None

        self._watch_enabled = False

    def is_hot_reload_enabled(self) -> bool:
        return self._watch_enabled

    def register_reload_callback(self, callback: Callable[[], None]) -> None:
        if callback not in self._reload_callbacks:
            self._reload_callbacks.append(callback)

    def unregister_reload_callback(self, callback: Callable[[], None]) -> None:
        if callback in self._reload_callbacks:
            self._reload_callbacks.remove(callback)

    def _register_sighup_handler(self) -> None:
        """Reload on SIGHUP (Unix, main thread only)."""
        if not hasattr(signal, 'SIGHUP'):
            return

        def sighup_handler(signum, frame):
            print("Received SIGHUP signal - reloading configuration")
            self.reload()

        try:
            signal.signal(signal.SIGHUP, sighup_handler)
        except ValueError:
            # signal.signal only works in the main thread
            pass

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton (for testing)."""
        if cls._instance is not None:
            cls._instance.disable_hot_reload()
        cls._instance = None
