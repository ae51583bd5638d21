"""Unit tests for ConfigManager layering, validation and reload."""

import os
from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

from cellband.config.config_manager import ConfigManager
from cellband.config.config_models import LogLevel


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """No stray config.yaml or CELLBAND_* variables leak into tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in list(os.environ):
        if name.startswith("CELLBAND_"):
            monkeypatch.delenv(name)


def write_config(path: Path, data: dict) -> Path:
    path.write_text(yaml.safe_dump(data), encoding='utf-8')
    return path


class TestSingleton:
    """Test singleton access."""

    def test_instance_before_initialize(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            ConfigManager.instance()

    def test_initialize_returns_instance(self):
        manager = ConfigManager.initialize(enable_hot_reload=False)

        assert ConfigManager.instance() is manager

    def test_direct_construction_rejected(self):
        ConfigManager.initialize(enable_hot_reload=False)

        with pytest.raises(RuntimeError):
            ConfigManager()


class TestLayering:
    """Test defaults -> file -> environment."""

    def test_defaults(self):
        config = ConfigManager.initialize(enable_hot_reload=False).get_config()

        assert config.serial.port is None
        assert config.serial.default_baud == 115200
        assert config.telemetry.min_response_length == 100
        assert config.telemetry.dbus_object_path == "/ril_0"
        assert config.logging.level is LogLevel.INFO

    def test_explicit_file(self, tmp_path):
        path = write_config(tmp_path / "custom.yaml", {
            "serial": {"port": "/dev/ttyUSB2", "default_baud": 921600},
            "logging": {"level": "DEBUG"},
        })

        manager = ConfigManager.initialize(path, enable_hot_reload=False)
        config = manager.get_config()

        assert config.serial.port == "/dev/ttyUSB2"
        assert config.serial.default_baud == 921600
        assert config.serial.timeout == 30
        assert config.logging.level is LogLevel.DEBUG
        assert manager.get_source("serial.port") == "file"
        assert manager.get_source("serial.timeout") == "default"

    def test_searches_working_directory(self, tmp_path):
        write_config(tmp_path / "config.yaml", {"telemetry": {"oracle_timeout": 9}})

        config = ConfigManager.initialize(enable_hot_reload=False).get_config()

        assert config.telemetry.oracle_timeout == 9

    def test_empty_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text("", encoding='utf-8')

        assert ConfigManager.initialize(enable_hot_reload=False).get_config().serial.default_baud == 115200

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test environment variables win and are coerced by type."""
        write_config(tmp_path / "config.yaml", {"serial": {"default_baud": 9600}})
        monkeypatch.setenv("CELLBAND_SERIAL_DEFAULT_BAUD", "460800")
        monkeypatch.setenv("CELLBAND_TELEMETRY_MIN_RESPONSE_LENGTH", "120")
        monkeypatch.setenv("CELLBAND_LOGGING_ENABLED", "yes")
        monkeypatch.setenv("CELLBAND_SERIAL_PORT", "/dev/ttyUSB3")

        manager = ConfigManager.initialize(enable_hot_reload=False)
        config = manager.get_config()

        assert config.serial.default_baud == 460800
        assert config.telemetry.min_response_length == 120
        assert config.logging.enabled is True
        assert config.serial.port == "/dev/ttyUSB3"
        assert manager.get_source("serial.default_baud") == "env"

    def test_env_numeric_bool(self, monkeypatch):
        monkeypatch.setenv("CELLBAND_LOGGING_LOG_TO_CONSOLE", "0")

        config = ConfigManager.initialize(enable_hot_reload=False).get_config()

        assert config.logging.log_to_console is False

    def test_invalid_file_raises(self, tmp_path):
        path = write_config(tmp_path / "bad.yaml", {"serial": {"default_baud": 12345}})

        with pytest.raises(ValueError, match="default_baud"):
            ConfigManager.initialize(path, enable_hot_reload=False)

    def test_skip_validation(self, tmp_path):
        path = write_config(tmp_path / "bad.yaml", {"serial": {"default_baud": 12345}})

        config = ConfigManager.initialize(path, skip_validation=True, enable_hot_reload=False).get_config()

        assert config.serial.default_baud == 12345

    def test_unknown_level_falls_back(self, tmp_path):
        path = write_config(tmp_path / "c.yaml", {"logging": {"level": "TRACE"}})

        config = ConfigManager.initialize(path, skip_validation=True, enable_hot_reload=False).get_config()

        assert config.logging.level is LogLevel.INFO


class TestReload:
    """Test reload and rollback."""

    def test_reload_picks_up_changes(self, tmp_path):
        path = write_config(tmp_path / "config.yaml", {"serial": {"timeout": 10}})
        manager = ConfigManager.initialize(path, enable_hot_reload=False)
        callback = Mock()
        manager.register_reload_callback(callback)

        write_config(path, {"serial": {"timeout": 20}})

        assert manager.reload() is True
        assert manager.get_config().serial.timeout == 20
        callback.assert_called_once_with()

    def test_reload_rolls_back_invalid(self, tmp_path):
        path = write_config(tmp_path / "config.yaml", {"serial": {"timeout": 10}})
        manager = ConfigManager.initialize(path, enable_hot_reload=False)
        callback = Mock()
        manager.register_reload_callback(callback)

        write_config(path, {"serial": {"timeout": 0}})

        assert manager.reload() is False
        assert manager.get_config().serial.timeout == 10
        callback.assert_not_called()

    def test_unregister_callback(self, tmp_path):
        manager = ConfigManager.initialize(enable_hot_reload=False)
        callback = Mock()
        manager.register_reload_callback(callback)
        manager.unregister_reload_callback(callback)

        manager.reload()

        callback.assert_not_called()


class TestHotReload:
    """Test watchdog observer lifecycle."""

    def test_no_file_no_watch(self):
        manager = ConfigManager.initialize(enable_hot_reload=True)

        assert not manager.is_hot_reload_enabled()
        assert manager.enable_hot_reload() is False

    def test_enable_disable(self, tmp_path):
        path = write_config(tmp_path / "config.yaml", {})
        manager = ConfigManager.initialize(path, enable_hot_reload=True)

        assert manager.is_hot_reload_enabled()

        manager.disable_hot_reload()
        assert not manager.is_hot_reload_enabled()


class TestInspection:
    """Test validate() and show_config()."""

    def test_validate_active_config(self):
        assert ConfigManager.initialize(enable_hot_reload=False).validate() == []

    def test_show_config(self, monkeypatch):
        monkeypatch.setenv("CELLBAND_SERIAL_PORT", "/dev/ttyUSB2")

        view = ConfigManager.initialize(enable_hot_reload=False).show_config()

        assert view["serial"]["port"] == {"value": "/dev/ttyUSB2", "source": "env"}
        assert view["telemetry"]["min_response_length"] == {"value": 100, "source": "default"}
        assert view["logging"]["level"]["value"] == "INFO"
