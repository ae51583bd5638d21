"""Unit tests for CommunicationLogger."""

from datetime import datetime
from unittest.mock import patch

import pytest

from cellband.config.config_models import LogLevel
from cellband.logging.communication_logger import CommunicationLogger
from cellband.logging.log_models import LogEntry


def quiet_logger(**kwargs):
    kwargs.setdefault("enable_console", False)
    return CommunicationLogger(**kwargs)


class TestCommunicationLoggerInit:
    """Test logger construction."""

    def test_file_logging(self, tmp_path):
        log_file = tmp_path / "comm.log"
        logger = quiet_logger(enable_file=True, log_file_path=str(log_file))

        assert logger.log_level == "INFO"
        assert log_file.exists()
        logger.close()

    def test_level_as_string(self):
        assert quiet_logger(log_level="DEBUG").log_level == "DEBUG"

    def test_file_without_path_raises(self):
        with pytest.raises(ValueError, match="log_file_path required"):
            CommunicationLogger(enable_file=True)


class TestLevelFiltering:
    """Test level filtering."""

    def test_info_drops_debug(self):
        logger = quiet_logger(log_level=LogLevel.INFO)
        logger.log(LogEntry(timestamp=datetime.now(), level="DEBUG", source="X", message="noise"))
        logger.log(LogEntry(timestamp=datetime.now(), level="INFO", source="X", message="kept"))

        assert [e.message for e in logger.get_entries()] == ["kept"]

    def test_warning_drops_info(self):
        logger = quiet_logger(log_level=LogLevel.WARNING)
        logger.log_command(port="/dev/ttyUSB2", command="AT")

        assert logger.get_entries() == []

    def test_set_level(self):
        logger = quiet_logger(log_level=LogLevel.ERROR)
        logger.log_command(port="/dev/ttyUSB2", command="AT")
        logger.set_level(LogLevel.DEBUG)
        logger.log_command(port="/dev/ttyUSB2", command="AT")

        assert len(logger.get_entries()) == 1


class TestConvenienceMethods:
    """Test the typed log helpers."""

    def test_log_command(self):
        logger = quiet_logger()
        logger.log_command(port="/dev/ttyUSB2", command="AT+SPENGMD=0,6,0")

        entry = logger.get_entries()[0]
        assert entry.level == "INFO"
        assert entry.source == "ATExecutor"
        assert entry.command == "AT+SPENGMD=0,6,0"
        assert entry.port == "/dev/ttyUSB2"

    @pytest.mark.parametrize("status,level", [
        ("SUCCESS", "INFO"),
        ("TIMEOUT", "WARNING"),
        ("ERROR", "ERROR"),
    ])
    def test_log_response_levels(self, status, level):
        """Test response level follows the command status."""
        logger = quiet_logger(log_level=LogLevel.DEBUG)
        logger.log_response(port="/dev/ttyUSB2", response="OK", status=status,
                            execution_time=0.1, command="AT")

        entry = logger.get_entries()[0]
        assert entry.level == level
        assert entry.status == status

    def test_log_port_event(self):
        logger = quiet_logger()
        logger.log_port_event(event="Port opened", port="/dev/ttyUSB2", details={"baud_rate": 115200})

        entry = logger.get_entries()[0]
        assert entry.source == "SerialHandler"
        assert entry.message == "Port opened"
        assert entry.details == {"baud_rate": 115200}

    def test_log_error(self):
        logger = quiet_logger()
        logger.log_error(source="SerialHandler", error="Permission denied")

        entry = logger.get_entries()[0]
        assert entry.level == "ERROR"
        assert entry.error == "Permission denied"


class TestBuffer:
    """Test the in-memory ring buffer."""

    def test_get_entries_limit(self):
        logger = quiet_logger()
        for i in range(5):
            logger.log_command(port="/dev/ttyUSB2", command=f"AT+{i}")

        assert [e.command for e in logger.get_entries(limit=2)] == ["AT+3", "AT+4"]

    def test_clear_buffer(self):
        logger = quiet_logger()
        logger.log_command(port="/dev/ttyUSB2", command="AT")
        logger.clear_buffer()

        assert logger.get_entries() == []

    def test_buffer_max_size(self):
        logger = quiet_logger(buffer_size=3)
        for i in range(5):
            logger.log_command(port="/dev/ttyUSB2", command=f"AT+{i}")

        assert [e.command for e in logger.get_entries()] == ["AT+2", "AT+3", "AT+4"]


class TestDestinations:
    """Test console and file output."""

    @patch('sys.stderr')
    def test_console_output(self, mock_stderr):
        logger = CommunicationLogger(enable_console=True)
        logger.log_command(port="/dev/ttyUSB2", command="AT+SPENGMD=0,6,0")

        written = "".join(c.args[0] for c in mock_stderr.write.call_args_list)
        assert "CMD: AT+SPENGMD=0,6,0" in written

    def test_file_output(self, tmp_path):
        log_file = tmp_path / "comm.log"
        with quiet_logger(enable_file=True, log_file_path=str(log_file)) as logger:
            logger.log_command(port="/dev/ttyUSB2", command="AT+SPENGMD=0,14,1")
            logger.flush()

        assert "AT+SPENGMD=0,14,1" in log_file.read_text(encoding='utf-8')

    def test_close_idempotent(self, tmp_path):
        logger = quiet_logger(enable_file=True, log_file_path=str(tmp_path / "comm.log"))
        logger.close()
        logger.close()
