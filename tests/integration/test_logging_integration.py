"""Integration tests for end-to-end AT traffic logging."""

import threading
from unittest.mock import patch

import pytest

from cellband.config.config_models import LogLevel
from cellband.core import SerialHandler, ATExecutor, ATDiagnosticQuery
from cellband.logging import CommunicationLogger, LogEntry


def file_logger(path, **kwargs):
    return CommunicationLogger(
        log_level=kwargs.pop("log_level", LogLevel.INFO),
        enable_file=True,
        enable_console=False,
        log_file_path=str(path),
        **kwargs
    )


@pytest.mark.integration
class TestLoggingIntegration:
    """Logger wired to the real SerialHandler and ATExecutor."""

    def test_session_written_to_file(self, tmp_path, fake_modem, lte_reply):
        """Test port events, command and response land in the log file."""
        log_file = tmp_path / "comm.log"
        logger = file_logger(log_file)
        modem = fake_modem({"AT+SPENGMD=0,6,0": lte_reply})

        with patch('serial.Serial', return_value=modem):
            with SerialHandler("/dev/ttyUSB2", logger=logger) as handler:
                ATDiagnosticQuery(ATExecutor(handler, logger=logger)).run_diagnostic_query("AT+SPENGMD=0,6,0")
        logger.close()

        lines = log_file.read_text(encoding='utf-8').splitlines()
        assert "Port opened" in lines[0]
        assert "Sending command | CMD: AT+SPENGMD=0,6,0" in lines[1]
        assert "STATUS: SUCCESS" in lines[2]
        assert "Port closed" in lines[3]
        assert len(lines) == 4

    def test_error_response_logged_at_error(self, tmp_path, fake_modem):
        log_file = tmp_path / "comm.log"
        logger = file_logger(log_file, log_level=LogLevel.ERROR)
        modem = fake_modem({"AT+SPENGMD=0,14,1": "+CME ERROR: 30"})

        with patch('serial.Serial', return_value=modem):
            with SerialHandler("/dev/ttyUSB2", logger=logger) as handler:
                ATExecutor(handler, logger=logger).execute_command("+SPENGMD=0,14,1")
        logger.close()

        lines = log_file.read_text(encoding='utf-8').splitlines()
        assert len(lines) == 1
        assert "| ERROR   |" in lines[0]
        assert "STATUS: ERROR" in lines[0]

    def test_buffer_mirrors_file(self, tmp_path, fake_modem):
        logger = file_logger(tmp_path / "comm.log")
        modem = fake_modem({"AT": "OK"})

        with patch('serial.Serial', return_value=modem):
            with SerialHandler("/dev/ttyUSB2", logger=logger) as handler:
                ATExecutor(handler, logger=logger).execute_command("AT")

        sources = [entry.source for entry in logger.get_entries()]
        assert sources == ["SerialHandler", "ATExecutor", "ATExecutor", "SerialHandler"]
        logger.close()

    def test_rotation_under_load(self, tmp_path):
        """Test rotation keeps at most backup_count backups."""
        log_file = tmp_path / "comm.log"
        log_file.write_text("x" * 1024 * 1024, encoding='utf-8')
        logger = file_logger(log_file, max_file_size_mb=1, backup_count=2)

        for _ in range(3):
            logger.log_command(port="/dev/ttyUSB2", command="AT+SPENGMD=0,6,0")
        logger.close()

        assert (tmp_path / "comm.log.1").exists()
        assert not (tmp_path / "comm.log.3").exists()
        assert log_file.read_text(encoding='utf-8').count("AT+SPENGMD=0,6,0") == 3

    def test_concurrent_logging(self, tmp_path):
        log_file = tmp_path / "comm.log"
        logger = file_logger(log_file)

        def worker(index):
            for i in range(25):
                logger.log_command(port=f"/dev/ttyUSB{index}", command=f"AT+{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        logger.close()

        assert len(log_file.read_text(encoding='utf-8').splitlines()) == 100

    def test_entries_round_trip_through_json(self, tmp_path):
        logger = file_logger(tmp_path / "comm.log")
        logger.log_response(port="/dev/ttyUSB2", response="OK", status="SUCCESS",
                            execution_time=0.05, command="AT")

        entry = logger.get_entries()[0]
        assert LogEntry.from_json(entry.to_json()) == entry
        logger.close()
