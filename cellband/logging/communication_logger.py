"""Communication logger for AT command traffic.

Fans LogEntry records out to a rotating file, the console (stderr) and an
in-memory ring buffer, filtered by level.
"""

from datetime import datetime
from collections import deque
from threading import Lock
from typing import Optional, List, Dict, Any, Union
import sys

from cellband.logging.log_models import LogEntry
from cellband.logging.file_handler import FileHandler
from cellband.config.config_models import LogLevel


def _level_name(level: Union[LogLevel, str]) -> str:
    return level.value if isinstance(level, LogLevel) else level


class CommunicationLogger:
    """Central sink for serial port and AT command events.

    Example:
        >>> logger = CommunicationLogger(
        ...     log_level=LogLevel.INFO,
        ...     enable_file=True,
        ...     log_file_path="~/.cellband/logs/comm.log"
        ... )
        >>> logger.log_command(port="/dev/ttyUSB2", command="AT+SPENGMD=0,6,0")
        >>> logger.close()
    """

    _LEVEL_ORDER = ("DEBUG", "INFO", "WARNING", "ERROR")

    # Response status -> entry level; anything unlisted is an error
    _STATUS_LEVEL = {"SUCCESS": "INFO", "TIMEOUT": "WARNING"}

    def __init__(
        self,
        log_level: Union[LogLevel, str] = LogLevel.INFO,
        enable_file: bool = False,
        enable_console: bool = True,
        log_file_path: Optional[str] = None,
        max_file_size_mb: int = 10,
        backup_count: int = 5,
        buffer_size: int = 1000
    ):
        """Open the configured destinations.

        A file that cannot be opened downgrades to console/buffer logging
        with a warning on stderr.

        Raises:
            ValueError: enable_file=True without log_file_path
        """
        if enable_file and not log_file_path:
            raise ValueError("log_file_path required when enable_file=True")

        self.log_level = _level_name(log_level)
        self.enable_file = enable_file
        self.enable_console = enable_console
        self.log_file_path = log_file_path

        self._lock = Lock()
        self._buffer: deque = deque(maxlen=buffer_size)
        self._file_handler: Optional[FileHandler] = None

        if enable_file:
            try:
                self._file_handler = FileHandler(log_file_path, max_file_size_mb, backup_count)
            except OSError as e:
                print(f"WARNING: Failed to initialize file logging: {e}", file=sys.stderr)

    def _rank(self, level: str) -> int:
        return self._LEVEL_ORDER.index(level) if level in self._LEVEL_ORDER else 0

    def log(self, entry: LogEntry) -> None:
        """Write ``entry`` to every destination unless it is below the level."""
        if self._rank(entry.level) < self._rank(self.log_level):
            return

        with self._lock:
            self._buffer.append(entry)
            if self._file_handler:
                self._file_handler.write(entry)
            if self.enable_console:
                print(entry.to_string(), file=sys.stderr)

    def _record(self, level: str, source: str, message: str, **fields: Any) -> None:
        self.log(LogEntry(datetime.now(), level, source, message, **fields))

    def log_command(self, port: str, command: str) -> None:
        self._record("INFO", "ATExecutor", "Sending command", port=port, command=command)

    def log_response(
        self,
        port: str,
        response: str,
        status: str,
        execution_time: float,
        retry_count: int = 0,
        command: Optional[str] = None
    ) -> None:
        """Log a modem reply; TIMEOUT logs at WARNING, ERROR at ERROR."""
        self._record(
            self._STATUS_LEVEL.get(status, "ERROR"), "ATExecutor", "Received response",
            port=port, command=command, response=response, status=status,
            execution_time=execution_time, retry_count=retry_count
        )

    def log_port_event(
        self,
        event: str,
        port: str,
        details: Optional[Dict[str, Any]] = None,
        level: str = "INFO"
    ) -> None:
        self._record(level, "SerialHandler", event, port=port, details=details)

    def log_error(self, source: str, error: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._record("ERROR", source, "Error occurred", error=error, details=details)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        self.log_level = _level_name(level)

    def get_entries(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Buffered entries, oldest first; ``limit`` keeps the newest N."""
        with self._lock:
            entries = list(self._buffer)
        return entries[-limit:] if limit else entries

    def clear_buffer(self) -> None:
        with self._lock:
            self._buffer.clear()

    def flush(self) -> None:
        if self._file_handler:
            self._file_handler.flush()

    def close(self) -> None:
        if self._file_handler:
            self._file_handler.close()
            self._file_handler = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
