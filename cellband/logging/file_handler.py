"""Size-rotated log file for AT traffic."""

from pathlib import Path
from threading import Lock
from typing import Optional, TextIO
import os
import sys

from cellband.logging.log_models import LogEntry


class FileHandler:
    """Thread-safe append-only log file with size based rotation.

    When the file reaches max_size_mb it is renamed to ``<name>.1``,
    older backups shift up by one and anything past backup_count is
    deleted.

    Example:
        >>> handler = FileHandler("~/.cellband/logs/comm.log", max_size_mb=10, backup_count=5)
        >>> handler.write(entry)
        True
        >>> handler.close()
    """

    def __init__(self, log_file_path: str, max_size_mb: int = 10, backup_count: int = 5):
        """Create the log directory and open the file for appending.

        Raises:
            OSError: Log directory cannot be created
        """
        self.log_file_path = Path(log_file_path).expanduser().resolve()
        self.max_size_bytes = max_size_mb * 1024 * 1024
        self.backup_count = backup_count
        self._lock = Lock()
        self._file_handle: Optional[TextIO] = None
        self._is_closed = False

        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._open_file()

    def _open_file(self) -> None:
        try:
            self._file_handle = open(self.log_file_path, mode='a', encoding='utf-8', buffering=8192)
        except OSError as e:
            print(f"ERROR: Failed to open log file {self.log_file_path}: {e}", file=sys.stderr)
            self._file_handle = None

    def write(self, entry: LogEntry) -> bool:
        """Append one entry, rotating first if needed.

        Returns:
            True if written, False if the file is closed or the write failed
        """
        if self._is_closed or self._file_handle is None:
            return False

        with self._lock:
            try:
                self._rotate_if_needed()
                if self._file_handle is None:
                    return False
                self._file_handle.write(entry.to_string() + '\n')
                self._file_handle.flush()
                return True
            except OSError as e:
                print(f"ERROR: Failed to write log entry: {e}", file=sys.stderr)
                return False

    def backup_path(self, index: int) -> Path:
        return Path(f"{self.log_file_path}.{index}")

    def _rotate_if_needed(self) -> None:
        # Caller must hold self._lock
        if self._file_handle is None:
            return

        try:
            if os.path.getsize(self.log_file_path) < self.max_size_bytes:
                return

            self._file_handle.close()

            oldest = self.backup_path(self.backup_count)
            if oldest.exists():
                oldest.unlink()
            for i in range(self.backup_count - 1, 0, -1):
                src = self.backup_path(i)
                if src.exists():
                    src.rename(self.backup_path(i + 1))

            if self.backup_count > 0:
                self.log_file_path.rename(self.backup_path(1))
            else:
                self.log_file_path.unlink()

            self._open_file()

        except OSError as e:
            print(f"WARNING: Log rotation failed: {e}", file=sys.stderr)
            if self._file_handle is None or self._file_handle.closed:
                self._open_file()

    def flush(self) -> None:
        if self._file_handle is None or self._is_closed:
            return

        with self._lock:
            try:
                if not self._file_handle.closed:
                    self._file_handle.flush()
                    os.fsync(self._file_handle.fileno())
            except OSError as e:
                print(f"ERROR: Failed to flush log file: {e}", file=sys.stderr)

    def close(self) -> None:
        """Flush and close. Idempotent."""
        if self._is_closed:
            return

        with self._lock:
            try:
                if self._file_handle and not self._file_handle.closed:
                    self._file_handle.flush()
                    self._file_handle.close()
            except OSError as e:
                print(f"ERROR: Failed to close log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None
                self._is_closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
