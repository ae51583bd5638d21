"""Serial port I/O handler for the modem AT interface.

Wraps pyserial with thread-safe open/close/read/write and translates
pyserial failures into the cellband exception hierarchy.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, TYPE_CHECKING
import threading
import time

import serial
from serial.tools import list_ports

from cellband.core.exceptions import (
    SerialPortError,
    SerialPortBusyError,
    ConnectionTimeoutError,
    BufferOverflowError
)

if TYPE_CHECKING:
    from cellband.logging.communication_logger import CommunicationLogger


# Final result codes that end an AT exchange
FINAL_RESULT_CODES = ('OK', 'ERROR', '+CME ERROR', '+CMS ERROR')


# (message fragments, exception type, message template) checked in order
_OPEN_FAILURES = (
    (('permission denied', 'access denied'), SerialPortError, "Permission denied accessing port {port}"),
    (('busy', 'in use'), SerialPortBusyError, "Port {port} is already in use"),
    (('timeout',), ConnectionTimeoutError, "Timeout opening port {port}"),
)


def _classify_open_error(port: str, error: serial.SerialException) -> SerialPortError:
    """Map a pyserial open failure onto the matching SerialPortError subclass."""
    text = str(error).lower()
    for fragments, exc_type, template in _OPEN_FAILURES:
        if any(fragment in text for fragment in fragments):
            return exc_type(template.format(port=port), port, error)
    return SerialPortError(f"Failed to open port {port}: {error}", port, error)


@dataclass
class PortInfo:
    """Serial port information from discovery.

    Attributes:
        device: Port device path (e.g., '/dev/ttyUSB0', 'COM3')
        description: Human-readable port description
        hwid: Hardware identifier (USB VID:PID, etc.)
    """
    device: str
    description: str
    hwid: str


class SerialHandler:
    """Manages the modem serial port lifecycle and raw line I/O.

    Example:
        >>> handler = SerialHandler('/dev/ttyUSB2', baud_rate=115200)
        >>> handler.open()
        >>> handler.write('AT+SPENGMD=0,6,0')
        >>> lines = handler.read_until(timeout=5.0)
        >>> handler.close()
    """

    def __init__(self,
                 port: str,
                 baud_rate: int = 115200,
                 timeout: float = 1.0,
                 logger: Optional['CommunicationLogger'] = None,
                 max_buffer_lines: int = 1024,
                 **kwargs):
        """Initialize handler with port configuration.

        Args:
            port: Serial port device path
            baud_rate: Baud rate (default 115200)
            timeout: Per-readline timeout in seconds (default 1.0)
            logger: Optional CommunicationLogger for port events
            max_buffer_lines: Lines accepted for one reply before giving up
            **kwargs: Additional arguments passed to serial.Serial
        """
        self.port = port
        self.baud_rate = baud_rate
        self.timeout = timeout
        self.logger = logger
        self.max_buffer_lines = max_buffer_lines
        self.kwargs = kwargs
        self._serial: Optional[serial.Serial] = None
        self._lock = threading.Lock()
        self._open_time: Optional[float] = None

    def open(self) -> None:
        """Open serial port.

        Raises:
            SerialPortError: Port doesn't exist or permission denied
            SerialPortBusyError: Port already in use
            ConnectionTimeoutError: Open timeout exceeded
        """
        with self._lock:
            if self._serial is not None and self._serial.is_open:
                return

            try:
                self._serial = serial.Serial(
                    port=self.port,
                    baudrate=self.baud_rate,
                    timeout=self.timeout,
                    **self.kwargs
                )
                self._open_time = time.time()

                if self.logger:
                    self.logger.log_port_event(
                        event="Port opened",
                        port=self.port,
                        details={"baud_rate": self.baud_rate, "timeout": self.timeout},
                    )

            except serial.SerialException as e:
                if self.logger:
                    self.logger.log_error(
                        source="SerialHandler",
                        error=f"Failed to open port: {e}",
                        details={"port": self.port, "error_type": type(e).__name__}
                    )

                raise _classify_open_error(self.port, e)

    def close(self) -> None:
        """Close serial port. Safe to call multiple times."""
        with self._lock:
            if self._serial is None or not self._serial.is_open:
                return
            try:
                self._serial.close()
                if self.logger:
                    duration = time.time() - self._open_time if self._open_time else None
                    self.logger.log_port_event(
                        event="Port closed",
                        port=self.port,
                        details={"session_duration_seconds": duration} if duration else None,
                    )
            except serial.SerialException as e:
                if self.logger:
                    self.logger.log_error(
                        source="SerialHandler",
                        error=f"Error closing port: {e}",
                        details={"port": self.port}
                    )
            finally:
                self._open_time = None

    def write(self, data: str) -> int:
        """Write one command line; "\\r\\n" is appended.

        Returns:
            Number of bytes written

        Raises:
            SerialPortError: Port not open or write failed
        """
        with self._lock:
            self._ensure_open("write to")
            try:
                bytes_written = self._serial.write(f"{data}\r\n".encode('utf-8'))
                self._serial.flush()
                return bytes_written
            except serial.SerialException as e:
                raise SerialPortError(f"Failed to write to port {self.port}: {e}", self.port, e)

    def read_until(self,
                   terminators: Sequence[str] = FINAL_RESULT_CODES,
                   timeout: float = 30.0) -> List[str]:
        """Read non-empty lines until one starts with a terminator.

        Args:
            terminators: Line prefixes that end the reply
            timeout: Maximum time to wait in seconds

        Returns:
            Response lines, including the terminator line

        Raises:
            TimeoutError: No terminator within timeout
            BufferOverflowError: Reply exceeded max_buffer_lines
            SerialPortError: Port not open or read failed
        """
        with self._lock:
            self._ensure_open("read from")

            lines: List[str] = []
            start_time = time.time()
            try:
                while True:
                    elapsed = time.time() - start_time
                    if elapsed > timeout:
                        raise TimeoutError(
                            f"Read timeout after {elapsed:.2f}s waiting for {list(terminators)}"
                        )

                    line_bytes = self._serial.readline()
                    if not line_bytes:
                        time.sleep(0.01)
                        continue

                    line = line_bytes.decode('utf-8', errors='replace').strip()
                    if not line:
                        continue

                    lines.append(line)
                    if len(lines) > self.max_buffer_lines:
                        raise BufferOverflowError(
                            f"Reply exceeded {self.max_buffer_lines} lines",
                            self.port
                        )

                    if line.upper().startswith(tuple(t.upper() for t in terminators)):
                        return lines

            except serial.SerialException as e:
                raise SerialPortError(f"Failed to read from port {self.port}: {e}", self.port, e)

    def is_connected(self) -> bool:
        """Check if port is currently open."""
        with self._lock:
            return self._serial is not None and self._serial.is_open

    def flush_buffers(self) -> None:
        """Discard pending input and output (stale URCs, half replies)."""
        with self._lock:
            self._ensure_open("flush buffers on")
            try:
                self._serial.reset_input_buffer()
                self._serial.reset_output_buffer()
            except serial.SerialException as e:
                raise SerialPortError(f"Failed to flush buffers on port {self.port}: {e}", self.port, e)

    def _ensure_open(self, action: str) -> None:
        # Caller must hold self._lock
        if self._serial is None or not self._serial.is_open:
            raise SerialPortError(f"Cannot {action} closed port", self.port, None)

    @staticmethod
    def discover_ports() -> List[PortInfo]:
        """Enumerate available serial ports.

        Example:
            >>> for port in SerialHandler.discover_ports():
            ...     print(f"{port.device}: {port.description}")
            /dev/ttyUSB2: Unisoc modem AT port
        """
        return [
            PortInfo(
                device=port_info.device,
                description=port_info.description or "Unknown",
                hwid=port_info.hwid or "Unknown"
            )
            for port_info in list_ports.comports()
        ]

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        status = "open" if self.is_connected() else "closed"
        return f"SerialHandler(port='{self.port}', baud={self.baud_rate}, status={status})"
