"""Custom exception hierarchy for Cell Band Inspector.

This module defines the exceptions raised by the AT command engine and by the
collaborators the band telemetry extractor depends on. The extractor itself
never lets these escape; they reach the caller only through direct AT
operations (CLI command execution, port handling).
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from cellband.core.command_response import CommandResponse


class CellBandError(Exception):
    """Base exception for all cell band inspector errors.

    All custom exceptions inherit from this base class to allow
    catching all tool-specific errors with a single except clause.
    """
    pass


class SerialPortError(CellBandError):
    """Serial port communication error.

    Raised when serial port operations fail (open, read, write).

    Attributes:
        port: Serial port identifier (e.g., '/dev/ttyUSB0', 'COM3')
        os_error: Original exception from pyserial or OS (if available)
    """

    def __init__(self, message: str, port: str, os_error: Optional[Exception] = None):
        super().__init__(message)
        self.port = port
        self.os_error = os_error

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.os_error:
            return f"{base_msg} (port: {self.port}, cause: {self.os_error})"
        return f"{base_msg} (port: {self.port})"


class SerialPortBusyError(SerialPortError):
    """Port is already in use by another process."""
    pass


class ConnectionTimeoutError(SerialPortError):
    """Serial port connection could not be established in time."""
    pass


class BufferOverflowError(SerialPortError):
    """Serial buffer overflow detected."""
    pass


class NetworkOracleError(CellBandError):
    """Network generation query failed.

    Raised by oracle implementations when the carrier service cannot be
    asked for the serving cell information (missing tool, non-zero exit,
    timeout). The generation selector treats this as "older generation".

    Attributes:
        command: Command line that was run
        returncode: Process exit status, None if the process never finished
        output: Captured output (stdout or stderr) for diagnostics
    """

    def __init__(self,
                 message: str,
                 command: str,
                 returncode: Optional[int] = None,
                 output: Optional[str] = None):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.output = output

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.returncode is not None:
            return f"{base_msg} (command: {self.command}, exit: {self.returncode})"
        return f"{base_msg} (command: {self.command})"


class DiagnosticQueryError(CellBandError):
    """Vendor diagnostic query did not produce a usable reply.

    Attributes:
        query: Diagnostic AT command that was sent
        response: CommandResponse from the modem, if one was received
    """

    def __init__(self,
                 message: str,
                 query: str,
                 response: Optional['CommandResponse'] = None):
        super().__init__(message)
        self.query = query
        self.response = response

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.response is not None:
            return f"{base_msg} (query: {self.query}, status: {self.response.status.value})"
        return f"{base_msg} (query: {self.query})"
