"""AT command execution with timeout, retry and result-code parsing."""

from typing import List, Optional, TYPE_CHECKING
import time
import re
import threading

from cellband.core.serial_handler import SerialHandler
from cellband.core.command_response import CommandResponse, ResponseStatus

if TYPE_CHECKING:
    from cellband.logging.communication_logger import CommunicationLogger

# +CME ERROR: <code> / +CMS ERROR: <code>, code optional
_EXTENDED_ERROR = re.compile(r"^\s*\+(CM[ES]) ERROR(?::\s*(.*\S))?", re.IGNORECASE)


def normalize_command(command: str) -> str:
    """Strip whitespace and add the "AT" prefix when it is missing.

    Example:
        >>> normalize_command('+SPENGMD=0,6,0')
        'AT+SPENGMD=0,6,0'
        >>> normalize_command('at+cgmi')
        'at+cgmi'
    """
    command = command.strip()
    if not command.upper().startswith('AT'):
        command = f"AT{command}"
    return command


class ATExecutor:
    """Runs AT commands over a SerialHandler.

    Retries on timeout with exponential backoff, strips command echo,
    detects ERROR / +CME ERROR / +CMS ERROR and keeps a per-session
    history of responses.

    Example:
        >>> handler = SerialHandler('/dev/ttyUSB2')
        >>> handler.open()
        >>> executor = ATExecutor(handler, default_timeout=10.0, retry_count=1)
        >>> response = executor.execute_command('AT+SPENGMD=0,6,0')
        >>> response.is_successful()
        True
    """

    def __init__(self,
                 serial_handler: SerialHandler,
                 default_timeout: float = 30.0,
                 retry_count: int = 3,
                 retry_delay: float = 1.0,
                 logger: Optional['CommunicationLogger'] = None):
        """Initialize executor.

        Args:
            serial_handler: SerialHandler instance for I/O
            default_timeout: Default timeout in seconds
            retry_count: Default number of retries after a timeout
            retry_delay: Base delay between retries in seconds
            logger: Optional CommunicationLogger for command/response traffic
        """
        self.serial_handler = serial_handler
        self.default_timeout = default_timeout
        self.default_retry_count = retry_count
        self.retry_delay = retry_delay
        self.logger = logger
        self._history: List[CommandResponse] = []
        self._history_lock = threading.Lock()

    def execute_command(self,
                        command: str,
                        timeout: Optional[float] = None,
                        retry: Optional[int] = None) -> CommandResponse:
        """Execute a single AT command.

        Args:
            command: AT command string; "AT" is prepended when missing
            timeout: Override default timeout in seconds
            retry: Override default retry count

        Returns:
            CommandResponse with status, response lines and timing.
            A command that never completes yields a TIMEOUT response
            rather than an exception.

        Raises:
            SerialPortError: Port closed or I/O failure
        """
        command = normalize_command(command)
        timeout = timeout if timeout is not None else self.default_timeout
        retry_count = retry if retry is not None else self.default_retry_count

        if self.logger:
            self.logger.log_command(port=self.serial_handler.port, command=command)

        response = self._execute_with_retry(command, timeout, retry_count)

        if self.logger:
            self.logger.log_response(
                port=self.serial_handler.port,
                response=response.get_response_text(),
                status=response.status.name,
                execution_time=response.execution_time,
                retry_count=response.retry_count,
                command=command
            )

        with self._history_lock:
            self._history.append(response)

        return response

    def get_history(self) -> List[CommandResponse]:
        """Get a copy of the responses executed in this session."""
        with self._history_lock:
            return self._history.copy()

    def clear_history(self) -> None:
        with self._history_lock:
            self._history.clear()

    def _execute_with_retry(self,
                            command: str,
                            timeout: float,
                            retry_count: int) -> CommandResponse:
        first_start = time.time()
        last_error: Optional[TimeoutError] = None

        for attempt in range(retry_count + 1):
            if attempt:
                # Backoff doubles per retry: retry_delay, 2x, 4x...
                time.sleep(self.retry_delay * (2 ** (attempt - 1)))
            try:
                start_time = time.time()
                self.serial_handler.write(command)
                lines = self.serial_handler.read_until(timeout=timeout)
            except TimeoutError as e:
                last_error = e
                continue
            return self._parse_response(command, lines, time.time() - start_time, attempt)

        return CommandResponse(
            command=command,
            raw_response=[],
            status=ResponseStatus.TIMEOUT,
            execution_time=time.time() - first_start,
            retry_count=retry_count,
            error_message=f"Timeout after {retry_count} retries: {last_error}"
        )

    def _parse_response(self,
                        command: str,
                        lines: List[str],
                        execution_time: float,
                        retry_count: int) -> CommandResponse:
        """Strip echo and classify the result code; the last error line wins."""
        body = self._strip_echo(command, lines)
        status = ResponseStatus.SUCCESS
        error_code = None
        error_message = None

        for line in body:
            if line.strip().upper() == 'ERROR':
                status = ResponseStatus.ERROR
                error_message = "Generic ERROR response"
                continue

            match = _EXTENDED_ERROR.match(line)
            if match:
                status = ResponseStatus.ERROR
                kind = match.group(1).upper()
                error_code = match.group(2) or None
                error_message = f"{kind} Error: {error_code}" if error_code else f"{kind} Error (no code)"

        return CommandResponse(
            command=command,
            raw_response=body,
            status=status,
            execution_time=execution_time,
            error_code=error_code,
            error_message=error_message,
            retry_count=retry_count
        )

    @staticmethod
    def _strip_echo(command: str, lines: List[str]) -> List[str]:
        """Drop the first line when it is the modem echoing the command."""
        if lines and lines[0].strip().upper() == command.strip().upper():
            return lines[1:]
        return lines

    def __repr__(self) -> str:
        return (f"ATExecutor(handler={self.serial_handler.port}, "
                f"timeout={self.default_timeout}s, "
                f"retries={self.default_retry_count}, "
                f"history={len(self._history)} commands)")
