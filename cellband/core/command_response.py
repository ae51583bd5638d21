"""AT command response data model.

Defines the immutable CommandResponse dataclass and the ResponseStatus enum
returned by ATExecutor for every command it runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import time


class ResponseStatus(Enum):
    """AT command response status.

    - SUCCESS: modem answered OK
    - ERROR: ERROR, +CME ERROR or +CMS ERROR
    - TIMEOUT: no terminator within the timeout (after all retries)
    """
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class CommandResponse:
    """Immutable AT command response.

    Attributes:
        command: AT command string sent (e.g., "AT+SPENGMD=0,6,0")
        raw_response: Response lines from modem (without echo)
        status: Success, error, or timeout
        execution_time: Seconds from command send to response receive
        error_code: Error code from +CME ERROR or +CMS ERROR (if applicable)
        error_message: Human-readable error description (if applicable)
        retry_count: Number of retry attempts performed
        timestamp: Unix timestamp when response was created
    """

    command: str
    raw_response: List[str]
    status: ResponseStatus
    execution_time: float
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    retry_count: int = 0
    timestamp: float = field(default_factory=time.time)

    def get_response_text(self, separator: str = '\n') -> str:
        """Join response lines into a single string.

        Args:
            separator: Line separator (the modem itself uses "\\r\\n")

        Example:
            >>> response = CommandResponse(
            ...     command="AT+SPENGMD=0,6,0",
            ...     raw_response=["3-1300-", "OK"],
            ...     status=ResponseStatus.SUCCESS,
            ...     execution_time=0.15
            ... )
            >>> response.get_response_text()
            '3-1300-\\nOK'
        """
        return separator.join(self.raw_response)

    def is_successful(self) -> bool:
        """Check if command succeeded."""
        return self.status == ResponseStatus.SUCCESS

    def __str__(self) -> str:
        if self.status == ResponseStatus.SUCCESS:
            return f"[{self.status.value}] {self.command} -> {len(self.raw_response)} lines ({self.execution_time:.3f}s)"
        elif self.status == ResponseStatus.ERROR:
            error_info = f" ({self.error_code}: {self.error_message})" if self.error_code else ""
            return f"[{self.status.value}] {self.command}{error_info} ({self.execution_time:.3f}s)"
        else:  # TIMEOUT
            return f"[{self.status.value}] {self.command} (after {self.retry_count} retries, {self.execution_time:.3f}s)"
