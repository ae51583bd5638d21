"""Diagnostic query runners.

A diagnostic query is a vendor AT command (``AT+SPENGMD=...``) whose reply
enumerates serving-cell measurement records. Runners return the reply as
the raw text the modem produced, line terminators included.
"""

from abc import ABC, abstractmethod

from cellband.core.at_executor import ATExecutor
from cellband.core.exceptions import DiagnosticQueryError


class DiagnosticQueryRunner(ABC):
    """Interface for executing a diagnostic query string."""

    @abstractmethod
    def run_diagnostic_query(self, query: str) -> str:
        """Return the raw reply text for ``query``.

        Raises:
            Exception: any failure; callers treat it as "no usable data"
        """
        pass


class ATDiagnosticQuery(DiagnosticQueryRunner):
    """Run diagnostic queries through an ATExecutor.

    Example:
        >>> runner = ATDiagnosticQuery(executor, timeout=10.0)
        >>> text = runner.run_diagnostic_query("AT+SPENGMD=0,6,0")
    """

    def __init__(self, executor: ATExecutor, timeout: float = 10.0, retry: int = 1):
        self.executor = executor
        self.timeout = timeout
        self.retry = retry

    def run_diagnostic_query(self, query: str) -> str:
        """Execute ``query`` and return its lines joined with "\\r\\n".

        Raises:
            DiagnosticQueryError: modem answered ERROR or never answered
            SerialPortError: port I/O failure
        """
        response = self.executor.execute_command(query, timeout=self.timeout, retry=self.retry)
        if not response.is_successful():
            raise DiagnosticQueryError(
                response.error_message or "Diagnostic query failed",
                query,
                response
            )
        return response.get_response_text(separator='\r\n')
