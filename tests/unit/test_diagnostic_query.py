"""Unit tests for ATDiagnosticQuery."""

from unittest.mock import Mock

import pytest

from cellband.core.at_executor import ATExecutor
from cellband.core.command_response import CommandResponse, ResponseStatus
from cellband.core.diagnostic_query import ATDiagnosticQuery, DiagnosticQueryRunner
from cellband.core.exceptions import DiagnosticQueryError


def make_executor(response):
    executor = Mock(spec=ATExecutor)
    executor.execute_command.return_value = response
    return executor


class TestATDiagnosticQuery:
    """Test run_diagnostic_query()."""

    def test_is_runner(self):
        assert isinstance(ATDiagnosticQuery(Mock(spec=ATExecutor)), DiagnosticQueryRunner)

    def test_success_returns_crlf_joined_text(self):
        """Test reply lines are joined with the modem line terminator."""
        response = CommandResponse(
            command="AT+SPENGMD=0,6,0",
            raw_response=["3-1300-238", "--8453--1080", "OK"],
            status=ResponseStatus.SUCCESS,
            execution_time=0.2
        )
        executor = make_executor(response)
        runner = ATDiagnosticQuery(executor, timeout=8.0, retry=0)

        text = runner.run_diagnostic_query("AT+SPENGMD=0,6,0")

        assert text == "3-1300-238\r\n--8453--1080\r\nOK"
        executor.execute_command.assert_called_once_with("AT+SPENGMD=0,6,0", timeout=8.0, retry=0)

    def test_error_response_raises(self):
        """Test an ERROR reply raises DiagnosticQueryError carrying the response."""
        response = CommandResponse(
            command="AT+SPENGMD=0,14,1",
            raw_response=["+CME ERROR: 30"],
            status=ResponseStatus.ERROR,
            execution_time=0.1,
            error_code="30",
            error_message="CME Error: 30"
        )
        runner = ATDiagnosticQuery(make_executor(response))

        with pytest.raises(DiagnosticQueryError) as exc_info:
            runner.run_diagnostic_query("AT+SPENGMD=0,14,1")

        assert exc_info.value.query == "AT+SPENGMD=0,14,1"
        assert exc_info.value.response is response
        assert "CME Error: 30" in str(exc_info.value)

    def test_timeout_response_raises(self):
        response = CommandResponse(
            command="AT+SPENGMD=0,6,0",
            raw_response=[],
            status=ResponseStatus.TIMEOUT,
            execution_time=10.0,
            retry_count=1
        )
        runner = ATDiagnosticQuery(make_executor(response))

        with pytest.raises(DiagnosticQueryError, match="timeout"):
            runner.run_diagnostic_query("AT+SPENGMD=0,6,0")
