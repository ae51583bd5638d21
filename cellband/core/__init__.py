"""Core AT command engine and modem collaborators.

Serial I/O, AT command execution, the network generation oracle and the
diagnostic query runner consumed by the band telemetry extractor.
"""

from cellband.core.command_response import CommandResponse, ResponseStatus
from cellband.core.exceptions import (
    CellBandError,
    SerialPortError,
    SerialPortBusyError,
    ConnectionTimeoutError,
    BufferOverflowError,
    NetworkOracleError,
    DiagnosticQueryError,
)
from cellband.core.serial_handler import SerialHandler, PortInfo
from cellband.core.at_executor import ATExecutor, normalize_command
from cellband.core.network_oracle import (
    NetworkGeneration,
    NetworkGenerationOracle,
    DbusNetworkOracle,
)
from cellband.core.diagnostic_query import DiagnosticQueryRunner, ATDiagnosticQuery

__all__ = [
    'CommandResponse',
    'ResponseStatus',
    'SerialHandler',
    'PortInfo',
    'ATExecutor',
    'normalize_command',
    'NetworkGeneration',
    'NetworkGenerationOracle',
    'DbusNetworkOracle',
    'DiagnosticQueryRunner',
    'ATDiagnosticQuery',
    'CellBandError',
    'SerialPortError',
    'SerialPortBusyError',
    'ConnectionTimeoutError',
    'BufferOverflowError',
    'NetworkOracleError',
    'DiagnosticQueryError',
]
