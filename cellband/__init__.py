"""Cell Band Inspector - serving-cell band telemetry for Unisoc based routers.

This package provides:
- AT command execution over the modem serial port
- Serving-cell generation lookup through oFono (D-Bus)
- Parsing of AT+SPENGMD diagnostic replies into band telemetry
"""

from cellband.core import (
    CommandResponse,
    ResponseStatus,
    SerialHandler,
    PortInfo,
    ATExecutor,
    NetworkGeneration,
    DbusNetworkOracle,
    ATDiagnosticQuery,
    CellBandError,
    SerialPortError,
)

from cellband.parsers import (
    CellGrid,
    TelemetryResult,
    BandTelemetryExtractor,
    extract_current_band_telemetry,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "CommandResponse",
    "ResponseStatus",
    "SerialHandler",
    "PortInfo",
    "ATExecutor",
    "NetworkGeneration",
    "DbusNetworkOracle",
    "ATDiagnosticQuery",
    # Parsers
    "CellGrid",
    "TelemetryResult",
    "BandTelemetryExtractor",
    "extract_current_band_telemetry",
    # Exceptions
    "CellBandError",
    "SerialPortError",
]
