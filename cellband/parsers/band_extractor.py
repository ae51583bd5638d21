"""Current band telemetry extraction pipeline.

generation selection -> diagnostic query -> normalize -> tokenize ->
field mapping -> TelemetryResult
"""

import logging

from cellband.core.diagnostic_query import DiagnosticQueryRunner
from cellband.core.network_oracle import NetworkGenerationOracle
from cellband.parsers.field_mapper import map_fields
from cellband.parsers.selector import select_generation
from cellband.parsers.telemetry_model import TelemetryResult
from cellband.parsers.tokenizer import CellGrid, parse_cell_grid

logger = logging.getLogger(__name__)

# Replies this short are error or partial output, not measurements
DEFAULT_MIN_RESPONSE_LENGTH = 100


class BandTelemetryExtractor:
    """Produces a TelemetryResult for the cell the modem is camped on.

    The extractor never raises: oracle failure selects LTE, a failed or
    short diagnostic reply gives the default result, and malformed numbers
    read as zero. Each call uses its own CellGrid, so one extractor can be
    shared between threads as long as its collaborators can.

    Example:
        >>> extractor = BandTelemetryExtractor(DbusNetworkOracle(), ATDiagnosticQuery(executor))
        >>> result = extractor.extract_current_band_telemetry()
        >>> result.band
        'B3'
    """

    def __init__(self,
                 oracle: NetworkGenerationOracle,
                 query_runner: DiagnosticQueryRunner,
                 min_response_length: int = DEFAULT_MIN_RESPONSE_LENGTH):
        """Initialize extractor.

        Args:
            oracle: Network generation oracle
            query_runner: Executes the diagnostic AT query
            min_response_length: Replies with no more characters than this
                are treated as carrying no data
        """
        self.oracle = oracle
        self.query_runner = query_runner
        self.min_response_length = min_response_length

    def extract_current_band_telemetry(self) -> TelemetryResult:
        profile = select_generation(self.oracle)

        try:
            raw = self.query_runner.run_diagnostic_query(profile.query)
        except Exception as e:
            logger.warning(f"Diagnostic query {profile.query} failed: {e}")
            return TelemetryResult()

        if not raw or len(raw) <= self.min_response_length:
            logger.info(
                f"Diagnostic reply to {profile.query} too short "
                f"({len(raw) if raw else 0} chars), no telemetry"
            )
            return TelemetryResult()

        grid = parse_cell_grid(raw, CellGrid())
        result = map_fields(grid, profile)

        if result.is_known:
            logger.info(
                f"Current {result.network_type} band: Band={result.band}, "
                f"ARFCN={result.channel_number}, PCI={result.physical_cell_id}, "
                f"RSRP={result.signal_power:.2f}, RSRQ={result.signal_quality:.2f}, "
                f"SINR={result.signal_to_noise:.2f}"
            )
        return result

    def __repr__(self) -> str:
        return f"BandTelemetryExtractor(oracle={self.oracle!r}, runner={self.query_runner!r})"


def extract_current_band_telemetry(oracle: NetworkGenerationOracle,
                                   query_runner: DiagnosticQueryRunner) -> TelemetryResult:
    """One-shot helper around BandTelemetryExtractor."""
    return BandTelemetryExtractor(oracle, query_runner).extract_current_band_telemetry()
