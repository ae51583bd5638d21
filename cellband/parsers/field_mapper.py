"""Map a parsed CellGrid onto a TelemetryResult using a generation layout."""

import logging
import re
from typing import Any, Dict

from cellband.parsers.layout import FieldKind, FieldSpec, GenerationProfile
from cellband.parsers.telemetry_model import TelemetryResult
from cellband.parsers.tokenizer import CellGrid

logger = logging.getLogger(__name__)

# Leading numeric prefix, the way the modem's C runtime reads numbers
_INT_PREFIX = re.compile(r'^\s*([+-]?\d+)', re.ASCII)
_FLOAT_PREFIX = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)', re.ASCII)


def parse_int(text: str) -> int:
    """Parse the leading integer of ``text``; 0 when there is none.

    Example:
        >>> parse_int("520110")
        520110
        >>> parse_int("12abc")
        12
        >>> parse_int("x")
        0
    """
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def parse_float(text: str) -> float:
    """Parse the leading decimal number of ``text``; 0.0 when there is none."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _convert(field_spec: FieldSpec, text: str, profile: GenerationProfile) -> Any:
    if field_spec.kind is FieldKind.LABEL:
        return f"{profile.band_prefix}{text}"
    if field_spec.kind is FieldKind.INTEGER:
        return parse_int(text)
    return parse_float(text) / field_spec.divisor


def map_fields(grid: CellGrid, profile: GenerationProfile) -> TelemetryResult:
    """Extract telemetry from ``grid`` following ``profile.layout``.

    A grid with no more rows than the layout's min_rows yields the default
    result. Otherwise each field whose cell is non-empty is converted;
    empty cells leave their field at its default.

    Args:
        grid: Tokenized diagnostic reply
        profile: Generation profile selected for this reply

    Returns:
        TelemetryResult (never raises on malformed numbers)
    """
    layout = profile.layout
    if grid.row_count <= layout.min_rows:
        logger.debug(
            f"Reply has {grid.row_count} rows, need more than {layout.min_rows} "
            f"for {profile.label}; reporting unknown telemetry"
        )
        return TelemetryResult()

    values: Dict[str, Any] = {"network_type": profile.label}
    for field_spec in layout.fields:
        text = grid.get(field_spec.row, field_spec.column)
        if text:
            values[field_spec.name] = _convert(field_spec, text, profile)

    return TelemetryResult(**values)
