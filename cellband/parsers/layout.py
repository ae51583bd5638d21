"""Per-generation field layouts for the AT+SPENGMD serving-cell reply.

Each generation is described purely by data: the diagnostic query to send,
the label and band prefix to report, and the (row, column) cells holding
each telemetry field. Supporting another generation means adding a
GenerationProfile to PROFILES.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from cellband.core.network_oracle import NetworkGeneration


class FieldKind(Enum):
    """How a grid cell is turned into a telemetry value."""
    LABEL = "label"
    INTEGER = "integer"
    DECIMAL = "decimal"


@dataclass(frozen=True)
class FieldSpec:
    """Location and conversion of one telemetry field.

    Attributes:
        name: TelemetryResult attribute to populate
        row: Grid row holding the value
        column: Grid column holding the value
        kind: Conversion applied to the cell text
        divisor: DECIMAL cells are divided by this (the signal metrics
            arrive in 1/100 units)
    """
    name: str
    row: int
    column: int = 0
    kind: FieldKind = FieldKind.INTEGER
    divisor: float = 1.0


@dataclass(frozen=True)
class LayoutSchema:
    """Field table for one generation.

    Attributes:
        fields: FieldSpecs to extract
        min_rows: A reply must produce strictly more rows than this to be
            trusted; shorter replies are partial or error output
    """
    fields: Tuple[FieldSpec, ...]
    min_rows: int


@dataclass(frozen=True)
class GenerationProfile:
    """Everything generation-specific about a band telemetry query."""
    generation: NetworkGeneration
    label: str
    query: str
    band_prefix: str
    layout: LayoutSchema


def _signal_fields(snr_row: int) -> Tuple[FieldSpec, ...]:
    return (
        FieldSpec("band", row=0, kind=FieldKind.LABEL),
        FieldSpec("channel_number", row=1),
        FieldSpec("physical_cell_id", row=2),
        FieldSpec("signal_power", row=3, kind=FieldKind.DECIMAL, divisor=100.0),
        FieldSpec("signal_quality", row=4, kind=FieldKind.DECIMAL, divisor=100.0),
        FieldSpec("signal_to_noise", row=snr_row, kind=FieldKind.DECIMAL, divisor=100.0),
    )


NR_LAYOUT = LayoutSchema(fields=_signal_fields(snr_row=15), min_rows=15)
LTE_LAYOUT = LayoutSchema(fields=_signal_fields(snr_row=33), min_rows=33)

NR_PROFILE = GenerationProfile(
    generation=NetworkGeneration.NR,
    label="5G NR",
    query="AT+SPENGMD=0,14,1",
    band_prefix="N",
    layout=NR_LAYOUT,
)

LTE_PROFILE = GenerationProfile(
    generation=NetworkGeneration.LTE,
    label="4G LTE",
    query="AT+SPENGMD=0,6,0",
    band_prefix="B",
    layout=LTE_LAYOUT,
)

PROFILES: Dict[NetworkGeneration, GenerationProfile] = {
    NetworkGeneration.NR: NR_PROFILE,
    NetworkGeneration.LTE: LTE_PROFILE,
}

# Used whenever the generation cannot be determined
DEFAULT_PROFILE = LTE_PROFILE
