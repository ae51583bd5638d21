"""Parser layer: turns AT+SPENGMD replies into serving-cell telemetry."""

from .normalizer import normalize_response
from .tokenizer import CellGrid, ScanState, tokenize, parse_cell_grid, split_fields
from .layout import (
    FieldKind,
    FieldSpec,
    LayoutSchema,
    GenerationProfile,
    NR_PROFILE,
    LTE_PROFILE,
    PROFILES,
)
from .telemetry_model import TelemetryResult
from .field_mapper import map_fields, parse_int, parse_float
from .selector import select_generation
from .band_extractor import BandTelemetryExtractor, extract_current_band_telemetry

__all__ = [
    "normalize_response",
    "CellGrid",
    "ScanState",
    "tokenize",
    "parse_cell_grid",
    "split_fields",
    "FieldKind",
    "FieldSpec",
    "LayoutSchema",
    "GenerationProfile",
    "NR_PROFILE",
    "LTE_PROFILE",
    "PROFILES",
    "TelemetryResult",
    "map_fields",
    "parse_int",
    "parse_float",
    "select_generation",
    "BandTelemetryExtractor",
    "extract_current_band_telemetry",
]
