"""Serving-cell telemetry result model."""

from dataclasses import dataclass, asdict
from typing import Any, Dict

UNKNOWN = "N/A"


@dataclass(frozen=True)
class TelemetryResult:
    """Current serving-cell band telemetry.

    Every field has a usable default, so a result is always complete even
    when nothing could be extracted.

    Attributes:
        network_type: "5G NR", "4G LTE" or "N/A"
        band: Band label such as "N78" or "B3"
        channel_number: ARFCN / EARFCN
        physical_cell_id: PCI
        signal_power: RSRP in dBm
        signal_quality: RSRQ in dB
        signal_to_noise: SINR in dB
    """
    network_type: str = UNKNOWN
    band: str = UNKNOWN
    channel_number: int = 0
    physical_cell_id: int = 0
    signal_power: float = 0.0
    signal_quality: float = 0.0
    signal_to_noise: float = 0.0

    @property
    def is_known(self) -> bool:
        """True when the reply passed the plausibility gate."""
        return self.network_type != UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_api_payload(self) -> Dict[str, Any]:
        """Render the router API envelope for GET /api/current_band.

        Example:
            >>> TelemetryResult().to_api_payload()["Data"]["band"]
            'N/A'
        """
        return {
            "Code": 0,
            "Error": "",
            "Data": {
                "network_type": self.network_type,
                "band": self.band,
                "arfcn": self.channel_number,
                "pci": self.physical_cell_id,
                "rsrp": round(self.signal_power, 2),
                "rsrq": round(self.signal_quality, 2),
                "sinr": round(self.signal_to_noise, 2),
            },
        }
