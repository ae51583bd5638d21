"""Unit tests for generation profiles and field layouts."""

import dataclasses

import pytest

from cellband.core.network_oracle import NetworkGeneration
from cellband.parsers.layout import (
    FieldKind,
    FieldSpec,
    NR_PROFILE,
    LTE_PROFILE,
    PROFILES,
    DEFAULT_PROFILE,
)


def field_rows(profile):
    return {field_spec.name: field_spec.row for field_spec in profile.layout.fields}


class TestProfiles:
    """Test the registered generation profiles."""

    def test_nr_profile(self):
        assert NR_PROFILE.generation is NetworkGeneration.NR
        assert NR_PROFILE.label == "5G NR"
        assert NR_PROFILE.query == "AT+SPENGMD=0,14,1"
        assert NR_PROFILE.band_prefix == "N"
        assert NR_PROFILE.layout.min_rows == 15

    def test_lte_profile(self):
        assert LTE_PROFILE.generation is NetworkGeneration.LTE
        assert LTE_PROFILE.label == "4G LTE"
        assert LTE_PROFILE.query == "AT+SPENGMD=0,6,0"
        assert LTE_PROFILE.band_prefix == "B"
        assert LTE_PROFILE.layout.min_rows == 33

    def test_registry(self):
        """Test every generation has a profile."""
        assert PROFILES[NetworkGeneration.NR] is NR_PROFILE
        assert PROFILES[NetworkGeneration.LTE] is LTE_PROFILE
        assert set(PROFILES) == set(NetworkGeneration)

    def test_default_is_lte(self):
        assert DEFAULT_PROFILE is LTE_PROFILE

    @pytest.mark.parametrize("profile,snr_row", [(NR_PROFILE, 15), (LTE_PROFILE, 33)])
    def test_field_rows(self, profile, snr_row):
        """Test shared head rows and generation specific SINR row."""
        assert field_rows(profile) == {
            "band": 0,
            "channel_number": 1,
            "physical_cell_id": 2,
            "signal_power": 3,
            "signal_quality": 4,
            "signal_to_noise": snr_row,
        }

    @pytest.mark.parametrize("profile", [NR_PROFILE, LTE_PROFILE])
    def test_signal_metrics_scaled(self, profile):
        """Test all three signal metrics are reported in 1/100 units."""
        scaled = {field_spec.name for field_spec in profile.layout.fields if field_spec.divisor == 100.0}

        assert scaled == {"signal_power", "signal_quality", "signal_to_noise"}

    def test_sinr_row_within_gate(self):
        """Test the SINR row exists in any grid that passes the gate."""
        for profile in PROFILES.values():
            assert field_rows(profile)["signal_to_noise"] <= profile.layout.min_rows


class TestFieldSpec:
    """Test FieldSpec defaults."""

    def test_defaults(self):
        field_spec = FieldSpec("channel_number", row=1)

        assert field_spec.column == 0
        assert field_spec.kind is FieldKind.INTEGER
        assert field_spec.divisor == 1.0

    def test_frozen(self):
        field_spec = FieldSpec("band", row=0, kind=FieldKind.LABEL)

        with pytest.raises(dataclasses.FrozenInstanceError):
            field_spec.row = 2
