"""Tests for conversion utilities."""

import pytest

from sdr_panorama.utils.conversions import (
    format_quantity,
    frequency_units,
    round_hz,
    str_to_freq,
)


class TestRoundHz:
    """Test whole-hertz rounding."""

    @pytest.mark.parametrize(
        "freq,expected",
        [(0, 0), (0.5, 1), (10.5, 11), (1.2, 1), (1.9, 2), (-0.5, 0), (-1.6, -2), (88e6, 88_000_000)],
    )
    def test_round(self, freq, expected):
        assert round_hz(freq) == expected

    def test_integral_width_preserved(self):
        """Edges with the same fraction keep their distance."""
        for lo in [0.5, 100.5, -7.5, 1e6 + 0.25]:
            assert round_hz(lo + 10) - round_hz(lo) == 10

    @pytest.mark.parametrize("freq", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_rejected(self, freq):
        with pytest.raises(ValueError):
            round_hz(freq)


class TestStrToFreq:
    """Test frequency parsing."""

    def test_suffixes(self):
        assert str_to_freq("7.1 kHz") == 7100.0
        assert str_to_freq("144.2MHz") == 144.2e6
        assert str_to_freq("5G") == 5e9
        assert str_to_freq("100") == 100.0

    def test_default_multiplier(self):
        """Bare numbers are scaled; explicit units win."""
        assert str_to_freq("88", default_multiplier=1e6) == 88e6
        assert str_to_freq("500k", default_multiplier=1e6) == 500e3

    def test_case_and_whitespace(self):
        assert str_to_freq("  100  mhz  ") == 100e6

    def test_invalid(self):
        with pytest.raises(ValueError):
            str_to_freq("lots MHz")

    def test_formatted_values_parse_back(self):
        for freq in [100, 7.1e3, 144.2e6, 2.4e9]:
            assert str_to_freq(format_quantity(freq)) == pytest.approx(freq, rel=1e-5)


class TestFrequencyUnits:
    """Test axis unit selection."""

    @pytest.mark.parametrize(
        "freq,unit",
        [
            (0, 1),
            (999, 1),
            (1000, 1000),
            (999_999, 1000),
            (1e6, 1_000_000),
            (2.4e9, 1_000_000_000),
            (-5e6, 1_000_000),
        ],
    )
    def test_units(self, freq, unit):
        assert frequency_units(freq) == unit

    def test_format_quantity(self):
        assert format_quantity(433.92e6) == "433.920000 MHz"
        assert format_quantity(1500, digits=1) == "1.5 kHz"
        assert format_quantity(2e6, digits=0, units="S/s") == "2 MS/s"
        assert format_quantity(-9.75e9) == "-9.750000 GHz"
