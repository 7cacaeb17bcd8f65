"""
Frequency conversion and formatting utilities.
"""

import math
from typing import Union

Numeric = Union[float, int]

_SUFFIX_MULTIPLIERS = {
    "GHZ": 1e9,
    "MHZ": 1e6,
    "KHZ": 1e3,
    "HZ": 1,
    "G": 1e9,
    "M": 1e6,
    "K": 1e3,
}

_UNIT_PREFIXES = {1: "", 1000: "k", 1000000: "M", 1000000000: "G"}


def round_hz(freq_hz: Numeric) -> int:
    """
    Round a frequency to whole hertz, halves away from minus infinity.

    Rounding both edges of a range this way keeps an integral width intact
    (e.g. 0.5..10.5 becomes 1..11).

    Raises:
        ValueError: If the frequency is not finite
    """
    if not math.isfinite(freq_hz):
        raise ValueError(f"frequency must be finite, got {freq_hz}")
    return int(math.floor(freq_hz + 0.5))


def str_to_freq(freq_str: str, default_multiplier: float = 1.0) -> float:
    """
    Parse a frequency string to Hz.

    Args:
        freq_str: Frequency string (e.g., "144.2MHz", "7.1 k", "88")
        default_multiplier: Applied when the string carries no unit
            (1e6 reads bare numbers as MHz)

    Returns:
        Frequency in Hz

    Raises:
        ValueError: If the numeric part cannot be parsed
    """
    text = freq_str.strip().upper()

    for suffix, mult in _SUFFIX_MULTIPLIERS.items():
        if text.endswith(suffix):
            return float(text[:-len(suffix)].strip()) * mult

    return float(text) * default_multiplier


def frequency_units(freq_hz: Numeric) -> int:
    """
    Pick the display unit (1, 1e3, 1e6 or 1e9 Hz) for a frequency.

    The sign is ignored so negative LNB-shifted frequencies use the
    same unit as their positive counterparts.
    """
    freq_hz = abs(freq_hz)

    if freq_hz < 1000:
        return 1
    if freq_hz < 1000000:
        return 1000
    if freq_hz < 1000000000:
        return 1000000
    return 1000000000


def format_quantity(value: Numeric, digits: int = 6, units: str = "Hz") -> str:
    """
    Format a quantity with an SI prefix (e.g., "433.920000 MHz").

    Args:
        value: Quantity in base units
        digits: Number of decimals after scaling
        units: Unit suffix

    Returns:
        Formatted string
    """
    scale = frequency_units(value)
    return f"{value / scale:.{digits}f} {_UNIT_PREFIXES[scale]}{units}"
