"""
Utility functions and helpers.
"""

from .conversions import format_quantity, frequency_units, round_hz, str_to_freq

__all__ = [
    "round_hz",
    "str_to_freq",
    "frequency_units",
    "format_quantity",
]
