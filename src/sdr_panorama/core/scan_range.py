"""
Scan range management.

Owns the authoritative panoramic scan boundaries and derives the values
that depend on them (bandwidth, centre, default demodulator bandwidth).
Every effective change is broadcast to registered listeners while the
shared lock is held, so dependants such as the spectrum stitcher are
invalidated atomically with the range update.
"""

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Callable, List, Optional, Tuple

from ..devices.profile import DeviceProfile
from ..utils.conversions import round_hz

logger = logging.getLogger(__name__)

# Default demodulator bandwidth cap (full width, applied as +/- half)
DEFAULT_DEMOD_BANDWIDTH_CAP = 4e9

# Ranges narrower than this are considered degenerate
MIN_VALID_BANDWIDTH = 1.0

RangeListener = Callable[["ScanRange"], None]


@dataclass(frozen=True)
class ScanRange:
    """
    Immutable view of the scan boundaries.

    Edges are whole hertz; fractional input is rounded with round_hz.
    """

    min_hz: int
    max_hz: int
    lnb_offset_hz: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_hz", round_hz(self.min_hz))
        object.__setattr__(self, "max_hz", round_hz(self.max_hz))

    @property
    def bandwidth(self) -> int:
        """Width of the scan range in Hz."""
        return self.max_hz - self.min_hz

    @property
    def center(self) -> float:
        """Centre of the scan range in Hz."""
        return (self.max_hz + self.min_hz) / 2

    @property
    def is_invalid(self) -> bool:
        """True when the range is too narrow to scan."""
        return abs(self.max_hz - self.min_hz) < MIN_VALID_BANDWIDTH

    def contains(self, freq_hz: float) -> bool:
        """Check whether a frequency lies inside the range."""
        return self.min_hz <= freq_hz <= self.max_hz


class ScanRangeManager:
    """
    Owns the current scan range.

    Operator input is normalized rather than rejected: reversed bounds are
    swapped and, once a device is known, values are clamped into the
    device's tunable range shifted by the LNB offset.
    """

    def __init__(
        self,
        min_hz: float = 0.0,
        max_hz: float = 0.0,
        lnb_offset_hz: float = 0.0,
        demod_bandwidth_cap: float = DEFAULT_DEMOD_BANDWIDTH_CAP,
        lock: Optional[RLock] = None,
    ):
        """
        Initialize the range manager.

        Args:
            min_hz: Initial lower bound
            max_hz: Initial upper bound
            lnb_offset_hz: Downconverter offset added to device bounds
            demod_bandwidth_cap: Maximum full width of the default demod band
            lock: Lock shared with the components that depend on the range
        """
        if min_hz > max_hz:
            min_hz, max_hz = max_hz, min_hz
        self._min = round_hz(min_hz)
        self._max = round_hz(max_hz)
        self._lnb_offset = float(lnb_offset_hz)
        self._demod_cap = float(demod_bandwidth_cap)
        self._full_range = False
        self._device: Optional[DeviceProfile] = None
        self._bounds: Optional[Tuple[int, int]] = None
        self._lock = lock if lock is not None else RLock()
        self._listeners: List[RangeListener] = []

    @property
    def lock(self) -> RLock:
        """Lock guarding the range and its dependants."""
        return self._lock

    @property
    def min_hz(self) -> int:
        with self._lock:
            return self._min

    @property
    def max_hz(self) -> int:
        with self._lock:
            return self._max

    @property
    def lnb_offset_hz(self) -> float:
        with self._lock:
            return self._lnb_offset

    @property
    def full_range(self) -> bool:
        """Whether the range follows the full device range."""
        with self._lock:
            return self._full_range

    @property
    def device(self) -> Optional[DeviceProfile]:
        """Device whose bounds currently limit the range."""
        with self._lock:
            return self._device

    @property
    def bounds(self) -> Optional[Tuple[int, int]]:
        """Allowed (min, max) including LNB offset, or None without a device."""
        with self._lock:
            return self._bounds

    @property
    def current(self) -> ScanRange:
        """Consistent snapshot of the current range."""
        with self._lock:
            return ScanRange(self._min, self._max, self._lnb_offset)

    def add_listener(self, callback: RangeListener) -> None:
        """
        Register a callback for range changes.

        Args:
            callback: Called with the new ScanRange, under the shared lock
        """
        self._listeners.append(callback)

    def set_range(self, min_hz: float, max_hz: float) -> ScanRange:
        """
        Set the scan range.

        Reversed bounds are swapped silently and both edges are rounded to
        whole hertz.

        Args:
            min_hz: Lower bound in Hz
            max_hz: Upper bound in Hz

        Returns:
            The range actually stored

        Raises:
            ValueError: If a bound is not finite
        """
        if min_hz > max_hz:
            min_hz, max_hz = max_hz, min_hz

        with self._lock:
            min_hz, max_hz = self._clamp(float(min_hz), float(max_hz))
            self._store(min_hz, max_hz)
            return ScanRange(self._min, self._max, self._lnb_offset)

    def set_full_range(
        self, device: DeviceProfile, lnb_offset_hz: Optional[float] = None
    ) -> ScanRange:
        """
        Set the range to the whole tunable range of a device.

        Args:
            device: Device descriptor
            lnb_offset_hz: New LNB offset (keeps the current one if None)

        Returns:
            The range actually stored
        """
        with self._lock:
            if lnb_offset_hz is not None:
                self._lnb_offset = float(lnb_offset_hz)
            self._device = device
            self._bounds = self._device_bounds(device)
            self._store(*self._bounds)
            return ScanRange(self._min, self._max, self._lnb_offset)

    def set_full_range_mode(self, enabled: bool) -> ScanRange:
        """
        Toggle full-range mode.

        Enabling it snaps the range to the device bounds if a device is known.
        """
        with self._lock:
            self._full_range = bool(enabled)
            if self._full_range and self._device is not None:
                self._store(*self._device_bounds(self._device))
            return ScanRange(self._min, self._max, self._lnb_offset)

    def apply_device(self, device: DeviceProfile) -> ScanRange:
        """
        Limit the range to a newly selected device.

        The current range is clamped into the device bounds and replaced by
        the full bounds when it becomes invalid or full-range mode is on.
        """
        with self._lock:
            self._device = device
            self._bounds = self._device_bounds(device)
            min_hz, max_hz = self._clamp(self._min, self._max)

            if abs(max_hz - min_hz) < MIN_VALID_BANDWIDTH or self._full_range:
                if not self._full_range:
                    logger.warning(
                        f"Scan range {min_hz:.0f}..{max_hz:.0f} Hz is invalid "
                        f"for {device.description}, using full device range"
                    )
                min_hz, max_hz = self._bounds

            self._store(min_hz, max_hz)
            logger.info(
                f"Scan bounds set to {self._bounds[0]:.0f}..{self._bounds[1]:.0f} Hz "
                f"({device.description})"
            )
            return ScanRange(self._min, self._max, self._lnb_offset)

    def set_lnb_offset(self, lnb_offset_hz: float) -> ScanRange:
        """Change the LNB offset and re-apply the device bounds."""
        with self._lock:
            self._lnb_offset = float(lnb_offset_hz)
            if self._device is not None:
                return self.apply_device(self._device)
            return ScanRange(self._min, self._max, self._lnb_offset)

    def is_invalid(self) -> bool:
        """True when |max - min| < 1 Hz; the caller should use full range."""
        with self._lock:
            return abs(self._max - self._min) < MIN_VALID_BANDWIDTH

    def bandwidth(self) -> int:
        """Width of the scan range in Hz."""
        with self._lock:
            return self._max - self._min

    def center(self) -> float:
        """Centre of the scan range in Hz."""
        with self._lock:
            return (self._max + self._min) / 2

    def default_demod_half_bandwidth(self) -> float:
        """
        Default demodulator half-bandwidth.

        One twentieth of the scan bandwidth, split in two halves, with the
        full width capped at ``demod_bandwidth_cap``.
        """
        return min(self.bandwidth() / 20 / 2, self._demod_cap / 2)

    def demod_ranges(self) -> Tuple[float, float]:
        """Allowed demodulator offsets relative to the range centre."""
        bw = self.bandwidth()
        return -bw / 2, bw / 2

    def demod_cutoffs(self) -> Tuple[float, float]:
        """Default low/high cut offsets of the demodulator filter."""
        half = self.default_demod_half_bandwidth()
        return -half, half

    def _device_bounds(self, device: DeviceProfile) -> Tuple[int, int]:
        return (
            round_hz(device.min_freq + self._lnb_offset),
            round_hz(device.max_freq + self._lnb_offset),
        )

    def _clamp(self, min_hz: float, max_hz: float) -> Tuple[float, float]:
        if self._bounds is None:
            return min_hz, max_hz
        lo, hi = self._bounds
        return min(max(min_hz, lo), hi), min(max(max_hz, lo), hi)

    def _store(self, min_hz: float, max_hz: float) -> None:
        """Store new bounds and notify listeners. Caller holds the lock."""
        min_hz, max_hz = round_hz(min_hz), round_hz(max_hz)
        if min_hz == self._min and max_hz == self._max:
            return

        old_min, old_max = self._min, self._max
        self._min, self._max = min_hz, max_hz
        logger.info(
            f"Scan range changed: {old_min:.0f}..{old_max:.0f} Hz -> "
            f"{min_hz:.0f}..{max_hz:.0f} Hz"
        )

        new_range = ScanRange(self._min, self._max, self._lnb_offset)
        for callback in list(self._listeners):
            callback(new_range)
