"""
Zoom and pan navigation over the panoramic scan range.

Translates a requested centre/span into the retune window sent to the
capture engine. Windows that would cross a scan boundary are clamped
to it and shifted inward so the requested span is preserved. Once the
window is narrow enough the receiver stops hopping and the remaining
zoom is done by digital retuning alone (fixed-frequency mode).
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional

from ..utils.conversions import round_hz
from .scan_range import ScanRange, ScanRangeManager

logger = logging.getLogger(__name__)


class ZoomWindow(NamedTuple):
    """Retune window requested from the capture engine."""

    min_hz: int
    max_hz: int
    fixed_mode: bool

    @property
    def span(self) -> int:
        return self.max_hz - self.min_hz

    @property
    def center(self) -> float:
        return (self.max_hz + self.min_hz) / 2


def _clamped_window(center: float, span: int, scan_range: ScanRange):
    """Clamp [center - span/2, center + span/2] into the scan range."""
    if span <= 0:
        raise ValueError(f"zoom span must be positive, got {span}")

    lower = scan_range.min_hz
    upper = scan_range.max_hz

    window_min = round_hz(center) - span // 2
    window_max = window_min + span
    left_clamped = False
    right_clamped = False

    if window_min <= lower:
        left_clamped = True
        window_min = lower

    if window_max >= upper:
        right_clamped = True
        window_max = upper

    if left_clamped and not right_clamped:
        window_max = window_min + span
    elif right_clamped and not left_clamped:
        window_min = window_max - span

    # A scan range narrower than the span degenerates to the full range
    window_min = max(window_min, lower)
    window_max = min(window_max, upper)

    return window_min, window_max


def compute_zoom_window(
    center: float,
    span: float,
    scan_range: ScanRange,
    min_bw_for_zoom: float,
    rel_bw: float,
) -> ZoomWindow:
    """
    Compute the retune window for a new zoom level.

    Pure function: identical inputs always give identical outputs.

    Args:
        center: Requested centre frequency in Hz
        span: Requested span in Hz
        scan_range: Scan boundaries the window must stay within
        min_bw_for_zoom: Bandwidth the receiver covers without hopping
        rel_bw: Fraction of min_bw_for_zoom below which hopping stops

    Returns:
        ZoomWindow with the clamped bounds and the fixed-frequency flag

    Raises:
        ValueError: If span is not positive
    """
    window_min, window_max = _clamped_window(center, int(span), scan_range)
    fixed_mode = (window_max - window_min) <= min_bw_for_zoom * rel_bw
    return ZoomWindow(window_min, window_max, fixed_mode)


def compute_follow_window(
    new_center: float,
    current_span: float,
    scan_range: ScanRange,
    fixed_mode: bool = False,
) -> ZoomWindow:
    """
    Compute the retune window when panning at the current zoom level.

    Applies the same clamp-and-shift rule as compute_zoom_window but keeps
    the span and fixed-frequency flag of the current zoom level.

    Raises:
        ValueError: If current_span is not positive
    """
    window_min, window_max = _clamped_window(new_center, int(current_span), scan_range)
    return ZoomWindow(window_min, window_max, fixed_mode)


@dataclass
class ZoomState:
    """Zoom level currently requested from the capture engine."""

    center: float = 0.0
    span: int = 0
    fixed_mode: bool = False


class ZoomNavigator:
    """
    Stateful zoom controller bound to a scan range manager.

    Holds the current span and fixed-frequency flag between zoom and pan
    events; the range itself is only read.
    """

    def __init__(
        self,
        range_manager: ScanRangeManager,
        min_bw_for_zoom: float = 0.0,
        rel_bw: float = 0.5,
    ):
        """
        Initialize the navigator.

        Args:
            range_manager: Source of the scan boundaries
            min_bw_for_zoom: Receiver bandwidth in Hz (usually the sample rate)
            rel_bw: Relative bandwidth threshold for fixed-frequency mode
        """
        self._ranges = range_manager
        self._min_bw_for_zoom = float(min_bw_for_zoom)
        self._rel_bw = float(rel_bw)
        self._state = ZoomState()
        self.reset()
        range_manager.add_listener(self._on_range_changed)

    @property
    def min_bw_for_zoom(self) -> float:
        return self._min_bw_for_zoom

    @min_bw_for_zoom.setter
    def min_bw_for_zoom(self, bw: float) -> None:
        self._min_bw_for_zoom = float(bw)

    @property
    def rel_bw(self) -> float:
        return self._rel_bw

    @rel_bw.setter
    def rel_bw(self, value: float) -> None:
        self._rel_bw = float(value)

    @property
    def state(self) -> ZoomState:
        """Copy of the current zoom state."""
        return ZoomState(self._state.center, self._state.span, self._state.fixed_mode)

    @property
    def fixed_mode(self) -> bool:
        return self._state.fixed_mode

    @property
    def current_span(self) -> int:
        return self._state.span

    def reset(self) -> None:
        """Return to the unzoomed view of the whole scan range."""
        scan_range = self._ranges.current
        self._state = ZoomState(
            center=scan_range.center,
            span=max(0, scan_range.bandwidth),
            fixed_mode=False,
        )

    def _on_range_changed(self, scan_range: ScanRange) -> None:
        self.reset()

    def zoom(self, center: float, span: float) -> ZoomWindow:
        """
        Request a new zoom level.

        Args:
            center: Centre frequency in Hz
            span: Visible span in Hz

        Returns:
            Clamped retune window
        """
        window = compute_zoom_window(
            center, span, self._ranges.current, self._min_bw_for_zoom, self._rel_bw
        )
        self._state = ZoomState(window.center, window.span, window.fixed_mode)
        logger.debug(
            f"Zoom window {window.min_hz}..{window.max_hz} Hz "
            f"(fixed={window.fixed_mode})"
        )
        return window

    def follow(self, new_center: float) -> Optional[ZoomWindow]:
        """
        Pan to a new centre at the current zoom level.

        Returns:
            Clamped retune window, or None if there is no zoom span yet
        """
        if self._state.span <= 0:
            return None

        window = compute_follow_window(
            new_center, self._state.span, self._ranges.current, self._state.fixed_mode
        )
        self._state.center = window.center
        logger.debug(
            f"Follow window {window.min_hz}..{window.max_hz} Hz "
            f"(fixed={window.fixed_mode})"
        )
        return window
