"""
Panoramic scan controller.

Composes the scan range manager, spectrum stitcher, zoom navigator, gain
store and band plan overlay into the state model a panoramic spectrum
front end drives. Device enumeration and the band plan catalog are
injected; the capture engine and renderer talk to the controller through
plain callbacks and the ``feed`` entry point.
"""

import logging
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..devices.profile import DeviceCatalog, DeviceProfile
from .bandplan import BandPlanOverlay, FrequencyAllocationTable
from .config import ConfigValidationError, PanoramicConfig
from .gains import GainStage
from .scan_range import ScanRange, ScanRangeManager
from .stitcher import DEFAULT_PRODUCT_NAME, SpectrumStitcher, StitchedSnapshot
from .zoom import ZoomWindow, ZoomNavigator

logger = logging.getLogger(__name__)


class ScanStartError(RuntimeError):
    """Raised when a scan cannot be started."""

    pass


class PanoramicController:
    """
    Frequency and state model of a panoramic spectrum scan.

    The capture context calls ``feed`` while the UI context selects devices,
    edits the range and zooms; range edits, scan start/stop and ``feed`` are
    serialized through one lock shared by the range manager and stitcher.
    """

    def __init__(
        self,
        catalog: DeviceCatalog,
        config: Optional[PanoramicConfig] = None,
        band_plan_catalog: Optional[Iterable[Mapping[str, Any]]] = None,
        product: str = DEFAULT_PRODUCT_NAME,
    ):
        """
        Initialize the controller.

        Args:
            catalog: Devices available for scanning
            config: Persisted settings (defaults if None)
            band_plan_catalog: Raw allocation tables, loaded on first use
            product: Product name written into exported files
        """
        self._catalog = catalog
        self._config = config or PanoramicConfig()
        self._band_plan_catalog = band_plan_catalog
        self._product = product

        self._lock = RLock()
        self._ranges = ScanRangeManager(
            self._config.range_min,
            self._config.range_max,
            lnb_offset_hz=self._config.lnb_freq,
            demod_bandwidth_cap=self._config.demod_bandwidth_cap,
            lock=self._lock,
        )
        self._stitcher = SpectrumStitcher(lock=self._lock)
        self._ranges.add_listener(self._on_range_changed)
        self._navigator = ZoomNavigator(
            self._ranges,
            min_bw_for_zoom=self._config.samp_rate,
            rel_bw=self._config.rel_bw,
        )
        self._overlay = BandPlanOverlay()
        self._ranges.set_full_range_mode(self._config.full_range)

        self._running = False
        self._device: Optional[DeviceProfile] = None
        self._antenna = ""
        self._gain_stages: List[GainStage] = []
        self._banned_device = ""
        self._step_interval_ms = self._config.step_interval_ms

        # Callbacks
        self._on_start: Optional[Callable[[], None]] = None
        self._on_stop: Optional[Callable[[], None]] = None
        self._on_detail: Optional[Callable[[int, int, bool], None]] = None
        self._on_gain: Optional[Callable[[str, float], None]] = None

    # =========================================================================
    # Callbacks
    # =========================================================================

    def set_start_callback(self, callback: Callable[[], None]) -> None:
        """Set callback invoked when a scan starts."""
        self._on_start = callback

    def set_stop_callback(self, callback: Callable[[], None]) -> None:
        """Set callback invoked when a scan stops."""
        self._on_stop = callback

    def set_detail_callback(self, callback: Callable[[int, int, bool], None]) -> None:
        """
        Set callback for retune requests.

        Args:
            callback: Called with (min_hz, max_hz, fixed_mode) whenever the
                     zoom window changes while a scan is running
        """
        self._on_detail = callback

    def set_gain_callback(self, callback: Callable[[str, float], None]) -> None:
        """Set callback invoked with (stage, value) when a gain changes."""
        self._on_gain = callback

    # =========================================================================
    # State
    # =========================================================================

    @property
    def config(self) -> PanoramicConfig:
        return self._config

    @property
    def running(self) -> bool:
        return self._running

    @property
    def device(self) -> Optional[DeviceProfile]:
        return self._device

    @property
    def antenna(self) -> str:
        return self._antenna

    @property
    def gain_stages(self) -> List[GainStage]:
        return list(self._gain_stages)

    @property
    def step_interval_ms(self) -> int:
        """Time between retunes the capture engine should use."""
        return self._step_interval_ms

    @property
    def scan_range(self) -> ScanRange:
        return self._ranges.current

    @property
    def range_manager(self) -> ScanRangeManager:
        return self._ranges

    @property
    def navigator(self) -> ZoomNavigator:
        return self._navigator

    @property
    def stitcher(self) -> SpectrumStitcher:
        return self._stitcher

    @property
    def snapshot(self) -> Optional[StitchedSnapshot]:
        return self._stitcher.snapshot

    @property
    def frame_count(self) -> int:
        return self._stitcher.frame_count

    @property
    def can_export(self) -> bool:
        """Whether at least one frame is available for export."""
        return not self._stitcher.is_empty

    # =========================================================================
    # Device selection
    # =========================================================================

    def device_names(self) -> List[str]:
        return self._catalog.names()

    def select_device(self, name: str) -> Optional[DeviceProfile]:
        """
        Select the device to scan with.

        Applies the device bounds to the scan range, adopts the driver's
        pacing hint, restores stored gains and keeps the antenna selection
        when the new device has an antenna at the same position.

        Returns:
            The selected device, or None if it is not in the catalog
        """
        device = self._catalog.get(name)
        if device is None:
            logger.warning(f"Device not found: {name}")
            self._device = None
            self._gain_stages = []
            return None

        antenna_index = -1
        if self._device is not None and self._antenna in self._device.antennas:
            antenna_index = self._device.antennas.index(self._antenna)

        with self._lock:
            self._device = device
            self._ranges.apply_device(device)

        interval = device.preferred_step_interval_ms
        if interval != 0:
            self._step_interval_ms = interval

        self._gain_stages = self._config.gains.stages_for(device.driver, device.gain_stages)

        if 0 <= antenna_index < len(device.antennas):
            self._antenna = device.antennas[antenna_index]
        elif device.antennas:
            self._antenna = device.antennas[0]
        else:
            self._antenna = ""

        logger.info(
            f"Selected device {device.description} "
            f"({len(self._gain_stages)} gain stage(s), step {self._step_interval_ms} ms)"
        )
        return device

    def select_antenna(self, antenna: str) -> bool:
        """Select an antenna of the current device."""
        if self._device is None or antenna not in self._device.antennas:
            return False
        self._antenna = antenna
        return True

    def set_banned_device(self, name: str) -> None:
        """Mark a device as in use elsewhere; it cannot be scanned."""
        self._banned_device = name

    # =========================================================================
    # Scan range
    # =========================================================================

    def set_range(self, min_hz: float, max_hz: float) -> ScanRange:
        """
        Set the scan range, falling back to the full device range if the
        result is degenerate.
        """
        with self._lock:
            self._ranges.set_range(min_hz, max_hz)
            if self._ranges.is_invalid() and self._device is not None:
                logger.warning("Invalid scan range, using full device range")
                self._ranges.set_full_range(self._device)
            return self._ranges.current

    def set_full_range(self, enabled: bool) -> ScanRange:
        """Toggle full-range mode."""
        return self._ranges.set_full_range_mode(enabled)

    def set_lnb_offset(self, offset_hz: float) -> ScanRange:
        """Change the LNB offset; the device bounds shift with it."""
        return self._ranges.set_lnb_offset(offset_hz)

    def _on_range_changed(self, scan_range: ScanRange) -> None:
        self._stitcher.clear()

    # =========================================================================
    # Scan control
    # =========================================================================

    def start(self) -> None:
        """
        Start scanning.

        Raises:
            ScanStartError: If no device is selected or it is in use elsewhere
        """
        if self._running:
            return

        if self._device is None:
            raise ScanStartError("no device selected")

        if self._banned_device and self._device.description == self._banned_device:
            logger.warning(f"Scan refused: {self._device.description} is in use")
            raise ScanStartError(
                "Scan cannot start because the selected device is in use "
                "by the main window."
            )

        with self._lock:
            self._stitcher.clear()
            self._stitcher.reset_frame_count()
            self._running = True

        logger.info(f"Panoramic scan started on {self._device.description}")
        if self._on_start:
            self._on_start()

    def stop(self) -> None:
        """Stop scanning and drop the stale snapshot."""
        if not self._running:
            return

        with self._lock:
            self._running = False
            self._stitcher.clear()
            self._navigator.min_bw_for_zoom = self._config.samp_rate

        logger.info(f"Panoramic scan stopped after {self.frame_count} frame(s)")
        if self._on_stop:
            self._on_stop()

    def feed(
        self,
        start_hz: int,
        end_hz: int,
        samples: Union[Sequence[float], np.ndarray],
    ) -> StitchedSnapshot:
        """Ingest a partial spectrum from the capture engine."""
        return self._stitcher.feed(start_hz, end_hz, samples)

    def export(self, path: Union[str, Path]) -> Path:
        """Export the current snapshot as a MATLAB/Octave script."""
        return self._stitcher.export_snapshot(path, product=self._product)

    # =========================================================================
    # Zoom
    # =========================================================================

    def zoom(self, center: float, span: float) -> ZoomWindow:
        """
        Handle a new zoom level.

        The retune request is emitted only while a scan is running.
        """
        window = self._navigator.zoom(center, span)
        if self._running:
            self._emit_detail(window)
        return window

    def pan(self, new_center: float) -> Optional[ZoomWindow]:
        """
        Handle a pan at the current zoom level.

        Returns:
            The retune window, or None when not scanning
        """
        if not self._running:
            return None

        window = self._navigator.follow(new_center)
        if window is not None:
            self._emit_detail(window)
        return window

    def set_min_bw_for_zoom(self, bw_hz: float) -> None:
        """
        Set the bandwidth the receiver covers without hopping.

        Outside a scan this also becomes the configured sample rate.
        """
        self._navigator.min_bw_for_zoom = bw_hz
        if not self._running and bw_hz > 0:
            self._config.samp_rate = float(bw_hz)

    def set_rel_bw(self, rel_bw: float) -> None:
        """Set the relative bandwidth threshold for fixed-frequency mode."""
        if not (0 < rel_bw <= 1):
            raise ConfigValidationError(f"rel_bw must be in (0, 1], got {rel_bw}")
        self._navigator.rel_bw = rel_bw
        self._config.rel_bw = rel_bw

    def _emit_detail(self, window: ZoomWindow) -> None:
        if self._on_detail:
            self._on_detail(window.min_hz, window.max_hz, window.fixed_mode)

    # =========================================================================
    # Gains and display
    # =========================================================================

    def set_gain(self, stage: str, value: float) -> None:
        """Change a gain of the selected device and remember it."""
        if self._device is not None:
            self._config.gains.set(self._device.driver, stage, value)
            for gain_stage in self._gain_stages:
                if gain_stage.name == stage:
                    gain_stage.current = float(value)

        if self._on_gain:
            self._on_gain(stage, float(value))

    def get_gain(self, stage: str) -> float:
        """Get the effective gain of a stage of the selected device."""
        for gain_stage in self._gain_stages:
            if gain_stage.name == stage:
                return gain_stage.value
        return 0.0

    def set_pan_range(self, min_db: float, max_db: float) -> None:
        """Remember the power range shown by the spectrum display."""
        if min_db >= max_db:
            raise ConfigValidationError(
                f"pan range min ({min_db}) must be below max ({max_db})"
            )
        self._config.pan_range_min = float(min_db)
        self._config.pan_range_max = float(max_db)

    # =========================================================================
    # Band plans
    # =========================================================================

    def _ensure_band_plans(self) -> None:
        if not self._overlay.loaded:
            self._overlay.load(self._band_plan_catalog or [])

    def band_plan_choices(self) -> List[Tuple[str, int]]:
        """Band plan selector entries, loading the catalog on first use."""
        self._ensure_band_plans()
        return self._overlay.choices()

    def select_band_plan(self, index: int) -> Optional[FrequencyAllocationTable]:
        """Select the band plan overlay (NO_BAND_PLAN hides it)."""
        self._ensure_band_plans()
        return self._overlay.select(index)

    # =========================================================================
    # Persistence
    # =========================================================================

    def save_config(self) -> PanoramicConfig:
        """Copy the live state back into the configuration object."""
        scan_range = self._ranges.current
        if self._device is not None:
            self._config.device = self._device.description
            self._config.antenna = self._antenna

        self._config.lnb_freq = scan_range.lnb_offset_hz
        self._config.range_min = scan_range.min_hz
        self._config.range_max = scan_range.max_hz
        self._config.full_range = self._ranges.full_range
        return self._config

    def restore_config(self) -> None:
        """Apply the configuration's device and antenna selection."""
        if self._config.device:
            self.select_device(self._config.device)
        if self._config.antenna:
            self.select_antenna(self._config.antenna)
