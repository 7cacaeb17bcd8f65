"""
Core module - Scan range, stitching, zoom and overlay state.
"""

from .bandplan import (
    DEFAULT_BAND_COLOR,
    NO_BAND_PLAN,
    BandParseError,
    BandPlanOverlay,
    FrequencyAllocationTable,
    FrequencyBand,
)
from .config import ConfigValidationError, PanoramicConfig
from .controller import PanoramicController, ScanStartError
from .gains import GainProfileStore, GainStage
from .scan_range import ScanRange, ScanRangeManager
from .stitcher import (
    InvalidFrame,
    NothingToExport,
    SnapshotExportError,
    SpectrumStitcher,
    StitchedSnapshot,
)
from .zoom import (
    ZoomNavigator,
    ZoomState,
    ZoomWindow,
    compute_follow_window,
    compute_zoom_window,
)

__all__ = [
    # Scan range
    "ScanRange",
    "ScanRangeManager",
    # Stitching
    "SpectrumStitcher",
    "StitchedSnapshot",
    "InvalidFrame",
    "NothingToExport",
    "SnapshotExportError",
    # Zoom
    "ZoomNavigator",
    "ZoomState",
    "ZoomWindow",
    "compute_zoom_window",
    "compute_follow_window",
    # Gains
    "GainProfileStore",
    "GainStage",
    # Band plans
    "BandPlanOverlay",
    "FrequencyAllocationTable",
    "FrequencyBand",
    "BandParseError",
    "NO_BAND_PLAN",
    "DEFAULT_BAND_COLOR",
    # Configuration
    "PanoramicConfig",
    "ConfigValidationError",
    # Controller
    "PanoramicController",
    "ScanStartError",
]
