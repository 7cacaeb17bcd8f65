"""
SDR Panorama - Panoramic spectrum scanning for narrowband receivers

Lets a receiver with limited instantaneous bandwidth show a much wider
span by retuning step by step and stitching the partial spectra into one
wideband view, with live zoom/pan, gain profiles and band plan overlays.

Pacing hints (ms between retunes):
    - RTL-SDR: 5
    - Airspy: 16
    - HackRF One: 10
    - UHD (USRP): 2

The package keeps the frequency/state model only. FFTs, hardware I/O and
rendering are provided by the application embedding it.
"""

__version__ = "0.1.0"
__author__ = "SDR Panorama Team"

from .core.bandplan import BandPlanOverlay, FrequencyAllocationTable, FrequencyBand
from .core.config import PanoramicConfig
from .core.controller import PanoramicController
from .core.gains import GainProfileStore
from .core.scan_range import ScanRange, ScanRangeManager
from .core.stitcher import SpectrumStitcher
from .core.zoom import ZoomNavigator, compute_follow_window, compute_zoom_window
from .devices.profile import DeviceCatalog, DeviceProfile, preferred_step_interval_ms

__all__ = [
    # Core
    "PanoramicController",
    "PanoramicConfig",
    "ScanRange",
    "ScanRangeManager",
    "SpectrumStitcher",
    "ZoomNavigator",
    "compute_zoom_window",
    "compute_follow_window",
    "GainProfileStore",
    "BandPlanOverlay",
    "FrequencyAllocationTable",
    "FrequencyBand",
    # Devices
    "DeviceProfile",
    "DeviceCatalog",
    "preferred_step_interval_ms",
    # Version
    "__version__",
]
