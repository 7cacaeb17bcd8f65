"""
Device descriptions consumed by the scan engine.
"""

from .profile import (
    PREFERRED_STEP_INTERVAL_MS,
    DeviceCatalog,
    DeviceProfile,
    DeviceProfileError,
    GainStageSpec,
    preferred_step_interval_ms,
)

__all__ = [
    "DeviceProfile",
    "DeviceProfileError",
    "DeviceCatalog",
    "GainStageSpec",
    "PREFERRED_STEP_INTERVAL_MS",
    "preferred_step_interval_ms",
]
