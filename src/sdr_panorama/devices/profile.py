"""
Device profiles and capture pacing hints.

A device profile is the read-only description of a receiver as reported
by the external enumeration layer: its tuning bounds, antennas and gain
stages. Profiles are handed to the scan engine explicitly; nothing in this
package enumerates hardware on its own.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class DeviceProfileError(ValueError):
    """Raised when a device descriptor is invalid."""

    pass


# Preferred time between retunes, per driver. Values are experimental.
PREFERRED_STEP_INTERVAL_MS: Dict[str, int] = {
    "rtlsdr": 5,
    "airspy": 16,
    "hackrf": 10,
    "uhd": 2,
}


def preferred_step_interval_ms(driver: str) -> int:
    """
    Get the preferred capture step interval for a driver.

    Args:
        driver: Driver identifier (e.g., "rtlsdr")

    Returns:
        Interval in milliseconds, or 0 if the driver has no preference
    """
    return PREFERRED_STEP_INTERVAL_MS.get(driver, 0)


@dataclass(frozen=True)
class GainStageSpec:
    """A gain stage as advertised by the device."""

    name: str
    default: float = 0.0


@dataclass(frozen=True)
class DeviceProfile:
    """Receiver description supplied by the device enumeration layer."""

    driver: str
    min_freq: float  # Minimum tunable frequency in Hz
    max_freq: float  # Maximum tunable frequency in Hz
    antennas: Tuple[str, ...] = ()
    gain_stages: Tuple[GainStageSpec, ...] = ()
    description: str = ""
    available: bool = True

    def __post_init__(self) -> None:
        """Validate the descriptor and fill in the description."""
        if not self.driver:
            raise DeviceProfileError("driver must not be empty")
        if not (math.isfinite(self.min_freq) and math.isfinite(self.max_freq)):
            raise DeviceProfileError(
                f"frequency bounds must be finite, got "
                f"{self.min_freq}..{self.max_freq}"
            )
        if self.min_freq > self.max_freq:
            raise DeviceProfileError(
                f"min_freq ({self.min_freq}) must not exceed max_freq ({self.max_freq})"
            )
        if not self.description:
            object.__setattr__(self, "description", self.driver)
        object.__setattr__(self, "antennas", tuple(self.antennas))
        object.__setattr__(self, "gain_stages", tuple(self.gain_stages))

    @property
    def preferred_step_interval_ms(self) -> int:
        """Pacing hint for this device's driver."""
        return preferred_step_interval_ms(self.driver)

    @property
    def is_usable(self) -> bool:
        """Whether the device can be offered for panoramic scanning."""
        return self.available and self.max_freq > 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DeviceProfile":
        """
        Create a profile from an external device descriptor.

        Accepts ``driverId`` (or ``driver``), ``minFreq``, ``maxFreq``,
        ``antennas``, ``gainStages`` (list of ``{name, default}``),
        ``desc`` and ``available``.

        Raises:
            DeviceProfileError: If required fields are missing or invalid
        """
        driver = data.get("driverId", data.get("driver"))
        if driver is None:
            raise DeviceProfileError("device descriptor has no driver id")

        try:
            min_freq = float(data["minFreq"])
            max_freq = float(data["maxFreq"])
        except KeyError as e:
            raise DeviceProfileError(f"device descriptor missing {e}") from e
        except (TypeError, ValueError) as e:
            raise DeviceProfileError(f"invalid frequency bounds: {e}") from e

        stages = []
        for stage in data.get("gainStages", []):
            try:
                stages.append(GainStageSpec(
                    name=str(stage["name"]),
                    default=float(stage.get("default", 0.0)),
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise DeviceProfileError(f"invalid gain stage {stage!r}: {e}") from e

        return cls(
            driver=str(driver),
            min_freq=min_freq,
            max_freq=max_freq,
            antennas=tuple(str(a) for a in data.get("antennas", [])),
            gain_stages=tuple(stages),
            description=str(data.get("desc", "")),
            available=bool(data.get("available", True)),
        )


class DeviceCatalog:
    """
    Snapshot of the devices offered for panoramic scanning.

    Devices that are unavailable or report no upper frequency bound are
    left out. Entries are keyed by description, so a later device with the
    same description replaces an earlier one.
    """

    def __init__(self, profiles: Optional[Iterable[DeviceProfile]] = None):
        self._devices: Dict[str, DeviceProfile] = {}
        for profile in profiles or []:
            self.add(profile)

    def add(self, profile: DeviceProfile) -> bool:
        """
        Add a device to the catalog.

        Returns:
            True if the device was usable and added
        """
        if not profile.is_usable:
            logger.debug(f"Skipping unusable device: {profile.description}")
            return False
        self._devices[profile.description] = profile
        return True

    @classmethod
    def from_dicts(cls, descriptors: Iterable[Mapping[str, Any]]) -> "DeviceCatalog":
        """Build a catalog from raw descriptors, skipping invalid ones."""
        catalog = cls()
        for descriptor in descriptors:
            try:
                catalog.add(DeviceProfile.from_dict(descriptor))
            except DeviceProfileError as e:
                logger.warning(f"Ignoring device descriptor: {e}")
        return catalog

    def names(self) -> List[str]:
        """Get device descriptions in insertion order."""
        return list(self._devices.keys())

    def get(self, name: str) -> Optional[DeviceProfile]:
        """Get a device by description."""
        return self._devices.get(name)

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, name: object) -> bool:
        return name in self._devices
