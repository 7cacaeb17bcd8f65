"""
Configuration management for panoramic scanning.

Handles the persisted panoramic settings (scan range, device selection,
walk strategy, display ranges and per-device gains) and their JSON storage.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .gains import GAIN_KEY_PREFIX, GainProfileStore
from .scan_range import DEFAULT_DEMOD_BANDWIDTH_CAP

logger = logging.getLogger(__name__)

WALK_STRATEGIES = ("Stochastic", "Progressive")
PARTITIONINGS = ("Continuous", "Discrete")


class ConfigValidationError(ValueError):
    """Raised when configuration values are invalid."""

    pass


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# Persisted key -> (attribute, converter)
_FIELDS: Dict[str, tuple] = {
    "fullRange": ("full_range", _to_bool),
    "rangeMin": ("range_min", float),
    "rangeMax": ("range_max", float),
    "panRangeMin": ("pan_range_min", float),
    "panRangeMax": ("pan_range_max", float),
    "lnbFreq": ("lnb_freq", float),
    "device": ("device", str),
    "antenna": ("antenna", str),
    "sampRate": ("samp_rate", float),
    "strategy": ("strategy", str),
    "partitioning": ("partitioning", str),
    "palette": ("palette", str),
    "relBw": ("rel_bw", float),
    "stepIntervalMs": ("step_interval_ms", int),
    "demodBandwidthCap": ("demod_bandwidth_cap", float),
}


@dataclass
class PanoramicConfig:
    """Persisted panoramic spectrum settings."""

    full_range: bool = False
    range_min: float = 0.0  # Hz; an invalid range falls back to full device range
    range_max: float = 0.0  # Hz
    pan_range_min: float = -90.0  # dB
    pan_range_max: float = -10.0  # dB
    lnb_freq: float = 0.0  # Hz
    device: str = ""
    antenna: str = ""
    samp_rate: float = 8e6  # Hz, also the bandwidth covered without hopping
    strategy: str = "Stochastic"
    partitioning: str = "Discrete"
    palette: str = "Suscan"
    rel_bw: float = 0.5  # Fraction of samp_rate below which hopping stops
    step_interval_ms: int = 10
    demod_bandwidth_cap: float = DEFAULT_DEMOD_BANDWIDTH_CAP  # Full width, Hz
    gains: GainProfileStore = field(default_factory=GainProfileStore)

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate all configuration fields."""
        for name in ("range_min", "range_max", "lnb_freq"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigValidationError(
                    f"{name} must be finite, got {getattr(self, name)}"
                )
        if self.pan_range_min >= self.pan_range_max:
            raise ConfigValidationError(
                f"pan_range_min ({self.pan_range_min}) must be below "
                f"pan_range_max ({self.pan_range_max})"
            )
        if self.samp_rate <= 0:
            raise ConfigValidationError(
                f"samp_rate must be positive, got {self.samp_rate}"
            )
        if self.strategy not in WALK_STRATEGIES:
            raise ConfigValidationError(
                f"strategy must be one of {WALK_STRATEGIES}, got {self.strategy}"
            )
        if self.partitioning not in PARTITIONINGS:
            raise ConfigValidationError(
                f"partitioning must be one of {PARTITIONINGS}, got {self.partitioning}"
            )
        if not (0 < self.rel_bw <= 1):
            raise ConfigValidationError(
                f"rel_bw must be in (0, 1], got {self.rel_bw}"
            )
        if self.step_interval_ms < 0:
            raise ConfigValidationError(
                f"step_interval_ms must be non-negative, got {self.step_interval_ms}"
            )
        if self.demod_bandwidth_cap <= 0:
            raise ConfigValidationError(
                f"demod_bandwidth_cap must be positive, got {self.demod_bandwidth_cap}"
            )

    def validate(self) -> None:
        """Re-check values after in-place edits."""
        self._validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a flat dictionary of persisted keys."""
        data: Dict[str, Any] = {
            key: getattr(self, attr) for key, (attr, _) in _FIELDS.items()
        }
        data.update(self.gains.to_fields())
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PanoramicConfig":
        """
        Create configuration from a flat dictionary.

        Unknown keys are ignored and missing keys keep their defaults.

        Raises:
            ConfigValidationError: If a value is out of range
            TypeError, ValueError: If a value has the wrong type
        """
        kwargs: Dict[str, Any] = {}
        for key, (attr, convert) in _FIELDS.items():
            if key in data:
                kwargs[attr] = convert(data[key])

        kwargs["gains"] = GainProfileStore.from_fields(
            {k: v for k, v in data.items() if k.startswith(GAIN_KEY_PREFIX)}
        )
        return cls(**kwargs)

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self, path: Union[str, Path]) -> bool:
        """
        Write the settings as a flat JSON object.

        Returns:
            True if the file was written
        """
        path = Path(path)
        try:
            path.write_text(json.dumps(self.to_dict(), indent=2, sort_keys=True))
        except OSError as e:
            logger.error(f"Failed to save panoramic settings to {path}: {e}")
            return False

        logger.info(
            f"Panoramic settings saved to {path} ({len(self.gains)} stored gain(s))"
        )
        return True

    @classmethod
    def load(cls, path: Union[str, Path]) -> Optional["PanoramicConfig"]:
        """
        Read settings written by ``save`` (or any flat mapping of known keys).

        Returns:
            The settings, or None if the file is missing, unreadable or invalid
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except FileNotFoundError:
            logger.warning(f"Panoramic settings not found: {path}")
            return None
        except OSError as e:
            logger.error(f"Failed to read panoramic settings from {path}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Panoramic settings in {path} are not a JSON object")
            return None

        try:
            config = cls.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid panoramic settings in {path}: {e}")
            return None

        logger.info(f"Panoramic settings loaded from {path}")
        return config

    @staticmethod
    def default_path() -> Path:
        """``~/.config/sdr_panorama/panoramic.json``; the directory is created."""
        config_dir = Path.home() / ".config" / "sdr_panorama"
        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir / "panoramic.json"

    def save_default(self) -> bool:
        return self.save(self.default_path())

    @classmethod
    def load_default(cls) -> "PanoramicConfig":
        """Load the default settings file, falling back to defaults."""
        config = cls.load(cls.default_path())
        return config if config is not None else cls()
