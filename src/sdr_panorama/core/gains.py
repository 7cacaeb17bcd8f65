"""
Per-device gain persistence.

Gain values are remembered per (device, stage) pair. Stage names are
whatever the device reports at runtime, so the store never assumes a
fixed set of stages.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..devices.profile import GainStageSpec

logger = logging.getLogger(__name__)

# Prefix of gain entries in the flat configuration mapping
GAIN_KEY_PREFIX = "gain."


@dataclass
class GainStage:
    """A device gain stage with its user-selected value."""

    name: str
    default: float = 0.0
    current: Optional[float] = None

    @property
    def value(self) -> float:
        """Effective gain: the current value, or the default if unset."""
        return self.default if self.current is None else self.current


class GainProfileStore:
    """Gain values keyed by (device, stage)."""

    def __init__(self, values: Optional[Mapping[Tuple[str, str], float]] = None):
        self._gains: Dict[Tuple[str, str], float] = {}
        for (device, stage), value in (values or {}).items():
            self.set(device, stage, value)

    def get(self, device: str, stage: str) -> float:
        """Get a stored gain, or 0 if none is stored."""
        return self._gains.get((device, stage), 0.0)

    def set(self, device: str, stage: str, value: float) -> None:
        """Store a gain, replacing any previous value."""
        self._gains[(device, stage)] = float(value)

    def has(self, device: str, stage: str) -> bool:
        """Check whether a gain is stored for the pair."""
        return (device, stage) in self._gains

    def stages_for(self, device: str, specs: Iterable[GainStageSpec]) -> List[GainStage]:
        """
        Build gain stages for a device.

        Stored values win over the hardware defaults.

        Args:
            device: Device (driver) identifier
            specs: Gain stages reported by the device

        Returns:
            One GainStage per spec, in device order
        """
        stages = []
        for spec in specs:
            stage = GainStage(name=spec.name, default=spec.default)
            if self.has(device, spec.name):
                stage.current = self.get(device, spec.name)
            else:
                stage.current = spec.default
            stages.append(stage)
        return stages

    def to_fields(self) -> Dict[str, float]:
        """Flatten to ``gain.<device>.<stage>`` configuration keys."""
        return {
            f"{GAIN_KEY_PREFIX}{device}.{stage}": value
            for (device, stage), value in self._gains.items()
        }

    @classmethod
    def from_fields(cls, fields: Mapping[str, object]) -> "GainProfileStore":
        """
        Parse ``gain.<device>.<stage>`` keys from a flat mapping.

        Other keys are ignored. Entries without a stage name or with a
        non-numeric value are skipped.
        """
        store = cls()
        for key, value in fields.items():
            if not key.startswith(GAIN_KEY_PREFIX):
                continue
            device, sep, stage = key[len(GAIN_KEY_PREFIX):].partition(".")
            if not device or not sep or not stage:
                logger.warning(f"Ignoring malformed gain key: {key}")
                continue
            try:
                store.set(device, stage, float(value))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric gain {key}={value!r}")
        return store

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._gains.keys()))

    def __len__(self) -> int:
        return len(self._gains)
