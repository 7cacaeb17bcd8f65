"""
Band plan overlays for the panoramic view.

Frequency allocation tables (FATs) are loaded from an externally authored
catalog. Catalog entries are not trusted: a bad band is skipped and logged,
and loading continues with the next band or table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from matplotlib.colors import is_color_like, to_hex

logger = logging.getLogger(__name__)

DEFAULT_BAND_COLOR = "#1f1f1f"

# Selection index meaning "no overlay"
NO_BAND_PLAN = -1
NO_BAND_PLAN_LABEL = "(No bandplan)"


class BandParseError(ValueError):
    """Raised when a band entry cannot be parsed."""

    pass


def parse_color(value: Any, default: str = DEFAULT_BAND_COLOR) -> str:
    """
    Normalize a textual colour spec to ``#rrggbb``.

    Args:
        value: Colour name or hex string
        default: Returned when value is missing or unparseable

    Returns:
        Hex colour string
    """
    if not isinstance(value, str) or not is_color_like(value):
        return default
    return to_hex(value)


@dataclass(frozen=True)
class FrequencyBand:
    """A labelled frequency allocation."""

    min_hz: int
    max_hz: int
    primary: str = ""
    secondary: str = ""
    footnotes: str = ""
    color: str = DEFAULT_BAND_COLOR

    def overlaps(self, lo_hz: float, hi_hz: float) -> bool:
        return self.min_hz <= hi_hz and self.max_hz >= lo_hz

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FrequencyBand":
        """
        Parse a band entry.

        Raises:
            BandParseError: If min/max are missing, non-numeric or inverted
        """
        if not isinstance(data, Mapping):
            raise BandParseError(f"band entry is not a mapping: {data!r}")

        try:
            min_hz = int(float(data["min"]))
            max_hz = int(float(data["max"]))
        except KeyError as e:
            raise BandParseError(f"band entry missing {e}") from e
        except (TypeError, ValueError, OverflowError) as e:
            raise BandParseError(f"invalid band limits: {e}") from e

        if min_hz > max_hz:
            raise BandParseError(f"band min ({min_hz}) exceeds max ({max_hz})")

        return cls(
            min_hz=min_hz,
            max_hz=max_hz,
            primary=str(data.get("primary", "")),
            secondary=str(data.get("secondary", "")),
            footnotes=str(data.get("footnotes", "")),
            color=parse_color(data.get("color")),
        )


@dataclass
class FrequencyAllocationTable:
    """A named, ordered list of frequency bands."""

    name: str
    bands: List[FrequencyBand] = field(default_factory=list)

    def push_band(self, band: FrequencyBand) -> None:
        self.bands.append(band)

    def bands_between(self, lo_hz: float, hi_hz: float) -> List[FrequencyBand]:
        """Bands overlapping [lo_hz, hi_hz], in table order."""
        return [b for b in self.bands if b.overlaps(lo_hz, hi_hz)]

    def __len__(self) -> int:
        return len(self.bands)


class BandPlanOverlay:
    """
    Loaded band plans and the current overlay selection.

    Tables are loaded once and shared read-only afterwards.
    """

    def __init__(self):
        self._tables: List[FrequencyAllocationTable] = []
        self._loaded = False
        self._selected = NO_BAND_PLAN

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def tables(self) -> List[FrequencyAllocationTable]:
        return list(self._tables)

    @property
    def selected_index(self) -> int:
        return self._selected

    def load(self, tables: Iterable[Mapping[str, Any]], force: bool = False) -> int:
        """
        Load allocation tables from raw catalog descriptors.

        Each descriptor holds a ``name`` and a ``bands`` list. Malformed
        bands and tables are skipped. Loading happens once; later calls
        are ignored unless ``force`` is set.

        Args:
            tables: Raw table descriptors
            force: Reload even if tables were already loaded

        Returns:
            Number of tables available after loading
        """
        if self._loaded and not force:
            return len(self._tables)

        loaded: List[FrequencyAllocationTable] = []
        for index, raw in enumerate(tables):
            table = self._parse_table(index, raw)
            if table is not None:
                loaded.append(table)

        self._tables = loaded
        self._loaded = True
        self._selected = NO_BAND_PLAN
        logger.info(f"Loaded {len(loaded)} band plan(s)")
        return len(loaded)

    def _parse_table(
        self, index: int, raw: Mapping[str, Any]
    ) -> Optional[FrequencyAllocationTable]:
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping band plan #{index}: not a mapping")
            return None

        name = raw.get("name")
        if not isinstance(name, str) or not name:
            logger.warning(f"Skipping band plan #{index}: missing name")
            return None

        bands = raw.get("bands")
        if not isinstance(bands, (list, tuple)):
            logger.warning(f"Skipping band plan '{name}': bands is not a list")
            return None

        table = FrequencyAllocationTable(name)
        for band_index, entry in enumerate(bands):
            try:
                table.push_band(FrequencyBand.from_dict(entry))
            except BandParseError as e:
                logger.warning(f"Skipping band #{band_index} of '{name}': {e}")

        return table

    def choices(self) -> List[Tuple[str, int]]:
        """Selector entries: the "no overlay" entry, then one per table."""
        entries = [(NO_BAND_PLAN_LABEL, NO_BAND_PLAN)]
        entries.extend((table.name, i) for i, table in enumerate(self._tables))
        return entries

    def select(self, table_index: int) -> Optional[FrequencyAllocationTable]:
        """
        Select the overlay table.

        Args:
            table_index: Table index, or NO_BAND_PLAN to hide the overlay

        Returns:
            The selected table, or None when no overlay is shown

        Raises:
            IndexError: If the index does not name a loaded table
        """
        if table_index == NO_BAND_PLAN:
            self._selected = NO_BAND_PLAN
            return None
        if not 0 <= table_index < len(self._tables):
            raise IndexError(f"no band plan at index {table_index}")
        self._selected = table_index
        return self._tables[table_index]

    @property
    def selected(self) -> Optional[FrequencyAllocationTable]:
        if self._selected == NO_BAND_PLAN:
            return None
        return self._tables[self._selected]
