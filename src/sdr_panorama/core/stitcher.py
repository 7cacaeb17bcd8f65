"""
Spectrum stitcher for panoramic sweeps.

Ingests the partial power spectra produced at every retune step and keeps
the most recent one as the exportable snapshot. Accumulating successive
frames into a wideband picture is left to the waterfall renderer.
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Optional, Sequence, Union

import numpy as np

from ..utils.conversions import round_hz

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_NAME = "SDR Panorama"

# Significant digits when printing float32 samples (FLT_DIG)
SAMPLE_PRINT_DIGITS = np.finfo(np.float32).precision


class InvalidFrame(ValueError):
    """Raised when a sweep frame has an empty or inverted footprint."""

    pass


class NothingToExport(RuntimeError):
    """Raised when exporting before any frame has been ingested."""

    pass


class SnapshotExportError(OSError):
    """Raised when the export file cannot be written."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Cannot write spectrum to {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


@dataclass(frozen=True)
class StitchedSnapshot:
    """Footprint and samples of the most recently ingested frame."""

    start_hz: int
    end_hz: int
    samples: np.ndarray

    @property
    def bandwidth(self) -> int:
        return self.end_hz - self.start_hz

    def frequencies(self) -> np.ndarray:
        """Centre frequency of every sample bin in Hz."""
        n = len(self.samples)
        bin_width = self.bandwidth / n
        return self.start_hz + (np.arange(n) + 0.5) * bin_width


class SpectrumStitcher:
    """
    Thread-safe holder of the current stitched spectrum.

    A single capture context feeds frames while the UI context reads
    snapshots; the snapshot is replaced wholesale, so readers always see a
    complete frame.
    """

    def __init__(self, lock: Optional[RLock] = None):
        """
        Initialize the stitcher.

        Args:
            lock: Lock shared with the scan range manager
        """
        self._lock = lock if lock is not None else RLock()
        self._snapshot: Optional[StitchedSnapshot] = None
        self._frames = 0

    @property
    def snapshot(self) -> Optional[StitchedSnapshot]:
        """Current snapshot, or None when nothing has been fed."""
        with self._lock:
            return self._snapshot

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return self._snapshot is None

    @property
    def frame_count(self) -> int:
        """Frames ingested since the last counter reset."""
        with self._lock:
            return self._frames

    def reset_frame_count(self) -> None:
        with self._lock:
            self._frames = 0

    def feed(
        self,
        start_hz: int,
        end_hz: int,
        samples: Union[Sequence[float], np.ndarray],
    ) -> StitchedSnapshot:
        """
        Ingest a partial spectrum.

        Args:
            start_hz: Lower edge of the frame
            end_hz: Upper edge of the frame
            samples: Power spectrum bins covering [start_hz, end_hz]

        Returns:
            The new snapshot

        Bounds are rounded to whole hertz before they are checked.

        Raises:
            InvalidFrame: If the frame is empty or its bounds are inverted
        """
        if not (math.isfinite(start_hz) and math.isfinite(end_hz)):
            raise InvalidFrame(f"frame bounds must be finite, got {start_hz}..{end_hz}")

        start, end = round_hz(start_hz), round_hz(end_hz)
        if start >= end:
            raise InvalidFrame(
                f"frame start ({start_hz}) must be below frame end ({end_hz}) "
                f"in whole hertz"
            )

        data = np.array(samples, dtype=np.float32)
        if data.ndim != 1:
            raise InvalidFrame(f"samples must be one-dimensional, got shape {data.shape}")
        if len(data) == 0:
            raise InvalidFrame("frame carries no samples")
        data.flags.writeable = False

        snapshot = StitchedSnapshot(start, end, data)

        with self._lock:
            self._snapshot = snapshot
            self._frames += 1

        return snapshot

    def clear(self) -> None:
        """Drop the current snapshot."""
        with self._lock:
            self._snapshot = None

    def export_snapshot(
        self,
        path: Union[str, Path],
        product: str = DEFAULT_PRODUCT_NAME,
    ) -> Path:
        """
        Write the current snapshot as a MATLAB/Octave script.

        Args:
            path: Output file path
            product: Name written in the header comment

        Returns:
            Path of the written file

        Raises:
            NothingToExport: If no frame has been ingested
            SnapshotExportError: If the file cannot be written
        """
        snapshot = self.snapshot
        if snapshot is None:
            raise NothingToExport("no spectrum frame to export")

        path = Path(path)
        values = " ".join(
            f"{value:.{SAMPLE_PRINT_DIGITS}g}" for value in snapshot.samples
        )

        try:
            with open(path, "w", newline="\n") as f:
                f.write("%\n")
                f.write(f"% Panoramic Spectrum file generated by {product}\n")
                f.write("%\n\n")
                f.write(f"freqMin = {snapshot.start_hz};\n")
                f.write(f"freqMax = {snapshot.end_hz};\n")
                f.write(f"PSD = [ {values} ];\n")
        except OSError as e:
            logger.error(f"Failed to export spectrum to {path}: {e}")
            raise SnapshotExportError(path, e.strerror or str(e)) from e

        logger.info(
            f"Exported {len(snapshot.samples)} bins "
            f"({snapshot.start_hz}..{snapshot.end_hz} Hz) to {path}"
        )
        return path
