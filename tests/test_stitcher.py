"""Tests for the spectrum stitcher."""

import threading

import numpy as np
import pytest

from sdr_panorama.core.stitcher import (
    InvalidFrame,
    NothingToExport,
    SnapshotExportError,
    SpectrumStitcher,
)


class TestFeed:
    """Test frame ingestion."""

    def test_feed_replaces_snapshot(self):
        stitcher = SpectrumStitcher()
        stitcher.feed(1_000_000, 2_000_000, [1.0, 2.0, 3.0])
        stitcher.feed(2_000_000, 3_000_000, [4.0, 5.0])

        snapshot = stitcher.snapshot
        assert snapshot.start_hz == 2_000_000
        assert snapshot.end_hz == 3_000_000
        np.testing.assert_array_equal(snapshot.samples, [4.0, 5.0])

    def test_feed_counts_frames(self):
        stitcher = SpectrumStitcher()
        for i in range(5):
            stitcher.feed(i * 1000, (i + 1) * 1000, [0.0])
        assert stitcher.frame_count == 5

        stitcher.reset_frame_count()
        assert stitcher.frame_count == 0

    def test_samples_stored_as_float32_copy(self):
        """Samples are copied, so later edits by the caller do not leak in."""
        stitcher = SpectrumStitcher()
        data = np.array([1.0, 2.0], dtype=np.float64)
        snapshot = stitcher.feed(0, 10, data)
        data[0] = 99.0

        assert snapshot.samples.dtype == np.float32
        assert snapshot.samples[0] == 1.0
        assert not snapshot.samples.flags.writeable

    def test_equal_bounds_rejected(self):
        """start == end is rejected and the previous snapshot survives."""
        stitcher = SpectrumStitcher()
        stitcher.feed(100, 200, [1.0])

        with pytest.raises(InvalidFrame):
            stitcher.feed(500, 500, [2.0])

        assert stitcher.snapshot.start_hz == 100
        assert stitcher.frame_count == 1

    def test_inverted_bounds_rejected(self):
        stitcher = SpectrumStitcher()
        with pytest.raises(InvalidFrame):
            stitcher.feed(200, 100, [1.0])
        assert stitcher.is_empty

    def test_bounds_within_one_hertz_rejected(self):
        """Fractional bounds that round to the same hertz are rejected."""
        stitcher = SpectrumStitcher()
        with pytest.raises(InvalidFrame):
            stitcher.feed(1.2, 1.4, [1.0])
        assert stitcher.is_empty

    def test_fractional_bounds_rounded(self):
        stitcher = SpectrumStitcher()
        snapshot = stitcher.feed(1.2, 1.9, [1.0])
        assert (snapshot.start_hz, snapshot.end_hz) == (1, 2)
        assert snapshot.start_hz < snapshot.end_hz

    def test_empty_samples_rejected(self):
        stitcher = SpectrumStitcher()
        with pytest.raises(InvalidFrame):
            stitcher.feed(100, 200, [])
        assert stitcher.frame_count == 0

    def test_invalid_frame_is_value_error(self):
        stitcher = SpectrumStitcher()
        with pytest.raises(ValueError):
            stitcher.feed(100, 200, np.zeros((2, 2)))

    def test_clear(self):
        stitcher = SpectrumStitcher()
        stitcher.feed(100, 200, [1.0])
        stitcher.clear()
        assert stitcher.is_empty
        assert stitcher.snapshot is None

    def test_frequency_axis(self):
        stitcher = SpectrumStitcher()
        snapshot = stitcher.feed(0, 400, [0.0, 0.0, 0.0, 0.0])
        np.testing.assert_allclose(snapshot.frequencies(), [50, 150, 250, 350])

    def test_concurrent_feed_and_clear(self):
        """Readers always see complete frames while a producer feeds."""
        stitcher = SpectrumStitcher()
        errors = []

        def producer():
            for i in range(500):
                n = (i % 7) + 1
                stitcher.feed(i, i + n, np.full(n, float(n)))

        def reader():
            for _ in range(500):
                snapshot = stitcher.snapshot
                if snapshot is None:
                    continue
                if len(snapshot.samples) != snapshot.bandwidth:
                    errors.append(snapshot)
                stitcher.clear()

        threads = [threading.Thread(target=producer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert stitcher.frame_count == 500


class TestExport:
    """Test MATLAB/Octave export."""

    def test_export_format(self, tmp_path):
        stitcher = SpectrumStitcher()
        stitcher.feed(1_000_000, 2_000_000, [1.0, 2.0, 3.0])

        path = stitcher.export_snapshot(tmp_path / "psd.m", product="TestSuite")
        content = path.read_text()

        assert content == (
            "%\n"
            "% Panoramic Spectrum file generated by TestSuite\n"
            "%\n"
            "\n"
            "freqMin = 1000000;\n"
            "freqMax = 2000000;\n"
            "PSD = [ 1 2 3 ];\n"
        )

    def test_export_float_precision(self, tmp_path):
        """Values are printed with float32 precision."""
        stitcher = SpectrumStitcher()
        stitcher.feed(0, 10, [-73.123456789, 0.1])

        content = stitcher.export_snapshot(tmp_path / "psd.m").read_text()
        assert "PSD = [ -73.1235 0.1 ];" in content

    def test_export_empty_raises(self, tmp_path):
        """Nothing is written before the first frame."""
        stitcher = SpectrumStitcher()
        target = tmp_path / "psd.m"

        with pytest.raises(NothingToExport):
            stitcher.export_snapshot(target)
        assert not target.exists()

    def test_export_unwritable_path(self, tmp_path):
        stitcher = SpectrumStitcher()
        stitcher.feed(0, 10, [1.0])
        target = tmp_path / "missing" / "psd.m"

        with pytest.raises(SnapshotExportError) as excinfo:
            stitcher.export_snapshot(target)
        assert excinfo.value.path == target
        assert isinstance(excinfo.value, OSError)
