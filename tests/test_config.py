"""Tests for panoramic configuration."""

import json

import pytest

from sdr_panorama.core.config import ConfigValidationError, PanoramicConfig


class TestDefaults:
    """Test default values and validation."""

    def test_defaults(self):
        config = PanoramicConfig()
        assert config.range_min == 0
        assert config.range_max == 0
        assert config.pan_range_min == -90
        assert config.pan_range_max == -10
        assert config.samp_rate == 8e6
        assert config.strategy == "Stochastic"
        assert config.partitioning == "Discrete"
        assert config.palette == "Suscan"
        assert config.rel_bw == 0.5
        assert len(config.gains) == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"pan_range_min": -10, "pan_range_max": -90},
            {"samp_rate": 0},
            {"strategy": "Random"},
            {"partitioning": "Overlapping"},
            {"rel_bw": 0},
            {"rel_bw": 1.5},
            {"step_interval_ms": -1},
            {"demod_bandwidth_cap": 0},
            {"range_max": float("inf")},
            {"lnb_freq": float("nan")},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigValidationError):
            PanoramicConfig(**kwargs)

    def test_validate_after_edit(self):
        """In-place edits are checked on demand."""
        config = PanoramicConfig()
        config.rel_bw = 2.0
        with pytest.raises(ConfigValidationError):
            config.validate()


class TestSerialization:
    """Test dict conversion."""

    def test_to_dict_uses_persisted_keys(self):
        config = PanoramicConfig(range_min=88e6, range_max=108e6, device="RTL")
        config.gains.set("rtlsdr", "TUNER", 20.0)
        data = config.to_dict()

        assert data["rangeMin"] == 88e6
        assert data["rangeMax"] == 108e6
        assert data["device"] == "RTL"
        assert data["gain.rtlsdr.TUNER"] == 20.0

    def test_from_dict_ignores_unknown_keys(self):
        config = PanoramicConfig.from_dict({
            "fullRange": "true",
            "strategy": "Progressive",
            "stepIntervalMs": "16",
            "waterfallAlpha": 0.3,
            "gain.hackrf.LNA": 24,
        })
        assert config.full_range is True
        assert config.strategy == "Progressive"
        assert config.step_interval_ms == 16
        assert config.gains.get("hackrf", "LNA") == 24.0

    def test_from_dict_missing_keys_keep_defaults(self):
        config = PanoramicConfig.from_dict({"palette": "Magma"})
        assert config.palette == "Magma"
        assert config.samp_rate == 8e6

    def test_from_dict_invalid_value(self):
        with pytest.raises(ConfigValidationError):
            PanoramicConfig.from_dict({"partitioning": "Sideways"})


class TestPersistence:
    """Test JSON file storage."""

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "panoramic.json"
        config = PanoramicConfig(
            range_min=430e6, range_max=440e6, lnb_freq=-9.75e9, antenna="RX2"
        )
        config.gains.set("uhd", "PGA", 12.5)

        assert config.save(str(path))
        loaded = PanoramicConfig.load(str(path))

        assert loaded is not None
        assert loaded.to_dict() == config.to_dict()

    def test_load_missing_file(self, tmp_path):
        assert PanoramicConfig.load(str(tmp_path / "missing.json")) is None

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert PanoramicConfig.load(str(path)) is None

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([1, 2, 3]))
        assert PanoramicConfig.load(str(path)) is None

    def test_load_invalid_values(self, tmp_path):
        path = tmp_path / "values.json"
        path.write_text(json.dumps({"relBw": 7}))
        assert PanoramicConfig.load(str(path)) is None

    def test_save_to_missing_directory(self, tmp_path):
        assert not PanoramicConfig().save(str(tmp_path / "nope" / "cfg.json"))

    def test_load_default_without_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        config = PanoramicConfig.load_default()
        assert config.to_dict() == PanoramicConfig().to_dict()

    def test_path_objects_accepted(self, tmp_path):
        path = tmp_path / "panoramic.json"
        assert PanoramicConfig(palette="Magma").save(path)
        assert PanoramicConfig.load(path).palette == "Magma"

    def test_save_default_location(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert PanoramicConfig(step_interval_ms=16).save_default()

        assert PanoramicConfig.default_path() == (
            tmp_path / ".config" / "sdr_panorama" / "panoramic.json"
        )
        assert PanoramicConfig.load_default().step_interval_ms == 16
