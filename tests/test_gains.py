"""Tests for gain profile storage."""

from sdr_panorama.core.gains import GainProfileStore, GainStage
from sdr_panorama.devices.profile import GainStageSpec


class TestGainProfileStore:
    """Test (device, stage) keyed storage."""

    def test_get_unset_returns_zero(self):
        store = GainProfileStore()
        assert store.get("hackrf", "LNA") == 0
        assert not store.has("hackrf", "LNA")

    def test_set_then_get(self):
        store = GainProfileStore()
        store.set("hackrf", "LNA", 14.0)
        assert store.get("hackrf", "LNA") == 14.0
        assert store.has("hackrf", "LNA")

    def test_set_overwrites(self):
        store = GainProfileStore()
        store.set("hackrf", "LNA", 14.0)
        store.set("hackrf", "LNA", 24.0)
        assert store.get("hackrf", "LNA") == 24.0
        assert len(store) == 1

    def test_devices_are_independent(self):
        store = GainProfileStore()
        store.set("hackrf", "LNA", 14.0)
        assert store.get("airspy", "LNA") == 0
        assert not store.has("airspy", "LNA")

    def test_stages_for_prefers_stored_values(self):
        store = GainProfileStore({("hackrf", "VGA"): 30.0})
        stages = store.stages_for(
            "hackrf", [GainStageSpec("LNA", 16.0), GainStageSpec("VGA", 20.0)]
        )
        assert [(s.name, s.value) for s in stages] == [("LNA", 16.0), ("VGA", 30.0)]


class TestGainFields:
    """Test flat configuration keys."""

    def test_to_fields(self):
        store = GainProfileStore()
        store.set("rtlsdr", "TUNER", 33.8)
        assert store.to_fields() == {"gain.rtlsdr.TUNER": 33.8}

    def test_from_fields(self):
        store = GainProfileStore.from_fields({
            "gain.hackrf.LNA": 14,
            "gain.uhd.PGA.1": "7.5",
            "gain.broken": 1.0,
            "gain.hackrf.VGA": "loud",
            "rangeMin": 1e6,
        })
        assert store.get("hackrf", "LNA") == 14.0
        assert store.get("uhd", "PGA.1") == 7.5
        assert not store.has("hackrf", "VGA")
        assert len(store) == 2


class TestGainStage:
    """Test the current/default fallback."""

    def test_unset_current_falls_back_to_default(self):
        assert GainStage("LNA", default=16.0).value == 16.0

    def test_current_wins(self):
        assert GainStage("LNA", default=16.0, current=8.0).value == 8.0
