import json
import tempfile
import unittest
from pathlib import Path

from src.models import AppConfig, AppState, LootEntry, Rect, Session
from src.storage import StateStore


class RectTests(unittest.TestCase):
    def test_validity(self) -> None:
        self.assertTrue(Rect(0, 0, 1, 1).is_valid)
        self.assertFalse(Rect(0, 0, 0, 5).is_valid)
        self.assertFalse(Rect(0, 0, 5, -1).is_valid)

    def test_from_dict_tolerates_bad_input(self) -> None:
        self.assertEqual(Rect.from_dict({"x": 1, "y": 2, "w": 3, "h": 4}), Rect(1, 2, 3, 4))
        for bad in (None, [], {"x": 1}, {"x": "a", "y": 0, "w": 1, "h": 1}, {"x": 0, "y": 0, "w": 0, "h": 4}):
            self.assertIsNone(Rect.from_dict(bad))

    def test_clamp(self) -> None:
        self.assertEqual(Rect(-2, -2, 5, 5).clamp(10, 10), Rect(0, 0, 3, 3))
        self.assertIsNone(Rect(20, 0, 5, 5).clamp(10, 10))


class AppConfigTests(unittest.TestCase):
    def test_defaults_from_empty(self) -> None:
        cfg = AppConfig.from_dict({})
        self.assertIsNone(cfg.inventory_region)
        self.assertEqual(cfg.tick_interval_ms, 600)
        self.assertEqual(cfg.hamming_threshold, 8)
        self.assertEqual(cfg.confirm_frames, 2)
        self.assertTrue(cfg.ocr_enabled)

    def test_confirm_frames_never_below_two(self) -> None:
        self.assertEqual(AppConfig.from_dict({"detection": {"confirm_frames": 1}}).confirm_frames, 2)

    def test_round_trip(self) -> None:
        cfg = AppConfig(
            inventory_region=Rect(1, 2, 160, 280),
            money_region=Rect(5, 6, 40, 12),
            ocr_enabled=False,
            money_cooldown_ms=900,
        )
        self.assertEqual(AppConfig.from_dict(cfg.to_dict()), cfg)
        self.assertEqual(cfg.to_dict()["invRegion"], {"x": 1, "y": 2, "w": 160, "h": 280})


class AppStateTests(unittest.TestCase):
    def test_partial_data_gets_defaults(self) -> None:
        state = AppState.from_dict({"settings": {"invRegion": {"x": 0, "y": 0, "w": 4, "h": 7}}})
        self.assertEqual(state.settings.inventory_region, Rect(0, 0, 4, 7))
        self.assertIsNone(state.settings.money_region)
        self.assertEqual(state.icon_names, {})
        self.assertEqual(state.sessions, [])
        self.assertIsNone(state.active_session)

    def test_null_sections_fall_back_to_defaults(self) -> None:
        state = AppState.from_dict(
            {"settings": {"display": None, "detection": None, "overlay": None}, "iconNames": None}
        )
        self.assertEqual(state.settings, AppConfig())
        self.assertEqual(state.icon_names, {})

    def test_malformed_numbers_fall_back_per_field(self) -> None:
        cfg = AppConfig.from_dict(
            {
                "monitor_index": "2",
                "detection": {"tick_interval_ms": "fast", "money_cooldown_ms": None, "hamming_threshold": 6},
            }
        )
        self.assertEqual(cfg.monitor_index, 2)
        self.assertEqual(cfg.tick_interval_ms, 600)
        self.assertEqual(cfg.money_cooldown_ms, 1200)
        self.assertEqual(cfg.hamming_threshold, 6)

    def test_bad_session_does_not_discard_the_rest(self) -> None:
        state = AppState.from_dict(
            {
                "settings": {"invRegion": {"x": 1, "y": 2, "w": 160, "h": 280}},
                "iconNames": {"0f": "Bones", "ff": None},
                "sessions": [
                    {"id": "good", "label": "Run", "startedAt": 1.0, "endedAt": "2.5",
                     "loot": [{"key": "0f", "name": "Bones", "qty": 4, "iconSig": "0f"}]},
                    {"id": "no-loot", "label": "Broken", "startedAt": 3.0, "endedAt": 4.0, "loot": None},
                    {"id": "bad-entries", "startedAt": "soon", "endedAt": 6.0,
                     "loot": [None, {"name": "no key"}, {"key": "aa", "qty": "x"}]},
                    "not a session",
                ],
            }
        )
        self.assertEqual(state.settings.inventory_region, Rect(1, 2, 160, 280))
        self.assertEqual(state.icon_names, {"0f": "Bones"})
        self.assertEqual([s.id for s in state.sessions], ["good", "no-loot", "bad-entries"])
        good, no_loot, bad = state.sessions
        self.assertEqual(good.ended_at, 2.5)
        self.assertEqual(good.loot[0].qty, 4)
        self.assertEqual(no_loot.loot, [])
        self.assertEqual(bad.started_at, 0.0)
        self.assertEqual([(e.key, e.qty) for e in bad.loot], [("aa", 0)])

    def test_active_session_is_not_serialized(self) -> None:
        state = AppState()
        state.active_session = Session(id="live", label="now", started_at=1.0)
        state.sessions.append(
            Session(id="old", label="then", started_at=0.0, ended_at=5.0, loot=[LootEntry("k", "Bones", 3, "k")])
        )
        data = state.to_dict()
        self.assertEqual(set(data), {"settings", "iconNames", "sessions"})
        self.assertEqual([s["id"] for s in data["sessions"]], ["old"])


class StateStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "config" / "state.json"
        self.store = StateStore(self.path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_gives_defaults(self) -> None:
        self.assertEqual(self.store.load(), AppState())

    def test_corrupt_file_gives_defaults(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("src.storage.state_store", level="WARNING"):
            self.assertEqual(self.store.load(), AppState())

    def test_corrupt_file_survives_next_save(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("src.storage.state_store", level="WARNING"):
            state = self.store.load()
        self.store.save(state)
        kept = self.path.with_name(self.path.name + ".corrupt")
        self.assertEqual(kept.read_text(encoding="utf-8"), "{not json")

    def test_partial_file_keeps_good_fields(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text(
            json.dumps(
                {
                    "settings": {"invRegion": {"x": 0, "y": 0, "w": 40, "h": 70}, "display": None},
                    "iconNames": {"0f": "Bones"},
                    "sessions": [
                        {"id": "a", "label": "Run", "startedAt": 1.0, "endedAt": 2.0, "loot": []},
                        {"id": "b", "label": "Broken", "startedAt": 3.0, "endedAt": 4.0, "loot": None},
                    ],
                }
            ),
            encoding="utf-8",
        )
        state = self.store.load()
        self.assertEqual(state.settings.inventory_region, Rect(0, 0, 40, 70))
        self.assertEqual(state.icon_names, {"0f": "Bones"})
        self.assertEqual([s.id for s in state.sessions], ["a", "b"])

    def test_save_and_load(self) -> None:
        state = AppState()
        state.settings.inventory_region = Rect(10, 10, 160, 280)
        state.icon_names["0f0f0f0f0f0f0f0f"] = "Bones"
        state.sessions.append(
            Session(id="a", label="Run", started_at=1.0, ended_at=2.0, loot=[LootEntry("0f0f0f0f0f0f0f0f", "Bones", 4, "0f0f0f0f0f0f0f0f")])
        )
        state.active_session = Session(id="b", label="Live", started_at=3.0)
        self.store.save(state)

        loaded = self.store.load()
        self.assertEqual(loaded.settings.inventory_region, Rect(10, 10, 160, 280))
        self.assertEqual(loaded.icon_names, {"0f0f0f0f0f0f0f0f": "Bones"})
        self.assertEqual(len(loaded.sessions), 1)
        self.assertEqual(loaded.sessions[0].loot[0].qty, 4)
        self.assertIsNone(loaded.active_session)
        self.assertFalse(self.path.with_suffix(".json.tmp").exists())

    def test_written_schema(self) -> None:
        self.store.save(AppState())
        data = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(data["settings"]["invRegion"], None)
        self.assertEqual(data["settings"]["moneyRegion"], None)
        self.assertEqual(data["iconNames"], {})
        self.assertEqual(data["sessions"], [])


if __name__ == "__main__":
    unittest.main()
