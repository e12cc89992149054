import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pydantic import ValidationError

from tycoon import runner
from tycoon.game.errors import InvalidTargetError
from tycoon.game.repository import DataStore
from tycoon.game.services import GameService
from tycoon.models import GAME_VERSION


def _write_config(base: Path, payload: dict) -> None:
    (base / "config.json").write_text(json.dumps(payload), encoding="utf-8")


class ServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.base_path = Path(self.tmpdir.name).resolve()
        self.store = DataStore(self.base_path)
        self.service = GameService(self.store)

    def tearDown(self):
        self.tmpdir.cleanup()


class SaveRoundTripTests(ServiceTestCase):
    def test_saved_state_loads_identically(self):
        _write_config(self.base_path, {"game": {"seed": 3}})
        self.service.new_game("alpha")
        self.service.hire_editor("alpha")
        state, _ = self.service.advance("alpha", 30)
        self.service.save("alpha", state)

        reloaded = GameService(DataStore(self.base_path)).load("alpha")

        self.assertIsNotNone(reloaded)
        self.assertEqual(reloaded.model_dump(), state.model_dump())
        self.assertEqual(list(self.service.iter_slots()), ["alpha"])

    def test_export_payload_shape(self):
        state = self.service.new_game("alpha")
        payload = self.service.export_state(state)

        self.assertEqual(payload["version"], GAME_VERSION)
        self.assertIn("timestamp", payload)
        self.assertIn("pcs", payload["game_state"])
        self.assertEqual(payload["game_state"]["cash"], 1000)

    def test_older_version_is_migrated(self):
        payload = self.service.export_state(self.service.new_game("alpha"))
        payload["version"] = "1.0.0"

        state = self.service.import_state(payload)

        self.assertEqual(state.changelog[0].type, "migration")
        self.assertIn("1.0.0", state.changelog[0].message)

    def test_malformed_payload_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.import_state({"version": GAME_VERSION, "game_state": {"tick": "soon"}})

    def test_missing_slot_starts_new_game(self):
        self.assertIsNone(self.service.load("ghost"))
        state = self.service.state("ghost")

        self.assertEqual(state.tick, 0)
        self.assertTrue(self.store.save_path("ghost").exists())

    def test_close_persists_session(self):
        self.service.advance("beta", 3)
        self.service.close("beta")

        raw = self.store.read_json(self.store.save_path("beta"))
        self.assertEqual(raw["game_state"]["tick"], 3)


class ConfigTests(ServiceTestCase):
    def test_config_overrides_balance_and_autosave(self):
        _write_config(
            self.base_path,
            {"balance": {"starting_cash": 5000}, "game": {"autosave_interval": 5, "seed": 99}},
        )

        state = self.service.new_game("gamma")

        self.assertEqual(state.cash, 5000)
        self.assertEqual(self.service.autosave_interval, 5)

    def test_invalid_autosave_interval_falls_back(self):
        _write_config(self.base_path, {"game": {"autosave_interval": "often"}})
        self.assertEqual(self.service.autosave_interval, 24)

    def test_unreadable_config_is_ignored(self):
        (self.base_path / "config.json").write_text("{not json", encoding="utf-8")
        self.assertEqual(self.service.get_config(), {})

    def test_paths_override(self):
        _write_config(self.base_path, {"paths": {"data_dir": "store"}})
        self.service.get_config()

        self.assertEqual(self.store.saves_dir, self.base_path / "store" / "saves")
        self.service.new_game("delta")
        self.assertTrue((self.base_path / "store" / "saves" / "delta.json").exists())

    def test_slot_names_are_sanitised(self):
        self.assertEqual(self.store.save_path("../evil slot").name, ".._evil_slot.json")
        self.assertEqual(DataStore.slot_name("   "), "default")


class SimulationTests(ServiceTestCase):
    def test_autosave_every_interval(self):
        _write_config(self.base_path, {"game": {"autosave_interval": 5, "seed": 1}})

        state, _ = self.service.advance("eps", 12)

        self.assertEqual(state.tick, 12)
        self.assertEqual(state.last_autosave_tick, 10)
        raw = self.store.read_json(self.store.save_path("eps"))
        self.assertEqual(raw["game_state"]["tick"], 10)

    def test_same_seed_same_game(self):
        other_dir = tempfile.TemporaryDirectory()
        self.addCleanup(other_dir.cleanup)
        other_base = Path(other_dir.name)
        for base in (self.base_path, other_base):
            _write_config(base, {"game": {"seed": 99}})
        other = GameService(DataStore(other_base))

        first, _ = self.service.advance("zeta", 48)
        second, _ = other.advance("zeta", 48)

        self.assertEqual(first.model_dump(), second.model_dump())

    def test_failed_action_leaves_slot_untouched(self):
        before = self.service.state("eta").model_dump()

        with self.assertRaises(InvalidTargetError):
            self.service.buy_upgrade("eta", "warp-drive")

        self.assertEqual(self.service.state("eta").model_dump(), before)

    def test_export_defuses_virus(self):
        _write_config(self.base_path, {"balance": {"black_market": {"virus_risk": 1.0}}, "game": {"seed": 5}})
        self.service.new_game("theta")
        state = self.service.buy_cracked_plugins("theta")
        self.assertTrue(state.virus.armed)

        path = self.service.export_to_file("theta")

        self.assertTrue(path.exists())
        self.assertEqual(path.parent, self.store.exports_dir)
        self.assertFalse(self.service.state("theta").virus.armed)
        exported = self.store.read_json(path)
        self.assertTrue(exported["game_state"]["virus"]["exported"])

        imported = self.service.import_from_file("iota", path)
        self.assertEqual(imported.cash, 850)

    def test_health_check_reports_without_saving(self):
        self.service.new_game("kappa")
        report = self.service.run_health_check("kappa")

        self.assertGreater(report.leads_per_day, 0)
        self.assertIsNone(self.service.state("kappa").shadow_save)


class RunnerTests(ServiceTestCase):
    def test_main_advances_slot(self):
        with patch("tycoon.runner.get_service", return_value=self.service):
            with self.assertLogs("tycoon", level="INFO") as captured:
                runner.main(["--slot", "cli", "--hours", "3", "--new"])

        self.assertEqual(self.service.state("cli").tick, 3)
        self.assertTrue(any("Slot cli at day 1" in line for line in captured.output))

    def test_main_exits_on_corrupt_save(self):
        self.store.write_json(self.store.save_path("bad"), {"game_state": {"cash": "lots"}})

        with patch("tycoon.runner.get_service", return_value=self.service):
            with self.assertLogs("tycoon", level="ERROR"):
                with self.assertRaises(SystemExit):
                    runner.main(["--slot", "bad", "--hours", "1"])

    def test_main_exits_on_truncated_save(self):
        self.store.save_path("broken").write_text('{"version": "1.3.0", "game_st', encoding="utf-8")

        with patch("tycoon.runner.get_service", return_value=self.service):
            with self.assertLogs("tycoon", level="ERROR"):
                with self.assertRaises(SystemExit) as exited:
                    runner.main(["--slot", "broken", "--hours", "1"])

        self.assertEqual(exited.exception.code, 1)

    def test_main_exits_on_non_object_save(self):
        self.store.write_json(self.store.save_path("listed"), [1, 2, 3])

        with patch("tycoon.runner.get_service", return_value=self.service):
            with self.assertLogs("tycoon", level="ERROR"):
                with self.assertRaises(SystemExit) as exited:
                    runner.main(["--slot", "listed", "--hours", "1"])

        self.assertEqual(exited.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
