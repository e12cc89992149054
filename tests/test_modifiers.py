import unittest

from tycoon.game.modifiers import (
    ModifierBundle,
    black_market_boosts,
    manager_slots,
    resolve_modifiers,
    team_efficiency,
)
from tycoon.models import BlackMarketEffects, GameState


class ResolveModifiersTests(unittest.TestCase):
    def test_empty_sources_give_neutral_bundle(self):
        self.assertEqual(resolve_modifiers(set(), {}, 0), ModifierBundle())

    def test_upgrades_research_and_prestige_stack_linearly(self):
        mods = resolve_modifiers({"flowkit", "agency", "bogus"}, {"progress_boost": 2, "payout_boost": 1}, 3)

        self.assertAlmostEqual(mods.speed_bonus, 0.10)
        self.assertAlmostEqual(mods.spawn_bonus, 0.05)
        self.assertEqual(mods.lead_cap_bonus, 2)
        self.assertAlmostEqual(mods.progress_boost, 0.10)
        self.assertAlmostEqual(mods.payout_boost, 0.03)
        self.assertAlmostEqual(mods.prestige_spawn_bonus, 0.06)
        self.assertAlmostEqual(mods.salary_reduction, 0.09)
        self.assertAlmostEqual(mods.pc_efficiency, 0.12)

    def test_spawn_rate_and_lead_cap(self):
        self.assertAlmostEqual(ModifierBundle().spawn_rate(), 0.22)
        self.assertEqual(ModifierBundle().lead_cap(), 6)
        self.assertEqual(ModifierBundle(prestige_spawn_bonus=5.0).spawn_rate(), 0.95)
        self.assertEqual(ModifierBundle(lead_cap_bonus=2).lead_cap(), 8)

    def test_energy_drain_factor_combines_sources(self):
        mods = ModifierBundle(research_energy_efficiency=0.5, prestige_energy_efficiency=0.5)
        self.assertAlmostEqual(mods.energy_drain_factor(), 0.25)


class TeamTests(unittest.TestCase):
    def test_team_efficiency_decays_past_ten_editors(self):
        self.assertEqual(team_efficiency(10, 0), 1.0)
        self.assertAlmostEqual(team_efficiency(12, 0), 0.9)
        self.assertAlmostEqual(team_efficiency(40, 0), 0.35)

    def test_managers_restore_efficiency_up_to_one(self):
        self.assertAlmostEqual(team_efficiency(16, 1), 0.85)
        self.assertEqual(team_efficiency(12, 1), 1.0)

    def test_manager_slots(self):
        self.assertEqual(manager_slots(9), 0)
        self.assertEqual(manager_slots(10), 1)
        self.assertEqual(manager_slots(30), 2)
        self.assertEqual(manager_slots(80), 3)


class BlackMarketBoostTests(unittest.TestCase):
    def test_boosts_only_while_active(self):
        effects = BlackMarketEffects(active=True, expires_at=30, skill_boost=15, speed_boost=0.3)
        state = GameState(tick=10, black_market=effects)

        self.assertEqual(black_market_boosts(state), (15, 0.3))
        self.assertEqual(black_market_boosts(state, tick=30), (0, 0.0))
        self.assertEqual(black_market_boosts(GameState()), (0, 0.0))


if __name__ == "__main__":
    unittest.main()
