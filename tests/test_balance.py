import unittest

from tycoon.game.balance import DEFAULT_BALANCE, BalanceProfile, CostCurve, load_balance_profile


class BalanceProfileTests(unittest.TestCase):
    def test_defaults(self):
        profile = BalanceProfile()

        self.assertEqual(profile.starting_cash, 1000)
        self.assertEqual(profile.costs.hire_editor, CostCurve(650, 1.15))
        self.assertEqual(profile.team.manager_unlock_thresholds, (10, 25, 50))
        self.assertEqual(profile.jobs.offer_cooldown, (2, 6))
        self.assertEqual(profile, DEFAULT_BALANCE)

    def test_missing_mapping_returns_defaults(self):
        self.assertEqual(load_balance_profile(None), BalanceProfile())
        self.assertEqual(load_balance_profile("nonsense"), BalanceProfile())

    def test_nested_overrides_are_coerced(self):
        profile = load_balance_profile(
            {
                "starting_cash": "2500",
                "costs": {"hire_editor": {"base_cost": "700"}},
                "jobs": {"offer_cooldown": [3, 4], "base_spawn_rate": 0.5},
                "unknown_section": {"ignored": True},
            }
        )

        self.assertEqual(profile.starting_cash, 2500)
        self.assertEqual(profile.costs.hire_editor.base_cost, 700)
        self.assertEqual(profile.costs.hire_editor.scaling_factor, 1.15)
        self.assertEqual(profile.jobs.offer_cooldown, (3, 4))
        self.assertEqual(profile.jobs.base_spawn_rate, 0.5)

    def test_invalid_values_fall_back_to_template(self):
        profile = load_balance_profile(
            {
                "starting_cash": "lots",
                "jobs": {"offer_cooldown": [1, 2, 3]},
                "memes": {"chance_per_hour": None},
            }
        )

        self.assertEqual(profile.starting_cash, 1000)
        self.assertEqual(profile.jobs.offer_cooldown, (2, 6))
        self.assertEqual(profile.memes.chance_per_hour, 0.0075)


if __name__ == "__main__":
    unittest.main()
