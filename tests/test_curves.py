import random
import unittest

from tycoon.game.curves import (
    apply_gain,
    diminishing_gain,
    hire_cost,
    manager_cost,
    marketing_cost,
    research_cost,
    scaled_cost,
    training_cost,
)
from tycoon.models import Editor, GameState, MarketingUsage


class CostCurveTests(unittest.TestCase):
    def test_scaled_cost_rounds_half_up(self):
        self.assertEqual(scaled_cost(650, 1.15, 0), 650)
        self.assertEqual(scaled_cost(650, 1.15, 2), 860)
        self.assertEqual(scaled_cost(900, 1.12, 1), 1008)

    def test_hire_cost_follows_team_size(self):
        state = GameState(editors=[Editor(id="e1", name="a"), Editor(id="e2", name="b")])
        self.assertEqual(hire_cost(state), 860)

    def test_training_cost_is_per_editor(self):
        state = GameState(training_counts={"e2": 1})

        self.assertEqual(training_cost(state, "e2"), 238)
        self.assertEqual(training_cost(state, "e3"), 220)

    def test_research_cost_stops_at_max_level(self):
        self.assertEqual(research_cost(0), 500)
        self.assertEqual(research_cost(1), 750)
        self.assertIsNone(research_cost(10))

    def test_manager_cost(self):
        self.assertEqual(manager_cost(0), 2000)
        self.assertEqual(manager_cost(2), 3000)

    def test_marketing_cost_resets_each_day(self):
        usage = MarketingUsage(last_use_day=0, uses_today=2)

        self.assertEqual(marketing_cost(GameState(tick=5, marketing_usage=usage)), 405)
        self.assertEqual(marketing_cost(GameState(tick=30, marketing_usage=usage)), 180)


class GainCurveTests(unittest.TestCase):
    def test_gain_without_variance_is_exact(self):
        rng = random.Random(1)

        self.assertEqual(diminishing_gain(4.5, 0.95, 0, 0, rng), 5)
        self.assertEqual(diminishing_gain(9, 0.92, 0, 2, rng), 8)

    def test_gain_diminishes_with_count(self):
        first = diminishing_gain(9, 0.92, 0, 0, random.Random(2))
        later = diminishing_gain(9, 0.92, 0, 20, random.Random(2))
        self.assertLess(later, first)

    def test_gain_stays_within_variance(self):
        rng = random.Random(3)
        for _ in range(200):
            gain = diminishing_gain(4.5, 0.95, 1.5, 0, rng)
            self.assertGreaterEqual(gain, 3)
            self.assertLessEqual(gain, 6)

    def test_apply_gain_scales_and_clamps(self):
        self.assertEqual(apply_gain(60, 5, 0.05, (20, 99)), 65)
        self.assertEqual(apply_gain(98, 5, 0.0, (20, 99)), 99)
        self.assertEqual(apply_gain(71, -4, 0.0, (70, 99)), 70)


if __name__ == "__main__":
    unittest.main()
