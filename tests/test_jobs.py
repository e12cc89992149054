import random
import unittest

from tycoon.game.catalog import job_type
from tycoon.game.jobs import (
    COMPLETE,
    FAIL,
    GRACE,
    REASON_GRACE_EXPIRED,
    REASON_MISSED,
    close_job,
    deliver,
    job_payout,
    link,
    progress_gain,
    record_delivery_stats,
    resolve_deadline,
    roll_job,
)
from tycoon.game.modifiers import ModifierBundle
from tycoon.models import (
    JOB_ACTIVE,
    JOB_AVAILABLE,
    JOB_FAILED,
    AchievementStats,
    Editor,
    GameState,
    Job,
    MarketCycle,
    Workstation,
)


def _job(**overrides) -> Job:
    values = {
        "id": "j1",
        "client": "Ava Singh Motors",
        "brand": "Audi RS6",
        "type": "Reel (30s)",
        "difficulty": 35,
        "hours_required": 10,
        "payout": 400,
        "deadline": 20,
        "status": JOB_ACTIVE,
    }
    values.update(overrides)
    return Job(**values)


class SpawnTests(unittest.TestCase):
    def test_new_studio_only_gets_entry_tier_jobs(self):
        rng = random.Random(11)
        for _ in range(50):
            job = roll_job(rng, 12, 0, MarketCycle(), "j1")
            self.assertEqual(job.type, "Reel (30s)")
            self.assertEqual(job.status, JOB_AVAILABLE)
            self.assertTrue(25 <= job.difficulty <= 50)
            self.assertTrue(6 <= job.hours_required <= 12)
            self.assertGreater(job.deadline, 12)
            self.assertEqual(job.created_tick, 12)

    def test_reputation_unlocks_higher_tiers(self):
        rng = random.Random(12)
        seen = {roll_job(rng, 0, 120, MarketCycle()).type for _ in range(200)}
        self.assertIn("Cinematic (2m)", seen)
        self.assertIn("Reel (30s)", seen)

    def test_payout_multipliers(self):
        reel = job_type("Reel (30s)")
        montage = job_type("Montage (60s)")

        self.assertEqual(job_payout(reel, 400, MarketCycle()), 400)
        self.assertEqual(job_payout(reel, 400, MarketCycle(boosted_type="Reel (30s)")), 600)
        self.assertEqual(job_payout(montage, 1000, MarketCycle()), 1200)
        self.assertEqual(job_payout(montage, 1000, MarketCycle(nerfed_type="Montage (60s)")), 840)


class ProgressTests(unittest.TestCase):
    def setUp(self):
        self.editor = Editor(id="e1", name="a", speed=1.0)
        self.pc = Workstation(id="pc1", name="PC-01", power=55)

    def test_base_progress(self):
        gain = progress_gain(self.editor, self.pc, 0, ModifierBundle(), 1.0)
        self.assertAlmostEqual(gain, 1.05)

    def test_onboarding_and_research(self):
        onboarding = Editor(id="e2", name="b", onboarding_complete=5)
        gain = progress_gain(onboarding, self.pc, 0, ModifierBundle(progress_boost=0.1), 1.0)
        self.assertAlmostEqual(gain, 1.05 * 0.3 * 1.1)

    def test_crash_can_zero_progress(self):
        self.assertEqual(progress_gain(self.editor, self.pc, 0, ModifierBundle(), 1.0, crash_penalty=2), 0.0)

    def test_progress_per_tick_is_capped(self):
        fast = Editor(id="e3", name="c", speed=6.0)
        gain = progress_gain(fast, self.pc, 0, ModifierBundle(), 0.5)
        self.assertAlmostEqual(gain, 2.0)


class DeadlineTests(unittest.TestCase):
    def test_completion_wins_over_deadline(self):
        self.assertEqual(resolve_deadline(_job(deadline=5), 10.0, 9, False), (COMPLETE, None))

    def test_near_complete_job_enters_grace(self):
        self.assertEqual(resolve_deadline(_job(), 9.6, 20, False), (GRACE, None))

    def test_grace_window_holds_then_expires(self):
        self.assertEqual(resolve_deadline(_job(), 9.6, 25, True), (None, None))
        self.assertEqual(resolve_deadline(_job(), 9.6, 26, True), (FAIL, REASON_GRACE_EXPIRED))

    def test_missed_deadline(self):
        self.assertEqual(resolve_deadline(_job(), 5.0, 20, False), (FAIL, REASON_MISSED))
        self.assertEqual(resolve_deadline(_job(), 5.0, 19, False), (None, None))

    def test_unaccepted_lead_expires(self):
        lead = _job(status=JOB_AVAILABLE)
        self.assertEqual(resolve_deadline(lead, 0.0, 20, False), (FAIL, REASON_MISSED))

    def test_closed_jobs_are_ignored(self):
        self.assertEqual(resolve_deadline(_job(status=JOB_FAILED), 0.0, 99, False), (None, None))


class DeliveryTests(unittest.TestCase):
    def setUp(self):
        self.editor = Editor(id="e1", name="a", skill=60)
        self.pc = Workstation(id="pc1", name="PC-01", power=55)

    def test_passing_delivery_pays_in_full(self):
        result = deliver(_job(difficulty=20), self.editor, self.pc, False, ModifierBundle(), random.Random(1))

        self.assertTrue(result.passed)
        self.assertEqual(result.pay, 400)
        self.assertEqual(result.reputation_delta, 3)
        self.assertTrue(48 <= result.quality <= 73)

    def test_below_par_delivery_pays_half(self):
        weak = Editor(id="e2", name="b", skill=20)
        result = deliver(_job(difficulty=95), weak, self.pc, False, ModifierBundle(), random.Random(2))

        self.assertFalse(result.passed)
        self.assertEqual(result.pay, 200)
        self.assertEqual(result.reputation_delta, -4)

    def test_fail_penalty_reduction_softens_reputation_loss(self):
        weak = Editor(id="e2", name="b", skill=20)
        mods = ModifierBundle(fail_penalty_reduction=0.5)
        result = deliver(_job(difficulty=95), weak, self.pc, False, mods, random.Random(2))
        self.assertEqual(result.reputation_delta, -2)

    def test_grace_delivery_costs_payout_and_reputation(self):
        mods = ModifierBundle(payout_boost=0.1, reputation_boost=0.5)
        result = deliver(_job(difficulty=20), self.editor, self.pc, True, mods, random.Random(3))

        self.assertEqual(result.pay, 352)
        self.assertEqual(result.reputation_delta, -2)
        self.assertTrue(result.used_grace)

    def test_black_market_skill_counts_toward_quality(self):
        plain = deliver(_job(), self.editor, self.pc, False, ModifierBundle(), random.Random(9))
        boosted = deliver(_job(), self.editor, self.pc, False, ModifierBundle(), random.Random(9), black_market_skill=15)
        self.assertEqual(boosted.quality - plain.quality, 9)

    def test_delivery_stats(self):
        stats = AchievementStats()
        result = deliver(_job(difficulty=20), self.editor, self.pc, False, ModifierBundle(), random.Random(1))

        record_delivery_stats(stats, result, 30)
        record_delivery_stats(stats, result, 5)

        self.assertEqual(stats.flawless_deliveries, 2)
        self.assertEqual(stats.overnight_jobs, 1)
        self.assertEqual(stats.speed_demon_jobs, 1)


class BackReferenceTests(unittest.TestCase):
    def test_link_and_close_keep_references_in_sync(self):
        job = _job()
        editor = Editor(id="e1", name="a")
        state = GameState(editors=[editor], jobs=[job], grace_jobs={"j1"})
        pc = state.workstations[0]

        link(job, editor, pc)
        self.assertEqual((job.assigned_editor_id, job.assigned_pc_id), ("e1", "pc1"))
        self.assertEqual((editor.assigned_job_id, pc.assigned_job_id), ("j1", "j1"))

        close_job(state, job, JOB_FAILED, REASON_MISSED)
        self.assertIsNone(job.assigned_editor_id)
        self.assertIsNone(editor.assigned_job_id)
        self.assertIsNone(pc.assigned_job_id)
        self.assertEqual(job.fail_reason, REASON_MISSED)
        self.assertNotIn("j1", state.grace_jobs)


if __name__ == "__main__":
    unittest.main()
