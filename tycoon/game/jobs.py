"""Job lifecycle: spawning, progress, deadline resolution and delivery."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from ..models import (
    JOB_ACTIVE,
    JOB_AVAILABLE,
    JOB_DONE,
    JOB_FAILED,
    AchievementStats,
    Editor,
    GameState,
    Job,
    MarketCycle,
    Workstation,
)
from .balance import DEFAULT_BALANCE, BalanceProfile
from .catalog import BRANDS, CLIENT_BUSINESS, CLIENT_FIRST, CLIENT_LAST, JobType, available_job_types, tier_for
from .modifiers import ModifierBundle
from .utils import clamp, pick, roll_int, round_half_up

COMPLETE = "complete"
GRACE = "grace"
FAIL = "fail"

REASON_MISSED = "Missed deadline"
REASON_GRACE_EXPIRED = "Grace window expired"


# ----------------------------------------------------------------------
# Spawning
# ----------------------------------------------------------------------

def market_multiplier(cycle: MarketCycle, type_name: str, balance: BalanceProfile = DEFAULT_BALANCE) -> float:
    if cycle.boosted_type == type_name:
        return balance.market_cycle.boost_multiplier
    if cycle.nerfed_type == type_name:
        return balance.market_cycle.nerf_multiplier
    return 1.0


def job_payout(
    job_type: JobType,
    base_payout: int,
    cycle: MarketCycle,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> int:
    payout = base_payout * tier_for(job_type.tier).multiplier
    payout *= market_multiplier(cycle, job_type.name, balance)
    return round_half_up(payout)


def client_name(rng: random.Random) -> str:
    return f"{pick(rng, CLIENT_FIRST)} {pick(rng, CLIENT_LAST)} {pick(rng, CLIENT_BUSINESS)}"


def roll_job(
    rng: random.Random,
    tick: int,
    reputation: int,
    cycle: MarketCycle,
    job_id: str = "",
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> Optional[Job]:
    """Create a new lead. Returns ``None`` when no job type is unlocked."""

    types = available_job_types(reputation)
    if not types:
        return None
    jobs = balance.jobs

    kind = pick(rng, types)
    difficulty = int(clamp(kind.difficulty + roll_int(rng, *jobs.difficulty_roll), *jobs.difficulty_range))
    low, high = jobs.hours_factor
    hours = int(clamp(round_half_up(kind.base_hours * rng.uniform(low, high)), *jobs.hours_range))
    base_payout = round_half_up(
        (kind.base_pay + roll_int(rng, *jobs.pay_roll))
        * (jobs.pay_difficulty_base + difficulty / jobs.pay_difficulty_divisor)
    )
    low, high = jobs.deadline_factor
    deadline = tick + round_half_up(hours * rng.uniform(low, high))

    return Job(
        id=job_id,
        client=client_name(rng),
        brand=pick(rng, BRANDS),
        type=kind.name,
        difficulty=difficulty,
        hours_required=hours,
        payout=job_payout(kind, base_payout, cycle, balance),
        deadline=deadline,
        created_tick=tick,
    )


def next_offer_cooldown(current: int, spawned: bool, rng: random.Random, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    if spawned:
        return roll_int(rng, *balance.jobs.offer_cooldown)
    return max(0, current - 1)


# ----------------------------------------------------------------------
# Progress
# ----------------------------------------------------------------------

def speed_multiplier(editor: Editor, pc: Workstation, mods: ModifierBundle, black_market_speed: float = 0.0) -> float:
    return 1 + (editor.speed - 1) + (pc.power - 50) / 100 + mods.speed_bonus + black_market_speed


def progress_gain(
    editor: Editor,
    pc: Workstation,
    tick: int,
    mods: ModifierBundle,
    efficiency: float,
    black_market_speed: float = 0.0,
    crash_penalty: int = 0,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> float:
    """Progress earned this tick by one editor on one workstation."""

    base = clamp(
        speed_multiplier(editor, pc, mods, black_market_speed) - crash_penalty,
        0.0,
        balance.jobs.max_progress_per_tick,
    )
    onboarding = balance.staff.onboarding_multiplier if editor.is_onboarding(tick) else 1.0
    return base * efficiency * onboarding * (1 + mods.progress_boost)


def staffed_resources(state: GameState, job: Job) -> Tuple[Optional[Editor], Optional[Workstation]]:
    return state.get_editor(job.assigned_editor_id), state.get_pc(job.assigned_pc_id)


def can_progress(job: Job, editor: Optional[Editor], pc: Optional[Workstation]) -> bool:
    return job.status == JOB_ACTIVE and editor is not None and pc is not None and not editor.resting


# ----------------------------------------------------------------------
# Deadlines
# ----------------------------------------------------------------------

def resolve_deadline(
    job: Job,
    progress: float,
    tick: int,
    in_grace: bool,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> Tuple[Optional[str], Optional[str]]:
    """Decide what happens to an open job this tick.

    Returns ``(outcome, reason)``; outcome is ``COMPLETE``, ``GRACE``, ``FAIL`` or
    ``None`` when the job keeps going.
    """

    if not job.is_open:
        return None, None
    if job.status == JOB_ACTIVE and progress >= job.hours_required:
        return COMPLETE, None
    if tick < job.deadline:
        return None, None

    grace = balance.grace
    ratio = progress / job.hours_required if job.hours_required > 0 else 1.0
    if not in_grace and ratio >= grace.threshold:
        return GRACE, None
    if in_grace:
        if tick >= job.deadline + grace.extra_hours:
            return FAIL, REASON_GRACE_EXPIRED
        return None, None
    return FAIL, REASON_MISSED


# ----------------------------------------------------------------------
# Delivery
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class DeliveryResult:
    quality: int
    passed: bool
    pay: int
    reputation_delta: int
    used_grace: bool


def deliver(
    job: Job,
    editor: Optional[Editor],
    pc: Optional[Workstation],
    used_grace: bool,
    mods: ModifierBundle,
    rng: random.Random,
    black_market_skill: int = 0,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> DeliveryResult:
    jobs = balance.jobs
    skill = (editor.skill if editor is not None else jobs.fallback_skill) + black_market_skill
    power = pc.power if pc is not None else jobs.fallback_power
    quality = round_half_up(
        skill * jobs.quality_skill_weight
        + power * jobs.quality_power_weight
        + roll_int(rng, *jobs.quality_roll)
    )
    passed = quality >= job.difficulty
    pay = job.payout if passed else round_half_up(job.payout * jobs.partial_pay_ratio)

    if used_grace:
        pay = round_half_up(pay * balance.grace.payout_multiplier * (1 + mods.payout_boost))
        delta = -balance.grace.reputation_loss
    else:
        pay = round_half_up(pay * (1 + mods.payout_boost))
        if passed:
            change = jobs.pass_reputation
        else:
            change = round_half_up(jobs.below_par_reputation * (1 - mods.fail_penalty_reduction))
        delta = round_half_up(change * (1 + mods.reputation_boost))

    return DeliveryResult(quality=quality, passed=passed, pay=pay, reputation_delta=delta, used_grace=used_grace)


def record_delivery_stats(stats: AchievementStats, result: DeliveryResult, duration: int) -> None:
    if result.passed:
        stats.flawless_deliveries += 1
    if duration > 24:
        stats.overnight_jobs += 1
    if duration < 8:
        stats.speed_demon_jobs += 1
    if result.quality > 90:
        stats.quality_master_jobs += 1


def job_duration(job: Job, tick: int) -> int:
    start = job.accepted_tick if job.accepted_tick is not None else job.created_tick
    return tick - start


# ----------------------------------------------------------------------
# Back-references (only ever called on a private copy)
# ----------------------------------------------------------------------

def link(job: Job, editor: Editor, pc: Workstation) -> None:
    job.assigned_editor_id = editor.id
    job.assigned_pc_id = pc.id
    editor.assigned_job_id = job.id
    pc.assigned_job_id = job.id


def release(state: GameState, job: Job) -> None:
    for editor in state.editors:
        if editor.assigned_job_id == job.id:
            editor.assigned_job_id = None
    for pc in state.workstations:
        if pc.assigned_job_id == job.id:
            pc.assigned_job_id = None
    job.assigned_editor_id = None
    job.assigned_pc_id = None


def close_job(state: GameState, job: Job, status: str, reason: Optional[str] = None) -> None:
    release(state, job)
    job.status = status
    job.fail_reason = reason if status == JOB_FAILED else None
    state.grace_jobs.discard(job.id)


def is_assignable(job: Optional[Job]) -> bool:
    return (
        job is not None
        and job.status == JOB_ACTIVE
        and job.assigned_editor_id is None
        and job.assigned_pc_id is None
    )


__all__ = [
    "COMPLETE",
    "FAIL",
    "GRACE",
    "JOB_AVAILABLE",
    "JOB_DONE",
    "REASON_GRACE_EXPIRED",
    "REASON_MISSED",
    "DeliveryResult",
    "can_progress",
    "client_name",
    "close_job",
    "deliver",
    "is_assignable",
    "job_duration",
    "job_payout",
    "link",
    "market_multiplier",
    "next_offer_cooldown",
    "progress_gain",
    "record_delivery_stats",
    "release",
    "resolve_deadline",
    "roll_job",
    "speed_multiplier",
    "staffed_resources",
]
