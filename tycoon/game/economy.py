"""Daily billing, market cycles, meme events, marketing and the black market."""

from __future__ import annotations

import math
import random
from typing import Iterable, List, Optional, Tuple

from ..models import TICKS_PER_DAY, Editor, GameState, MarketCycle, MemeEventState
from .balance import DEFAULT_BALANCE, BalanceProfile
from .catalog import ACHIEVEMENTS, JOB_TYPES, MEME_EVENTS, MemeEvent
from .modifiers import ModifierBundle
from .utils import pick, round_half_up


# ----------------------------------------------------------------------
# Daily billing
# ----------------------------------------------------------------------

def daily_salaries(
    editors: Iterable[Editor],
    managers: int,
    mods: ModifierBundle,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> int:
    reduction = 1 - mods.salary_reduction
    salaries = round_half_up(sum(editor.salary * reduction for editor in editors))
    return salaries + max(0, managers) * balance.team.manager_salary


def daily_overhead(editor_count: int, pc_count: int, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    overhead = balance.overhead
    total = (
        editor_count * overhead.license_per_editor
        + pc_count * overhead.license_per_pc
        + overhead.facility_base
        + math.log(editor_count + pc_count + 1) * overhead.facility_log_factor
    )
    return round_half_up(total)


def daily_burn(state: GameState, mods: ModifierBundle, balance: BalanceProfile = DEFAULT_BALANCE) -> Tuple[int, int]:
    """Return ``(salaries, overhead)`` billed at the end of every in-game day."""

    salaries = daily_salaries(state.editors, state.managers, mods, balance)
    overhead = daily_overhead(len(state.editors), len(state.workstations), balance)
    return salaries, overhead


def is_day_boundary(tick: int) -> bool:
    return tick > 0 and tick % TICKS_PER_DAY == 0


# ----------------------------------------------------------------------
# Market cycle
# ----------------------------------------------------------------------

def rotate_market(
    cycle: MarketCycle,
    day: int,
    rng: random.Random,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> Optional[MarketCycle]:
    """Return the next cycle if the current one has run its course."""

    if day - cycle.cycle_start_day < balance.market_cycle.cycle_length_days:
        return None
    names = [job.name for job in JOB_TYPES]
    boosted = pick(rng, names)
    nerfed = pick(rng, [name for name in names if name != boosted])
    return MarketCycle(
        boosted_type=boosted,
        nerfed_type=nerfed,
        cycle_start_day=day,
        current_cycle=cycle.current_cycle + 1,
    )


# ----------------------------------------------------------------------
# Meme events
# ----------------------------------------------------------------------

def roll_meme_event(
    meme_state: MemeEventState,
    day_index: int,
    rng: random.Random,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> Tuple[MemeEventState, Optional[MemeEvent]]:
    """Roll for a random studio mishap; the first tick of a new day only resets the counter."""

    if day_index > meme_state.last_event_day:
        return meme_state.model_copy(update={"last_event_day": day_index, "events_today": 0}), None
    memes = balance.memes
    if meme_state.events_today >= memes.max_per_day:
        return meme_state, None
    if rng.random() >= memes.chance_per_hour:
        return meme_state, None
    event = pick(rng, MEME_EVENTS)
    updated = meme_state.model_copy(
        update={"events_today": meme_state.events_today + 1, "last_event_id": event.id}
    )
    return updated, event


# ----------------------------------------------------------------------
# Marketing and black market
# ----------------------------------------------------------------------

def marketing_lead_count(rng: random.Random, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    marketing = balance.marketing
    low, high = marketing.lead_count
    return high if rng.random() < marketing.bonus_lead_chance else low


def roll_virus(rng: random.Random, balance: BalanceProfile = DEFAULT_BALANCE) -> bool:
    return rng.random() < balance.black_market.virus_risk


# ----------------------------------------------------------------------
# Achievements
# ----------------------------------------------------------------------

def achievement_progress(state: GameState) -> dict[str, int]:
    stats = state.achievement_stats
    return {
        "flawless_deliveries": stats.flawless_deliveries,
        "large_team": len(state.editors) + state.managers,
        "overnight_jobs": stats.overnight_jobs,
        "high_reputation": state.reputation,
        "rich_studio": state.cash,
        "speed_demon": stats.speed_demon_jobs,
        "quality_master": stats.quality_master_jobs,
        "workaholic": stats.max_work_hours,
        "market_cycler": stats.market_cycles,
        "research_master": stats.max_research_categories,
    }


def newly_unlocked(state: GameState) -> List[str]:
    progress = achievement_progress(state)
    return [
        key
        for key, achievement in ACHIEVEMENTS.items()
        if key not in state.achievements and progress.get(key, 0) >= achievement.requirement
    ]


__all__ = [
    "achievement_progress",
    "daily_burn",
    "daily_overhead",
    "daily_salaries",
    "is_day_boundary",
    "marketing_lead_count",
    "newly_unlocked",
    "roll_meme_event",
    "roll_virus",
    "rotate_market",
]
