"""Exponential cost scaling and diminishing-returns gains."""

from __future__ import annotations

import random

from ..models import GameState
from .balance import DEFAULT_BALANCE, BalanceProfile, CostCurve, GainCurve
from .utils import clamp, round_half_up


def scaled_cost(base_cost: float, scaling_factor: float, count: int) -> int:
    return round_half_up(base_cost * scaling_factor ** max(0, int(count)))


def curve_cost(curve: CostCurve, count: int) -> int:
    return scaled_cost(curve.base_cost, curve.scaling_factor, count)


def diminishing_gain(
    base: float,
    diminishing_factor: float,
    variance: float,
    count: int,
    rng: random.Random,
) -> int:
    """``round(base * factor**count + uniform(-variance, variance))``."""

    expected = base * diminishing_factor ** max(0, int(count))
    return round_half_up(expected + rng.uniform(-variance, variance))


def curve_gain(curve: GainCurve, count: int, rng: random.Random) -> int:
    return diminishing_gain(curve.base, curve.diminishing_factor, curve.variance, count, rng)


def apply_gain(current: int, gain: int, efficiency: float, bounds: tuple[int, int]) -> int:
    """Scale a rolled gain by a prestige efficiency bonus and clamp the result."""

    scaled = round_half_up(gain * (1 + efficiency))
    low, high = bounds
    return int(clamp(current + scaled, low, high))


# ----------------------------------------------------------------------
# Price list
# ----------------------------------------------------------------------

def hire_cost(state: GameState, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    return curve_cost(balance.costs.hire_editor, len(state.editors))


def pc_cost(state: GameState, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    return curve_cost(balance.costs.buy_pc, len(state.workstations))


def training_cost(state: GameState, editor_id: str, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    return curve_cost(balance.costs.train_editor, state.training_counts.get(editor_id, 0))


def pc_upgrade_cost(state: GameState, pc_id: str, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    return curve_cost(balance.costs.upgrade_pc, state.upgrade_counts.get(pc_id, 0))


def research_cost(level: int, balance: BalanceProfile = DEFAULT_BALANCE) -> int | None:
    """Price of the next research level, ``None`` once the level is maxed."""

    research = balance.research
    if level >= research.max_level:
        return None
    return scaled_cost(research.base_cost, research.cost_multiplier, level)


def manager_cost(managers: int, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    team = balance.team
    return team.manager_base_cost + max(0, managers) * team.manager_cost_step


def marketing_uses_today(state: GameState) -> int:
    usage = state.marketing_usage
    if state.day_index > usage.last_use_day:
        return 0
    return usage.uses_today


def marketing_cost(state: GameState, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    marketing = balance.marketing
    return scaled_cost(marketing.base_cost, marketing.cost_multiplier, marketing_uses_today(state))


__all__ = [
    "apply_gain",
    "curve_cost",
    "curve_gain",
    "diminishing_gain",
    "hire_cost",
    "manager_cost",
    "marketing_cost",
    "marketing_uses_today",
    "pc_cost",
    "pc_upgrade_cost",
    "research_cost",
    "scaled_cost",
    "training_cost",
]
