"""Translate owned upgrades, research levels and prestige into bonuses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from ..models import GameState
from .balance import DEFAULT_BALANCE, BalanceProfile
from .catalog import PRESTIGE_PERKS, RESEARCH, UPGRADES
from .utils import clamp


@dataclass(frozen=True)
class ModifierBundle:
    """Resolved bonuses; every field is additive unless noted."""

    speed_bonus: float = 0.0
    spawn_bonus: float = 0.0
    lead_cap_bonus: int = 0
    # research
    progress_boost: float = 0.0
    payout_boost: float = 0.0
    fail_penalty_reduction: float = 0.0
    research_energy_efficiency: float = 0.0
    reputation_boost: float = 0.0
    # prestige
    prestige_spawn_bonus: float = 0.0
    salary_reduction: float = 0.0
    training_efficiency: float = 0.0
    pc_efficiency: float = 0.0
    prestige_energy_efficiency: float = 0.0

    def spawn_rate(self, balance: BalanceProfile = DEFAULT_BALANCE) -> float:
        jobs = balance.jobs
        rate = jobs.base_spawn_rate + self.spawn_bonus + self.prestige_spawn_bonus
        return clamp(rate, 0.0, jobs.max_spawn_rate)

    def lead_cap(self, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
        return balance.jobs.base_lead_cap + self.lead_cap_bonus

    def energy_drain_factor(self) -> float:
        return (1 - self.research_energy_efficiency) * (1 - self.prestige_energy_efficiency)


_RESEARCH_FIELDS = {
    "progress": "progress_boost",
    "payout": "payout_boost",
    "fail_penalty": "fail_penalty_reduction",
    "energy_drain": "research_energy_efficiency",
    "reputation": "reputation_boost",
}

_PRESTIGE_FIELDS = {
    "spawn_rate": "prestige_spawn_bonus",
    "salary_reduction": "salary_reduction",
    "training_efficiency": "training_efficiency",
    "pc_efficiency": "pc_efficiency",
    "energy_efficiency": "prestige_energy_efficiency",
}


def resolve_modifiers(
    owned_upgrades: Iterable[str],
    research_levels: Mapping[str, int],
    prestige_points: int,
) -> ModifierBundle:
    owned = set(owned_upgrades or ())
    values: dict[str, float] = {
        "speed_bonus": 0.0,
        "spawn_bonus": 0.0,
        "lead_cap_bonus": 0,
    }
    for item in UPGRADES:
        if item.id not in owned:
            continue
        values["speed_bonus"] += item.speed_bonus
        values["spawn_bonus"] += item.spawn_bonus
        values["lead_cap_bonus"] += item.lead_cap_bonus

    levels = research_levels or {}
    for perk in RESEARCH:
        target = _RESEARCH_FIELDS[perk.effect]
        values[target] = values.get(target, 0.0) + max(0, int(levels.get(perk.id, 0))) * perk.value

    points = max(0, int(prestige_points or 0))
    for perk in PRESTIGE_PERKS:
        target = _PRESTIGE_FIELDS[perk.effect]
        values[target] = values.get(target, 0.0) + points * perk.value

    values["lead_cap_bonus"] = int(values["lead_cap_bonus"])
    return ModifierBundle(**values)


def modifiers_for(state: GameState) -> ModifierBundle:
    return resolve_modifiers(state.owned_upgrades, state.research_levels, state.prestige_points)


def team_efficiency(editor_count: int, managers: int, balance: BalanceProfile = DEFAULT_BALANCE) -> float:
    team = balance.team
    efficiency = 1.0
    if editor_count > team.decay_start:
        excess = editor_count - team.decay_start
        efficiency = max(team.efficiency_min, 1.0 - excess * team.decay_rate)
    efficiency += max(0, managers) * team.manager_efficiency_bonus
    return min(1.0, efficiency)


def black_market_boosts(state: GameState, tick: int | None = None) -> tuple[int, float]:
    """Return ``(skill_boost, speed_boost)`` of the cracked plugins, if running."""

    at = state.tick if tick is None else tick
    effects = state.black_market
    if not effects.is_active(at):
        return 0, 0.0
    return effects.skill_boost, effects.speed_boost


def manager_slots(editor_count: int, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    team = balance.team
    unlocked = sum(1 for threshold in team.manager_unlock_thresholds if editor_count >= threshold)
    return min(team.max_managers, unlocked)


__all__ = [
    "ModifierBundle",
    "black_market_boosts",
    "manager_slots",
    "modifiers_for",
    "resolve_modifiers",
    "team_efficiency",
]
