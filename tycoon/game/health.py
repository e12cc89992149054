"""Forward simulation that checks a save for numeric corruption.

The check never touches the live state. It works on a deep copy, runs a
simplified week of spawns, progress and billing, and reports what it found
together with a snapshot the caller can roll back to.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import JOB_DONE, TICKS_PER_DAY, GameState, HealthCheckWarning
from .balance import DEFAULT_BALANCE, BalanceProfile
from .economy import daily_burn, is_day_boundary
from .jobs import can_progress, progress_gain, release, roll_job, staffed_resources
from .modifiers import black_market_boosts, modifiers_for, team_efficiency
from .utils import is_finite_number

log = logging.getLogger("tycoon")

WARNING_TITLE = "Game Integrity Check Failed"
WARNING_MESSAGE = "Potential corruption detected. Consider exporting your save and refreshing."


@dataclass
class HealthCheckReport:
    warning: Optional[HealthCheckWarning]
    soft_clamp_warnings: List[str]
    shadow_snapshot: GameState
    leads_per_day: float
    errors: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.warning is None


def shadow_copy(state: GameState) -> GameState:
    """Snapshot suitable for rollback; never nests an older snapshot."""

    snapshot = state.model_copy(deep=True)
    snapshot.shadow_save = None
    return snapshot


def is_due(state: GameState, balance: BalanceProfile = DEFAULT_BALANCE) -> bool:
    interval = balance.health.interval_days
    if state.tick % (interval * TICKS_PER_DAY) != 0:
        return False
    return state.day_index - state.last_health_check_day >= interval


def soft_clamp_warnings(state: GameState, balance: BalanceProfile = DEFAULT_BALANCE) -> List[str]:
    limits = balance.health
    warnings: List[str] = []
    for editor in state.editors:
        if editor.salary > limits.max_salary:
            warnings.append(f"Editor salary clamped: {editor.salary} → {limits.max_salary}")
    for job in state.jobs:
        if job.payout > limits.max_payout:
            warnings.append(f"Job payout clamped: {job.payout} → {limits.max_payout}")
    if state.cash > limits.max_cash:
        warnings.append(f"Cash clamped: {state.cash} → {limits.max_cash}")
    if state.reputation > limits.max_reputation:
        warnings.append(f"Reputation clamped: {state.reputation} → {limits.max_reputation}")
    if len(state.editors) > limits.max_editors:
        warnings.append(f"Editor count clamped: {len(state.editors)} → {limits.max_editors}")
    if len(state.workstations) > limits.max_pcs:
        warnings.append(f"PC count clamped: {len(state.workstations)} → {limits.max_pcs}")
    return warnings


def _non_finite(sim: GameState) -> List[str]:
    problems = []
    if not is_finite_number(sim.cash):
        problems.append(f"Invalid number detected in cash: {sim.cash}")
    if not is_finite_number(sim.reputation):
        problems.append(f"Invalid number detected in reputation: {sim.reputation}")
    for editor in sim.editors:
        if not is_finite_number(editor.salary):
            problems.append(f"Invalid number detected in editor salary: {editor.salary}")
    for pc in sim.workstations:
        if not is_finite_number(pc.power):
            problems.append(f"Invalid number detected in pc power: {pc.power}")
    return problems


def run_health_check(
    state: GameState,
    rng: random.Random,
    balance: Optional[BalanceProfile] = None,
) -> HealthCheckReport:
    balance = balance or DEFAULT_BALANCE
    limits = balance.health

    snapshot = shadow_copy(state)
    sim = shadow_copy(state)
    mods = modifiers_for(sim)
    spawn_rate = mods.spawn_rate(balance)
    efficiency = team_efficiency(len(sim.editors), sim.managers, balance)
    _, bm_speed = black_market_boosts(sim)

    errors: List[str] = []
    leads = 0
    started_solvent = sim.cash >= 0
    reported_negative = False

    for _ in range(limits.simulation_days * TICKS_PER_DAY):
        tick = sim.tick

        if rng.random() < spawn_rate:
            job = roll_job(rng, tick, sim.reputation, sim.market_cycle, f"sim{leads}", balance)
            if job is not None:
                leads += 1
                sim.jobs.insert(0, job)

        for job in sim.jobs:
            editor, pc = staffed_resources(sim, job)
            if not can_progress(job, editor, pc):
                continue
            job.progress += progress_gain(editor, pc, tick, mods, efficiency, bm_speed, 0, balance)
            if job.progress >= job.hours_required:
                release(sim, job)
                job.status = JOB_DONE
                sim.cash += job.payout
                sim.adjust_reputation(balance.jobs.pass_reputation)

        sim.tick += 1
        if is_day_boundary(sim.tick):
            salaries, overhead = daily_burn(sim, mods, balance)
            sim.cash -= salaries + overhead

        for problem in _non_finite(sim):
            if problem not in errors:
                errors.append(problem)
        if started_solvent and not reported_negative and sim.cash < 0:
            reported_negative = True
            errors.append(f"Negative cash projected on day {sim.day}: ${sim.cash}")

    leads_per_day = leads / limits.simulation_days
    if leads_per_day < limits.min_leads_per_day:
        errors.append(
            f"Insufficient leads generated: {leads_per_day:.2f} per day (min: {limits.min_leads_per_day})"
        )

    warning = None
    if errors:
        log.warning("Health check failed at tick %s: %s", state.tick, "; ".join(errors))
        warning = HealthCheckWarning(title=WARNING_TITLE, message=WARNING_MESSAGE, checks=errors)
    else:
        log.debug("Health check passed at tick %s (%.2f leads/day)", state.tick, leads_per_day)

    return HealthCheckReport(
        warning=warning,
        soft_clamp_warnings=soft_clamp_warnings(state, balance),
        shadow_snapshot=snapshot,
        leads_per_day=leads_per_day,
        errors=errors,
    )


def apply_report(state: GameState, report: HealthCheckReport) -> None:
    """Record a finished check on a private copy of the live state."""

    state.shadow_save = report.shadow_snapshot.model_copy(deep=True)
    state.soft_clamp_warnings = list(report.soft_clamp_warnings)
    state.health_warning = report.warning.model_copy() if report.warning else None
    state.last_health_check_day = state.day_index


def revert_to_shadow(state: GameState) -> GameState:
    if state.shadow_save is None:
        return state.model_copy(deep=True)
    restored = shadow_copy(state.shadow_save)
    restored.health_warning = None
    restored.push_log("⏪ Reverted to the last health-check snapshot.")
    restored.add_changelog("system", "Reverted to shadow save", details=f"from tick {state.tick}")
    log.info("Reverted save from tick %s to shadow snapshot at tick %s", state.tick, restored.tick)
    return restored


def dismiss_health_warning(state: GameState) -> GameState:
    updated = state.model_copy(deep=True)
    updated.health_warning = None
    return updated


__all__ = [
    "HealthCheckReport",
    "apply_report",
    "dismiss_health_warning",
    "is_due",
    "revert_to_shadow",
    "run_health_check",
    "shadow_copy",
    "soft_clamp_warnings",
]
