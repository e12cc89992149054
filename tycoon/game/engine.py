"""Tick advance and player actions.

Every public function takes a :class:`GameState`, works on a deep copy and
returns the copy; the caller's state is never modified.  ``advance_tick``
first builds a :class:`TickPlan` from the untouched pre-tick state and only
then writes the whole plan onto the copy, so no entity sees a half-updated
sibling within a tick.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..models import (
    CHANGELOG_LIMIT,
    JOB_ACTIVE,
    JOB_AVAILABLE,
    JOB_DONE,
    JOB_FAILED,
    TICKS_PER_DAY,
    GameState,
    Job,
    MarketCycle,
    MemeEventState,
)
from . import health
from .balance import DEFAULT_BALANCE, BalanceProfile
from .catalog import ACHIEVEMENTS, NAME_POOL, MemeEvent, research, upgrade
from .curves import (
    apply_gain,
    curve_gain,
    hire_cost,
    manager_cost,
    marketing_cost,
    marketing_uses_today,
    pc_cost,
    pc_upgrade_cost,
    research_cost,
    training_cost,
)
from .economy import (
    daily_burn,
    is_day_boundary,
    marketing_lead_count,
    newly_unlocked,
    roll_meme_event,
    roll_virus,
    rotate_market,
)
from .errors import (
    DailyLimitError,
    InsufficientFundsError,
    InvalidTargetError,
    NoCandidatesError,
    PrestigeRequirementError,
)
from .jobs import (
    COMPLETE,
    FAIL,
    GRACE,
    DeliveryResult,
    can_progress,
    close_job,
    deliver,
    is_assignable,
    job_duration,
    link,
    next_offer_cooldown,
    progress_gain,
    record_delivery_stats,
    release,
    resolve_deadline,
    roll_job,
    staffed_resources,
)
from .modifiers import black_market_boosts, manager_slots, modifiers_for, team_efficiency
from .staff import (
    EditorUpdate,
    can_take_assignment,
    first_free_editor,
    first_free_pc,
    make_editor,
    make_workstation,
    plan_editor,
    roll_crash,
)
from .utils import pick

log = logging.getLogger("tycoon")

WELCOME_MESSAGE = "Welcome to Studio Tycoon! Accept jobs, assign your team, and build a legendary studio."


@dataclass(frozen=True)
class TickEvent:
    tick: int
    kind: str   # spawn | complete | fail | grace | rest | crash | billing | market | meme | ...
    message: str


@dataclass
class TickPlan:
    """Everything one tick will change, computed from the pre-tick state."""

    tick: int
    offer_cooldown: int
    new_job: Optional[Job] = None
    progress: Dict[str, float] = field(default_factory=dict)
    crashes: List[Tuple[str, int]] = field(default_factory=list)
    deliveries: List[Tuple[str, DeliveryResult]] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    grace: List[str] = field(default_factory=list)
    editors: List[EditorUpdate] = field(default_factory=list)
    bill: Optional[Tuple[int, int]] = None
    market: Optional[MarketCycle] = None
    meme_state: Optional[MemeEventState] = None
    meme: Optional[MemeEvent] = None
    health_report: Optional[health.HealthCheckReport] = None


# ----------------------------------------------------------------------
# Tick advance
# ----------------------------------------------------------------------

def plan_tick(state: GameState, rng: random.Random, balance: BalanceProfile = DEFAULT_BALANCE) -> TickPlan:
    """Read-only half of a tick. Draws from ``rng`` in a fixed order."""

    mods = modifiers_for(state)
    new_tick = state.tick + 1
    plan = TickPlan(tick=new_tick, offer_cooldown=state.offer_cooldown)

    if health.is_due(state, balance):
        child = random.Random(rng.getrandbits(64))
        plan.health_report = health.run_health_check(state, child, balance)

    if is_day_boundary(new_tick):
        plan.market = rotate_market(state.market_cycle, new_tick // TICKS_PER_DAY + 1, rng, balance)

    plan.meme_state, plan.meme = roll_meme_event(state.meme_state, state.day_index, rng, balance)

    spawned = False
    if (
        state.offer_cooldown <= 0
        and len(state.available_jobs()) < mods.lead_cap(balance)
        and rng.random() < mods.spawn_rate(balance)
    ):
        plan.new_job = roll_job(rng, state.tick, state.reputation, state.market_cycle, balance=balance)
        spawned = plan.new_job is not None
    plan.offer_cooldown = next_offer_cooldown(state.offer_cooldown, spawned, rng, balance)

    efficiency = team_efficiency(len(state.editors), state.managers, balance)
    bm_skill, bm_speed = black_market_boosts(state)
    for job in state.jobs:
        if not job.is_open:
            continue
        editor, pc = staffed_resources(state, job)
        progress = job.progress
        if can_progress(job, editor, pc):
            crash = roll_crash(pc, rng, balance)
            if crash:
                plan.crashes.append((pc.id, crash))
            progress += progress_gain(editor, pc, state.tick, mods, efficiency, bm_speed, crash, balance)
            plan.progress[job.id] = progress

        in_grace = job.id in state.grace_jobs
        outcome, reason = resolve_deadline(job, progress, state.tick, in_grace, balance)
        if outcome == COMPLETE:
            result = deliver(job, editor, pc, in_grace, mods, rng, bm_skill, balance)
            plan.deliveries.append((job.id, result))
        elif outcome == GRACE:
            plan.grace.append(job.id)
        elif outcome == FAIL:
            plan.failures.append((job.id, reason))

    plan.editors = [plan_editor(editor, mods, balance) for editor in state.editors]

    if is_day_boundary(new_tick):
        plan.bill = daily_burn(state, mods, balance)
    return plan


class _Feed:
    """Collects tick events and mirrors them into the studio feed."""

    def __init__(self, state: GameState):
        self.state = state
        self.events: List[TickEvent] = []

    def emit(self, kind: str, message: str) -> None:
        self.state.push_log(message)
        self.events.append(TickEvent(tick=self.state.tick, kind=kind, message=message))


def apply_plan(
    state: GameState,
    plan: TickPlan,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> Tuple[GameState, List[TickEvent]]:
    """Write ``plan`` onto ``state`` (a private copy) in one batch."""

    if plan.health_report is not None:
        health.apply_report(state, plan.health_report)

    state.tick = plan.tick
    state.offer_cooldown = plan.offer_cooldown
    feed = _Feed(state)

    if plan.health_report is not None and plan.health_report.warning is not None:
        feed.emit("health", f"🩺 {plan.health_report.warning.title}")

    if plan.market is not None:
        state.market_cycle = plan.market
        state.achievement_stats.market_cycles += 1
        log.info("Market cycle %s: %s boosted, %s nerfed", plan.market.current_cycle, plan.market.boosted_type, plan.market.nerfed_type)
        feed.emit(
            "market",
            f"📈 Market cycle {plan.market.current_cycle}: {plan.market.boosted_type} boosted, "
            f"{plan.market.nerfed_type} nerfed.",
        )

    if plan.meme_state is not None:
        state.meme_state = plan.meme_state
    if plan.meme is not None:
        state.cash += plan.meme.cash_delta
        sign = "+" if plan.meme.cash_delta > 0 else "-"
        feed.emit("meme", f"🎲 {plan.meme.title}: {sign}${abs(plan.meme.cash_delta)}")

    if plan.new_job is not None:
        job = plan.new_job.model_copy(update={"id": state.allocate_id("j")})
        state.jobs.insert(0, job)
        feed.emit("spawn", "📞 New client inquiry - time to hustle!")

    for job_id, progress in plan.progress.items():
        job = state.get_job(job_id)
        if job is not None:
            job.progress = progress

    for pc_id, penalty in plan.crashes:
        pc = state.get_pc(pc_id)
        if pc is not None:
            feed.emit("crash", f"💻 {pc.name} crashed! Lost {penalty}h of render progress.")

    for job_id, result in plan.deliveries:
        job = state.get_job(job_id)
        if job is None:
            continue
        record_delivery_stats(state.achievement_stats, result, job_duration(job, plan.tick - 1))
        close_job(state, job, JOB_DONE)
        state.cash += result.pay
        state.adjust_reputation(result.reputation_delta)
        state.record_revenue(result.pay)
        if result.used_grace:
            feed.emit(
                "complete",
                f"⏰ {job.type} completed in grace window! Reduced payout: +${result.pay:,} "
                f"({result.reputation_delta} rep).",
            )
        else:
            verdict = "🔥 Amazing quality" if result.passed else "😅 Decent effort"
            feed.emit("complete", f"🎬 {job.type} for {job.brand} delivered! {verdict} - +${result.pay:,}")

    for job_id, reason in plan.failures:
        job = state.get_job(job_id)
        if job is None:
            continue
        close_job(state, job, JOB_FAILED, reason)
        state.adjust_reputation(-balance.jobs.failed_reputation_loss)
        feed.emit(
            "fail",
            f"💥 Job failed - {reason}! Reputation takes a hit (-{balance.jobs.failed_reputation_loss}).",
        )

    for job_id in plan.grace:
        job = state.get_job(job_id)
        if job is None:
            continue
        state.grace_jobs.add(job_id)
        feed.emit("grace", f"⏰ {job.type} gets a grace window! +{balance.grace.extra_hours}h extension granted.")

    if plan.deliveries or plan.failures:
        state.prune_closed_jobs()

    for update in plan.editors:
        editor = state.get_editor(update.editor_id)
        if editor is None:
            continue
        editor.energy = update.energy
        editor.resting = update.resting
        editor.work_hours = update.work_hours
        stats = state.achievement_stats
        stats.max_work_hours = max(stats.max_work_hours, update.work_hours)
        for message in update.events:
            feed.emit("rest", message)

    if plan.bill is not None:
        salaries, overhead = plan.bill
        total = salaries + overhead
        if total > 0:
            state.cash -= total
            log.info("Day %s billing: salaries=%s overhead=%s cash=%s", state.day_index, salaries, overhead, state.cash)
            feed.emit(
                "billing",
                f"💸 Daily burn: -${total:,} (salaries: ${salaries:,}, overhead: ${overhead:,})",
            )

    effects = state.black_market
    if effects.active and state.tick >= effects.expires_at:
        effects.active = False
        effects.skill_boost = 0
        effects.speed_boost = 0.0
        feed.emit("black_market", "🖤 Cracked plugins wore off.")

    for key in newly_unlocked(state):
        state.achievements.add(key)
        feed.emit("achievement", f"🏆 Achievement unlocked: {ACHIEVEMENTS[key].name}!")

    state.ensure_bounds()

    if state.virus.armed:
        state.virus.countdown -= 1
        if state.virus.countdown <= 0:
            return _wipe(state, feed.events, balance)
        feed.emit("virus", f"🚨 Virus spreading! System wipe in {state.virus.countdown}h unless you export your save.")

    return state, feed.events


def _wipe(state: GameState, events: List[TickEvent], balance: BalanceProfile) -> Tuple[GameState, List[TickEvent]]:
    log.error("Virus countdown expired at tick %s; resetting run", state.tick)
    wiped = reset_run(state, balance)
    message = "☠️ The virus wiped the studio. Everything is gone except your legacy."
    wiped.push_log(message)
    wiped.add_changelog("system", "Run reset by virus", details=f"at tick {state.tick}")
    return wiped, events + [TickEvent(tick=state.tick, kind="catastrophe", message=message)]


def advance_tick(
    state: GameState,
    rng: random.Random,
    balance: Optional[BalanceProfile] = None,
) -> Tuple[GameState, List[TickEvent]]:
    balance = balance or DEFAULT_BALANCE
    plan = plan_tick(state, rng, balance)
    updated, events = apply_plan(state.model_copy(deep=True), plan, balance)
    log.debug("Tick %s -> %s: %d events", state.tick, plan.tick, len(events))
    return updated, events


# ----------------------------------------------------------------------
# Jobs and assignment
# ----------------------------------------------------------------------

def accept_job(state: GameState, job_id: str, balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    updated = state.model_copy(deep=True)
    job = updated.get_job(job_id)
    if job is None or job.status != JOB_AVAILABLE:
        return updated
    job.status = JOB_ACTIVE
    job.accepted_tick = updated.tick
    updated.push_log("✅ Job accepted - let's make some magic happen!")
    if updated.auto_assign:
        editor = first_free_editor(updated.editors, balance)
        pc = first_free_pc(updated.workstations)
        if editor is not None and pc is not None:
            link(job, editor, pc)
            updated.push_log(f"👥 {editor.name} assigned to {pc.name} - dream team activated!")
    return updated


def assign(
    state: GameState,
    job_id: str,
    editor_id: str,
    pc_id: str,
    balance: Optional[BalanceProfile] = None,
) -> GameState:
    """Staff an active job; silently does nothing if anything is taken or gone."""

    balance = balance or DEFAULT_BALANCE
    updated = state.model_copy(deep=True)
    job = updated.get_job(job_id)
    editor = updated.get_editor(editor_id)
    pc = updated.get_pc(pc_id)
    if not is_assignable(job) or editor is None or pc is None:
        return updated
    if not can_take_assignment(editor, balance) or pc.assigned_job_id is not None:
        return updated
    link(job, editor, pc)
    updated.push_log(f"👥 {editor.name} assigned to {pc.name} - dream team activated!")
    return updated


def unassign(state: GameState, job_id: str) -> GameState:
    updated = state.model_copy(deep=True)
    job = updated.get_job(job_id)
    if job is None or (job.assigned_editor_id is None and job.assigned_pc_id is None):
        return updated
    release(updated, job)
    updated.push_log("🔄 Team unassigned - ready for the next challenge!")
    return updated


def set_auto_assign(state: GameState, enabled: bool) -> GameState:
    return state.model_copy(deep=True, update={"auto_assign": bool(enabled)})


# ----------------------------------------------------------------------
# Company actions
# ----------------------------------------------------------------------

def _charge(state: GameState, cost: int, action: str) -> None:
    if state.cash < cost:
        raise InsufficientFundsError(cost, state.cash, action)
    state.cash -= cost


def hire_editor(state: GameState, rng: random.Random, balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    cost = hire_cost(state, balance)
    if state.cash < cost:
        raise InsufficientFundsError(cost, state.cash, "a new hire")
    hired = state.hired_names()
    candidates = [name for name in NAME_POOL if name not in hired]
    if not candidates:
        raise NoCandidatesError("Everyone in the talent pool already works here.")

    updated = state.model_copy(deep=True)
    editor = make_editor(updated.allocate_id("e"), pick(rng, candidates), updated.tick, len(updated.editors), balance)
    updated.editors.append(editor)
    updated.cash -= cost
    hours = editor.onboarding_complete - updated.tick
    updated.push_log(f"🎉 Welcome {editor.name} to the team! Onboarding complete in {hours}h.")
    return updated


def hire_manager(state: GameState, balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    cost = manager_cost(state.managers, balance)
    if state.cash < cost:
        raise InsufficientFundsError(cost, state.cash, "a manager")
    if state.managers >= manager_slots(len(state.editors), balance):
        raise NoCandidatesError("No manager slots available; grow the team first.")
    updated = state.model_copy(deep=True)
    updated.cash -= cost
    updated.managers += 1
    updated.push_log(f"👔 Manager #{updated.managers} hired! Team efficiency boosted.")
    return updated


def buy_pc(state: GameState, rng: random.Random, balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    updated = state.model_copy(deep=True)
    _charge(updated, pc_cost(state, balance), "a new PC")
    pc = make_workstation(updated.allocate_id("pc"), len(updated.workstations) + 1, rng, balance)
    updated.workstations.append(pc)
    updated.push_log(f"🖥️ {pc.name} purchased! Power level: {pc.power}.")
    return updated


def buy_upgrade(state: GameState, upgrade_id: str) -> GameState:
    item = upgrade(upgrade_id)
    if item is None:
        raise InvalidTargetError(f"Unknown upgrade: {upgrade_id}")
    if upgrade_id in state.owned_upgrades:
        raise InvalidTargetError(f"{item.name} is already owned.")
    updated = state.model_copy(deep=True)
    _charge(updated, item.cost, item.name)
    updated.owned_upgrades.add(upgrade_id)
    updated.push_log(f"Purchased {item.name}.")
    return updated


def train_editor(
    state: GameState,
    editor_id: str,
    rng: random.Random,
    balance: Optional[BalanceProfile] = None,
) -> GameState:
    balance = balance or DEFAULT_BALANCE
    if state.get_editor(editor_id) is None:
        raise InvalidTargetError(f"Unknown editor: {editor_id}")
    updated = state.model_copy(deep=True)
    _charge(updated, training_cost(state, editor_id, balance), "training")

    editor = updated.get_editor(editor_id)
    count = updated.training_counts.get(editor_id, 0)
    before = editor.skill
    gain = curve_gain(balance.gains.skill, count, rng)
    editor.skill = apply_gain(editor.skill, gain, modifiers_for(updated).training_efficiency, balance.staff.skill_range)
    updated.training_counts[editor_id] = count + 1
    updated.push_log(f"🎓 Training complete! {editor.name} +{editor.skill - before} skill.")
    return updated


def upgrade_pc(
    state: GameState,
    pc_id: str,
    rng: random.Random,
    balance: Optional[BalanceProfile] = None,
) -> GameState:
    balance = balance or DEFAULT_BALANCE
    if state.get_pc(pc_id) is None:
        raise InvalidTargetError(f"Unknown PC: {pc_id}")
    updated = state.model_copy(deep=True)
    _charge(updated, pc_upgrade_cost(state, pc_id, balance), "a PC upgrade")

    pc = updated.get_pc(pc_id)
    count = updated.upgrade_counts.get(pc_id, 0)
    bonus = modifiers_for(updated).pc_efficiency
    power_gain = curve_gain(balance.gains.pc_power, count, rng)
    stability_gain = curve_gain(balance.gains.pc_stability, count, rng)
    before = (pc.power, pc.stability)
    pc.tier += 1
    pc.power = apply_gain(pc.power, power_gain, bonus, balance.staff.power_range)
    pc.stability = apply_gain(pc.stability, stability_gain, bonus, balance.staff.stability_range)
    updated.upgrade_counts[pc_id] = count + 1
    updated.push_log(
        f"⚡ {pc.name} upgraded! +{pc.power - before[0]} power, +{pc.stability - before[1]} stability."
    )
    return updated


def buy_research(state: GameState, research_id: str, balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    perk = research(research_id)
    if perk is None:
        raise InvalidTargetError(f"Unknown research: {research_id}")
    level = state.research_levels.get(research_id, 0)
    cost = research_cost(level, balance)
    if cost is None:
        raise InvalidTargetError(f"{perk.name} is already at max level.")

    updated = state.model_copy(deep=True)
    _charge(updated, cost, perk.name)
    updated.research_levels[research_id] = level + 1
    maxed = sum(1 for value in updated.research_levels.values() if value >= balance.research.max_level)
    stats = updated.achievement_stats
    stats.max_research_categories = max(stats.max_research_categories, maxed)
    updated.push_log(f"🔬 {perk.name} upgraded to level {level + 1}.")
    return updated


def perform_prestige(state: GameState, balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    needs = balance.prestige
    if state.reputation < needs.required_reputation or state.cash < needs.required_cash:
        raise PrestigeRequirementError(
            f"Cannot prestige: need Rep {needs.required_reputation}+ and ${needs.required_cash:,}+ cash."
        )
    carried = state.model_copy(deep=True)
    carried.prestige_points += 1
    updated = reset_run(carried, balance)
    updated.push_log("🌟 PRESTIGE COMPLETE! You've earned 1 Prestige Point.")
    updated.add_changelog("system", "Prestige", details=f"points={updated.prestige_points}")
    log.info("Prestige at tick %s: %s points", state.tick, updated.prestige_points)
    return updated


def run_marketing(state: GameState, rng: random.Random, balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    cost = marketing_cost(state, balance)
    if state.cash < cost:
        raise InsufficientFundsError(cost, state.cash, "marketing")
    used = marketing_uses_today(state)
    if used >= balance.marketing.max_uses_per_day:
        raise DailyLimitError("Daily marketing limit reached.")

    updated = state.model_copy(deep=True)
    updated.cash -= cost
    updated.marketing_usage.last_use_day = updated.day_index
    updated.marketing_usage.uses_today = used + 1
    count = marketing_lead_count(rng, balance)
    created = 0
    for _ in range(count):
        job = roll_job(rng, updated.tick, updated.reputation, updated.market_cycle, balance=balance)
        if job is None:
            break
        job.id = updated.allocate_id("j")
        updated.jobs.insert(0, job)
        created += 1
    updated.push_log(f"📢 Marketing blast sent! {created} new leads generated.")
    return updated


def buy_cracked_plugins(state: GameState, rng: random.Random, balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    plugins = balance.black_market
    updated = state.model_copy(deep=True)
    _charge(updated, plugins.cost, "cracked plugins")

    effects = updated.black_market
    effects.active = True
    effects.expires_at = updated.tick + plugins.duration
    effects.skill_boost = plugins.skill_boost
    effects.speed_boost = plugins.speed_boost
    updated.push_log(f"🖤 Cracked plugins installed. Massive performance boost active for {plugins.duration}h.")

    if roll_virus(rng, balance) and not updated.virus.armed:
        updated.virus.armed = True
        updated.virus.exported = False
        updated.virus.countdown = plugins.virus_countdown
        updated.push_log("🚨 WARNING: MALICIOUS CODE DETECTED! SYSTEM COMPROMISED!")
        log.warning("Virus armed at tick %s", updated.tick)
    return updated


def export_during_virus(state: GameState) -> GameState:
    """Defuse an armed virus; the caller is expected to persist the export."""

    updated = state.model_copy(deep=True)
    if not updated.virus.armed:
        return updated
    updated.virus.armed = False
    updated.virus.exported = True
    updated.virus.countdown = 0
    updated.push_log("💾 Emergency save exported. The virus was quarantined.")
    return updated


# ----------------------------------------------------------------------
# Health check entry points
# ----------------------------------------------------------------------

run_health_check = health.run_health_check
revert_to_shadow = health.revert_to_shadow
dismiss_health_warning = health.dismiss_health_warning


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------

def new_game(balance: Optional[BalanceProfile] = None) -> GameState:
    balance = balance or DEFAULT_BALANCE
    state = GameState(cash=balance.starting_cash)
    state.push_log(WELCOME_MESSAGE)
    state.add_changelog("system", "New game started")
    return state


def reset_run(state: GameState, balance: Optional[BalanceProfile] = None) -> GameState:
    """Start over, keeping prestige, the season high and achievements."""

    fresh = new_game(balance)
    fresh.prestige_points = state.prestige_points
    fresh.season_high_rep = max(state.season_high_rep, state.reputation)
    fresh.achievements = set(state.achievements)
    fresh.achievement_stats = state.achievement_stats.model_copy()
    fresh.changelog = fresh.changelog + [entry.model_copy() for entry in state.changelog]
    del fresh.changelog[CHANGELOG_LIMIT:]
    return fresh


__all__ = [
    "TickEvent",
    "TickPlan",
    "accept_job",
    "advance_tick",
    "apply_plan",
    "assign",
    "buy_cracked_plugins",
    "buy_pc",
    "buy_research",
    "buy_upgrade",
    "dismiss_health_warning",
    "export_during_virus",
    "hire_editor",
    "hire_manager",
    "new_game",
    "perform_prestige",
    "plan_tick",
    "reset_run",
    "revert_to_shadow",
    "run_health_check",
    "run_marketing",
    "set_auto_assign",
    "train_editor",
    "unassign",
    "upgrade_pc",
]
