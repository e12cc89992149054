"""Centralised balance configuration for the studio simulation."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class CostCurve:
    """Exponential price curve: ``base_cost * scaling_factor ** n``."""

    base_cost: int
    scaling_factor: float


@dataclass(frozen=True)
class GainCurve:
    """Diminishing-returns gain: ``base * diminishing_factor ** n`` +/- variance."""

    base: float
    variance: float
    diminishing_factor: float


@dataclass(frozen=True)
class CostsBalance:
    hire_editor: CostCurve = field(default_factory=lambda: CostCurve(650, 1.15))
    buy_pc: CostCurve = field(default_factory=lambda: CostCurve(900, 1.12))
    train_editor: CostCurve = field(default_factory=lambda: CostCurve(220, 1.08))
    upgrade_pc: CostCurve = field(default_factory=lambda: CostCurve(350, 1.10))


@dataclass(frozen=True)
class GainsBalance:
    skill: GainCurve = field(default_factory=lambda: GainCurve(4.5, 1.5, 0.95))
    pc_power: GainCurve = field(default_factory=lambda: GainCurve(9.0, 3.0, 0.92))
    pc_stability: GainCurve = field(default_factory=lambda: GainCurve(1.0, 2.0, 0.98))


@dataclass(frozen=True)
class StaffBalance:
    """Starting stats and bounds for editors and workstations."""

    editor_skill: int = 60
    editor_speed: float = 1.0
    editor_salary: int = 120
    skill_range: tuple[int, int] = (20, 99)
    energy_max: int = 100
    assign_min_energy: int = 30
    rest_threshold: int = 15
    idle_regen: int = 1
    resting_regen: int = 3
    onboarding_base_hours: float = 8.0
    onboarding_per_editor: float = 0.5
    onboarding_multiplier: float = 0.3
    pc_power_roll: tuple[int, int] = (52, 70)
    pc_stability_roll: tuple[int, int] = (88, 96)
    power_range: tuple[int, int] = (45, 120)
    stability_range: tuple[int, int] = (70, 99)


@dataclass(frozen=True)
class TeamBalance:
    """Team efficiency decay and managers."""

    decay_start: int = 10
    decay_rate: float = 0.05
    efficiency_min: float = 0.35
    manager_unlock_thresholds: tuple[int, int, int] = (10, 25, 50)
    manager_efficiency_bonus: float = 0.15
    manager_salary: int = 300
    manager_base_cost: int = 2000
    manager_cost_step: int = 500
    max_managers: int = 3


@dataclass(frozen=True)
class OverheadBalance:
    license_per_editor: int = 25
    license_per_pc: int = 15
    facility_base: int = 200
    facility_log_factor: float = 50.0


@dataclass(frozen=True)
class MarketCycleBalance:
    cycle_length_days: int = 7
    boost_multiplier: float = 1.5
    nerf_multiplier: float = 0.7


@dataclass(frozen=True)
class JobBalance:
    """Lead generation and job generation parameters."""

    base_spawn_rate: float = 0.22
    max_spawn_rate: float = 0.95
    base_lead_cap: int = 6
    offer_cooldown: tuple[int, int] = (2, 6)
    difficulty_roll: tuple[int, int] = (-10, 15)
    difficulty_range: tuple[int, int] = (20, 95)
    hours_factor: tuple[float, float] = (0.75, 1.55)
    hours_range: tuple[int, int] = (4, 48)
    pay_roll: tuple[int, int] = (-120, 250)
    pay_difficulty_base: float = 0.9
    pay_difficulty_divisor: float = 200.0
    deadline_factor: tuple[float, float] = (1.15, 2.05)
    max_progress_per_tick: float = 4.0
    quality_skill_weight: float = 0.6
    quality_power_weight: float = 0.4
    quality_roll: tuple[int, int] = (-10, 15)
    fallback_skill: int = 40
    fallback_power: int = 50
    partial_pay_ratio: float = 0.5
    pass_reputation: int = 3
    below_par_reputation: int = -4
    failed_reputation_loss: int = 6


@dataclass(frozen=True)
class GraceBalance:
    threshold: float = 0.95
    extra_hours: int = 6
    payout_multiplier: float = 0.8
    reputation_loss: int = 2


@dataclass(frozen=True)
class CrashBalance:
    base_chance: float = 0.05
    stability_factor: float = 0.8
    penalty: tuple[int, int] = (1, 2)


@dataclass(frozen=True)
class BurnoutBalance:
    threshold: int = 12
    energy_drain_multiplier: float = 2.0


@dataclass(frozen=True)
class MemeBalance:
    chance_per_hour: float = 0.0075
    max_per_day: int = 1


@dataclass(frozen=True)
class BlackMarketBalance:
    cost: int = 150
    skill_boost: int = 15
    speed_boost: float = 0.3
    duration: int = 24
    virus_risk: float = 0.05
    virus_countdown: int = 3


@dataclass(frozen=True)
class ResearchBalance:
    base_cost: int = 500
    cost_multiplier: float = 1.5
    max_level: int = 10


@dataclass(frozen=True)
class PrestigeBalance:
    required_reputation: int = 100
    required_cash: int = 10000


@dataclass(frozen=True)
class MarketingBalance:
    base_cost: int = 180
    cost_multiplier: float = 1.5
    max_uses_per_day: int = 5
    lead_count: tuple[int, int] = (2, 3)
    bonus_lead_chance: float = 0.3


@dataclass(frozen=True)
class HealthCheckBalance:
    interval_days: int = 7
    simulation_days: int = 7
    min_leads_per_day: float = 1.0
    max_salary: int = 10000
    max_payout: int = 50000
    max_cash: int = 1000000
    max_reputation: int = 1000
    max_editors: int = 200
    max_pcs: int = 100


@dataclass(frozen=True)
class BalanceProfile:
    """Bundle of all tunable balance parameters."""

    starting_cash: int = 1000
    costs: CostsBalance = field(default_factory=CostsBalance)
    gains: GainsBalance = field(default_factory=GainsBalance)
    staff: StaffBalance = field(default_factory=StaffBalance)
    team: TeamBalance = field(default_factory=TeamBalance)
    overhead: OverheadBalance = field(default_factory=OverheadBalance)
    market_cycle: MarketCycleBalance = field(default_factory=MarketCycleBalance)
    jobs: JobBalance = field(default_factory=JobBalance)
    grace: GraceBalance = field(default_factory=GraceBalance)
    crash: CrashBalance = field(default_factory=CrashBalance)
    burnout: BurnoutBalance = field(default_factory=BurnoutBalance)
    memes: MemeBalance = field(default_factory=MemeBalance)
    black_market: BlackMarketBalance = field(default_factory=BlackMarketBalance)
    research: ResearchBalance = field(default_factory=ResearchBalance)
    prestige: PrestigeBalance = field(default_factory=PrestigeBalance)
    marketing: MarketingBalance = field(default_factory=MarketingBalance)
    health: HealthCheckBalance = field(default_factory=HealthCheckBalance)


DEFAULT_BALANCE = BalanceProfile()


def _coerce_scalar(template: Any, raw: Any) -> Any:
    """Attempt to coerce ``raw`` into the type of ``template``."""

    if isinstance(template, bool):
        return raw if isinstance(raw, bool) else template
    if isinstance(template, float):
        try:
            return float(raw)
        except (TypeError, ValueError):
            return template
    if isinstance(template, int):
        try:
            return int(raw)
        except (TypeError, ValueError):
            return template
    if isinstance(template, tuple):
        if isinstance(raw, Sequence) and not isinstance(raw, str) and len(raw) == len(template):
            return tuple(_coerce_scalar(t, r) for t, r in zip(template, raw))
        return template
    return raw


def _merge_dataclass(instance: Any, overrides: Mapping[str, Any]) -> Any:
    if not is_dataclass(instance) or not isinstance(overrides, Mapping):
        return instance

    updates: dict[str, Any] = {}
    for field_info in fields(instance):
        name = field_info.name
        if name not in overrides:
            continue
        current_value = getattr(instance, name)
        override_value = overrides[name]
        if is_dataclass(current_value):
            updates[name] = _merge_dataclass(current_value, override_value)
        else:
            updates[name] = _coerce_scalar(current_value, override_value)
    if not updates:
        return instance
    return replace(instance, **updates)


def load_balance_profile(raw: Mapping[str, Any] | None) -> BalanceProfile:
    """Return a :class:`BalanceProfile` with optional overrides applied."""

    profile = BalanceProfile()
    if not isinstance(raw, Mapping):
        return profile
    return _merge_dataclass(profile, raw)


__all__ = [
    "BalanceProfile",
    "CostCurve",
    "DEFAULT_BALANCE",
    "GainCurve",
    "load_balance_profile",
]
