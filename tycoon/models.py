from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, List, Optional, Set, Tuple

# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

GAME_VERSION = "1.3.0"

JOB_AVAILABLE = "available"
JOB_ACTIVE = "active"
JOB_DONE = "done"
JOB_FAILED = "failed"

TICKS_PER_DAY = 24

EVENT_LOG_LIMIT = 50
REVENUE_HISTORY_LIMIT = 60
CHANGELOG_LIMIT = 100
CLOSED_JOB_LIMIT = 30

REPUTATION_MIN = -50
REPUTATION_MAX = 999

# -----------------------------------------------------------------------------
# Entities
# -----------------------------------------------------------------------------


class Editor(BaseModel):
    id: str
    name: str
    skill: int = 60
    speed: float = 1.0
    energy: int = 100
    salary: int = 120
    resting: bool = False
    assigned_job_id: Optional[str] = None
    onboarding_complete: Optional[int] = None   # tick; 30% output before it
    work_hours: int = 0                          # consecutive, reset on full rest

    def is_onboarding(self, tick: int) -> bool:
        return self.onboarding_complete is not None and tick < self.onboarding_complete

    def ensure_bounds(self) -> None:
        self.skill = min(99, max(20, int(self.skill)))
        self.energy = min(100, max(0, int(self.energy)))
        self.work_hours = max(0, int(self.work_hours))


class Workstation(BaseModel):
    id: str
    name: str
    tier: int = 1
    power: int = 55
    stability: int = 92
    assigned_job_id: Optional[str] = None

    def ensure_bounds(self) -> None:
        self.tier = max(1, int(self.tier))
        self.power = min(120, max(45, int(self.power)))
        self.stability = min(99, max(70, int(self.stability)))


class Job(BaseModel):
    id: str
    client: str
    brand: str
    type: str
    difficulty: int
    hours_required: int
    payout: int
    deadline: int
    progress: float = 0.0
    status: str = JOB_AVAILABLE
    assigned_editor_id: Optional[str] = None
    assigned_pc_id: Optional[str] = None
    created_tick: int = 0
    accepted_tick: Optional[int] = None
    fail_reason: Optional[str] = None

    @property
    def completion_ratio(self) -> float:
        if self.hours_required <= 0:
            return 1.0
        return self.progress / self.hours_required

    @property
    def is_open(self) -> bool:
        return self.status in (JOB_AVAILABLE, JOB_ACTIVE)


# -----------------------------------------------------------------------------
# Economy sub-records
# -----------------------------------------------------------------------------


class MarketCycle(BaseModel):
    boosted_type: Optional[str] = None
    nerfed_type: Optional[str] = None
    cycle_start_day: int = 1
    current_cycle: int = 1


class MemeEventState(BaseModel):
    last_event_day: int = 0
    events_today: int = 0
    last_event_id: Optional[str] = None


class BlackMarketEffects(BaseModel):
    active: bool = False
    expires_at: int = 0
    skill_boost: int = 0
    speed_boost: float = 0.0

    def is_active(self, tick: int) -> bool:
        return self.active and tick < self.expires_at


class VirusState(BaseModel):
    """Countdown armed by cracked plugins; reaching zero resets the run."""

    armed: bool = False
    countdown: int = 0
    exported: bool = False


class MarketingUsage(BaseModel):
    last_use_day: int = 0
    uses_today: int = 0


class AchievementStats(BaseModel):
    flawless_deliveries: int = 0
    overnight_jobs: int = 0
    speed_demon_jobs: int = 0
    quality_master_jobs: int = 0
    max_work_hours: int = 0
    market_cycles: int = 0
    max_research_categories: int = 0


class HealthCheckWarning(BaseModel):
    type: str = "error"
    title: str
    message: str
    checks: List[str] = Field(default_factory=list)
    can_revert: bool = True


class ChangelogEntry(BaseModel):
    type: str                  # feature | migration | dev | system
    message: str
    tick: int = 0
    day: int = 0
    game_version: str = GAME_VERSION
    details: Optional[str] = None


def make_starter_pcs() -> List[Workstation]:
    return [Workstation(id="pc1", name="PC-01", tier=1, power=55, stability=92)]


# -----------------------------------------------------------------------------
# Game state
# -----------------------------------------------------------------------------


class GameState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tick: int = 0
    cash: int = 1000
    reputation: int = 0
    auto_assign: bool = True

    editors: List[Editor] = Field(default_factory=list)
    workstations: List[Workstation] = Field(default_factory=make_starter_pcs, alias="pcs")
    jobs: List[Job] = Field(default_factory=list)

    event_log: List[str] = Field(default_factory=list)
    revenue_history: List[Tuple[int, int]] = Field(default_factory=list)
    offer_cooldown: int = 0
    last_autosave_tick: int = 0
    next_id: int = 2   # "pc1" is taken by the starter workstation

    owned_upgrades: Set[str] = Field(default_factory=set)
    managers: int = 0
    training_counts: Dict[str, int] = Field(default_factory=dict)
    upgrade_counts: Dict[str, int] = Field(default_factory=dict)

    market_cycle: MarketCycle = Field(default_factory=MarketCycle)
    grace_jobs: Set[str] = Field(default_factory=set)
    meme_state: MemeEventState = Field(default_factory=MemeEventState)
    black_market: BlackMarketEffects = Field(default_factory=BlackMarketEffects)
    virus: VirusState = Field(default_factory=VirusState)
    marketing_usage: MarketingUsage = Field(default_factory=MarketingUsage)

    research_levels: Dict[str, int] = Field(default_factory=dict)
    prestige_points: int = 0
    season_high_rep: int = 0
    achievements: Set[str] = Field(default_factory=set)
    achievement_stats: AchievementStats = Field(default_factory=AchievementStats)

    last_health_check_day: int = 0
    health_warning: Optional[HealthCheckWarning] = None
    shadow_save: Optional["GameState"] = None
    soft_clamp_warnings: List[str] = Field(default_factory=list)
    changelog: List[ChangelogEntry] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Time helpers
    # ------------------------------------------------------------------

    @property
    def day_index(self) -> int:
        """Zero-based day number (tick 0-23 is day index 0)."""
        return self.tick // TICKS_PER_DAY

    @property
    def day(self) -> int:
        """One-based day shown to the player."""
        return self.tick // TICKS_PER_DAY + 1

    def time_label(self) -> str:
        return f"[Day {self.day} • {self.tick % TICKS_PER_DAY:02d}:00]"

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_editor(self, editor_id: Optional[str]) -> Optional[Editor]:
        if editor_id is None:
            return None
        return next((e for e in self.editors if e.id == editor_id), None)

    def get_pc(self, pc_id: Optional[str]) -> Optional[Workstation]:
        if pc_id is None:
            return None
        return next((p for p in self.workstations if p.id == pc_id), None)

    def get_job(self, job_id: Optional[str]) -> Optional[Job]:
        if job_id is None:
            return None
        return next((j for j in self.jobs if j.id == job_id), None)

    def available_jobs(self) -> List[Job]:
        return [j for j in self.jobs if j.status == JOB_AVAILABLE]

    def hired_names(self) -> Set[str]:
        return {e.name for e in self.editors}

    # ------------------------------------------------------------------
    # Mutation helpers (used on private copies only)
    # ------------------------------------------------------------------

    def allocate_id(self, prefix: str) -> str:
        value = f"{prefix}{self.next_id}"
        self.next_id += 1
        return value

    def push_log(self, message: str) -> None:
        self.event_log = [f"{self.time_label()} {message}"] + self.event_log
        del self.event_log[EVENT_LOG_LIMIT:]

    def record_revenue(self, amount: int) -> None:
        self.revenue_history.append((self.tick, int(amount)))
        del self.revenue_history[:-REVENUE_HISTORY_LIMIT]

    def add_changelog(self, kind: str, message: str, details: Optional[str] = None) -> None:
        entry = ChangelogEntry(
            type=kind,
            message=message,
            tick=self.tick,
            day=self.day_index,
            details=details,
        )
        self.changelog = [entry] + self.changelog
        del self.changelog[CHANGELOG_LIMIT:]

    def prune_closed_jobs(self) -> None:
        """Keep only the newest ``CLOSED_JOB_LIMIT`` done or failed jobs."""

        closed = 0
        retained: List[Job] = []
        for job in self.jobs:
            if not job.is_open:
                closed += 1
                if closed > CLOSED_JOB_LIMIT:
                    self.grace_jobs.discard(job.id)
                    continue
            retained.append(job)
        self.jobs = retained

    def adjust_reputation(self, delta: int) -> None:
        self.reputation = min(REPUTATION_MAX, max(REPUTATION_MIN, int(self.reputation + delta)))

    def ensure_bounds(self) -> None:
        for editor in self.editors:
            editor.ensure_bounds()
        for pc in self.workstations:
            pc.ensure_bounds()
        self.reputation = min(REPUTATION_MAX, max(REPUTATION_MIN, int(self.reputation)))
        self.managers = max(0, int(self.managers))
        self.offer_cooldown = max(0, int(self.offer_cooldown))


GameState.model_rebuild()
