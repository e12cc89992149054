"""Static game content: job types, tiers, shop items, research and perks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class JobType:
    name: str
    base_hours: int
    base_pay: int
    difficulty: int
    tier: int


@dataclass(frozen=True)
class JobTier:
    name: str
    reputation_required: int
    multiplier: float


@dataclass(frozen=True)
class Upgrade:
    id: str
    name: str
    cost: int
    speed_bonus: float = 0.0
    spawn_bonus: float = 0.0
    lead_cap_bonus: int = 0


@dataclass(frozen=True)
class Perk:
    """A research upgrade or prestige perk: ``level * value`` of ``effect``."""

    id: str
    name: str
    effect: str
    value: float


@dataclass(frozen=True)
class MemeEvent:
    id: str
    title: str
    description: str
    cash_delta: int


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    requirement: int


JOB_TIERS: Tuple[JobTier, ...] = (
    JobTier("Tier 1", 0, 1.0),
    JobTier("Tier 2", 10, 1.2),
    JobTier("Tier 3", 25, 1.4),
    JobTier("Tier 4", 50, 1.6),
    JobTier("Tier 5", 90, 2.0),
)

JOB_TYPES: Tuple[JobType, ...] = (
    JobType("Reel (30s)", 8, 350, 35, 1),
    JobType("Montage (60s)", 16, 800, 55, 2),
    JobType("Ad (15s)", 10, 650, 60, 2),
    JobType("Event Recap (90s)", 24, 1600, 70, 3),
    JobType("Cinematic (2m)", 30, 2200, 80, 4),
)

UPGRADES: Tuple[Upgrade, ...] = (
    Upgrade("flowkit", "FlowKit V2", 240, speed_bonus=0.10),
    Upgrade("fxpack", "FX Essentials", 250, speed_bonus=0.05),
    Upgrade("sfxpack", "SFX Library", 90, speed_bonus=0.05),
    Upgrade("whooshes", "Whooshes & Hits", 80, speed_bonus=0.05),
    Upgrade("glowext", "Glow Extension", 50, speed_bonus=0.10),
    Upgrade("agency", "Agency membership", 900, spawn_bonus=0.05, lead_cap_bonus=2),
)

RESEARCH: Tuple[Perk, ...] = (
    Perk("progress_boost", "Workflow Optimization", "progress", 0.05),
    Perk("payout_boost", "Client Relations", "payout", 0.03),
    Perk("fail_penalty_reduction", "Quality Assurance", "fail_penalty", 0.10),
    Perk("energy_efficiency", "Energy Management", "energy_drain", 0.05),
    Perk("reputation_gain", "Reputation Management", "reputation", 0.08),
)

PRESTIGE_PERKS: Tuple[Perk, ...] = (
    Perk("spawn_rate", "Marketing Mastery", "spawn_rate", 0.02),
    Perk("salary_reduction", "Negotiation Skills", "salary_reduction", 0.03),
    Perk("training_efficiency", "Learning Optimization", "training_efficiency", 0.05),
    Perk("pc_efficiency", "Hardware Mastery", "pc_efficiency", 0.04),
    Perk("energy_efficiency", "Work-Life Balance", "energy_efficiency", 0.02),
)

MEME_EVENTS: Tuple[MemeEvent, ...] = (
    MemeEvent("suite_renewal", "Subscription Renewal", "The editing suite subscription auto-renewed. Again.", -200),
    MemeEvent("plugin_renewal", "Plugin Renewal", "Upscaler plugins need renewal.", -200),
    MemeEvent("drive_recovery", "Hard Drive Recovery", "Project files corrupted; emergency data recovery.", -1000),
    MemeEvent("rare_tip", "Rare Client Tip", "A grateful client left an unexpected tip.", 500),
    MemeEvent("coffee_spill", "Coffee Spill Incident", "Someone spilled coffee on the new equipment.", -150),
    MemeEvent("viral_moment", "Viral Moment", "A delivery went viral. Exposure bonus.", 300),
)

ACHIEVEMENTS: Dict[str, Achievement] = {
    a.id: a
    for a in (
        Achievement("flawless_deliveries", "Perfect Editor", 10),
        Achievement("large_team", "Studio Boss", 50),
        Achievement("overnight_jobs", "Night Owl", 5),
        Achievement("high_reputation", "Legendary Studio", 200),
        Achievement("rich_studio", "Millionaire", 50000),
        Achievement("speed_demon", "Speed Demon", 20),
        Achievement("quality_master", "Quality Master", 30),
        Achievement("workaholic", "Workaholic", 48),
        Achievement("market_cycler", "Market Master", 10),
        Achievement("research_master", "Research Master", 3),
    )
}

BRANDS: Tuple[str, ...] = (
    "Porsche 911 GT3 RS",
    "Lamborghini Aventador",
    "Ferrari 488 Pista",
    "McLaren 765LT",
    "Nissan GT-R R35",
    "Toyota Supra",
    "BMW M3",
    "Audi RS6",
    "Ford Mustang GT",
    "Chevrolet Corvette C8",
    "Mazda RX-7",
    "Subaru WRX STI",
    "Honda NSX",
)

CLIENT_FIRST = ("Tom", "Ava", "Blake", "Mia", "Ezra", "Leo", "Noah", "Isla", "Zara", "Luca", "Aria", "Kai")
CLIENT_LAST = ("Francis", "Evans", "Singh", "Cohen", "Patel", "Martin", "Brown", "Lee", "Silva", "King")
CLIENT_BUSINESS = ("Motors", "Supercars", "Detailing", "Media", "Club", "Racing", "Auto", "Garage")

# Hiring draws from this pool; a hired name never comes back in the same save.
NAME_POOL: Tuple[str, ...] = (
    "cut.by.ana", "frame.forge", "lumen.edits", "redline.media", "apex.frames",
    "nightshift.vfx", "torque.films", "gridline.cuts", "velvet.grade", "motion.mill",
    "keyframe.kid", "boost.visuals", "slipstream.fx", "overrev.media", "drift.studio",
    "pitlane.films", "chrome.cuts", "turbo.timeline", "lap.zero", "shutter.sam",
    "render.rae", "proxy.pete", "lut.lou", "color.cass", "sync.sol",
    "jcut.jo", "lcut.lee", "roto.rin", "mask.max", "grain.gia",
    "tempo.ty", "speedramp.sid", "bokeh.bea", "dolly.dex", "gimbal.gus",
    "fpv.finn", "ndfilter.nia", "iso.ike", "fstop.fay", "codec.cole",
)


def job_type(name: str) -> Optional[JobType]:
    return next((t for t in JOB_TYPES if t.name == name), None)


def tier_for(tier_number: int) -> JobTier:
    index = max(1, min(len(JOB_TIERS), int(tier_number))) - 1
    return JOB_TIERS[index]


def unlocked_tier(reputation: int) -> int:
    """Highest tier number whose reputation requirement is met (at least 1)."""

    unlocked = 1
    for number, tier in enumerate(JOB_TIERS, start=1):
        if reputation >= tier.reputation_required:
            unlocked = number
    return unlocked


def available_job_types(reputation: int) -> Tuple[JobType, ...]:
    ceiling = unlocked_tier(reputation)
    return tuple(t for t in JOB_TYPES if t.tier <= ceiling)


def upgrade(upgrade_id: str) -> Optional[Upgrade]:
    return next((u for u in UPGRADES if u.id == upgrade_id), None)


def research(research_id: str) -> Optional[Perk]:
    return next((r for r in RESEARCH if r.id == research_id), None)


__all__ = [
    "ACHIEVEMENTS",
    "BRANDS",
    "JOB_TIERS",
    "JOB_TYPES",
    "MEME_EVENTS",
    "NAME_POOL",
    "PRESTIGE_PERKS",
    "RESEARCH",
    "UPGRADES",
    "Achievement",
    "JobTier",
    "JobType",
    "MemeEvent",
    "Perk",
    "Upgrade",
    "available_job_types",
    "job_type",
    "research",
    "tier_for",
    "unlocked_tier",
    "upgrade",
]
