"""Editor energy / rest / burnout state machine and workstation crashes."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import Editor, Workstation
from .balance import DEFAULT_BALANCE, BalanceProfile
from .modifiers import ModifierBundle
from .utils import roll_int, round_half_up


@dataclass
class EditorUpdate:
    """Result of one tick for one editor, computed from the pre-tick snapshot."""

    editor_id: str
    energy: int
    resting: bool
    work_hours: int
    events: List[str] = field(default_factory=list)


def plan_editor(editor: Editor, mods: ModifierBundle, balance: BalanceProfile = DEFAULT_BALANCE) -> EditorUpdate:
    staff = balance.staff
    top = staff.energy_max

    if not editor.assigned_job_id:
        return EditorUpdate(
            editor_id=editor.id,
            energy=min(top, editor.energy + staff.idle_regen),
            resting=False,
            work_hours=editor.work_hours,
        )

    if editor.resting:
        energy = min(top, editor.energy + staff.resting_regen)
        if energy >= top:
            return EditorUpdate(
                editor_id=editor.id,
                energy=energy,
                resting=False,
                work_hours=0,
                events=[f"☕ {editor.name} is back from a coffee break, recharged and ready to edit!"],
            )
        return EditorUpdate(editor.id, energy, True, editor.work_hours)

    burnout = balance.burnout
    multiplier = burnout.energy_drain_multiplier if editor.work_hours > burnout.threshold else 1.0
    drain = round_half_up(1 * multiplier * mods.energy_drain_factor())
    energy = max(0, min(top, editor.energy - drain))
    update = EditorUpdate(
        editor_id=editor.id,
        energy=energy,
        resting=energy <= staff.rest_threshold,
        work_hours=editor.work_hours + 1,
    )
    if update.resting:
        update.events.append(f"☕ {editor.name} needs a coffee break.")
    return update


def can_take_assignment(editor: Editor, balance: BalanceProfile = DEFAULT_BALANCE) -> bool:
    return (
        editor.assigned_job_id is None
        and not editor.resting
        and editor.energy >= balance.staff.assign_min_energy
    )


def crash_chance(pc: Workstation, balance: BalanceProfile = DEFAULT_BALANCE) -> float:
    crash = balance.crash
    return max(0.0, crash.base_chance - (pc.stability / 100) * crash.stability_factor)


def roll_crash(pc: Workstation, rng: random.Random, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    """Progress lost to a crash this tick (0 when the workstation holds up)."""

    chance = crash_chance(pc, balance)
    if chance <= 0 or rng.random() >= chance:
        return 0
    low, high = balance.crash.penalty
    return roll_int(rng, low, high)


def onboarding_hours(editor_count: int, balance: BalanceProfile = DEFAULT_BALANCE) -> int:
    staff = balance.staff
    return round_half_up(staff.onboarding_base_hours + editor_count * staff.onboarding_per_editor)


def make_editor(
    editor_id: str,
    name: str,
    tick: int,
    editor_count: int,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> Editor:
    staff = balance.staff
    return Editor(
        id=editor_id,
        name=name,
        skill=staff.editor_skill,
        speed=staff.editor_speed,
        energy=staff.energy_max,
        salary=staff.editor_salary,
        onboarding_complete=tick + onboarding_hours(editor_count, balance),
    )


def make_workstation(
    pc_id: str,
    number: int,
    rng: random.Random,
    balance: BalanceProfile = DEFAULT_BALANCE,
) -> Workstation:
    staff = balance.staff
    return Workstation(
        id=pc_id,
        name=f"PC-{number:02d}",
        tier=1,
        power=roll_int(rng, *staff.pc_power_roll),
        stability=roll_int(rng, *staff.pc_stability_roll),
    )


def first_free_editor(editors: List[Editor], balance: BalanceProfile = DEFAULT_BALANCE) -> Optional[Editor]:
    return next((e for e in editors if can_take_assignment(e, balance)), None)


def first_free_pc(pcs: List[Workstation]) -> Optional[Workstation]:
    return next((p for p in pcs if p.assigned_job_id is None), None)


__all__ = [
    "EditorUpdate",
    "can_take_assignment",
    "crash_chance",
    "first_free_editor",
    "first_free_pc",
    "make_editor",
    "make_workstation",
    "onboarding_hours",
    "plan_editor",
    "roll_crash",
]
