"""High level game service: config, rng, save slots and autosave."""

from __future__ import annotations

import json
import logging
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from . import engine
from .balance import BalanceProfile, load_balance_profile
from .engine import TickEvent
from .health import HealthCheckReport
from .repository import DataStore
from ..models import GAME_VERSION, GameState

log = logging.getLogger("tycoon")

DEFAULT_AUTOSAVE_INTERVAL = 24


class GameService:
    """Runs save slots on top of the pure engine and the data store."""

    def __init__(self, store: DataStore | None = None):
        self.store = store or DataStore()
        self._config_cache: dict | None = None
        self._config_cache_key: tuple[str, int | None] | None = None
        self._config_path: Path | None = None
        self._config_default_base = self.store.base_dir
        self._balance_cache: BalanceProfile | None = None
        self._rng: random.Random | None = None
        self._sessions: Dict[str, GameState] = {}

    def _load_config(self) -> dict:
        candidates: list[Path] = []
        if self._config_path is not None:
            candidates.append(self._config_path)

        default_path = (self._config_default_base / "config.json").resolve()
        if default_path not in candidates:
            candidates.append(default_path)

        current_path = (self.store.base_dir / "config.json").resolve()
        if current_path not in candidates:
            candidates.append(current_path)

        path = candidates[0]
        mtime: int | None = None
        for candidate in candidates:
            try:
                current_mtime = candidate.stat().st_mtime_ns
            except FileNotFoundError:
                continue

            path = candidate
            mtime = current_mtime
            if self._config_path != candidate:
                self._config_path = candidate
            break

        cache_key = (str(path), mtime)

        if self._config_cache is not None and self._config_cache_key == cache_key:
            return self._config_cache

        if mtime is None:
            data = {}
        else:
            try:
                with path.open("r", encoding="utf-8") as handle:
                    data = json.load(handle)
            except (FileNotFoundError, json.JSONDecodeError) as exc:
                log.warning("Ignoring unreadable config %s: %s", path, exc)
                data = {}

        if not isinstance(data, dict):
            data = {}

        paths_cfg = data.get("paths")
        self.store.configure_paths(paths_cfg if isinstance(paths_cfg, dict) else None)

        self._config_cache = data
        self._config_cache_key = cache_key
        self._balance_cache = None
        return self._config_cache

    def get_config(self) -> dict:
        return self._load_config()

    @property
    def config(self) -> dict:
        return self._load_config()

    def get_balance_profile(self) -> BalanceProfile:
        if self._balance_cache is None:
            config = self._load_config()
            balance_cfg = config.get("balance")
            mapping = balance_cfg if isinstance(balance_cfg, dict) else None
            self._balance_cache = load_balance_profile(mapping)
        return self._balance_cache

    def _game_settings(self) -> dict:
        game_cfg = self._load_config().get("game")
        return game_cfg if isinstance(game_cfg, dict) else {}

    @property
    def autosave_interval(self) -> int:
        raw = self._game_settings().get("autosave_interval", DEFAULT_AUTOSAVE_INTERVAL)
        try:
            return max(1, int(raw))
        except (TypeError, ValueError):
            return DEFAULT_AUTOSAVE_INTERVAL

    @property
    def rng(self) -> random.Random:
        if self._rng is None:
            self._rng = random.Random(self._game_settings().get("seed"))
        return self._rng

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------
    def export_state(self, state: GameState) -> dict:
        return {
            "version": GAME_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "game_state": state.model_dump(mode="json", by_alias=True),
        }

    def import_state(self, payload: dict) -> GameState:
        """Validate an exported payload; raises ``pydantic.ValidationError`` on bad data."""

        if not isinstance(payload, dict):
            raise ValueError("Save payload must be a JSON object.")
        raw_state = payload.get("game_state", payload)
        state = GameState.model_validate(raw_state)
        version = payload.get("version")
        if version is not None and version != GAME_VERSION:
            log.warning("Importing save from version %s into %s", version, GAME_VERSION)
            state.add_changelog(
                "migration",
                f"Save migrated from {version} to {GAME_VERSION}",
                details=str(payload.get("timestamp") or ""),
            )
        state.ensure_bounds()
        return state

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    def save(self, slot: str, state: GameState | None = None) -> Path:
        if state is None:
            state = self.state(slot)
        self._sessions[slot] = state
        path = self.store.save_path(slot)
        self.store.write_json(path, self.export_state(state))
        return path

    def load(self, slot: str) -> Optional[GameState]:
        raw = self.store.read_json(self.store.save_path(slot))
        if not raw:
            return None
        state = self.import_state(raw)
        self._sessions[slot] = state
        return state

    def new_game(self, slot: str) -> GameState:
        state = engine.new_game(self.get_balance_profile())
        self.save(slot, state)
        log.info("New game in slot %s", slot)
        return state

    def state(self, slot: str) -> GameState:
        """Current state of a slot: in memory, on disk, or a fresh game."""

        if slot in self._sessions:
            return self._sessions[slot]
        loaded = self.load(slot)
        if loaded is not None:
            return loaded
        return self.new_game(slot)

    def close(self, slot: str) -> None:
        if slot in self._sessions:
            self.save(slot)
            del self._sessions[slot]

    def iter_slots(self) -> Iterable[str]:
        return self.store.iter_slots()

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------
    def advance(self, slot: str, ticks: int = 1) -> Tuple[GameState, List[TickEvent]]:
        balance = self.get_balance_profile()
        interval = self.autosave_interval
        state = self.state(slot)
        events: List[TickEvent] = []
        for _ in range(max(0, int(ticks))):
            state, tick_events = engine.advance_tick(state, self.rng, balance)
            events.extend(tick_events)
            if any(event.kind == "catastrophe" for event in tick_events):
                log.error("Slot %s was wiped by the virus", slot)
            if state.tick - state.last_autosave_tick >= interval or state.tick < state.last_autosave_tick:
                state.last_autosave_tick = state.tick
                self.save(slot, state)
                log.debug("Autosaved slot %s at tick %s", slot, state.tick)
        self._sessions[slot] = state
        return state, events

    def _act(self, slot: str, action: Callable[..., GameState], *args: Any) -> GameState:
        updated = action(self.state(slot), *args)
        self.save(slot, updated)
        return updated

    def accept_job(self, slot: str, job_id: str) -> GameState:
        return self._act(slot, engine.accept_job, job_id, self.get_balance_profile())

    def assign(self, slot: str, job_id: str, editor_id: str, pc_id: str) -> GameState:
        return self._act(slot, engine.assign, job_id, editor_id, pc_id, self.get_balance_profile())

    def unassign(self, slot: str, job_id: str) -> GameState:
        return self._act(slot, engine.unassign, job_id)

    def set_auto_assign(self, slot: str, enabled: bool) -> GameState:
        return self._act(slot, engine.set_auto_assign, enabled)

    def hire_editor(self, slot: str) -> GameState:
        return self._act(slot, engine.hire_editor, self.rng, self.get_balance_profile())

    def hire_manager(self, slot: str) -> GameState:
        return self._act(slot, engine.hire_manager, self.get_balance_profile())

    def buy_pc(self, slot: str) -> GameState:
        return self._act(slot, engine.buy_pc, self.rng, self.get_balance_profile())

    def buy_upgrade(self, slot: str, upgrade_id: str) -> GameState:
        return self._act(slot, engine.buy_upgrade, upgrade_id)

    def train_editor(self, slot: str, editor_id: str) -> GameState:
        return self._act(slot, engine.train_editor, editor_id, self.rng, self.get_balance_profile())

    def upgrade_pc(self, slot: str, pc_id: str) -> GameState:
        return self._act(slot, engine.upgrade_pc, pc_id, self.rng, self.get_balance_profile())

    def buy_research(self, slot: str, research_id: str) -> GameState:
        return self._act(slot, engine.buy_research, research_id, self.get_balance_profile())

    def perform_prestige(self, slot: str) -> GameState:
        return self._act(slot, engine.perform_prestige, self.get_balance_profile())

    def run_marketing(self, slot: str) -> GameState:
        return self._act(slot, engine.run_marketing, self.rng, self.get_balance_profile())

    def buy_cracked_plugins(self, slot: str) -> GameState:
        return self._act(slot, engine.buy_cracked_plugins, self.rng, self.get_balance_profile())

    def revert_to_shadow(self, slot: str) -> GameState:
        return self._act(slot, engine.revert_to_shadow)

    def dismiss_health_warning(self, slot: str) -> GameState:
        return self._act(slot, engine.dismiss_health_warning)

    def run_health_check(self, slot: str) -> HealthCheckReport:
        return engine.run_health_check(self.state(slot), self.rng, self.get_balance_profile())

    def export_to_file(self, slot: str) -> Path:
        """Write an export of the slot; exporting also quarantines an armed virus."""

        state = self.state(slot)
        if state.virus.armed:
            state = engine.export_during_virus(state)
            self.save(slot, state)
            log.info("Virus defused in slot %s by export at tick %s", slot, state.tick)
        path = self.store.export_path(slot, state.tick)
        self.store.write_json(path, self.export_state(state))
        return path

    def import_from_file(self, slot: str, path: Path | str) -> GameState:
        raw = self.store.read_json(Path(path))
        if raw is None:
            raise FileNotFoundError(f"Export not found: {path}")
        state = self.import_state(raw)
        self.save(slot, state)
        return state
