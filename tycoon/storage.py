"""Module-level facade over the default game service."""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .game import DataStore, GameService
from .game.engine import TickEvent
from .models import GameState

__all__ = [
    "get_service",
    "get_config",
    "load_state",
    "save_state",
    "advance",
    "iter_slots",
]

_STORE = DataStore()
_SERVICE = GameService(_STORE)


def get_service() -> GameService:
    return _SERVICE


def get_config() -> dict:
    return _SERVICE.config


def load_state(slot: str) -> Optional[GameState]:
    return _SERVICE.load(slot)


def save_state(slot: str, state: GameState) -> None:
    _SERVICE.save(slot, state)


def advance(slot: str, ticks: int = 1) -> Tuple[GameState, List[TickEvent]]:
    return _SERVICE.advance(slot, ticks)


def iter_slots() -> Iterable[str]:
    return _STORE.iter_slots()
