"""Domain errors raised by player actions.

Every error leaves the state untouched; callers surface the message as a toast.
"""

from __future__ import annotations


class GameError(RuntimeError):
    """Base class for refusals of a player action."""


class InsufficientFundsError(GameError):
    def __init__(self, cost: int, cash: int, action: str = "this action"):
        self.cost = int(cost)
        self.cash = int(cash)
        self.action = action
        super().__init__(f"Not enough cash for {action}: need ${self.cost}, have ${self.cash}.")


class NoCandidatesError(GameError):
    """Nobody left to hire (name pool exhausted or no manager slot)."""


class InvalidTargetError(GameError):
    """Unknown id, already owned upgrade or maxed research."""


class PrestigeRequirementError(GameError):
    pass


class DailyLimitError(GameError):
    """A per-day allowance (marketing blasts) is used up."""


__all__ = [
    "GameError",
    "InsufficientFundsError",
    "NoCandidatesError",
    "InvalidTargetError",
    "PrestigeRequirementError",
    "DailyLimitError",
]
