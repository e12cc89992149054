"""Headless driver: advance a save slot by a number of in-game hours."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from pydantic import ValidationError

from .storage import get_service

log = logging.getLogger("tycoon")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Advance a studio save slot.")
    parser.add_argument("--slot", default="default", help="save slot name")
    parser.add_argument("--hours", type=int, default=24, help="ticks to simulate")
    parser.add_argument("--new", action="store_true", help="start a fresh game in the slot")
    parser.add_argument("--verbose", action="store_true", help="log every tick")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(asctime)s] %(levelname)s: %(message)s")
    service = get_service()
    try:
        if args.new:
            service.new_game(args.slot)
        state, events = service.advance(args.slot, args.hours)
    except (ValidationError, ValueError) as exc:
        log.error("Save slot %s is corrupted: %s", args.slot, exc)
        sys.exit(1)
    service.save(args.slot, state)
    for event in events:
        log.info("%s", event.message)
    log.info(
        "Slot %s at day %s: cash=$%s reputation=%s editors=%s",
        args.slot,
        state.day,
        state.cash,
        state.reputation,
        len(state.editors),
    )


if __name__ == "__main__":
    main()
