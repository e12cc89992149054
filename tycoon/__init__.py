"""Tick-driven simulation core of an editing-studio tycoon game."""
