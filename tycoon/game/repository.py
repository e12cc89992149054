"""Filesystem-backed persistence for save slots and exports."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Iterable, Optional

_SLOT_PATTERN = re.compile(r"[^A-Za-z0-9_.-]+")


class DataStore:
    """Utility wrapper around the project's data directories."""

    def __init__(self, base_dir: Path | str | None = None):
        default_base = Path(__file__).resolve().parents[2]
        if base_dir is None:
            resolved_base = default_base
        else:
            resolved_base = Path(base_dir).expanduser()
            if not resolved_base.is_absolute():
                resolved_base = default_base / resolved_base
        resolved_base = resolved_base.resolve()
        self.base_dir = resolved_base
        self._base_anchor = resolved_base
        self.data_dir = self.base_dir / "data"
        self.saves_dir = self.data_dir / "saves"
        self.exports_dir = self.data_dir / "exports"
        self._ensure_dirs()

    def _coerce_path(self, value: Path | str, relative_to: Path) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = relative_to / path
        return path.resolve()

    def _ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.saves_dir.mkdir(parents=True, exist_ok=True)
        self.exports_dir.mkdir(parents=True, exist_ok=True)

    def configure_paths(self, paths: dict | None) -> None:
        """Apply path overrides from configuration."""

        if not isinstance(paths, dict):
            self._ensure_dirs()
            return

        base_override = paths.get("base_dir")
        if base_override is not None:
            base_dir = self._coerce_path(base_override, self._base_anchor)
        else:
            base_dir = self._base_anchor
        self.base_dir = base_dir

        data_dir_value = paths.get("data_dir")
        saves_dir_value = paths.get("saves_dir") or paths.get("saves")
        exports_dir_value = paths.get("exports_dir") or paths.get("exports")

        data_dir = base_dir / "data"
        if data_dir_value is not None:
            data_dir = self._coerce_path(data_dir_value, base_dir)
        saves_dir = data_dir / "saves"
        exports_dir = data_dir / "exports"

        if saves_dir_value is not None:
            saves_dir = self._coerce_path(saves_dir_value, base_dir)
        if exports_dir_value is not None:
            exports_dir = self._coerce_path(exports_dir_value, base_dir)

        self.data_dir = data_dir
        self.saves_dir = saves_dir
        self.exports_dir = exports_dir
        self._ensure_dirs()

    # ------------------------------------------------------------------
    # Generic JSON helpers
    # ------------------------------------------------------------------
    def read_json(self, path: Path) -> Optional[dict]:
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def write_json(self, path: Path, data: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=2)

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    @staticmethod
    def slot_name(slot: str) -> str:
        cleaned = _SLOT_PATTERN.sub("_", str(slot).strip())
        return cleaned or "default"

    def save_path(self, slot: str) -> Path:
        return self.saves_dir / f"{self.slot_name(slot)}.json"

    def export_path(self, slot: str, tick: int) -> Path:
        return self.exports_dir / f"{self.slot_name(slot)}-t{int(tick)}.json"

    def iter_slots(self) -> Iterable[str]:
        for entry in sorted(self.saves_dir.glob("*.json")):
            yield entry.stem
