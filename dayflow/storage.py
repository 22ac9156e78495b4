"""JSON persistence for the current plan, history, notes and open view."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional

from .models import Plan

logger = logging.getLogger(__name__)

_PLAN_FILE = "current_plan.json"
_HISTORY_FILE = "history.json"
_NOTES_FILE = "notes.txt"
_VIEW_FILE = "view.txt"


class PlanStore:
    """File-backed store rooted at a data directory."""

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir)

    def save_plan(self, plan: Plan) -> None:
        self._write_json(_PLAN_FILE, plan.to_dict())
        logger.debug("Saved plan %s with %d tasks", plan.id, len(plan.tasks))

    def load_plan(self) -> Optional[Plan]:
        data = self._read_json(_PLAN_FILE)
        if data is None:
            return None
        return Plan.from_dict(data)

    def save_history(self, history: Iterable[Plan]) -> None:
        entries = [plan.to_dict() for plan in history]
        self._write_json(_HISTORY_FILE, entries)
        logger.debug("Saved %d history entries", len(entries))

    def load_history(self) -> List[Plan]:
        data = self._read_json(_HISTORY_FILE)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError(f"Invalid history file {self._path(_HISTORY_FILE)}: expected a list")
        return [Plan.from_dict(entry) for entry in data]

    def save_notes(self, text: str) -> None:
        self._write_text(_NOTES_FILE, text)

    def load_notes(self) -> str:
        return self._read_text(_NOTES_FILE) or ""

    def save_view(self, name: str) -> None:
        self._write_text(_VIEW_FILE, name)

    def load_view(self) -> Optional[str]:
        text = self._read_text(_VIEW_FILE)
        if text is None:
            return None
        return text.strip() or None

    # --- File helpers ---------------------------------------------------------

    def _path(self, name: str) -> Path:
        return self.base_dir / name

    def _write_json(self, name: str, payload: Any) -> None:
        self._write_text(name, json.dumps(payload, indent=2))

    def _read_json(self, name: str) -> Any:
        text = self._read_text(name)
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {self._path(name)}: {exc}") from exc

    def _write_text(self, name: str, text: str) -> None:
        path = self._path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            handle.write(text)

    def _read_text(self, name: str) -> Optional[str]:
        path = self._path(name)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return handle.read()


def append_or_replace(history: Iterable[Plan], plan: Plan) -> List[Plan]:
    """Record a started day; restarting a known plan replaces its entry."""
    entries = list(history)
    for index, entry in enumerate(entries):
        if entry.id == plan.id:
            entries[index] = plan
            return entries
    entries.append(plan)
    return entries


def replace_existing(history: Iterable[Plan], plan: Plan) -> List[Plan]:
    """Mirror a live plan edit into history without adding a new entry."""
    return [plan if entry.id == plan.id else entry for entry in history]


def history_newest_first(history: Iterable[Plan]) -> List[Plan]:
    return sorted(history, key=lambda plan: plan.saved_at, reverse=True)
