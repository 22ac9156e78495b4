"""Data models shared across the Dayflow application."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

_NON_DIGITS = re.compile(r"\D")


class Meridiem(str, Enum):
    AM = "AM"
    PM = "PM"


class TrackPhase(str, Enum):
    WAITING = "WAITING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class BreakStatus(str, Enum):
    NONE = "NONE"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"


class Signal(str, Enum):
    """Notification kinds handed to the chime player."""

    TASK_COMPLETE = "COMPLETE"
    BREAK_FINISHED = "BREAK"


@dataclass(frozen=True)
class TimeInput:
    """Time of day exactly as a user edits it: 1-12, 0-59 and AM/PM."""

    hours: int = 12
    minutes: int = 0
    meridiem: Meridiem = Meridiem.AM

    def to_dict(self) -> Dict[str, str]:
        return {
            "hours": f"{self.hours:02d}",
            "minutes": f"{self.minutes:02d}",
            "ampm": self.meridiem.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeInput":
        """Build a value from stored fields, repairing anything malformed."""
        hours = clamp_hour(_parse_int(data.get("hours"), default=12))
        minutes = parse_minute_text(str(data.get("minutes", "")))
        raw_meridiem = str(data.get("ampm", "AM")).upper()
        meridiem = Meridiem.PM if raw_meridiem == "PM" else Meridiem.AM
        return cls(hours=hours, minutes=minutes, meridiem=meridiem)

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d} {self.meridiem.value}"


@dataclass
class Task:
    """Serializable representation of a single time block."""

    id: str
    name: str
    start: TimeInput
    end: TimeInput

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        try:
            return cls(
                id=str(data["id"]),
                name=str(data.get("name") or ""),
                start=TimeInput.from_dict(data["start"]),
                end=TimeInput.from_dict(data["end"]),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"Invalid task entry: {data!r}") from exc

    def has_name(self) -> bool:
        """Return True when the task carries a non-blank name."""
        return bool(self.name.strip())


@dataclass
class Plan:
    """One day's schedule; `tasks` is kept sorted by start time."""

    id: str
    saved_at: str
    tasks: List[Task] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "savedAt": self.saved_at,
            "tasks": [task.to_dict() for task in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Plan":
        if not isinstance(data, dict):
            raise ValueError(f"Invalid plan entry: {data!r}")
        tasks = data.get("tasks", [])
        if not isinstance(tasks, list):
            raise ValueError("Invalid plan entry: tasks must be a list")
        try:
            plan_id = str(data["id"])
        except KeyError as exc:
            raise ValueError("Invalid plan entry: missing id") from exc
        return cls(
            id=plan_id,
            saved_at=str(data.get("savedAt", "")),
            tasks=[Task.from_dict(task) for task in tasks],
        )


@dataclass(frozen=True)
class TrackState:
    """Live status derived from a plan and an instant; never mutated."""

    phase: TrackPhase = TrackPhase.WAITING
    active_index: Optional[int] = None
    remaining_seconds: int = 0
    remaining_fraction: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.phase is TrackPhase.ACTIVE and self.active_index is not None


def _parse_int(value: Any, *, default: int) -> int:
    text = str(value).strip() if value is not None else ""
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        return default


# --- Input repair for the live-editing path ------------------------------------


def sanitize_minute_text(text: str) -> str:
    """Keystroke filter for the minute field: digits only, at most two."""
    return _NON_DIGITS.sub("", text or "")[:2]


def parse_minute_text(text: str) -> int:
    """Commit a minute field; blanks and garbage become 0, range is clamped."""
    digits = sanitize_minute_text(text)
    if not digits:
        return 0
    return max(0, min(int(digits), 59))


def clamp_hour(value: int) -> int:
    return max(1, min(int(value), 12))
