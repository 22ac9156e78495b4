"""Plan validation run before a task list is accepted as a plan."""
from __future__ import annotations

from typing import Optional, Sequence

from .models import Task
from .timeutil import to_minutes


def validate_tasks(tasks: Sequence[Task]) -> Optional[str]:
    """Check a task list for missing names, inverted ranges and overlaps.

    Returns a message describing the first problem found, or None when the
    list can be committed. Tasks may not span midnight: an end at or before
    the start is always an error. Ranges are half-open, so a task ending
    exactly when another starts does not overlap it.
    """
    if not tasks:
        return "Please add at least one task."

    for i, task in enumerate(tasks):
        if not task.has_name():
            return f"Task #{i + 1} is missing a name."
        if to_minutes(task.end) <= to_minutes(task.start):
            return f'Task "{task.name}" ends before it starts.'

        for j, other in enumerate(tasks):
            if i != j and overlaps(task, other):
                return f'Task "{task.name}" overlaps with "{other.name}".'

    return None


def overlaps(first: Task, second: Task) -> bool:
    """Return True when two tasks share at least one minute."""
    return to_minutes(first.start) < to_minutes(second.end) and to_minutes(first.end) > to_minutes(second.start)
