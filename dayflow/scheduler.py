"""Ordering, shifting and live re-planning of task lists.

Every function here returns a new list and leaves its input untouched. Tasks
whose times change are replaced by new Task objects; unchanged tasks are
shared with the input.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_TASK_MINUTES
from .models import Plan, Task, TimeInput
from .timeutil import add_minutes, generate_id, minutes_to_time_input, to_minutes
from .validation import validate_tasks


def sort_tasks(tasks: Sequence[Task]) -> List[Task]:
    """Sort tasks by start time; ties keep their original relative order."""
    return sorted(tasks, key=lambda task: to_minutes(task.start))


def shift_schedule(tasks: Sequence[Task], from_index: int, minutes: int) -> List[Task]:
    """Extend one task's end and move every later task by `minutes`.

    Earlier tasks are untouched. The result is neither validated nor
    re-sorted, and a negative shift may leave the task at `from_index` ending
    before it starts; callers re-validate when that matters.
    """
    shifted = list(tasks)
    if from_index < 0 or from_index >= len(shifted):
        return shifted

    current = shifted[from_index]
    shifted[from_index] = replace(current, end=add_minutes(current.end, minutes))

    for index in range(from_index + 1, len(shifted)):
        task = shifted[index]
        shifted[index] = replace(
            task,
            start=add_minutes(task.start, minutes),
            end=add_minutes(task.end, minutes),
        )
    return shifted


def delay_task(tasks: Sequence[Task], active_index: Optional[int], minutes: int) -> List[Task]:
    """Push the active task's end, and everything after it, `minutes` later."""
    if active_index is None:
        return list(tasks)
    return shift_schedule(tasks, active_index, minutes)


def finish_early(tasks: Sequence[Task], active_index: Optional[int], now_minutes: int) -> List[Task]:
    """Close the active task at `now_minutes` and pull the rest of the day forward.

    The boundary between the active task and its successor is snapped to
    `now_minutes` so no gap or overlap is left behind.
    """
    if active_index is None or not 0 <= active_index < len(tasks):
        return list(tasks)

    early_by = to_minutes(tasks[active_index].end) - now_minutes
    if early_by <= 0:
        return list(tasks)

    now = minutes_to_time_input(now_minutes)
    updated = shift_schedule(tasks, active_index, -early_by)
    updated[active_index] = replace(updated[active_index], end=now)
    if active_index + 1 < len(updated):
        updated[active_index + 1] = replace(updated[active_index + 1], start=now)
    return updated


def append_task(
    tasks: Sequence[Task],
    name: str,
    start: TimeInput,
    end: TimeInput,
    *,
    task_id: Optional[str] = None,
) -> List[Task]:
    task = Task(id=task_id or generate_id(), name=name, start=start, end=end)
    return sort_tasks([*tasks, task])


_UNSET = object()


def edit_task(tasks: Sequence[Task], task_id: str, *, name=_UNSET, start=_UNSET, end=_UNSET) -> List[Task]:
    """Replace fields of the task with `task_id` and return the re-sorted list."""
    changes = {}
    if name is not _UNSET:
        changes["name"] = name
    if start is not _UNSET:
        changes["start"] = start
    if end is not _UNSET:
        changes["end"] = end
    if not any(task.id == task_id for task in tasks):
        return list(tasks)
    return sort_tasks([replace(task, **changes) if task.id == task_id else task for task in tasks])


def remove_task(tasks: Sequence[Task], task_id: str) -> List[Task]:
    """Drop a task by id; the last remaining task is never removed."""
    if len(tasks) <= 1:
        return list(tasks)
    return [task for task in tasks if task.id != task_id]


def suggest_slot(
    reference: Optional[Task],
    now_minutes: int,
    duration: int = DEFAULT_TASK_MINUTES,
) -> Tuple[TimeInput, TimeInput]:
    """Default start/end for a new task: right after `reference`, else from now."""
    if reference is not None:
        start = reference.end
    else:
        start = minutes_to_time_input(now_minutes)
    return start, add_minutes(start, duration)


def default_tasks(now_minutes: int) -> List[Task]:
    """Initial planner content: one unnamed block starting now."""
    start, end = suggest_slot(None, now_minutes)
    return [Task(id=generate_id(), name="", start=start, end=end)]


def next_task(tasks: Sequence[Task], now_minutes: int) -> Optional[Task]:
    """First task, in start order, that begins strictly after now."""
    for task in sort_tasks(tasks):
        if to_minutes(task.start) > now_minutes:
            return task
    return None


def start_day(
    tasks: Sequence[Task],
    now_minutes: int,
    *,
    plan_id: Optional[str] = None,
    saved_at: Optional[datetime] = None,
) -> Tuple[Optional[Plan], Optional[str]]:
    """Turn planner rows into a committed plan.

    Tasks are sorted and, when the first one lies in the future, pulled to
    start now with its duration preserved. Returns ``(plan, None)`` on success
    or ``(None, message)`` when validation fails.
    """
    ordered = sort_tasks(tasks)
    if ordered:
        first = ordered[0]
        first_start = to_minutes(first.start)
        if first_start > now_minutes:
            duration = to_minutes(first.end) - first_start
            ordered[0] = replace(
                first,
                start=minutes_to_time_input(now_minutes),
                end=minutes_to_time_input(now_minutes + duration),
            )

    error = validate_tasks(ordered)
    if error:
        return None, error

    timestamp = saved_at or datetime.now()
    plan = Plan(id=plan_id or generate_id(), saved_at=timestamp.isoformat(), tasks=ordered)
    return plan, None
