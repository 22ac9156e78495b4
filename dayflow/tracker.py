"""Real-time tracking: map an instant onto a plan and detect transitions."""
from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .models import BreakStatus, Signal, Task, TrackPhase, TrackState
from .scheduler import sort_tasks
from .timeutil import minutes_of_day, seconds_of_day, to_minutes


def compute_track_state(tasks: Sequence[Task], now: datetime) -> TrackState:
    """Classify `now` against a task list.

    The containment scan walks `tasks` in the order given, so `active_index`
    indexes the caller's list. Results are only meaningful for a validated,
    start-sorted plan.
    """
    current_minutes = minutes_of_day(now)
    current_seconds = seconds_of_day(now)

    for index, task in enumerate(tasks):
        start_min = to_minutes(task.start)
        end_min = to_minutes(task.end)
        if start_min <= current_minutes < end_min:
            duration_sec = (end_min - start_min) * 60
            remaining = max(0, end_min * 60 - current_seconds)
            fraction = min(100.0, max(0.0, remaining / duration_sec * 100))
            return TrackState(
                phase=TrackPhase.ACTIVE,
                active_index=index,
                remaining_seconds=remaining,
                remaining_fraction=fraction,
            )

    if not tasks:
        return TrackState()

    ordered = sort_tasks(tasks)
    last_end = to_minutes(ordered[-1].end)
    if current_minutes >= last_end and current_minutes >= to_minutes(ordered[0].start):
        return TrackState(phase=TrackPhase.COMPLETED)
    return TrackState(phase=TrackPhase.WAITING)


class BreakTimer:
    """Countdown for an out-of-band break: NONE -> RUNNING -> FINISHED.

    Only `dismiss` returns the timer to NONE.
    """

    def __init__(self) -> None:
        self.end_time: Optional[datetime] = None

    def start(self, minutes: int, now: datetime) -> None:
        self.end_time = now + timedelta(minutes=minutes)

    def dismiss(self) -> None:
        self.end_time = None

    def status(self, now: datetime) -> BreakStatus:
        if self.end_time is None:
            return BreakStatus.NONE
        if now >= self.end_time:
            return BreakStatus.FINISHED
        return BreakStatus.RUNNING

    def remaining_seconds(self, now: datetime) -> int:
        if self.end_time is None:
            return 0
        return max(0, math.floor((self.end_time - now).total_seconds()))


class TransitionNotifier:
    """Edge-triggered detection of task completion and break end.

    Each call to `observe` compares against the previous call only; ticks that
    were never observed are not replayed, so a signal can be skipped but is
    never emitted twice for the same transition.
    """

    def __init__(self) -> None:
        self._previous_index: Optional[int] = None
        self._previous_break = BreakStatus.NONE

    def reset(self) -> None:
        self._previous_index = None
        self._previous_break = BreakStatus.NONE

    def observe(self, state: TrackState, break_status: BreakStatus = BreakStatus.NONE) -> List[Signal]:
        signals: List[Signal] = []

        previous = self._previous_index
        current = state.active_index
        if previous is not None and current != previous:
            if current is not None and current > previous:
                signals.append(Signal.TASK_COMPLETE)
            elif current is None and state.phase is TrackPhase.COMPLETED:
                signals.append(Signal.TASK_COMPLETE)

        if break_status is BreakStatus.FINISHED and self._previous_break is not BreakStatus.FINISHED:
            signals.append(Signal.BREAK_FINISHED)

        self._previous_index = current
        self._previous_break = break_status
        return signals
