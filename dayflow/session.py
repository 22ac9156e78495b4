"""Tick-driven tracking session tying a live plan to the clock."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .config import TICK_INTERVAL_MS
from .models import BreakStatus, Plan, Task, TimeInput, TrackState
from .scheduler import append_task, delay_task, edit_task, finish_early, sort_tasks
from .timeutil import minutes_of_day
from .tracker import BreakTimer, TransitionNotifier, compute_track_state

logger = logging.getLogger(__name__)


class TrackingSession(QObject):
    """Owns the one-second timer and the live plan while the timer view is open.

    Every tick recomputes a fresh TrackState from the plan and the current
    instant. Re-planning actions replace the plan and emit `plan_changed`;
    nothing here writes to disk.
    """

    state_changed = pyqtSignal(object)  # TrackState
    break_changed = pyqtSignal(object)  # BreakStatus
    plan_changed = pyqtSignal(object)  # Plan
    notified = pyqtSignal(object)  # Signal

    def __init__(
        self,
        plan: Plan,
        clock: Callable[[], datetime] = datetime.now,
        interval_ms: int = TICK_INTERVAL_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.plan = plan
        self.clock = clock
        self.state = TrackState()
        self.now: Optional[datetime] = None
        self.break_timer = BreakTimer()
        self.break_status = BreakStatus.NONE
        self._notifier = TransitionNotifier()
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)

    # Timer lifecycle ----------------------------------------------------
    def start(self) -> None:
        if not self._timer.isActive():
            self._timer.start()
            logger.debug("Tracking session started for plan %s", self.plan.id)
        self.tick()

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
            logger.debug("Tracking session stopped for plan %s", self.plan.id)

    def is_running(self) -> bool:
        return self._timer.isActive()

    def tick(self, now: Optional[datetime] = None) -> TrackState:
        now = now or self.clock()
        state = compute_track_state(self.plan.tasks, now)
        break_status = self.break_timer.status(now)

        if state.phase != self.state.phase:
            logger.info("Tracker phase %s -> %s", self.state.phase.value, state.phase.value)
        signals = self._notifier.observe(state, break_status)
        break_moved = break_status != self.break_status

        self.now = now
        self.state = state
        self.break_status = break_status
        self.state_changed.emit(state)
        if break_moved:
            self.break_changed.emit(break_status)
        for signal in signals:
            logger.info("Emitting %s notification", signal.name)
            self.notified.emit(signal)
        return state

    # Plan access --------------------------------------------------------
    def active_task(self) -> Optional[Task]:
        index = self.state.active_index
        if index is None or index >= len(self.plan.tasks):
            return None
        return self.plan.tasks[index]

    def set_plan(self, plan: Plan) -> None:
        """Swap in a plan edited elsewhere and recompute immediately."""
        self.plan = plan
        self._notifier.reset()
        self.tick()

    # Re-planning --------------------------------------------------------
    def delay(self, minutes: int, now: Optional[datetime] = None) -> None:
        self.tick(now)
        if not self.state.is_active:
            return
        logger.info("Delaying task %d by %d minutes", self.state.active_index, minutes)
        self._apply(delay_task(self.plan.tasks, self.state.active_index, minutes), now)

    def finish_early(self, now: Optional[datetime] = None) -> None:
        now = now or self.clock()
        self.tick(now)
        if not self.state.is_active:
            return
        updated = finish_early(self.plan.tasks, self.state.active_index, minutes_of_day(now))
        if updated == self.plan.tasks:
            return
        logger.info("Finished task %d early", self.state.active_index)
        self._apply(updated, now)

    def add_task(self, name: str, start: TimeInput, end: TimeInput, now: Optional[datetime] = None) -> None:
        logger.info("Appending task %r", name)
        self._apply(append_task(self.plan.tasks, name, start, end), now)

    def edit_task(self, task_id: str, now: Optional[datetime] = None, **changes) -> None:
        self._apply(edit_task(self.plan.tasks, task_id, **changes), now)

    def _apply(self, tasks: List[Task], now: Optional[datetime]) -> None:
        self.plan = replace(self.plan, tasks=tasks)
        self.plan_changed.emit(self.plan)
        self.tick(now)

    # Breaks -------------------------------------------------------------
    def start_break(self, minutes: int, now: Optional[datetime] = None) -> None:
        now = now or self.clock()
        self.break_timer.start(minutes, now)
        logger.info("Break started for %d minutes", minutes)
        self.tick(now)

    def dismiss_break(self, now: Optional[datetime] = None) -> None:
        self.break_timer.dismiss()
        self.tick(now)

    def break_remaining_seconds(self, now: Optional[datetime] = None) -> int:
        return self.break_timer.remaining_seconds(now or self.clock())


def ensure_sorted(plan: Plan) -> Plan:
    """Return the plan with its tasks in start order."""
    ordered = sort_tasks(plan.tasks)
    if ordered == plan.tasks:
        return plan
    return replace(plan, tasks=ordered)
