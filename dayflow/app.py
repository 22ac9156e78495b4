"""Main PyQt application entry point."""
from __future__ import annotations

import logging
import random
import sys
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from PyQt6.QtCore import QPoint, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QAction, QCloseEvent, QColor, QFont, QKeySequence
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMenu,
    QMessageBox,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QSpinBox,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from .config import (
    BREAK_PRESETS,
    DEFAULT_BREAK_MINUTES,
    DELAY_STEP_MINUTES,
    MAX_BREAK_MINUTES,
    MOTIVATIONAL_QUOTES,
    QUOTE_ROTATION_MS,
    configure_logging,
    data_dir,
)
from .models import (
    BreakStatus,
    Meridiem,
    Plan,
    Task,
    TimeInput,
    TrackPhase,
    TrackState,
    parse_minute_text,
    sanitize_minute_text,
)
from .scheduler import default_tasks, next_task, remove_task, sort_tasks, start_day, suggest_slot
from .session import TrackingSession, ensure_sorted
from .sound import ChimePlayer
from .storage import PlanStore, append_or_replace, history_newest_first, replace_existing
from .timeutil import (
    format_countdown,
    format_duration,
    format_minutes_to_time,
    generate_id,
    minutes_of_day,
    to_minutes,
)

logger = logging.getLogger(__name__)

TASK_HEADERS = ["Task", "Start", "End", "Duration"]
_NAME_COL, _START_COL, _END_COL, _DURATION_COL = range(len(TASK_HEADERS))
_HOUR_CHOICES = [f"{hour:02d}" for hour in range(1, 13)]
_ACTIVE_COLOR = QColor("#e11d48")
_PAST_COLOR = QColor("#71717a")
_PROGRESS_STEPS = 1000

Clock = Callable[[], datetime]


class AppView(str, Enum):
    PLANNER = "PLANNER"
    TIMER = "TIMER"
    HISTORY = "HISTORY"
    NOTES = "NOTES"


class TimePickerWidget(QWidget):
    """Hour / minute / AM-PM editor that repairs input instead of rejecting it."""

    time_changed = pyqtSignal(object)

    def __init__(self, value: Optional[TimeInput] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.hour_box = QComboBox()
        self.hour_box.addItems(_HOUR_CHOICES)
        self.minute_edit = QLineEdit()
        self.minute_edit.setMaxLength(2)
        self.minute_edit.setPlaceholderText("00")
        self.minute_edit.setFixedWidth(36)
        self.meridiem_box = QComboBox()
        self.meridiem_box.addItems([m.value for m in Meridiem])

        layout = QHBoxLayout(self)
        layout.setContentsMargins(2, 0, 2, 0)
        layout.addWidget(self.hour_box)
        layout.addWidget(QLabel(":"))
        layout.addWidget(self.minute_edit)
        layout.addWidget(self.meridiem_box)

        self.set_value(value or TimeInput())
        self.hour_box.currentIndexChanged.connect(self._emit_changed)
        self.meridiem_box.currentIndexChanged.connect(self._emit_changed)
        self.minute_edit.textEdited.connect(self._filter_minutes)
        self.minute_edit.editingFinished.connect(self._commit_minutes)

    def value(self) -> TimeInput:
        return TimeInput(
            hours=int(self.hour_box.currentText()),
            minutes=parse_minute_text(self.minute_edit.text()),
            meridiem=Meridiem(self.meridiem_box.currentText()),
        )

    def set_value(self, value: TimeInput) -> None:
        for widget in (self.hour_box, self.minute_edit, self.meridiem_box):
            widget.blockSignals(True)
        self.hour_box.setCurrentText(f"{value.hours:02d}")
        self.minute_edit.setText(f"{value.minutes:02d}")
        self.meridiem_box.setCurrentText(value.meridiem.value)
        for widget in (self.hour_box, self.minute_edit, self.meridiem_box):
            widget.blockSignals(False)

    def _filter_minutes(self, text: str) -> None:
        cleaned = sanitize_minute_text(text)
        if cleaned != text:
            self.minute_edit.setText(cleaned)

    def _commit_minutes(self) -> None:
        """Pad and clamp the minute field once editing ends."""
        committed = f"{parse_minute_text(self.minute_edit.text()):02d}"
        if self.minute_edit.text() != committed:
            self.minute_edit.setText(committed)
        self._emit_changed()

    def _emit_changed(self, *_args) -> None:
        self.time_changed.emit(self.value())


class PlannerTable(QTableWidget):
    """Editable task grid; each row holds a name cell and two time pickers.

    Emits `tasks_updated` any time the underlying Task list changes.
    """

    tasks_updated = pyqtSignal(list)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(0, len(TASK_HEADERS), parent)
        self._block_cell = False
        self._setup_table()

    def _setup_table(self) -> None:
        self.setHorizontalHeaderLabels(TASK_HEADERS)
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.customContextMenuRequested.connect(self._show_context_menu)
        self.cellChanged.connect(self._handle_cell_changed)
        self.verticalHeader().setVisible(False)
        header = self.horizontalHeader()
        header.setSectionResizeMode(_NAME_COL, QHeaderView.ResizeMode.Stretch)
        for col in (_START_COL, _END_COL, _DURATION_COL):
            header.setSectionResizeMode(col, QHeaderView.ResizeMode.ResizeToContents)

    # --- Row lifecycle helpers -------------------------------------------------

    def set_tasks(self, tasks: List[Task]) -> None:
        self._block_cell = True
        self.setRowCount(0)
        for task in tasks:
            self._append_task_row(task)
        self._block_cell = False
        self.tasks_updated.emit(self.get_tasks())

    def append_task(self, task: Task) -> None:
        self._block_cell = True
        self._append_task_row(task)
        self._block_cell = False
        self.selectRow(self.rowCount() - 1)
        self.tasks_updated.emit(self.get_tasks())

    def _append_task_row(self, task: Task) -> None:
        row = self.rowCount()
        self.insertRow(row)
        name_item = QTableWidgetItem(task.name)
        name_item.setData(Qt.ItemDataRole.UserRole, task.id)
        self.setItem(row, _NAME_COL, name_item)

        duration_item = QTableWidgetItem("")
        duration_item.setFlags(Qt.ItemFlag.ItemIsSelectable | Qt.ItemFlag.ItemIsEnabled)
        duration_item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setItem(row, _DURATION_COL, duration_item)

        for col, value in ((_START_COL, task.start), (_END_COL, task.end)):
            picker = TimePickerWidget(value)
            picker.time_changed.connect(self._handle_picker_changed)
            self.setCellWidget(row, col, picker)
        self._refresh_duration(row)

    def remove_row(self, row: int) -> None:
        """Delete a row; the planner always keeps at least one task."""
        if row < 0 or row >= self.rowCount():
            return
        task_id = self._task_id(row)
        remaining = remove_task(self.get_tasks(), task_id)
        if len(remaining) == self.rowCount():
            return
        self.removeRow(row)
        self.tasks_updated.emit(self.get_tasks())

    def _show_context_menu(self, position: QPoint) -> None:
        index = self.indexAt(position)
        if not index.isValid():
            return
        menu = QMenu(self)
        delete_action = menu.addAction("Delete row")
        delete_action.setEnabled(self.rowCount() > 1)
        action = menu.exec(self.viewport().mapToGlobal(position))
        if action == delete_action:
            self.remove_row(index.row())

    def _handle_cell_changed(self, row: int, column: int) -> None:
        if self._block_cell or column != _NAME_COL:
            return
        self.tasks_updated.emit(self.get_tasks())

    def _handle_picker_changed(self, _value: TimeInput) -> None:
        for row in range(self.rowCount()):
            self._refresh_duration(row)
        self.tasks_updated.emit(self.get_tasks())

    def _refresh_duration(self, row: int) -> None:
        item = self.item(row, _DURATION_COL)
        start = self._picker(row, _START_COL)
        end = self._picker(row, _END_COL)
        if item is None or start is None or end is None:
            return
        if to_minutes(end.value()) > to_minutes(start.value()):
            item.setText(format_duration(start.value(), end.value()))
        else:
            item.setText("-")

    def _picker(self, row: int, col: int) -> Optional[TimePickerWidget]:
        widget = self.cellWidget(row, col)
        return widget if isinstance(widget, TimePickerWidget) else None

    def _task_id(self, row: int) -> str:
        item = self.item(row, _NAME_COL)
        return str(item.data(Qt.ItemDataRole.UserRole)) if item else ""

    def get_tasks(self) -> List[Task]:
        tasks: List[Task] = []
        for row in range(self.rowCount()):
            name_item = self.item(row, _NAME_COL)
            start = self._picker(row, _START_COL)
            end = self._picker(row, _END_COL)
            if name_item is None or start is None or end is None:
                continue
            tasks.append(
                Task(
                    id=self._task_id(row),
                    name=name_item.text(),
                    start=start.value(),
                    end=end.value(),
                )
            )
        return tasks


class PlannerView(QWidget):
    """Lay out the day and commit it as a plan."""

    start_requested = pyqtSignal(object)
    history_requested = pyqtSignal()
    notes_requested = pyqtSignal()

    def __init__(self, clock: Clock = datetime.now, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.clock = clock
        self._plan_id: Optional[str] = None
        self.table = PlannerTable()
        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #e11d48;")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        self.table.tasks_updated.connect(self._clear_error)
        self._build_layout()

    def _build_layout(self) -> None:
        header = QHBoxLayout()
        title = QLabel("Plan your day")
        title_font = QFont(title.font())
        title_font.setPointSize(title_font.pointSize() + 6)
        title_font.setBold(True)
        title.setFont(title_font)
        header.addWidget(title)
        header.addStretch(1)
        notes_button = QPushButton("Notes")
        notes_button.clicked.connect(self.notes_requested.emit)
        history_button = QPushButton("History")
        history_button.clicked.connect(self.history_requested.emit)
        header.addWidget(notes_button)
        header.addWidget(history_button)

        actions = QHBoxLayout()
        add_button = QPushButton("Add Task Block")
        add_button.clicked.connect(self.add_task_block)
        remove_button = QPushButton("Remove Task")
        remove_button.clicked.connect(self.remove_selected)
        actions.addWidget(add_button)
        actions.addWidget(remove_button)
        actions.addStretch(1)

        start_button = QPushButton("Start My Day")
        start_button.setDefault(True)
        start_button.clicked.connect(self.start_day)

        layout = QVBoxLayout(self)
        layout.addLayout(header)
        layout.addWidget(self.table)
        layout.addLayout(actions)
        layout.addWidget(self.error_label)
        layout.addWidget(start_button)

    def load_plan(self, plan: Optional[Plan]) -> None:
        """Show an existing plan for editing, or a fresh block starting now."""
        if plan is not None:
            self._plan_id = plan.id
            self.table.set_tasks(plan.tasks)
        else:
            self._plan_id = None
            self.table.set_tasks(default_tasks(minutes_of_day(self.clock())))

    def add_task_block(self) -> None:
        tasks = self.table.get_tasks()
        reference = tasks[-1] if tasks else None
        start, end = suggest_slot(reference, minutes_of_day(self.clock()))
        self.table.append_task(Task(id=generate_id(), name="", start=start, end=end))

    def remove_selected(self) -> None:
        rows = sorted({index.row() for index in self.table.selectedIndexes()})
        if rows:
            self.table.remove_row(rows[0])

    def start_day(self) -> Optional[Plan]:
        plan, error = start_day(
            self.table.get_tasks(),
            minutes_of_day(self.clock()),
            plan_id=self._plan_id,
            saved_at=self.clock(),
        )
        if error:
            self.error_label.setText(error)
            self.error_label.show()
            return None
        self._plan_id = plan.id
        self.start_requested.emit(plan)
        return plan

    def error_text(self) -> str:
        return "" if self.error_label.isHidden() else self.error_label.text()

    def _clear_error(self, _tasks: List[Task]) -> None:
        self.error_label.clear()
        self.error_label.hide()


class TaskDialog(QDialog):
    """Name plus start/end pickers; used for adding and editing timeline tasks."""

    def __init__(
        self,
        title: str,
        start: TimeInput,
        end: TimeInput,
        name: str = "",
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.name_edit = QLineEdit(name)
        self.name_edit.setPlaceholderText("Task Name")
        self.start_picker = TimePickerWidget(start)
        self.end_picker = TimePickerWidget(end)

        form = QFormLayout()
        form.addRow("Name", self.name_edit)
        form.addRow("Start", self.start_picker)
        form.addRow("End", self.end_picker)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(buttons)

    def values(self) -> tuple[str, TimeInput, TimeInput]:
        return self.name_edit.text(), self.start_picker.value(), self.end_picker.value()


class BreakDialog(QDialog):
    """Pick a break length from presets or a custom number of minutes."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Take a Break")
        self.minutes_box = QSpinBox()
        self.minutes_box.setRange(1, MAX_BREAK_MINUTES)
        self.minutes_box.setSuffix(" min")
        self.minutes_box.setValue(DEFAULT_BREAK_MINUTES)

        presets = QHBoxLayout()
        for minutes in BREAK_PRESETS:
            button = QPushButton(f"{minutes}m")
            button.clicked.connect(lambda _checked=False, m=minutes: self.minutes_box.setValue(m))
            presets.addWidget(button)

        buttons = QDialogButtonBox()
        buttons.addButton("Start Break", QDialogButtonBox.ButtonRole.AcceptRole)
        buttons.addButton(QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(presets)
        layout.addWidget(QLabel("Custom duration"))
        layout.addWidget(self.minutes_box)
        layout.addWidget(buttons)

    def minutes(self) -> int:
        return self.minutes_box.value()


def _heading(text: str, size_delta: int = 8) -> QLabel:
    label = QLabel(text)
    label.setAlignment(Qt.AlignmentFlag.AlignCenter)
    font = QFont(label.font())
    font.setPointSize(font.pointSize() + size_delta)
    font.setBold(True)
    label.setFont(font)
    return label


def _centered(*widgets: QWidget) -> QWidget:
    page = QWidget()
    layout = QVBoxLayout(page)
    layout.addStretch(1)
    for widget in widgets:
        layout.addWidget(widget, alignment=Qt.AlignmentFlag.AlignCenter)
    layout.addStretch(1)
    return page


class TimerView(QWidget):
    """Live view of a running plan, driven by a TrackingSession."""

    back_requested = pyqtSignal()

    def __init__(self, session: TrackingSession, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.session = session
        self._timeline_key: Optional[tuple] = None
        self._build_pages()
        self._quote_timer = QTimer(self)
        self._quote_timer.setInterval(QUOTE_ROTATION_MS)
        self._quote_timer.timeout.connect(self._rotate_quote)
        session.state_changed.connect(self._render_state)
        session.break_changed.connect(self._render_break)
        session.plan_changed.connect(self._render_timeline)

    # Layout -------------------------------------------------------------
    def _build_pages(self) -> None:
        self.pages = QStackedWidget()
        self.main_page = self._build_main_page()
        self.break_page = self._build_break_page()
        self.break_over_page = self._build_break_over_page()
        for page in (self.main_page, self.break_page, self.break_over_page):
            self.pages.addWidget(page)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.pages)

    def _build_main_page(self) -> QWidget:
        back_button = QPushButton("Back to Plan")
        back_button.clicked.connect(self.back_requested.emit)
        break_button = QPushButton("Take a Break")
        break_button.clicked.connect(self.open_break_dialog)
        top_bar = QHBoxLayout()
        top_bar.addWidget(back_button)
        top_bar.addStretch(1)
        top_bar.addWidget(break_button)

        self.status_panels = QStackedWidget()
        self.active_panel = self._build_active_panel()
        self.waiting_title = _heading("Waiting for next task...", 4)
        self.up_next_label = QLabel("")
        self.up_next_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.waiting_panel = _centered(self.waiting_title, self.up_next_label)
        done_label = QLabel("You've completed your plan for the day.")
        self.completed_panel = _centered(_heading("All Done!"), done_label)
        for panel in (self.active_panel, self.waiting_panel, self.completed_panel):
            self.status_panels.addWidget(panel)

        self.quote_label = QLabel(f'"{MOTIVATIONAL_QUOTES[0]}"')
        self.quote_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.quote_label.setWordWrap(True)
        self.quote_label.setStyleSheet("color: #71717a; font-style: italic;")

        main_column = QVBoxLayout()
        main_column.addLayout(top_bar)
        main_column.addWidget(self.status_panels, 1)
        main_column.addWidget(self.quote_label)

        self.timeline = QListWidget()
        self.timeline.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self.timeline.itemDoubleClicked.connect(self._edit_timeline_item)
        self.timeline_title = QLabel("Timeline")
        add_button = QPushButton("Add Task to End")
        add_button.clicked.connect(self.open_add_dialog)
        side_column = QVBoxLayout()
        side_column.addWidget(self.timeline_title)
        side_column.addWidget(QLabel("Double-click to edit"))
        side_column.addWidget(self.timeline, 1)
        side_column.addWidget(add_button)

        page = QWidget()
        layout = QHBoxLayout(page)
        layout.addLayout(main_column, 3)
        layout.addLayout(side_column, 1)
        return page

    def _build_active_panel(self) -> QWidget:
        self.countdown_label = _heading("00:00", 28)
        self.progress = QProgressBar()
        self.progress.setRange(0, _PROGRESS_STEPS)
        self.progress.setTextVisible(False)
        self.active_name_label = _heading("", 10)
        self.active_range_label = QLabel("")
        self.active_range_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        delay_button = QPushButton(f"+{DELAY_STEP_MINUTES}m Delay")
        delay_button.clicked.connect(lambda: self.session.delay(DELAY_STEP_MINUTES))
        early_button = QPushButton("Done Early")
        early_button.clicked.connect(lambda: self.session.finish_early())
        buttons = QWidget()
        button_row = QHBoxLayout(buttons)
        button_row.addWidget(delay_button)
        button_row.addWidget(early_button)

        panel = _centered(
            self.countdown_label,
            QLabel("Remaining"),
            self.active_name_label,
            self.active_range_label,
            buttons,
        )
        panel.layout().insertWidget(3, self.progress)
        return panel

    def _build_break_page(self) -> QWidget:
        self.break_countdown_label = _heading("00:00", 28)
        end_button = QPushButton("End Break Early")
        end_button.clicked.connect(lambda: self.session.dismiss_break())
        return _centered(_heading("Break Time"), QLabel("Relax and recharge."), self.break_countdown_label, end_button)

    def _build_break_over_page(self) -> QWidget:
        resume_button = QPushButton("Resume Work")
        resume_button.clicked.connect(lambda: self.session.dismiss_break())
        return _centered(_heading("Break Over!"), QLabel("Time to get back to your plan."), resume_button)

    # Lifecycle ----------------------------------------------------------
    def start(self) -> None:
        self._render_timeline(self.session.plan)
        self._quote_timer.start()
        self.session.start()

    def stop(self) -> None:
        self._quote_timer.stop()
        self.session.stop()

    # Rendering ----------------------------------------------------------
    def _render_state(self, state: TrackState) -> None:
        if self.session.break_status is BreakStatus.RUNNING:
            remaining = self.session.break_remaining_seconds(self.session.now)
            self.break_countdown_label.setText(format_countdown(remaining))

        task = self.session.active_task()
        if state.is_active and task is not None:
            self.status_panels.setCurrentWidget(self.active_panel)
            self.countdown_label.setText(format_countdown(state.remaining_seconds))
            self.progress.setValue(int(state.remaining_fraction / 100 * _PROGRESS_STEPS))
            self.active_name_label.setText(task.name)
            self.active_range_label.setText(
                f"{format_minutes_to_time(to_minutes(task.start))} - {format_minutes_to_time(to_minutes(task.end))}"
            )
        elif state.phase is TrackPhase.COMPLETED:
            self.status_panels.setCurrentWidget(self.completed_panel)
        else:
            self.status_panels.setCurrentWidget(self.waiting_panel)
            upcoming = next_task(self.session.plan.tasks, minutes_of_day(self.session.now))
            if upcoming is not None:
                self.up_next_label.setText(
                    f"Up next: {upcoming.name}\nStarts at {format_minutes_to_time(to_minutes(upcoming.start))}"
                )
            else:
                self.up_next_label.setText("No upcoming tasks scheduled.")

        key = (state.active_index, state.phase)
        if key != self._timeline_key:
            self._render_timeline(self.session.plan)

    def _render_break(self, status: BreakStatus) -> None:
        if status is BreakStatus.RUNNING:
            self.pages.setCurrentWidget(self.break_page)
        elif status is BreakStatus.FINISHED:
            self.pages.setCurrentWidget(self.break_over_page)
        else:
            self.pages.setCurrentWidget(self.main_page)

    def _render_timeline(self, plan: Plan) -> None:
        state = self.session.state
        self._timeline_key = (state.active_index, state.phase)
        self.timeline.clear()
        self.timeline_title.setText(f"Timeline ({len(plan.tasks)})")
        active_item: Optional[QListWidgetItem] = None
        for index, task in enumerate(sort_tasks(plan.tasks)):
            label = task.name or "Untitled Task"
            span = f"{format_minutes_to_time(to_minutes(task.start))} - {format_minutes_to_time(to_minutes(task.end))}"
            item = QListWidgetItem(f"{label}\n{span}")
            item.setData(Qt.ItemDataRole.UserRole, task.id)
            font = QFont(item.font())
            is_active = state.active_index == index
            is_past = (state.active_index is not None and state.active_index > index) or (
                state.active_index is None and state.phase is TrackPhase.COMPLETED
            )
            if is_active:
                font.setBold(True)
                item.setForeground(_ACTIVE_COLOR)
                active_item = item
            elif is_past:
                font.setStrikeOut(True)
                item.setForeground(_PAST_COLOR)
            item.setFont(font)
            self.timeline.addItem(item)
        if active_item is not None:
            self.timeline.scrollToItem(active_item, QAbstractItemView.ScrollHint.PositionAtCenter)

    def _rotate_quote(self) -> None:
        self.quote_label.setText(f'"{random.choice(MOTIVATIONAL_QUOTES)}"')

    # Dialogs ------------------------------------------------------------
    def open_add_dialog(self) -> None:
        tasks = sort_tasks(self.session.plan.tasks)
        reference = tasks[-1] if tasks else None
        start, end = suggest_slot(reference, minutes_of_day(self.session.clock()))
        dialog = TaskDialog("Add Task to End", start, end, parent=self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        name, start, end = dialog.values()
        self.session.add_task(name, start, end)

    def open_break_dialog(self) -> None:
        dialog = BreakDialog(self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self.session.start_break(dialog.minutes())

    def _edit_timeline_item(self, item: QListWidgetItem) -> None:
        task_id = item.data(Qt.ItemDataRole.UserRole)
        task = next((t for t in self.session.plan.tasks if t.id == task_id), None)
        if task is None:
            return
        dialog = TaskDialog("Edit Task", task.start, task.end, name=task.name, parent=self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        name, start, end = dialog.values()
        self.session.edit_task(task_id, name=name, start=start, end=end)


class HistoryView(QWidget):
    """Past plans, newest first; selecting one lists its tasks."""

    back_requested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._entries: List[Plan] = []
        self.entry_list = QListWidget()
        self.entry_list.currentRowChanged.connect(self._show_entry)
        self.detail_list = QListWidget()
        self.detail_title = QLabel("")
        back_button = QPushButton("Back to Planner")
        back_button.clicked.connect(self.back_requested.emit)

        detail_column = QVBoxLayout()
        detail_column.addWidget(self.detail_title)
        detail_column.addWidget(self.detail_list)
        body = QHBoxLayout()
        body.addWidget(self.entry_list, 1)
        body.addLayout(detail_column, 2)

        layout = QVBoxLayout(self)
        layout.addWidget(back_button, alignment=Qt.AlignmentFlag.AlignLeft)
        layout.addLayout(body)

    def set_history(self, history: List[Plan]) -> None:
        self._entries = history_newest_first(history)
        self.entry_list.clear()
        self.detail_list.clear()
        self.detail_title.setText("" if self._entries else "No history yet.")
        for plan in self._entries:
            self.entry_list.addItem(f"{_format_saved_at(plan.saved_at)}  ({len(plan.tasks)} tasks)")

    def _show_entry(self, row: int) -> None:
        self.detail_list.clear()
        if row < 0 or row >= len(self._entries):
            return
        plan = self._entries[row]
        self.detail_title.setText(_format_saved_at(plan.saved_at))
        for task in plan.tasks:
            span = f"{format_minutes_to_time(to_minutes(task.start))} - {format_minutes_to_time(to_minutes(task.end))}"
            self.detail_list.addItem(f"{task.name}  {span}  ({format_duration(task.start, task.end)})")


def _format_saved_at(saved_at: str) -> str:
    try:
        stamp = datetime.fromisoformat(saved_at)
    except ValueError:
        return saved_at
    return stamp.strftime("%a, %b %d %Y  %I:%M %p")


class NotesView(QWidget):
    """Free-form notes, handed back to the window when leaving the view."""

    back_requested = pyqtSignal(str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.editor = QPlainTextEdit()
        self.editor.setPlaceholderText("Write anything...")
        back_button = QPushButton("Save and Back")
        back_button.clicked.connect(lambda: self.back_requested.emit(self.editor.toPlainText()))
        layout = QVBoxLayout(self)
        layout.addWidget(back_button, alignment=Qt.AlignmentFlag.AlignLeft)
        layout.addWidget(self.editor)

    def set_text(self, text: str) -> None:
        self.editor.setPlainText(text)


class MainWindow(QMainWindow):
    """Primary window switching between planner, timer, history and notes."""

    def __init__(self, store: Optional[PlanStore] = None, clock: Clock = datetime.now) -> None:
        super().__init__()
        self.setWindowTitle("Dayflow")
        self.clock = clock
        self.store = store or PlanStore(data_dir())
        self.chimes = ChimePlayer(self.store.base_dir / "cache", self)
        self.current_plan: Optional[Plan] = None
        self.history: List[Plan] = []
        self.notes = ""
        self.timer_view: Optional[TimerView] = None

        self.stack = QStackedWidget()
        self.planner = PlannerView(clock)
        self.history_view = HistoryView()
        self.notes_view = NotesView()
        for view in (self.planner, self.history_view, self.notes_view):
            self.stack.addWidget(view)
        self.setCentralWidget(self.stack)

        # Wire up the views so navigation and persistence stay in one place.
        self.planner.start_requested.connect(self.handle_start)
        self.planner.history_requested.connect(lambda: self.show_view(AppView.HISTORY))
        self.planner.notes_requested.connect(lambda: self.show_view(AppView.NOTES))
        self.history_view.back_requested.connect(lambda: self.show_view(AppView.PLANNER))
        self.notes_view.back_requested.connect(self._handle_notes_closed)

        self._build_menu()
        restored = self._load_state()
        self.show_view(restored)
        self.resize(1000, 680)

    def _build_menu(self) -> None:
        menu = self.menuBar()
        file_menu = menu.addMenu("File")
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = menu.addMenu("View")
        for view in AppView:
            action = QAction(view.value.title(), self)
            action.triggered.connect(lambda _checked=False, v=view: self.show_view(v))
            view_menu.addAction(action)

    def _load_state(self) -> AppView:
        """Read the saved plan, history, notes and last view from the store."""
        try:
            plan = self.store.load_plan()
            self.current_plan = ensure_sorted(plan) if plan else None
            self.history = self.store.load_history()
            self.notes = self.store.load_notes()
            saved_view = self.store.load_view()
        except (OSError, ValueError) as exc:
            logger.exception("Failed to load saved state from %s", self.store.base_dir)
            QMessageBox.warning(self, "Load failed", str(exc))
            self.current_plan = None
            self.history = []
            saved_view = None
        self.planner.load_plan(self.current_plan)
        self.notes_view.set_text(self.notes)
        # Only restore the timer when there is a plan to track.
        if saved_view == AppView.TIMER.value and self.current_plan is not None:
            return AppView.TIMER
        return AppView.PLANNER

    # Navigation ---------------------------------------------------------
    def show_view(self, view: AppView) -> None:
        if view is AppView.TIMER and self.current_plan is None:
            self.statusBar().showMessage("No plan found; start your day first.", 3000)
            view = AppView.PLANNER

        if view is not AppView.TIMER:
            self._close_timer()
        if view is AppView.PLANNER:
            self.stack.setCurrentWidget(self.planner)
        elif view is AppView.HISTORY:
            self.history_view.set_history(self.history)
            self.stack.setCurrentWidget(self.history_view)
        elif view is AppView.NOTES:
            self.notes_view.set_text(self.notes)
            self.stack.setCurrentWidget(self.notes_view)
        elif view is AppView.TIMER:
            self._open_timer()
        self._persist(self.store.save_view, view.value)

    def _open_timer(self) -> None:
        self._close_timer()
        session = TrackingSession(self.current_plan, clock=self.clock)
        session.plan_changed.connect(self.handle_plan_updated)
        session.notified.connect(self.chimes.play)
        self.timer_view = TimerView(session)
        self.timer_view.back_requested.connect(self._handle_timer_back)
        self.stack.addWidget(self.timer_view)
        self.stack.setCurrentWidget(self.timer_view)
        self.timer_view.start()

    def _close_timer(self) -> None:
        if self.timer_view is None:
            return
        self.timer_view.stop()
        self.stack.removeWidget(self.timer_view)
        self.timer_view.deleteLater()
        self.timer_view = None

    def _handle_timer_back(self) -> None:
        self.planner.load_plan(self.current_plan)
        self.show_view(AppView.PLANNER)

    # Plan lifecycle -----------------------------------------------------
    def handle_start(self, plan: Plan) -> None:
        """Commit a started day and switch to the live timer."""
        self.current_plan = plan
        self.history = append_or_replace(self.history, plan)
        self._persist(self.store.save_plan, plan)
        self._persist(self.store.save_history, self.history)
        logger.info("Started plan %s with %d tasks", plan.id, len(plan.tasks))
        self.show_view(AppView.TIMER)

    def handle_plan_updated(self, plan: Plan) -> None:
        self.current_plan = plan
        self.history = replace_existing(self.history, plan)
        self._persist(self.store.save_plan, plan)
        self._persist(self.store.save_history, self.history)

    def _handle_notes_closed(self, text: str) -> None:
        self.notes = text
        self._persist(self.store.save_notes, text)
        self.show_view(AppView.PLANNER)

    def _persist(self, save: Callable[..., None], *args) -> None:
        try:
            save(*args)
        except OSError as exc:  # pragma: no cover - disk failures
            logger.exception("Failed to write to %s", self.store.base_dir)
            self.statusBar().showMessage(f"Save failed: {exc}", 5000)

    def closeEvent(self, event: QCloseEvent) -> None:  # pragma: no cover - requires UI
        self._close_timer()
        event.accept()


def run() -> None:
    """Entry point used by `python -m dayflow` and the `dayflow` script."""
    configure_logging()
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    run()
