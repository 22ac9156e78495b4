from datetime import datetime

from dayflow.models import Meridiem, Task, TimeInput
from dayflow.scheduler import (
    append_task,
    default_tasks,
    delay_task,
    edit_task,
    finish_early,
    next_task,
    remove_task,
    shift_schedule,
    sort_tasks,
    start_day,
    suggest_slot,
)
from dayflow.timeutil import minutes_to_time_input, to_minutes
from dayflow.validation import validate_tasks


def _at(clock: str) -> TimeInput:
    hours, minutes = clock.split(":")
    return minutes_to_time_input(int(hours) * 60 + int(minutes))


def _task(name: str, start: str, end: str) -> Task:
    return Task(id=name, name=name, start=_at(start), end=_at(end))


def _mins(clock: str) -> int:
    return to_minutes(_at(clock))


def _day() -> list:
    return [
        _task("A", "09:00", "10:00"),
        _task("B", "10:00", "11:00"),
        _task("C", "11:00", "12:00"),
    ]


def test_sort_tasks_is_stable_and_idempotent() -> None:
    tasks = [_task("B", "10:00", "11:00"), _task("A", "09:00", "09:30"), _task("C", "09:00", "09:45")]
    ordered = sort_tasks(tasks)
    assert [task.name for task in ordered] == ["A", "C", "B"]
    assert sort_tasks(ordered) == ordered
    assert [task.name for task in tasks] == ["B", "A", "C"]


def test_shift_schedule_moves_only_the_tail() -> None:
    tasks = _day()
    shifted = shift_schedule(tasks, 1, 15)

    assert shifted[0] is tasks[0]
    assert (shifted[1].start, shifted[1].end) == (_at("10:00"), _at("11:15"))
    assert (shifted[2].start, shifted[2].end) == (_at("11:15"), _at("12:15"))
    assert tasks == _day()


def test_shift_schedule_ignores_out_of_range_index() -> None:
    tasks = _day()
    assert shift_schedule(tasks, 3, 15) == tasks
    assert shift_schedule(tasks, -1, 15) == tasks


def test_shift_schedule_wraps_past_midnight() -> None:
    shifted = shift_schedule([_task("Late", "23:00", "23:50")], 0, 20)
    assert shifted[0].end == TimeInput(12, 10, Meridiem.AM)


def test_negative_shift_is_not_guarded() -> None:
    shifted = shift_schedule([_task("Short", "09:00", "09:10")], 0, -20)
    assert shifted[0].end == _at("08:50")
    assert validate_tasks(shifted) == 'Task "Short" ends before it starts.'


def test_delay_task_without_active_task_is_a_no_op() -> None:
    tasks = _day()
    assert delay_task(tasks, None, 5) == tasks
    assert delay_task(tasks, 0, 5) == shift_schedule(tasks, 0, 5)


def test_finish_early_snaps_boundary_to_now() -> None:
    tasks = [_task("A", "09:00", "10:00"), _task("B", "10:00", "11:00")]
    updated = finish_early(tasks, 0, _mins("09:45"))

    assert updated[0].end == _at("09:45")
    assert updated[1].start == _at("09:45")
    assert updated[1].end == _at("10:45")
    assert validate_tasks(updated) is None


def test_finish_early_closes_a_gap_before_the_next_task() -> None:
    tasks = [_task("A", "09:00", "10:00"), _task("B", "10:30", "11:30")]
    updated = finish_early(tasks, 0, _mins("09:45"))

    assert updated[0].end == _at("09:45")
    assert updated[1].start == _at("09:45")
    assert updated[1].end == _at("11:15")


def test_finish_early_guards() -> None:
    tasks = _day()
    assert finish_early(tasks, None, _mins("09:30")) == tasks
    assert finish_early(tasks, 0, _mins("10:00")) == tasks
    assert finish_early(tasks, 7, _mins("09:30")) == tasks


def test_finish_early_on_last_task() -> None:
    updated = finish_early(_day(), 2, _mins("11:20"))
    assert updated[2].end == _at("11:20")
    assert len(updated) == 3


def test_append_task_resorts() -> None:
    updated = append_task(_day(), "Early", _at("08:00"), _at("09:00"), task_id="early")
    assert [task.name for task in updated] == ["Early", "A", "B", "C"]
    assert updated[0].id == "early"


def test_edit_task_replaces_fields_and_resorts() -> None:
    updated = edit_task(_day(), "C", start=_at("07:00"), end=_at("08:00"))
    assert [task.name for task in updated] == ["C", "A", "B"]
    assert updated[0].start == _at("07:00")

    renamed = edit_task(_day(), "B", name="Lunch")
    assert renamed[1].name == "Lunch"
    assert edit_task(_day(), "missing", name="X") == _day()


def test_remove_task_keeps_the_last_row() -> None:
    assert [task.name for task in remove_task(_day(), "B")] == ["A", "C"]
    single = [_task("Only", "09:00", "10:00")]
    assert remove_task(single, "Only") == single


def test_suggest_slot_follows_reference_or_now() -> None:
    assert suggest_slot(_task("A", "09:00", "10:00"), _mins("08:00")) == (_at("10:00"), _at("11:00"))
    assert suggest_slot(None, _mins("14:20")) == (_at("14:20"), _at("15:20"))


def test_default_tasks_starts_now() -> None:
    tasks = default_tasks(_mins("23:30"))
    assert len(tasks) == 1
    assert tasks[0].name == ""
    assert (tasks[0].start, tasks[0].end) == (_at("23:30"), _at("00:30"))


def test_next_task_is_first_future_start() -> None:
    tasks = [_task("B", "10:00", "11:00"), _task("A", "09:00", "10:00")]
    assert next_task(tasks, _mins("09:30")).name == "B"
    assert next_task(tasks, _mins("08:00")).name == "A"
    assert next_task(tasks, _mins("10:00")) is None


def test_start_day_pulls_future_first_task_to_now() -> None:
    tasks = [_task("B", "11:00", "12:00"), _task("A", "10:00", "11:00")]
    saved_at = datetime(2024, 5, 1, 9, 15)
    plan, error = start_day(tasks, _mins("09:15"), plan_id="plan-1", saved_at=saved_at)

    assert error is None
    assert plan.id == "plan-1"
    assert plan.saved_at == saved_at.isoformat()
    assert [task.name for task in plan.tasks] == ["A", "B"]
    assert (plan.tasks[0].start, plan.tasks[0].end) == (_at("09:15"), _at("10:15"))
    assert plan.tasks[1].start == _at("11:00")


def test_start_day_keeps_tasks_already_under_way() -> None:
    plan, error = start_day([_task("A", "10:00", "11:00")], _mins("10:30"))
    assert error is None
    assert plan.tasks[0].start == _at("10:00")
    assert plan.id


def test_start_day_reports_validation_errors() -> None:
    assert start_day([], _mins("09:00")) == (None, "Please add at least one task.")
    tasks = [_task("A", "09:00", "10:00"), _task("", "10:00", "11:00")]
    assert start_day(tasks, _mins("09:00")) == (None, "Task #2 is missing a name.")
