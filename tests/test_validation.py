from dayflow.models import Task
from dayflow.timeutil import minutes_to_time_input
from dayflow.validation import overlaps, validate_tasks


def _task(name: str, start: str, end: str) -> Task:
    """Build a task from 24h "HH:MM" strings."""
    return Task(id=name or "unnamed", name=name, start=_at(start), end=_at(end))


def _at(clock: str):
    hours, minutes = clock.split(":")
    return minutes_to_time_input(int(hours) * 60 + int(minutes))


def test_empty_plan_is_rejected() -> None:
    assert validate_tasks([]) == "Please add at least one task."


def test_single_task_is_valid() -> None:
    assert validate_tasks([_task("Deep Work", "09:00", "10:00")]) is None


def test_overlap_names_both_tasks() -> None:
    tasks = [_task("A", "09:00", "10:00"), _task("B", "09:30", "10:30")]
    assert validate_tasks(tasks) == 'Task "A" overlaps with "B".'


def test_touching_boundaries_do_not_overlap() -> None:
    tasks = [_task("A", "09:00", "10:00"), _task("B", "10:00", "11:00")]
    assert validate_tasks(tasks) is None
    assert not overlaps(tasks[0], tasks[1])


def test_unsorted_but_disjoint_tasks_are_valid() -> None:
    tasks = [_task("B", "10:00", "11:00"), _task("A", "09:00", "10:00")]
    assert validate_tasks(tasks) is None


def test_missing_name_reports_position() -> None:
    tasks = [_task("A", "09:00", "10:00"), _task("   ", "10:00", "11:00")]
    assert validate_tasks(tasks) == "Task #2 is missing a name."


def test_inverted_or_empty_range_is_rejected() -> None:
    assert validate_tasks([_task("A", "10:00", "09:00")]) == 'Task "A" ends before it starts.'
    assert validate_tasks([_task("A", "10:00", "10:00")]) == 'Task "A" ends before it starts.'


def test_task_may_not_span_midnight() -> None:
    assert validate_tasks([_task("Late", "23:00", "01:00")]) == 'Task "Late" ends before it starts.'


def test_first_overlap_follows_index_order() -> None:
    tasks = [
        _task("A", "09:00", "12:00"),
        _task("B", "13:00", "14:00"),
        _task("C", "10:00", "11:00"),
    ]
    assert validate_tasks(tasks) == 'Task "A" overlaps with "C".'


def test_earlier_overlap_wins_over_later_missing_name() -> None:
    tasks = [
        _task("A", "09:00", "10:00"),
        _task("B", "09:30", "10:30"),
        _task("", "11:00", "12:00"),
    ]
    assert validate_tasks(tasks) == 'Task "A" overlaps with "B".'
