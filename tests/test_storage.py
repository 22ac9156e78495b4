import json
from pathlib import Path

import pytest

from dayflow.models import Meridiem, Plan, Task, TimeInput
from dayflow.storage import PlanStore, append_or_replace, history_newest_first, replace_existing


def _plan(plan_id: str = "p1", saved_at: str = "2024-05-01T09:00:00") -> Plan:
    return Plan(
        id=plan_id,
        saved_at=saved_at,
        tasks=[
            Task(id="t1", name="Email", start=TimeInput(9, 0, Meridiem.AM), end=TimeInput(9, 30, Meridiem.AM)),
            Task(id="t2", name="Lunch", start=TimeInput(12, 0, Meridiem.PM), end=TimeInput(1, 0, Meridiem.PM)),
        ],
    )


def test_plan_roundtrip(tmp_path: Path) -> None:
    store = PlanStore(tmp_path)
    store.save_plan(_plan())
    assert store.load_plan() == _plan()


def test_plan_file_format(tmp_path: Path) -> None:
    store = PlanStore(tmp_path / "nested")
    store.save_plan(_plan())

    data = json.loads((tmp_path / "nested" / "current_plan.json").read_text(encoding="utf-8"))
    assert data["savedAt"] == "2024-05-01T09:00:00"
    assert data["tasks"][0]["start"] == {"hours": "09", "minutes": "00", "ampm": "AM"}
    assert data["tasks"][1]["end"]["ampm"] == "PM"


def test_missing_files_load_as_empty(tmp_path: Path) -> None:
    store = PlanStore(tmp_path)
    assert store.load_plan() is None
    assert store.load_history() == []
    assert store.load_notes() == ""
    assert store.load_view() is None


def test_history_notes_and_view_roundtrip(tmp_path: Path) -> None:
    store = PlanStore(tmp_path)
    history = [_plan("p1"), _plan("p2", "2024-05-02T08:00:00")]
    store.save_history(history)
    store.save_notes("Call the bank\nBuy milk")
    store.save_view("timer\n")

    assert store.load_history() == history
    assert store.load_notes() == "Call the bank\nBuy milk"
    assert store.load_view() == "timer"


def test_corrupt_files_raise_value_error(tmp_path: Path) -> None:
    (tmp_path / "current_plan.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "history.json").write_text('{"id": "p1"}', encoding="utf-8")
    store = PlanStore(tmp_path)

    with pytest.raises(ValueError):
        store.load_plan()
    with pytest.raises(ValueError, match="expected a list"):
        store.load_history()


def test_plan_without_tasks_key_fields_is_rejected() -> None:
    with pytest.raises(ValueError):
        Plan.from_dict({"savedAt": "x", "tasks": []})
    with pytest.raises(ValueError):
        Plan.from_dict({"id": "p1", "tasks": [{"name": "No times"}]})


def test_stored_times_are_repaired_on_load() -> None:
    value = TimeInput.from_dict({"hours": "13", "minutes": "7x", "ampm": "pm"})
    assert value == TimeInput(12, 7, Meridiem.PM)
    assert TimeInput.from_dict({"hours": "", "minutes": "99"}) == TimeInput(12, 59, Meridiem.AM)


def test_append_or_replace_keeps_one_entry_per_plan() -> None:
    history = append_or_replace([], _plan("p1"))
    history = append_or_replace(history, _plan("p2"))
    restarted = _plan("p1", "2024-05-03T07:00:00")
    history = append_or_replace(history, restarted)

    assert [entry.id for entry in history] == ["p1", "p2"]
    assert history[0] is restarted


def test_replace_existing_never_adds_entries() -> None:
    history = [_plan("p1")]
    assert replace_existing(history, _plan("other")) == history
    edited = _plan("p1", "2024-06-01T10:00:00")
    assert replace_existing(history, edited) == [edited]


def test_history_newest_first() -> None:
    history = [
        _plan("old", "2024-05-01T09:00:00"),
        _plan("new", "2024-05-03T09:00:00"),
        _plan("mid", "2024-05-02T09:00:00"),
    ]
    assert [entry.id for entry in history_newest_first(history)] == ["new", "mid", "old"]


def test_null_task_name_loads_as_blank() -> None:
    task = Task.from_dict(
        {
            "id": "t1",
            "name": None,
            "start": {"hours": "09", "minutes": "00", "ampm": "AM"},
            "end": {"hours": "10", "minutes": None, "ampm": "AM"},
        }
    )
    assert task.name == ""
    assert not task.has_name()
    assert task.end == TimeInput(10, 0, Meridiem.AM)
