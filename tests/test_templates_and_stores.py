import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from aftercare_engine.datasets import EVERGREEN_TEMPLATE, STANDARD_TEMPLATE, load_template
from aftercare_engine.errors import TaskStoreError, TemplateError
from aftercare_engine.models import TaskInstance
from aftercare_engine.schema import TimingType
from aftercare_engine.stores import JsonAnchorRecordStore, JsonTaskStore


def test_builtin_templates() -> None:
    years = [task.anniversary_year for task in STANDARD_TEMPLATE.tasks if task.timing_type == TimingType.ANNIVERSARY]
    assert years == list(range(1, 11))
    assert EVERGREEN_TEMPLATE.is_evergreen
    assert len(EVERGREEN_TEMPLATE.tasks) == 2


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_template_from_json(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "template.json",
        {
            "id": "tpl_custom",
            "name": "Custom",
            "tasks": [
                {"title": "Call", "timing_type": "immediate", "days_offset": "3"},
                {"title": "Card", "timing_type": "anniversary", "anniversary_year": 1, "description": "Send card"},
            ],
        },
    )

    template = load_template(path)

    assert template.template_id == "tpl_custom"
    assert template.stage == "aftercare"
    assert template.tasks[0].days_offset == 3
    assert template.tasks[1].timing_type == TimingType.ANNIVERSARY
    assert template.tasks[1].description == "Send card"


@pytest.mark.parametrize(
    "payload",
    [
        {"tasks": []},
        {"id": "x", "tasks": [{"timing_type": "immediate"}]},
        {"id": "x", "tasks": [{"title": "Call", "timing_type": "monthly"}]},
        {"id": "x", "tasks": [{"title": "Call", "timing_type": "immediate", "days_offset": "soon"}]},
        ["not", "an", "object"],
    ],
)
def test_invalid_templates_raise_template_error(tmp_path: Path, payload: object) -> None:
    with pytest.raises(TemplateError):
        load_template(_write(tmp_path / "bad.json", payload))


def test_missing_template_file_raises_template_error(tmp_path: Path) -> None:
    with pytest.raises(TemplateError):
        load_template(tmp_path / "missing.json")


def test_json_stores_round_trip_rows_and_plan_state(tmp_path: Path) -> None:
    task_store = JsonTaskStore(tmp_path / "out" / "tasks.jsonl")
    row = TaskInstance("Call", date(2024, 6, 4), "sale_1", 0, "agent_01").to_row()

    task_store.insert_tasks([row])
    task_store.insert_tasks([row])

    assert task_store.read_rows() == [row, row]

    record_store = JsonAnchorRecordStore(tmp_path / "out" / "plans.json")
    started = datetime(2024, 6, 1, tzinfo=timezone.utc)
    record_store.mark_plans_active(["sale_1"], template_id="tpl", started_at=started)
    record_store.mark_plans_active(["sale_2"], template_id="tpl", started_at=started)

    state = record_store.read_state()
    assert sorted(state) == ["sale_1", "sale_2"]
    assert state["sale_1"] == {
        "aftercare_status": "active",
        "aftercare_template_id": "tpl",
        "aftercare_started_at": "2024-06-01T00:00:00+00:00",
    }


def test_corrupt_plan_state_raises_task_store_error(tmp_path: Path) -> None:
    path = tmp_path / "plans.json"
    path.write_text("{not json", encoding="utf-8")
    record_store = JsonAnchorRecordStore(path)

    with pytest.raises(TaskStoreError):
        record_store.mark_plans_active(
            ["sale_1"], template_id="tpl", started_at=datetime(2024, 6, 1, tzinfo=timezone.utc)
        )
    assert path.read_text(encoding="utf-8") == "{not json"
