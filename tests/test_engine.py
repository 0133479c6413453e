from datetime import date, datetime, timezone

import pytest

from aftercare_engine.config import SchedulerConfig
from aftercare_engine.errors import TaskStoreError
from aftercare_engine.models import AnchorRecord, TaskTemplate, TemplateTask
from aftercare_engine.schema import HistoricalMode, TimingType
from aftercare_engine.scheduling import BatchActivationEngine
from aftercare_engine.stores import InMemoryAnchorRecordStore, InMemoryTaskStore

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

STANDARD = TaskTemplate(
    template_id="tpl_standard",
    stage="aftercare",
    tasks=(
        TemplateTask("Gift", TimingType.IMMEDIATE, "Send a gift", days_offset=7),
        TemplateTask("Year 1", TimingType.ANNIVERSARY, "First anniversary", anniversary_year=1),
        TemplateTask("Year 5", TimingType.ANNIVERSARY, "Fifth anniversary", anniversary_year=5),
    ),
)

EVERGREEN = TaskTemplate(
    template_id="tpl_evergreen",
    stage="aftercare",
    is_evergreen=True,
    tasks=(
        TemplateTask("Annual call", TimingType.ANNIVERSARY, "Catch up", anniversary_year=1),
        TemplateTask("Market update", TimingType.ANNIVERSARY, "Send appraisal", anniversary_year=1),
    ),
)

SINGLE = TaskTemplate(
    template_id="tpl_single",
    stage="aftercare",
    tasks=(TemplateTask("Check-in", TimingType.IMMEDIATE, days_offset=30),),
)


def _engine(
    task_store: InMemoryTaskStore | None = None,
    record_store: InMemoryAnchorRecordStore | None = None,
    config: SchedulerConfig | None = None,
) -> tuple[BatchActivationEngine, InMemoryTaskStore, InMemoryAnchorRecordStore]:
    task_store = task_store or InMemoryTaskStore()
    record_store = record_store or InMemoryAnchorRecordStore()
    engine = BatchActivationEngine(task_store, record_store, config=config, clock=lambda: NOW)
    return engine, task_store, record_store


@pytest.mark.parametrize(
    "mode,completed,historical_skip,skipped,historical",
    [
        (HistoricalMode.SKIP, False, True, 3, 3),
        (HistoricalMode.COMPLETE, True, False, 0, 3),
        (HistoricalMode.INCLUDE, False, False, 0, 0),
    ],
)
def test_past_tasks_are_never_dropped(
    mode: HistoricalMode,
    completed: bool,
    historical_skip: bool,
    skipped: int,
    historical: int,
) -> None:
    engine, task_store, _ = _engine()
    record = AnchorRecord("sale_1", date(2015, 3, 1), owner_id="agent_01")

    summary = engine.activate([record], STANDARD, mode=mode)

    rows = task_store.rows
    assert len(rows) == 3
    assert all(row["completed"] is completed for row in rows)
    assert all(row["historical_skip"] is historical_skip for row in rows)
    assert summary.tasks_created == 3
    assert summary.tasks_skipped == skipped
    assert summary.tasks_marked_historical == historical
    assert summary.total_plans_activated == 1


def test_auto_completed_rows_are_completed_on_their_due_date() -> None:
    engine, task_store, _ = _engine()
    record = AnchorRecord("sale_1", date(2015, 3, 1))

    engine.activate([record], STANDARD, mode=HistoricalMode.COMPLETE)

    assert [row["completed_at"] for row in task_store.rows] == [
        "2015-03-08T00:00:00Z",
        "2016-03-01T00:00:00Z",
        "2020-03-01T00:00:00Z",
    ]


def test_mixed_past_and_future_tasks() -> None:
    engine, task_store, _ = _engine()
    record = AnchorRecord("sale_1", date(2023, 9, 1))

    summary = engine.activate([record], STANDARD, mode=HistoricalMode.SKIP)

    flags = [(row["title"], row["historical_skip"]) for row in task_store.rows]
    assert flags == [("Gift", True), ("Year 1", False), ("Year 5", False)]
    assert summary.tasks_marked_historical == 1
    assert [row["aftercare_year"] for row in task_store.rows] == [0, 1, 5]
    assert task_store.rows[1]["due_date"] == "2024-09-01"


def test_old_records_get_bounded_evergreen_rotation() -> None:
    engine, task_store, _ = _engine()
    record = AnchorRecord("sale_1", date(2009, 3, 10), owner_id="agent_02")

    summary = engine.activate([record], STANDARD, EVERGREEN, mode=HistoricalMode.SKIP)

    rows = task_store.rows
    assert len(rows) == 5
    assert [row["title"] for row in rows] == [
        "Annual call",
        "Market update",
        "Annual call",
        "Market update",
        "Annual call",
    ]
    assert [row["aftercare_year"] for row in rows] == [16, 17, 18, 19, 20]
    assert rows[0]["due_date"] == "2025-03-10"
    assert rows[0]["description"] == "Catch up (Year 16)"
    assert not any(row["historical_skip"] or row["completed"] for row in rows)
    assert summary.evergreen_plans_created == 1
    assert summary.tasks_created == 5
    assert summary.total_plans_activated == 1


def test_evergreen_needs_more_than_threshold_years() -> None:
    engine, task_store, _ = _engine()
    record = AnchorRecord("sale_1", date(2014, 6, 1))

    summary = engine.activate([record], STANDARD, EVERGREEN)

    assert summary.evergreen_plans_created == 0
    assert len(task_store.rows) == len(STANDARD.tasks)


def test_old_records_use_standard_template_without_evergreen() -> None:
    engine, task_store, _ = _engine()
    record = AnchorRecord("sale_1", date(2001, 1, 1))

    summary = engine.activate([record], STANDARD, None, mode=HistoricalMode.INCLUDE)

    assert summary.evergreen_plans_created == 0
    assert len(task_store.rows) == 3


def test_rows_are_written_in_chunks_of_100() -> None:
    engine, task_store, record_store = _engine()
    records = [AnchorRecord(f"sale_{i}", date(2024, 1, 1)) for i in range(250)]

    summary = engine.activate(records, SINGLE)

    assert [len(chunk) for chunk in task_store.chunks] == [100, 100, 50]
    assert summary.tasks_created == 250
    assert len(record_store.active_record_ids) == 250


def test_chunk_size_is_configurable() -> None:
    engine, task_store, _ = _engine(config=SchedulerConfig(chunk_size=40))
    records = [AnchorRecord(f"sale_{i}", date(2024, 1, 1)) for i in range(90)]

    engine.activate(records, SINGLE)

    assert [len(chunk) for chunk in task_store.chunks] == [40, 40, 10]


def test_records_without_anchor_date_are_skipped() -> None:
    engine, task_store, record_store = _engine()
    records = [AnchorRecord("sale_1", None), AnchorRecord("sale_2", date(2024, 1, 1))]

    summary = engine.activate(records, SINGLE)

    assert summary.total_plans_activated == 1
    assert {row["anchor_record_id"] for row in task_store.rows} == {"sale_2"}
    assert record_store.active_record_ids == {"sale_2"}


def test_nothing_to_activate_makes_no_collaborator_calls() -> None:
    engine, task_store, record_store = _engine()

    summary = engine.activate([AnchorRecord("sale_1", None)], SINGLE)

    assert summary.total_plans_activated == 0
    assert task_store.chunks == []
    assert record_store.activations == []


def test_chunk_failure_propagates_without_rollback() -> None:
    engine, task_store, record_store = _engine(task_store=InMemoryTaskStore(fail_on_chunk=1))
    records = [AnchorRecord(f"sale_{i}", date(2024, 1, 1)) for i in range(250)]

    with pytest.raises(TaskStoreError):
        engine.activate(records, SINGLE)

    assert [len(chunk) for chunk in task_store.chunks] == [100]
    assert record_store.activations == []


def test_plans_marked_active_once_with_template_and_start_time() -> None:
    engine, _, record_store = _engine()
    records = [AnchorRecord("sale_1", date(2024, 1, 1)), AnchorRecord("sale_2", date(2009, 1, 1))]

    engine.activate(records, STANDARD, EVERGREEN)

    [activation] = record_store.activations
    assert activation.record_ids == ["sale_1", "sale_2"]
    assert activation.template_id == "tpl_standard"
    assert activation.started_at == NOW


def test_assignee_falls_back_to_default_owner() -> None:
    engine, task_store, _ = _engine()
    records = [AnchorRecord("sale_1", date(2024, 1, 1), owner_id="agent_01"), AnchorRecord("sale_2", date(2024, 1, 1))]

    engine.activate(records, SINGLE, default_owner_id="office_admin", team_id="team_9")

    assert [(row["assigned_to"], row["created_by"]) for row in task_store.rows] == [
        ("agent_01", "agent_01"),
        ("office_admin", "office_admin"),
    ]
    assert {row["team_id"] for row in task_store.rows} == {"team_9"}


def test_explicit_now_overrides_clock() -> None:
    engine, task_store, _ = _engine()
    record = AnchorRecord("sale_1", date(2024, 1, 1))

    summary = engine.activate([record], SINGLE, now=datetime(2023, 1, 1, tzinfo=timezone.utc))

    assert summary.tasks_marked_historical == 0
    assert task_store.rows[0]["historical_skip"] is False


def test_dedup_keys_are_stable_and_optional() -> None:
    record = AnchorRecord("sale_1", date(2023, 9, 1))

    engine, plain_store, _ = _engine()
    engine.activate([record], STANDARD)
    assert all("dedup_key" not in row for row in plain_store.rows)

    keyed_engine, first, _ = _engine(config=SchedulerConfig(dedup_keys=True))
    keyed_engine.activate([record], STANDARD)
    again_engine, second, _ = _engine(config=SchedulerConfig(dedup_keys=True))
    again_engine.activate([record], STANDARD)

    first_keys = [row["dedup_key"] for row in first.rows]
    assert len(set(first_keys)) == 3
    assert first_keys == [row["dedup_key"] for row in second.rows]


def test_repeated_activation_duplicates_rows() -> None:
    engine, task_store, _ = _engine()
    record = AnchorRecord("sale_1", date(2024, 1, 1))

    engine.activate([record], SINGLE)
    engine.activate([record], SINGLE)

    assert len(task_store.rows) == 2


def test_build_plan_does_not_persist() -> None:
    engine, task_store, record_store = _engine()

    plan = engine.build_plan([AnchorRecord("sale_1", date(2024, 1, 1))], STANDARD)

    assert len(plan.instances) == 3
    assert plan.activated_record_ids == ["sale_1"]
    assert task_store.chunks == []
    assert record_store.activations == []
