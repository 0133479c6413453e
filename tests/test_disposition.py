from datetime import date, datetime, timezone

import pytest

from aftercare_engine.models import ActivationSummary, TaskInstance
from aftercare_engine.schema import Disposition, HistoricalMode
from aftercare_engine.scheduling import apply_disposition, classify
from aftercare_engine.scheduling.disposition import tally

NOW = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("mode", list(HistoricalMode))
def test_future_and_today_tasks_are_always_normal(mode: HistoricalMode) -> None:
    assert classify(date(2024, 6, 2), NOW, mode) == Disposition.NORMAL
    assert classify(date(2024, 6, 1), NOW, mode) == Disposition.NORMAL


@pytest.mark.parametrize(
    "mode,expected",
    [
        (HistoricalMode.SKIP, Disposition.HISTORICAL_SKIP),
        (HistoricalMode.COMPLETE, Disposition.AUTO_COMPLETE),
        (HistoricalMode.INCLUDE, Disposition.OVERDUE),
        ("complete", Disposition.AUTO_COMPLETE),
    ],
)
def test_past_tasks_follow_mode(mode, expected: Disposition) -> None:
    assert classify(date(2024, 5, 31), NOW, mode) == expected


def _instance() -> TaskInstance:
    return TaskInstance(
        title="Year 1 anniversary",
        due_date=date(2023, 3, 10),
        anchor_record_id="sale_1",
        aftercare_year=1,
        assigned_to="agent_01",
    )


def test_historical_skip_is_flagged_not_completed() -> None:
    instance = apply_disposition(_instance(), Disposition.HISTORICAL_SKIP)

    assert instance.historical_skip is True
    assert instance.completed is False
    assert instance.completed_at is None


def test_auto_complete_uses_due_date_as_completion_time() -> None:
    instance = apply_disposition(_instance(), Disposition.AUTO_COMPLETE)

    assert instance.completed is True
    assert instance.completed_at == datetime(2023, 3, 10, tzinfo=timezone.utc)
    assert instance.historical_skip is False
    assert instance.to_row()["completed_at"] == "2023-03-10T00:00:00Z"


def test_overdue_stays_actionable() -> None:
    instance = apply_disposition(_instance(), Disposition.OVERDUE)

    assert instance.completed is False
    assert instance.historical_skip is False


def test_tally_buckets() -> None:
    summary = ActivationSummary()
    for disposition in Disposition:
        tally(summary, disposition)

    assert summary.tasks_created == 4
    assert summary.tasks_skipped == 1
    assert summary.tasks_marked_historical == 2
