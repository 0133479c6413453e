from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timezone

from aftercare_engine.models import ActivationSummary, TaskInstance
from aftercare_engine.schema import Disposition, HistoricalMode
from aftercare_engine.scheduling.timing import is_past

_PAST_DISPOSITIONS = {
    HistoricalMode.SKIP: Disposition.HISTORICAL_SKIP,
    HistoricalMode.COMPLETE: Disposition.AUTO_COMPLETE,
    HistoricalMode.INCLUDE: Disposition.OVERDUE,
}


def classify(due_date: date, now: date | datetime, mode: HistoricalMode) -> Disposition:
    """Decide how a generated task is written.

    Future (or today's) tasks are always created normally. Past-due tasks
    follow ``mode``: flagged as historical, auto-completed on their due date,
    or created as actionable overdue items. Every disposition still yields
    exactly one task row.
    """
    if not is_past(due_date, now):
        return Disposition.NORMAL
    return _PAST_DISPOSITIONS[HistoricalMode(mode)]


def apply_disposition(instance: TaskInstance, disposition: Disposition) -> TaskInstance:
    if disposition == Disposition.HISTORICAL_SKIP:
        return replace(instance, completed=False, completed_at=None, historical_skip=True)
    if disposition == Disposition.AUTO_COMPLETE:
        completed_at = datetime.combine(instance.due_date, time.min, tzinfo=timezone.utc)
        return replace(instance, completed=True, completed_at=completed_at, historical_skip=False)
    return replace(instance, completed=False, completed_at=None, historical_skip=False)


def tally(summary: ActivationSummary, disposition: Disposition) -> None:
    """Count one created task against the summary buckets for its disposition."""
    summary.tasks_created += 1
    if disposition == Disposition.HISTORICAL_SKIP:
        summary.tasks_skipped += 1
        summary.tasks_marked_historical += 1
    elif disposition == Disposition.AUTO_COMPLETE:
        summary.tasks_marked_historical += 1
