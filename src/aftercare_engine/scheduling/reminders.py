from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from aftercare_engine.models import TaskInstance
from aftercare_engine.scheduling.timing import as_date


def due_reminders(
    tasks: Iterable[TaskInstance],
    now: date | datetime,
    lead_days: int = 3,
) -> dict[str | None, list[TaskInstance]]:
    """Open, actionable tasks due exactly ``lead_days`` from ``now``, grouped by assignee."""
    target = as_date(now) + timedelta(days=lead_days)
    grouped: dict[str | None, list[TaskInstance]] = defaultdict(list)
    for task in tasks:
        if task.completed or task.historical_skip:
            continue
        if task.due_date == target:
            grouped[task.assigned_to].append(task)
    return dict(grouped)


def year_label(aftercare_year: int | None) -> str:
    if aftercare_year:
        return f"Year {aftercare_year} Anniversary"
    return "Settlement follow-up"
