from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import NamedTuple

from dateutil.relativedelta import relativedelta

from aftercare_engine.models import TemplateTask
from aftercare_engine.schema import TimingType


class ResolvedTiming(NamedTuple):
    due_date: date
    aftercare_year: int | None


def resolve_due_date(anchor_date: date, task: TemplateTask) -> ResolvedTiming:
    """Concrete due date for ``task`` on a plan anchored at ``anchor_date``.

    Anniversaries of Feb 29 land on Feb 28 in non-leap years. A task whose
    offset is missing for its timing type falls back to the anchor date with
    no aftercare year.
    """
    if task.timing_type == TimingType.IMMEDIATE and task.days_offset is not None:
        return ResolvedTiming(anchor_date + timedelta(days=task.days_offset), 0)
    if task.timing_type == TimingType.ANNIVERSARY and task.anniversary_year is not None:
        return ResolvedTiming(add_years(anchor_date, task.anniversary_year), task.anniversary_year)
    return ResolvedTiming(anchor_date, None)


def add_years(value: date, years: int) -> date:
    return value + relativedelta(years=years)


def years_between(start: date, now: date | datetime) -> int:
    """Whole years elapsed from ``start`` to ``now`` (negative if ``start`` is later)."""
    return relativedelta(as_date(now), start).years


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_past(due_date: date, now: date | datetime) -> bool:
    # A task due today is still actionable.
    return due_date < as_date(now)
