from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from aftercare_engine.schema import AgeCategory
from aftercare_engine.scheduling.timing import years_between


@dataclass(slots=True)
class AgeBreakdown:
    """How many records of an import land in each plan style."""

    recent: int = 0
    historical: int = 0
    legacy: int = 0

    @property
    def has_historical(self) -> bool:
        return self.historical > 0 or self.legacy > 0

    def count(self, category: AgeCategory) -> int:
        return getattr(self, category.value)


def age_category(
    anchor_date: date | None,
    now: date | datetime,
    legacy_after_years: int = 10,
) -> AgeCategory:
    # Undated records are treated as recent; they get no plan anyway.
    if anchor_date is None:
        return AgeCategory.RECENT
    years_ago = years_between(anchor_date, now)
    if years_ago < 1:
        return AgeCategory.RECENT
    if years_ago <= legacy_after_years:
        return AgeCategory.HISTORICAL
    return AgeCategory.LEGACY


def categorize_by_age(
    anchor_dates: Iterable[date | None],
    now: date | datetime,
    legacy_after_years: int = 10,
) -> AgeBreakdown:
    breakdown = AgeBreakdown()
    for anchor_date in anchor_dates:
        category = age_category(anchor_date, now, legacy_after_years)
        setattr(breakdown, category.value, breakdown.count(category) + 1)
    return breakdown
