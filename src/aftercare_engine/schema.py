from __future__ import annotations

from enum import StrEnum


class TimingType(StrEnum):
    IMMEDIATE = "immediate"
    ANNIVERSARY = "anniversary"


class HistoricalMode(StrEnum):
    """How past-due tasks are written when a plan is activated late."""

    SKIP = "skip"
    COMPLETE = "complete"
    INCLUDE = "include"


class MatchConfidence(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


class Disposition(StrEnum):
    NORMAL = "normal"
    HISTORICAL_SKIP = "historical_skip"
    AUTO_COMPLETE = "auto_complete"
    OVERDUE = "overdue"


class AgeCategory(StrEnum):
    RECENT = "recent"
    HISTORICAL = "historical"
    LEGACY = "legacy"


_CONFIDENCE_RANK = {
    MatchConfidence.NONE: 0,
    MatchConfidence.LOW: 1,
    MatchConfidence.MEDIUM: 2,
    MatchConfidence.HIGH: 3,
}
