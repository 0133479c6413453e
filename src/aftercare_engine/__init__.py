"""Address reconciliation and aftercare plan scheduling."""

from aftercare_engine.models import (
    ActivationSummary,
    AddressRecord,
    AnchorRecord,
    MatchResult,
    TaskInstance,
    TaskTemplate,
    TemplateTask,
)
from aftercare_engine.schema import HistoricalMode, MatchConfidence, TimingType

__all__ = [
    "ActivationSummary",
    "AddressRecord",
    "AnchorRecord",
    "HistoricalMode",
    "MatchConfidence",
    "MatchResult",
    "TaskInstance",
    "TaskTemplate",
    "TemplateTask",
    "TimingType",
]
