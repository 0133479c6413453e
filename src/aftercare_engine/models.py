from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from aftercare_engine.schema import MatchConfidence, TimingType


@dataclass(frozen=True, slots=True)
class AddressRecord:
    """An address-bearing record from one of the two sources being linked."""

    record_id: str
    address: str
    owner_name: str | None = None
    owner_email: str | None = None


@dataclass(frozen=True, slots=True)
class AddressParts:
    number: str
    street: str
    unit: str | None = None


@dataclass(slots=True)
class MatchResult:
    """Best target found for one source record."""

    source_id: str
    source_address: str
    target_id: str
    target_address: str
    score: int
    confidence: MatchConfidence


@dataclass(frozen=True, slots=True)
class TemplateTask:
    """One follow-up task in a template, timed relative to the anchor date."""

    title: str
    timing_type: TimingType
    description: str | None = None
    days_offset: int | None = None
    anniversary_year: int | None = None

    def __post_init__(self) -> None:
        # Raises ValueError for anything outside the closed set.
        object.__setattr__(self, "timing_type", TimingType(self.timing_type))


@dataclass(frozen=True, slots=True)
class TaskTemplate:
    template_id: str
    stage: str
    tasks: tuple[TemplateTask, ...]
    is_evergreen: bool = False
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tasks", tuple(self.tasks))


@dataclass(frozen=True, slots=True)
class AnchorRecord:
    """A tracked record (e.g. a past sale) whose anchor date drives its plan."""

    record_id: str
    anchor_date: date | None
    owner_id: str | None = None


@dataclass(slots=True)
class TaskInstance:
    """A generated task row, ready to be handed to a task store."""

    title: str
    due_date: date
    anchor_record_id: str
    aftercare_year: int | None
    assigned_to: str | None
    description: str | None = None
    completed: bool = False
    completed_at: datetime | None = None
    historical_skip: bool = False
    team_id: str | None = None
    created_by: str | None = None
    dedup_key: str | None = None

    def to_row(self) -> dict[str, Any]:
        due = self.due_date.isoformat()
        row: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "due_date": due,
            "aftercare_due_date": due,
            "anchor_record_id": self.anchor_record_id,
            "aftercare_year": self.aftercare_year,
            "team_id": self.team_id,
            "assigned_to": self.assigned_to,
            "created_by": self.created_by,
            "completed": self.completed,
            "historical_skip": self.historical_skip,
        }
        if self.completed_at is not None:
            row["completed_at"] = self.completed_at.strftime("%Y-%m-%dT%H:%M:%SZ")
        if self.dedup_key is not None:
            row["dedup_key"] = self.dedup_key
        return row


@dataclass(slots=True)
class ActivationSummary:
    """Counters returned after a batch activation.

    ``tasks_skipped`` counts past-due rows flagged as historical skips; those
    rows are also in ``tasks_marked_historical``, alongside auto-completed ones.
    """

    total_plans_activated: int = 0
    tasks_created: int = 0
    tasks_skipped: int = 0
    tasks_marked_historical: int = 0
    evergreen_plans_created: int = 0


@dataclass(slots=True)
class ActivationPlan:
    """In-memory result of plan generation, before anything is persisted."""

    instances: list[TaskInstance] = field(default_factory=list)
    activated_record_ids: list[str] = field(default_factory=list)
    summary: ActivationSummary = field(default_factory=ActivationSummary)


@dataclass(frozen=True, slots=True)
class ExistingTask:
    """A task already stored for an anchor record, as seen by a plan refresh."""

    task_id: str
    title: str
    aftercare_year: int | None
    completed: bool = False
    description: str | None = None
