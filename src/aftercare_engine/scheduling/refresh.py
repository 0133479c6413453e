from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

from aftercare_engine.models import AnchorRecord, ExistingTask, TaskInstance, TaskTemplate
from aftercare_engine.scheduling.timing import is_past, resolve_due_date


@dataclass(slots=True)
class RefreshPlan:
    """Changes needed to bring a record's stored plan in line with a new template."""

    keeping: list[ExistingTask] = field(default_factory=list)
    adding: list[TaskInstance] = field(default_factory=list)
    removing: list[ExistingTask] = field(default_factory=list)
    completed: list[ExistingTask] = field(default_factory=list)

    def removal_ids(self, keep: Collection[str] = ()) -> list[str]:
        return [task.task_id for task in self.removing if task.task_id not in keep]

    @property
    def change_count(self) -> int:
        return len(self.adding) + len(self.removing)


def plan_refresh(
    record: AnchorRecord,
    existing: Sequence[ExistingTask],
    template: TaskTemplate,
    *,
    now: date | datetime,
    assigned_to: str | None = None,
    team_id: str | None = None,
) -> RefreshPlan:
    """Diff stored tasks against ``template``, keyed on (title, aftercare year).

    Completed tasks are history and always survive. Open tasks still in the
    template are kept, the rest are proposed for removal. Template tasks with
    no stored counterpart are added, but only when they fall due from today on.
    """
    plan = RefreshPlan()
    if record.anchor_date is None:
        return plan

    wanted: dict[tuple[str, int | None], TaskInstance] = {}
    for template_task in template.tasks:
        timing = resolve_due_date(record.anchor_date, template_task)
        wanted[(template_task.title, timing.aftercare_year)] = TaskInstance(
            title=template_task.title,
            description=template_task.description,
            due_date=timing.due_date,
            anchor_record_id=record.record_id,
            aftercare_year=timing.aftercare_year,
            assigned_to=assigned_to or record.owner_id,
            team_id=team_id,
            created_by=assigned_to or record.owner_id,
        )

    present: set[tuple[str, int | None]] = set()
    for task in existing:
        key = (task.title, task.aftercare_year)
        present.add(key)
        if task.completed:
            plan.completed.append(task)
        elif key in wanted:
            plan.keeping.append(task)
        else:
            plan.removing.append(task)

    for key, instance in wanted.items():
        if key not in present and not is_past(instance.due_date, now):
            plan.adding.append(instance)

    return plan
