from __future__ import annotations

from datetime import date, datetime

from aftercare_engine.models import AnchorRecord, TaskInstance, TaskTemplate
from aftercare_engine.scheduling.timing import add_years, is_past


def generate_evergreen_tasks(
    record: AnchorRecord,
    anchor_date: date,
    years_ago: int,
    template: TaskTemplate,
    *,
    now: date | datetime,
    horizon: int = 5,
    assigned_to: str | None = None,
    team_id: str | None = None,
) -> list[TaskInstance]:
    """Rolling plan for long-tenured records: the next ``horizon`` anniversaries.

    Template tasks are used in rotation, slot ``i`` taking ``tasks[i % n]``.
    Anniversaries already behind ``now`` are dropped rather than backfilled.
    """
    if not template.tasks:
        return []

    tasks: list[TaskInstance] = []
    first_year = years_ago + 1
    for slot in range(horizon):
        year = first_year + slot
        due_date = add_years(anchor_date, year)
        if is_past(due_date, now):
            continue

        template_task = template.tasks[slot % len(template.tasks)]
        tasks.append(
            TaskInstance(
                title=template_task.title,
                description=annotate_year(template_task.description, year),
                due_date=due_date,
                anchor_record_id=record.record_id,
                aftercare_year=year,
                assigned_to=assigned_to,
                team_id=team_id,
                created_by=assigned_to,
            )
        )
    return tasks


def annotate_year(description: str | None, year: int) -> str:
    if not description:
        return f"(Year {year})"
    return f"{description} (Year {year})"
