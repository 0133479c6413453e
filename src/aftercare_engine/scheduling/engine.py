from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone

import xxhash

from aftercare_engine.config import SchedulerConfig
from aftercare_engine.interfaces import AnchorRecordStore, Clock, TaskStore
from aftercare_engine.models import (
    ActivationPlan,
    ActivationSummary,
    AnchorRecord,
    TaskInstance,
    TaskTemplate,
)
from aftercare_engine.schema import HistoricalMode
from aftercare_engine.scheduling.disposition import apply_disposition, classify, tally
from aftercare_engine.scheduling.evergreen import generate_evergreen_tasks
from aftercare_engine.scheduling.timing import resolve_due_date, years_between

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BatchActivationEngine:
    """Generates aftercare plans for many anchor records and persists them in chunks.

    Generation happens fully in memory; only then are task rows written,
    sequentially, ``config.chunk_size`` at a time. A failing chunk aborts the
    activation with the store's own exception. Chunks already written stay
    written, and the anchor records are not marked active.
    """

    def __init__(
        self,
        task_store: TaskStore,
        record_store: AnchorRecordStore,
        config: SchedulerConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._task_store = task_store
        self._record_store = record_store
        self._config = config or SchedulerConfig()
        self._clock = clock

    def activate(
        self,
        records: Sequence[AnchorRecord],
        template: TaskTemplate,
        evergreen_template: TaskTemplate | None = None,
        mode: HistoricalMode = HistoricalMode.SKIP,
        *,
        team_id: str | None = None,
        default_owner_id: str | None = None,
        now: datetime | None = None,
    ) -> ActivationSummary:
        now = now or self._clock()
        plan = self.build_plan(
            records,
            template,
            evergreen_template,
            mode,
            team_id=team_id,
            default_owner_id=default_owner_id,
            now=now,
        )

        self._insert_chunked(plan.instances)
        if plan.activated_record_ids:
            self._record_store.mark_plans_active(
                plan.activated_record_ids,
                template_id=template.template_id,
                started_at=now,
            )

        summary = plan.summary
        logger.info(
            "Activated %d aftercare plans (%d evergreen): %d tasks created, %d skipped, %d historical",
            summary.total_plans_activated,
            summary.evergreen_plans_created,
            summary.tasks_created,
            summary.tasks_skipped,
            summary.tasks_marked_historical,
        )
        return summary

    def build_plan(
        self,
        records: Sequence[AnchorRecord],
        template: TaskTemplate,
        evergreen_template: TaskTemplate | None = None,
        mode: HistoricalMode = HistoricalMode.SKIP,
        *,
        team_id: str | None = None,
        default_owner_id: str | None = None,
        now: datetime | None = None,
    ) -> ActivationPlan:
        now = now or self._clock()
        mode = HistoricalMode(mode)
        plan = ActivationPlan()

        for record in records:
            if record.anchor_date is None:
                logger.debug("Skipping record %s: no anchor date", record.record_id)
                continue

            assigned_to = record.owner_id or default_owner_id
            years_ago = years_between(record.anchor_date, now)

            if evergreen_template is not None and years_ago > self._config.evergreen_threshold_years:
                instances = generate_evergreen_tasks(
                    record,
                    record.anchor_date,
                    years_ago,
                    evergreen_template,
                    now=now,
                    horizon=self._config.evergreen_horizon,
                    assigned_to=assigned_to,
                    team_id=team_id,
                )
                plan.summary.evergreen_plans_created += 1
                plan.summary.tasks_created += len(instances)
            else:
                instances = self._standard_tasks(
                    record,
                    record.anchor_date,
                    template,
                    mode,
                    now=now,
                    assigned_to=assigned_to,
                    team_id=team_id,
                    summary=plan.summary,
                )

            if self._config.dedup_keys:
                for instance in instances:
                    instance.dedup_key = dedup_key(instance)

            plan.instances.extend(instances)
            plan.activated_record_ids.append(record.record_id)
            plan.summary.total_plans_activated += 1

        return plan

    def _standard_tasks(
        self,
        record: AnchorRecord,
        anchor_date: date,
        template: TaskTemplate,
        mode: HistoricalMode,
        *,
        now: datetime,
        assigned_to: str | None,
        team_id: str | None,
        summary: ActivationSummary,
    ) -> list[TaskInstance]:
        instances: list[TaskInstance] = []
        for template_task in template.tasks:
            timing = resolve_due_date(anchor_date, template_task)
            disposition = classify(timing.due_date, now, mode)
            instance = TaskInstance(
                title=template_task.title,
                description=template_task.description,
                due_date=timing.due_date,
                anchor_record_id=record.record_id,
                aftercare_year=timing.aftercare_year,
                assigned_to=assigned_to,
                team_id=team_id,
                created_by=assigned_to,
            )
            instances.append(apply_disposition(instance, disposition))
            tally(summary, disposition)
        return instances

    def _insert_chunked(self, instances: Sequence[TaskInstance]) -> None:
        size = self._config.chunk_size
        for start in range(0, len(instances), size):
            chunk = [instance.to_row() for instance in instances[start : start + size]]
            self._task_store.insert_tasks(chunk)
            logger.debug("Inserted task rows %d-%d of %d", start + 1, start + len(chunk), len(instances))


def dedup_key(instance: TaskInstance) -> str:
    """Stable identity of a generated task, for caller-side uniqueness checks."""
    parts = (
        instance.anchor_record_id,
        instance.title,
        "" if instance.aftercare_year is None else str(instance.aftercare_year),
        instance.due_date.isoformat(),
    )
    return xxhash.xxh64("|".join(parts)).hexdigest()
