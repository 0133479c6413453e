from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from aftercare_engine.errors import TaskStoreError


class InMemoryTaskStore:
    """Keeps inserted rows in memory; each insert call is one recorded chunk."""

    def __init__(self, fail_on_chunk: int | None = None) -> None:
        self._fail_on_chunk = fail_on_chunk
        self.chunks: list[list[dict[str, Any]]] = []

    def insert_tasks(self, rows: Sequence[dict[str, Any]]) -> None:
        if self._fail_on_chunk is not None and len(self.chunks) == self._fail_on_chunk:
            raise TaskStoreError(f"chunk {self._fail_on_chunk} rejected ({len(rows)} rows)")
        self.chunks.append([dict(row) for row in rows])

    @property
    def rows(self) -> list[dict[str, Any]]:
        return [row for chunk in self.chunks for row in chunk]


@dataclass(slots=True)
class PlanActivation:
    record_ids: list[str]
    template_id: str
    started_at: datetime


class InMemoryAnchorRecordStore:
    def __init__(self) -> None:
        self.activations: list[PlanActivation] = []

    def mark_plans_active(
        self,
        record_ids: Sequence[str],
        *,
        template_id: str,
        started_at: datetime,
    ) -> None:
        self.activations.append(PlanActivation(list(record_ids), template_id, started_at))

    @property
    def active_record_ids(self) -> set[str]:
        return {record_id for activation in self.activations for record_id in activation.record_ids}
