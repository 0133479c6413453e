from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, Sequence


class TaskStore(Protocol):
    """Bulk insert of generated task rows. Called once per chunk."""

    def insert_tasks(self, rows: Sequence[dict[str, Any]]) -> None:
        ...


class AnchorRecordStore(Protocol):
    """Marks processed anchor records as having an active aftercare plan."""

    def mark_plans_active(
        self,
        record_ids: Sequence[str],
        *,
        template_id: str,
        started_at: datetime,
    ) -> None:
        ...


class Clock(Protocol):
    def __call__(self) -> datetime:
        ...
