from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from aftercare_engine.errors import TaskStoreError

logger = logging.getLogger(__name__)


class JsonTaskStore:
    """Appends task rows to a JSON-lines file, one row per line."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def insert_tasks(self, rows: Sequence[dict[str, Any]]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                for row in rows:
                    handle.write(json.dumps(row, sort_keys=True))
                    handle.write("\n")
        except OSError as exc:
            raise TaskStoreError(f"could not write {len(rows)} task rows to {self._path}") from exc
        logger.debug("Appended %d task rows to %s", len(rows), self._path)

    def read_rows(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]


class JsonAnchorRecordStore:
    """Keeps per-record plan state in a single JSON document keyed by record id."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def mark_plans_active(
        self,
        record_ids: Sequence[str],
        *,
        template_id: str,
        started_at: datetime,
    ) -> None:
        state = self.read_state()
        for record_id in record_ids:
            state[record_id] = {
                "aftercare_status": "active",
                "aftercare_template_id": template_id,
                "aftercare_started_at": started_at.isoformat(),
            }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as handle:
                json.dump(state, handle, indent=2, sort_keys=True)
        except OSError as exc:
            raise TaskStoreError(f"could not update plan state in {self._path}") from exc

    def read_state(self) -> dict[str, dict[str, Any]]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise TaskStoreError(f"could not read plan state from {self._path}") from exc
