from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from aftercare_engine.errors import TemplateError
from aftercare_engine.models import TaskTemplate, TemplateTask
from aftercare_engine.schema import TimingType

# Ten-year plan started at settlement.
STANDARD_TEMPLATE = TaskTemplate(
    template_id="aftercare-standard",
    stage="aftercare",
    name="Standard Aftercare",
    tasks=(
        TemplateTask("Settlement day call", TimingType.IMMEDIATE, "Call to congratulate on settlement", days_offset=0),
        TemplateTask("Send housewarming gift", TimingType.IMMEDIATE, "Arrange a gift delivery", days_offset=7),
        TemplateTask("One month check-in", TimingType.IMMEDIATE, "How are they settling in?", days_offset=30),
        TemplateTask("Three month check-in", TimingType.IMMEDIATE, "Ask for a review or referral", days_offset=90),
        *(
            TemplateTask(
                f"Year {year} anniversary",
                TimingType.ANNIVERSARY,
                f"Home anniversary touchpoint, year {year}",
                anniversary_year=year,
            )
            for year in range(1, 11)
        ),
    ),
)

# Rotated annually for records too old for the standard plan.
EVERGREEN_TEMPLATE = TaskTemplate(
    template_id="aftercare-evergreen",
    stage="aftercare",
    name="Evergreen Relationship",
    is_evergreen=True,
    tasks=(
        TemplateTask(
            "Annual check-in call",
            TimingType.ANNIVERSARY,
            "Catch up and offer a market update",
            anniversary_year=1,
        ),
        TemplateTask(
            "Send market appraisal",
            TimingType.ANNIVERSARY,
            "Share an updated value estimate",
            anniversary_year=1,
        ),
    ),
)


def load_template(path: Path) -> TaskTemplate:
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise TemplateError(f"{path}: {exc}") from exc
    return template_from_mapping(payload, source=str(path))


def template_from_mapping(payload: Mapping[str, Any], source: str = "<template>") -> TaskTemplate:
    if not isinstance(payload, Mapping):
        raise TemplateError(f"{source}: expected a JSON object")
    try:
        raw_tasks = payload["tasks"]
        tasks = tuple(_task_from_mapping(raw, source, i) for i, raw in enumerate(raw_tasks))
        return TaskTemplate(
            template_id=str(payload["id"]),
            stage=str(payload.get("stage", "aftercare")),
            tasks=tasks,
            is_evergreen=bool(payload.get("is_evergreen", False)),
            name=payload.get("name"),
        )
    except KeyError as exc:
        raise TemplateError(f"{source}: missing field {exc.args[0]!r}") from exc


def _task_from_mapping(raw: Mapping[str, Any], source: str, index: int) -> TemplateTask:
    try:
        return TemplateTask(
            title=str(raw["title"]),
            timing_type=raw["timing_type"],
            description=raw.get("description"),
            days_offset=_optional_int(raw.get("days_offset")),
            anniversary_year=_optional_int(raw.get("anniversary_year")),
        )
    except KeyError as exc:
        raise TemplateError(f"{source}: task {index} missing field {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise TemplateError(f"{source}: task {index}: {exc}") from exc


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    return int(value)
