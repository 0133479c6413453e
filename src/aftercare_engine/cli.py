from __future__ import annotations

import argparse
import csv
import json
import logging
from dataclasses import asdict
from datetime import date, datetime, timezone
from pathlib import Path

from aftercare_engine.config import MatcherConfig, SchedulerConfig
from aftercare_engine.datasets import EVERGREEN_TEMPLATE, STANDARD_TEMPLATE, ReferenceDatasetGenerator, load_template
from aftercare_engine.errors import TaskStoreError, TemplateError
from aftercare_engine.matching import AddressMatcher
from aftercare_engine.models import ActivationSummary, AddressRecord, AnchorRecord, MatchResult, TaskTemplate
from aftercare_engine.schema import HistoricalMode, MatchConfidence
from aftercare_engine.scheduling import BatchActivationEngine, categorize_by_age
from aftercare_engine.stores import JsonAnchorRecordStore, JsonTaskStore

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    try:
        if args.command == "match":
            run_match(
                source_csv=args.source,
                target_csv=args.target,
                output=args.output,
                min_confidence=args.min_confidence,
            )
            return
        if args.command == "activate":
            run_activate(
                records_csv=args.records,
                template_path=args.template,
                evergreen_template_path=args.evergreen_template,
                no_evergreen=args.no_evergreen,
                mode=args.mode,
                output_dir=args.output_dir,
                now=args.now,
                chunk_size=args.chunk_size,
                dedup_keys=args.dedup_keys,
                default_owner_id=args.default_owner,
                team_id=args.team,
            )
            return
        if args.command == "preview":
            run_preview(records_csv=args.records, now=args.now)
            return
        if args.command == "run-test":
            run_test(size=args.size, seed=args.seed, output_dir=args.output_dir, mode=args.mode, now=args.now)
            return
    except (TemplateError, TaskStoreError) as exc:
        parser.exit(status=2, message=f"error: {exc}\n")

    parser.print_help()


def run_match(
    *,
    source_csv: Path,
    target_csv: Path,
    output: Path | None,
    min_confidence: str,
) -> list[MatchResult]:
    sources = _read_address_csv(source_csv)
    targets = _read_address_csv(target_csv)
    matcher = AddressMatcher(config=MatcherConfig(min_confidence=MatchConfidence(min_confidence)))
    matches = matcher.match_sets(sources, targets)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        _write_json(output, [asdict(match) for match in matches])
        print(f"Matches: {output}")

    by_confidence = {level: 0 for level in MatchConfidence}
    for match in matches:
        by_confidence[match.confidence] += 1
    print(f"sources={len(sources)}")
    print(f"targets={len(targets)}")
    print(f"matches={len(matches)}")
    for level in (MatchConfidence.HIGH, MatchConfidence.MEDIUM, MatchConfidence.LOW):
        print(f"confidence_{level.value}={by_confidence[level]}")
    return matches


def run_activate(
    *,
    records_csv: Path,
    template_path: Path | None,
    evergreen_template_path: Path | None,
    no_evergreen: bool,
    mode: str,
    output_dir: Path,
    now: datetime | None,
    chunk_size: int,
    dedup_keys: bool,
    default_owner_id: str | None,
    team_id: str | None,
) -> ActivationSummary:
    records = _read_anchor_csv(records_csv)
    template = load_template(template_path) if template_path else STANDARD_TEMPLATE
    evergreen = _evergreen_template(evergreen_template_path, no_evergreen)
    return _activate(
        records=records,
        template=template,
        evergreen=evergreen,
        mode=HistoricalMode(mode),
        output_dir=output_dir,
        now=now,
        config=SchedulerConfig(chunk_size=chunk_size, dedup_keys=dedup_keys),
        default_owner_id=default_owner_id,
        team_id=team_id,
    )


def run_preview(*, records_csv: Path, now: datetime | None) -> None:
    records = _read_anchor_csv(records_csv)
    breakdown = categorize_by_age((record.anchor_date for record in records), now or datetime.now(timezone.utc))
    print(f"records={len(records)}")
    print(f"recent={breakdown.recent}")
    print(f"historical={breakdown.historical}")
    print(f"legacy={breakdown.legacy}")
    if breakdown.has_historical:
        print("note=past-due tasks will follow --mode (skip|complete|include)")


def run_test(
    *,
    size: int,
    seed: int,
    output_dir: Path,
    mode: str,
    now: datetime | None,
) -> ActivationSummary:
    output_dir.mkdir(parents=True, exist_ok=True)
    now = now or datetime.now(timezone.utc)
    generator = ReferenceDatasetGenerator(seed=seed)

    sources, targets = generator.generate_address_sets(size=size)
    matches = AddressMatcher().match_sets(sources, targets)
    matches_path = output_dir / "matches.json"
    _write_json(matches_path, [asdict(match) for match in matches])
    print(f"Matches: {matches_path}")
    print(f"match_sources={len(sources)}")
    print(f"matches={len(matches)}")

    records = generator.generate_anchor_records(size=size, today=now.date())
    records_path = output_dir / "anchor_records.csv"
    _write_anchor_csv(records_path, records)
    print(f"Records: {records_path}")

    return _activate(
        records=records,
        template=STANDARD_TEMPLATE,
        evergreen=EVERGREEN_TEMPLATE,
        mode=HistoricalMode(mode),
        output_dir=output_dir,
        now=now,
        config=SchedulerConfig(),
        default_owner_id=None,
        team_id=None,
    )


def _activate(
    *,
    records: list[AnchorRecord],
    template: TaskTemplate,
    evergreen: TaskTemplate | None,
    mode: HistoricalMode,
    output_dir: Path,
    now: datetime | None,
    config: SchedulerConfig,
    default_owner_id: str | None,
    team_id: str | None,
) -> ActivationSummary:
    output_dir.mkdir(parents=True, exist_ok=True)
    tasks_path = output_dir / "tasks.jsonl"
    plans_path = output_dir / "plans.json"

    engine = BatchActivationEngine(
        task_store=JsonTaskStore(tasks_path),
        record_store=JsonAnchorRecordStore(plans_path),
        config=config,
    )
    summary = engine.activate(
        records,
        template,
        evergreen,
        mode,
        team_id=team_id,
        default_owner_id=default_owner_id,
        now=now,
    )

    print(f"Tasks: {tasks_path}")
    print(f"Plans: {plans_path}")
    print("---")
    for key, value in asdict(summary).items():
        print(f"{key}={value}")
    return summary


def _evergreen_template(path: Path | None, disabled: bool) -> TaskTemplate | None:
    if disabled:
        return None
    if path is not None:
        return load_template(path)
    return EVERGREEN_TEMPLATE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aftercare-engine", description="Aftercare matching and scheduling CLI")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")
    subparsers = parser.add_subparsers(dest="command")

    match_parser = subparsers.add_parser("match", help="Link external property records to tracked ones by address")
    match_parser.add_argument("--source", type=Path, required=True, help="CSV with id,address,owner_name,owner_email")
    match_parser.add_argument("--target", type=Path, required=True, help="CSV with id,address,owner_name,owner_email")
    match_parser.add_argument("--output", type=Path, default=None)
    match_parser.add_argument(
        "--min-confidence",
        choices=[MatchConfidence.LOW.value, MatchConfidence.MEDIUM.value, MatchConfidence.HIGH.value],
        default=MatchConfidence.LOW.value,
    )

    activate_parser = subparsers.add_parser("activate", help="Generate and store aftercare plans for anchor records")
    activate_parser.add_argument("--records", type=Path, required=True, help="CSV with id,anchor_date,owner_id")
    activate_parser.add_argument("--template", type=Path, default=None)
    activate_parser.add_argument("--evergreen-template", type=Path, default=None)
    activate_parser.add_argument("--no-evergreen", action="store_true")
    _add_mode_argument(activate_parser)
    activate_parser.add_argument("--output-dir", type=Path, default=Path("data/aftercare"))
    _add_now_argument(activate_parser)
    activate_parser.add_argument("--chunk-size", type=int, default=SchedulerConfig.chunk_size)
    activate_parser.add_argument("--dedup-keys", action="store_true")
    activate_parser.add_argument("--default-owner", type=str, default=None)
    activate_parser.add_argument("--team", type=str, default=None)

    preview_parser = subparsers.add_parser("preview", help="Show how an import splits into recent/historical/legacy")
    preview_parser.add_argument("--records", type=Path, required=True)
    _add_now_argument(preview_parser)

    run_test_parser = subparsers.add_parser(
        "run-test",
        help="Generate a synthetic dataset, run matching and activation, and write the outputs",
    )
    run_test_parser.add_argument("--size", type=int, default=500)
    run_test_parser.add_argument("--seed", type=int, default=42)
    run_test_parser.add_argument("--output-dir", type=Path, default=Path("data/cli_output"))
    _add_mode_argument(run_test_parser)
    _add_now_argument(run_test_parser)

    return parser


def _add_mode_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--mode", choices=[mode.value for mode in HistoricalMode], default=HistoricalMode.SKIP.value)


def _add_now_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--now", type=_parse_now, default=None, help="ISO date or datetime; defaults to the clock")


def _parse_now(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _write_json(path: Path, payload: object) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def _read_address_csv(path: Path) -> list[AddressRecord]:
    records: list[AddressRecord] = []
    with path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            record_id = row.get("id")
            if not record_id:
                continue
            records.append(
                AddressRecord(
                    record_id=record_id,
                    address=row.get("address") or "",
                    owner_name=row.get("owner_name") or None,
                    owner_email=row.get("owner_email") or None,
                )
            )
    return records


def _read_anchor_csv(path: Path) -> list[AnchorRecord]:
    records: list[AnchorRecord] = []
    with path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            record_id = row.get("id")
            if not record_id:
                continue
            records.append(
                AnchorRecord(
                    record_id=record_id,
                    anchor_date=_parse_date(row.get("anchor_date")),
                    owner_id=row.get("owner_id") or None,
                )
            )
    return records


def _write_anchor_csv(path: Path, records: list[AnchorRecord]) -> None:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=["id", "anchor_date", "owner_id"])
        writer.writeheader()
        for record in records:
            writer.writerow(
                {
                    "id": record.record_id,
                    "anchor_date": record.anchor_date.isoformat() if record.anchor_date else "",
                    "owner_id": record.owner_id or "",
                }
            )


def _parse_date(value: str | None) -> date | None:
    # Unparseable dates are treated like missing ones: the record is skipped.
    if not value or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        logger.warning("Ignoring unparseable anchor date %r", value)
        return None


if __name__ == "__main__":
    main()
