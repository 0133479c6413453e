from __future__ import annotations

import argparse
import csv
from datetime import date
from pathlib import Path

from aftercare_engine.datasets import ReferenceDatasetGenerator


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate synthetic property and past-sale datasets")
    parser.add_argument("--size", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--match-rate", type=float, default=0.8)
    parser.add_argument("--output-dir", type=Path, default=Path("data/reference"))
    args = parser.parse_args()

    generator = ReferenceDatasetGenerator(seed=args.seed)
    sources, targets = generator.generate_address_sets(size=args.size, match_rate=args.match_rate)
    records = generator.generate_anchor_records(size=args.size, today=date.today())

    args.output_dir.mkdir(parents=True, exist_ok=True)
    for name, rows in (("external_properties.csv", sources), ("tracked_properties.csv", targets)):
        with (args.output_dir / name).open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=["id", "address", "owner_name", "owner_email"])
            writer.writeheader()
            for record in rows:
                writer.writerow(
                    {
                        "id": record.record_id,
                        "address": record.address,
                        "owner_name": record.owner_name or "",
                        "owner_email": record.owner_email or "",
                    }
                )

    with (args.output_dir / "past_sales.csv").open("w", newline="", encoding="utf-8") as handle:
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


if __name__ == "__main__":
    main()
