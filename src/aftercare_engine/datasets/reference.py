from __future__ import annotations

import random
from datetime import date, timedelta

from aftercare_engine.models import AddressRecord, AnchorRecord

_FIRST_NAMES = [
    "Aroha",
    "James",
    "Mere",
    "Olivia",
    "Wiremu",
    "Charlotte",
    "Liam",
    "Amelia",
    "Noah",
    "Isla",
]
_LAST_NAMES = [
    "Smith",
    "Williams",
    "Brown",
    "Wilson",
    "Taylor",
    "Ngata",
    "Patel",
    "Walker",
]
_STREETS = [
    ("Queen", "Street"),
    ("Ponsonby", "Road"),
    ("Remuera", "Road"),
    ("Dominion", "Road"),
    ("Jervois", "Road"),
    ("Kohimarama", "Crescent"),
    ("Victoria", "Avenue"),
    ("Tamaki", "Drive"),
    ("Arthur", "Place"),
    ("Clifton", "Terrace"),
]
_SUBURBS = [
    ("Grey Lynn", "1021"),
    ("Remuera", "1050"),
    ("Mt Eden", "1024"),
    ("Herne Bay", "1011"),
    ("Kohimarama", "1071"),
    ("Parnell", "1052"),
]
_ABBREVIATIONS = {
    "Street": "St",
    "Road": "Rd",
    "Avenue": "Ave",
    "Drive": "Dr",
    "Place": "Pl",
    "Crescent": "Cres",
    "Terrace": "Tce",
}
_DOMAINS = ["gmail.com", "xtra.co.nz", "outlook.com", "example.co.nz"]
_AGENTS = ["agent_01", "agent_02", "agent_03"]


class ReferenceDatasetGenerator:
    """Generate synthetic property records (with intentional near-duplicates) for tests and demos."""

    def __init__(self, seed: int = 7) -> None:
        self._rng = random.Random(seed)

    def generate_address_sets(
        self,
        size: int,
        match_rate: float = 0.8,
    ) -> tuple[list[AddressRecord], list[AddressRecord]]:
        """Return ``(sources, targets)``: targets are clean, sources are noisy copies or strangers."""
        if size <= 0:
            return [], []

        targets: list[AddressRecord] = []
        for i in range(size):
            profile = self._profile(i)
            targets.append(
                AddressRecord(
                    record_id=f"prop_{i:06d}",
                    address=profile["address"],
                    owner_name=profile["owner_name"],
                    owner_email=profile["owner_email"],
                )
            )

        sources: list[AddressRecord] = []
        matched = int(size * match_rate)
        for i, target in enumerate(targets):
            if i < matched:
                sources.append(
                    AddressRecord(
                        record_id=f"ext_{i:06d}",
                        address=self._address_variant(target.address),
                        owner_name=self._name_variant(target.owner_name or ""),
                        owner_email=self._email_variant(target.owner_email),
                    )
                )
            else:
                stranger = self._profile(size + i)
                sources.append(AddressRecord(record_id=f"ext_{i:06d}", address=stranger["address"]))

        self._rng.shuffle(sources)
        return sources, targets

    def generate_anchor_records(
        self,
        size: int,
        today: date,
        max_years: int = 20,
        undated_rate: float = 0.02,
    ) -> list[AnchorRecord]:
        records: list[AnchorRecord] = []
        for i in range(max(0, size)):
            if self._rng.random() < undated_rate:
                anchor_date = None
            else:
                anchor_date = today - timedelta(days=self._rng.randint(0, max_years * 365))
            records.append(
                AnchorRecord(
                    record_id=f"sale_{i:06d}",
                    anchor_date=anchor_date,
                    owner_id=self._rng.choice(_AGENTS + [None]),
                )
            )
        return records

    def _profile(self, idx: int) -> dict[str, str]:
        first_name = self._rng.choice(_FIRST_NAMES)
        last_name = self._rng.choice(_LAST_NAMES)
        street, street_type = self._rng.choice(_STREETS)
        suburb, postcode = self._rng.choice(_SUBURBS)
        number = str(1 + (idx % 240))
        if self._rng.random() < 0.2:
            number = f"{self._rng.randint(1, 9)}/{number}"

        return {
            "address": f"{number} {street} {street_type}, {suburb} {postcode}",
            "owner_name": f"{first_name} {last_name}",
            "owner_email": f"{first_name}.{last_name}{idx % 97}@{self._rng.choice(_DOMAINS)}".lower(),
        }

    def _address_variant(self, address: str) -> str:
        variant = address
        mutation = self._rng.choice(["abbreviate", "unit", "suffix", "country", "none"])

        if mutation == "abbreviate":
            for full, short in _ABBREVIATIONS.items():
                variant = variant.replace(full, short)
        elif mutation == "unit" and "/" in variant:
            variant = f"Unit {variant}"
        elif mutation == "suffix":
            head, _, tail = variant.partition(" ")
            variant = f"{head}A {tail}"
        elif mutation == "country":
            variant = f"{variant}, New Zealand"

        if self._rng.random() < 0.3:
            variant = variant.lower()
        return variant

    def _name_variant(self, name: str) -> str:
        first, _, last = name.partition(" ")
        variant = self._rng.choice(["initial", "case", "same"])
        if variant == "initial" and first:
            return f"{first[0]}. {last}"
        if variant == "case":
            return name.upper()
        return name

    def _email_variant(self, email: str | None) -> str | None:
        if email and self._rng.random() < 0.3:
            return email.upper()
        return email
