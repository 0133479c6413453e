"""Address canonicalization used by the matcher.

Addresses arrive from different systems with different habits: "12 Smith St",
"12 smith street, Remuera 1050, New Zealand", "Unit 3/12 Smith Street". The
functions here reduce them to one lowercase, punctuation-free form with street
types spelled out so that plain string comparison becomes meaningful.
"""

from __future__ import annotations

import re

from aftercare_engine.models import AddressParts

# Canonical street type -> accepted spellings (NZ conventions).
STREET_TYPES: dict[str, tuple[str, ...]] = {
    "road": ("rd", "road"),
    "street": ("st", "str", "street"),
    "avenue": ("ave", "av", "avenue"),
    "drive": ("dr", "drv", "drive"),
    "place": ("pl", "place"),
    "crescent": ("cres", "cr", "crescent"),
    "terrace": ("tce", "terr", "terrace"),
    "lane": ("ln", "lane"),
    "court": ("ct", "court"),
    "close": ("cl", "close"),
    "way": ("way",),
    "parade": ("pde", "parade"),
    "grove": ("gr", "grove"),
    "heights": ("hts", "heights"),
    "circuit": ("cct", "circuit"),
}

_PUNCTUATION = re.compile(r"[.,;:'\"!?()]")
_WHITESPACE = re.compile(r"\s+")
_COUNTRY_SUFFIX = re.compile(r"(?:^|\s)(?:new zealand|nz)$")
_POSTCODE_SUFFIX = re.compile(r"\s+\d{4}$")
_UNIT_PREFIX = re.compile(r"^(?:unit|flat|apt|apartment)\s+")

_UNIT_AND_NUMBER = re.compile(r"^(\d+[a-z]?)/(\d+[a-z]?)\s+(.+)")
_NUMBER = re.compile(r"^(\d+[a-z]?)\s+(.+)")

# A street type only counts when something follows it (a comma or the suburb)
# or it ends the string; "st" in "st heliers" is still expanded, as upstream.
_STREET_TYPE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"\b{re.escape(variation)}\b(?=\s*,|\s+[a-z]+|$)"), standard)
    for standard, variations in STREET_TYPES.items()
    for variation in variations
]


def normalize_address(address: str | None) -> str:
    """Return the canonical comparison form of ``address``.

    Never raises: ``None`` and blank strings normalize to ``""``. The result
    is a fixed point, so ``normalize_address(normalize_address(x))`` equals
    ``normalize_address(x)``.
    """
    if not address:
        return ""

    normalized = _PUNCTUATION.sub("", address.lower().strip())
    normalized = _WHITESPACE.sub(" ", normalized).strip()
    normalized = _strip_suffixes(normalized)

    for pattern, standard in _STREET_TYPE_PATTERNS:
        normalized = pattern.sub(standard, normalized)

    return _strip_unit_prefixes(normalized).strip()


def extract_parts(address: str | None) -> AddressParts:
    """Split an address into unit, street number and street name.

    ``"1/23 Queen St"`` gives unit ``"1"``, number ``"23"``; ``"23 Queen St"``
    gives number ``"23"`` with no unit. Anything after the first comma is not
    part of the street. Addresses without a leading number keep an empty
    number and the whole leading segment as street.
    """
    normalized = normalize_address(address)

    unit_match = _UNIT_AND_NUMBER.match(normalized)
    if unit_match:
        return AddressParts(
            unit=unit_match.group(1),
            number=unit_match.group(2),
            street=_leading_segment(unit_match.group(3)),
        )

    number_match = _NUMBER.match(normalized)
    if number_match:
        return AddressParts(number=number_match.group(1), street=_leading_segment(number_match.group(2)))

    return AddressParts(number="", street=_leading_segment(normalized))


def extract_suburb(address: str | None) -> str:
    """Second comma-delimited segment of the raw address, postcode removed."""
    if not address:
        return ""
    parts = address.lower().split(",")
    if len(parts) < 2:
        return ""
    return _POSTCODE_SUFFIX.sub("", parts[1].strip())


def _strip_suffixes(value: str) -> str:
    # "auckland nz 1010" needs both passes in either order.
    while True:
        stripped = _COUNTRY_SUFFIX.sub("", value).strip()
        stripped = _POSTCODE_SUFFIX.sub("", stripped).strip()
        if stripped == value:
            return stripped
        value = stripped


def _strip_unit_prefixes(value: str) -> str:
    while True:
        stripped = _UNIT_PREFIX.sub("", value)
        if stripped == value:
            return stripped
        value = stripped


def _leading_segment(value: str) -> str:
    return value.split(",", maxsplit=1)[0].strip()
