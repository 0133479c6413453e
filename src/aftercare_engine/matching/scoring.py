from __future__ import annotations

import re

from aftercare_engine.matching.normalize import extract_parts, extract_suburb, normalize_address
from aftercare_engine.schema import MatchConfidence

MAX_SCORE = 100

NUMBER_POINTS = 40
NUMBER_SUFFIX_POINTS = 25
STREET_POINTS = 40
UNIT_POINTS = 20
NO_UNIT_POINTS = 10
SUBURB_POINTS = 10

_LETTERS = re.compile(r"[a-z]", re.IGNORECASE)

# Lower bound (inclusive) for each confidence level, highest first.
_CONFIDENCE_FLOORS = (
    (95, MatchConfidence.HIGH),
    (80, MatchConfidence.MEDIUM),
    (60, MatchConfidence.LOW),
)


def score_addresses(left: str | None, right: str | None) -> int:
    """Additive 0-100 estimate that two addresses name the same property."""
    if not left or not right:
        return 0

    left_norm = normalize_address(left)
    right_norm = normalize_address(right)
    # Nothing left to compare, e.g. "NZ" alone; never an exact match.
    if not left_norm or not right_norm:
        return 0
    if left_norm == right_norm:
        return MAX_SCORE

    left_parts = extract_parts(left)
    right_parts = extract_parts(right)
    score = 0

    if left_parts.number and right_parts.number:
        if left_parts.number == right_parts.number:
            score += NUMBER_POINTS
        elif _LETTERS.sub("", left_parts.number) == _LETTERS.sub("", right_parts.number):
            score += NUMBER_SUFFIX_POINTS

    if left_parts.street and right_parts.street:
        if left_parts.street == right_parts.street:
            score += STREET_POINTS
        else:
            score += weighted_points(similarity(left_parts.street, right_parts.street), STREET_POINTS)

    if left_parts.unit and right_parts.unit:
        if left_parts.unit == right_parts.unit:
            score += UNIT_POINTS
    elif not left_parts.unit and not right_parts.unit:
        score += NO_UNIT_POINTS

    left_suburb = extract_suburb(left)
    if left_suburb and left_suburb == extract_suburb(right):
        score += SUBURB_POINTS

    return clamp_score(score)


def confidence_for(score: int) -> MatchConfidence:
    for floor, confidence in _CONFIDENCE_FLOORS:
        if score >= floor:
            return confidence
    return MatchConfidence.NONE


def clamp_score(score: int) -> int:
    return max(0, min(MAX_SCORE, score))


def similarity(left: str, right: str) -> float:
    """Levenshtein similarity in [0, 1]; two empty strings are identical."""
    longer, shorter = (left, right) if len(left) > len(right) else (right, left)
    if not longer:
        return 1.0
    return (len(longer) - levenshtein(longer, shorter)) / len(longer)


def levenshtein(left: str, right: str) -> int:
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)

    prev = list(range(len(right) + 1))
    for i, c1 in enumerate(left, start=1):
        curr = [i]
        for j, c2 in enumerate(right, start=1):
            cost = 0 if c1 == c2 else 1
            curr.append(min(curr[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost))
        prev = curr
    return prev[-1]


def weighted_points(fraction: float, points: int) -> int:
    # Half-up, so 0.5 of a point always counts.
    return int(fraction * points + 0.5)
