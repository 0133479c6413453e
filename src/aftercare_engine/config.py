from __future__ import annotations

from dataclasses import dataclass

from aftercare_engine.schema import MatchConfidence


@dataclass(frozen=True)
class SchedulerConfig:
    """Tunables for batch plan activation."""

    chunk_size: int = 100
    evergreen_threshold_years: int = 10
    evergreen_horizon: int = 5
    # Stamp each instance with a stable key so callers can dedupe on retry.
    dedup_keys: bool = False

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.evergreen_horizon < 0:
            raise ValueError(f"evergreen_horizon must be >= 0, got {self.evergreen_horizon}")


@dataclass(frozen=True)
class MatcherConfig:
    """Weights applied on top of the address score when linking two record sets."""

    name_bonus: int = 10
    email_bonus: int = 15
    min_confidence: MatchConfidence = MatchConfidence.LOW

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_confidence", MatchConfidence(self.min_confidence))
