from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Sequence

from aftercare_engine.config import MatcherConfig
from aftercare_engine.matching.scoring import clamp_score, confidence_for, score_addresses, similarity, weighted_points
from aftercare_engine.models import AddressRecord, MatchResult
from aftercare_engine.schema import MatchConfidence

logger = logging.getLogger(__name__)

BlockKey = Callable[[AddressRecord], str]


class AddressMatcher:
    """Links each source record to its single best-scoring target record.

    Pairwise, so O(len(sources) * len(targets)). Pass ``block_key`` to only
    compare records that share a key (suburb, street number prefix, ...).
    """

    def __init__(
        self,
        config: MatcherConfig | None = None,
        block_key: BlockKey | None = None,
    ) -> None:
        self._config = config or MatcherConfig()
        self._block_key = block_key

    def score_pair(self, source: AddressRecord, target: AddressRecord) -> int:
        score = score_addresses(source.address, target.address)

        if source.owner_name and target.owner_name:
            name_similarity = similarity(source.owner_name.lower(), target.owner_name.lower())
            score += weighted_points(name_similarity, self._config.name_bonus)

        if source.owner_email and target.owner_email:
            if source.owner_email.lower() == target.owner_email.lower():
                score += self._config.email_bonus

        return clamp_score(score)

    def match_sets(
        self,
        sources: Sequence[AddressRecord],
        targets: Sequence[AddressRecord],
    ) -> list[MatchResult]:
        blocks = self._blocks(targets)
        matches: list[MatchResult] = []

        for source in sources:
            best: MatchResult | None = None
            for target in self._candidates(source, targets, blocks):
                score = self.score_pair(source, target)
                if best is None or score > best.score:
                    best = MatchResult(
                        source_id=source.record_id,
                        source_address=source.address,
                        target_id=target.record_id,
                        target_address=target.address,
                        score=score,
                        confidence=confidence_for(score),
                    )
            if best is not None and self._accepts(best.confidence):
                matches.append(best)

        logger.info("Matched %d of %d source records against %d targets", len(matches), len(sources), len(targets))
        return matches

    def _accepts(self, confidence: MatchConfidence) -> bool:
        if confidence == MatchConfidence.NONE:
            return False
        return confidence.rank >= self._config.min_confidence.rank

    def _blocks(self, targets: Sequence[AddressRecord]) -> dict[str, list[AddressRecord]] | None:
        if self._block_key is None:
            return None
        grouped: dict[str, list[AddressRecord]] = defaultdict(list)
        for target in targets:
            grouped[self._block_key(target)].append(target)
        return grouped

    def _candidates(
        self,
        source: AddressRecord,
        targets: Sequence[AddressRecord],
        blocks: dict[str, list[AddressRecord]] | None,
    ) -> Sequence[AddressRecord]:
        if blocks is None:
            return targets
        return blocks.get(self._block_key(source), [])
