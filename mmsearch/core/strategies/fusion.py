import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Iterable, Sequence

from ..models.fusion import FusedResult, WeightedSource
from ..models.search import SearchHit

logger = logging.getLogger(__name__)


class FusionStrategy(ABC):
    """Base class for rank fusion strategies."""

    @abstractmethod
    def combine(self, sources: Sequence[WeightedSource]) -> list[FusedResult]:
        """Fuse ranked lists into one ranking."""
        ...


class ConsensusWeightedFusion(FusionStrategy):
    """Sum weighted distances of items found by several sources.

    Works on distances: lower is better, and the output is sorted
    ascending. Items seen fewer than `min_sources` times are dropped.
    """

    def __init__(self, min_sources: int = 2):
        """Initialize strategy.

        Args:
            min_sources: Occurrences an item needs to be ranked.
        """
        if min_sources < 1:
            raise ValueError(f"min_sources must be at least 1, got {min_sources}")
        self._min_sources = min_sources

    def combine(self, sources: Sequence[WeightedSource]) -> list[FusedResult]:
        """Fuse weighted sources by consensus-gated weighted distance sum."""
        if not sources:
            return []

        occurrences: dict[str, int] = defaultdict(int)
        weighted: dict[str, list[float]] = defaultdict(list)

        for source in sources:
            for item_id, distance in source.hits:
                occurrences[item_id] += 1
                weighted[item_id].append(distance * source.weight)

        fused = [
            FusedResult(id=item_id, weighted_distance=sum(distances))
            for item_id, distances in weighted.items()
            if occurrences[item_id] >= self._min_sources
        ]

        # sorted() is stable: equal distances keep first-seen order
        fused = sorted(fused, key=lambda r: r.weighted_distance)

        dropped = len(weighted) - len(fused)
        if dropped:
            logger.debug(
                f"Fusion: {len(weighted)} ids → {len(fused)} "
                f"({dropped} below {self._min_sources} sources)"
            )

        return fused


def fuse_rankings(sources: Sequence[WeightedSource]) -> list[FusedResult]:
    """Fuse sources with the default consensus gate of two sources."""
    return ConsensusWeightedFusion().combine(sources)


def combine_weighted_results(
    text_hits: Iterable[SearchHit | tuple[str, float]],
    clip_hits: Iterable[SearchHit | tuple[str, float]],
    text_weight: float,
    clip_weight: float,
) -> list[FusedResult]:
    """Fuse a text-model ranking with a cross-modal ranking.

    Args:
        text_hits: Hits or (id, distance) pairs from the text model.
        clip_hits: Hits or (id, distance) pairs from the cross-modal model.
        text_weight: Weight of the text ranking.
        clip_weight: Weight of the cross-modal ranking.

    Returns:
        Items present in both rankings, best first.
    """
    return fuse_rankings([
        WeightedSource(hits=_as_pairs(text_hits), weight=text_weight),
        WeightedSource(hits=_as_pairs(clip_hits), weight=clip_weight),
    ])


def _as_pairs(hits: Iterable[SearchHit | tuple[str, float]]) -> list[tuple[str, float]]:
    pairs = []
    for hit in hits:
        if isinstance(hit, SearchHit):
            if hit.distance is None:
                continue
            pairs.append((hit.id, hit.distance))
        else:
            pairs.append(hit)
    return pairs
