"""Rank fusion domain models."""
from dataclasses import dataclass
from typing import Iterable, Sequence

from .search import SearchHit


@dataclass(frozen=True)
class WeightedSource:
    """Ranked (id, distance) list contributed by one modality."""
    hits: Sequence[tuple[str, float]]
    weight: float

    def __post_init__(self) -> None:
        if not self.weight > 0:
            raise ValueError(f"Source weight must be positive, got {self.weight}")
        object.__setattr__(self, "hits", tuple((str(i), float(d)) for i, d in self.hits))

    @classmethod
    def from_hits(cls, hits: Iterable[SearchHit], weight: float) -> "WeightedSource":
        """Build a source from search hits, skipping hits without a distance."""
        return cls(
            hits=[(h.id, h.distance) for h in hits if h.distance is not None],
            weight=weight,
        )


@dataclass(frozen=True)
class FusedResult:
    """Consensus item with its summed weighted distance (lower is better)."""
    id: str
    weighted_distance: float
