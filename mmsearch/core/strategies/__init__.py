"""Rank fusion strategies."""
from .fusion import (
    ConsensusWeightedFusion,
    FusionStrategy,
    combine_weighted_results,
    fuse_rankings,
)

__all__ = [
    "ConsensusWeightedFusion",
    "FusionStrategy",
    "combine_weighted_results",
    "fuse_rankings",
]
