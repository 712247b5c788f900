"""
Unit tests for consensus-weighted rank fusion.

Tests cover:
- Single-source items are dropped (consensus gate)
- Weighted distance sums
- Ascending order with stable ties
- Empty inputs
- combine_weighted_results over SearchHit lists
"""

import pytest

from mmsearch.core.models.fusion import FusedResult, WeightedSource
from mmsearch.core.models.search import SearchHit
from mmsearch.core.strategies.fusion import (
    ConsensusWeightedFusion,
    combine_weighted_results,
    fuse_rankings,
)


def test_item_in_one_source_is_dropped():
    sources = [
        WeightedSource(hits=[("x", 0.1)], weight=1.0),
        WeightedSource(hits=[], weight=1.0),
    ]

    assert fuse_rankings(sources) == []


def test_weighted_distances_are_summed():
    sources = [
        WeightedSource(hits=[("x", 0.2)], weight=1.0),
        WeightedSource(hits=[("x", 0.4)], weight=0.5),
    ]

    result = fuse_rankings(sources)

    assert len(result) == 1
    assert result[0].id == "x"
    assert result[0].weighted_distance == pytest.approx(0.4)


def test_results_sorted_ascending_by_weighted_distance():
    sources = [
        WeightedSource(hits=[("a", 0.9), ("b", 0.1), ("c", 0.5)], weight=1.0),
        WeightedSource(hits=[("c", 0.1), ("a", 0.9), ("b", 0.2), ("solo", 0.0)], weight=1.0),
    ]

    result = fuse_rankings(sources)

    assert [r.id for r in result] == ["b", "c", "a"]
    assert "solo" not in {r.id for r in result}


def test_ties_keep_first_seen_order():
    sources = [
        WeightedSource(hits=[("late", 0.3), ("early", 0.3)], weight=1.0),
        WeightedSource(hits=[("early", 0.3), ("late", 0.3)], weight=1.0),
    ]

    result = fuse_rankings(sources)

    assert [r.id for r in result] == ["late", "early"]


def test_empty_source_list():
    assert fuse_rankings([]) == []


def test_three_sources_accumulate():
    sources = [
        WeightedSource(hits=[("x", 0.1)], weight=1.0),
        WeightedSource(hits=[("x", 0.2)], weight=2.0),
        WeightedSource(hits=[("x", 0.3), ("y", 0.0)], weight=1.0),
    ]

    assert fuse_rankings(sources) == [FusedResult(id="x", weighted_distance=pytest.approx(0.8))]


def test_min_sources_is_configurable():
    sources = [
        WeightedSource(hits=[("x", 0.1), ("y", 0.2)], weight=1.0),
        WeightedSource(hits=[("x", 0.1)], weight=1.0),
    ]

    assert [r.id for r in ConsensusWeightedFusion(min_sources=1).combine(sources)] == ["x", "y"]
    assert [r.id for r in ConsensusWeightedFusion(min_sources=3).combine(sources)] == []


@pytest.mark.parametrize("weight", [0.0, -1.0])
def test_non_positive_weight_rejected(weight):
    with pytest.raises(ValueError):
        WeightedSource(hits=[("x", 0.1)], weight=weight)


def test_combine_weighted_results_accepts_hits():
    text_hits = [SearchHit(id="1", distance=0.2), SearchHit(id="2", distance=0.1)]
    clip_hits = [SearchHit(id="2", distance=0.6), SearchHit(id="1", distance=0.3), SearchHit(id="3")]

    result = combine_weighted_results(text_hits, clip_hits, text_weight=0.7, clip_weight=0.3)

    assert [r.id for r in result] == ["1", "2"]
    assert result[0].weighted_distance == pytest.approx(0.2 * 0.7 + 0.3 * 0.3)
    assert result[1].weighted_distance == pytest.approx(0.1 * 0.7 + 0.6 * 0.3)


def test_from_hits_skips_hits_without_distance():
    source = WeightedSource.from_hits(
        [SearchHit(id="a", distance=0.4), SearchHit(id="b")], weight=1.0
    )

    assert source.hits == (("a", 0.4),)
