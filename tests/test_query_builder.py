"""
Unit tests for HybridQueryBuilder.
"""

import pytest

from mmsearch.core.models.embedding import ModelKind, NoEmbedding
from mmsearch.core.models.search import MATCH_ALL
from mmsearch.core.query_builder import HybridQueryBuilder

from tests.fakes import TEXT_VECTOR, make_embedding


def test_hybrid_descriptor_with_embedding_and_text():
    builder = HybridQueryBuilder(alpha=0.5)
    embedding = make_embedding(TEXT_VECTOR)

    descriptor = builder.build(
        "product_attribute_values",
        "cotton",
        query_by="ai_value",
        vector_field="embedding_text",
        embedding=embedding,
        filter_expr="product_attribute_id:=3",
        limit=7,
    )

    assert descriptor.lexical_term == "cotton"
    assert descriptor.query_by == "ai_value"
    assert descriptor.filter_expr == "product_attribute_id:=3"
    assert descriptor.limit == 7
    clause = descriptor.vector_clause
    assert clause.field == "embedding_text"
    assert clause.neighbors == 7
    assert clause.alpha == 0.5
    assert clause.embedding is embedding


def test_alpha_override_per_call():
    builder = HybridQueryBuilder(alpha=0.5)

    descriptor = builder.build(
        "c", "q", query_by="f", vector_field="v",
        embedding=make_embedding(TEXT_VECTOR), alpha=1.0,
    )

    assert descriptor.vector_clause.alpha == 1.0


def test_vector_only_query_has_no_alpha():
    descriptor = HybridQueryBuilder().build(
        "c", None, vector_field="v", embedding=make_embedding(TEXT_VECTOR), limit=2
    )

    assert descriptor.lexical_term == MATCH_ALL
    assert descriptor.is_match_all
    assert descriptor.vector_clause.alpha is None
    assert descriptor.vector_clause.neighbors == 2


@pytest.mark.parametrize("embedding", [None, NoEmbedding(reason="status 500", kind=ModelKind.TEXT)])
def test_degrades_to_lexical_only(embedding):
    descriptor = HybridQueryBuilder().build(
        "c", "cotton", query_by="ai_value", vector_field="embedding_text", embedding=embedding
    )

    assert not descriptor.has_vector
    assert descriptor.lexical_term == "cotton"
    assert descriptor.query_by == "ai_value"


@pytest.mark.parametrize("alpha", [-0.1, 1.5])
def test_alpha_out_of_range_rejected(alpha):
    with pytest.raises(ValueError):
        HybridQueryBuilder(alpha=alpha)

    with pytest.raises(ValueError):
        HybridQueryBuilder().build(
            "c", "q", vector_field="v", embedding=make_embedding(TEXT_VECTOR), alpha=alpha
        )


def test_kind_mismatch_rejected():
    with pytest.raises(ValueError):
        HybridQueryBuilder().build(
            "c", "q",
            vector_field="embedding_clip",
            embedding=make_embedding(TEXT_VECTOR, ModelKind.TEXT),
            expected_kind=ModelKind.IMAGE,
        )


def test_embedding_requires_vector_field():
    with pytest.raises(ValueError):
        HybridQueryBuilder().build("c", "q", embedding=make_embedding(TEXT_VECTOR))


def test_exclude_fields_and_flags_carried():
    descriptor = HybridQueryBuilder().build(
        "c", "  q  ",
        query_by="f",
        sort_by="_text_match:desc",
        exclude_fields=["embedding_text", "embedding_clip"],
        prefix=False,
    )

    assert descriptor.lexical_term == "q"
    assert descriptor.sort_by == "_text_match:desc"
    assert descriptor.exclude_fields == ("embedding_text", "embedding_clip")
    assert descriptor.prefix is False
