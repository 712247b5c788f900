"""Hybrid (lexical + vector) query construction."""

import logging
from typing import Iterable, Optional

from .models.embedding import Embedding, ModelKind, NoEmbedding
from .models.search import MATCH_ALL, QueryDescriptor, VectorClause

logger = logging.getLogger(__name__)


def _check_alpha(alpha: float) -> float:
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"alpha must be within [0, 1], got {alpha}")
    return float(alpha)


class HybridQueryBuilder:
    """Builds query descriptors, degrading to lexical-only without a vector."""

    def __init__(self, alpha: float = 0.5):
        """Initialize builder.

        Args:
            alpha: Default blend weight; 1.0 ranks by vector only,
                0.0 by lexical match only.
        """
        self._alpha = _check_alpha(alpha)

    @property
    def alpha(self) -> float:
        return self._alpha

    def build(
        self,
        collection: str,
        text: Optional[str],
        *,
        query_by: Optional[str] = None,
        vector_field: Optional[str] = None,
        embedding: Embedding | NoEmbedding | None = None,
        filter_expr: Optional[str] = None,
        limit: int = 10,
        alpha: Optional[float] = None,
        sort_by: Optional[str] = None,
        exclude_fields: Iterable[str] = (),
        prefix: Optional[bool] = None,
        expected_kind: Optional[ModelKind] = None,
    ) -> QueryDescriptor:
        """Build one query descriptor.

        Args:
            collection: Target collection.
            text: Lexical term; blank means match-all.
            query_by: Fields searched lexically.
            vector_field: Field holding the document vectors.
            embedding: Query vector, or NoEmbedding/None for lexical-only.
            filter_expr: Index filter expression.
            limit: Number of hits, also used as the neighbour count.
            alpha: Per-call blend override.
            sort_by: Index sort expression.
            exclude_fields: Fields dropped from returned documents.
            prefix: Whether the last lexical token matches as a prefix.
            expected_kind: Model kind the vector field was indexed with.

        Returns:
            Query descriptor.
        """
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        term = text.strip() if text and text.strip() else MATCH_ALL
        vector_clause = None

        if isinstance(embedding, Embedding):
            if vector_field is None:
                raise ValueError("vector_field is required when an embedding is given")
            if expected_kind is not None and embedding.kind != expected_kind:
                raise ValueError(
                    f"{vector_field} expects {expected_kind.value} vectors, "
                    f"got {embedding.kind.value}"
                )
            blend = None
            if term != MATCH_ALL:
                blend = _check_alpha(alpha) if alpha is not None else self._alpha
            vector_clause = VectorClause(
                field=vector_field,
                embedding=embedding,
                neighbors=limit,
                alpha=blend,
            )
        elif isinstance(embedding, NoEmbedding):
            logger.info(
                f"No embedding for '{term[:50]}' ({embedding.reason}), "
                f"lexical-only query on {collection}"
            )

        return QueryDescriptor(
            collection=collection,
            lexical_term=term,
            query_by=query_by,
            filter_expr=filter_expr,
            vector_clause=vector_clause,
            limit=limit,
            sort_by=sort_by,
            exclude_fields=tuple(exclude_fields),
            prefix=prefix,
        )
