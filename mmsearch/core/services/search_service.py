"""Search service - hybrid, cross-modal and semantic retrieval."""

import logging
from typing import Iterable, Optional

from ..models.embedding import ModelKind
from ..models.search import MATCH_ALL, SearchHit
from ..protocols.embedder import EmbedderProtocol
from ..protocols.search_index import SearchIndexProtocol
from ..query_builder import HybridQueryBuilder

logger = logging.getLogger(__name__)

TEXT_MATCH_SORT = "_text_match:desc,score:desc"


class SearchService:
    """Retrieval over the index with graceful embedding degradation.

    Embedding failures never fail a query; index failures raise
    RetrievalError to the caller.
    """

    def __init__(
        self,
        embedder: EmbedderProtocol,
        index: SearchIndexProtocol,
        builder: Optional[HybridQueryBuilder] = None,
        default_limit: int = 10,
    ):
        """Initialize search service.

        Args:
            embedder: Embedding provider.
            index: Document index.
            builder: Query builder, carries the default blend weight.
            default_limit: Hits per query when the caller gives none.
        """
        self._embedder = embedder
        self._index = index
        self._builder = builder or HybridQueryBuilder()
        self._default_limit = default_limit

    async def hybrid_search(
        self,
        collection: str,
        text: Optional[str] = None,
        filter_expr: Optional[str] = None,
        limit: Optional[int] = None,
        alpha: Optional[float] = None,
        *,
        query_by: str,
        vector_field: str,
        kind: ModelKind = ModelKind.TEXT,
        sort_by: Optional[str] = None,
        exclude_fields: Optional[Iterable[str]] = None,
        prefix: Optional[bool] = False,
    ) -> list[SearchHit]:
        """Blend lexical and vector ranking; lexical-only without an embedding.

        Args:
            collection: Target collection.
            text: Query text; None or blank matches everything.
            filter_expr: Index filter expression.
            limit: Number of hits.
            alpha: Blend override, 1.0 vector-dominant.
            query_by: Fields searched lexically.
            vector_field: Vector field compared with the query embedding.
            kind: Model kind the vector field was indexed with.
            sort_by: Sort expression, e.g. TEXT_MATCH_SORT.
            exclude_fields: Fields dropped from documents, defaults to
                the vector field.
            prefix: Prefix matching of the last token.

        Returns:
            Ranked hits.
        """
        limit = limit or self._default_limit
        embedding = None
        if text and text.strip():
            embedding = await self._embedder.embed_text(text, kind)

        descriptor = self._builder.build(
            collection,
            text,
            query_by=query_by,
            vector_field=vector_field,
            embedding=embedding,
            filter_expr=filter_expr,
            limit=limit,
            alpha=alpha,
            sort_by=sort_by,
            exclude_fields=exclude_fields if exclude_fields is not None else (vector_field,),
            prefix=prefix,
            expected_kind=kind,
        )

        hits = await self._index.search(descriptor)
        logger.info(
            f"Hybrid search on {collection}: {len(hits)} hits "
            f"(vector={descriptor.has_vector}) for '{(text or MATCH_ALL)[:50]}'"
        )
        return hits

    async def search_images_by_text(
        self,
        collection: str,
        text: Optional[str],
        filter_expr: Optional[str] = None,
        limit: Optional[int] = None,
        *,
        vector_field: str,
    ) -> list[SearchHit]:
        """Find image documents close to a text in the cross-modal space.

        There is no lexical signal to fall back on, so a missing
        embedding yields no hits.
        """
        if not text or not text.strip():
            return []

        embedding = await self._embedder.embed_text(text, ModelKind.IMAGE)
        if not embedding:
            logger.warning(
                f"Image search by text skipped on {collection}: {embedding.reason}"
            )
            return []

        descriptor = self._builder.build(
            collection,
            None,
            vector_field=vector_field,
            embedding=embedding,
            filter_expr=filter_expr,
            limit=limit or self._default_limit,
            exclude_fields=(vector_field,),
            expected_kind=ModelKind.IMAGE,
        )
        return await self._index.search(descriptor)

    async def semantic_search(
        self,
        collection: str,
        text: Optional[str],
        *,
        embedding_field: str,
        limit: int = 5,
        exclude_fields: Optional[Iterable[str]] = None,
    ) -> list[SearchHit]:
        """Search a field the index embeds itself (auto-embedding field)."""
        if not text or not text.strip():
            return []

        descriptor = self._builder.build(
            collection,
            text,
            query_by=embedding_field,
            limit=limit,
            exclude_fields=exclude_fields if exclude_fields is not None else (embedding_field,),
        )
        return await self._index.search(descriptor)
