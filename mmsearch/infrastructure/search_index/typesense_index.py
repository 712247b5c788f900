import logging
from typing import Any, Optional, Sequence

import httpx

from mmsearch.core.errors import RetrievalError
from mmsearch.core.models.search import QueryDescriptor, SearchHit, VectorClause

logger = logging.getLogger(__name__)


def format_vector_query(clause: VectorClause) -> str:
    """Render a vector clause as a Typesense `vector_query` value."""
    values = ",".join(repr(v) for v in clause.embedding.to_list())
    query = f"{clause.field}:([{values}], k:{clause.neighbors}"
    if clause.alpha is not None:
        query += f", alpha:{clause.alpha:g}"
    return query + ")"


def to_search_params(descriptor: QueryDescriptor) -> dict[str, Any]:
    """Convert a descriptor into one multi_search entry."""
    params: dict[str, Any] = {
        "collection": descriptor.collection,
        "q": descriptor.lexical_term,
        "limit": descriptor.limit,
    }
    if descriptor.query_by:
        params["query_by"] = descriptor.query_by
    if descriptor.filter_expr:
        params["filter_by"] = descriptor.filter_expr
    if descriptor.vector_clause is not None:
        params["vector_query"] = format_vector_query(descriptor.vector_clause)
    if descriptor.sort_by:
        params["sort_by"] = descriptor.sort_by
    if descriptor.exclude_fields:
        params["exclude_fields"] = ",".join(descriptor.exclude_fields)
    if descriptor.prefix is not None:
        params["prefix"] = "true" if descriptor.prefix else "false"
    return params


def parse_hits(result: dict[str, Any]) -> list[SearchHit]:
    """Convert one search result body into hits."""
    hits = []
    for hit in result.get("hits") or []:
        document = hit.get("document") or {}
        distance = hit.get("vector_distance")
        hits.append(
            SearchHit(
                id=str(document.get("id", "")),
                distance=float(distance) if distance is not None else None,
                payload=document,
                text_match=hit.get("text_match"),
            )
        )
    return hits


class TypesenseIndex:
    """Search index backed by the Typesense HTTP API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8108",
        api_key: str = "xyz",
        connection_timeout: float = 2.0,
        read_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Typesense client.

        Args:
            base_url: Typesense node URL including any path prefix.
            api_key: Search API key.
            connection_timeout: Connect timeout in seconds.
            read_timeout: Read timeout in seconds.
            client: Preconfigured HTTP client (tests).
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = httpx.Timeout(read_timeout, connect=connection_timeout)
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    @property
    def _headers(self) -> dict[str, str]:
        return {"X-TYPESENSE-API-KEY": self._api_key}

    async def search(self, descriptor: QueryDescriptor) -> list[SearchHit]:
        """Run one query."""
        results = await self.search_batch([descriptor])
        return results[0]

    async def search_batch(
        self, descriptors: Sequence[QueryDescriptor]
    ) -> list[list[SearchHit]]:
        """Run queries through a single multi_search request."""
        if not descriptors:
            return []

        collections = ",".join(d.collection for d in descriptors)
        body = {"searches": [to_search_params(d) for d in descriptors]}

        try:
            resp = await self.client.post(
                f"{self._base_url}/multi_search",
                json=body,
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.error(f"Typesense request failed ({collections}): {e!r}")
            raise RetrievalError(
                f"Typesense unreachable: {e!r}", collection=collections
            ) from e

        if resp.status_code != 200:
            logger.error(
                f"Typesense multi_search {resp.status_code} ({collections}): {resp.text[:500]}"
            )
            raise RetrievalError(
                f"Typesense search failed: {resp.text[:500]}",
                collection=collections,
                status_code=resp.status_code,
            )

        try:
            results = resp.json()["results"]
        except (ValueError, KeyError, TypeError) as e:
            raise RetrievalError(
                f"Malformed Typesense response: {resp.text[:500]}", collection=collections
            ) from e

        if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
            raise RetrievalError(
                f"Malformed Typesense response: {resp.text[:500]}", collection=collections
            )

        if len(results) != len(descriptors):
            raise RetrievalError(
                f"Expected {len(descriptors)} results, got {len(results)}",
                collection=collections,
            )

        hit_lists = []
        for descriptor, result in zip(descriptors, results):
            if "error" in result:
                logger.error(
                    f"Typesense search error on {descriptor.collection}: "
                    f"{result.get('code')} {result['error']}"
                )
                raise RetrievalError(
                    f"Typesense search failed: {result['error']}",
                    collection=descriptor.collection,
                    status_code=result.get("code"),
                )
            try:
                hit_lists.append(parse_hits(result))
            except (TypeError, ValueError, AttributeError) as e:
                logger.error(f"Unreadable hits from {descriptor.collection}: {e!r}")
                raise RetrievalError(
                    f"Malformed hits in Typesense response: {e}",
                    collection=descriptor.collection,
                ) from e

        logger.debug(
            f"Typesense: {len(descriptors)} queries → "
            f"{[len(h) for h in hit_lists]} hits ({collections})"
        )
        return hit_lists

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
