"""Search index protocol for dependency injection."""
from typing import Protocol, Sequence, runtime_checkable

from ..models.search import QueryDescriptor, SearchHit


@runtime_checkable
class SearchIndexProtocol(Protocol):
    """Protocol for the document index."""

    async def search(self, descriptor: QueryDescriptor) -> list[SearchHit]:
        """Run one query.

        Args:
            descriptor: Query to execute.

        Returns:
            Ranked hits.

        Raises:
            RetrievalError: If the index is unreachable or rejects the query.
        """
        ...

    async def search_batch(
        self, descriptors: Sequence[QueryDescriptor]
    ) -> list[list[SearchHit]]:
        """Run several queries in one round trip.

        Args:
            descriptors: Queries to execute.

        Returns:
            One hit list per descriptor, in input order.

        Raises:
            RetrievalError: If the index is unreachable or rejects any query.
        """
        ...
