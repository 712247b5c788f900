"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol, EmbeddingOutcome
from .search_index import SearchIndexProtocol

__all__ = [
    "EmbedderProtocol",
    "EmbeddingOutcome",
    "SearchIndexProtocol",
]
