"""Search domain models."""
from dataclasses import dataclass, field
from typing import Any, Optional

from .embedding import Embedding

MATCH_ALL = "*"


@dataclass(frozen=True)
class VectorClause:
    """Nearest-neighbour request on one vector field."""
    field: str
    embedding: Embedding
    neighbors: int
    alpha: Optional[float] = None  # lexical/vector blend, 1.0 = vector only


@dataclass(frozen=True)
class QueryDescriptor:
    """One retrieval request against one collection."""
    collection: str
    lexical_term: str = MATCH_ALL
    query_by: Optional[str] = None
    filter_expr: Optional[str] = None
    vector_clause: Optional[VectorClause] = None
    limit: int = 10
    sort_by: Optional[str] = None
    exclude_fields: tuple[str, ...] = ()
    prefix: Optional[bool] = None

    @property
    def has_vector(self) -> bool:
        return self.vector_clause is not None

    @property
    def is_match_all(self) -> bool:
        return self.lexical_term == MATCH_ALL


@dataclass
class SearchHit:
    """Single candidate returned by the index."""
    id: str
    distance: Optional[float] = None  # lower is closer; None without a vector clause
    payload: dict[str, Any] = field(default_factory=dict)
    text_match: Optional[int] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)
