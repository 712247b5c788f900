"""Domain models."""
from .embedding import Embedding, ModelKind, NoEmbedding
from .search import MATCH_ALL, QueryDescriptor, SearchHit, VectorClause
from .classification import ClassificationResult, GroupScore, Modality
from .fusion import FusedResult, WeightedSource

__all__ = [
    "Embedding",
    "ModelKind",
    "NoEmbedding",
    "MATCH_ALL",
    "QueryDescriptor",
    "SearchHit",
    "VectorClause",
    "ClassificationResult",
    "GroupScore",
    "Modality",
    "FusedResult",
    "WeightedSource",
]
