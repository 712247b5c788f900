"""Core business services."""
from .search_service import SearchService, TEXT_MATCH_SORT
from .classification_service import ClassificationService

__all__ = [
    "SearchService",
    "TEXT_MATCH_SORT",
    "ClassificationService",
]
