"""Typed errors for failures that must reach the caller."""
from typing import Optional


class MultimodalSearchError(Exception):
    """Base error for the package."""


class RetrievalError(MultimodalSearchError):
    """Index-level failure: unreachable index, malformed query, unknown collection.

    Raised instead of returning an empty hit list so callers can tell
    "no results" apart from "index unusable".
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.collection = collection
        self.status_code = status_code
