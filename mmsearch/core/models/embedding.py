"""Embedding domain models."""
from dataclasses import dataclass
from enum import Enum

import numpy as np


class ModelKind(Enum):
    """Which provider model produced (or should produce) a vector."""
    TEXT = "text"    # text-only model, lexical-space captions and queries
    IMAGE = "image"  # cross-modal model, shared image/text space


@dataclass(frozen=True, eq=False)
class Embedding:
    """Fixed-length vector for one input."""
    values: np.ndarray
    model: str
    kind: ModelKind

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=np.float64)
        if values.ndim != 1 or values.size == 0:
            raise ValueError(f"Embedding must be a non-empty 1-D vector, got shape {values.shape}")
        if not np.all(np.isfinite(values)):
            raise ValueError("Embedding contains non-finite values")
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @property
    def dimensionality(self) -> int:
        return int(self.values.shape[0])

    def to_list(self) -> list[float]:
        return [float(v) for v in self.values]

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class NoEmbedding:
    """Soft failure: no vector could be obtained for the input."""
    reason: str
    kind: ModelKind

    def __bool__(self) -> bool:
        return False
