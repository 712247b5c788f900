"""Embedder protocol for dependency injection."""
from typing import Protocol, Union, runtime_checkable

from ..models.embedding import Embedding, ModelKind, NoEmbedding

EmbeddingOutcome = Union[Embedding, NoEmbedding]


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for the external embedding provider."""

    @property
    def is_enabled(self) -> bool:
        """Whether the provider is configured and switched on."""
        ...

    async def embed_text(
        self, text: str | None, kind: ModelKind = ModelKind.TEXT
    ) -> EmbeddingOutcome:
        """Embed text with the model for `kind`.

        Args:
            text: Input text.
            kind: TEXT for the text model, IMAGE for cross-modal text.

        Returns:
            Embedding, or NoEmbedding on any provider failure. Never raises.
        """
        ...

    async def embed_image(
        self, base64_image: str | None, kind: ModelKind = ModelKind.IMAGE
    ) -> EmbeddingOutcome:
        """Embed a base64 encoded image.

        Args:
            base64_image: Raw base64 payload or a data URI.
            kind: Model kind, normally IMAGE.

        Returns:
            Embedding, or NoEmbedding on any provider failure. Never raises.
        """
        ...
