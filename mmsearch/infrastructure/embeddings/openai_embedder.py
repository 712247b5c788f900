import logging
from typing import Any, Optional

import httpx
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    OpenAIError,
)

from mmsearch.core.models.embedding import Embedding, ModelKind, NoEmbedding

logger = logging.getLogger(__name__)

IMAGE_DATA_URI_PREFIX = "data:image/jpeg;base64,"
ERROR_BODY_LIMIT = 500


def truncate_words(text: str, max_words: int) -> str:
    """Keep the first `max_words` whitespace-separated words."""
    words = text.split()
    if len(words) <= max_words:
        return text.strip()
    return " ".join(words[:max_words])


class OpenAIEmbedder:
    """Embedding client for an OpenAI-compatible provider (LiteLLM, vLLM, ...)."""

    def __init__(
        self,
        base_url: str = "",
        api_key: str = "",
        text_model: str = "qwen3-embedding",
        image_model: str = "siglip2-embedding",
        enabled: bool = False,
        timeout: float = 30.0,
        cross_modal_max_words: int = 20,
        client: Optional[AsyncOpenAI] = None,
    ):
        """Initialize embedding client.

        Args:
            base_url: Provider root URL, without the /v1 suffix.
            api_key: Bearer token for the provider.
            text_model: Model used for ModelKind.TEXT.
            image_model: Cross-modal model used for ModelKind.IMAGE.
            enabled: Feature flag; disabled clients return NoEmbedding.
            timeout: Per-call timeout in seconds.
            cross_modal_max_words: Word cap for text sent to the image model.
            client: Preconfigured client (tests).
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._models = {ModelKind.TEXT: text_model, ModelKind.IMAGE: image_model}
        self._enabled = enabled
        self._timeout = timeout
        self._cross_modal_max_words = cross_modal_max_words
        self._client = client

    @property
    def is_enabled(self) -> bool:
        return self._enabled and bool(self._base_url)

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/v1/embeddings"

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                base_url=f"{self._base_url}/v1",
                # the SDK refuses an empty key; unauthenticated proxies ignore it
                api_key=self._api_key or "none",
                timeout=httpx.Timeout(self._timeout),
                max_retries=0,
            )
        return self._client

    def model_for(self, kind: ModelKind) -> str:
        return self._models[kind]

    async def embed_text(
        self, text: Optional[str], kind: ModelKind = ModelKind.TEXT
    ) -> Embedding | NoEmbedding:
        """Embed text; cross-modal input is cut to the model's word limit."""
        if not text or not text.strip():
            return NoEmbedding(reason="empty input", kind=kind)
        if not self.is_enabled:
            return NoEmbedding(reason="embeddings disabled", kind=kind)

        if kind is ModelKind.IMAGE:
            truncated = truncate_words(text, self._cross_modal_max_words)
            if truncated != text.strip():
                logger.debug(
                    f"Cross-modal text truncated to {self._cross_modal_max_words} words: "
                    f"'{truncated[:50]}...'"
                )
            text = truncated

        return await self._embed(text, kind, preview=text[:50])

    async def embed_image(
        self, base64_image: Optional[str], kind: ModelKind = ModelKind.IMAGE
    ) -> Embedding | NoEmbedding:
        """Embed a base64 image, wrapped as a data URI."""
        if not base64_image or not base64_image.strip():
            return NoEmbedding(reason="empty input", kind=kind)
        if not self.is_enabled:
            return NoEmbedding(reason="embeddings disabled", kind=kind)

        payload = base64_image.strip()
        if not payload.startswith("data:"):
            payload = IMAGE_DATA_URI_PREFIX + payload

        return await self._embed(payload, kind, preview=f"<image {len(payload)} chars>")

    async def _embed(self, payload: str, kind: ModelKind, preview: str) -> Embedding | NoEmbedding:
        model = self.model_for(kind)
        context = f"endpoint={self.endpoint} model={model} input='{preview}'"

        try:
            response = await self.client.embeddings.create(
                model=model,
                input=payload,
                encoding_format="float",
            )
        except APITimeoutError:
            logger.error(f"Embedding timed out after {self._timeout}s: {context}")
            return NoEmbedding(reason="timeout", kind=kind)
        except APIConnectionError as e:
            logger.error(f"Embedding connection error: {context} error={e}")
            return NoEmbedding(reason="connection error", kind=kind)
        except APIStatusError as e:
            body = e.response.text[:ERROR_BODY_LIMIT]
            logger.error(f"Embedding failed: {context} status={e.status_code} body={body}")
            return NoEmbedding(reason=f"status {e.status_code}", kind=kind)
        except OpenAIError as e:
            logger.error(f"Embedding error: {context} error={e}")
            return NoEmbedding(reason="provider error", kind=kind)

        values = _extract_vector(response)
        if values is None:
            logger.error(f"Embedding response missing data[0].embedding: {context}")
            return NoEmbedding(reason="missing embedding", kind=kind)

        try:
            return Embedding(values=values, model=model, kind=kind)
        except (TypeError, ValueError) as e:
            logger.error(f"Embedding response invalid: {context} error={e}")
            return NoEmbedding(reason="invalid embedding", kind=kind)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()


def _extract_vector(response: Any) -> Optional[list]:
    data = getattr(response, "data", None)
    if not data:
        return None
    first = data[0]
    values = first.get("embedding") if isinstance(first, dict) else getattr(first, "embedding", None)
    if not isinstance(values, list) or not values:
        return None
    return values
