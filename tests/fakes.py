"""
Fake collaborators shared by the service and client tests.
"""
from typing import Callable, Optional, Sequence

from mmsearch.core.models.embedding import Embedding, ModelKind, NoEmbedding
from mmsearch.core.models.search import QueryDescriptor, SearchHit

TEXT_VECTOR = [1.0, 0.0, 0.0]
IMAGE_VECTOR = [0.0, 1.0, 0.0]


def make_embedding(values: Sequence[float], kind: ModelKind = ModelKind.TEXT) -> Embedding:
    return Embedding(values=list(values), model=f"fake-{kind.value}", kind=kind)


def group_hit(label: Optional[str], distance: Optional[float], doc_id: str = "") -> SearchHit:
    payload = {"id": doc_id or (label or "unlabelled")}
    if label is not None:
        payload["used_for"] = label
    return SearchHit(id=payload["id"], distance=distance, payload=payload)


class FakeEmbedder:
    """Returns canned vectors and records every call."""

    def __init__(
        self,
        text_outcome: Embedding | NoEmbedding | None = None,
        image_outcome: Embedding | NoEmbedding | None = None,
        enabled: bool = True,
    ):
        self.text_outcome = text_outcome
        self.image_outcome = image_outcome
        self.enabled = enabled
        self.text_calls: list[tuple[str, ModelKind]] = []
        self.image_calls: list[tuple[str, ModelKind]] = []

    @property
    def is_enabled(self) -> bool:
        return self.enabled

    async def embed_text(self, text, kind=ModelKind.TEXT):
        self.text_calls.append((text, kind))
        if self.text_outcome is not None:
            return self.text_outcome
        return make_embedding(TEXT_VECTOR, kind)

    async def embed_image(self, base64_image, kind=ModelKind.IMAGE):
        self.image_calls.append((base64_image, kind))
        if self.image_outcome is not None:
            return self.image_outcome
        return make_embedding(IMAGE_VECTOR, kind)

    @property
    def call_count(self) -> int:
        return len(self.text_calls) + len(self.image_calls)


class FakeIndex:
    """Answers queries through a routing function and records descriptors."""

    def __init__(self, route: Optional[Callable[[QueryDescriptor], list[SearchHit]]] = None):
        self.route = route or (lambda descriptor: [])
        self.descriptors: list[QueryDescriptor] = []

    async def search(self, descriptor: QueryDescriptor) -> list[SearchHit]:
        self.descriptors.append(descriptor)
        return self.route(descriptor)

    async def search_batch(self, descriptors: Sequence[QueryDescriptor]) -> list[list[SearchHit]]:
        return [await self.search(d) for d in descriptors]


def route_by_vector(text_hits=None, image_hits=None):
    """Route group queries by which fake vector they carry.

    Each argument is a hit list or an exception instance to raise.
    """

    def route(descriptor: QueryDescriptor) -> list[SearchHit]:
        values = descriptor.vector_clause.embedding.to_list()
        answer = text_hits if values == TEXT_VECTOR else image_hits
        if isinstance(answer, BaseException):
            raise answer
        return list(answer or [])

    return route
