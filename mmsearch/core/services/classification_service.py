"""Classification service - caption/image to group label."""

import asyncio
import logging
from typing import Iterable, Optional

from ..models.classification import ClassificationResult, GroupScore, Modality
from ..models.embedding import Embedding, ModelKind, NoEmbedding
from ..models.search import QueryDescriptor, SearchHit
from ..protocols.embedder import EmbedderProtocol
from ..protocols.search_index import SearchIndexProtocol
from ..query_builder import HybridQueryBuilder

logger = logging.getLogger(__name__)


class ClassificationService:
    """Weighted multi-modal nearest-group classification.

    Caption and image are embedded with the cross-modal model and
    matched against group documents. Each hit adds `1 - distance`,
    scaled by its modality weight, to its group. The best group wins
    if it clears the threshold for the number of modalities that
    produced evidence; otherwise the default group is returned.
    """

    def __init__(
        self,
        embedder: EmbedderProtocol,
        index: SearchIndexProtocol,
        collection: str = "structure_output_groups",
        vector_field: str = "embedding_clip",
        label_field: str = "used_for",
        exclude_fields: Iterable[str] = ("embedding_text", "embedding_clip"),
        neighbors: int = 2,
        caption_max_chars: int = 200,
        text_weight: float = 1.0,
        image_weight: float = 1.2,
        single_source_threshold: float = 0.66,
        multi_source_threshold: float = 1.3,
        default_group: str = "general",
    ):
        """Initialize classification service.

        Args:
            embedder: Embedding provider.
            index: Document index holding the group collection.
            collection: Group collection name.
            vector_field: Cross-modal vector field of group documents.
            label_field: Document field holding the group label.
            exclude_fields: Fields dropped from returned documents.
            neighbors: Nearest groups fetched per modality.
            caption_max_chars: Caption length cap before embedding.
            text_weight: Weight of caption evidence.
            image_weight: Weight of image evidence.
            single_source_threshold: Minimum score with one modality.
            multi_source_threshold: Minimum score with both modalities.
            default_group: Label returned without qualifying evidence.
        """
        self._embedder = embedder
        self._index = index
        self._builder = HybridQueryBuilder()
        self._collection = collection
        self._vector_field = vector_field
        self._label_field = label_field
        self._exclude_fields = tuple(exclude_fields)
        self._neighbors = neighbors
        self._caption_max_chars = caption_max_chars
        self._weights = {Modality.TEXT: text_weight, Modality.IMAGE: image_weight}
        self._single_source_threshold = single_source_threshold
        self._multi_source_threshold = multi_source_threshold
        self._default_group = default_group

    def threshold_for(self, contributing: int) -> float:
        """Minimum accumulated score given how many modalities contributed."""
        if contributing > 1:
            return self._multi_source_threshold
        return self._single_source_threshold

    async def classify_group(
        self,
        caption: Optional[str] = None,
        image: Optional[str] = None,
        default_group: Optional[str] = None,
    ) -> ClassificationResult:
        """Pick the closest group for a caption and/or a base64 image.

        Args:
            caption: Post caption.
            image: Base64 encoded image.
            default_group: Fallback label, defaults to the configured one.

        Returns:
            Classification result; never raises on missing evidence.
        """
        default_group = default_group or self._default_group
        has_caption = bool(caption and caption.strip())
        has_image = bool(image and image.strip())

        if not has_caption and not has_image:
            return ClassificationResult(label=default_group, confidence=0.0, used_default=True)

        caption_embedding, image_embedding = await asyncio.gather(
            self._embed_caption(caption) if has_caption else _absent(ModelKind.IMAGE),
            self._embed_image(image) if has_image else _absent(ModelKind.IMAGE),
        )

        evidence = await self._collect_evidence({
            Modality.TEXT: caption_embedding,
            Modality.IMAGE: image_embedding,
        })

        scores = self._accumulate(evidence)
        contributing = tuple(m for m, hits in evidence.items() if self._labelled(hits))

        if not scores:
            logger.info(f"No group evidence, using default '{default_group}'")
            return ClassificationResult(
                label=default_group,
                confidence=0.0,
                used_default=True,
                modalities=contributing,
            )

        # max() keeps the first of equal scores, i.e. insertion order
        best = max(scores.values(), key=lambda s: s.accumulated)
        threshold = self.threshold_for(len(contributing))
        candidates = tuple(sorted(scores.values(), key=lambda s: s.accumulated, reverse=True))

        if logger.isEnabledFor(logging.DEBUG):
            ranked = ", ".join(f"{s.label}={s.accumulated:.3f}" for s in candidates)
            logger.debug(f"Group scores: [{ranked}] threshold={threshold}")

        if best.accumulated >= threshold:
            logger.info(
                f"Group match: '{best.label}' score={best.accumulated:.3f} "
                f">= {threshold} ({'+'.join(m.value for m in contributing)})"
            )
            return ClassificationResult(
                label=best.label,
                confidence=best.accumulated,
                used_default=False,
                modalities=contributing,
                candidates=candidates,
            )

        logger.info(
            f"Best group '{best.label}' score={best.accumulated:.3f} < {threshold}, "
            f"using default '{default_group}'"
        )
        return ClassificationResult(
            label=default_group,
            confidence=best.accumulated,
            used_default=True,
            modalities=contributing,
            candidates=candidates,
        )

    async def _embed_caption(self, caption: str) -> Embedding | NoEmbedding:
        return await self._embedder.embed_text(
            caption[: self._caption_max_chars], ModelKind.IMAGE
        )

    async def _embed_image(self, image: str) -> Embedding | NoEmbedding:
        return await self._embedder.embed_image(image, ModelKind.IMAGE)

    def _group_query(self, embedding: Embedding) -> QueryDescriptor:
        return self._builder.build(
            self._collection,
            None,
            vector_field=self._vector_field,
            embedding=embedding,
            limit=self._neighbors,
            exclude_fields=self._exclude_fields,
            expected_kind=ModelKind.IMAGE,
        )

    async def _collect_evidence(
        self, embeddings: dict[Modality, Embedding | NoEmbedding]
    ) -> dict[Modality, list[SearchHit]]:
        """Query groups for every embedded modality concurrently."""
        queries = {}
        for modality, embedding in embeddings.items():
            if isinstance(embedding, Embedding):
                queries[modality] = self._group_query(embedding)
            elif embedding.reason != "absent":
                logger.warning(f"No {modality.value} evidence: {embedding.reason}")

        if not queries:
            return {}

        results = await asyncio.gather(
            *(self._index.search(q) for q in queries.values()),
            return_exceptions=True,
        )

        evidence = {}
        for modality, result in zip(queries.keys(), results):
            # CancelledError, KeyboardInterrupt and friends are not evidence
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                logger.error(f"Group search ({modality.value}) failed: {result}")
                continue
            evidence[modality] = result
        return evidence

    def _labelled(self, hits: list[SearchHit]) -> list[SearchHit]:
        return [h for h in hits if h.get(self._label_field)]

    def _accumulate(self, evidence: dict[Modality, list[SearchHit]]) -> dict[str, GroupScore]:
        scores: dict[str, GroupScore] = {}
        for modality in (Modality.TEXT, Modality.IMAGE):
            weight = self._weights[modality]
            seen: set[str] = set()
            for hit in self._labelled(evidence.get(modality, [])):
                label = str(hit.get(self._label_field))
                distance = hit.distance if hit.distance is not None else 1.0
                score = scores.setdefault(label, GroupScore(label=label))
                score.accumulated += (1.0 - distance) * weight
                if label not in seen:
                    score.sources_contributing += 1
                    seen.add(label)
        return scores


async def _absent(kind: ModelKind) -> NoEmbedding:
    return NoEmbedding(reason="absent", kind=kind)
