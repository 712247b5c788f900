import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    """Lazy factory registry; singletons hold the shared HTTP clients."""

    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def is_registered(self, interface: type) -> bool:
        return interface in self._factories

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()

    async def aclose(self) -> None:
        """Close singletons owning network clients, then drop them."""
        for interface, instance in list(self._singletons.items()):
            close = getattr(instance, "aclose", None)
            if close is None:
                continue
            result = close()
            if inspect.isawaitable(result):
                await result
            logger.debug(f"Closed {interface.__name__}")
        self.reset()


container = Container()


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.search_index import SearchIndexProtocol
    from .core.query_builder import HybridQueryBuilder
    from .core.services.classification_service import ClassificationService
    from .core.services.search_service import SearchService
    from .core.strategies.fusion import ConsensusWeightedFusion, FusionStrategy
    from .infrastructure.embeddings.openai_embedder import OpenAIEmbedder
    from .infrastructure.search_index.typesense_index import TypesenseIndex

    container.register(
        EmbedderProtocol,
        lambda: OpenAIEmbedder(
            base_url=settings.embedding_url,
            api_key=settings.embedding_api_key,
            text_model=settings.embedding_text_model,
            image_model=settings.embedding_image_model,
            enabled=settings.embedding_enabled,
            timeout=settings.embedding_timeout,
            cross_modal_max_words=settings.cross_modal_max_words,
        ),
        singleton=True,
    )

    container.register(
        SearchIndexProtocol,
        lambda: TypesenseIndex(
            base_url=settings.typesense_base_url,
            api_key=settings.typesense_api_key,
            connection_timeout=settings.typesense_connection_timeout,
            read_timeout=settings.typesense_read_timeout,
        ),
        singleton=True,
    )

    container.register(
        HybridQueryBuilder,
        lambda: HybridQueryBuilder(alpha=settings.hybrid_alpha),
        singleton=True,
    )

    container.register(
        SearchService,
        lambda: SearchService(
            embedder=container.resolve(EmbedderProtocol),
            index=container.resolve(SearchIndexProtocol),
            builder=container.resolve(HybridQueryBuilder),
            default_limit=settings.default_limit,
        ),
        singleton=True,
    )

    container.register(
        ClassificationService,
        lambda: ClassificationService(
            embedder=container.resolve(EmbedderProtocol),
            index=container.resolve(SearchIndexProtocol),
            collection=settings.group_collection,
            vector_field=settings.group_vector_field,
            label_field=settings.group_label_field,
            exclude_fields=[
                f.strip() for f in settings.group_exclude_fields.split(",") if f.strip()
            ],
            neighbors=settings.classification_neighbors,
            caption_max_chars=settings.caption_max_chars,
            text_weight=settings.text_weight,
            image_weight=settings.image_weight,
            single_source_threshold=settings.single_source_threshold,
            multi_source_threshold=settings.multi_source_threshold,
            default_group=settings.default_group,
        ),
        singleton=True,
    )

    container.register(FusionStrategy, ConsensusWeightedFusion, singleton=True)

    logger.info("Container configured")
    return container
