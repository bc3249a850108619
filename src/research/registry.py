"""Provider registry: the static name -> provider mapping built at startup."""

import logging

from src.research.backends.base import (
    AudioFeatureStore,
    EmbeddingClient,
    FullTextIndex,
    ListeningHistoryStore,
    StationDirectory,
    VectorIndex,
)
from src.research.constants import PROVIDER_DESCRIPTIONS, ProviderName
from src.research.interface import SearchProvider
from src.research.providers import (
    AcousticPatternProvider,
    KeywordProvider,
    PersonalizationProvider,
    SemanticProvider,
    StationsProvider,
)

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Closed mapping of provider names to implementations. No dynamic discovery."""

    def __init__(self, providers: dict[ProviderName, SearchProvider]) -> None:
        for key, provider in providers.items():
            if not isinstance(provider, SearchProvider):
                raise TypeError(f"Expected SearchProvider for {key}, got {type(provider)}")
            if provider.name != key:
                raise ValueError(f"Provider registered as '{key}' reports name '{provider.name}'")
        # keep enum order so catalogs and status are stable
        self._providers = {name: providers[name] for name in ProviderName if name in providers}
        logger.info("Registered providers: %s", [str(n) for n in self._providers])

    def get(self, name: ProviderName) -> SearchProvider | None:
        return self._providers.get(name)

    def names(self) -> list[ProviderName]:
        return list(self._providers.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def catalog(self) -> list[dict[str, str]]:
        """Name/description pairs for every known provider, registered or not."""
        return [
            {
                "name": str(name),
                "description": PROVIDER_DESCRIPTIONS[name],
                "available": "yes" if name in self._providers else "no",
            }
            for name in ProviderName
        ]

    def catalog_text(self) -> str:
        return "\n".join(
            f"- {entry['name']}: {entry['description']}" for entry in self.catalog()
        )


def build_registry(
    *,
    embedder: EmbeddingClient | None = None,
    vector_index: VectorIndex | None = None,
    fulltext_index: FullTextIndex | None = None,
    history_store: ListeningHistoryStore | None = None,
    audio_store: AudioFeatureStore | None = None,
    station_directory: StationDirectory | None = None,
) -> ProviderRegistry:
    """Wire each provider whose backends are available.

    A vector index without an explicit embedder gets the configured
    OpenAI-compatible embedding client, when an embedding key is set.
    """
    if vector_index is not None and embedder is None:
        # deferred: src.llm.embeddings imports this package
        from src.llm.embeddings import create_embedder

        embedder = create_embedder()

    providers: dict[ProviderName, SearchProvider] = {}
    if embedder is not None and vector_index is not None:
        providers[ProviderName.SEMANTIC] = SemanticProvider(embedder, vector_index)
    if fulltext_index is not None:
        providers[ProviderName.KEYWORD] = KeywordProvider(fulltext_index)
    if history_store is not None:
        providers[ProviderName.PERSONALIZATION] = PersonalizationProvider(history_store)
    if audio_store is not None:
        providers[ProviderName.ACOUSTIC] = AcousticPatternProvider(audio_store)
    if station_directory is not None:
        providers[ProviderName.STATIONS] = StationsProvider(station_directory)
    return ProviderRegistry(providers)
