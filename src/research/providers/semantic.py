"""Semantic provider: embedding-space closeness to the query."""

from src.research.backends.base import EmbeddingClient, VectorIndex
from src.research.constants import SEMANTIC_SIMILARITY_SCALE, ProviderName
from src.research.interface import SearchProvider, clamp_confidence, mean
from src.research.models import ProviderResult, SearchContext


class SemanticProvider(SearchProvider):
    """Vector similarity search over track embeddings."""

    def __init__(self, embedder: EmbeddingClient, index: VectorIndex):
        self._embedder = embedder
        self._index = index

    @property
    def name(self) -> ProviderName:
        return ProviderName.SEMANTIC

    async def _search(self, query: str, context: SearchContext) -> ProviderResult:
        embedding = await self._embedder.embed(query)
        if not embedding:
            return ProviderResult(
                items=[],
                confidence=0.0,
                reasoning="Embedding service not available; semantic search needs an embedding API key.",
                source=self.name,
            )
        hits = await self._index.nearest(embedding, context.limit)
        avg_similarity = mean([h.score for h in hits])
        confidence = clamp_confidence(min(avg_similarity * SEMANTIC_SIMILARITY_SCALE, 1.0))
        return ProviderResult(
            items=[h.track for h in hits],
            confidence=confidence,
            reasoning=(
                f"Found {len(hits)} semantically similar songs using vector embeddings. "
                f"Average similarity: {avg_similarity * 100:.1f}%. "
                "This search excels at songs with similar themes, moods, and musical concepts."
            ),
            source=self.name,
        )
