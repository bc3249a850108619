"""Keyword provider: lexical / full-text relevance."""

import re

from src.research.backends.base import FullTextIndex
from src.research.constants import KEYWORD_RELEVANCE_SCALE, ProviderName
from src.research.interface import SearchProvider, clamp_confidence, mean
from src.research.models import ProviderResult, SearchContext

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def sanitize_terms(query: str) -> list[str]:
    """Lowercase alphanumeric terms of the query; punctuation-only words are dropped."""
    terms = []
    for word in (query or "").strip().lower().split():
        cleaned = _NON_ALNUM.sub("", word)
        if cleaned:
            terms.append(cleaned)
    return terms


class KeywordProvider(SearchProvider):
    """Full-text search on title and artist."""

    def __init__(self, index: FullTextIndex):
        self._index = index

    @property
    def name(self) -> ProviderName:
        return ProviderName.KEYWORD

    async def _search(self, query: str, context: SearchContext) -> ProviderResult:
        terms = sanitize_terms(query)
        if not terms:
            return ProviderResult(
                items=[],
                confidence=0.0,
                reasoning="Query has no searchable keywords after removing punctuation.",
                source=self.name,
            )
        hits = await self._index.search(terms, context.limit)
        avg_relevance = mean([h.score for h in hits])
        # full-text rank scores sit well below 1, hence the scale-up
        confidence = clamp_confidence(min(avg_relevance * KEYWORD_RELEVANCE_SCALE, 1.0))
        return ProviderResult(
            items=[h.track for h in hits],
            confidence=confidence,
            reasoning=(
                f"Found {len(hits)} songs using full-text keyword search. "
                f"Average relevance: {avg_relevance * 100:.1f}%. "
                "This search excels at exact title/artist matches and specific keywords."
            ),
            source=self.name,
        )
