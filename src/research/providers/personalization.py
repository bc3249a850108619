"""Personalization provider: listening history, or community favourites as a proxy."""

from src.research.backends.base import ListeningHistoryStore
from src.research.constants import PERSONALIZATION_CONFIDENCE, ProviderName
from src.research.interface import SearchProvider
from src.research.models import ProviderResult, SearchContext


class PersonalizationProvider(SearchProvider):
    """Recommendations for the listener; confidence is fixed because the signal is a proxy."""

    def __init__(self, store: ListeningHistoryStore):
        self._store = store

    @property
    def name(self) -> ProviderName:
        return ProviderName.PERSONALIZATION

    async def _search(self, query: str, context: SearchContext) -> ProviderResult:
        if context.identity:
            seeds = list(dict.fromkeys([*context.loved_songs, *context.recently_played]))
            tracks = await self._store.for_identity(context.identity, seeds, context.limit)
            if tracks:
                return ProviderResult(
                    items=tracks,
                    confidence=PERSONALIZATION_CONFIDENCE,
                    reasoning=(
                        f"Based on this listener's history ({len(seeds)} seed songs). "
                        f"Found {len(tracks)} songs they are likely to enjoy."
                    ),
                    source=self.name,
                )
        tracks = await self._store.popular(context.limit)
        who = "this listener" if context.identity else "an anonymous listener"
        return ProviderResult(
            items=tracks,
            confidence=PERSONALIZATION_CONFIDENCE,
            reasoning=(
                f"No listening history available for {who}. "
                f"Using community favourites as a proxy ({len(tracks)} songs)."
            ),
            source=self.name,
        )
