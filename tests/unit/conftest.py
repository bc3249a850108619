from __future__ import annotations

import asyncio

import pytest

from src.research.constants import ProviderName
from src.research.interface import SearchProvider
from src.research.models import ProviderResult, SearchContext, Track


class StaticProvider(SearchProvider):
    """Test double returning a fixed list, optionally after a delay or with an error."""

    def __init__(
        self,
        name: ProviderName,
        items: list[Track] | None = None,
        confidence: float = 0.5,
        *,
        delay: float = 0.0,
        error: Exception | None = None,
    ):
        self._name = name
        self._items = list(items or [])
        self._confidence = confidence
        self._delay = delay
        self._error = error
        self.calls: list[tuple[str, SearchContext]] = []

    @property
    def name(self) -> ProviderName:
        return self._name

    async def _search(self, query: str, context: SearchContext) -> ProviderResult:
        self.calls.append((query, context))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return ProviderResult(
            items=self._items,
            confidence=self._confidence,
            reasoning=f"{self._name} returned {len(self._items)} items",
            source=self._name,
        )


def track(item_id: int | str, title: str | None = None) -> Track:
    return Track(id=item_id, title=title or f"Song {item_id}", artist="Artist")


@pytest.fixture
def make_track():
    return track


@pytest.fixture
def static_provider():
    return StaticProvider
