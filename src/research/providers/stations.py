"""External-station provider: live stations from a station directory."""

import re

from src.research.backends.base import Station, StationDirectory
from src.research.constants import (
    DEFAULT_STATION_LIMIT,
    STATION_VOCABULARY,
    STATIONS_FALLBACK_CONFIDENCE,
    STATIONS_MATCHED_CONFIDENCE,
    ProviderName,
)
from src.research.interface import SearchProvider
from src.research.models import ProviderResult, SearchContext, Track

_STATION_WORDS = re.compile(rf"\b{STATION_VOCABULARY.pattern}s?\b", re.IGNORECASE)


def station_search_text(query: str) -> str:
    """Query with the radio/station/live/stream words removed."""
    stripped = _STATION_WORDS.sub(" ", query or "")
    return " ".join(stripped.split())


def station_to_track(station: Station) -> Track:
    artist = f"Radio Station - {station.country}" if station.country else "Radio Station"
    return Track(
        id=f"station:{station.station_id}",
        title=station.name,
        artist=artist,
        uploaded_by="radio_browser",
        votes=station.votes,
        is_external=True,
        stream_url=station.stream_url,
        metadata={
            "tags": list(station.tags),
            "codec": station.codec,
            "bitrate": station.bitrate,
        },
    )


class StationsProvider(SearchProvider):
    """Live radio stations as discovery opportunities outside the catalog."""

    def __init__(self, directory: StationDirectory):
        self._directory = directory

    @property
    def name(self) -> ProviderName:
        return ProviderName.STATIONS

    async def _search(self, query: str, context: SearchContext) -> ProviderResult:
        limit = min(context.limit, DEFAULT_STATION_LIMIT)
        text = station_search_text(query)
        stations = await self._directory.search(text, limit) if text else []
        if stations:
            confidence = STATIONS_MATCHED_CONFIDENCE
            reasoning = f"Found {len(stations)} radio stations matching \"{text}\". These are live streaming sources."
        else:
            stations = await self._directory.top(limit)
            confidence = STATIONS_FALLBACK_CONFIDENCE
            reasoning = f"No stations matched the query; showing {len(stations)} popular stations instead."
        return ProviderResult(
            items=[station_to_track(s) for s in stations[:limit]],
            confidence=confidence,
            reasoning=reasoning,
            source=self.name,
        )
