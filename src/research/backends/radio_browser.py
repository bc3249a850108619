"""Station directory backend (Radio Browser public API)."""

from typing import Any

import httpx

from src.core.config import config
from src.research.backends.base import Station, StationDirectory


def _parse_station(item: dict[str, Any]) -> Station | None:
    station_id = str(item.get("stationuuid") or "").strip()
    name = str(item.get("name") or "").strip()
    url = str(item.get("url_resolved") or item.get("url") or "").strip()
    if not station_id or not name or not url:
        return None
    tags = tuple(t.strip() for t in str(item.get("tags") or "").split(",") if t.strip())
    try:
        votes = int(item.get("votes") or 0)
    except (TypeError, ValueError):
        votes = 0
    try:
        bitrate = int(item.get("bitrate") or 0)
    except (TypeError, ValueError):
        bitrate = 0
    return Station(
        station_id=station_id,
        name=name,
        stream_url=url,
        country=str(item.get("country") or ""),
        tags=tags,
        votes=votes,
        codec=str(item.get("codec") or ""),
        bitrate=bitrate,
    )


class RadioBrowserDirectory(StationDirectory):
    """Radio Browser backed station lookup."""

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        url = base_url or config.radio_browser_url or ""
        self._base_url = url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": "music-deep-research/0.1"},
            )
        return self._client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> list[Station]:
        if not self._base_url:
            return []
        response = await self._get_client().get(
            f"{self._base_url}{path}",
            params=params,
            follow_redirects=True,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list):
            return []
        stations: list[Station] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            station = _parse_station(item)
            if station is not None:
                stations.append(station)
        return stations

    async def search(self, query: str, limit: int) -> list[Station]:
        params = {
            "name": query,
            "limit": limit,
            "hidebroken": "true",
            "order": "votes",
            "reverse": "true",
        }
        return await self._get("/json/stations/search", params)

    async def top(self, limit: int) -> list[Station]:
        return await self._get(f"/json/stations/topvote/{limit}", {"hidebroken": "true"})

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
