"""Backend contracts consumed by the providers.

The surrounding application implements these against its catalog database
(pgvector, Postgres full-text, play history, audio-feature columns). Only the
station directory ships with a concrete HTTP client here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from src.research.models import Track


@dataclass(frozen=True)
class ScoredTrack:
    """A catalog track with the backend's own score (similarity or relevance)."""

    track: Track
    score: float


@dataclass(frozen=True)
class Station:
    """One entry of an external station directory."""

    station_id: str
    name: str
    stream_url: str
    country: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    votes: int = 0
    codec: str = ""
    bitrate: int = 0


class EmbeddingClient(ABC):
    @abstractmethod
    async def embed(self, text: str) -> list[float] | None:
        """Embedding for ``text``, or None when the service is unavailable."""


class VectorIndex(ABC):
    @abstractmethod
    async def nearest(self, embedding: list[float], limit: int) -> list[ScoredTrack]:
        """Closest tracks by cosine similarity (score in [0, 1]), best first."""


class FullTextIndex(ABC):
    @abstractmethod
    async def search(self, terms: list[str], limit: int) -> list[ScoredTrack]:
        """Tracks matching all terms, ranked by text relevance (score in [0, 1]), best first."""


class ListeningHistoryStore(ABC):
    @abstractmethod
    async def for_identity(
        self,
        identity: str,
        seed_ids: list[int],
        limit: int,
    ) -> list[Track]:
        """Tracks this listener is likely to enjoy, best first. Empty if unknown."""

    @abstractmethod
    async def popular(self, limit: int) -> list[Track]:
        """Globally popular tracks (most votes first)."""


class AudioFeatureStore(ABC):
    @abstractmethod
    async def match_attributes(self, attributes: dict[str, str], limit: int) -> list[Track]:
        """Tracks whose stored audio features fit the attributes, best first."""

    @abstractmethod
    async def recent(self, limit: int) -> list[Track]:
        """Most recently added tracks."""


class StationDirectory(ABC):
    @abstractmethod
    async def search(self, query: str, limit: int) -> list[Station]:
        """Stations whose name or tags match the query."""

    @abstractmethod
    async def top(self, limit: int) -> list[Station]:
        """Most popular stations."""
