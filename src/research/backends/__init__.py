from src.research.backends.base import (
    AudioFeatureStore,
    EmbeddingClient,
    FullTextIndex,
    ListeningHistoryStore,
    ScoredTrack,
    Station,
    StationDirectory,
    VectorIndex,
)
from src.research.backends.radio_browser import RadioBrowserDirectory

__all__ = [
    "AudioFeatureStore",
    "EmbeddingClient",
    "FullTextIndex",
    "ListeningHistoryStore",
    "RadioBrowserDirectory",
    "ScoredTrack",
    "Station",
    "StationDirectory",
    "VectorIndex",
]
