"""Shared typed constants for research orchestration."""

import re
from enum import StrEnum


class ProviderName(StrEnum):
    """Closed set of search providers the planner may select."""

    SEMANTIC = "semantic"
    KEYWORD = "keyword"
    PERSONALIZATION = "personalization"
    ACOUSTIC = "acoustic"
    STATIONS = "stations"


PROVIDER_DESCRIPTIONS: dict[ProviderName, str] = {
    ProviderName.SEMANTIC: "Vector-based semantic search using embeddings for conceptual/mood matching",
    ProviderName.KEYWORD: "Full-text keyword search for exact title/artist matches",
    ProviderName.PERSONALIZATION: "Personalized recommendations based on listening history",
    ProviderName.ACOUSTIC: "Pattern-based discovery using sonic characteristics (mood, energy, genre, tempo)",
    ProviderName.STATIONS: "External radio station discovery and live streams",
}

DEFAULT_PROVIDERS: tuple[ProviderName, ...] = (ProviderName.KEYWORD, ProviderName.SEMANTIC)

MIN_QUERY_CHARS = 3
MAX_QUERY_CHARS = 500
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_RANKED_ITEMS = 50

FALLBACK_CLARIFYING_QUESTIONS: tuple[str, ...] = (
    "What type of music are you looking for?",
    "Can you provide more details about the artist, genre, or mood?",
)

MOOD_VOCABULARY = re.compile(
    r"(mood|vibe|feel|energy|chill|upbeat|sad|happy|relax|calm|melancholy|energetic)",
    re.IGNORECASE,
)
STATION_VOCABULARY = re.compile(r"(radio|station|live|stream)", re.IGNORECASE)

# Aggregation weights
POSITION_DECAY = 0.5
CORROBORATION_MULTIPLIER = 1.5
MULTI_SOURCE_CONFIDENCE_BONUS = 0.2

HIGH_CONFIDENCE = 0.8
MODERATE_CONFIDENCE = 0.6

# Provider confidence rules
SEMANTIC_SIMILARITY_SCALE = 1.2
KEYWORD_RELEVANCE_SCALE = 2.0
PERSONALIZATION_CONFIDENCE = 0.6
ACOUSTIC_MATCHED_CONFIDENCE = 0.7
ACOUSTIC_FALLBACK_CONFIDENCE = 0.3
STATIONS_MATCHED_CONFIDENCE = 0.8
STATIONS_FALLBACK_CONFIDENCE = 0.2
DEFAULT_STATION_LIMIT = 10

NO_RESULTS_FALLBACK_MESSAGE = (
    "Unable to complete deep research. Try a more specific query or use regular search."
)
CLARIFY_FALLBACK_MESSAGE = (
    "Unable to complete search with clarification. Try a different query."
)
UNEXPECTED_ERROR_FALLBACK_MESSAGE = (
    "An unexpected error occurred. Please try again or use regular search."
)
