"""Acoustic-pattern provider: mood / energy / genre / tempo vocabulary matched to audio features."""

import re

from src.research.backends.base import AudioFeatureStore
from src.research.constants import (
    ACOUSTIC_FALLBACK_CONFIDENCE,
    ACOUSTIC_MATCHED_CONFIDENCE,
    ProviderName,
)
from src.research.interface import SearchProvider
from src.research.models import ProviderResult, SearchContext

# (attribute, value, pattern); later rules for the same attribute win
ATTRIBUTE_RULES: list[tuple[str, str, re.Pattern[str]]] = [
    ("mood", "happy", re.compile(r"(happy|upbeat|cheerful|joyful)")),
    ("mood", "sad", re.compile(r"(sad|melancholy|depressing|somber)")),
    ("energy", "high", re.compile(r"(energetic|intense|powerful|aggressive)")),
    ("energy", "low", re.compile(r"(calm|relaxing|peaceful|chill)")),
    ("genre", "rock", re.compile(r"(rock|guitar|drums)")),
    ("genre", "electronic", re.compile(r"(electronic|synth|edm|techno)")),
    ("genre", "jazz", re.compile(r"(jazz|saxophone|swing)")),
    ("genre", "classical", re.compile(r"(classical|orchestra|symphony)")),
    ("tempo", "fast", re.compile(r"(fast|quick|rapid|upbeat)")),
    ("tempo", "slow", re.compile(r"(slow|gentle|gradual)")),
]


def extract_attributes(query: str) -> dict[str, str]:
    lower = (query or "").lower()
    attributes: dict[str, str] = {}
    for attribute, value, pattern in ATTRIBUTE_RULES:
        if pattern.search(lower):
            attributes[attribute] = value
    return attributes


class AcousticPatternProvider(SearchProvider):
    """Discovery by sonic characteristics stored as audio features."""

    def __init__(self, store: AudioFeatureStore):
        self._store = store

    @property
    def name(self) -> ProviderName:
        return ProviderName.ACOUSTIC

    async def _search(self, query: str, context: SearchContext) -> ProviderResult:
        attributes = extract_attributes(query)
        if not attributes:
            tracks = await self._store.recent(context.limit)
            return ProviderResult(
                items=tracks,
                confidence=ACOUSTIC_FALLBACK_CONFIDENCE,
                reasoning="Could not identify specific musical patterns in query. Returning recent songs for discovery.",
                source=self.name,
            )
        tracks = await self._store.match_attributes(attributes, context.limit)
        described = ", ".join(f"{k}={v}" for k, v in attributes.items())
        return ProviderResult(
            items=tracks,
            confidence=ACOUSTIC_MATCHED_CONFIDENCE,
            reasoning=(
                f"Detected musical attributes: {described}. "
                f"Found {len(tracks)} songs matching these patterns."
            ),
            source=self.name,
        )
