"""Aggregator/ranker: merges provider outputs using position-weighted confidence.

Score contribution of an item at position i of n in a provider's list:

    weighted = provider_confidence * (1 - (i / n) * 0.5)

The first provider to surface an item contributes ``weighted``; every later
provider contributes ``weighted * 1.5`` (corroboration bonus). Items are sorted by
total score and the top 50 kept. Overall confidence is the mean provider
confidence lifted by up to 20% for the share of corroborated items.
"""

import logging

from src.research.constants import (
    CORROBORATION_MULTIPLIER,
    HIGH_CONFIDENCE,
    MAX_RANKED_ITEMS,
    MODERATE_CONFIDENCE,
    MULTI_SOURCE_CONFIDENCE_BONUS,
    POSITION_DECAY,
)
from src.research.interface import clamp_confidence, mean
from src.research.models import (
    AggregatedResult,
    ProviderFailure,
    ProviderOutcome,
    ProviderResult,
    RankedItem,
    SourceSummary,
)

logger = logging.getLogger(__name__)

NO_RESULTS_REASONING = "No results found from any search provider"


def position_score(index: int, total: int) -> float:
    return 1 - (index / total) * POSITION_DECAY


def rank_items(
    results: list[ProviderResult],
    max_items: int = MAX_RANKED_ITEMS,
) -> list[RankedItem]:
    """Fuse provider lists into one ranking. Ties keep first-sighting order."""
    ranked: dict[int | str, RankedItem] = {}
    for result in results:
        n = len(result.items)
        for i, item in enumerate(result.items):
            weighted = result.confidence * position_score(i, n)
            existing = ranked.get(item.id)
            if existing is None:
                ranked[item.id] = RankedItem(
                    item=item,
                    score=weighted,
                    sources=[result.source],
                    confidences=[result.confidence],
                )
            elif result.source not in existing.sources:
                existing.score += weighted * CORROBORATION_MULTIPLIER
                existing.sources.append(result.source)
                existing.confidences.append(result.confidence)
    ordered = sorted(ranked.values(), key=lambda r: -r.score)
    return ordered[:max_items]


def overall_confidence(results: list[ProviderResult], ranked: list[RankedItem]) -> float:
    avg_confidence = mean([r.confidence for r in results])
    multi_source_ratio = (
        sum(1 for r in ranked if r.corroborated) / len(ranked) if ranked else 0.0
    )
    return clamp_confidence(
        min(avg_confidence * (1 + multi_source_ratio * MULTI_SOURCE_CONFIDENCE_BONUS), 1.0)
    )


def generate_reasoning(
    sources: list[SourceSummary],
    ranked: list[RankedItem],
    confidence: float,
) -> str:
    parts: list[str] = [f"Found {len(ranked)} songs from {len(sources)} different sources."]

    descriptions = [
        f"{s.source} ({s.count} songs, {s.confidence * 100:.0f}% confidence)" for s in sources
    ]
    parts.append(f"Sources used: {', '.join(descriptions)}.")

    multi_source_count = sum(1 for r in ranked if r.corroborated)
    if multi_source_count > 0:
        parts.append(
            f"{multi_source_count} songs were found by multiple sources, indicating high relevance."
        )

    if confidence > HIGH_CONFIDENCE:
        parts.append("High confidence in these results - strong matches across multiple search methods.")
    elif confidence > MODERATE_CONFIDENCE:
        parts.append("Moderate confidence - good matches found, but may benefit from refining the query.")
    else:
        parts.append(
            "Lower confidence - results may be exploratory. Consider adding more specific criteria."
        )
    return " ".join(parts)


class ResultAggregator:
    """Merges provider outcomes into one AggregatedResult."""

    def __init__(self, max_items: int = MAX_RANKED_ITEMS):
        self._max_items = max_items

    def aggregate(self, outcomes: list[ProviderOutcome]) -> AggregatedResult:
        failures = [
            ProviderFailure(source=o.source, error=o.error or "Unknown error")
            for o in outcomes
            if not o.success
        ]
        for f in failures:
            logger.warning("Provider %s excluded from aggregation: %s", f.source, f.error)

        results = [o.result for o in outcomes if o.success and o.result is not None]
        if not results:
            return AggregatedResult(
                items=[],
                sources=[],
                overall_confidence=0.0,
                reasoning=NO_RESULTS_REASONING,
                failures=failures,
            )

        sources = [
            SourceSummary(
                source=r.source,
                count=len(r.items),
                confidence=r.confidence,
                reasoning=r.reasoning,
            )
            for r in results
        ]
        ranked = rank_items(results, self._max_items)
        confidence = overall_confidence(results, ranked)

        logger.info(
            "Aggregation: %s sources -> %s ranked | corroborated=%s | confidence=%.3f",
            len(results),
            len(ranked),
            sum(1 for r in ranked if r.corroborated),
            confidence,
        )

        return AggregatedResult(
            items=[r.item for r in ranked],
            sources=sources,
            overall_confidence=confidence,
            reasoning=generate_reasoning(sources, ranked, confidence),
            failures=failures,
        )
