"""Standard interface for search providers used by the orchestrator.

Subclasses implement ``_search``; callers only use ``execute``, which times the
call and turns any exception into a failed ProviderOutcome.
"""

import time
from abc import ABC, abstractmethod

from src.core.logger import logger
from src.research.constants import PROVIDER_DESCRIPTIONS, ProviderName
from src.research.models import ProviderOutcome, ProviderResult, SearchContext


def clamp_confidence(value: float) -> float:
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(float(value), 1.0))


def mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class SearchProvider(ABC):
    """Base class for all search providers."""

    @property
    @abstractmethod
    def name(self) -> ProviderName:
        """Closed provider identifier."""

    @property
    def description(self) -> str:
        return PROVIDER_DESCRIPTIONS[self.name]

    @abstractmethod
    async def _search(self, query: str, context: SearchContext) -> ProviderResult:
        """Run the provider-specific search."""

    async def execute(self, query: str, context: SearchContext) -> ProviderOutcome:
        t0 = time.monotonic()
        try:
            result = await self._search(query, context)
            if result.source != self.name:
                raise ValueError(
                    f"result reports source '{result.source}', expected '{self.name}'"
                )
        except Exception as e:
            elapsed_ms = (time.monotonic() - t0) * 1000
            reason = f"{type(e).__name__}: {e!s}" if str(e) else type(e).__name__
            logger.provider_result(self.name, False, elapsed_ms, error_reason=reason)
            return ProviderOutcome.fail(self.name, reason, elapsed_ms)
        elapsed_ms = (time.monotonic() - t0) * 1000
        logger.provider_result(
            self.name,
            True,
            elapsed_ms,
            item_count=len(result.items),
            confidence=result.confidence,
        )
        return ProviderOutcome.ok(result, elapsed_ms)
