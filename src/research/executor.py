"""Scatter-gather executor: one task per selected provider, join on all of them."""

import asyncio
import time

from src.core.logger import logger
from src.observability import traceable
from src.research.constants import ProviderName
from src.research.models import ProviderOutcome, SearchContext
from src.research.registry import ProviderRegistry


class ScatterGatherExecutor:
    """Runs every selected provider concurrently and collects every outcome.

    A failing or slow provider never cancels its siblings. With ``provider_timeout``
    set, a provider that exceeds it yields a failed outcome instead of stalling the call.
    """

    def __init__(self, registry: ProviderRegistry, provider_timeout: float | None = None):
        self._registry = registry
        self._provider_timeout = provider_timeout

    async def _run_one(
        self,
        name: ProviderName,
        query: str,
        context: SearchContext,
    ) -> ProviderOutcome:
        provider = self._registry.get(name)
        if provider is None:
            reason = f"No provider registered for '{name}'"
            logger.provider_result(name, False, 0.0, error_reason=reason)
            return ProviderOutcome.fail(name, reason)

        t0 = time.monotonic()
        try:
            if self._provider_timeout is None:
                return await provider.execute(query, context)
            return await asyncio.wait_for(
                provider.execute(query, context), timeout=self._provider_timeout
            )
        except asyncio.TimeoutError:
            elapsed_ms = (time.monotonic() - t0) * 1000
            reason = f"timed out after {self._provider_timeout:g}s"
            logger.provider_result(name, False, elapsed_ms, error_reason=reason)
            return ProviderOutcome.fail(name, reason, elapsed_ms)
        except Exception as e:
            # execute() already isolates errors; this covers providers that override it
            elapsed_ms = (time.monotonic() - t0) * 1000
            reason = f"{type(e).__name__}: {e!s}"
            logger.provider_result(name, False, elapsed_ms, error_reason=reason)
            return ProviderOutcome.fail(name, reason, elapsed_ms)

    @traceable(name="research_scatter_gather", run_type="chain")
    async def gather(
        self,
        providers: list[ProviderName],
        query: str,
        context: SearchContext,
    ) -> list[ProviderOutcome]:
        """Outcomes in the same order as ``providers``, regardless of completion order."""
        if not query or not query.strip():
            raise ValueError("query must not be empty")
        tasks = [
            asyncio.create_task(self._run_one(name, query, context), name=f"provider:{name}")
            for name in providers
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: list[ProviderOutcome] = []
        for name, result in zip(providers, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                outcomes.append(ProviderOutcome.fail(name, f"{type(result).__name__}: {result!s}"))
                continue
            outcomes.append(result)
        return outcomes
