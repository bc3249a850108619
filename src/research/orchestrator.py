"""Deep research orchestrator: plan, scatter-gather, aggregate.

Pipeline:
  1. Strategy planning (LLM when configured, deterministic fallback otherwise)
  2. Early return when the query needs clarification
  3. Concurrent provider calls (scatter-gather)
  4. Position-weighted fusion with corroboration bonus
  5. Return ranked results with confidence and reasoning

Every call is independent; nothing is kept between calls.
"""

import time

from src.core.logger import logger
from src.observability import traceable
from src.research.aggregator import ResultAggregator
from src.research.executor import ScatterGatherExecutor
from src.research.models import ResearchOutcome, SearchContext
from src.research.planner import PlanningClient, StrategyPlanner
from src.research.registry import ProviderRegistry


def build_refined_query(original: str, clarification: str) -> str:
    return f"{original.strip()} - {clarification.strip()}"


class DeepResearchOrchestrator:
    """Coordinates planner, executor and aggregator for one query at a time."""

    def __init__(
        self,
        registry: ProviderRegistry,
        planning_client: PlanningClient | None = None,
        provider_timeout: float | None = None,
    ):
        self._registry = registry
        self._planner = StrategyPlanner(registry, planning_client)
        self._executor = ScatterGatherExecutor(registry, provider_timeout=provider_timeout)
        self._aggregator = ResultAggregator()

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def planner(self) -> StrategyPlanner:
        return self._planner

    @traceable(name="deep_research", run_type="chain")
    async def research(self, query: str, context: SearchContext | None = None) -> ResearchOutcome:
        context = context or SearchContext()
        query = (query or "").strip()
        if not query:
            return ResearchOutcome(success=False, error="Query cannot be empty", query=query)

        started = time.monotonic()
        logger.research_start(query, context.identity)
        try:
            plan = await self._planner.plan(query, context)
            if plan.needs_clarification:
                logger.clarification_needed(list(plan.clarifying_questions or []))
                return ResearchOutcome(success=True, plan=plan, query=query)

            outcomes = await self._executor.gather(plan.selected_providers, query, context)
            aggregated = self._aggregator.aggregate(outcomes)
        except Exception as e:
            logger.error("Deep research failed", exception=e)
            return ResearchOutcome(success=False, error=str(e) or type(e).__name__, query=query)

        elapsed_ms = (time.monotonic() - started) * 1000
        aggregated = aggregated.model_copy(update={"elapsed_ms": round(elapsed_ms, 1)})
        logger.research_done(
            len(aggregated.items),
            len(aggregated.sources),
            aggregated.overall_confidence,
            elapsed_ms,
        )
        return ResearchOutcome(success=True, plan=plan, result=aggregated, query=query)

    async def clarify(
        self,
        original_query: str,
        clarification: str,
        context: SearchContext | None = None,
    ) -> ResearchOutcome:
        """Second round: fold the clarification into the query and run a fresh pipeline."""
        refined = build_refined_query(original_query, clarification)
        logger.info(f'Refined query: "{refined}"')
        return await self.research(refined, context)
