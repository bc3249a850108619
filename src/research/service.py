"""Caller-facing research operations: validate, run, shape the response."""

from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from src.core.logger import logger
from src.research.constants import (
    CLARIFY_FALLBACK_MESSAGE,
    NO_RESULTS_FALLBACK_MESSAGE,
    PROVIDER_DESCRIPTIONS,
    UNEXPECTED_ERROR_FALLBACK_MESSAGE,
)
from src.research.models import (
    ClarifyRequest,
    FieldError,
    PlanSummary,
    ResearchOutcome,
    ResearchRequest,
    ResearchResponse,
    SearchContext,
)
from src.research.orchestrator import DeepResearchOrchestrator, build_refined_query


def _validation_response(e: ValidationError) -> ResearchResponse:
    details = [
        FieldError(
            field=".".join(str(p) for p in err.get("loc", ())) or "request",
            message=err.get("msg", "invalid value"),
        )
        for err in e.errors()
    ]
    return ResearchResponse(success=False, error="Invalid request", details=details)


def _plan_summary(outcome: ResearchOutcome) -> PlanSummary | None:
    plan = outcome.plan
    if plan is None:
        return None
    return PlanSummary(
        strategy=plan.strategy,
        providers_used=list(plan.selected_providers),
        reasoning=plan.reasoning,
        planner=plan.planner,
    )


class ResearchService:
    """The research / clarify / status operations exposed to the application."""

    def __init__(self, orchestrator: DeepResearchOrchestrator):
        self._orchestrator = orchestrator

    def _shape(
        self,
        outcome: ResearchOutcome,
        max_results: int,
        fallback_message: str,
        refined_query: str | None = None,
    ) -> ResearchResponse:
        if not outcome.success or outcome.result is None:
            return ResearchResponse(
                success=False,
                error=outcome.error or "Research failed",
                refined_query=refined_query,
                fallback_message=fallback_message,
            )

        aggregated = outcome.result
        common: dict[str, Any] = {
            "plan": _plan_summary(outcome),
            "results": aggregated.items[:max_results],
            "reasoning": aggregated.reasoning,
            "confidence": aggregated.overall_confidence,
            "sources": aggregated.sources,
            "failures": aggregated.failures,
            "elapsed_ms": aggregated.elapsed_ms,
            "refined_query": refined_query,
        }
        if not aggregated.sources:
            return ResearchResponse(
                success=False,
                error="No search provider returned results",
                fallback_message=fallback_message,
                **common,
            )
        return ResearchResponse(success=True, **common)

    async def research(
        self,
        query: str,
        identity: str | None = None,
        context: dict[str, Any] | None = None,
        max_results: int | None = None,
    ) -> ResearchResponse:
        payload: dict[str, Any] = {"query": query, "identity": identity, "context": context}
        if max_results is not None:
            payload["max_results"] = max_results
        try:
            request = ResearchRequest.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Research request rejected: {e.error_count()} validation errors")
            return _validation_response(e)

        search_context = SearchContext.build(
            identity=request.identity,
            hints=request.context,
            limit=request.max_results,
        )
        try:
            outcome = await self._orchestrator.research(request.query, search_context)
        except Exception as e:
            logger.error("Research failed unexpectedly", exception=e)
            return ResearchResponse(
                success=False,
                error="Internal error during deep research",
                fallback_message=UNEXPECTED_ERROR_FALLBACK_MESSAGE,
            )

        if outcome.needs_clarification:
            return ResearchResponse(
                success=True,
                needs_clarification=True,
                clarifying_questions=outcome.plan.clarifying_questions if outcome.plan else None,
                plan=_plan_summary(outcome),
            )
        return self._shape(outcome, request.max_results, NO_RESULTS_FALLBACK_MESSAGE)

    async def clarify(
        self,
        query: str,
        clarification: str,
        identity: str | None = None,
        max_results: int | None = None,
    ) -> ResearchResponse:
        payload: dict[str, Any] = {
            "query": query,
            "clarification": clarification,
            "identity": identity,
        }
        if max_results is not None:
            payload["max_results"] = max_results
        try:
            request = ClarifyRequest.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Clarify request rejected: {e.error_count()} validation errors")
            return _validation_response(e)

        refined_query = build_refined_query(request.query, request.clarification)
        search_context = SearchContext.build(identity=request.identity, limit=request.max_results)
        try:
            outcome = await self._orchestrator.clarify(
                request.query, request.clarification, search_context
            )
        except Exception as e:
            logger.error("Clarified research failed unexpectedly", exception=e)
            return ResearchResponse(
                success=False,
                error="Internal error during clarified search",
                refined_query=refined_query,
                fallback_message=UNEXPECTED_ERROR_FALLBACK_MESSAGE,
            )

        if outcome.needs_clarification:
            # one clarification round only
            return ResearchResponse(
                success=False,
                error="Query is still ambiguous after clarification",
                plan=_plan_summary(outcome),
                refined_query=refined_query,
                fallback_message=CLARIFY_FALLBACK_MESSAGE,
            )
        return self._shape(outcome, request.max_results, CLARIFY_FALLBACK_MESSAGE, refined_query)

    def status(self) -> dict[str, Any]:
        planner = self._orchestrator.planner
        registry = self._orchestrator.registry
        providers = [
            {
                "name": str(name),
                "available": name in registry,
                "description": PROVIDER_DESCRIPTIONS[name],
            }
            for name in PROVIDER_DESCRIPTIONS
        ]
        degraded = not planner.uses_llm or len(registry) < len(PROVIDER_DESCRIPTIONS)
        return {
            "system": {
                "mode": "AI-Enhanced" if planner.uses_llm else "Fallback",
                "degraded": degraded,
            },
            "planner": {
                "available": planner.uses_llm,
                "model": planner.model,
                "mode": "AI-powered strategy planning" if planner.uses_llm else "Deterministic fallback",
            },
            "providers": providers,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
