"""Strategy planner: choose providers for a query, or ask for clarification.

Uses the planning LLM when one is configured and falls back to a deterministic
heuristic on any failure. The planner never calls providers itself.
"""

import json
import re
from typing import Any, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.core.logger import logger
from src.core.prompts import render_plan_prompt
from src.observability import traceable
from src.research.constants import (
    DEFAULT_PROVIDERS,
    FALLBACK_CLARIFYING_QUESTIONS,
    MIN_QUERY_CHARS,
    MOOD_VOCABULARY,
    STATION_VOCABULARY,
    ProviderName,
)
from src.research.models import ResearchPlan, SearchContext
from src.research.registry import ProviderRegistry


class PlanningClient(Protocol):
    model: str

    async def chat_json(self, system_message: str, user_message: str) -> Any: ...


class PlannerReply(BaseModel):
    """Schema the planning service must satisfy. Anything else is a planning failure."""

    model_config = ConfigDict(extra="ignore")

    strategy: str = Field(min_length=1, validation_alias=AliasChoices("strategy", "strategyDescription"))
    selected_providers: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("selected_providers", "selectedProviders", "agentsToUse"),
    )
    reasoning: str | None = Field(default=None)
    needs_clarification: bool = Field(
        default=False,
        validation_alias=AliasChoices("needs_clarification", "needsClarification"),
    )
    clarifying_questions: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "clarifying_questions", "clarifyingQuestions", "clarificationQuestions"
        ),
    )


def _extract_json(text: str) -> str:
    """Take first ```json ... ``` block or bare JSON from text."""
    text = (text or "").strip()
    if not text:
        return "{}"
    match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if match:
        return match.group(1).strip()
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def parse_planner_reply(text: str) -> PlannerReply:
    """Parse raw LLM output. Raises ValueError (incl. ValidationError) when it does not fit."""
    try:
        data = json.loads(_extract_json(text))
    except json.JSONDecodeError as e:
        raise ValueError(f"planner reply is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("planner reply is not a JSON object")
    return PlannerReply.model_validate(data)


def fallback_plan(query: str, context: SearchContext) -> ResearchPlan:
    """Deterministic plan used when no planning service is available."""
    text = (query or "").strip()
    if len(text) < MIN_QUERY_CHARS:
        return ResearchPlan(
            strategy="Query too short",
            reasoning=f"Query needs to be at least {MIN_QUERY_CHARS} characters",
            needs_clarification=True,
            clarifying_questions=list(FALLBACK_CLARIFYING_QUESTIONS),
            planner="fallback",
        )

    selected: list[ProviderName] = list(DEFAULT_PROVIDERS)
    reasons = ["keyword search for exact matches", "semantic search for similar concepts"]
    if MOOD_VOCABULARY.search(text):
        selected.append(ProviderName.ACOUSTIC)
        reasons.append("acoustic patterns for the mood/energy wording")
    if context.identity:
        selected.append(ProviderName.PERSONALIZATION)
        reasons.append("personalized recommendations for the signed-in listener")
    if STATION_VOCABULARY.search(text):
        selected.append(ProviderName.STATIONS)
        reasons.append("external stations for radio/live wording")

    return ResearchPlan(
        strategy="Multi-source search with keyword and semantic matching",
        selected_providers=selected,
        reasoning="Using deterministic strategy: " + ", ".join(reasons) + ".",
        needs_clarification=False,
        planner="fallback",
    )


def plan_from_reply(reply: PlannerReply) -> ResearchPlan:
    """Validate provider names against the closed set and apply plan defaults."""
    known: list[ProviderName] = []
    unknown: list[str] = []
    for raw in reply.selected_providers:
        try:
            known.append(ProviderName(str(raw).strip().lower()))
        except ValueError:
            unknown.append(str(raw))
    reasoning = reply.reasoning or ""
    if unknown:
        logger.warning(f"Planner selected unknown providers, rejected: {unknown}")
        reasoning = (reasoning + f" (rejected unknown providers: {', '.join(unknown)})").strip()

    if reply.needs_clarification:
        questions = [q.strip() for q in reply.clarifying_questions or [] if q and q.strip()]
        return ResearchPlan(
            strategy=reply.strategy,
            reasoning=reasoning,
            needs_clarification=True,
            clarifying_questions=questions or list(FALLBACK_CLARIFYING_QUESTIONS),
            planner="llm",
        )
    if not known:
        known = list(DEFAULT_PROVIDERS)
    return ResearchPlan(
        strategy=reply.strategy,
        selected_providers=known,
        reasoning=reasoning,
        needs_clarification=False,
        planner="llm",
    )


class StrategyPlanner:
    """Turns a query and context into a ResearchPlan."""

    def __init__(self, registry: ProviderRegistry, client: PlanningClient | None = None):
        self._registry = registry
        self._client = client

    @property
    def uses_llm(self) -> bool:
        return self._client is not None

    @property
    def model(self) -> str | None:
        return getattr(self._client, "model", None) if self._client is not None else None

    def _user_prompt(self, query: str, context: SearchContext) -> str:
        return (
            f'Query: "{query}"\n'
            f"Context: {json.dumps(context.describe())}\n"
            f"Listener identity: {'Available' if context.identity else 'Not available'}\n\n"
            "Plan the search strategy."
        )

    @traceable(name="research_plan", run_type="chain")
    async def plan(self, query: str, context: SearchContext) -> ResearchPlan:
        if self._client is None:
            plan = fallback_plan(query, context)
        else:
            try:
                system_prompt = render_plan_prompt(self._registry.catalog_text())
                response = await self._client.chat_json(
                    system_prompt, self._user_prompt(query, context)
                )
                text = getattr(response, "text", None) or str(response)
                plan = plan_from_reply(parse_planner_reply(text))
            except ValueError as e:
                logger.warning(f"Planner reply rejected, using fallback: {e}")
                plan = fallback_plan(query, context)
            except Exception as e:
                logger.warning(f"Planning service failed, using fallback: {e}")
                plan = fallback_plan(query, context)

        logger.plan_selected(
            plan.strategy,
            [str(p) for p in plan.selected_providers],
            plan.needs_clarification,
            plan.planner,
        )
        return plan
