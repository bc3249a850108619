"""Data model for the research pipeline: requests, plans, provider outcomes, responses.

Everything here is created per call and discarded at the end of it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.research.constants import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_QUERY_CHARS,
    ProviderName,
)


class Track(BaseModel):
    """One discoverable item: a catalog song or an external station entry."""

    model_config = ConfigDict(frozen=True)

    id: int | str = Field(description="Item identity used for cross-provider matching")
    title: str = Field(description="Song title or station name")
    artist: str | None = Field(default=None)
    ipfs_hash: str | None = Field(default=None)
    uploaded_by: str | None = Field(default=None)
    created_at: datetime | None = Field(default=None)
    votes: int = Field(default=0)
    is_external: bool = Field(default=False, description="True for entries outside the catalog (stations)")
    stream_url: str | None = Field(default=None)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ContextHints(BaseModel):
    """Optional caller-supplied hints about the listener."""

    model_config = ConfigDict(extra="forbid")

    recently_played: list[int] = Field(default_factory=list)
    loved_songs: list[int] = Field(default_factory=list)
    preferred_genres: list[str] = Field(default_factory=list)
    mood: str | None = Field(default=None, max_length=100)


class SearchContext(BaseModel):
    """Immutable per-call context handed to every provider."""

    model_config = ConfigDict(frozen=True)

    identity: str | None = Field(default=None, description="Wallet address or user id")
    recently_played: tuple[int, ...] = Field(default=())
    loved_songs: tuple[int, ...] = Field(default=())
    preferred_genres: tuple[str, ...] = Field(default=())
    mood: str | None = Field(default=None)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)

    @classmethod
    def build(
        cls,
        identity: str | None = None,
        hints: ContextHints | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> "SearchContext":
        hints = hints or ContextHints()
        return cls(
            identity=(identity or "").strip() or None,
            recently_played=tuple(hints.recently_played),
            loved_songs=tuple(hints.loved_songs),
            preferred_genres=tuple(hints.preferred_genres),
            mood=hints.mood,
            limit=limit,
        )

    def describe(self) -> dict[str, Any]:
        """JSON-safe summary for the planning service (identity is never sent)."""
        out: dict[str, Any] = {"limit": self.limit}
        if self.recently_played:
            out["recently_played"] = list(self.recently_played)
        if self.loved_songs:
            out["loved_songs"] = list(self.loved_songs)
        if self.preferred_genres:
            out["preferred_genres"] = list(self.preferred_genres)
        if self.mood:
            out["mood"] = self.mood
        return out


class ResearchPlan(BaseModel):
    """Which providers to invoke and why, or a request for clarification."""

    strategy: str = Field(description="One-line strategy description")
    selected_providers: list[ProviderName] = Field(default_factory=list)
    reasoning: str = Field(default="")
    needs_clarification: bool = Field(default=False)
    clarifying_questions: list[str] | None = Field(default=None)
    planner: str = Field(default="fallback", description="'llm' or 'fallback'")

    @field_validator("selected_providers")
    @classmethod
    def _dedupe_providers(cls, value: list[ProviderName]) -> list[ProviderName]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _clarification_has_no_providers(self) -> "ResearchPlan":
        if self.needs_clarification:
            self.selected_providers = []
        else:
            self.clarifying_questions = None
        return self


class ProviderResult(BaseModel):
    """Scored output of one provider for one call. Items are best first."""

    model_config = ConfigDict(frozen=True)

    items: list[Track] = Field(default_factory=list)
    confidence: float = Field(ge=0, le=1)
    reasoning: str = Field(default="")
    source: ProviderName


class ProviderOutcome(BaseModel):
    """Success (result) or failure (error) of one provider invocation."""

    model_config = ConfigDict(frozen=True)

    source: ProviderName
    result: ProviderResult | None = Field(default=None)
    error: str | None = Field(default=None)
    elapsed_ms: float = Field(default=0.0, ge=0)

    @property
    def success(self) -> bool:
        return self.result is not None and self.error is None

    @classmethod
    def ok(cls, result: ProviderResult, elapsed_ms: float) -> "ProviderOutcome":
        return cls(source=result.source, result=result, elapsed_ms=elapsed_ms)

    @classmethod
    def fail(cls, source: ProviderName, error: str, elapsed_ms: float = 0.0) -> "ProviderOutcome":
        return cls(source=source, error=error or "Unknown error", elapsed_ms=elapsed_ms)


@dataclass
class RankedItem:
    """Running score of one item across providers (aggregator-internal)."""

    item: Track
    score: float
    sources: list[ProviderName] = field(default_factory=list)
    confidences: list[float] = field(default_factory=list)

    @property
    def corroborated(self) -> bool:
        return len(self.sources) > 1


class SourceSummary(BaseModel):
    source: ProviderName
    count: int
    confidence: float = Field(ge=0, le=1)
    reasoning: str = ""


class ProviderFailure(BaseModel):
    source: ProviderName
    error: str


class AggregatedResult(BaseModel):
    """Merged, ranked answer across all providers that succeeded."""

    items: list[Track] = Field(default_factory=list)
    sources: list[SourceSummary] = Field(default_factory=list)
    overall_confidence: float = Field(default=0.0, ge=0, le=1)
    reasoning: str = Field(default="")
    elapsed_ms: float = Field(default=0.0)
    failures: list[ProviderFailure] = Field(default_factory=list)


class ResearchOutcome(BaseModel):
    """Orchestrator return value before it is shaped for the caller."""

    success: bool
    plan: ResearchPlan | None = None
    result: AggregatedResult | None = None
    error: str | None = None
    query: str = ""

    @property
    def needs_clarification(self) -> bool:
        return bool(self.plan and self.plan.needs_clarification)


# ---------------------------------------------------------------------------
# Caller boundary
# ---------------------------------------------------------------------------


class ResearchRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    query: str = Field(min_length=1, max_length=MAX_QUERY_CHARS)
    identity: str | None = Field(default=None, max_length=200)
    max_results: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    context: ContextHints | None = Field(default=None)


class ClarifyRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    query: str = Field(min_length=1, max_length=MAX_QUERY_CHARS)
    clarification: str = Field(min_length=1, max_length=MAX_QUERY_CHARS)
    identity: str | None = Field(default=None, max_length=200)
    max_results: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)


class FieldError(BaseModel):
    field: str
    message: str


class PlanSummary(BaseModel):
    strategy: str
    providers_used: list[ProviderName] = Field(default_factory=list)
    reasoning: str = ""
    planner: str = "fallback"


class ResearchResponse(BaseModel):
    """Structured JSON returned by the research and clarify operations."""

    success: bool
    needs_clarification: bool | None = None
    clarifying_questions: list[str] | None = None
    plan: PlanSummary | None = None
    results: list[Track] | None = None
    reasoning: str | None = None
    confidence: float | None = None
    sources: list[SourceSummary] | None = None
    failures: list[ProviderFailure] | None = None
    elapsed_ms: float | None = None
    refined_query: str | None = None
    error: str | None = None
    details: list[FieldError] | None = None
    fallback_message: str | None = None
