"""Deep research: planner-driven scatter-gather music discovery."""

from src.research.constants import ProviderName
from src.research.interface import SearchProvider
from src.research.models import AggregatedResult, ResearchResponse, SearchContext
from src.research.orchestrator import DeepResearchOrchestrator
from src.research.registry import ProviderRegistry, build_registry
from src.research.service import ResearchService

__all__ = [
    "AggregatedResult",
    "DeepResearchOrchestrator",
    "ProviderName",
    "ProviderRegistry",
    "ResearchResponse",
    "ResearchService",
    "SearchContext",
    "SearchProvider",
    "build_registry",
]
