from src.research.providers.acoustic import AcousticPatternProvider
from src.research.providers.keyword import KeywordProvider
from src.research.providers.personalization import PersonalizationProvider
from src.research.providers.semantic import SemanticProvider
from src.research.providers.stations import StationsProvider

__all__ = [
    "AcousticPatternProvider",
    "KeywordProvider",
    "PersonalizationProvider",
    "SemanticProvider",
    "StationsProvider",
]
