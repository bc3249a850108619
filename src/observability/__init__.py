"""Observability: LangSmith tracing (optional, env-controlled)."""

from src.observability.langsmith import flush, traceable

__all__ = ["traceable", "flush"]
