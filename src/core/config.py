"""Configuration from environment variables (.env)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    value = float(raw)
    return value if value > 0 else None


@dataclass
class Config:
    project_root: Path
    logs_dir: Path
    prompts_dir: Path
    openrouter_api_key: str
    openrouter_base_url: str
    planner_models: list[str]  # Model IDs to try in order (fallback on 5xx/429)
    planner_temperature: float
    embedding_api_key: str
    embedding_base_url: str
    embedding_model: str
    radio_browser_url: str
    provider_timeout_seconds: float | None  # None = wait for every provider
    research_default_limit: int

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent
        return cls(
            project_root=project_root,
            logs_dir=Path(os.getenv("LOGS_DIR", str(project_root / "logs"))),
            prompts_dir=Path(os.getenv("PROMPTS_DIR", str(project_root / "prompts"))),
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
            planner_models=[m.strip() for m in os.getenv("PLANNER_MODELS", "openrouter/auto").split(",") if m.strip()],
            planner_temperature=float(os.getenv("PLANNER_TEMPERATURE", "0.7")),
            embedding_api_key=os.getenv("EMBEDDING_API_KEY", os.getenv("OPENAI_API_KEY", "")),
            embedding_base_url=os.getenv("EMBEDDING_BASE_URL", "https://api.openai.com/v1"),
            embedding_model=os.getenv("EMBEDDING_MODEL", "text-embedding-3-small"),
            radio_browser_url=os.getenv("RADIO_BROWSER_URL", "https://de1.api.radio-browser.info"),
            provider_timeout_seconds=_optional_float("PROVIDER_TIMEOUT_SECONDS"),
            research_default_limit=int(os.getenv("RESEARCH_DEFAULT_LIMIT", "20")),
        )

    @property
    def planner_available(self) -> bool:
        return bool(self.openrouter_api_key.strip())

    @property
    def embeddings_available(self) -> bool:
        return bool(self.embedding_api_key.strip())

    def validate(self) -> list[str]:
        errors = []
        plan_prompt = self.prompts_dir / "research" / "plan.md"
        if not plan_prompt.exists():
            errors.append(
                f"Planner prompt not found: {plan_prompt} "
                "(run from a source checkout or `pip install -e .`, or set PROMPTS_DIR)"
            )
        if not 1 <= self.research_default_limit <= 100:
            errors.append(f"RESEARCH_DEFAULT_LIMIT must be in 1..100, got {self.research_default_limit}")
        return errors


config = Config.load()
