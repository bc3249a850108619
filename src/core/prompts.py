"""Load prompts from prompts/ for the research planner."""

from pathlib import Path

from src.core.config import config

PROVIDER_CATALOG_PLACEHOLDER = "{provider_catalog}"


def _prompts_dir() -> Path:
    return config.prompts_dir


def load_research_prompt(name: str) -> str:
    path = _prompts_dir() / "research" / f"{name}.md"
    if not path.exists():
        raise FileNotFoundError(f"Research prompt not found: {path}")
    return path.read_text().rstrip()


def render_plan_prompt(provider_catalog: str) -> str:
    template = load_research_prompt("plan")
    if PROVIDER_CATALOG_PLACEHOLDER not in template:
        raise ValueError(
            f"Planner prompt is missing the {PROVIDER_CATALOG_PLACEHOLDER} placeholder."
        )
    return template.replace(PROVIDER_CATALOG_PLACEHOLDER, provider_catalog)
