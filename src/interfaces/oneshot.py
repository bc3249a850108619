"""One-shot interface: run one research / clarify / status call, print JSON, exit."""

from __future__ import annotations

import asyncio
import json

from src.core.config import config
from src.llm.openrouter_client import OpenRouterClient, create_planning_client
from src.research import DeepResearchOrchestrator, ResearchService, build_registry
from src.research.backends import RadioBrowserDirectory


class _Runtime:
    """Service plus the HTTP clients it owns, closed together."""

    def __init__(self) -> None:
        errors = config.validate()
        if errors:
            raise ValueError("; ".join(errors))

        self.planning_client: OpenRouterClient | None = create_planning_client()
        self.station_directory = RadioBrowserDirectory()
        # catalog stores live in the application database; only the directory is wired here
        registry = build_registry(station_directory=self.station_directory)
        orchestrator = DeepResearchOrchestrator(
            registry,
            planning_client=self.planning_client,
            provider_timeout=config.provider_timeout_seconds,
        )
        self.service = ResearchService(orchestrator)

    async def close(self) -> None:
        await self.station_directory.close()
        if self.planning_client is not None:
            await self.planning_client.close()


def _print(payload: dict) -> None:
    print(json.dumps(payload, indent=2, default=str))


async def run_research(query: str, identity: str | None = None) -> int:
    runtime = _Runtime()
    try:
        response = await runtime.service.research(
            query, identity=identity, max_results=config.research_default_limit
        )
    finally:
        await runtime.close()
    _print(response.model_dump(exclude_none=True, mode="json"))
    return 0 if response.success else 1


async def run_clarify(query: str, clarification: str, identity: str | None = None) -> int:
    runtime = _Runtime()
    try:
        response = await runtime.service.clarify(
            query, clarification, identity=identity, max_results=config.research_default_limit
        )
    finally:
        await runtime.close()
    _print(response.model_dump(exclude_none=True, mode="json"))
    return 0 if response.success else 1


async def run_status() -> int:
    runtime = _Runtime()
    try:
        _print(runtime.service.status())
    finally:
        await runtime.close()
    return 0


def main(mode: str, args: list[str], identity: str | None = None) -> int:
    if mode == "research":
        if not args:
            print("Error: query must not be empty")
            return 2
        return asyncio.run(run_research(" ".join(args), identity=identity))
    if mode == "clarify":
        if len(args) < 2:
            print('Usage: clarify "<original query>" "<clarification>"')
            return 2
        return asyncio.run(run_clarify(args[0], " ".join(args[1:]), identity=identity))
    if mode == "status":
        return asyncio.run(run_status())
    print(f"Unknown mode: {mode}")
    return 2
