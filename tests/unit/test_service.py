from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.research.constants import (
    CLARIFY_FALLBACK_MESSAGE,
    FALLBACK_CLARIFYING_QUESTIONS,
    NO_RESULTS_FALLBACK_MESSAGE,
    ProviderName,
)
from src.research.orchestrator import DeepResearchOrchestrator
from src.research.registry import ProviderRegistry
from src.research.service import ResearchService


def _service(providers: dict, planning_client=None) -> ResearchService:
    return ResearchService(
        DeepResearchOrchestrator(ProviderRegistry(providers), planning_client=planning_client)
    )


@pytest.fixture
def service(static_provider, make_track):
    return _service(
        {
            ProviderName.KEYWORD: static_provider(
                ProviderName.KEYWORD, [make_track(i) for i in range(30)], 0.5
            ),
            ProviderName.SEMANTIC: static_provider(ProviderName.SEMANTIC, [make_track(0)], 0.8),
        }
    )


class TestResearch:
    @pytest.mark.asyncio
    async def test_success_shape(self, service):
        response = await service.research("daft punk", max_results=5)

        assert response.success is True
        assert len(response.results) == 5
        assert response.results[0].id == 0
        assert response.plan.providers_used == [ProviderName.KEYWORD, ProviderName.SEMANTIC]
        assert response.plan.planner == "fallback"
        assert 0 < response.confidence <= 1
        assert response.reasoning.startswith("Found 30 songs from 2 different sources.")
        assert response.error is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"query": ""}, "query"),
            ({"query": "x" * 501}, "query"),
            ({"query": "rock", "max_results": 0}, "max_results"),
            ({"query": "rock", "max_results": 101}, "max_results"),
            ({"query": "rock", "context": {"recently_played": "nope"}}, "context.recently_played"),
            ({"query": "rock", "context": {"unknown": 1}}, "context.unknown"),
        ],
    )
    async def test_invalid_requests_report_field_details(self, service, kwargs, field):
        response = await service.research(**kwargs)

        assert response.success is False
        assert response.error == "Invalid request"
        assert field in [d.field for d in response.details]

    @pytest.mark.asyncio
    async def test_clarification_branch(self, service):
        response = await service.research("x")

        assert response.success is True
        assert response.needs_clarification is True
        assert response.clarifying_questions == list(FALLBACK_CLARIFYING_QUESTIONS)
        assert response.results is None

    @pytest.mark.asyncio
    async def test_all_providers_failing_returns_fallback_message(self, static_provider):
        service = _service(
            {
                ProviderName.KEYWORD: static_provider(
                    ProviderName.KEYWORD, error=RuntimeError("db down")
                ),
                ProviderName.SEMANTIC: static_provider(
                    ProviderName.SEMANTIC, error=RuntimeError("db down")
                ),
            }
        )
        response = await service.research("daft punk")

        assert response.success is False
        assert response.results == []
        assert response.confidence == 0.0
        assert response.fallback_message == NO_RESULTS_FALLBACK_MESSAGE
        assert len(response.failures) == 2

    @pytest.mark.asyncio
    async def test_context_hints_reach_providers(self, static_provider):
        keyword = static_provider(ProviderName.KEYWORD)
        service = _service({ProviderName.KEYWORD: keyword})

        await service.research(
            "daft punk",
            identity="0xabc",
            context={"loved_songs": [1, 2], "mood": "happy"},
            max_results=7,
        )

        _, context = keyword.calls[0]
        assert context.identity == "0xabc"
        assert context.loved_songs == (1, 2)
        assert context.mood == "happy"
        assert context.limit == 7

    @pytest.mark.asyncio
    async def test_orchestrator_crash_is_contained(self, service, monkeypatch):
        monkeypatch.setattr(
            service._orchestrator, "research", AsyncMock(side_effect=RuntimeError("boom"))
        )
        response = await service.research("daft punk")
        assert response.success is False
        assert response.error == "Internal error during deep research"
        assert response.fallback_message


class TestClarify:
    @pytest.mark.asyncio
    async def test_refined_query_is_reported_and_used(self, service):
        response = await service.clarify("driving music", "70s rock")

        assert response.success is True
        assert response.refined_query == "driving music - 70s rock"
        keyword = service._orchestrator.registry.get(ProviderName.KEYWORD)
        assert keyword.calls[-1][0] == "driving music - 70s rock"

    @pytest.mark.asyncio
    async def test_missing_clarification_is_invalid(self, service):
        response = await service.clarify("driving music", "   ")
        assert response.success is False
        assert "clarification" in [d.field for d in response.details]

    @pytest.mark.asyncio
    async def test_still_ambiguous_after_clarification(self, static_provider):
        client = AsyncMock()
        client.model = "test/model"
        client.chat_json.return_value.text = (
            '{"strategy": "Still vague", "needs_clarification": true}'
        )
        service = _service(
            {ProviderName.KEYWORD: static_provider(ProviderName.KEYWORD)}, planning_client=client
        )

        response = await service.clarify("music", "good")

        assert response.success is False
        assert response.error == "Query is still ambiguous after clarification"
        assert response.fallback_message == CLARIFY_FALLBACK_MESSAGE
        assert response.refined_query == "music - good"


def test_status_reports_fallback_mode_and_provider_availability(service):
    status = service.status()

    assert status["system"]["mode"] == "Fallback"
    assert status["system"]["degraded"] is True
    assert status["planner"]["available"] is False
    availability = {p["name"]: p["available"] for p in status["providers"]}
    assert availability == {
        "semantic": True,
        "keyword": True,
        "personalization": False,
        "acoustic": False,
        "stations": False,
    }
    assert "timestamp" in status


def test_status_with_planner_and_all_providers(static_provider):
    client = AsyncMock()
    client.model = "test/model"
    service = _service({name: static_provider(name) for name in ProviderName}, client)

    status = service.status()

    assert status["system"] == {"mode": "AI-Enhanced", "degraded": False}
    assert status["planner"]["model"] == "test/model"
