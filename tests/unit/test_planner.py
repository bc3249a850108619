from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from src.research.constants import FALLBACK_CLARIFYING_QUESTIONS, ProviderName
from src.research.models import SearchContext
from src.research.planner import (
    PlannerReply,
    StrategyPlanner,
    fallback_plan,
    parse_planner_reply,
    plan_from_reply,
)
from src.research.registry import ProviderRegistry


def _client(reply) -> SimpleNamespace:
    if isinstance(reply, Exception):
        chat_json = AsyncMock(side_effect=reply)
    else:
        text = reply if isinstance(reply, str) else json.dumps(reply)
        chat_json = AsyncMock(return_value=SimpleNamespace(text=text))
    return SimpleNamespace(model="test/model", chat_json=chat_json)


class TestFallbackPlan:
    def test_one_char_query_asks_for_clarification(self):
        plan = fallback_plan("x", SearchContext())
        assert plan.needs_clarification is True
        assert plan.selected_providers == []
        assert plan.clarifying_questions == list(FALLBACK_CLARIFYING_QUESTIONS)
        assert plan.planner == "fallback"

    def test_mood_query_without_identity(self):
        plan = fallback_plan("chill evening", SearchContext())
        assert plan.needs_clarification is False
        assert set(plan.selected_providers) == {
            ProviderName.KEYWORD,
            ProviderName.SEMANTIC,
            ProviderName.ACOUSTIC,
        }
        assert ProviderName.PERSONALIZATION not in plan.selected_providers

    def test_identity_adds_personalization(self):
        plan = fallback_plan("rock songs", SearchContext(identity="0xabc"))
        assert plan.selected_providers == [
            ProviderName.KEYWORD,
            ProviderName.SEMANTIC,
            ProviderName.PERSONALIZATION,
        ]

    def test_station_wording_adds_stations(self):
        plan = fallback_plan("jazz radio", SearchContext())
        assert ProviderName.STATIONS in plan.selected_providers
        assert ProviderName.ACOUSTIC not in plan.selected_providers

    def test_three_characters_is_enough(self):
        plan = fallback_plan("abc", SearchContext())
        assert plan.needs_clarification is False
        assert plan.selected_providers == [ProviderName.KEYWORD, ProviderName.SEMANTIC]
        assert plan.clarifying_questions is None


class TestReplyParsing:
    def test_parses_fenced_json(self):
        text = 'Here you go:\n```json\n{"strategy": "s", "selected_providers": ["keyword"]}\n```'
        reply = parse_planner_reply(text)
        assert reply.strategy == "s"
        assert reply.selected_providers == ["keyword"]

    def test_accepts_camel_case_keys(self):
        reply = parse_planner_reply(
            json.dumps(
                {
                    "strategy": "s",
                    "agentsToUse": ["semantic"],
                    "needsClarification": True,
                    "clarificationQuestions": ["Which decade?"],
                }
            )
        )
        assert reply.selected_providers == ["semantic"]
        assert reply.needs_clarification is True
        assert reply.clarifying_questions == ["Which decade?"]

    @pytest.mark.parametrize("text", ["", "not json", "[1, 2]", '{"reasoning": "no strategy"}'])
    def test_rejects_malformed_replies(self, text):
        with pytest.raises(ValueError):
            parse_planner_reply(text)

    def test_unknown_provider_names_are_rejected(self):
        reply = PlannerReply(strategy="s", selected_providers=["keyword", "lyrics", "SEMANTIC"])
        plan = plan_from_reply(reply)
        assert plan.selected_providers == [ProviderName.KEYWORD, ProviderName.SEMANTIC]
        assert "rejected unknown providers: lyrics" in plan.reasoning
        assert plan.planner == "llm"

    def test_empty_selection_defaults_to_keyword_and_semantic(self):
        plan = plan_from_reply(PlannerReply(strategy="s", selected_providers=["lyrics"]))
        assert plan.selected_providers == [ProviderName.KEYWORD, ProviderName.SEMANTIC]

    def test_null_questions_on_clarification_use_fixed_questions(self):
        reply = parse_planner_reply(
            '{"strategy": "s", "needs_clarification": true, "clarifying_questions": null}'
        )
        plan = plan_from_reply(reply)
        assert plan.clarifying_questions == list(FALLBACK_CLARIFYING_QUESTIONS)

    def test_clarification_clears_providers_and_fills_questions(self):
        plan = plan_from_reply(
            PlannerReply(strategy="s", selected_providers=["keyword"], needs_clarification=True)
        )
        assert plan.needs_clarification is True
        assert plan.selected_providers == []
        assert plan.clarifying_questions == list(FALLBACK_CLARIFYING_QUESTIONS)


class TestStrategyPlanner:
    @pytest.mark.asyncio
    async def test_without_client_uses_fallback(self):
        planner = StrategyPlanner(ProviderRegistry({}))
        plan = await planner.plan("chill evening", SearchContext())
        assert planner.uses_llm is False
        assert planner.model is None
        assert plan.planner == "fallback"

    @pytest.mark.asyncio
    async def test_uses_valid_llm_plan(self):
        client = _client(
            {
                "strategy": "Mood-led discovery",
                "selected_providers": ["acoustic", "semantic"],
                "reasoning": "mood words",
                "needs_clarification": False,
            }
        )
        planner = StrategyPlanner(ProviderRegistry({}), client)

        plan = await planner.plan("something dreamy", SearchContext(identity="0xabc"))

        assert plan.planner == "llm"
        assert plan.selected_providers == [ProviderName.ACOUSTIC, ProviderName.SEMANTIC]
        system_prompt, user_prompt = client.chat_json.await_args.args
        assert "- semantic:" in system_prompt
        assert "{provider_catalog}" not in system_prompt
        assert '"something dreamy"' in user_prompt
        assert "0xabc" not in user_prompt
        assert planner.model == "test/model"

    @pytest.mark.asyncio
    async def test_null_optional_fields_keep_llm_plan(self):
        client = _client(
            {
                "strategyDescription": "Mood",
                "selectedProviders": ["acoustic"],
                "reasoning": None,
                "needsClarification": False,
                "clarifyingQuestions": None,
            }
        )
        plan = await StrategyPlanner(ProviderRegistry({}), client).plan(
            "dreamy evening", SearchContext()
        )

        assert plan.planner == "llm"
        assert plan.selected_providers == [ProviderName.ACOUSTIC]
        assert plan.reasoning == ""
        assert plan.clarifying_questions is None

    @pytest.mark.asyncio
    async def test_llm_clarification_is_honoured(self):
        client = _client(
            {
                "strategy": "Ambiguous",
                "needs_clarification": True,
                "clarifying_questions": ["Which era?"],
            }
        )
        plan = await StrategyPlanner(ProviderRegistry({}), client).plan("music", SearchContext())
        assert plan.needs_clarification is True
        assert plan.clarifying_questions == ["Which era?"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            RuntimeError("service unavailable"),
            "I think you should use keyword search",
            {"selected_providers": ["keyword"]},
        ],
    )
    async def test_llm_failure_falls_back(self, reply):
        planner = StrategyPlanner(ProviderRegistry({}), _client(reply))
        plan = await planner.plan("chill evening", SearchContext())
        assert plan.planner == "fallback"
        assert ProviderName.ACOUSTIC in plan.selected_providers
