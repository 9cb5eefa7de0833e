"""Tests for oc.agents.web_dsl.generate_web_dsl."""

import asyncio

from oc.agents.web_dsl import generate_web_dsl
from oc.models import RequirementsRecord, WebDSL

from tests.fakes import FakeChatModel

SNAPSHOTS = [
    {"description": "Pricing"},
    {"description": "Pricing page", "elements": [{"id": "page", "element_type": "main"}]},
    {
        "description": "Pricing page",
        "states": [{"name": "billingPeriod", "initial_value": "monthly"}],
        "elements": [
            {"id": "page", "element_type": "main"},
            {"id": "toggle", "parent_id": "page", "element_type": "button"},
        ],
    },
]


class TestGenerateWebDsl:
    def test_keeps_final_snapshot(self, fake_models, base_state, run_config):
        fake_models["generation"] = FakeChatModel(streams=[SNAPSHOTS])

        result = asyncio.run(generate_web_dsl(base_state, run_config))

        dsl = result["web_dsl"]
        assert isinstance(dsl, WebDSL)
        assert [e.id for e in dsl.elements] == ["page", "toggle"]
        assert dsl.states[0].name == "billingPeriod"

    def test_requirements_in_prompt(self, fake_models, base_state, run_config):
        base_state["analyzed_requirements"] = RequirementsRecord(main_goal="Sell SaaS plans")
        fake_models["generation"] = FakeChatModel(streams=[SNAPSHOTS])

        asyncio.run(generate_web_dsl(base_state, run_config))

        system = fake_models["generation"].stream_calls[0][0]["content"]
        assert "Main Goal: Sell SaaS plans" in system

    def test_empty_stream_leaves_state(self, fake_models, base_state, run_config):
        fake_models["generation"] = FakeChatModel(streams=[[]])

        assert asyncio.run(generate_web_dsl(base_state, run_config)) == {}

    def test_stream_failure_leaves_state(self, fake_models, base_state, run_config):
        fake_models["generation"] = FakeChatModel(streams=[RuntimeError("stream dropped")])

        assert asyncio.run(generate_web_dsl(base_state, run_config)) == {}

    def test_schema_failure_leaves_state(self, fake_models, base_state, run_config):
        fake_models["generation"] = FakeChatModel(streams=[[{"elements": [{"id": "x"}]}]])

        assert asyncio.run(generate_web_dsl(base_state, run_config)) == {}

    def test_inconsistent_dsl_still_kept(self, fake_models, base_state, run_config):
        fake_models["generation"] = FakeChatModel(streams=[[
            {"elements": [{"id": "a", "parent_id": "ghost", "element_type": "div"}]}
        ]])

        result = asyncio.run(generate_web_dsl(base_state, run_config))

        assert result["web_dsl"].elements[0].parent_id == "ghost"
