"""Tests for oc.agents.custom_action.custom_action."""

import asyncio

import pytest
from langchain_core.messages import AIMessage

from oc.agents.custom_action import custom_action
from oc.models import Reflections
from oc.utils.memory import REFLECTION_KEY, memory_namespace

from tests.fakes import FakeChatModel


def _store_action(store, action_id="qa-1", **fields):
    action = {"title": "Make formal", "prompt": "Rewrite this in a formal tone.", **fields}
    asyncio.run(store.aput(("custom_actions", "user-1"), "data", {action_id: action}))


def _prompt(fake_models):
    return fake_models["generation"].calls[0][0]["content"]


class TestCustomAction:
    def test_commits_same_variant(self, fake_models, store, base_state, run_config, markdown_artifact):
        _store_action(store)
        base_state.update(artifact=markdown_artifact, custom_quick_action_id="qa-1")
        fake_models["generation"] = FakeChatModel(responses=["# Pricing (formal)"])

        result = asyncio.run(custom_action(base_state, run_config, store=store))

        current = result["artifact"].current_content()
        assert current.index == 2
        assert current.type == "text"
        assert current.full_markdown == "# Pricing (formal)"

    def test_instructions_and_artifact_in_prompt(self, fake_models, store, base_state, run_config, markdown_artifact):
        _store_action(store)
        base_state.update(artifact=markdown_artifact, custom_quick_action_id="qa-1")
        fake_models["generation"] = FakeChatModel(responses=["x"])

        asyncio.run(custom_action(base_state, run_config, store=store))

        prompt = _prompt(fake_models)
        assert "<custom-instructions>\nRewrite this in a formal tone.\n</custom-instructions>" in prompt
        assert "Our plans are simple." in prompt
        assert "<reflections>" not in prompt
        assert "<conversation>" not in prompt

    def test_optional_sections(self, fake_models, store, base_state, run_config, markdown_artifact):
        _store_action(store, include_prefix=True, include_reflections=True, include_recent_history=True)
        asyncio.run(store.aput(
            memory_namespace("assistant-1"), REFLECTION_KEY, Reflections(content=["Works in fintech"]).model_dump()
        ))
        base_state.update(
            artifact=markdown_artifact,
            custom_quick_action_id="qa-1",
            messages=base_state["messages"] + [AIMessage(content="Here is your page")],
        )
        fake_models["generation"] = FakeChatModel(responses=["x"])

        asyncio.run(custom_action(base_state, run_config, store=store))

        prompt = _prompt(fake_models)
        assert prompt.startswith("You are an AI assistant tasked with rewriting")
        assert "Works in fintech" in prompt
        assert "Here is your page" in prompt

    def test_code_artifact_stays_code(self, fake_models, store, base_state, run_config, code_artifact):
        _store_action(store)
        base_state.update(artifact=code_artifact, custom_quick_action_id="qa-1")
        fake_models["generation"] = FakeChatModel(responses=["def add(a, b):\n    return a + b\n"])

        result = asyncio.run(custom_action(base_state, run_config, store=store))

        current = result["artifact"].current_content()
        assert current.type == "code"
        assert current.language == "python"

    def test_missing_id_raises(self, fake_models, store, base_state, run_config, markdown_artifact):
        base_state["artifact"] = markdown_artifact

        with pytest.raises(ValueError, match="No custom quick action ID found"):
            asyncio.run(custom_action(base_state, run_config, store=store))

    def test_unknown_id_raises(self, fake_models, store, base_state, run_config, markdown_artifact):
        _store_action(store)
        base_state.update(artifact=markdown_artifact, custom_quick_action_id="qa-404")

        with pytest.raises(ValueError, match="qa-404"):
            asyncio.run(custom_action(base_state, run_config, store=store))

    def test_missing_user_id_raises(self, fake_models, store, base_state, markdown_artifact):
        base_state.update(artifact=markdown_artifact, custom_quick_action_id="qa-1")

        with pytest.raises(ValueError, match="user_id"):
            asyncio.run(custom_action(base_state, {"configurable": {"assistant_id": "a"}}, store=store))
