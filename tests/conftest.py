"""Shared fixtures for the OC test suite."""

import copy
from contextlib import ExitStack
from unittest.mock import patch

import pytest
from langchain_core.messages import HumanMessage
from langgraph.store.memory import InMemoryStore

from oc.models import Artifact, CodeContent, MarkdownContent

from tests.fakes import FakeChatModel

# Modules that resolve chat models through `get_chat_model`.
MODEL_MODULES = [
    "oc.agents.conversation",
    "oc.agents.custom_action",
    "oc.agents.evaluator",
    "oc.agents.highlights",
    "oc.agents.reflection",
    "oc.agents.refinement",
    "oc.agents.requirements",
    "oc.agents.rewriter",
    "oc.agents.router",
    "oc.agents.themes",
    "oc.agents.web_dsl",
    "oc.web_search.nodes",
]

TEST_CONFIG = {
    "models": {
        "default": {"provider": "anthropic", "model": "test-model"},
    },
    "thinking_models": ["deepseek-r1"],
    "user_role_system_models": ["o1-mini"],
    "refinement": {"max_page_count": 3, "max_iterations": 5, "min_acceptable_score": 90},
    "evaluation": {"metrics_attempts": 4, "scoring_attempts": 6, "retry_delay_seconds": 0},
    "character_max": 300000,
    "llm_max_retries": 0,
    "web_search": {"endpoint": "https://search.example.com", "num_results": 5, "timeout_seconds": 5},
    "llm_log_enabled": False,
    "audit_enabled": False,
    "implementation_rules_enabled": True,
}


@pytest.fixture
def mock_config():
    """Patch the config singleton with test-friendly values."""
    test_config = copy.deepcopy(TEST_CONFIG)
    with patch("oc.config._config", test_config):
        yield test_config


@pytest.fixture
def fake_models(mock_config):
    """Role -> FakeChatModel map served by every patched `get_chat_model`.

    Tests assign `fake_models["generation"] = FakeChatModel(...)` before
    running a node; unassigned roles get an empty model on first use.
    """
    models = {}
    overrides = []

    def factory(role, **kwargs):
        overrides.append((role, kwargs))
        return models.setdefault(role, FakeChatModel())

    with ExitStack() as stack:
        for module in MODEL_MODULES:
            stack.enter_context(patch(f"{module}.get_chat_model", side_effect=factory))
        models["_overrides"] = overrides
        yield models


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def run_config():
    return {
        "configurable": {
            "thread_id": "thread-1",
            "assistant_id": "assistant-1",
            "user_id": "user-1",
        }
    }


@pytest.fixture
def human_message():
    return HumanMessage(id="human-1", content="Build a pricing page for a SaaS product with a monthly/yearly toggle")


@pytest.fixture
def base_state(human_message):
    """Minimal ConversationState with one user turn and no artifact."""
    return {
        "messages": [human_message],
        "internal_messages": [human_message],
        "artifact": None,
    }


@pytest.fixture
def markdown_artifact():
    return Artifact.first(
        MarkdownContent(
            index=1,
            title="Pricing",
            full_markdown="# Pricing\n\nOur plans are simple.\n\nContact sales for more.",
        )
    )


@pytest.fixture
def code_artifact():
    return Artifact.first(
        CodeContent(
            index=1,
            title="math utils",
            language="python",
            code="def add(a, b):\n    return a - b\n\n\ndef mul(a, b):\n    return a * b\n",
        )
    )
