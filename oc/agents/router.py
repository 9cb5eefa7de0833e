"""Router — decides which action node handles the current turn.

Explicit client selections (highlights, quick actions, web search) win in a
fixed priority order. Only a plain chat message reaches the model, and a
generation choice always starts with requirements analysis.
"""

import sys
from typing import Literal

from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore
from pydantic import BaseModel, Field

from oc.llm import get_chat_model, get_model_name, system_role
from oc.prompts import APP_CONTEXT, CURRENT_ARTIFACT_PROMPT, NO_ARTIFACT_PROMPT, ROUTE_QUERY_PROMPT
from oc.state import ConversationState
from oc.utils.formatter import format_artifact_content, format_messages
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.parsing import ainvoke_with_retry, as_dict
from oc.utils.validator import get_recent_human_message

ACTION_NODES = {
    "analyzeRequirements",
    "updateArtifact",
    "rewriteArtifactTheme",
    "rewriteCodeArtifactTheme",
    "replyToGeneralInput",
    "rewriteArtifact",
    "customAction",
    "updateHighlightedText",
    "webSearch",
}

RECENT_MESSAGES = 3

# (state key, node) in priority order; the first truthy key wins.
_FLAG_ROUTES = [
    ("highlighted_code", "updateArtifact"),
    ("highlighted_text", "updateHighlightedText"),
    ("artifact_action", "rewriteArtifactTheme"),
    ("code_action", "rewriteCodeArtifactTheme"),
    ("custom_quick_action_id", "customAction"),
    ("web_search_enabled", "webSearch"),
]


class RouteDecision(BaseModel):
    """The route to take based on the user's most recent message."""

    route: Literal["replyToGeneralInput", "rewriteArtifact"] = Field(
        description="The route to take based on the user's query."
    )


def route_from_flags(state: ConversationState) -> str | None:
    """Deterministic part of routing. None means the model must decide."""
    for key, node in _FLAG_ROUTES:
        if state.get(key):
            return node
    if state.get("analyzed_requirements") is not None:
        return "rewriteArtifact"
    return None


async def _dynamic_route(state: ConversationState, config: RunnableConfig) -> str:
    recent_human_message = get_recent_human_message(state)
    artifact = state.get("artifact")
    current_artifact_prompt = (
        CURRENT_ARTIFACT_PROMPT.format(artifact=format_artifact_content(artifact.current_content(), shorten=True))
        if artifact
        else NO_ARTIFACT_PROMPT
    )
    prompt = ROUTE_QUERY_PROMPT.format(
        app_context=APP_CONTEXT,
        recent_messages=format_messages((state.get("internal_messages") or [])[-RECENT_MESSAGES:]),
        current_artifact_prompt=current_artifact_prompt,
    )
    messages = [
        {"role": system_role(get_model_name("small")), "content": prompt},
        recent_human_message,
    ]

    llm = get_chat_model("small").with_structured_output(RouteDecision)
    response = None
    try:
        response = await ainvoke_with_retry(llm, messages)
    finally:
        await log_llm_step("generatePath", messages, response, get_request_context(config))

    decision = RouteDecision.model_validate(as_dict(response))
    return decision.route


async def generate_path(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Routing node for the LangGraph StateGraph. Sets `next`."""
    route = route_from_flags(state)
    if route is None:
        route = await _dynamic_route(state, config)
        if route == "rewriteArtifact":
            route = "analyzeRequirements"
    print(f"[OC] Route: {route}", file=sys.stderr)
    return {"next": route}


def route_node(state: ConversationState) -> str:
    """Conditional edge after generatePath. Fatal when `next` is unset."""
    next_node = state.get("next")
    if not next_node:
        raise ValueError("'next' state field not set.")
    if next_node not in ACTION_NODES:
        raise ValueError(f"Unknown route '{next_node}'. Must be one of: {sorted(ACTION_NODES)}")
    return next_node
