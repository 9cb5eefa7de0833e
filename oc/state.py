"""Conversation state — single source of truth passed through the graph."""

from typing import Annotated, TypedDict

from langchain_core.messages import AnyMessage
from langgraph.graph.message import add_messages

from oc.actions import ArtifactAction, CodeAction
from oc.models import (
    Artifact,
    CodeHighlight,
    RequirementsRecord,
    SearchResult,
    TextHighlight,
    WebDSL,
)

# additional_kwargs markers on synthetic messages
OC_WEB_SEARCH_RESULTS_MESSAGE_KEY = "__oc_web_search_results_message"
OC_SUMMARIZED_MESSAGE_KEY = "__oc_summarized_message"


class ConversationState(TypedDict, total=False):
    messages: Annotated[list[AnyMessage], add_messages]  # What the user sees.
    internal_messages: Annotated[list[AnyMessage], add_messages]  # Full LLM context.
    artifact: Artifact | None
    analyzed_requirements: RequirementsRecord | None  # One generation cycle only.
    web_dsl: WebDSL | None  # One generation cycle only.
    web_search_results: list[SearchResult] | None
    web_search_enabled: bool
    next: str | None  # Action node selected by generatePath.
    highlighted_code: CodeHighlight | None
    highlighted_text: TextHighlight | None
    artifact_action: ArtifactAction | None
    code_action: CodeAction | None
    custom_quick_action_id: str | None
    thread_title: str | None


# Transient per-request keys, reset by cleanState at the end of every turn.
DEFAULT_INPUTS: dict = {
    "next": None,
    "highlighted_code": None,
    "highlighted_text": None,
    "artifact_action": None,
    "code_action": None,
    "custom_quick_action_id": None,
    "analyzed_requirements": None,
    "web_dsl": None,
    "web_search_results": None,
    "web_search_enabled": False,
}
