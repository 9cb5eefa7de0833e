"""LangGraph StateGraph definition for the open canvas conversation.

    START -> generatePath -> {action}
    analyzeRequirements -> generateWebDSL -> generatePath
    artifact actions -> generateFollowup -> reflect -> cleanState
    replyToGeneralInput -> cleanState
    webSearch -> routePostWebSearch -> rewriteArtifact
    cleanState -> generateTitle | summarizer | END
"""

import sys
import uuid
from typing import Literal

from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph
from langgraph.store.base import BaseStore
from langgraph.types import Command

from oc.agents.conversation import generate_followup, generate_title, reply_to_general_input, summarizer
from oc.agents.custom_action import custom_action
from oc.agents.highlights import update_artifact, update_highlighted_text
from oc.agents.reflection import reflect
from oc.agents.requirements import analyze_requirements
from oc.agents.rewriter import rewrite_artifact
from oc.agents.router import ACTION_NODES, generate_path, route_node
from oc.agents.themes import rewrite_artifact_theme, rewrite_code_artifact_theme
from oc.agents.web_dsl import generate_web_dsl
from oc.config import get_config
from oc.state import DEFAULT_INPUTS, OC_WEB_SEARCH_RESULTS_MESSAGE_KEY, ConversationState
from oc.utils.formatter import format_search_results
from oc.utils.parsing import message_text
from oc.web_search.graph import graph as web_search_graph

# Nodes that commit a new artifact revision.
ARTIFACT_NODES = [
    "updateArtifact",
    "updateHighlightedText",
    "rewriteArtifact",
    "rewriteArtifactTheme",
    "rewriteCodeArtifactTheme",
    "customAction",
]


async def web_search(state: ConversationState, config: RunnableConfig) -> dict:
    """Run the web search subgraph over the internal history."""
    result = await web_search_graph.ainvoke({"messages": state.get("internal_messages") or []}, config)
    return {"web_search_results": result.get("web_search_results") or []}


def route_post_web_search(state: ConversationState) -> Command[Literal["rewriteArtifact"]]:
    """Attach search evidence (if any) and continue to the rewrite.

    Web search is disabled again in every case so the next generatePath
    pass does not loop back here.
    """
    results = state.get("web_search_results") or []
    if not results:
        return Command(goto="rewriteArtifact", update={"web_search_enabled": False})

    evidence = AIMessage(
        id=f"web-search-results-{uuid.uuid4()}",
        content=format_search_results(results),
        additional_kwargs={
            OC_WEB_SEARCH_RESULTS_MESSAGE_KEY: True,
            "web_search_results": [r.model_dump() for r in results],
            "web_search_status": "done",
        },
    )
    return Command(
        goto="rewriteArtifact",
        update={
            "web_search_enabled": False,
            "messages": [evidence],
            "internal_messages": [evidence],
        },
    )


def clean_state(state: ConversationState) -> dict:
    """Reset the per-request keys at the end of a turn."""
    return dict(DEFAULT_INPUTS)


def character_count(state: ConversationState) -> str:
    total = sum(len(message_text(m)) for m in state.get("internal_messages") or [])
    if total > get_config().get("character_max", 300_000):
        print(f"[OC] Internal history at {total} chars; summarizing.", file=sys.stderr)
        return "summarizer"
    return END


def conditionally_generate_title(state: ConversationState) -> str:
    """Title the thread after its first exchange, otherwise check history size."""
    if len(state.get("messages") or []) == 2:
        return "generateTitle"
    return character_count(state)


def build_graph(store: BaseStore | None = None, checkpointer=None):
    workflow = StateGraph(ConversationState)

    workflow.add_node("generatePath", generate_path)
    workflow.add_node("analyzeRequirements", analyze_requirements)
    workflow.add_node("generateWebDSL", generate_web_dsl)
    workflow.add_node("replyToGeneralInput", reply_to_general_input)
    workflow.add_node("rewriteArtifact", rewrite_artifact)
    workflow.add_node("rewriteArtifactTheme", rewrite_artifact_theme)
    workflow.add_node("rewriteCodeArtifactTheme", rewrite_code_artifact_theme)
    workflow.add_node("updateArtifact", update_artifact)
    workflow.add_node("updateHighlightedText", update_highlighted_text)
    workflow.add_node("customAction", custom_action)
    workflow.add_node("webSearch", web_search)
    workflow.add_node("routePostWebSearch", route_post_web_search)
    workflow.add_node("generateFollowup", generate_followup)
    workflow.add_node("reflect", reflect)
    workflow.add_node("cleanState", clean_state)
    workflow.add_node("generateTitle", generate_title)
    workflow.add_node("summarizer", summarizer)

    workflow.add_edge(START, "generatePath")
    workflow.add_conditional_edges("generatePath", route_node, sorted(ACTION_NODES))

    workflow.add_edge("analyzeRequirements", "generateWebDSL")
    workflow.add_edge("generateWebDSL", "generatePath")

    for node in ARTIFACT_NODES:
        workflow.add_edge(node, "generateFollowup")
    workflow.add_edge("generateFollowup", "reflect")
    workflow.add_edge("reflect", "cleanState")
    workflow.add_edge("replyToGeneralInput", "cleanState")

    workflow.add_edge("webSearch", "routePostWebSearch")

    workflow.add_conditional_edges(
        "cleanState",
        conditionally_generate_title,
        ["generateTitle", "summarizer", END],
    )
    workflow.add_edge("generateTitle", END)
    workflow.add_edge("summarizer", END)

    return workflow.compile(store=store, checkpointer=checkpointer, name="open_canvas")


graph = build_graph()
