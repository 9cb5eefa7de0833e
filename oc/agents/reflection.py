"""Reflection — learns durable style rules and user facts from the conversation.

Runs after every artifact-producing turn. The model returns the complete new
lists; they are merged with the user's custom reflections and written to
("memories", <assistant_id>) / "reflection". Failures never fail the turn.
"""

import sys

from langchain_core.runnables import RunnableConfig
from langchain_core.utils.function_calling import convert_to_openai_tool
from langgraph.store.base import BaseStore
from pydantic import ValidationError

from oc.llm import get_chat_model
from oc.models import Reflections
from oc.prompts import REFLECT_SYSTEM_PROMPT, REFLECT_USER_PROMPT
from oc.state import ConversationState
from oc.utils.formatter import format_messages, format_reflections
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import (
    CUSTOM_REFLECTION_KEY,
    REFLECTION_KEY,
    get_assistant_id,
    get_reflections,
    merge_reflections,
    put_reflections,
)
from oc.utils.parsing import first_tool_args

REFLECTION_TOOL = "generate_reflections"


def _reflection_tool() -> dict:
    tool = convert_to_openai_tool(Reflections)
    tool["function"]["name"] = REFLECTION_TOOL
    tool["function"]["description"] = "Generate reflections based on the context provided."
    return tool


async def _generate_reflections(state: ConversationState, config: RunnableConfig, stored: Reflections | None) -> Reflections:
    artifact = state.get("artifact")
    messages = [
        {
            "role": "system",
            "content": REFLECT_SYSTEM_PROMPT.format(
                artifact=artifact.current_content().body if artifact else "No artifact found.",
                reflections=format_reflections(stored),
            ),
        },
        {
            "role": "user",
            "content": REFLECT_USER_PROMPT.format(conversation=format_messages(state.get("messages") or [])),
        },
    ]
    llm = get_chat_model("reflection").bind_tools([_reflection_tool()], tool_choice=REFLECTION_TOOL)

    response = None
    try:
        response = await llm.ainvoke(messages)
    finally:
        await log_llm_step("reflect", messages, response, get_request_context(config))

    args = first_tool_args(response)
    if args is None:
        raise ValueError("Reflection tool call failed.")
    return Reflections.model_validate(args)


async def reflect(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Reflection node for the LangGraph StateGraph. Never changes graph state."""
    if store is None:
        print("[OC] No store configured; skipping reflection.", file=sys.stderr)
        return {}
    assistant_id = get_assistant_id(config)

    try:
        stored = await get_reflections(store, assistant_id, REFLECTION_KEY)
        generated = await _generate_reflections(state, config, stored)
        custom = await get_reflections(store, assistant_id, CUSTOM_REFLECTION_KEY)
        merged = merge_reflections(custom, generated)
        await put_reflections(store, assistant_id, merged)
    except (ValidationError, ValueError) as exc:
        print(f"[OC] Failed to parse reflections: {exc}", file=sys.stderr)
        return {}
    except Exception as exc:
        print(f"[OC] Reflection failed: {exc!r}", file=sys.stderr)
        return {}

    print(
        f"[OC] Reflections updated: {len(merged.style_rules)} style rules, {len(merged.content)} facts",
        file=sys.stderr,
    )
    return {}
