"""Conversation nodes around the artifact: replies, followups, titles, summaries.

Title generation and summarization are housekeeping: a failure is logged
and the turn still completes.
"""

import sys
import uuid

from langchain_core.messages import HumanMessage, RemoveMessage
from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore

from oc.llm import get_chat_model, get_model_name, system_role
from oc.prompts import (
    APP_CONTEXT,
    CURRENT_ARTIFACT_PROMPT,
    FOLLOWUP_ARTIFACT_PROMPT,
    NO_ARTIFACT_PROMPT,
    REPLY_TO_GENERAL_INPUT_PROMPT,
    SUMMARIZED_MESSAGE_PREFIX,
    SUMMARIZER_PROMPT,
    TITLE_SYSTEM_PROMPT,
    TITLE_USER_PROMPT,
)
from oc.state import OC_SUMMARIZED_MESSAGE_KEY, ConversationState
from oc.utils.documents import context_document_messages
from oc.utils.formatter import format_artifact_content, format_messages
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import get_formatted_reflections
from oc.utils.parsing import ainvoke_with_retry, message_text

FOLLOWUP_MAX_TOKENS = 250


def _current_artifact_prompt(state: ConversationState, shorten: bool = False) -> str:
    artifact = state.get("artifact")
    if artifact is None:
        return NO_ARTIFACT_PROMPT
    return CURRENT_ARTIFACT_PROMPT.format(
        artifact=format_artifact_content(artifact.current_content(), shorten=shorten)
    )


async def reply_to_general_input(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Answer the user without touching the artifact."""
    system_prompt = REPLY_TO_GENERAL_INPUT_PROMPT.format(
        app_context=APP_CONTEXT,
        current_artifact_prompt=_current_artifact_prompt(state),
        reflections=await get_formatted_reflections(store, config),
    )
    messages = [
        {"role": system_role(get_model_name("default")), "content": system_prompt},
        *context_document_messages(config),
        *(state.get("internal_messages") or []),
    ]

    response = None
    try:
        response = await ainvoke_with_retry(get_chat_model("default"), messages)
    finally:
        await log_llm_step("replyToGeneralInput", messages, response, get_request_context(config))
    return {"messages": [response], "internal_messages": [response]}


async def generate_followup(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Short message telling the user the artifact is ready."""
    artifact = state.get("artifact")
    artifact_content = (
        format_artifact_content(artifact.current_content(), shorten=True) if artifact else "No artifact found."
    )
    prompt = FOLLOWUP_ARTIFACT_PROMPT.format(
        artifact_content=artifact_content,
        reflections=await get_formatted_reflections(store, config, only_content=True),
        conversation=format_messages(state.get("internal_messages") or []),
    )
    messages = [{"role": "user", "content": prompt}]

    llm = get_chat_model("small", max_tokens=FOLLOWUP_MAX_TOKENS)
    response = None
    try:
        response = await ainvoke_with_retry(llm, messages)
    finally:
        await log_llm_step("generateFollowup", messages, response, get_request_context(config))
    return {"messages": [response], "internal_messages": [response]}


async def generate_title(state: ConversationState, config: RunnableConfig) -> dict:
    """Name the thread after its first exchange. Best effort."""
    messages = [
        {"role": "system", "content": TITLE_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": TITLE_USER_PROMPT.format(
                conversation=format_messages(state.get("messages") or []),
                artifact_context=_current_artifact_prompt(state, shorten=True),
            ),
        },
    ]
    response = None
    try:
        response = await ainvoke_with_retry(get_chat_model("small"), messages)
    except Exception as exc:
        print(f"[OC] Title generation failed: {exc!r}", file=sys.stderr)
        return {}
    finally:
        await log_llm_step("generateTitle", messages, response, get_request_context(config))

    title = message_text(response).strip().strip('"')
    if not title:
        return {}
    print(f"[OC] Thread title: {title}", file=sys.stderr)
    return {"thread_title": title}


async def summarizer(state: ConversationState, config: RunnableConfig) -> dict:
    """Replace the internal history with one summary message. Best effort."""
    history = state.get("internal_messages") or []
    messages = [
        {"role": "system", "content": SUMMARIZER_PROMPT},
        {"role": "user", "content": format_messages(history)},
    ]
    response = None
    try:
        response = await ainvoke_with_retry(get_chat_model("small"), messages)
    except Exception as exc:
        print(f"[OC] Summarization failed, keeping full history: {exc!r}", file=sys.stderr)
        return {}
    finally:
        await log_llm_step("summarizer", messages, response, get_request_context(config))

    summary = HumanMessage(
        id=str(uuid.uuid4()),
        content=SUMMARIZED_MESSAGE_PREFIX.format(summary=message_text(response)),
        additional_kwargs={OC_SUMMARIZED_MESSAGE_KEY: True},
    )
    removals = [RemoveMessage(id=m.id) for m in history if m.id]
    print(f"[OC] Summarized {len(history)} internal messages", file=sys.stderr)
    return {"internal_messages": removals + [summary]}
