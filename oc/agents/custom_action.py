"""Custom quick actions — user-defined rewrite prompts stored per user."""

from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore

from oc.llm import get_chat_model
from oc.prompts import (
    APP_CONTEXT,
    CUSTOM_QUICK_ACTION_ARTIFACT_CONTENT_PROMPT,
    CUSTOM_QUICK_ACTION_ARTIFACT_PROMPT_PREFIX,
    CUSTOM_QUICK_ACTION_CONVERSATION_CONTEXT,
    REFLECTIONS_QUICK_ACTION_PROMPT,
)
from oc.state import ConversationState
from oc.utils.formatter import format_messages
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import get_custom_action, get_formatted_reflections, get_user_id
from oc.utils.parsing import ainvoke_with_retry, message_text
from oc.utils.validator import require_artifact_content

RECENT_HISTORY_MESSAGES = 5


async def custom_action(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Run the stored quick action named by `custom_quick_action_id`."""
    action_id = state.get("custom_quick_action_id")
    if not action_id:
        raise ValueError("No custom quick action ID found.")
    user_id = get_user_id(config)
    current = require_artifact_content(state)
    action = await get_custom_action(store, user_id, action_id)

    parts = []
    if action.include_prefix:
        parts.append(CUSTOM_QUICK_ACTION_ARTIFACT_PROMPT_PREFIX.format(app_context=APP_CONTEXT))
    parts.append(f"<custom-instructions>\n{action.prompt}\n</custom-instructions>")
    if action.include_reflections:
        reflections = await get_formatted_reflections(store, config)
        parts.append(REFLECTIONS_QUICK_ACTION_PROMPT.format(reflections=reflections))
    if action.include_recent_history:
        recent = (state.get("messages") or [])[-RECENT_HISTORY_MESSAGES:]
        parts.append(CUSTOM_QUICK_ACTION_CONVERSATION_CONTEXT.format(conversation=format_messages(recent)))
    parts.append(CUSTOM_QUICK_ACTION_ARTIFACT_CONTENT_PROMPT.format(artifact_content=current.body))

    messages = [{"role": "user", "content": "\n\n".join(parts)}]
    response = None
    try:
        response = await ainvoke_with_retry(get_chat_model("generation"), messages)
    finally:
        await log_llm_step(f"customAction_{action_id}", messages, response, get_request_context(config))

    artifact = state["artifact"]
    new_content = current.with_body(message_text(response), artifact.next_index)
    return {"artifact": artifact.with_revision(new_content)}
