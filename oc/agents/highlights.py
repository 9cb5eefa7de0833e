"""Targeted edits of a highlighted region of the current artifact.

- update_highlighted_text: a text selection inside a markdown block.
- update_artifact: a character range of a code artifact, shown to the model
  with 500 characters of context on either side.
Both commit one new revision of the same variant.
"""

import sys

from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore

from oc.llm import get_chat_model, get_model_name, system_role
from oc.prompts import UPDATE_HIGHLIGHTED_ARTIFACT_PROMPT, UPDATE_HIGHLIGHTED_TEXT_PROMPT
from oc.state import ConversationState
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import get_formatted_reflections
from oc.utils.parsing import ainvoke_with_retry, message_text
from oc.utils.validator import get_recent_human_message, require_code_content, require_markdown_content

CONTEXT_CHARS = 500


async def _call(role: str, system_prompt: str, recent_human_message, step: str, config: RunnableConfig) -> str:
    messages = [
        {"role": system_role(get_model_name(role)), "content": system_prompt},
        recent_human_message,
    ]
    response = None
    try:
        response = await ainvoke_with_retry(get_chat_model(role), messages)
    finally:
        await log_llm_step(step, messages, response, get_request_context(config))
    return message_text(response)


async def update_highlighted_text(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Rewrite the selected text and splice the new block into the markdown."""
    current = require_markdown_content(state)
    highlight = state.get("highlighted_text")
    if highlight is None:
        raise ValueError("No highlighted text found")
    recent_human_message = get_recent_human_message(state)

    system_prompt = UPDATE_HIGHLIGHTED_TEXT_PROMPT.format(
        highlighted_text=highlight.selected_text,
        markdown_block=highlight.markdown_block,
        reflections=await get_formatted_reflections(store, config),
    )
    new_block = await _call("generation", system_prompt, recent_human_message, "updateHighlightedText", config)

    full_markdown = current.full_markdown
    if highlight.markdown_block not in full_markdown:
        print("[OC] Highlighted block not found in current revision; editing the client copy.", file=sys.stderr)
        full_markdown = highlight.full_markdown
    new_markdown = full_markdown.replace(highlight.markdown_block, new_block, 1)

    artifact = state["artifact"]
    return {"artifact": artifact.with_revision(current.with_body(new_markdown, artifact.next_index))}


async def update_artifact(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Rewrite the highlighted slice of a code artifact."""
    current = require_code_content(state)
    highlight = state.get("highlighted_code")
    if highlight is None:
        raise ValueError("No highlighted code found")
    recent_human_message = get_recent_human_message(state)

    code = current.code
    start, end = highlight.start_char_index, highlight.end_char_index
    if start > end or end > len(code):
        raise ValueError(f"Highlight [{start}, {end}) is outside the artifact ({len(code)} chars).")

    system_prompt = UPDATE_HIGHLIGHTED_ARTIFACT_PROMPT.format(
        before_highlight=code[max(0, start - CONTEXT_CHARS):start],
        highlighted_text=code[start:end],
        after_highlight=code[end:end + CONTEXT_CHARS],
        reflections=await get_formatted_reflections(store, config),
    )
    replacement = await _call("generation", system_prompt, recent_human_message, "updateArtifact", config)

    new_code = code[:start] + replacement + code[end:]
    artifact = state["artifact"]
    return {"artifact": artifact.with_revision(current.with_body(new_code, artifact.next_index))}
