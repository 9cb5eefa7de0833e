"""Quick theme rewrites of the current artifact, one model call each.

Markdown artifacts: language, reading level (incl. pirate), length, emojis.
Code artifacts: comments, logs, bug fixes, porting to another language.
The selected action is a tagged union; dispatch is a table keyed by `kind`.
"""

from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore

from oc.actions import (
    AddEmojis,
    ChangeLanguage,
    ChangeLength,
    ChangeReadingLevel,
    PortLanguage,
)
from oc.llm import get_chat_model, get_model_name, is_thinking_model
from oc.prompts import (
    ADD_COMMENTS_TO_CODE_ARTIFACT_PROMPT,
    ADD_EMOJIS_TO_ARTIFACT_PROMPT,
    ADD_LOGS_TO_CODE_ARTIFACT_PROMPT,
    CHANGE_ARTIFACT_LANGUAGE_PROMPT,
    CHANGE_ARTIFACT_LENGTH_PROMPT,
    CHANGE_ARTIFACT_READING_LEVEL_PROMPT,
    CHANGE_ARTIFACT_TO_PIRATE_PROMPT,
    FIX_BUGS_CODE_ARTIFACT_PROMPT,
    PORT_LANGUAGE_CODE_ARTIFACT_PROMPT,
)
from oc.state import ConversationState
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import get_assistant_id, get_formatted_reflections
from oc.utils.parsing import ainvoke_with_retry, message_text
from oc.utils.thinking import split_thinking
from oc.utils.validator import require_code_content, require_markdown_content

READING_LEVELS = {
    "child": "elementary school student",
    "teenager": "high school student",
    "college": "college student",
    "phd": "PhD student",
}

LENGTHS = {
    "shortest": "much shorter than it currently is",
    "short": "slightly shorter than it currently is",
    "long": "slightly longer than it currently is",
    "longest": "much longer than it currently is",
}


def _language_prompt(action: ChangeLanguage, artifact_content: str, reflections: str) -> str:
    return CHANGE_ARTIFACT_LANGUAGE_PROMPT.format(
        new_language=action.language, artifact_content=artifact_content, reflections=reflections
    )


def _reading_level_prompt(action: ChangeReadingLevel, artifact_content: str, reflections: str) -> str:
    if action.level == "pirate":
        return CHANGE_ARTIFACT_TO_PIRATE_PROMPT.format(
            artifact_content=artifact_content, reflections=reflections
        )
    return CHANGE_ARTIFACT_READING_LEVEL_PROMPT.format(
        new_reading_level=READING_LEVELS[action.level],
        artifact_content=artifact_content,
        reflections=reflections,
    )


def _length_prompt(action: ChangeLength, artifact_content: str, reflections: str) -> str:
    return CHANGE_ARTIFACT_LENGTH_PROMPT.format(
        new_length=LENGTHS[action.length], artifact_content=artifact_content, reflections=reflections
    )


def _emojis_prompt(action: AddEmojis, artifact_content: str, reflections: str) -> str:
    return ADD_EMOJIS_TO_ARTIFACT_PROMPT.format(artifact_content=artifact_content, reflections=reflections)


THEME_PROMPTS = {
    "language": _language_prompt,
    "reading_level": _reading_level_prompt,
    "length": _length_prompt,
    "emojis": _emojis_prompt,
}


def _code_prompt(template: str):
    def build(action, artifact_content: str) -> str:
        return template.format(artifact_content=artifact_content)
    return build


def _port_prompt(action: PortLanguage, artifact_content: str) -> str:
    return PORT_LANGUAGE_CODE_ARTIFACT_PROMPT.format(
        new_language=action.language, artifact_content=artifact_content
    )


CODE_PROMPTS = {
    "add_comments": _code_prompt(ADD_COMMENTS_TO_CODE_ARTIFACT_PROMPT),
    "add_logs": _code_prompt(ADD_LOGS_TO_CODE_ARTIFACT_PROMPT),
    "fix_bugs": _code_prompt(FIX_BUGS_CODE_ARTIFACT_PROMPT),
    "port_language": _port_prompt,
}


def _theme_label(action) -> str:
    detail = getattr(action, "language", None) or getattr(action, "level", None) or getattr(action, "length", None)
    return f"{action.kind}_{detail}" if detail else action.kind


async def _rewrite(prompt: str, step: str, config: RunnableConfig) -> tuple[str, list]:
    """Single user-turn model call. Returns (new body, extra messages)."""
    messages = [{"role": "user", "content": prompt}]
    response = None
    try:
        response = await ainvoke_with_retry(get_chat_model("generation"), messages)
    finally:
        await log_llm_step(step, messages, response, get_request_context(config))

    text = message_text(response)
    if is_thinking_model(get_model_name("generation")):
        thinking_message, text = split_thinking(text)
        return text, [thinking_message]
    return text, []


def _commit(state: ConversationState, current, text: str, extra_messages: list) -> dict:
    artifact = state["artifact"]
    update = {"artifact": artifact.with_revision(current.with_body(text, artifact.next_index))}
    if extra_messages:
        update["messages"] = extra_messages
        update["internal_messages"] = extra_messages
    return update


async def rewrite_artifact_theme(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Apply the selected markdown theme action and commit one revision."""
    get_assistant_id(config)
    current = require_markdown_content(state)
    action = state.get("artifact_action")
    if action is None:
        raise ValueError("No theme selected")

    reflections = await get_formatted_reflections(store, config)
    prompt = THEME_PROMPTS[action.kind](action, current.full_markdown, reflections)
    text, extra = await _rewrite(prompt, f"rewriteArtifactTheme_{_theme_label(action)}", config)
    return _commit(state, current, text, extra)


async def rewrite_code_artifact_theme(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Apply the selected code action and commit one revision."""
    current = require_code_content(state)
    action = state.get("code_action")
    if action is None:
        raise ValueError("No code rewrite action selected")

    prompt = CODE_PROMPTS[action.kind](action, current.code)
    text, extra = await _rewrite(prompt, f"rewriteCodeArtifactTheme_{_theme_label(action)}", config)
    return _commit(state, current, text, extra)
