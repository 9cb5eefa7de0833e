"""Artifact Rewriter — full (re)generation of the artifact through the refinement loop.

Commits exactly one new revision. With no artifact yet, an empty markdown
placeholder stands in as the "current" content; it is never committed, so
the first generated page is revision 1.
"""

import sys

from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore

from oc.agents.refinement import build_meta_prompt, run_refinement_loop
from oc.llm import get_chat_model, get_model_name, is_thinking_model, system_role
from oc.models import ArtifactMeta, CodeContent, MarkdownContent, append_revision, next_revision_index
from oc.prompts import APP_CONTEXT, GET_TITLE_TYPE_REWRITE_ARTIFACT
from oc.state import OC_WEB_SEARCH_RESULTS_MESSAGE_KEY, ConversationState
from oc.utils.documents import context_document_messages
from oc.utils.formatter import format_artifact_content, format_requirements_context
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import get_assistant_id, get_formatted_reflections
from oc.utils.parsing import ainvoke_with_retry, as_dict, message_text
from oc.utils.thinking import split_thinking
from oc.utils.validator import current_or_placeholder, get_recent_human_message

NO_WEB_SEARCH_RESULTS = "No web search results found."


async def optionally_update_artifact_meta(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> ArtifactMeta:
    """Ask the model whether the request changes the artifact's type or title."""
    current = current_or_placeholder(state)
    recent_human_message = get_recent_human_message(state)

    system_prompt = GET_TITLE_TYPE_REWRITE_ARTIFACT.format(
        app_context=APP_CONTEXT,
        artifact=format_artifact_content(current, shorten=True),
    )
    messages = [
        {"role": system_role(get_model_name("metadata")), "content": system_prompt},
        recent_human_message,
    ]

    llm = get_chat_model("metadata").with_structured_output(ArtifactMeta)
    response = None
    try:
        response = await ainvoke_with_retry(llm, messages)
    finally:
        await log_llm_step("optionallyUpdateArtifactMeta", messages, response, get_request_context(config))
    return ArtifactMeta.model_validate(as_dict(response))


def create_new_artifact_content(
    meta: ArtifactMeta,
    current: MarkdownContent | CodeContent,
    index: int,
    new_content: str,
) -> MarkdownContent | CodeContent:
    """Build the revision to commit, in the variant the metadata call chose."""
    title = meta.title or current.title
    if meta.type == "code":
        language = meta.language
        if language == "other" and isinstance(current, CodeContent):
            language = current.language
        return CodeContent(index=index, title=title, language=language, code=new_content)
    return MarkdownContent(index=index, title=title, full_markdown=new_content)


def get_web_search_evidence(state: ConversationState) -> str:
    for message in state.get("internal_messages") or []:
        if (getattr(message, "additional_kwargs", None) or {}).get(OC_WEB_SEARCH_RESULTS_MESSAGE_KEY):
            return message_text(message)
    return NO_WEB_SEARCH_RESULTS


async def rewrite_artifact(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Rewrite node for the LangGraph StateGraph."""
    get_assistant_id(config)
    recent_human_message = get_recent_human_message(state)

    artifact = state.get("artifact")
    current = current_or_placeholder(state)
    reflections = await get_formatted_reflections(store, config)

    meta = await optionally_update_artifact_meta(state, config, store=store)
    is_new_type = meta.type != current.type
    if is_new_type:
        print(f"[OC] Artifact type changes: {current.type} -> {meta.type}", file=sys.stderr)

    outcome = await run_refinement_loop(
        state,
        config,
        store=store,
        recent_human_message=recent_human_message,
        original_content=current.body,
        reflections=reflections,
        requirements_context=format_requirements_context(state.get("analyzed_requirements")),
        web_search_results=get_web_search_evidence(state),
        update_meta_prompt=build_meta_prompt(meta) if is_new_type else "",
        context_messages=context_document_messages(config),
    )

    new_text = outcome.content
    extra_messages = []
    if is_thinking_model(get_model_name("generation")):
        thinking_message, new_text = split_thinking(new_text)
        extra_messages.append(thinking_message)

    new_content = create_new_artifact_content(meta, current, next_revision_index(artifact), new_text)
    updated = append_revision(artifact, new_content)
    print(
        f"[OC] Committed revision {new_content.index} after {outcome.rounds} round(s)",
        file=sys.stderr,
    )

    update = {"artifact": updated}
    if extra_messages:
        update["messages"] = extra_messages
        update["internal_messages"] = extra_messages
    return update
