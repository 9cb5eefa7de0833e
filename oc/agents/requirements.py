"""Requirements Analyzer — turns the latest user turn into a structured RequirementsRecord.

Every field of the record is always present: anything the model leaves out or
returns as null becomes "" (main_goal) or [] (the list fields).
"""

import sys

from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore

from oc.llm import get_chat_model, get_model_name, system_role
from oc.models import RequirementsRecord
from oc.prompts import CURRENT_ARTIFACT_PROMPT, REQUIREMENTS_ANALYSIS_PROMPT
from oc.state import ConversationState
from oc.utils.formatter import format_artifact_content
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import get_formatted_reflections
from oc.utils.parsing import ainvoke_with_retry, as_dict
from oc.utils.validator import get_recent_human_message


def _recent_artifact_text(state: ConversationState) -> str:
    artifact = state.get("artifact")
    if artifact is None:
        return "No artifact found"
    return CURRENT_ARTIFACT_PROMPT.format(artifact=format_artifact_content(artifact.current_content()))


async def analyze_requirements(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Requirements node for the LangGraph StateGraph.

    Reads the most recent human message, current artifact and reflections,
    makes one structured-output call and returns `analyzed_requirements`.
    Model failures propagate.
    """
    recent_human_message = get_recent_human_message(state)
    reflections = await get_formatted_reflections(store, config)

    system_prompt = REQUIREMENTS_ANALYSIS_PROMPT.format(
        reflections=reflections,
        recent_artifact=_recent_artifact_text(state),
    )
    messages = [
        {"role": system_role(get_model_name("requirements")), "content": system_prompt},
        recent_human_message,
    ]

    llm = get_chat_model("requirements").with_structured_output(RequirementsRecord)
    response = None
    try:
        response = await ainvoke_with_retry(llm, messages)
    finally:
        await log_llm_step("analyzeRequirements", messages, response, get_request_context(config))

    requirements = RequirementsRecord.model_validate(as_dict(response))
    print(f"[OC] Requirements analyzed: {requirements.main_goal!r}", file=sys.stderr)
    return {"analyzed_requirements": requirements}
