"""Web DSL Synthesizer — derives a declarative UI blueprint from the requirements.

The DSL is a steering hint, not a hard dependency: any failure here leaves
the state untouched and generation proceeds without it.
"""

import sys

from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore
from pydantic import ValidationError

from oc.llm import get_chat_model, get_model_name, system_role
from oc.models import WebDSL
from oc.prompts import WEB_DSL_PROMPT
from oc.state import ConversationState
from oc.utils.documents import with_custom_system_prompt
from oc.utils.dsl_checks import check_dsl_structure
from oc.utils.formatter import format_requirements_context
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import get_formatted_reflections
from oc.utils.parsing import as_dict, last_chunk
from oc.utils.validator import current_or_placeholder, get_recent_human_message


async def generate_web_dsl(
    state: ConversationState, config: RunnableConfig, *, store: BaseStore | None = None
) -> dict:
    """Web DSL node for the LangGraph StateGraph.

    Streams a structured WebDSL and keeps the final (complete) snapshot.
    Returns {} on any stream, empty-stream or schema failure.
    """
    recent_human_message = get_recent_human_message(state)
    reflections = await get_formatted_reflections(store, config)

    system_prompt = with_custom_system_prompt(
        config,
        WEB_DSL_PROMPT.format(
            requirements=format_requirements_context(state.get("analyzed_requirements")),
            artifact_content=current_or_placeholder(state).body,
            reflections=reflections,
        ),
    )
    messages = [
        {"role": system_role(get_model_name("generation")), "content": system_prompt},
        recent_human_message,
    ]

    llm = get_chat_model("generation").with_structured_output(WebDSL)
    final = None
    try:
        final = await last_chunk(llm.astream(messages))
        if final is None:
            print("[OC] Web DSL stream produced no output; continuing without DSL.", file=sys.stderr)
            return {}
        web_dsl = WebDSL.model_validate(as_dict(final))
    except (ValidationError, TypeError) as exc:
        print(f"[OC] Web DSL failed validation: {exc}", file=sys.stderr)
        return {}
    except Exception as exc:
        print(f"[OC] Error generating Web DSL: {exc!r}", file=sys.stderr)
        return {}
    finally:
        await log_llm_step("generateWebDSL", messages, final, get_request_context(config))

    issues = check_dsl_structure(web_dsl)
    for issue in issues:
        print(f"[OC] Web DSL warning: {issue}", file=sys.stderr)

    print(
        f"[OC] Web DSL: {len(web_dsl.elements)} elements, {len(web_dsl.states)} states, "
        f"{len(web_dsl.flows)} flows",
        file=sys.stderr,
    )
    return {"web_dsl": web_dsl}
