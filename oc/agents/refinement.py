"""Refinement loop — generate N candidates, score them, feed the best back in.

Each round:
  1. Build the rewrite prompt from the running best (or the original artifact).
  2. Generate `max_page_count` candidates concurrently.
  3. Score them (evaluator never raises; a missing evaluation counts as 0).
  4. Keep the running best; ties go to the newer round.
Stops at `min_acceptable_score` or after `max_iterations` rounds, then runs a
formatting-only validation pass on the best content.
"""

import asyncio
import sys
from dataclasses import dataclass

from langchain_core.runnables import RunnableConfig
from langgraph.store.base import BaseStore

from oc.agents.evaluator import evaluate_candidates
from oc.config import get_section
from oc.llm import get_chat_model, get_model_name, system_role
from oc.models import ArtifactMeta, Candidate, EvaluationResult, WebDSL
from oc.prompts import OPTIONALLY_UPDATE_META_PROMPT, UPDATE_ENTIRE_ARTIFACT_PROMPT, VALIDATION_HTML_PROMPT
from oc.state import ConversationState
from oc.utils.audit import new_run_dirname, save_artifact_set, save_best_artifact
from oc.utils.documents import with_custom_system_prompt
from oc.utils.formatter import NO_EVALUATION, format_evaluation_feedback, format_web_dsl
from oc.utils.guidance import load_implementation_rules
from oc.utils.llm_logger import RequestContext, get_request_context, log_llm_step
from oc.utils.parsing import accumulate_text, ainvoke_with_retry, message_text


@dataclass
class RefinementOutcome:
    content: str  # Validated best content ("" for a degenerate run).
    evaluation: EvaluationResult | None
    rounds: int


def build_meta_prompt(meta: ArtifactMeta | None) -> str:
    """Describe a pre-determined artifact type (and title) change."""
    title = ""
    if meta is not None and meta.title and meta.type == "text":
        title = f"And its title is (do NOT include this in your response):\n{meta.title}"
    return OPTIONALLY_UPDATE_META_PROMPT.format(
        artifact_type=meta.type if meta is not None else "text",
        artifact_title=title,
    )


def build_rewrite_prompt(
    artifact_content: str,
    reflections: str,
    requirements_context: str,
    web_search_results: str,
    evaluation_feedback: str | None = None,
    web_dsl: WebDSL | None = None,
    update_meta_prompt: str = "",
) -> str:
    return UPDATE_ENTIRE_ARTIFACT_PROMPT.format(
        artifact_content=artifact_content,
        reflections=reflections,
        update_meta_prompt=update_meta_prompt,
        web_search_results=web_search_results,
        requirements_analysis=requirements_context,
        evaluation_results=evaluation_feedback or NO_EVALUATION,
        web_dsl=format_web_dsl(web_dsl),
        implementation_rules=load_implementation_rules(),
    )


async def generate_candidates(
    llm, messages: list, iteration: int, ctx: RequestContext, count: int | None = None
) -> list[Candidate]:
    """Stream `count` independent completions of the same messages.

    All streams run to completion; if any failed, the first failure is
    re-raised afterwards and the whole round is discarded.
    """
    if count is None:
        count = get_section("refinement").get("max_page_count", 3)

    async def _one(number: int) -> Candidate:
        text = ""
        try:
            text = await accumulate_text(llm.astream(messages))
        finally:
            await log_llm_step(
                f"generateArticleContents_iteration_{iteration}_article_{number}", messages, text, ctx
            )
        return Candidate(id=f"article_{number}", content=text)

    results = await asyncio.gather(*(_one(n) for n in range(1, count + 1)), return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


async def validate_and_fix(content: str, ctx: RequestContext) -> str:
    """Formatting-only pass on the final content.

    Empty content short-circuits to "". A failed call returns the content
    unvalidated rather than losing the round's work.
    """
    if not content:
        return ""

    messages = [
        {"role": "system", "content": VALIDATION_HTML_PROMPT},
        {"role": "user", "content": content},
    ]
    response = None
    try:
        response = await ainvoke_with_retry(get_chat_model("small"), messages)
    except Exception as exc:
        print(f"[OC] Validation pass failed, keeping unvalidated content: {exc!r}", file=sys.stderr)
        return content
    finally:
        await log_llm_step("validateAndFixHtml", messages, response, ctx)

    return message_text(response) or content


async def run_refinement_loop(
    state: ConversationState,
    config: RunnableConfig,
    *,
    store: BaseStore | None,
    recent_human_message,
    original_content: str,
    reflections: str,
    requirements_context: str,
    web_search_results: str,
    update_meta_prompt: str = "",
    context_messages: list | None = None,
) -> RefinementOutcome:
    settings = get_section("refinement")
    max_iterations = settings.get("max_iterations", 5)
    min_score = settings.get("min_acceptable_score", 90)

    ctx = get_request_context(config)
    run_dirname = new_run_dirname()
    user_prompt = message_text(recent_human_message)
    llm = get_chat_model("generation")
    role = system_role(get_model_name("generation"))

    best: EvaluationResult | None = None
    rounds = 0
    for iteration in range(1, max_iterations + 1):
        rounds = iteration
        system_prompt = with_custom_system_prompt(
            config,
            build_rewrite_prompt(
                artifact_content=best.best_article.content if best else original_content,
                reflections=reflections,
                requirements_context=requirements_context,
                web_search_results=web_search_results,
                evaluation_feedback=format_evaluation_feedback(best),
                web_dsl=state.get("web_dsl") if iteration == 1 else None,
                update_meta_prompt=update_meta_prompt,
            ),
        )
        messages = [
            {"role": role, "content": system_prompt},
            *(context_messages or []),
            recent_human_message,
        ]

        candidates: list[Candidate] = []
        result = None
        try:
            candidates = await generate_candidates(llm, messages, iteration, ctx)
        except Exception as exc:
            print(f"[OC] Round {iteration}: candidate generation failed: {exc!r}", file=sys.stderr)
        else:
            result = await evaluate_candidates(candidates, iteration, state, config, store)

        await save_artifact_set(
            run_dirname,
            iteration,
            candidates,
            result,
            user_prompt,
            system_prompt,
            original_content,
            state.get("web_dsl"),
        )

        if result is not None and result.score >= (best.score if best else 0):
            best = result

        print(
            f"[OC] Round {iteration}/{max_iterations}: "
            f"round score {result.score if result else 0}, best {best.score if best else 0}",
            file=sys.stderr,
        )
        if best is not None and best.score >= min_score:
            break

    await save_best_artifact(run_dirname, best, rounds, user_prompt)

    content = await validate_and_fix(best.best_article.content if best else "", ctx)
    return RefinementOutcome(content=content, evaluation=best, rounds=rounds)
