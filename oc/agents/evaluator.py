"""Evaluator — scores one round of candidates against dynamically generated metrics.

Two tool-bound model calls:
  A. `generate_metrics`: derive weighted metrics from the requirements.
     Exhausted attempts fall back to an empty metric list.
  B. `evaluate_artifact`: compare every candidate and pick the best.
     Exhausted attempts return None (no evaluation signal this round).

Neither phase raises. The best candidate's content is looked up by id in the
candidates that were actually generated, never taken from the model output.
"""

import sys

from langchain_core.runnables import RunnableConfig
from langchain_core.utils.function_calling import convert_to_openai_tool
from langgraph.store.base import BaseStore
from pydantic import BaseModel
from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_fixed

from oc.config import get_section
from oc.llm import get_chat_model
from oc.models import (
    BestCandidate,
    Candidate,
    CandidateEvaluation,
    EvaluationMetrics,
    EvaluationResult,
)
from oc.prompts import EVALUATION_METRICS_PROMPT, EVALUATION_PROMPT, EVALUATION_USER_MESSAGE
from oc.state import ConversationState
from oc.utils.formatter import format_candidates, format_metrics, format_requirements_context
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.memory import get_formatted_reflections
from oc.utils.parsing import first_tool_args
from oc.utils.validator import get_recent_human_message

METRICS_TOOL = "generate_metrics"
EVALUATION_TOOL = "evaluate_artifact"


class MissingToolCall(Exception):
    """The model answered without the forced tool call."""


class UnknownCandidate(Exception):
    """The model picked a best article that was not generated this round."""


def _tool(schema: type[BaseModel], name: str, description: str) -> dict:
    tool = convert_to_openai_tool(schema)
    tool["function"]["name"] = name
    tool["function"]["description"] = description
    return tool


def _retrying(attempts: int, delay: float, label: str) -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        before_sleep=lambda rs: print(
            f"[OC] {label} failed ({rs.outcome.exception()!r}), retrying "
            f"({attempts - rs.attempt_number} attempts remaining)...",
            file=sys.stderr,
        ),
    )


async def _tool_call(llm, messages: list, tool_name: str, schema: type[BaseModel], step: str, ctx):
    response = None
    try:
        response = await llm.ainvoke(messages)
        args = first_tool_args(response)
        if args is None:
            raise MissingToolCall(f"No '{tool_name}' tool call in response.")
        return schema.model_validate(args)
    finally:
        await log_llm_step(step, messages, response, ctx)


async def generate_metrics(
    state: ConversationState, config: RunnableConfig, iteration: int
) -> EvaluationMetrics:
    """Phase A. Returns empty metrics when every attempt fails."""
    settings = get_section("evaluation")
    ctx = get_request_context(config)
    recent_human_message = get_recent_human_message(state)

    llm = get_chat_model("generation").bind_tools(
        [_tool(EvaluationMetrics, METRICS_TOOL, "Generate evaluation metrics based on requirements")],
        tool_choice=METRICS_TOOL,
    )
    messages = [
        {
            "role": "system",
            "content": EVALUATION_METRICS_PROMPT.format(
                requirements_context=format_requirements_context(state.get("analyzed_requirements"))
            ),
        },
        recent_human_message,
    ]

    try:
        async for attempt in _retrying(
            settings.get("metrics_attempts", 4), settings.get("retry_delay_seconds", 1.0), "Metrics generation"
        ):
            with attempt:
                return await _tool_call(
                    llm, messages, METRICS_TOOL, EvaluationMetrics,
                    f"generateMetrics_iteration_{iteration}", ctx,
                )
    except RetryError as exc:
        print(
            f"[OC] Failed to generate metrics after all retries: "
            f"{exc.last_attempt.exception()!r}. Using empty metrics.",
            file=sys.stderr,
        )
    return EvaluationMetrics(metrics=[])


async def evaluate_candidates(
    candidates: list[Candidate],
    iteration: int,
    state: ConversationState,
    config: RunnableConfig,
    store: BaseStore | None = None,
) -> EvaluationResult | None:
    """Score a round of candidates. Returns None when scoring fails outright."""
    settings = get_section("evaluation")
    ctx = get_request_context(config)

    metrics = await generate_metrics(state, config, iteration)
    reflections = await get_formatted_reflections(store, config)

    llm = get_chat_model("evaluator").bind_tools(
        [_tool(CandidateEvaluation, EVALUATION_TOOL, "Compare and evaluate multiple articles")],
        tool_choice=EVALUATION_TOOL,
    )
    messages = [
        {
            "role": "system",
            "content": EVALUATION_PROMPT.format(
                requirements_context=format_requirements_context(state.get("analyzed_requirements")),
                reflections_context=reflections,
                evaluation_metrics=format_metrics(metrics),
                articles_content=format_candidates(candidates),
            ),
        },
        {"role": "user", "content": EVALUATION_USER_MESSAGE},
    ]
    contents = {candidate.id: candidate.content for candidate in candidates}

    try:
        async for attempt in _retrying(
            settings.get("scoring_attempts", 6), settings.get("retry_delay_seconds", 1.0), "Evaluation"
        ):
            with attempt:
                details = await _tool_call(
                    llm, messages, EVALUATION_TOOL, CandidateEvaluation,
                    f"evaluateArtifact_iteration_{iteration}", ctx,
                )
                if details.best_article.article_id not in contents:
                    raise UnknownCandidate(f"Unknown candidate '{details.best_article.article_id}'.")
    except RetryError as exc:
        print(
            f"[OC] Error evaluating articles after all retries: {exc.last_attempt.exception()!r}",
            file=sys.stderr,
        )
        return None

    best_id = details.best_article.article_id
    return EvaluationResult(
        best_article=BestCandidate(
            id=best_id,
            content=contents[best_id],
            score=details.best_article.total_score,
        ),
        details=details,
        metrics=metrics,
    )
