"""Web search nodes: classify the message, write a query, call the search API.

Search uses the Tavily HTTP API. Any HTTP or network failure yields no
results; the artifact is then generated without web evidence.
"""

import os
import sys
from datetime import datetime

import httpx
from langchain_core.runnables import RunnableConfig
from pydantic import BaseModel, Field

from oc.config import get_section
from oc.llm import get_chat_model
from oc.models import SearchResult
from oc.prompts import CLASSIFY_MESSAGE_PROMPT, QUERY_GENERATOR_PROMPT
from oc.utils.formatter import format_messages
from oc.utils.llm_logger import get_request_context, log_llm_step
from oc.utils.parsing import ainvoke_with_retry, as_dict, message_text
from oc.web_search.state import WebSearchState

TAVILY_ENDPOINT = "https://api.tavily.com/search"


class SearchDecision(BaseModel):
    """Whether or not to search the web based on the user's latest message."""

    should_search: bool = Field(description="Whether or not to search the web.")


async def classify_message(state: WebSearchState, config: RunnableConfig) -> dict:
    messages = state.get("messages") or []
    latest = message_text(messages[-1]) if messages else ""
    prompt = [{"role": "user", "content": CLASSIFY_MESSAGE_PROMPT.format(message=latest)}]

    llm = get_chat_model("small").with_structured_output(SearchDecision)
    response = None
    try:
        response = await ainvoke_with_retry(llm, prompt)
    finally:
        await log_llm_step("webSearchClassifyMessage", prompt, response, get_request_context(config))

    decision = SearchDecision.model_validate(as_dict(response))
    print(f"[OC] Web search needed: {decision.should_search}", file=sys.stderr)
    return {"should_search": decision.should_search}


async def query_generator(state: WebSearchState, config: RunnableConfig) -> dict:
    additional_context = f"The current date is {datetime.now().strftime('%b %d, %Y, %I:%M %p')}"
    prompt = [
        {
            "role": "user",
            "content": QUERY_GENERATOR_PROMPT.format(
                conversation=format_messages(state.get("messages") or []),
                additional_context=additional_context,
            ),
        }
    ]

    response = None
    try:
        response = await ainvoke_with_retry(get_chat_model("small"), prompt)
    finally:
        await log_llm_step("webSearchQueryGenerator", prompt, response, get_request_context(config))

    return {"query": message_text(response).strip()}


async def tavily_search(query: str) -> list[SearchResult]:
    """POST the query to Tavily. Returns [] without an API key or on failure."""
    api_key = os.getenv("TAVILY_API_KEY")
    if not api_key:
        print("[OC] TAVILY_API_KEY not set; skipping web search.", file=sys.stderr)
        return []

    settings = get_section("web_search")
    payload = {
        "api_key": api_key,
        "query": query,
        "max_results": settings.get("num_results", 5),
        "search_depth": "basic",
    }
    try:
        async with httpx.AsyncClient(timeout=settings.get("timeout_seconds", 15)) as client:
            resp = await client.post(settings.get("endpoint", TAVILY_ENDPOINT), json=payload)
            resp.raise_for_status()
            data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        print(f"[OC] Web search request failed: {exc!r}", file=sys.stderr)
        return []

    items = data.get("results") if isinstance(data, dict) else None
    results = []
    for item in items or []:
        if not isinstance(item, dict) or not item.get("content"):
            continue
        results.append(
            SearchResult(
                title=item.get("title") or "",
                url=item.get("url") or "",
                content=item["content"],
                score=item.get("score"),
                published_date=item.get("published_date"),
            )
        )
    return results


async def search(state: WebSearchState, config: RunnableConfig) -> dict:
    query = state.get("query") or ""
    if not query:
        return {"web_search_results": []}

    results = await tavily_search(query)
    await log_llm_step(
        "webSearch",
        [{"role": "user", "content": query}],
        [r.model_dump() for r in results],
        get_request_context(config),
    )
    print(f"[OC] Web search returned {len(results)} result(s)", file=sys.stderr)
    return {"web_search_results": results}
