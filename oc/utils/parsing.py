"""Shared parsing and LLM utilities for model responses."""

import re
import sys
from typing import Any, AsyncIterable

import httpx
from pydantic import BaseModel
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

_HTML_FENCE_RE = re.compile(r"```html\n|```")


def strip_html_fences(text: str) -> str:
    """Remove every ```html / ``` marker, keeping the page itself."""
    return _HTML_FENCE_RE.sub("", text)


def message_text(message: Any) -> str:
    """Return the plain text of a message or chunk.

    Providers return either a string or a list of content parts; only the
    text parts are kept.
    """
    if message is None:
        return ""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and "text" in part:
                parts.append(str(part["text"]))
        return "".join(parts)
    return str(content)


def first_tool_args(response: Any) -> dict | None:
    """Return the args of the first tool call on an AI message, if any."""
    tool_calls = getattr(response, "tool_calls", None) or []
    if not tool_calls:
        return None
    args = tool_calls[0].get("args")
    return args or None


def as_dict(value: Any) -> dict:
    """Normalize a structured-output payload (model, dict or None) to a dict."""
    if value is None:
        return {}
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, dict):
        return value
    raise TypeError(f"Unexpected structured output type: {type(value).__name__}")


async def accumulate_text(stream: AsyncIterable) -> str:
    """Drain a text stream, concatenating the delta chunks."""
    text = ""
    async for chunk in stream:
        text += message_text(chunk)
    return text


async def last_chunk(stream: AsyncIterable) -> Any:
    """Drain a structured-output stream and return the final chunk.

    Structured streams yield CUMULATIVE snapshots (each chunk is the whole
    object parsed so far, not a delta), so the last chunk is the complete
    value. Returns None when the stream yields nothing.
    """
    final = None
    async for chunk in stream:
        final = chunk
    return final


def _is_transient(exc: BaseException) -> bool:
    """Return True if the exception is a transient HTTP/network error worth retrying."""
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, httpx.ConnectError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in (429, 500, 502, 503)
    return False


async def ainvoke_with_retry(llm, messages, max_retries: int = 3):
    """Await llm.ainvoke(messages) with exponential backoff on transient errors.

    Retries on HTTP 429/500/502/503, connection errors, and timeouts.
    Non-transient errors (auth failures, schema issues) are raised immediately.
    """
    from oc.config import get_config

    config = get_config()
    retries = config.get("llm_max_retries", max_retries)

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(retries + 1),  # +1 because first attempt counts
        wait=wait_exponential(multiplier=1, min=2, max=16),
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda state: print(
            f"[OC] Transient error: {state.outcome.exception()!r}. "
            f"Retrying in {state.next_action.sleep:.0f}s "
            f"(attempt {state.attempt_number}/{retries})...",
            file=sys.stderr,
        ),
    ):
        with attempt:
            return await llm.ainvoke(messages)
