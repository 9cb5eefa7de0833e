"""Split reasoning-model output into its <think> preamble and the answer."""

import re
import uuid

from langchain_core.messages import AIMessage

_THINK_RE = re.compile(r"<think>(.*?)</think>", re.DOTALL)


def extract_thinking_and_response(text: str) -> tuple[str, str]:
    """Return (thinking, response). An unclosed <think> is all thinking."""
    match = _THINK_RE.search(text)
    if match:
        thinking = match.group(1).strip()
        response = (text[: match.start()] + text[match.end():]).strip()
        return thinking, response
    start = text.find("<think>")
    if start != -1:
        return text[start + len("<think>"):].strip(), text[:start].strip()
    return "", text


def split_thinking(text: str) -> tuple[AIMessage, str]:
    """Return the thinking as its own AI message plus the cleaned answer."""
    thinking, response = extract_thinking_and_response(text)
    return AIMessage(id=f"thinking-{uuid.uuid4()}", content=thinking), response
