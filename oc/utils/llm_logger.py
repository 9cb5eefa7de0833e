"""File-based debug log of every LLM call, grouped per request.

Each request gets a `RequestContext` at graph entry; it travels in
`config["configurable"]["request_context"]` so every node logs into the same
directory:

    <llm_log_dir>/<thread>_<request>_<timestamp>/<step>/{input,prompt,output}.txt
"""

import asyncio
import json
import sys
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from oc.config import get_config


def _timestamp() -> str:
    now = datetime.now()
    return now.strftime("%Y-%m-%d-%H-%M-%S-") + f"{now.microsecond // 1000:03d}"


@dataclass(frozen=True)
class RequestContext:
    thread_id: str = "unknown-thread"
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=_timestamp)

    @property
    def dirname(self) -> str:
        return f"{self.thread_id}_{self.request_id}_{self.timestamp}"


def get_request_context(config: dict | None) -> RequestContext:
    """Return the request context carried by the runnable config.

    Nodes invoked outside a full graph run get a fresh context.
    """
    configurable = (config or {}).get("configurable", {})
    ctx = configurable.get("request_context")
    if isinstance(ctx, RequestContext):
        return ctx
    return RequestContext(thread_id=configurable.get("thread_id") or "unknown-thread")


def _role_of(message: Any) -> str:
    if isinstance(message, dict):
        return message.get("role", "")
    return {"human": "user", "ai": "assistant"}.get(getattr(message, "type", ""), getattr(message, "type", ""))


def _content_of(message: Any) -> str:
    content = message.get("content") if isinstance(message, dict) else getattr(message, "content", "")
    return content if isinstance(content, str) else json.dumps(content, default=str)


def extract_system_prompt(messages: list) -> str:
    for message in messages:
        if _role_of(message) == "system":
            return _content_of(message)
    return ""


def extract_user_prompt(messages: list) -> str:
    user_messages = [_content_of(m) for m in messages if _role_of(m) == "user"]
    return "\n\n--- Next user message ---\n\n".join(user_messages)


def extract_output(response: Any) -> str:
    if response is None:
        return ""
    if isinstance(response, str):
        return response
    if isinstance(response, BaseModel) and not hasattr(response, "tool_calls"):
        return response.model_dump_json(indent=2)
    content = getattr(response, "content", None)
    if content:
        return content if isinstance(content, str) else json.dumps(content, default=str)
    tool_calls = getattr(response, "tool_calls", None)
    if tool_calls:
        return json.dumps(tool_calls[0].get("args"), indent=2, default=str)
    try:
        return json.dumps(response, indent=2, default=str)
    except (TypeError, ValueError):
        return str(response)


def _write_step(step_dir: Path, files: dict[str, str]) -> None:
    step_dir.mkdir(parents=True, exist_ok=True)
    for name, text in files.items():
        (step_dir / name).write_text(text, encoding="utf-8")


async def log_llm_step(
    step_name: str,
    messages: list,
    response: Any,
    ctx: RequestContext,
) -> None:
    """Write one LLM call to disk. Never raises; failures are printed."""
    config = get_config()
    if not config.get("llm_log_enabled", False):
        return

    step_dir = Path(config.get("llm_log_dir", "./llm_logs")) / ctx.dirname / step_name
    metadata = {
        **asdict(ctx),
        "stepName": step_name,
        "loggedAt": datetime.now(timezone.utc).isoformat(),
    }
    try:
        files = {
            "input.txt": extract_system_prompt(messages) or "No system prompt",
            "prompt.txt": extract_user_prompt(messages) or "No user prompt",
            "output.txt": extract_output(response) or "No output",
            "metadata.json": json.dumps(metadata, indent=2),
        }
        await asyncio.to_thread(_write_step, step_dir, files)
    except (OSError, TypeError, ValueError) as exc:
        print(f"[OC] Failed to log LLM call for {step_name}: {exc!r}", file=sys.stderr)
