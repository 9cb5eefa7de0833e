"""Entry point: validates input, runs one graph turn, prints the result."""

import asyncio
import sys
import uuid

from langchain_core.messages import HumanMessage
from langgraph.store.base import BaseStore
from langgraph.store.memory import InMemoryStore

from oc.actions import artifact_action_from_flags, code_action_from_flags
from oc.graph import build_graph
from oc.state import ConversationState
from oc.utils.llm_logger import RequestContext
from oc.utils.validator import validate_input

ARTIFACT_ACTION_FLAGS = ("language", "reading_level", "artifact_length", "regenerate_with_emojis")
CODE_ACTION_FLAGS = ("add_comments", "add_logs", "fix_bugs", "port_language")


def _actions_from_flags(turn_inputs: dict) -> dict:
    """Replace flat client flags with the action they select."""
    inputs = dict(turn_inputs)
    artifact_flags = {k: inputs.pop(k) for k in ARTIFACT_ACTION_FLAGS if k in inputs}
    code_flags = {k: inputs.pop(k) for k in CODE_ACTION_FLAGS if k in inputs}
    if any(artifact_flags.values()):
        inputs["artifact_action"] = artifact_action_from_flags(**artifact_flags)
    if any(code_flags.values()):
        inputs["code_action"] = code_action_from_flags(**code_flags)
    return inputs


async def run_turn(
    message: str,
    state: ConversationState | None = None,
    *,
    thread_id: str,
    assistant_id: str,
    user_id: str,
    store: BaseStore | None = None,
    **turn_inputs,
) -> ConversationState:
    """Run one user turn through the graph and return the new state.

    `turn_inputs` carries the per-request selections (artifact_action,
    highlighted_text, web_search_enabled, ...). Flat theme flags such as
    `language` or `fix_bugs` are accepted too; at most one per action family.
    The human message is added to both the visible and the internal history.
    """
    validated = validate_input(message)
    turn_inputs = _actions_from_flags(turn_inputs)
    human = HumanMessage(id=str(uuid.uuid4()), content=validated)

    previous = state or {}
    inputs: ConversationState = {
        **previous,
        **turn_inputs,
        "messages": list(previous.get("messages") or []) + [human],
        "internal_messages": list(previous.get("internal_messages") or []) + [human],
    }

    ctx = RequestContext(thread_id=thread_id)
    config = {
        "configurable": {
            "thread_id": thread_id,
            "assistant_id": assistant_id,
            "user_id": user_id,
            "request_context": ctx,
        }
    }
    print(f"[OC] Request {ctx.request_id} on thread {thread_id}", file=sys.stderr)
    return await build_graph(store=store).ainvoke(inputs, config)


def _print_turn(state: ConversationState) -> None:
    messages = state.get("messages") or []
    if messages:
        print(messages[-1].content)
    artifact = state.get("artifact")
    if artifact is not None:
        current = artifact.current_content()
        print(f"[OC] Artifact revision {current.index}/{len(artifact.contents)}: {current.title or '(untitled)'}")
    if state.get("thread_title"):
        print(f"[OC] Thread: {state['thread_title']}")


async def _run_once(message: str) -> None:
    state = await run_turn(
        message,
        thread_id=str(uuid.uuid4()),
        assistant_id="default",
        user_id="local",
        store=InMemoryStore(),
    )
    _print_turn(state)


async def _repl(first_message: str | None) -> None:
    store = InMemoryStore()
    thread_id = str(uuid.uuid4())
    state: ConversationState | None = None

    message = first_message
    while True:
        if message is None:
            try:
                message = input("> ")
            except EOFError:
                break
        if message.strip():
            state = await run_turn(
                message,
                state,
                thread_id=thread_id,
                assistant_id="default",
                user_id="local",
                store=store,
            )
            _print_turn(state)
        message = None


def main() -> None:
    """CLI entry point. Takes the first message from argv; piped stdin runs one turn."""
    args = sys.argv[1:]
    if not args and not sys.stdin.isatty():
        asyncio.run(_run_once(sys.stdin.read()))
        return
    asyncio.run(_repl(" ".join(args) if args else None))


if __name__ == "__main__":
    main()
