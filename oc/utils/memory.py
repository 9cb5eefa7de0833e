"""Reflection memory on the LangGraph store.

Namespace is ("memories", <assistant_id>); keys "reflection" (generated) and
"custom-reflection" (user supplied). Reads happen in every node, writes only
in the reflect step.
"""

from langgraph.store.base import BaseStore

from oc.models import CustomQuickAction, Reflections
from oc.utils.formatter import NO_REFLECTIONS, format_reflections

REFLECTION_KEY = "reflection"
CUSTOM_REFLECTION_KEY = "custom-reflection"
CUSTOM_ACTIONS_KEY = "data"


def get_assistant_id(config: dict | None) -> str:
    assistant_id = (config or {}).get("configurable", {}).get("assistant_id")
    if not assistant_id:
        raise ValueError("`assistant_id` not found in configurable")
    return assistant_id


def get_user_id(config: dict | None) -> str:
    user_id = (config or {}).get("configurable", {}).get("user_id")
    if not user_id:
        raise ValueError("`user_id` not found in configurable")
    return user_id


def memory_namespace(assistant_id: str) -> tuple[str, str]:
    return ("memories", assistant_id)


async def get_reflections(store: BaseStore | None, assistant_id: str, key: str = REFLECTION_KEY) -> Reflections | None:
    if store is None:
        return None
    item = await store.aget(memory_namespace(assistant_id), key)
    if item is None or not item.value:
        return None
    return Reflections.model_validate(item.value)


async def get_formatted_reflections(
    store: BaseStore | None, config: dict | None, only_content: bool = False
) -> str:
    """Load and render the assistant's reflections for prompt injection."""
    if store is None:
        return NO_REFLECTIONS
    reflections = await get_reflections(store, get_assistant_id(config))
    return format_reflections(reflections, only_content=only_content)


def _union(*lists: list[str]) -> list[str]:
    merged: list[str] = []
    seen = set()
    for items in lists:
        for item in items:
            if item not in seen:
                seen.add(item)
                merged.append(item)
    return merged


def merge_reflections(*reflections: Reflections | None) -> Reflections:
    """Order-preserving set-union of style rules and content facts."""
    present = [r for r in reflections if r is not None]
    return Reflections(
        style_rules=_union(*(r.style_rules for r in present)),
        content=_union(*(r.content for r in present)),
    )


async def put_reflections(store: BaseStore, assistant_id: str, reflections: Reflections) -> None:
    await store.aput(memory_namespace(assistant_id), REFLECTION_KEY, reflections.model_dump())


async def get_custom_action(store: BaseStore | None, user_id: str, action_id: str) -> CustomQuickAction:
    if store is None:
        raise ValueError("A store is required to load custom quick actions.")
    item = await store.aget(("custom_actions", user_id), CUSTOM_ACTIONS_KEY)
    actions = (item.value if item else None) or {}
    if action_id not in actions:
        raise ValueError(f"No custom quick action found with id '{action_id}'.")
    return CustomQuickAction.model_validate({"id": action_id, **actions[action_id]})
