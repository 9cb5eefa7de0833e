"""Per-request context carried in `config["configurable"]`.

`system_prompt` is an optional user-supplied prefix for generation prompts.
`documents` is a list of `{"name": ..., "data": ...}` text documents the user
attached; they are passed to the model as one extra user message.
"""

CONTEXT_DOCUMENTS_HEADER = "Use the file(s) and/or text below as context when generating your response."


def optional_system_prompt(config: dict | None) -> str:
    return (config or {}).get("configurable", {}).get("system_prompt") or ""


def with_custom_system_prompt(config: dict | None, prompt: str) -> str:
    """Prefix `prompt` with the user's custom system prompt, if set."""
    custom = optional_system_prompt(config)
    return f"{custom}\n{prompt}" if custom else prompt


def context_document_messages(config: dict | None) -> list[dict]:
    documents = (config or {}).get("configurable", {}).get("documents") or []
    blocks = []
    for doc in documents:
        if not isinstance(doc, dict) or not doc.get("data"):
            continue
        name = doc.get("name", "document")
        blocks.append(f"<document name=\"{name}\">\n{doc['data']}\n</document>")
    if not blocks:
        return []
    return [{"role": "user", "content": CONTEXT_DOCUMENTS_HEADER + "\n\n" + "\n\n".join(blocks)}]
