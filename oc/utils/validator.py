"""Input and state validation — fatal checks run before a node does any work."""

from langchain_core.messages import BaseMessage

from oc.models import CodeContent, MarkdownContent


def validate_input(message: str) -> str:
    """Validate that a user turn is a non-empty string.

    Returns the stripped input on success.
    Raises ValueError if input is empty or whitespace-only.
    """
    if not isinstance(message, str) or not message.strip():
        raise ValueError("User message must be a non-empty string.")
    return message.strip()


def get_recent_human_message(state: dict) -> BaseMessage:
    """Return the most recent human turn in the internal history."""
    for message in reversed(state.get("internal_messages") or []):
        if getattr(message, "type", None) == "human":
            return message
    raise ValueError("No recent human message found")


def require_artifact_content(state: dict) -> MarkdownContent | CodeContent:
    artifact = state.get("artifact")
    if artifact is None:
        raise ValueError("No artifact found")
    return artifact.current_content()


def require_markdown_content(state: dict) -> MarkdownContent:
    content = require_artifact_content(state)
    if not isinstance(content, MarkdownContent):
        raise ValueError("Current artifact content is not markdown")
    return content


def require_code_content(state: dict) -> CodeContent:
    content = require_artifact_content(state)
    if not isinstance(content, CodeContent):
        raise ValueError("Current artifact content is not code")
    return content


def current_or_placeholder(state: dict) -> MarkdownContent | CodeContent:
    """Current revision, or an uncommitted empty markdown stand-in."""
    artifact = state.get("artifact")
    if artifact is None:
        return MarkdownContent(index=1, title="", full_markdown="")
    return artifact.current_content()
