"""Chat model factory keyed by graph role.

Each role in config.yaml names a provider and model; nodes ask for a role
("generation", "evaluator", ...) rather than a concrete class.
"""

from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from oc.config import get_config

_PROVIDERS = {
    "anthropic": ChatAnthropic,
    "google": ChatGoogleGenerativeAI,
    "openai": ChatOpenAI,
}


def get_model_settings(role: str) -> dict:
    """Return the config block for `role`, falling back to `default`."""
    models = get_config().get("models", {})
    settings = models.get(role) or models.get("default")
    if not settings:
        raise ValueError(f"No model configured for role '{role}' and no default.")
    return settings


def get_model_name(role: str) -> str:
    return get_model_settings(role)["model"]


def get_chat_model(role: str, **overrides: Any):
    """Instantiate the chat model configured for `role`.

    `overrides` (temperature, max_tokens, ...) win over config values.
    """
    settings = get_model_settings(role)
    provider = settings.get("provider", "anthropic")
    if provider not in _PROVIDERS:
        raise ValueError(
            f"Unknown provider '{provider}' for role '{role}'. "
            f"Must be one of: {set(_PROVIDERS)}"
        )

    params: dict[str, Any] = {
        "model": settings["model"],
        "temperature": settings.get("temperature", 0),
    }
    if settings.get("max_tokens"):
        params["max_tokens"] = settings["max_tokens"]
    params.update(overrides)
    return _PROVIDERS[provider](**params)


def is_thinking_model(model_name: str) -> bool:
    """True when the model prefixes its answer with a <think> block."""
    names = get_config().get("thinking_models", [])
    return any(name in model_name for name in names)


def uses_user_role_for_system(model_name: str) -> bool:
    """True for models that reject system messages."""
    names = get_config().get("user_role_system_models", [])
    return any(name in model_name for name in names)


def system_role(model_name: str) -> str:
    return "user" if uses_user_role_for_system(model_name) else "system"
