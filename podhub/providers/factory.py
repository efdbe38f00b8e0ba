"""
Provider factory for creating LLM provider instances.
"""

from .base import LLMProvider
from .openai import DEFAULT_MODEL, OpenAIProvider

PROVIDERS = {
    "openai": OpenAIProvider,
}


def create_provider(
    provider_name: str,
    api_key: str,
    default_model: str | None = None,
    **kwargs,
) -> LLMProvider:
    """
    Create an LLM provider instance.

    Args:
        provider_name: The provider to create
        api_key: API key for the provider
        default_model: Optional default model override
        **kwargs: ``base_url`` and ``timeout`` for OpenAI-compatible servers

    Returns:
        Configured LLMProvider instance

    Raises:
        ValueError: If provider_name is unknown
    """
    provider_class = PROVIDERS.get(provider_name.lower())
    if provider_class is None:
        raise ValueError(
            f"Unknown provider: {provider_name}. "
            f"Available: {sorted(PROVIDERS)}"
        )

    return provider_class(
        api_key=api_key,
        default_model=default_model or DEFAULT_MODEL,
        base_url=kwargs.get("base_url"),
        timeout=kwargs.get("timeout", 120),
    )
