from typing import Any

from .base import ModelProvider
from .providers import GeminiProvider, OpenAIProvider


def create_model_provider(provider: str, **config: Any) -> ModelProvider:
    """Create a model provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type ('gemini', 'google', 'openai')
        **config: Provider-specific configuration
            For Gemini:
                - api_key: str (required)
                - model: str (default: 'gemini-2.5-flash-image')
            For OpenAI:
                - api_key: str (required)
                - model: str (default: 'gpt-4o-mini')
                - base_url: str | None
                - organization: str | None

    Returns:
        Initialized model provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_model_provider(
        ...     "gemini",
        ...     api_key="...",
        ...     model="gemini-2.5-flash-image"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower in ("gemini", "google"):
        if "api_key" not in config:
            raise TypeError("Gemini provider requires 'api_key' in config")
        return GeminiProvider(**config)

    if provider_lower == "openai":
        if "api_key" not in config:
            raise TypeError("OpenAI provider requires 'api_key' in config")
        return OpenAIProvider(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'gemini', 'openai'"
    )
