from typing import Any

from .base import LLMProvider
from .providers import GeminiProvider

_GEMINI_NAMES = ("gemini", "google")


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Build the generation endpoint client named by ``provider``.

    Args:
        provider: 'gemini' (or its alias 'google')
        **config: Passed to the provider; Gemini needs ``api_key`` and
            accepts ``model`` plus any ``genai.Client`` keyword

    Raises:
        ValueError: Unknown provider name
        TypeError: ``api_key`` missing

    Example:
        >>> provider = create_llm_provider("gemini", api_key=key, model="gemini-2.5-pro")
    """
    if provider.lower() not in _GEMINI_NAMES:
        raise ValueError(f"Unsupported provider: {provider}. Supported providers: 'gemini'")
    if "api_key" not in config:
        raise TypeError("Gemini provider requires 'api_key' in config")
    return GeminiProvider(**config)
