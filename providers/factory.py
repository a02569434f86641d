"""Factory for creating LLM providers."""

from typing import Dict, Optional, Type

from config import settings
from .base import LLMProvider
from .anthropic_provider import AnthropicProvider
from .litellm_provider import LiteLLMProvider, to_litellm_model
from .openai_provider import OpenAIProvider, DeepseekProvider


# Registry of available providers
PROVIDERS: Dict[str, Type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "gpt": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "claude": AnthropicProvider,
    "deepseek": DeepseekProvider,
    "litellm": LiteLLMProvider,
}

# Model to provider mapping for auto-detection
MODEL_PROVIDERS: Dict[str, str] = {
    # OpenAI
    "gpt-": "openai",
    "o1": "openai",
    # Anthropic
    "claude": "anthropic",
    "sonnet": "anthropic",
    "opus": "anthropic",
    "haiku": "anthropic",
    # Deepseek
    "deepseek": "deepseek",
}

# Settings attribute holding each provider's API key
_SETTINGS_KEYS: Dict[str, str] = {
    "openai": "openai_api_key",
    "anthropic": "anthropic_api_key",
    "deepseek": "deepseek_api_key",
}


def _build(provider_key: str, model: Optional[str] = None) -> LLMProvider:
    provider_class = PROVIDERS[provider_key]
    common = {
        "timeout": settings.api_timeout_seconds,
        "max_retries": settings.api_max_retries,
    }
    if provider_class is LiteLLMProvider:
        return LiteLLMProvider(default_model=to_litellm_model(None, model), **common)

    canonical = provider_class.__name__.replace("Provider", "").lower()
    api_key = getattr(settings, _SETTINGS_KEYS.get(canonical, ""), "") or None
    return provider_class(api_key=api_key, **common)


def detect_provider(model: Optional[str]) -> Optional[str]:
    """Provider key implied by a model name prefix, or None if unknown."""
    if not model:
        return None
    model_lower = model.lower()
    for prefix, provider in MODEL_PROVIDERS.items():
        if model_lower.startswith(prefix):
            return provider
    return None


def model_fits_provider(model: Optional[str], provider_name: str) -> bool:
    """True when ``provider_name`` can serve ``model``.

    LiteLLM routes any model; other providers only serve models whose prefix
    maps to them. Unrecognised model names are passed through.
    """
    provider_class = PROVIDERS.get(provider_name.lower())
    if provider_class is LiteLLMProvider:
        return True
    detected = detect_provider(model)
    return detected is None or PROVIDERS[detected] is provider_class


def get_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
) -> LLMProvider:
    """Get an LLM provider instance.

    Args:
        provider_name: Explicit provider name (openai, anthropic, deepseek, litellm)
        model: Model name - if provided without provider, will auto-detect provider

    Returns:
        LLMProvider instance

    Examples:
        get_provider("anthropic")
        get_provider(model="gpt-4o")        # OpenAI provider
        get_provider(model="claude-haiku")  # Anthropic provider
        get_provider()                      # settings.provider
    """
    # If provider explicitly specified
    if provider_name:
        provider_key = provider_name.lower()
        if provider_key not in PROVIDERS:
            raise ValueError(
                f"Unknown provider: {provider_name}. "
                f"Available: {list(PROVIDERS.keys())}"
            )
        return _build(provider_key, model)

    # Try to detect from model name
    detected = detect_provider(model)
    if detected:
        return _build(detected, model)

    return _build(settings.provider.lower(), model)


def list_providers() -> Dict[str, bool]:
    """List all providers and their availability.

    Returns:
        Dict mapping provider name to availability status
    """
    result = {}
    for name in PROVIDERS:
        # Skip aliases
        if name in ["gpt", "claude"]:
            continue
        result[name] = _build(name).is_available()
    return result
