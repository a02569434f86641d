"""LLM Provider abstraction: the completion client the copilot calls."""

from .base import LLMProvider, LLMResponse, CompletionError
from .factory import detect_provider, get_provider, list_providers, model_fits_provider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "CompletionError",
    "get_provider",
    "detect_provider",
    "model_fits_provider",
    "list_providers",
]
