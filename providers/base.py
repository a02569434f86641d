"""Base LLM provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

ChatMessage = Dict[str, str]


class CompletionError(Exception):
    """The completion call failed (transport, non-success status, or empty reply).

    Never handled inside the pipeline; callers decide on retry or a failure state.
    """

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""
    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    cost: float = 0.0


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (openai, deepseek, anthropic, litellm)."""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Default model for this provider."""
        pass

    @abstractmethod
    def complete(
        self,
        system_prompt: str,
        messages: List[ChatMessage],
        model: Optional[str] = None,
        max_tokens: int = 800,
        temperature: float = 0.1,
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            system_prompt: System/instruction prompt
            messages: Ordered conversation history as {"role", "content"} dicts
            model: Model to use (defaults to provider's default)
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature

        Returns:
            LLMResponse with content and token counts

        Raises:
            CompletionError: If the call fails or returns no content
        """
        pass

    def is_available(self) -> bool:
        """Check if this provider is available (API key set, etc.)."""
        return True

    def _require_content(self, content: Optional[str]) -> str:
        text = (content or "").strip()
        if not text:
            raise CompletionError(f"{self.name} response missing content", provider=self.name)
        return text
