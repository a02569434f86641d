"""Anthropic (Claude) provider implementation."""

import os
from typing import List, Optional

from .base import ChatMessage, CompletionError, LLMProvider, LLMResponse


class AnthropicProvider(LLMProvider):
    """Provider for Anthropic Claude models."""

    MODELS = {
        "claude-sonnet": "claude-sonnet-4-20250514",
        "claude-opus": "claude-opus-4-20250514",
        "claude-haiku": "claude-3-5-haiku-20241022",
        "sonnet": "claude-sonnet-4-20250514",
        "opus": "claude-opus-4-20250514",
        "haiku": "claude-3-5-haiku-20241022",
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key. Uses ANTHROPIC_API_KEY env var if not provided.
            timeout: Per-request timeout in seconds (SDK default when None)
            max_retries: SDK retry count on transport failure (SDK default when None)
        """
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = None

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    def _get_client(self):
        if self._client is None:
            from anthropic import Anthropic
            kwargs = {"api_key": self.api_key}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            if self.max_retries is not None:
                kwargs["max_retries"] = self.max_retries
            self._client = Anthropic(**kwargs)
        return self._client

    def _resolve_model(self, model: Optional[str]) -> str:
        """Resolve model alias to full model name."""
        if model is None:
            return self.default_model
        return self.MODELS.get(model, model)

    @staticmethod
    def _split_system(system_prompt: str, messages: List[ChatMessage]):
        # The Messages API takes system text separately and only user/assistant turns
        system_parts = [system_prompt]
        turns = []
        for message in messages:
            if message["role"] == "system":
                system_parts.append(message["content"])
            else:
                turns.append({"role": message["role"], "content": message["content"]})
        return "\n\n".join(part for part in system_parts if part), turns

    def complete(
        self,
        system_prompt: str,
        messages: List[ChatMessage],
        model: Optional[str] = None,
        max_tokens: int = 800,
        temperature: float = 0.1,
    ) -> LLMResponse:
        if not self.api_key:
            raise CompletionError("Missing ANTHROPIC_API_KEY", provider=self.name)

        from anthropic import AnthropicError

        client = self._get_client()
        resolved_model = self._resolve_model(model)
        system, turns = self._split_system(system_prompt, messages)

        try:
            response = client.messages.create(
                model=resolved_model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=turns,
            )
        except AnthropicError as e:
            raise CompletionError(f"{self.name} request failed: {e}", provider=self.name) from e

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        )

        return LLMResponse(
            content=self._require_content(text),
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=resolved_model,
            provider=self.name,
        )

    def is_available(self) -> bool:
        return bool(self.api_key)
