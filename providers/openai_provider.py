"""OpenAI provider implementation."""

import os
from typing import List, Optional

from .base import ChatMessage, CompletionError, LLMProvider, LLMResponse


class OpenAIProvider(LLMProvider):
    """Provider for OpenAI models."""

    MODELS = {
        "gpt-4o": "gpt-4o",
        "gpt-4o-mini": "gpt-4o-mini",
        "gpt-4.1": "gpt-4.1",
        "gpt-4.1-mini": "gpt-4.1-mini",
        "gpt-4-turbo": "gpt-4-turbo",
        "o1": "o1",
        "o1-mini": "o1-mini",
    }
    ENV_KEY = "OPENAI_API_KEY"
    BASE_URL: Optional[str] = None

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: API key. Uses the ENV_KEY env var if not provided.
            timeout: Per-request timeout in seconds (SDK default when None)
            max_retries: SDK retry count on transport failure (SDK default when None)
        """
        self.api_key = api_key or os.environ.get(self.ENV_KEY)
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI
            kwargs = {"api_key": self.api_key}
            if self.BASE_URL:
                kwargs["base_url"] = self.BASE_URL
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            if self.max_retries is not None:
                kwargs["max_retries"] = self.max_retries
            self._client = OpenAI(**kwargs)
        return self._client

    def _resolve_model(self, model: Optional[str]) -> str:
        if model is None:
            return self.default_model
        return self.MODELS.get(model, model)

    def complete(
        self,
        system_prompt: str,
        messages: List[ChatMessage],
        model: Optional[str] = None,
        max_tokens: int = 800,
        temperature: float = 0.1,
    ) -> LLMResponse:
        if not self.api_key:
            raise CompletionError(f"Missing {self.ENV_KEY}", provider=self.name)

        from openai import OpenAIError

        client = self._get_client()
        resolved_model = self._resolve_model(model)

        try:
            response = client.chat.completions.create(
                model=resolved_model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "system", "content": system_prompt}, *messages],
            )
        except OpenAIError as e:
            raise CompletionError(f"{self.name} request failed: {e}", provider=self.name) from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None

        return LLMResponse(
            content=self._require_content(content),
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
            model=resolved_model,
            provider=self.name,
        )

    def is_available(self) -> bool:
        return bool(self.api_key)


class DeepseekProvider(OpenAIProvider):
    """Provider for Deepseek models (OpenAI-compatible API)."""

    MODELS = {
        "deepseek-chat": "deepseek-chat",
        "deepseek-coder": "deepseek-coder",
        "deepseek-reasoner": "deepseek-reasoner",
    }
    ENV_KEY = "DEEPSEEK_API_KEY"
    BASE_URL = "https://api.deepseek.com/v1"

    @property
    def name(self) -> str:
        return "deepseek"

    @property
    def default_model(self) -> str:
        return "deepseek-chat"
