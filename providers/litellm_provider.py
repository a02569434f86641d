"""LiteLLM-backed provider. One implementation for any LiteLLM-routable model."""

from typing import List, Optional

from .base import ChatMessage, CompletionError, LLMProvider, LLMResponse


# LiteLLM model strings: provider/model-name (OpenAI can omit prefix)
DEFAULT_MODELS = {
    "anthropic": "anthropic/claude-sonnet-4-20250514",
    "openai": "gpt-4o-mini",
    "deepseek": "deepseek/deepseek-chat",
}

# Map provider + optional model -> LiteLLM model string
MODEL_ALIASES = {
    "anthropic": {
        None: "anthropic/claude-sonnet-4-20250514",
        "claude-sonnet": "anthropic/claude-sonnet-4-20250514",
        "claude-opus": "anthropic/claude-opus-4-20250514",
        "claude-haiku": "anthropic/claude-3-5-haiku-20241022",
    },
    "openai": {
        None: "gpt-4o-mini",
        "gpt-4o": "gpt-4o",
        "gpt-4o-mini": "gpt-4o-mini",
        "gpt-4.1": "gpt-4.1",
        "gpt-4.1-mini": "gpt-4.1-mini",
    },
    "deepseek": {
        None: "deepseek/deepseek-chat",
        "deepseek-chat": "deepseek/deepseek-chat",
        "deepseek-reasoner": "deepseek/deepseek-reasoner",
    },
}


def _match_alias(aliases: dict, model: str) -> Optional[str]:
    model_lower = model.lower()
    # Prefer longest alias match first (e.g. gpt-4o-mini before gpt-4o)
    for alias in sorted((a for a in aliases if a), key=len, reverse=True):
        if model_lower == alias or model_lower.startswith(alias + "-") or model_lower.startswith(alias + "."):
            return aliases[alias]
    return None


def to_litellm_model(provider_name: Optional[str], model: Optional[str]) -> str:
    """Map provider + model to a LiteLLM model string."""
    if provider_name:
        key = provider_name.lower()
        if key == "claude":
            key = "anthropic"
        elif key == "gpt":
            key = "openai"
        if key in MODEL_ALIASES:
            aliases = MODEL_ALIASES[key]
            if model:
                matched = _match_alias(aliases, model)
                if matched:
                    return matched
                if key == "openai":
                    return model  # OpenAI works without prefix
                return f"{key}/{model}"
            return aliases[None]
    if model:
        for aliases in MODEL_ALIASES.values():
            matched = _match_alias(aliases, model)
            if matched:
                return matched
        return model
    return DEFAULT_MODELS["openai"]


class LiteLLMProvider(LLMProvider):
    """Single provider that delegates to litellm.completion()."""

    def __init__(
        self,
        default_model: str,
        metadata: Optional[dict] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        """Initialize with the LiteLLM model string to use by default.

        Args:
            default_model: LiteLLM model string (e.g. gpt-4o-mini, anthropic/claude-sonnet-4-20250514).
            metadata: Optional dict passed to litellm (e.g. automation id) for callbacks.
            timeout: Per-request timeout in seconds
            max_retries: LiteLLM retry count on transport failure
        """
        self._default_model = default_model
        self._metadata = metadata or {}
        self.timeout = timeout
        self.max_retries = max_retries

    @property
    def name(self) -> str:
        return "litellm"

    @property
    def default_model(self) -> str:
        return self._default_model

    def set_metadata(self, metadata: dict) -> None:
        """Merge extra metadata into what is sent with each call."""
        self._metadata.update(metadata)

    def complete(
        self,
        system_prompt: str,
        messages: List[ChatMessage],
        model: Optional[str] = None,
        max_tokens: int = 800,
        temperature: float = 0.1,
    ) -> LLMResponse:
        import litellm
        from openai import OpenAIError

        resolved_model = to_litellm_model(None, model) if model else self._default_model
        kwargs = {
            "model": resolved_model,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "metadata": {**self._metadata},
        }
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if self.max_retries is not None:
            kwargs["num_retries"] = self.max_retries

        # LiteLLM exceptions subclass the OpenAI SDK's exception hierarchy
        try:
            response = litellm.completion(**kwargs)
        except OpenAIError as e:
            raise CompletionError(f"{self.name} request failed: {e}", provider=self.name) from e

        content = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        hidden = getattr(response, "_hidden_params", None) or {}
        cost = float(hidden.get("response_cost", 0) or 0)
        model_id = getattr(response, "model", None) or resolved_model

        return LLMResponse(
            content=self._require_content(content),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=model_id,
            provider=self.name,
            cost=cost,
        )

    def is_available(self) -> bool:
        """LiteLLM reads API keys from env; we consider it available if the model is set."""
        return bool(self._default_model)
