"""Tests for the completion client providers and factory."""

import pytest
from unittest.mock import patch, MagicMock

from providers import CompletionError, detect_provider, get_provider, model_fits_provider
from providers.anthropic_provider import AnthropicProvider
from providers.base import LLMResponse
from providers.litellm_provider import LiteLLMProvider, to_litellm_model
from providers.openai_provider import OpenAIProvider, DeepseekProvider


HISTORY = [
    {"role": "user", "content": "We get invoices by email"},
    {"role": "assistant", "content": "Where do they go next?"},
    {"role": "user", "content": "Into Xero"},
]


def openai_style_response(content="Hello, world."):
    resp = MagicMock()
    resp.choices = [MagicMock()]
    resp.choices[0].message.content = content
    resp.usage = MagicMock(prompt_tokens=10, completion_tokens=5)
    resp._hidden_params = {"response_cost": 0.001}
    resp.model = "gpt-4o-mini"
    return resp


class TestToLiteLLMModel:
    """Test to_litellm_model mapping."""

    def test_openai_default(self):
        """Test openai without a model maps to the default model."""
        assert to_litellm_model("openai", None) == "gpt-4o-mini"

    def test_openai_explicit_model(self):
        """Test OpenAI models need no prefix."""
        assert to_litellm_model("openai", "gpt-4o") == "gpt-4o"
        assert to_litellm_model("openai", "gpt-4o-mini") == "gpt-4o-mini"

    def test_anthropic_alias(self):
        """Test a Claude alias maps to its full LiteLLM name."""
        assert to_litellm_model("claude", "claude-haiku") == "anthropic/claude-3-5-haiku-20241022"

    def test_unknown_model_gets_provider_prefix(self):
        """Test an unknown model gets its provider as prefix."""
        assert to_litellm_model("deepseek", "deepseek-v9") == "deepseek/deepseek-v9"

    def test_model_only(self):
        """Test mapping from a model alone."""
        assert to_litellm_model(None, "claude-sonnet") == "anthropic/claude-sonnet-4-20250514"
        assert to_litellm_model(None, "mistral/mistral-large") == "mistral/mistral-large"

    def test_no_provider_no_model(self):
        """Test the fallback when nothing is given."""
        assert to_litellm_model(None, None) == "gpt-4o-mini"


class TestLiteLLMProvider:
    """Test LiteLLMProvider with mocked litellm."""

    def test_complete_returns_llm_response(self):
        """Test the LiteLLM response is converted to LLMResponse."""
        with patch("litellm.completion", return_value=openai_style_response()):
            provider = LiteLLMProvider(default_model="gpt-4o-mini")
            result = provider.complete("You are helpful.", HISTORY, max_tokens=100)
        assert isinstance(result, LLMResponse)
        assert result.content == "Hello, world."
        assert result.input_tokens == 10
        assert result.output_tokens == 5
        assert result.cost == 0.001
        assert result.provider == "litellm"

    def test_complete_sends_system_then_history(self):
        """Test the system prompt goes first, followed by the history."""
        with patch("litellm.completion", return_value=openai_style_response()) as mock_completion:
            provider = LiteLLMProvider(default_model="gpt-4o-mini", metadata={"automation": "a1"})
            provider.complete("Sys", HISTORY, temperature=0.2, max_tokens=50)
        call_kw = mock_completion.call_args[1]
        assert call_kw["messages"][0] == {"role": "system", "content": "Sys"}
        assert call_kw["messages"][1:] == HISTORY
        assert call_kw["temperature"] == 0.2
        assert call_kw["max_tokens"] == 50
        assert call_kw["metadata"] == {"automation": "a1"}

    def test_per_call_model_alias_is_mapped(self):
        """Test a model alias passed per call is mapped to its LiteLLM name."""
        with patch("litellm.completion", return_value=openai_style_response()) as mock_completion:
            LiteLLMProvider(default_model="gpt-4o-mini").complete("Sys", HISTORY, model="claude-haiku")
        assert mock_completion.call_args[1]["model"] == "anthropic/claude-3-5-haiku-20241022"

    def test_transport_error_is_wrapped(self):
        """Test SDK errors surface as CompletionError with the cause chained."""
        from openai import OpenAIError

        with patch("litellm.completion", side_effect=OpenAIError("connection reset")):
            provider = LiteLLMProvider(default_model="gpt-4o-mini")
            with pytest.raises(CompletionError, match="connection reset") as exc_info:
                provider.complete("Sys", HISTORY)
        assert exc_info.value.provider == "litellm"
        assert isinstance(exc_info.value.__cause__, OpenAIError)

    def test_empty_content_raises(self):
        """Test a blank completion is an error."""
        with patch("litellm.completion", return_value=openai_style_response(content="   ")):
            provider = LiteLLMProvider(default_model="gpt-4o-mini")
            with pytest.raises(CompletionError, match="missing content"):
                provider.complete("Sys", HISTORY)

    def test_set_metadata(self):
        """Test metadata updates are merged."""
        provider = LiteLLMProvider(default_model="gpt-4o-mini")
        provider.set_metadata({"automation": "a1"})
        provider.set_metadata({"version": "v2"})
        assert provider._metadata == {"automation": "a1", "version": "v2"}

    def test_is_available(self):
        """Test availability depends on a default model being set."""
        assert LiteLLMProvider(default_model="gpt-4o-mini").is_available() is True
        assert LiteLLMProvider(default_model="").is_available() is False


class TestOpenAIProvider:
    """Test OpenAIProvider with a mocked client."""

    def test_complete(self):
        """Test the chat call arguments and the converted response."""
        provider = OpenAIProvider(api_key="sk-test")
        provider._client = MagicMock()
        provider._client.chat.completions.create.return_value = openai_style_response("Reply")

        result = provider.complete("Sys", HISTORY, model="gpt-4o", max_tokens=800, temperature=0.1)

        call_kw = provider._client.chat.completions.create.call_args.kwargs
        assert call_kw["model"] == "gpt-4o"
        assert call_kw["temperature"] == 0.1
        assert call_kw["messages"] == [{"role": "system", "content": "Sys"}, *HISTORY]
        assert result.content == "Reply"
        assert result.provider == "openai"

    def test_missing_key_raises(self, monkeypatch):
        """Test a missing API key is reported as CompletionError."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(CompletionError, match="OPENAI_API_KEY"):
            OpenAIProvider().complete("Sys", HISTORY)

    def test_sdk_error_is_wrapped(self):
        """Test OpenAI SDK errors are wrapped."""
        from openai import OpenAIError

        provider = OpenAIProvider(api_key="sk-test")
        provider._client = MagicMock()
        provider._client.chat.completions.create.side_effect = OpenAIError("500 from upstream")
        with pytest.raises(CompletionError, match="500 from upstream"):
            provider.complete("Sys", HISTORY)

    def test_deepseek_defaults(self, monkeypatch):
        """Test Deepseek reads its own key and default model."""
        monkeypatch.setenv("DEEPSEEK_API_KEY", "ds-test")
        provider = DeepseekProvider()
        assert provider.name == "deepseek"
        assert provider.default_model == "deepseek-chat"
        assert provider.is_available() is True


class TestAnthropicProvider:
    """Test AnthropicProvider with a mocked client."""

    def test_system_messages_are_folded_into_system_prompt(self):
        """Test system-role history is moved into the system parameter."""
        provider = AnthropicProvider(api_key="sk-ant-test")
        provider._client = MagicMock()
        response = MagicMock()
        response.content = [MagicMock(text="Claude reply")]
        response.usage = MagicMock(input_tokens=7, output_tokens=3)
        provider._client.messages.create.return_value = response

        history = [{"role": "system", "content": "Earlier note"}, *HISTORY]
        result = provider.complete("Sys", history, model="haiku")

        call_kw = provider._client.messages.create.call_args.kwargs
        assert call_kw["system"] == "Sys\n\nEarlier note"
        assert call_kw["messages"] == HISTORY
        assert call_kw["model"] == "claude-3-5-haiku-20241022"
        assert result.content == "Claude reply"
        assert result.input_tokens == 7

    def test_sdk_error_is_wrapped(self):
        """Test Anthropic SDK errors are wrapped."""
        from anthropic import AnthropicError

        provider = AnthropicProvider(api_key="sk-ant-test")
        provider._client = MagicMock()
        provider._client.messages.create.side_effect = AnthropicError("overloaded")
        with pytest.raises(CompletionError, match="overloaded"):
            provider.complete("Sys", HISTORY)


class TestGetProvider:
    """Test provider factory selection."""

    def test_explicit_provider(self):
        """Test selection by provider name."""
        assert isinstance(get_provider("anthropic"), AnthropicProvider)
        assert isinstance(get_provider("deepseek"), DeepseekProvider)

    def test_detect_from_model(self):
        """Test selection by model prefix."""
        assert isinstance(get_provider(model="gpt-4o"), OpenAIProvider)
        assert isinstance(get_provider(model="claude-haiku"), AnthropicProvider)

    def test_litellm_provider(self):
        """Test the LiteLLM provider gets the mapped model name."""
        provider = get_provider("litellm", model="claude-sonnet")
        assert isinstance(provider, LiteLLMProvider)
        assert provider.default_model == "anthropic/claude-sonnet-4-20250514"

    def test_unknown_provider(self):
        """Test an unknown provider name is rejected."""
        with pytest.raises(ValueError, match="Unknown provider"):
            get_provider("nope")


class TestModelProviderMatching:
    """Test model prefix detection helpers."""

    def test_detect_provider(self):
        """Test known prefixes map to providers and unknown ones do not."""
        assert detect_provider("gpt-4o-mini") == "openai"
        assert detect_provider("claude-haiku") == "anthropic"
        assert detect_provider("deepseek-chat") == "deepseek"
        assert detect_provider("mistral-large") is None
        assert detect_provider(None) is None

    def test_model_fits_provider(self):
        """Test which provider can serve which model."""
        assert model_fits_provider("gpt-4o-mini", "openai") is True
        assert model_fits_provider("gpt-4o-mini", "anthropic") is False
        assert model_fits_provider("claude-haiku", "claude") is True
        assert model_fits_provider("gpt-4o-mini", "litellm") is True
        assert model_fits_provider("mistral-large", "deepseek") is True
