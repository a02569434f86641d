"""Copilot Orchestrator - one design-conversation turn, end to end.

For each turn the orchestrator:
1. Classifies the conversation phase
2. Builds the phase-specific system prompt
3. Sends the prompt plus the most recent messages to the completion client
4. Parses the reply into display text and a blueprint patch
5. Falls back to heuristic step derivation when the patch is not meaningful
6. Narrates thinking labels for the UI

The blueprint is never modified here; the caller merges the returned patch.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

from config import DEFAULT_ACKNOWLEDGEMENT, PipelineConfig, settings
from contracts import (
    Blueprint,
    BlueprintUpdates,
    ConversationMessage,
    ConversationPhase,
    CopilotResult,
    MessageRole,
)
from contracts.adapters import is_meaningful_update
from copilot import (
    build_copilot_system_prompt,
    derive_steps_from_text,
    generate_thinking_steps,
    parse_copilot_reply,
)
from providers import LLMProvider, get_provider, model_fits_provider
from router import PhaseClassifier

logger = logging.getLogger(__name__)

MessageLike = Union[ConversationMessage, Dict[str, str]]
PromptBuilder = Callable[[ConversationPhase, Optional[Blueprint], Optional[str]], str]


def _as_chat_message(message: MessageLike) -> Dict[str, str]:
    if isinstance(message, ConversationMessage):
        return {"role": message.role.value, "content": message.content}
    role = message.get("role")
    role = role.value if isinstance(role, MessageRole) else str(role)
    return {"role": role, "content": message.get("content") or ""}


def latest_user_message(messages: Sequence[Dict[str, str]]) -> Optional[str]:
    """Content of the most recent user message, if any."""
    for message in reversed(messages):
        if message["role"] == MessageRole.USER.value:
            return message["content"]
    return None


def resolve_blueprint_updates(
    display_text: str,
    updates: Optional[BlueprintUpdates],
    default_acknowledgement: str = DEFAULT_ACKNOWLEDGEMENT,
) -> Optional[BlueprintUpdates]:
    """Return the parsed patch, or a derived one when it carries nothing."""
    if is_meaningful_update(updates):
        return updates

    # A reply made only of a structured block leaves the stock acknowledgement
    if display_text == default_acknowledgement:
        return None

    derived = derive_steps_from_text(display_text)
    if derived is None:
        return None
    return BlueprintUpdates(steps=derived)


class CopilotOrchestrator:
    """Runs one copilot turn against a blueprint snapshot.

    Holds no per-conversation state, so one instance can serve many
    conversations.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        config: Optional[PipelineConfig] = None,
        prompt_builder: PromptBuilder = build_copilot_system_prompt,
        classifier: Optional[PhaseClassifier] = None,
    ):
        """Initialize the orchestrator.

        Args:
            llm_provider: Completion client used for the single model call
            config: Pipeline knobs (context window, sampling, keyword tables)
            prompt_builder: (phase, blueprint, automation_name) -> system prompt
            classifier: Phase classifier (default rules when None)
        """
        self.llm_provider = llm_provider
        self.config = config or PipelineConfig.from_settings()
        self.prompt_builder = prompt_builder
        self.classifier = classifier or PhaseClassifier()

    def trim_history(self, messages: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
        """Keep only the most recent messages; older history is dropped."""
        window = self.config.context_window_messages
        return list(messages[-window:])

    def run(
        self,
        blueprint: Blueprint,
        messages: Sequence[MessageLike],
        automation_name: Optional[str] = None,
    ) -> CopilotResult:
        """Execute one copilot turn.

        Args:
            blueprint: Current blueprint snapshot
            messages: Full conversation history, oldest first
            automation_name: Name of the automation, if known

        Returns:
            CopilotResult with display text, patch, thinking labels and phase

        Raises:
            CompletionError: If the completion call fails
        """
        history = [_as_chat_message(message) for message in messages]

        phase = self.classifier.classify(blueprint, history)
        system_prompt = self.prompt_builder(phase, blueprint, automation_name)

        response = self.llm_provider.complete(
            system_prompt=system_prompt,
            messages=self.trim_history(history),
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

        parsed = parse_copilot_reply(response.content, self.config.default_acknowledgement)
        updates = resolve_blueprint_updates(
            parsed.display_text,
            parsed.blueprint_updates,
            self.config.default_acknowledgement,
        )

        if parsed.blueprint_updates is not None and updates is parsed.blueprint_updates:
            source = "reply"
        elif updates is not None:
            source = "derived"
        else:
            source = "none"
        logger.info(
            "Copilot turn: phase=%s model=%s updates=%s",
            phase.value, response.model, source,
        )

        thinking_steps = generate_thinking_steps(
            phase,
            latest_user_message(history),
            blueprint,
            keywords=self.config.system_keywords,
            max_systems=self.config.max_detected_systems,
        )

        return CopilotResult(
            assistant_display_text=parsed.display_text,
            blueprint_updates=updates,
            thinking_steps=thinking_steps,
            conversation_phase=phase,
        )


def run_copilot_orchestration(
    blueprint: Blueprint,
    messages: Sequence[MessageLike],
    automation_name: Optional[str] = None,
    provider: Optional[str] = None,
    model: Optional[str] = None,
) -> CopilotResult:
    """Convenience function to run one copilot turn with settings-based wiring.

    Args:
        blueprint: Current blueprint snapshot
        messages: Conversation history, oldest first
        automation_name: Name of the automation, if known
        provider: LLM provider (openai, anthropic, deepseek, litellm)
        model: Model name (e.g. gpt-4o, claude-haiku)

    Returns:
        CopilotResult for the turn
    """
    # With neither given, use the configured provider, and the configured
    # model only when that provider can serve it. An explicit provider
    # without a model uses that provider's default model.
    if provider is None and model is None:
        provider = settings.provider
        model = settings.model if model_fits_provider(settings.model, provider) else None
    config = PipelineConfig.from_settings().model_copy(update={"model": model})
    orchestrator = CopilotOrchestrator(
        llm_provider=get_provider(provider_name=provider, model=model),
        config=config,
    )
    return orchestrator.run(blueprint, messages, automation_name)
