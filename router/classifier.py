"""Conversation phase classifier.

Decides where a design conversation stands from the blueprint's shape and the
message history. The phase selects the system prompt and biases the thinking
labels shown to the user. Pure and deterministic: no model call, no I/O.
"""

from typing import Sequence, Union

from contracts import (
    Blueprint,
    ConversationMessage,
    ConversationPhase,
    MessageRole,
    SectionKey,
)

MessageLike = Union[ConversationMessage, dict]


def _role_of(message: MessageLike) -> str:
    role = message.get("role") if isinstance(message, dict) else message.role
    return role.value if isinstance(role, MessageRole) else str(role)


def count_user_messages(messages: Sequence[MessageLike]) -> int:
    """Number of user-authored messages in the history."""
    return sum(1 for message in messages if _role_of(message) == MessageRole.USER.value)


class PhaseClassifier:
    """Classifies a conversation into discovery, flow, details or validation.

    Rules are checked in order and the first match wins:

    1. at most DISCOVERY_MAX_USER_MESSAGES user messages and no steps -> discovery
    2. fewer than FLOW_MIN_STEPS steps -> flow
    3. fewer than DETAILS_MIN_STEPS steps and no business objectives -> flow
    4. exceptions or human touchpoints still empty -> details
    5. otherwise -> validation
    """

    DISCOVERY_MAX_USER_MESSAGES = 2
    FLOW_MIN_STEPS = 3
    DETAILS_MIN_STEPS = 7

    def classify(
        self,
        blueprint: Blueprint,
        messages: Sequence[MessageLike],
    ) -> ConversationPhase:
        """Classify the conversation.

        Args:
            blueprint: Current blueprint snapshot
            messages: Conversation history (models or {"role", "content"} dicts)

        Returns:
            ConversationPhase for the next assistant turn
        """
        step_count = len(blueprint.steps)

        if count_user_messages(messages) <= self.DISCOVERY_MAX_USER_MESSAGES and step_count == 0:
            return ConversationPhase.DISCOVERY

        if step_count < self.FLOW_MIN_STEPS:
            return ConversationPhase.FLOW

        if (
            step_count < self.DETAILS_MIN_STEPS
            and not blueprint.has_section_content(SectionKey.BUSINESS_OBJECTIVES)
        ):
            return ConversationPhase.FLOW

        if (
            not blueprint.has_section_content(SectionKey.EXCEPTIONS)
            or not blueprint.has_section_content(SectionKey.HUMAN_TOUCHPOINTS)
        ):
            return ConversationPhase.DETAILS

        return ConversationPhase.VALIDATION


def classify_phase(
    blueprint: Blueprint,
    messages: Sequence[MessageLike],
) -> ConversationPhase:
    """Convenience function for classifying a conversation.

    Args:
        blueprint: Current blueprint snapshot
        messages: Conversation history

    Returns:
        ConversationPhase result
    """
    return PhaseClassifier().classify(blueprint, messages)
