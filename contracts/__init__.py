"""Pydantic contracts for the Copilot blueprint pipeline.

Every handoff between pipeline stages is typed through these contracts.
"""

from .blueprint_contracts import (
    BlueprintStatus,
    StepType,
    SectionKey,
    SECTION_KEYS,
    SECTION_TITLES,
    Step,
    Blueprint,
    BlueprintUpdates,
    MessageRole,
    ConversationMessage,
)

from .copilot_contracts import (
    ConversationPhase,
    ParsedReply,
    CopilotResult,
)

__all__ = [
    # Blueprint
    "BlueprintStatus",
    "StepType",
    "SectionKey",
    "SECTION_KEYS",
    "SECTION_TITLES",
    "Step",
    "Blueprint",
    "BlueprintUpdates",
    "MessageRole",
    "ConversationMessage",
    # Copilot
    "ConversationPhase",
    "ParsedReply",
    "CopilotResult",
]
