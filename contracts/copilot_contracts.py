"""Copilot contracts: phase, parsed replies and orchestration results."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .blueprint_contracts import BlueprintUpdates


class ConversationPhase(str, Enum):
    """How far a design conversation has progressed."""
    DISCOVERY = "discovery"
    FLOW = "flow"
    DETAILS = "details"
    VALIDATION = "validation"


class ParsedReply(BaseModel):
    """A model reply split into prose for the user and an optional patch."""

    model_config = ConfigDict(populate_by_name=True)

    display_text: str = Field(..., alias="displayText")
    blueprint_updates: Optional[BlueprintUpdates] = Field(default=None, alias="blueprintUpdates")


class CopilotResult(BaseModel):
    """Everything one orchestration pass hands back to the calling service."""

    model_config = ConfigDict(populate_by_name=True)

    assistant_display_text: str = Field(..., alias="assistantDisplayText")
    blueprint_updates: Optional[BlueprintUpdates] = Field(default=None, alias="blueprintUpdates")
    thinking_steps: List[str] = Field(default_factory=list, alias="thinkingSteps")
    conversation_phase: ConversationPhase = Field(..., alias="conversationPhase")
