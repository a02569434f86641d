"""Blueprint contracts: the structured design document the copilot builds.

Wire names are camelCase (what the canvas UI and the model exchange);
Python attributes are snake_case. Dump with ``by_alias=True`` for the wire.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BlueprintStatus(str, Enum):
    """Lifecycle status of a blueprint."""
    DRAFT = "Draft"
    READY_FOR_QUOTE = "ReadyForQuote"
    READY_TO_BUILD = "ReadyToBuild"


class StepType(str, Enum):
    """Kind of node in the workflow graph."""
    TRIGGER = "Trigger"
    ACTION = "Action"
    LOGIC = "Logic"
    HUMAN = "Human"


class SectionKey(str, Enum):
    """The fixed narrative sections of every blueprint."""
    BUSINESS_REQUIREMENTS = "business_requirements"
    BUSINESS_OBJECTIVES = "business_objectives"
    SUCCESS_CRITERIA = "success_criteria"
    SYSTEMS = "systems"
    DATA_NEEDS = "data_needs"
    EXCEPTIONS = "exceptions"
    HUMAN_TOUCHPOINTS = "human_touchpoints"
    FLOW_COMPLETE = "flow_complete"


STEP_TYPES_BY_NAME: Dict[str, StepType] = {step_type.value.lower(): step_type for step_type in StepType}

SECTION_KEYS: List[str] = [key.value for key in SectionKey]

SECTION_TITLES: Dict[str, str] = {
    SectionKey.BUSINESS_REQUIREMENTS.value: "Business Requirements",
    SectionKey.BUSINESS_OBJECTIVES.value: "Business Objectives",
    SectionKey.SUCCESS_CRITERIA.value: "Success Criteria",
    SectionKey.SYSTEMS.value: "Systems",
    SectionKey.DATA_NEEDS.value: "Data Needs",
    SectionKey.EXCEPTIONS.value: "Exceptions",
    SectionKey.HUMAN_TOUCHPOINTS.value: "Human Touchpoints",
    SectionKey.FLOW_COMPLETE.value: "Flow Complete",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_step_id() -> str:
    """Random id for a step the model sent without one."""
    return f"step_{uuid.uuid4().hex[:8]}"


class Step(BaseModel):
    """One node of the blueprint's workflow graph."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Stable slug, unique within the blueprint")
    title: str = Field(default="", description="Short action name")
    type: StepType = Field(default=StepType.ACTION, description="Kind of step")
    summary: str = Field(default="", description="One sentence on what happens in this step")
    systems_involved: List[str] = Field(
        default_factory=list,
        alias="systemsInvolved",
        description="Systems this step touches (set semantics)",
    )
    inputs: List[str] = Field(default_factory=list)
    outputs: List[str] = Field(default_factory=list)
    depends_on_ids: List[str] = Field(
        default_factory=list,
        alias="dependsOnIds",
        description="Ids of steps this one waits on",
    )

    @model_validator(mode="before")
    @classmethod
    def fill_id_and_type(cls, data):
        # Model-sent steps may omit the id or use any casing for the type
        if not isinstance(data, dict):
            return data
        data = dict(data)

        step_id = data.get("id")
        if step_id is None or (isinstance(step_id, str) and not step_id.strip()):
            data["id"] = generate_step_id()
        elif not isinstance(step_id, str):
            data["id"] = str(step_id)

        step_type = data.get("type")
        if step_type is None:
            data.pop("type", None)
        elif isinstance(step_type, str):
            data["type"] = STEP_TYPES_BY_NAME.get(step_type.strip().lower(), StepType.ACTION)
        return data

    @field_validator("systems_involved", "inputs", "outputs", "depends_on_ids", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        # Models occasionally send null for list fields
        return [] if v is None else v

    @field_validator("systems_involved")
    @classmethod
    def dedupe_systems(cls, v: List[str]) -> List[str]:
        seen = []
        for name in v:
            if name not in seen:
                seen.append(name)
        return seen

    @model_validator(mode="after")
    def drop_self_dependency(self) -> "Step":
        if self.id in self.depends_on_ids:
            self.depends_on_ids = [dep for dep in self.depends_on_ids if dep != self.id]
        return self


class Blueprint(BaseModel):
    """The structured design document: narrative sections plus a step graph.

    The section map always holds all eight keys; missing keys are filled
    with empty text and unknown keys are discarded.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: BlueprintStatus = BlueprintStatus.DRAFT
    summary: str = ""
    sections: Dict[str, str] = Field(default_factory=dict)
    steps: List[Step] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    @field_validator("sections", mode="before")
    @classmethod
    def complete_sections(cls, v):
        v = v or {}
        if not isinstance(v, dict):
            raise ValueError("sections must be a mapping of section key to text")
        return {key: v.get(key) or "" for key in SECTION_KEYS}

    @model_validator(mode="after")
    def check_unique_step_ids(self) -> "Blueprint":
        ids = [step.id for step in self.steps]
        duplicates = sorted({step_id for step_id in ids if ids.count(step_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate step ids: {', '.join(duplicates)}")
        return self

    def section_text(self, key: Union[SectionKey, str]) -> str:
        """Return a section's content ('' when empty)."""
        key = key.value if isinstance(key, SectionKey) else key
        return self.sections.get(key, "")

    def has_section_content(self, key: Union[SectionKey, str]) -> bool:
        """True when the section holds non-whitespace text."""
        return bool(self.section_text(key).strip())


SectionValue = Union[str, List[str]]


class BlueprintUpdates(BaseModel):
    """A patch proposed by one copilot turn; not a full document.

    Every field is optional. ``model_dump(by_alias=True, exclude_unset=True)``
    gives back exactly what the model sent (minus unknown keys).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    summary: Optional[str] = None
    steps: Optional[List[Step]] = None
    sections: Optional[Dict[str, SectionValue]] = None
    assumptions: Optional[List[str]] = None

    @field_validator("sections")
    @classmethod
    def known_sections_only(cls, v):
        if v is None:
            return v
        return {key: value for key, value in v.items() if key in SECTION_TITLES}


class MessageRole(str, Enum):
    """Author of a conversation message."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ConversationMessage(BaseModel):
    """One message of the design conversation."""

    role: MessageRole
    content: str = ""
