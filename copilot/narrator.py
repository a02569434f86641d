"""Short "thinking" labels shown while the copilot works on a reply."""

import re
from typing import List, Optional, Sequence, Tuple

from config import SYSTEM_KEYWORDS
from contracts import Blueprint, ConversationPhase

APPROVAL_CUE_REGEX = re.compile(r"approv|[$€£¥]", re.IGNORECASE)
MAX_DETECTED_SYSTEMS = 2


def detect_systems(
    text: Optional[str],
    keywords: Sequence[Tuple[str, str]] = SYSTEM_KEYWORDS,
    limit: int = MAX_DETECTED_SYSTEMS,
) -> List[str]:
    """Canonical system names mentioned in ``text``, in order of appearance."""
    if not text:
        return []

    hits = []
    for pattern, name in keywords:
        match = re.search(pattern, text, re.IGNORECASE)
        if match:
            hits.append((match.start(), name))

    names: List[str] = []
    for _, name in sorted(hits, key=lambda hit: hit[0]):
        if name not in names:
            names.append(name)
    return names[:limit]


def systems_from_blueprint(blueprint: Optional[Blueprint], limit: int = MAX_DETECTED_SYSTEMS) -> List[str]:
    """Systems already recorded on the blueprint's steps, first seen first."""
    if blueprint is None:
        return []
    names: List[str] = []
    for step in blueprint.steps:
        for name in step.systems_involved:
            if name and name not in names:
                names.append(name)
    return names[:limit]


def _join(names: List[str]) -> str:
    return " and ".join(names)


def generate_thinking_steps(
    phase: ConversationPhase,
    latest_user_message: Optional[str] = None,
    blueprint: Optional[Blueprint] = None,
    keywords: Sequence[Tuple[str, str]] = SYSTEM_KEYWORDS,
    max_systems: int = MAX_DETECTED_SYSTEMS,
) -> List[str]:
    """Labels describing what the copilot is working on for this phase.

    Args:
        phase: Current conversation phase
        latest_user_message: Most recent user message, if any
        blueprint: Current blueprint, used when the message names no systems
        keywords: Ordered (pattern, canonical name) table
        max_systems: Cap on system names woven into labels

    Returns:
        Two or three short labels
    """
    systems = (
        detect_systems(latest_user_message, keywords, max_systems)
        or systems_from_blueprint(blueprint, max_systems)
    )
    phase = ConversationPhase(phase)

    if phase == ConversationPhase.DISCOVERY:
        return [
            "Understanding your automation goal",
            "Identifying the trigger and desired outcome",
            f"Noting how {_join(systems)} fit in" if systems else "Noting the systems involved",
        ]

    if phase == ConversationPhase.FLOW:
        return [
            "Mapping the workflow steps",
            f"Connecting {_join(systems)}" if systems else "Identifying systems and handoffs",
            "Drafting the step sequence",
        ]

    if phase == ConversationPhase.DETAILS:
        if latest_user_message and APPROVAL_CUE_REGEX.search(latest_user_message):
            return [
                "Analyzing approval threshold logic",
                "Planning human review touchpoints",
                f"Checking exception paths in {_join(systems)}" if systems else "Checking exception paths",
            ]
        return [
            "Reviewing edge cases and exceptions",
            "Identifying human touchpoints",
            f"Clarifying data needs for {_join(systems)}" if systems else "Clarifying data requirements",
        ]

    return [
        "Validating the complete blueprint",
        "Confirming readiness for the build team",
    ]
