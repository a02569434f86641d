"""Adapters between blueprint contracts.

Pure functions over Blueprint and BlueprintUpdates: the empty document a new
automation version starts from, the "meaningful patch" test, a merge helper
for callers that persist blueprints, and the summary fed to prompts.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from .blueprint_contracts import (
    SECTION_KEYS,
    Blueprint,
    BlueprintStatus,
    BlueprintUpdates,
    SectionKey,
    SectionValue,
    Step,
)

logger = logging.getLogger(__name__)


def create_empty_blueprint() -> Blueprint:
    """Blueprint for a freshly created automation version."""
    return Blueprint(
        status=BlueprintStatus.DRAFT,
        summary="",
        sections={key: "" for key in SECTION_KEYS},
        steps=[],
    )


def section_value_has_content(value: Optional[SectionValue]) -> bool:
    """True when a section patch value holds any non-whitespace text."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return any(item.strip() for item in value if isinstance(item, str))


def is_meaningful_update(updates: Optional[BlueprintUpdates]) -> bool:
    """A patch is meaningful when at least one of its fields carries content."""
    if updates is None:
        return False
    if updates.summary and updates.summary.strip():
        return True
    if updates.steps:
        return True
    if updates.sections and any(section_value_has_content(v) for v in updates.sections.values()):
        return True
    return bool(updates.assumptions)


def _render_section_value(key: str, value: SectionValue) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None

    cleaned = [item.strip() for item in value if item and item.strip()]
    if key == SectionKey.SYSTEMS.value:
        unique: List[str] = []
        for name in cleaned:
            if name not in unique:
                unique.append(name)
        return ", ".join(unique) or None
    return "\n".join(cleaned) or None


def _normalize_incoming_steps(incoming: List[Step]) -> List[Step]:
    steps: List[Step] = []
    seen = set()
    for step in incoming:
        if step.id in seen:
            logger.debug("Dropping duplicate step id %s from update", step.id)
            continue
        seen.add(step.id)
        steps.append(step)

    known = {step.id for step in steps}
    normalized = []
    for step in steps:
        deps = [dep for dep in step.depends_on_ids if dep in known and dep != step.id]
        if deps != step.depends_on_ids:
            step = step.model_copy(update={"depends_on_ids": deps})
        normalized.append(step)
    return normalized


def apply_blueprint_updates(blueprint: Blueprint, updates: BlueprintUpdates) -> Blueprint:
    """Merge a patch into a blueprint and return the result.

    Non-empty step lists replace the existing steps. Sections and the summary
    are only filled when currently empty; populated content is never
    overwritten. The input blueprint is not modified, and is returned as-is
    when nothing changed.
    """
    changes = {}

    if updates.steps:
        changes["steps"] = _normalize_incoming_steps(updates.steps)

    if updates.sections:
        sections = dict(blueprint.sections)
        sections_changed = False
        for key, value in updates.sections.items():
            if blueprint.has_section_content(key):
                continue
            replacement = _render_section_value(key, value)
            if replacement is None:
                continue
            sections[key] = replacement
            sections_changed = True
        if sections_changed:
            changes["sections"] = sections

    if updates.summary and updates.summary.strip() and not blueprint.summary.strip():
        changes["summary"] = updates.summary.strip()

    if not changes:
        return blueprint

    changes["updated_at"] = datetime.now(timezone.utc)
    return blueprint.model_copy(update=changes)


def count_populated_sections(blueprint: Blueprint) -> int:
    """Number of sections with non-whitespace content."""
    return sum(1 for key in SECTION_KEYS if blueprint.has_section_content(key))


def summarize_blueprint_for_prompt(blueprint: Blueprint) -> str:
    """Short state block describing the blueprint to the model."""
    summary_present = "Yes" if blueprint.summary.strip() else "Not yet"
    lines = [
        "CURRENT BLUEPRINT STATE:",
        f"- {len(blueprint.steps)} steps defined",
        f"- Summary: {summary_present}",
        f"- Sections populated: {count_populated_sections(blueprint)}/{len(SECTION_KEYS)}",
    ]
    if blueprint.steps:
        lines.append("- Steps so far:")
        for step in blueprint.steps:
            lines.append(f"  - {step.id} ({step.type.value}): {step.title or step.summary}")
    return "\n".join(lines)
