"""Heuristic step extraction for replies that carry no usable patch.

When the model describes a flow in prose but forgets the structured block,
the enumerated lines (or, failing that, the first few sentences) become a
linear chain of steps: a trigger followed by actions.
"""

import logging
import re
from typing import List, Optional

from contracts import Step, StepType

logger = logging.getLogger(__name__)

ENUMERATED_LINE_REGEX = re.compile(r"^\s*(?:\d+[.)]|[-*])\s*(.+)$")
SENTENCE_SPLIT_REGEX = re.compile(r"[.\n]")
NON_ALNUM_REGEX = re.compile(r"[^a-z0-9]+")

MIN_ENUMERATED_CANDIDATES = 2
MIN_SENTENCE_LENGTH = 7
MAX_SENTENCE_CANDIDATES = 5
SLUG_LENGTH = 24
TITLE_LENGTH = 60
ELLIPSIS = "..."


def _enumerated_candidates(text: str) -> List[str]:
    candidates = []
    for line in text.split("\n"):
        match = ENUMERATED_LINE_REGEX.match(line)
        if match and match.group(1).strip():
            candidates.append(match.group(1).strip())
    return candidates


def _sentence_candidates(text: str) -> List[str]:
    sentences = (piece.strip() for piece in SENTENCE_SPLIT_REGEX.split(text))
    return [s for s in sentences if len(s) >= MIN_SENTENCE_LENGTH][:MAX_SENTENCE_CANDIDATES]


def extract_candidates(text: str) -> List[str]:
    """Lines that look like a list, else the first few real sentences."""
    enumerated = _enumerated_candidates(text)
    if len(enumerated) >= MIN_ENUMERATED_CANDIDATES:
        return enumerated
    return _sentence_candidates(text)


def make_step_id(content: str, index: int) -> str:
    """Slug id for the candidate at 0-based ``index``."""
    slug = NON_ALNUM_REGEX.sub("-", content.lower()).strip("-")[:SLUG_LENGTH]
    if not slug:
        return f"auto_step_{index + 1}"
    return f"auto_{index + 1}_{slug}"


def make_title(content: str) -> str:
    if len(content) > TITLE_LENGTH:
        return content[:TITLE_LENGTH - len(ELLIPSIS)] + ELLIPSIS
    return content


def derive_steps_from_text(display_text: str) -> Optional[List[Step]]:
    """Build a linear chain of steps from reply prose.

    Args:
        display_text: Prose part of a parsed reply

    Returns:
        Steps (first is the trigger, each later one depends on its
        predecessor), or None when the text holds no usable candidates
    """
    candidates = extract_candidates(display_text or "")
    if not candidates:
        return None

    steps: List[Step] = []
    for index, content in enumerate(candidates):
        step_id = make_step_id(content, index)
        steps.append(Step(
            id=step_id,
            title=make_title(content),
            type=StepType.TRIGGER if index == 0 else StepType.ACTION,
            summary=content,
            depends_on_ids=[steps[-1].id] if steps else [],
        ))

    logger.debug("Derived %d fallback steps from reply prose", len(steps))
    return steps
