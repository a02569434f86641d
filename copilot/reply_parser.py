"""Split a freeform copilot reply into display prose and a blueprint patch.

The model is asked to append a fenced block such as::

    ```json blueprint_updates
    {"steps": [...], "sections": {...}}
    ```

Replies are untrusted: blocks may be unlabeled, repeated, truncated or not
valid JSON. Parsing never raises; anything unusable degrades to "no update"
and is still removed from the prose shown to the user.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError

from config import DEFAULT_ACKNOWLEDGEMENT
from contracts import BlueprintUpdates, ParsedReply

logger = logging.getLogger(__name__)

FENCE_TOKEN = "```json"
CLOSING_FENCE = "```"
BLUEPRINT_LABEL_REGEX = re.compile(r"^blueprint_updates[\s:]*", re.IGNORECASE)
MULTIPLE_NEWLINES_REGEX = re.compile(r"\n{3,}")


@dataclass
class JsonBlock:
    """A fenced span found in a reply."""
    start: int
    end: int
    body: str
    labeled: bool


def _strip_label(segment: str):
    trimmed = segment.lstrip()
    match = BLUEPRINT_LABEL_REGEX.match(trimmed)
    if match:
        return trimmed[match.end():], True
    return trimmed, False


def extract_json_blocks(text: str) -> List[JsonBlock]:
    """Find every ```json span, left to right.

    A span without a closing fence runs to the end of the text.
    """
    blocks = []
    cursor = 0

    while cursor < len(text):
        open_index = text.find(FENCE_TOKEN, cursor)
        if open_index == -1:
            break

        body_start = open_index + len(FENCE_TOKEN)
        close_index = text.find(CLOSING_FENCE, body_start)
        if close_index == -1:
            inner, end = text[body_start:], len(text)
        else:
            inner, end = text[body_start:close_index], close_index + len(CLOSING_FENCE)

        body, labeled = _strip_label(inner)
        blocks.append(JsonBlock(start=open_index, end=end, body=body.strip(), labeled=labeled))
        cursor = end

    return blocks


def _load_updates(body: str) -> Optional[BlueprintUpdates]:
    if not body:
        return None
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        logger.debug("Dropping malformed update payload: %s", e)
        return None
    if not isinstance(data, dict):
        logger.debug("Dropping update payload that is not an object (%s)", type(data).__name__)
        return None
    try:
        return BlueprintUpdates.model_validate(data)
    except ValidationError as e:
        logger.debug("Dropping update payload that does not fit the patch shape: %s", e)
        return None


def _is_trailing(text: str, block: JsonBlock) -> bool:
    return not text[block.end:].strip()


def select_blueprint_updates(text: str, blocks: List[JsonBlock]) -> Optional[BlueprintUpdates]:
    """Pick the patch a reply carries, if any.

    The last labeled block that parses wins. Without a usable labeled block,
    a lone block that parses and ends the reply is adopted. Anything else
    yields None.
    """
    parsed = [(block, _load_updates(block.body)) for block in blocks]

    labeled = [updates for block, updates in parsed if block.labeled and updates is not None]
    if labeled:
        if len(labeled) > 1:
            logger.debug("Reply carried %d labeled update blocks; keeping the last", len(labeled))
        return labeled[-1]

    if len(blocks) == 1:
        block, updates = parsed[0]
        if updates is not None and _is_trailing(text, block):
            return updates
        return None

    usable = sum(1 for _, updates in parsed if updates is not None)
    if usable > 1:
        logger.debug("Ignoring %d unlabeled update blocks; none is labeled", usable)
    return None


def collapse_text(value: str) -> str:
    """Trim and squeeze runs of blank lines down to one."""
    return MULTIPLE_NEWLINES_REGEX.sub("\n\n", value.strip()).strip()


def build_display_text(text: str, blocks: List[JsonBlock]) -> str:
    """Text with every fenced span removed."""
    pieces = []
    cursor = 0
    for block in blocks:
        pieces.append(text[cursor:block.start])
        cursor = block.end
    pieces.append(text[cursor:])
    return collapse_text("".join(pieces))


def parse_copilot_reply(
    raw: Optional[str],
    default_display_text: str = DEFAULT_ACKNOWLEDGEMENT,
) -> ParsedReply:
    """Parse a raw model reply.

    Args:
        raw: Reply text exactly as returned by the completion client
        default_display_text: Prose used when nothing but fenced data remains

    Returns:
        ParsedReply with the user-facing text and the chosen patch (or None)
    """
    text = (raw or "").replace("\r\n", "\n").replace("\r", "\n")
    blocks = extract_json_blocks(text)
    updates = select_blueprint_updates(text, blocks)
    display_text = build_display_text(text, blocks) or default_display_text
    return ParsedReply(display_text=display_text, blueprint_updates=updates)
