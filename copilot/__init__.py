"""Copilot reply handling: prompt, parsing, fallback derivation and narration."""

from .reply_parser import parse_copilot_reply, extract_json_blocks, JsonBlock
from .fallback_deriver import derive_steps_from_text
from .narrator import generate_thinking_steps, detect_systems
from .prompts import build_copilot_system_prompt

__all__ = [
    "parse_copilot_reply",
    "extract_json_blocks",
    "JsonBlock",
    "derive_steps_from_text",
    "generate_thinking_steps",
    "detect_systems",
    "build_copilot_system_prompt",
]
