"""Router module: decides which conversation phase the copilot is in."""

from .classifier import PhaseClassifier, classify_phase, count_user_messages

__all__ = [
    "PhaseClassifier",
    "classify_phase",
    "count_user_messages",
]
