"""Orchestrator module: composes the copilot pipeline into one call."""

from .copilot_orchestrator import (
    CopilotOrchestrator,
    latest_user_message,
    resolve_blueprint_updates,
    run_copilot_orchestration,
)

__all__ = [
    "CopilotOrchestrator",
    "latest_user_message",
    "resolve_blueprint_updates",
    "run_copilot_orchestration",
]
