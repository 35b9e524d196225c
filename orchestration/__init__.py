"""
Orchestration layer for job execution.

State machine-based orchestration with explicit state transitions.
"""

from .states import JobState
from .context import JobContext
from .state_machine import StateMachine

__all__ = [
    "JobState",
    "JobContext",
    "StateMachine",
]
