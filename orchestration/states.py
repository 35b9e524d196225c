"""
Job states.

Explicit state enumeration for the production state machine.
"""

from enum import Enum, auto


class JobState(Enum):
    """
    All possible states of a production job.

    States represent discrete phases of job execution with
    clear entry/exit conditions and transitions.
    """

    # Initial state
    IDLE = auto()

    # Input phase
    LOADING_EVENTS = auto()

    # Per-event production
    PRODUCING = auto()

    # Output phase
    WRITING_OUTPUT = auto()

    # Terminal states
    COMPLETED = auto()
    FAILED = auto()

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (JobState.COMPLETED, JobState.FAILED)

    def __str__(self) -> str:
        return self.name


# Valid state transitions
VALID_TRANSITIONS = {
    JobState.IDLE: {
        JobState.LOADING_EVENTS,
        JobState.FAILED,
    },
    JobState.LOADING_EVENTS: {
        JobState.PRODUCING,
        JobState.COMPLETED,
        JobState.FAILED,
    },
    JobState.PRODUCING: {
        JobState.WRITING_OUTPUT,
        JobState.COMPLETED,
        JobState.FAILED,
    },
    JobState.WRITING_OUTPUT: {
        JobState.COMPLETED,
        JobState.FAILED,
    },
    JobState.COMPLETED: set(),  # Terminal
    JobState.FAILED: set(),     # Terminal
}


def is_valid_transition(from_state: JobState, to_state: JobState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is valid
    """
    return to_state in VALID_TRANSITIONS.get(from_state, set())
