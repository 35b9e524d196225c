"""
Base state handler.

Abstract base class for all state handlers.
"""

from abc import ABC, abstractmethod
import logging

from orchestration.context import JobContext
from orchestration.states import JobState


class StateHandler(ABC):
    """
    Base class for state handlers.

    Each state handler implements the logic for transitioning
    from one state to the next.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def handle(self, context: JobContext) -> tuple[JobContext, JobState]:
        """
        Handle the current state and determine next state.

        Args:
            context: Current job context

        Returns:
            Tuple of (updated_context, next_state)
        """
        pass

    def _determine_next_state(self, context: JobContext) -> JobState:
        """
        Determine next state from the context.

        Default order: load -> produce -> write, skipping production without
        events and writing without an output configuration.
        """
        current = context.current_state

        if current == JobState.LOADING_EVENTS:
            if context.events:
                return JobState.PRODUCING
            return JobState.COMPLETED

        if current == JobState.PRODUCING:
            output_config = context.config.output_config
            if output_config is not None and output_config.write_products:
                return JobState.WRITING_OUTPUT
            return JobState.COMPLETED

        return JobState.COMPLETED

    def _log_state_entry(self, context: JobContext):
        self.logger.info(f"Entering state: {context.current_state}")

    def _log_state_exit(self, context: JobContext, next_state: JobState):
        self.logger.info(f"Exiting state: {context.current_state} → {next_state}")
