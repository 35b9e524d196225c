"""
LoadEventsHandler - Handles the LOADING_EVENTS state.

Reads all configured input files and keeps this batch job's slice of the
events.
"""

from orchestration.context import JobContext
from orchestration.states import JobState
from services.io.event_reader import read_events
from utils.batching import get_batch_slice
from .base import StateHandler


class LoadEventsHandler(StateHandler):
    """Handler for LOADING_EVENTS state."""

    def handle(self, context: JobContext) -> tuple[JobContext, JobState]:
        self._log_state_entry(context)

        input_config = context.config.input_config
        events = []

        for path in input_config.input_paths:
            remaining = None
            if input_config.max_events is not None:
                remaining = input_config.max_events - len(events)
                if remaining <= 0:
                    break
            file_events = list(read_events(
                path,
                input_config.input_format,
                tree_name=input_config.tree_name,
                max_events=remaining,
            ))
            self.logger.info(f"Loaded {len(file_events)} events from {path}")
            events.extend(file_events)

        batch_idx = context.config.batch_job_index
        total_batches = context.config.total_batch_jobs
        if batch_idx is not None and total_batches is not None:
            total = len(events)
            events = get_batch_slice(events, batch_idx, total_batches)
            self.logger.info(f"Batch {batch_idx}/{total_batches}: {len(events)} of {total} events")

        if not events:
            self.logger.warning("No events to process")

        updated = context.with_events(tuple(events))
        next_state = self._determine_next_state(updated)
        self._log_state_exit(context, next_state)
        return updated, next_state
