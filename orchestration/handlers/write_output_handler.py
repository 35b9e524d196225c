"""
WriteOutputHandler - Handles the WRITING_OUTPUT state.

Saves the products of all events into a single ROOT file.
"""

import os

from orchestration.context import JobContext
from orchestration.states import JobState
from services.io.product_writer import ProductWriter
from .base import StateHandler


class WriteOutputHandler(StateHandler):
    """Handler for WRITING_OUTPUT state."""

    def __init__(self, writer: ProductWriter):
        super().__init__()
        self.writer = writer

    def handle(self, context: JobContext) -> tuple[JobContext, JobState]:
        self._log_state_entry(context)

        output_config = context.config.output_config
        file_name = output_config.output_filename
        batch_idx = context.config.batch_job_index
        if batch_idx is not None:
            stem, ext = os.path.splitext(file_name)
            file_name = f"{stem}_batch{batch_idx}{ext}"

        file_path = os.path.join(output_config.output_dir, file_name)
        written = self.writer.write(context.products, file_path)

        updated = context.with_output_files([written])
        next_state = self._determine_next_state(updated)
        self._log_state_exit(context, next_state)
        return updated, next_state
