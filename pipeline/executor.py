"""
PipelineExecutor - High-level job orchestrator.

Wires together the producer, the readers and the writer, then executes
the state machine.

Multi-job mode:
  Each batch job processes its slice of the events and saves
    - <output>_batchN.root   → output dir
    - batch_N_stats.json     → logs/
"""

import json
import logging
import os
from typing import Optional

import numpy as np

from domain.config import PipelineConfig
from orchestration import JobState, JobContext, StateMachine
from orchestration.handlers import (
    LoadEventsHandler,
    ProductionHandler,
    WriteOutputHandler,
)
from services.building.factories import build_candidate_builder
from services.io.product_writer import ProductWriter
from services.setup.records import SetupRecords, default_setup_records
from services.vertexing.vertex_resolver import VertexResolver
from .event_pipeline import EventPipeline


class PipelineExecutor:
    """
    High-level job executor.

    Responsible for:
    1. Creating all services with dependency injection
    2. Building the state machine with handlers
    3. Running the job
    4. Returning results
    """

    def __init__(
        self,
        config: PipelineConfig,
        records: Optional[SetupRecords] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize executor.

        Args:
            config: Validated job configuration
            records: Setup records for the builder; a uniform 3.8 T field when omitted
            rng: Random source for synthetic vertices; seeded from config when omitted
        """
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.event_pipeline = self._create_event_pipeline(records, rng)
        self.state_machine = self._build_state_machine()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> JobContext:
        """Execute the job and return final context."""
        self.logger.info("Initializing job execution")
        initial_context = JobContext(config=self.config, current_state=JobState.LOADING_EVENTS)
        final_context = self.state_machine.run(initial_context)
        self._log_results(final_context)
        return final_context

    def save_batch_stats(self, run_dir: str, batch_index: int, context: JobContext) -> str:
        """
        Save per-batch statistics JSON.

        Saved to: <run_dir>/logs/batch_<N>_stats.json

        Args:
            run_dir: Run directory path
            batch_index: 1-based batch index
            context: Final job context after execution

        Returns:
            Path of the written JSON file
        """
        stats = {
            "batch_index": batch_index,
            "summary": context.get_summary(),
            "output_files": context.output_files,
        }
        if context.production_stats:
            stats["production"] = context.production_stats.to_dict()

        logs_dir = os.path.join(run_dir, "logs")
        os.makedirs(logs_dir, exist_ok=True)
        stats_path = os.path.join(logs_dir, f"batch_{batch_index}_stats.json")

        with open(stats_path, "w") as f:
            json.dump(stats, f, indent=2, default=str)

        self.logger.info(f"Saved batch stats to: {stats_path}")
        return stats_path

    # ------------------------------------------------------------------
    # Job internals
    # ------------------------------------------------------------------

    def _create_event_pipeline(
        self,
        records: Optional[SetupRecords],
        rng: Optional[np.random.Generator],
    ) -> EventPipeline:
        pc = self.config.producer_config
        builder = build_candidate_builder(pc.builder, pc.builder_config)
        resolver = VertexResolver.from_config(pc, rng=rng)
        if records is None:
            records = default_setup_records()
        self.logger.info(
            f"Producer: builder={pc.builder}, pt_threshold={pc.pt_threshold}, "
            f"fallback sigmas={pc.fallback_sigmas}, seed={pc.seed}"
        )
        return EventPipeline(pc, builder, records=records, resolver=resolver)

    def _build_state_machine(self) -> StateMachine:
        self.logger.info("Building state machine with services")
        handlers = {
            JobState.LOADING_EVENTS: LoadEventsHandler(),
            JobState.PRODUCING: ProductionHandler(self.event_pipeline),
        }
        if self.config.output_config is not None:
            handlers[JobState.WRITING_OUTPUT] = WriteOutputHandler(ProductWriter())
        return StateMachine(handlers)

    def _log_results(self, context: JobContext):
        self.logger.info("=" * 60)
        self.logger.info("Job Execution Summary")
        self.logger.info("=" * 60)

        for key, value in context.get_summary().items():
            self.logger.info(f"{key:30s}: {value}")

        if context.production_stats:
            self.logger.info("Production Statistics:")
            for key, value in context.production_stats.to_dict().items():
                self.logger.info(f"{key:30s}: {value}")

        self.logger.info("=" * 60)
