"""
ProductionHandler - Handles the PRODUCING state.

Runs the event pipeline over every loaded event, in order. A failing event
fails the whole job; nothing produced so far is kept.
"""

from tqdm import tqdm

from domain.statistics import ProductionStatisticsCollector
from orchestration.context import JobContext
from orchestration.states import JobState
from .base import StateHandler


class ProductionHandler(StateHandler):
    """Handler for PRODUCING state."""

    def __init__(self, pipeline):
        """
        Args:
            pipeline: EventPipeline driving the builder, sole caller of it
        """
        super().__init__()
        self.pipeline = pipeline

    def handle(self, context: JobContext) -> tuple[JobContext, JobState]:
        self._log_state_entry(context)

        collector = ProductionStatisticsCollector()
        products = []

        for record in tqdm(
            context.events,
            desc="Producing calo taus",
            unit="event",
            disable=not context.config.show_progress_bar,
        ):
            event_products = self.pipeline.process_event_record(record)
            collector.record_event(len(record.tag_infos), event_products)
            products.append(event_products)

        stats = collector.snapshot()
        self.logger.info(
            f"Production complete: {stats.total_events} events, "
            f"{stats.total_candidates} candidates, {stats.total_det_ids} det ids, "
            f"{stats.synthetic_vertex_events} synthetic vertices, "
            f"{stats.acceptance_rate:.1f}% tag infos accepted"
        )

        updated = context.with_products(tuple(products)).with_production_stats(stats)
        next_state = self._determine_next_state(updated)
        self._log_state_exit(context, next_state)
        return updated, next_state
