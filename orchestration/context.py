"""
Job context.

Immutable context object passed between state handlers.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from domain.config import PipelineConfig
from domain.events import EventProducts, EventRecord
from domain.statistics import ProductionStatistics
from .states import JobState


@dataclass(frozen=True)
class JobContext:
    """
    Immutable context for job execution.

    Each state handler returns a new context with updated fields.
    """

    # Configuration
    config: PipelineConfig

    # Current state
    current_state: JobState

    # Execution metadata
    start_time: datetime = field(default_factory=datetime.now)

    # Data accumulated during the job
    events: tuple[EventRecord, ...] = field(default_factory=tuple)
    products: tuple[EventProducts, ...] = field(default_factory=tuple)
    output_files: list[str] = field(default_factory=list)

    # Statistics
    production_stats: Optional[ProductionStatistics] = None

    # Error tracking
    error_message: Optional[str] = None
    error_details: Optional[dict] = None

    def with_state(self, new_state: JobState) -> 'JobContext':
        """Return new context with updated state."""
        return replace(self, current_state=new_state)

    def with_events(self, events: tuple[EventRecord, ...]) -> 'JobContext':
        """Return new context with loaded events."""
        return replace(self, events=tuple(events))

    def with_products(self, products: tuple[EventProducts, ...]) -> 'JobContext':
        """Return new context with per-event products."""
        return replace(self, products=tuple(products))

    def with_output_files(self, files: list[str]) -> 'JobContext':
        """Return new context with written output files."""
        return replace(self, output_files=files)

    def with_production_stats(self, stats: ProductionStatistics) -> 'JobContext':
        """Return new context with production statistics."""
        return replace(self, production_stats=stats)

    def with_error(self, message: str, details: Optional[dict] = None) -> 'JobContext':
        """
        Return new context with error information.

        Args:
            message: Error message
            details: Optional error details dict

        Returns:
            New JobContext in the FAILED state
        """
        return replace(
            self,
            current_state=JobState.FAILED,
            error_message=message,
            error_details=details or {}
        )

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        return (datetime.now() - self.start_time).total_seconds()

    @property
    def is_terminal(self) -> bool:
        return self.current_state.is_terminal()

    @property
    def is_successful(self) -> bool:
        return self.current_state == JobState.COMPLETED

    @property
    def has_error(self) -> bool:
        return self.current_state == JobState.FAILED

    def get_summary(self) -> dict:
        """
        Get summary of job execution.

        Returns:
            Dict with execution summary
        """
        return {
            "state": str(self.current_state),
            "elapsed_time_sec": self.elapsed_time,
            "start_time": self.start_time.isoformat(),
            "events_count": len(self.events),
            "products_count": len(self.products),
            "output_files_count": len(self.output_files),
            "has_error": self.has_error,
            "error_message": self.error_message,
            "is_successful": self.is_successful,
        }
