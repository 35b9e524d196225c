"""
Statistics-related domain models.

Immutable snapshot of a production run, plus the mutable collector that
builds it event by event.
"""

from dataclasses import dataclass, field
from datetime import datetime

from .events import EventProducts


@dataclass(frozen=True)
class ProductionStatistics:
    """
    Statistics for a production run.

    Immutable snapshot of event processing results.
    """

    total_events: int
    total_tag_infos: int
    total_candidates: int
    total_det_ids: int
    synthetic_vertex_events: int
    empty_events: int

    # Timing
    total_time_sec: float
    start_time: datetime
    end_time: datetime

    def __post_init__(self):
        """Validate production statistics."""
        for name in ("total_events", "total_tag_infos", "total_candidates",
                     "total_det_ids", "synthetic_vertex_events", "empty_events"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if self.total_candidates > self.total_tag_infos:
            raise ValueError(
                f"total_candidates ({self.total_candidates}) cannot exceed "
                f"total_tag_infos ({self.total_tag_infos})"
            )
        if self.synthetic_vertex_events > self.total_events:
            raise ValueError("synthetic_vertex_events cannot exceed total_events")
        if self.end_time < self.start_time:
            raise ValueError("end_time must be after start_time")

    @property
    def acceptance_rate(self) -> float:
        """Tag infos that became candidates, as a percentage."""
        if self.total_tag_infos == 0:
            return 0.0
        return (self.total_candidates / self.total_tag_infos) * 100

    @property
    def average_candidates_per_event(self) -> float:
        if self.total_events == 0:
            return 0.0
        return self.total_candidates / self.total_events

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_events": self.total_events,
            "total_tag_infos": self.total_tag_infos,
            "acceptance_rate": f"{self.acceptance_rate:.1f}%",
            "total_candidates": self.total_candidates,
            "average_candidates_per_event": f"{self.average_candidates_per_event:.2f}",
            "total_det_ids": self.total_det_ids,
            "synthetic_vertex_events": self.synthetic_vertex_events,
            "empty_events": self.empty_events,
            "total_time_sec": f"{self.total_time_sec:.1f}",
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
        }


@dataclass
class ProductionStatisticsCollector:
    """Accumulates per-event counters during a run."""

    start_time: datetime = field(default_factory=datetime.now)
    total_events: int = 0
    total_tag_infos: int = 0
    total_candidates: int = 0
    total_det_ids: int = 0
    synthetic_vertex_events: int = 0
    empty_events: int = 0

    def record_event(self, n_tag_infos: int, products: EventProducts):
        """
        Record the outcome of one event.

        Args:
            n_tag_infos: Size of the event's input collection
            products: Products returned for the event
        """
        self.total_events += 1
        self.total_tag_infos += n_tag_infos
        self.total_candidates += products.candidate_count
        self.total_det_ids += len(products.selected_det_ids)
        if products.used_synthetic_vertex:
            self.synthetic_vertex_events += 1
        if products.is_empty:
            self.empty_events += 1

    def snapshot(self) -> ProductionStatistics:
        """Freeze the current counters."""
        end_time = datetime.now()
        return ProductionStatistics(
            total_events=self.total_events,
            total_tag_infos=self.total_tag_infos,
            total_candidates=self.total_candidates,
            total_det_ids=self.total_det_ids,
            synthetic_vertex_events=self.synthetic_vertex_events,
            empty_events=self.empty_events,
            total_time_sec=(end_time - self.start_time).total_seconds(),
            start_time=self.start_time,
            end_time=end_time,
        )
