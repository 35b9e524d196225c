"""
Event-related domain models.

Immutable per-event inputs and the products handed back to the caller.
"""

from dataclasses import dataclass, field

from .candidates import CaloTau, DetId, TauTagInfo
from .vertex import ReferencePoint


@dataclass(frozen=True)
class EventRecord:
    """Inputs of a single event as delivered by a reader."""

    event_id: int
    tag_infos: tuple[TauTagInfo, ...] = field(default_factory=tuple)
    vertices: tuple[ReferencePoint, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate the event record."""
        if self.event_id < 0:
            raise ValueError(f"event_id must be non-negative, got {self.event_id}")


@dataclass(frozen=True)
class EventProducts:
    """
    The two output collections of one event.

    Both collections are always present; an event where nothing passed the
    selection yields two empty tuples.
    """

    candidates: tuple[CaloTau, ...] = field(default_factory=tuple)
    selected_det_ids: tuple[DetId, ...] = field(default_factory=tuple)
    event_id: int = 0
    used_synthetic_vertex: bool = False

    @property
    def candidate_count(self) -> int:
        return len(self.candidates)

    @property
    def is_empty(self) -> bool:
        """True when no candidate was produced."""
        return len(self.candidates) == 0
