"""
Candidate builder interfaces.

A builder turns one accepted tag info plus the event reference point into
one candidate. Builders are not safe for concurrent use: one pipeline is
the only caller of its builder.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from domain.candidates import CaloTau, DetId, TauTagInfo
from domain.errors import MissingDependency
from domain.vertex import ReferencePoint


@dataclass(frozen=True)
class BuildResult:
    """Candidate built by one call, with the identifiers that call selected."""

    candidate: CaloTau
    aux_identifiers: tuple[DetId, ...] = field(default_factory=tuple)


class RecordConsumer:
    """
    Holds the setup records a builder declared in ``required_records``.

    Records are bound once, before the first event, never fetched mid-event.
    """

    name: str = ""
    required_records: tuple[str, ...] = ()

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._records: Optional[dict[str, Any]] = None

    def bind(self, records: Mapping[str, Any]):
        """
        Bind resolved setup records.

        Args:
            records: Record name to record object

        Raises:
            MissingDependency: If a required record is absent
        """
        for record_name in self.required_records:
            if records.get(record_name) is None:
                raise MissingDependency(record_name, f"required by {self.__class__.__name__}")
        self._records = {name: records[name] for name in self.required_records}
        self.logger.debug(f"Bound records: {list(self._records)}")

    @property
    def is_bound(self) -> bool:
        return self._records is not None

    def record(self, name: str) -> Any:
        """Get a bound record."""
        if self._records is None or name not in self._records:
            raise MissingDependency(name, f"{self.__class__.__name__} has not been bound")
        return self._records[name]


class CandidateBuilder(RecordConsumer, ABC):
    """Builder returning the selected identifiers together with each candidate."""

    @abstractmethod
    def build(self, item: TauTagInfo, reference_point: ReferencePoint, index: int) -> BuildResult:
        """
        Build the candidate of one accepted tag info.

        Args:
            item: Accepted tag info
            reference_point: Resolved event vertex
            index: Position of the tag info in the event input collection

        Returns:
            BuildResult with the candidate and the identifiers it selected
        """
        pass


class AccumulatingBuilder(RecordConsumer, ABC):
    """
    Builder that records selected identifiers in an internal list.

    The list outlives events. Callers must drain it; wrap instances in
    ``StatefulBuilderAdapter`` rather than driving them directly.
    """

    def __init__(self):
        super().__init__()
        self._selected_det_ids: list[DetId] = []

    @abstractmethod
    def build(self, item: TauTagInfo, reference_point: ReferencePoint, index: int) -> CaloTau:
        pass

    def _select(self, det_id: DetId):
        self._selected_det_ids.append(det_id)

    def drain_aux_identifiers(self) -> list[DetId]:
        """Return the accumulated identifiers and reset the accumulator."""
        drained = self._selected_det_ids
        self._selected_det_ids = []
        return drained

    @property
    def pending_count(self) -> int:
        return len(self._selected_det_ids)


class StatefulBuilderAdapter(CandidateBuilder):
    """
    Presents an AccumulatingBuilder as a CandidateBuilder.

    Drains after every build call, so concatenating the per-call identifiers
    of an event gives exactly what a single end-of-event drain would, and
    nothing carries over to the next event.
    """

    def __init__(self, inner: AccumulatingBuilder):
        super().__init__()
        self.inner = inner
        self.name = inner.name
        self.required_records = inner.required_records

        stale = inner.drain_aux_identifiers()
        if stale:
            self.logger.warning(f"Discarded {len(stale)} identifiers left in {inner.__class__.__name__}")

    def bind(self, records: Mapping[str, Any]):
        self.inner.bind(records)
        super().bind(records)

    def build(self, item: TauTagInfo, reference_point: ReferencePoint, index: int) -> BuildResult:
        try:
            candidate = self.inner.build(item, reference_point, index)
        except Exception:
            # Identifiers of a failed call belong to no candidate
            self.inner.drain_aux_identifiers()
            raise
        return BuildResult(candidate=candidate, aux_identifiers=tuple(self.inner.drain_aux_identifiers()))
