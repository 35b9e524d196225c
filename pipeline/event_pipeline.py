"""
EventPipeline - Per-event calo tau production.

Resolves the event vertex, selects tag infos above the pt threshold,
delegates candidate construction to the builder and collects the two
output collections in input order.
"""

import logging
from typing import Optional, Sequence

from domain.candidates import CaloTau, DetId, TauTagInfo
from domain.config import ProducerConfig
from domain.errors import MissingDependency
from domain.events import EventProducts, EventRecord
from domain.vertex import ReferencePoint
from services.building.base import CandidateBuilder
from services.setup.records import SetupRecords
from services.vertexing.vertex_resolver import VertexResolver


class EventPipeline:
    """
    Produces candidates and selected detector ids for one event at a time.

    The pipeline is the sole caller of its builder. Events must be processed
    sequentially; run one pipeline (and one builder) per worker.
    """

    def __init__(
        self,
        config: ProducerConfig,
        builder: Optional[CandidateBuilder],
        records: Optional[SetupRecords] = None,
        resolver: Optional[VertexResolver] = None,
    ):
        """
        Initialize pipeline.

        Args:
            config: Producer configuration (threshold and fallback sigmas)
            builder: Candidate builder; a missing builder fails at the first event
            records: Setup records the builder's dependencies are resolved from
            resolver: Vertex resolver; built from config when omitted
        """
        self.config = config
        self.builder = builder
        self.records = records if records is not None else SetupRecords()
        self.resolver = resolver if resolver is not None else VertexResolver.from_config(config)
        self.logger = logging.getLogger(self.__class__.__name__)
        self._bound = False

    def process_event(
        self,
        inputs: Sequence[TauTagInfo],
        external_vertices: Sequence[ReferencePoint],
        event_id: int = 0,
    ) -> EventProducts:
        """
        Process one event.

        Args:
            inputs: Tag infos of the event, in collection order
            external_vertices: Upstream vertices of the event, possibly empty
            event_id: Identifier stamped on the products

        Returns:
            EventProducts with both collections, possibly empty

        Raises:
            MissingDependency: If the builder or one of its records is missing
        """
        self._bind_dependencies()

        reference_point = self.resolver.resolve(external_vertices)
        used_synthetic_vertex = len(external_vertices) == 0

        candidates: list[CaloTau] = []
        selected_det_ids: list[DetId] = []

        for index, item in enumerate(inputs):
            if not item.pt > self.config.pt_threshold:
                continue
            result = self.builder.build(item, reference_point, index)
            candidates.append(result.candidate)
            selected_det_ids.extend(result.aux_identifiers)

        self.logger.debug(
            f"Event {event_id}: {len(candidates)}/{len(inputs)} tag infos accepted, "
            f"{len(selected_det_ids)} det ids selected"
        )

        return EventProducts(
            candidates=tuple(candidates),
            selected_det_ids=tuple(selected_det_ids),
            event_id=event_id,
            used_synthetic_vertex=used_synthetic_vertex,
        )

    def process_event_record(self, record: EventRecord) -> EventProducts:
        """Process an EventRecord as delivered by a reader."""
        return self.process_event(record.tag_infos, record.vertices, event_id=record.event_id)

    def _bind_dependencies(self):
        """Resolve the builder's setup records once, before the first event."""
        if self.builder is None:
            raise MissingDependency("candidate_builder", "pipeline has no builder")
        if self._bound:
            return

        resolved = self.records.resolve(self.builder.required_records)
        self.builder.bind(resolved)
        self._bound = True
        self.logger.info(
            f"Bound builder {self.builder.__class__.__name__} "
            f"(records: {list(resolved) or 'none'})"
        )
