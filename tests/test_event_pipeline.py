"""
Tests for EventPipeline.

Tests filtering, ordering, the two output collections and dependency
failures.
"""

import math

import numpy as np
import pytest

from domain.config import ProducerConfig
from domain.errors import MissingDependency
from domain.events import EventProducts, EventRecord
from domain.vertex import SYNTHETIC_QUALITY
from pipeline.event_pipeline import EventPipeline
from services.building.base import StatefulBuilderAdapter
from services.building.calo_tau_builder import CaloTauBuilder
from services.setup.records import MAGNETIC_FIELD, TRACK_BUILDER, SetupRecords
from services.vertexing.vertex_resolver import VertexResolver

from conftest import LeakyAccumulatingBuilder, RecordingBuilder, make_tag_info, make_vertex


def make_pipeline(pt_threshold=0.5, builder=None, records=None, seed=5):
    config = ProducerConfig(pt_threshold=pt_threshold)
    resolver = VertexResolver.from_config(config, rng=np.random.default_rng(seed))
    if builder is None:
        builder = RecordingBuilder()
    return EventPipeline(config, builder, records=records, resolver=resolver)


class TestSelection:
    """Tests for pt threshold filtering and ordering."""

    def test_scenario_three_items_two_accepted(self, vertex):
        """Test momenta [0.2, 0.6, 1.0] with threshold 0.5 build items 2 and 3 in order."""
        builder = RecordingBuilder()
        pipeline = make_pipeline(0.5, builder)
        inputs = [make_tag_info(0.2), make_tag_info(0.6), make_tag_info(1.0)]

        products = pipeline.process_event(inputs, [vertex])

        assert [c.pt for c in products.candidates] == [0.6, 1.0]
        assert [c.tag_info_index for c in products.candidates] == [1, 2]
        assert [call[0] for call in builder.calls] == [inputs[1], inputs[2]]

    def test_pt_equal_to_threshold_rejected(self, vertex):
        """Test that an item exactly at the threshold is not built."""
        pipeline = make_pipeline(0.5)

        products = pipeline.process_event([make_tag_info(0.5)], [vertex])

        assert products.candidates == ()

    def test_pt_just_above_threshold_accepted(self, vertex):
        """Test that the next representable pt above the threshold is built."""
        pipeline = make_pipeline(0.5)
        just_above = math.nextafter(0.5, 1.0)

        products = pipeline.process_event([make_tag_info(just_above)], [vertex])

        assert len(products.candidates) == 1

    def test_order_preserved_among_accepted(self, vertex):
        """Test that accepted candidates keep input order, not pt order."""
        pipeline = make_pipeline(1.0)
        pts = [5.0, 0.3, 2.0, 9.0, 0.9, 3.0]

        products = pipeline.process_event([make_tag_info(pt) for pt in pts], [vertex])

        assert [c.pt for c in products.candidates] == [5.0, 2.0, 9.0, 3.0]
        assert [c.tag_info_index for c in products.candidates] == [0, 2, 3, 5]

    def test_removing_rejected_item_keeps_neighbours_order(self, vertex):
        """Test that dropping a rejected middle item does not reorder the outputs."""
        with_rejected = [make_tag_info(pt) for pt in (3.0, 0.1, 4.0)]
        without_rejected = [with_rejected[0], with_rejected[2]]

        first = make_pipeline(1.0).process_event(with_rejected, [vertex])
        second = make_pipeline(1.0).process_event(without_rejected, [vertex])

        assert [c.pt for c in first.candidates] == [c.pt for c in second.candidates] == [3.0, 4.0]

    def test_builder_receives_resolved_vertex(self, vertex):
        """Test that every build call gets the event reference point."""
        builder = RecordingBuilder()
        pipeline = make_pipeline(0.0, builder)

        pipeline.process_event([make_tag_info(1.0), make_tag_info(2.0)], [vertex, make_vertex(x=9.0)])

        assert all(call[1] is vertex for call in builder.calls)


class TestOutputs:
    """Tests for the two output collections."""

    def test_empty_input_gives_two_empty_collections(self):
        """Test that an empty event returns two empty collections without error."""
        products = make_pipeline().process_event([], [])

        assert isinstance(products, EventProducts)
        assert products.candidates == ()
        assert products.selected_det_ids == ()
        assert products.is_empty

    def test_all_filtered_gives_two_empty_collections(self, vertex):
        """Test that an event with every item rejected returns empty collections."""
        builder = RecordingBuilder()

        products = make_pipeline(10.0, builder).process_event(
            [make_tag_info(1.0), make_tag_info(2.0)], [vertex]
        )

        assert products.candidates == ()
        assert products.selected_det_ids == ()
        assert builder.calls == []

    def test_det_ids_follow_build_order(self, vertex):
        """Test that selected det ids appear in the order their candidates were built."""
        products = make_pipeline(0.5).process_event(
            [make_tag_info(pt) for pt in (1.0, 0.1, 2.0)], [vertex]
        )

        assert [d.raw for d in products.selected_det_ids] == [1000, 1002]

    def test_synthetic_vertex_flag_and_quality(self):
        """Test that an event without vertices is built against a synthetic one."""
        builder = RecordingBuilder()

        products = make_pipeline(0.0, builder).process_event([make_tag_info(1.0)], [])

        assert products.used_synthetic_vertex
        used_vertex = builder.calls[0][1]
        assert used_vertex.n_tracks == SYNTHETIC_QUALITY
        assert used_vertex.covariance[2, 2] == pytest.approx(0.005 ** 2)

    def test_upstream_vertex_flag(self, vertex):
        products = make_pipeline().process_event([make_tag_info(1.0)], [vertex])

        assert not products.used_synthetic_vertex

    def test_process_event_record_stamps_event_id(self, vertex):
        """Test that the record's event id ends up on the products."""
        record = EventRecord(event_id=42, tag_infos=(make_tag_info(1.0),), vertices=(vertex,))

        products = make_pipeline().process_event_record(record)

        assert products.event_id == 42
        assert len(products.candidates) == 1


class TestCrossEventIsolation:
    """Tests that nothing from one event leaks into the next."""

    def test_accumulating_builder_does_not_leak(self, vertex):
        """Test that a never-cleared accumulator still yields per-event identifiers."""
        pipeline = make_pipeline(0.5, StatefulBuilderAdapter(LeakyAccumulatingBuilder()))

        first = pipeline.process_event([make_tag_info(1.0), make_tag_info(2.0)], [vertex])
        second = pipeline.process_event([make_tag_info(0.1), make_tag_info(3.0)], [vertex])
        third = pipeline.process_event([], [vertex])

        assert [d.raw for d in first.selected_det_ids] == [2000, 2001]
        assert [d.raw for d in second.selected_det_ids] == [2001]
        assert third.selected_det_ids == ()

    def test_outputs_are_fresh_per_event(self, vertex):
        """Test that a second event does not see the first event's candidates."""
        pipeline = make_pipeline(0.5)

        first = pipeline.process_event([make_tag_info(1.0)], [vertex])
        second = pipeline.process_event([make_tag_info(2.0)], [vertex])

        assert [c.pt for c in first.candidates] == [1.0]
        assert [c.pt for c in second.candidates] == [2.0]


class TestDependencies:
    """Tests for MissingDependency handling."""

    def test_missing_builder_raises(self, vertex):
        """Test that an unset builder fails the event."""
        pipeline = EventPipeline(ProducerConfig(), builder=None)

        with pytest.raises(MissingDependency, match="candidate_builder"):
            pipeline.process_event([make_tag_info(1.0)], [vertex])

    def test_missing_builder_raises_even_for_empty_event(self):
        """Test that an unset builder is a failure, not an empty result."""
        pipeline = EventPipeline(ProducerConfig(), builder=None)

        with pytest.raises(MissingDependency):
            pipeline.process_event([], [])

    def test_missing_record_raises_before_building(self, vertex):
        """Test that a missing setup record aborts the event before any build call."""
        builder = RecordingBuilder(required_records=(MAGNETIC_FIELD, TRACK_BUILDER))
        records = SetupRecords({MAGNETIC_FIELD: object()})
        pipeline = make_pipeline(0.0, builder, records=records)

        with pytest.raises(MissingDependency, match=TRACK_BUILDER) as excinfo:
            pipeline.process_event([make_tag_info(1.0)], [vertex])

        assert excinfo.value.dependency == TRACK_BUILDER
        assert builder.calls == []

    def test_records_bound_once(self, vertex, setup_records):
        """Test that records are resolved for the first event only."""
        builder = CaloTauBuilder()
        pipeline = make_pipeline(0.0, builder, records=setup_records)

        pipeline.process_event([make_tag_info(1.0)], [vertex])
        bound = builder._records
        pipeline.process_event([make_tag_info(1.0)], [vertex])

        assert builder.is_bound
        assert builder._records is bound

    def test_calo_tau_builder_without_records_fails(self, vertex):
        """Test the reference builder's dependencies are enforced by the pipeline."""
        pipeline = make_pipeline(0.0, CaloTauBuilder(), records=SetupRecords())

        with pytest.raises(MissingDependency, match=TRACK_BUILDER):
            pipeline.process_event([make_tag_info(1.0)], [vertex])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
