"""
Tests for setup records: field model, track builder and record lookup.
"""

import math

import pytest

from domain.candidates import Track
from domain.errors import MissingDependency
from domain.vertex import ReferencePoint
from services.setup import (
    MAGNETIC_FIELD,
    TRACK_BUILDER,
    FieldTrackBuilder,
    SetupRecords,
    TransientTrack,
    UniformMagneticField,
    default_setup_records,
)


@pytest.fixture
def origin():
    return ReferencePoint(x=0.0, y=0.0, z=0.0)


class TestSetupRecords:
    """Tests for the named record container."""

    def test_get_present_record(self):
        field = UniformMagneticField()
        records = SetupRecords({MAGNETIC_FIELD: field})

        assert records.get(MAGNETIC_FIELD) is field
        assert MAGNETIC_FIELD in records

    def test_get_missing_record_raises(self):
        """Test that an absent record raises MissingDependency naming it."""
        records = SetupRecords()

        with pytest.raises(MissingDependency) as excinfo:
            records.get(TRACK_BUILDER)

        assert excinfo.value.dependency == TRACK_BUILDER
        assert TRACK_BUILDER not in records

    def test_none_record_counts_as_missing(self):
        """Test that a record registered as None is treated as unavailable."""
        records = SetupRecords({MAGNETIC_FIELD: None})

        assert MAGNETIC_FIELD not in records
        assert records.names == []
        with pytest.raises(MissingDependency):
            records.get(MAGNETIC_FIELD)

    def test_resolve_fails_on_first_missing(self):
        records = SetupRecords({MAGNETIC_FIELD: UniformMagneticField()})

        with pytest.raises(MissingDependency, match=TRACK_BUILDER):
            records.resolve([MAGNETIC_FIELD, TRACK_BUILDER])

    def test_resolve_nothing(self):
        assert SetupRecords().resolve(()) == {}

    def test_default_records(self):
        """Test that the default records share one field model."""
        records = default_setup_records(bz_tesla=2.0)

        assert records.names == [MAGNETIC_FIELD, TRACK_BUILDER]
        assert records.get(TRACK_BUILDER).magnetic_field is records.get(MAGNETIC_FIELD)
        assert records.get(MAGNETIC_FIELD).bz_at(0.0, 0.0, 0.0) == 2.0


class TestFieldTrackBuilder:
    """Tests for transient track construction."""

    def test_requires_field(self):
        with pytest.raises(MissingDependency, match=MAGNETIC_FIELD):
            FieldTrackBuilder(None)

    def test_builds_with_local_field(self):
        builder = FieldTrackBuilder(UniformMagneticField(3.8))

        transient = builder.build(Track(pt=1.0, eta=0.0, phi=0.0, charge=1))

        assert isinstance(transient, TransientTrack)
        assert transient.bz_tesla == 3.8


class TestTransientTrack:
    """Tests for curvature and impact parameters."""

    def test_curvature(self):
        """Test curvature of a 1 GeV track in 3.8 T."""
        transient = TransientTrack(Track(pt=1.0, eta=0.0, phi=0.0, charge=-1), bz_tesla=3.8)

        expected_radius_cm = 1.0 / (0.299792458 * 3.8) * 100.0
        assert transient.curvature == pytest.approx(-1.0 / expected_radius_cm)

    @pytest.mark.parametrize("pt,charge,bz", [(1.0, 0, 3.8), (0.0, 1, 3.8), (1.0, 1, 0.0)])
    def test_zero_curvature_cases(self, pt, charge, bz):
        """Test that neutral, zero-pt or field-free tracks are straight."""
        transient = TransientTrack(Track(pt=pt, eta=0.0, phi=0.0, charge=charge), bz_tesla=bz)

        assert transient.curvature == 0.0

    def test_transverse_impact_parameter(self, origin):
        """Test a track displaced perpendicular to its direction."""
        track = Track(pt=5.0, eta=0.0, phi=math.pi / 2, charge=1, vx=0.1, vy=0.0)

        ip = TransientTrack(track, 3.8).transverse_impact_parameter(origin)

        assert ip == pytest.approx(0.1)

    def test_displacement_along_track_gives_zero_ip(self, origin):
        track = Track(pt=5.0, eta=0.0, phi=0.0, charge=1, vx=0.3, vy=0.0)

        assert TransientTrack(track, 3.8).transverse_impact_parameter(origin) == pytest.approx(0.0)

    def test_signed_ip_follows_axis(self, origin):
        """Test that the sign flips with the axis direction."""
        track = Track(pt=5.0, eta=0.0, phi=math.pi / 2, charge=1, vx=0.1, vy=0.0)
        transient = TransientTrack(track, 3.8)

        assert transient.signed_transverse_impact_parameter(origin, axis_phi=0.0) == pytest.approx(0.1)
        assert transient.signed_transverse_impact_parameter(origin, axis_phi=math.pi) == pytest.approx(-0.1)

    def test_longitudinal_distance(self):
        first = TransientTrack(Track(pt=1.0, eta=0.0, phi=0.0, vz=1.0), 3.8)
        second = TransientTrack(Track(pt=1.0, eta=0.0, phi=0.0, vz=-0.5), 3.8)

        assert first.longitudinal_distance(second) == pytest.approx(1.5)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
