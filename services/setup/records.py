"""
Event setup records.

Upstream computational services needed by candidate builders (magnetic
field model, track transformation), looked up by name. Lookup failures
surface as ``MissingDependency``.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from domain.candidates import Track
from domain.errors import MissingDependency
from domain.vertex import ReferencePoint

MAGNETIC_FIELD = "magnetic_field"
TRACK_BUILDER = "track_builder"

# GeV / (T * m)
_CURVATURE_CONSTANT = 0.299792458


class MagneticField(ABC):
    """Magnetic field model."""

    @abstractmethod
    def field_at(self, x: float, y: float, z: float) -> tuple[float, float, float]:
        """Field vector in tesla at a point."""
        pass

    def bz_at(self, x: float, y: float, z: float) -> float:
        return self.field_at(x, y, z)[2]


class UniformMagneticField(MagneticField):
    """Solenoid-like field along z, constant everywhere."""

    def __init__(self, bz_tesla: float = 3.8):
        self.bz_tesla = float(bz_tesla)

    def field_at(self, x: float, y: float, z: float) -> tuple[float, float, float]:
        return (0.0, 0.0, self.bz_tesla)


@dataclass(frozen=True)
class TransientTrack:
    """
    A track combined with the field it was measured in.

    Lengths are in centimetres.
    """

    track: Track
    bz_tesla: float

    @property
    def curvature(self) -> float:
        """Signed transverse curvature in 1/cm, zero for neutral tracks or no field."""
        if self.track.pt == 0 or self.track.charge == 0 or self.bz_tesla == 0:
            return 0.0
        radius_cm = self.track.pt / (_CURVATURE_CONSTANT * abs(self.bz_tesla)) * 100.0
        return self.track.charge / radius_cm

    def transverse_impact_parameter(self, vertex: ReferencePoint) -> float:
        """Unsigned distance of closest approach to the vertex in the transverse plane."""
        dx, dy = self._transverse_offset(vertex)
        return abs(dx * math.sin(self.track.phi) - dy * math.cos(self.track.phi))

    def signed_transverse_impact_parameter(self, vertex: ReferencePoint, axis_phi: float) -> float:
        """
        Impact parameter signed by the jet axis.

        Positive when the point of closest approach lies on the same side of
        the vertex as the axis direction.
        """
        dx, dy = self._transverse_offset(vertex)
        ux, uy = math.cos(self.track.phi), math.sin(self.track.phi)
        along = dx * ux + dy * uy
        pca_x, pca_y = dx - along * ux, dy - along * uy
        projection = pca_x * math.cos(axis_phi) + pca_y * math.sin(axis_phi)
        return math.copysign(math.hypot(pca_x, pca_y), projection)

    def longitudinal_distance(self, other: 'TransientTrack') -> float:
        return abs(self.track.vz - other.track.vz)

    def _transverse_offset(self, vertex: ReferencePoint) -> tuple[float, float]:
        return (self.track.vx - vertex.x, self.track.vy - vertex.y)


class TrackBuilder(ABC):
    """Track transformation service."""

    @abstractmethod
    def build(self, track: Track) -> TransientTrack:
        pass


class FieldTrackBuilder(TrackBuilder):
    """Builds transient tracks in a given magnetic field."""

    def __init__(self, magnetic_field: Optional[MagneticField]):
        if magnetic_field is None:
            raise MissingDependency(MAGNETIC_FIELD, "required by FieldTrackBuilder")
        self.magnetic_field = magnetic_field

    def build(self, track: Track) -> TransientTrack:
        bz = self.magnetic_field.bz_at(track.vx, track.vy, track.vz)
        return TransientTrack(track=track, bz_tesla=bz)


class SetupRecords:
    """
    Named upstream records available to a production job.

    Stands in for the framework's record lookup: builders declare the names
    they need and receive resolved objects once, before the first event.
    """

    def __init__(self, records: Optional[Mapping[str, Any]] = None):
        self._records = dict(records or {})
        self.logger = logging.getLogger(self.__class__.__name__)

    def __contains__(self, name: str) -> bool:
        return self._records.get(name) is not None

    def get(self, name: str) -> Any:
        """
        Look up one record.

        Raises:
            MissingDependency: If the record is absent or None
        """
        record = self._records.get(name)
        if record is None:
            raise MissingDependency(name, "record not available")
        return record

    def resolve(self, names: Iterable[str]) -> dict[str, Any]:
        """Look up several records at once, failing on the first missing one."""
        resolved = {name: self.get(name) for name in names}
        self.logger.debug(f"Resolved setup records: {sorted(resolved)}")
        return resolved

    @property
    def names(self) -> list[str]:
        return sorted(name for name, record in self._records.items() if record is not None)


def default_setup_records(bz_tesla: float = 3.8) -> SetupRecords:
    """Uniform field plus a track builder using it."""
    field = UniformMagneticField(bz_tesla)
    return SetupRecords({
        MAGNETIC_FIELD: field,
        TRACK_BUILDER: FieldTrackBuilder(field),
    })
