"""
Candidate-related domain models.

Immutable inputs (tag infos with their jet, tracks and calorimeter hits)
and outputs (tau candidates, selected detector identifiers).
"""

import math
from dataclasses import dataclass, field
from typing import Optional

import vector

from .vertex import ReferencePoint


@dataclass(frozen=True)
class Jet:
    """Calorimeter jet seeding a tag info."""

    pt: float
    eta: float
    phi: float
    mass: float = 0.0

    def __post_init__(self):
        """Validate the jet kinematics."""
        if self.pt < 0:
            raise ValueError(f"pt must be non-negative, got {self.pt}")
        if self.mass < 0:
            raise ValueError(f"mass must be non-negative, got {self.mass}")

    @property
    def p4(self) -> vector.MomentumObject4D:
        """Four-momentum of the jet."""
        return vector.obj(pt=self.pt, eta=self.eta, phi=self.phi, mass=self.mass)


@dataclass(frozen=True)
class Track:
    """
    Reconstructed charged track associated to a tag info.

    (vx, vy, vz) is the track reference point, the point of closest approach
    to the beam line as delivered upstream.
    """

    pt: float
    eta: float
    phi: float
    charge: int = 0
    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0
    n_hits: int = 0

    def __post_init__(self):
        """Validate the track."""
        if self.pt < 0:
            raise ValueError(f"pt must be non-negative, got {self.pt}")
        if self.charge not in (-1, 0, 1):
            raise ValueError(f"charge must be -1, 0 or 1, got {self.charge}")
        if self.n_hits < 0:
            raise ValueError(f"n_hits must be non-negative, got {self.n_hits}")


@dataclass(frozen=True, order=True)
class DetId:
    """
    Raw 32-bit detector element identifier.

    Bits 28-31 hold the detector, bits 25-27 the subdetector.
    """

    raw: int

    def __post_init__(self):
        """Validate the identifier range."""
        if not 0 <= self.raw < 2 ** 32:
            raise ValueError(f"raw must fit in 32 bits, got {self.raw}")

    @property
    def det(self) -> int:
        return (self.raw >> 28) & 0xF

    @property
    def subdet(self) -> int:
        return (self.raw >> 25) & 0x7

    def __int__(self) -> int:
        return self.raw


@dataclass(frozen=True)
class CaloHit:
    """Calorimeter rec-hit available to the builder."""

    det_id: DetId
    energy: float
    eta: float
    phi: float

    @property
    def et(self) -> float:
        """Transverse energy."""
        return self.energy / math.cosh(self.eta)


@dataclass(frozen=True)
class TauTagInfo:
    """
    One tag info entry: a jet plus the tracks and hits associated to it.

    Read-only view of the per-event input collection.
    """

    jet: Jet
    tracks: tuple[Track, ...] = field(default_factory=tuple)
    hits: tuple[CaloHit, ...] = field(default_factory=tuple)

    @property
    def pt(self) -> float:
        """Transverse momentum of the referenced jet."""
        return self.jet.p4.pt


@dataclass(frozen=True)
class CaloTau:
    """
    Tau candidate built from one accepted tag info.

    ``tag_info_index`` is the position of the originating tag info in the
    event input collection, not its position among accepted entries.
    """

    pt: float
    eta: float
    phi: float
    mass: float
    charge: int
    tag_info_index: int
    vertex: ReferencePoint = field(compare=False)

    lead_track_pt: Optional[float] = None
    lead_track_signed_ip: Optional[float] = None
    n_signal_tracks: int = 0
    n_isolation_tracks: int = 0
    isolation_track_pt_sum: float = 0.0
    signal_ecal_et: float = 0.0
    isolation_ecal_et: float = 0.0

    def __post_init__(self):
        """Validate the candidate."""
        if self.tag_info_index < 0:
            raise ValueError(f"tag_info_index must be non-negative, got {self.tag_info_index}")
        if self.n_signal_tracks < 0 or self.n_isolation_tracks < 0:
            raise ValueError("track counts must be non-negative")

    @property
    def has_lead_track(self) -> bool:
        return self.lead_track_pt is not None

    @property
    def p4(self) -> vector.MomentumObject4D:
        """Four-momentum of the candidate."""
        return vector.obj(pt=self.pt, eta=self.eta, phi=self.phi, mass=self.mass)

    def to_dict(self) -> dict:
        """Convert to a flat dictionary for serialization."""
        return {
            "pt": self.pt,
            "eta": self.eta,
            "phi": self.phi,
            "mass": self.mass,
            "charge": self.charge,
            "tag_info_index": self.tag_info_index,
            "lead_track_pt": self.lead_track_pt if self.lead_track_pt is not None else -1.0,
            "lead_track_signed_ip": (
                self.lead_track_signed_ip if self.lead_track_signed_ip is not None else 0.0
            ),
            "n_signal_tracks": self.n_signal_tracks,
            "n_isolation_tracks": self.n_isolation_tracks,
            "isolation_track_pt_sum": self.isolation_track_pt_sum,
            "signal_ecal_et": self.signal_ecal_et,
            "isolation_ecal_et": self.isolation_ecal_et,
        }
