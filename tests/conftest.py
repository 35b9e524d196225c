"""
Shared fixtures and test doubles for production tests.
"""

import numpy as np
import pytest

from domain.candidates import CaloHit, CaloTau, DetId, Jet, TauTagInfo, Track
from domain.config import ProducerConfig
from domain.vertex import ReferencePoint
from services.building.base import AccumulatingBuilder, BuildResult, CandidateBuilder
from services.setup.records import default_setup_records


def make_tag_info(pt: float, eta: float = 0.0, phi: float = 0.0, tracks=(), hits=()) -> TauTagInfo:
    """Tag info whose jet has the given kinematics."""
    return TauTagInfo(jet=Jet(pt=pt, eta=eta, phi=phi), tracks=tuple(tracks), hits=tuple(hits))


def make_vertex(x: float = 0.01, y: float = -0.02, z: float = 1.5) -> ReferencePoint:
    return ReferencePoint(
        x=x, y=y, z=z,
        covariance=np.diag([1e-6, 1e-6, 4e-6]),
        chi2=12.5, ndof=9.0, n_tracks=14,
    )


def candidate_from(item: TauTagInfo, reference_point: ReferencePoint, index: int) -> CaloTau:
    return CaloTau(
        pt=item.jet.pt,
        eta=item.jet.eta,
        phi=item.jet.phi,
        mass=item.jet.mass,
        charge=0,
        tag_info_index=index,
        vertex=reference_point,
    )


class RecordingBuilder(CandidateBuilder):
    """Builds a bare candidate per call and selects DetId(1000 + index)."""

    name = "recording"

    def __init__(self, config=None, required_records=()):
        super().__init__()
        self.required_records = tuple(required_records)
        self.calls = []

    def build(self, item, reference_point, index):
        self.calls.append((item, reference_point, index))
        return BuildResult(
            candidate=candidate_from(item, reference_point, index),
            aux_identifiers=(DetId(1000 + index),),
        )


class LeakyAccumulatingBuilder(AccumulatingBuilder):
    """Accumulating builder that selects DetId(2000 + index) per call."""

    name = "leaky"

    def __init__(self, config=None):
        super().__init__()
        self.calls = 0

    def build(self, item, reference_point, index):
        self.calls += 1
        self._select(DetId(2000 + index))
        return candidate_from(item, reference_point, index)


@pytest.fixture
def producer_config():
    return ProducerConfig(pt_threshold=0.5)


@pytest.fixture
def rng():
    return np.random.default_rng(20240601)


@pytest.fixture
def vertex():
    return make_vertex()


@pytest.fixture
def setup_records():
    return default_setup_records(bz_tesla=3.8)


@pytest.fixture
def tau_like_tag_info():
    """
    Jet at (eta, phi) = (0.5, 1.0) with:
      - a 10 GeV leading track on the jet axis
      - a 2 GeV signal track at dR ~ 0.03
      - a 3 GeV isolation track at dR ~ 0.3
      - a 5 GeV track at dR ~ 0.3 but 5 cm away in z
      - hits at dR 0 (signal), 0.3 (isolation), 0.55 (outside) and a soft one
    """
    tracks = (
        Track(pt=10.0, eta=0.5, phi=1.0, charge=-1, vx=0.01, vy=0.0, vz=0.2, n_hits=12),
        Track(pt=2.0, eta=0.53, phi=1.0, charge=1, vz=0.3, n_hits=10),
        Track(pt=3.0, eta=0.5, phi=1.3, charge=1, vz=0.1, n_hits=11),
        Track(pt=5.0, eta=0.8, phi=1.0, charge=-1, vz=5.2, n_hits=9),
    )
    hits = (
        CaloHit(det_id=DetId(838860801), energy=8.0, eta=0.5, phi=1.0),
        CaloHit(det_id=DetId(838860802), energy=2.0, eta=0.5, phi=1.3),
        CaloHit(det_id=DetId(838860803), energy=4.0, eta=0.5, phi=1.55),
        CaloHit(det_id=DetId(838860804), energy=0.1, eta=0.5, phi=1.0),
    )
    return TauTagInfo(jet=Jet(pt=25.0, eta=0.5, phi=1.0, mass=1.2), tracks=tracks, hits=hits)
