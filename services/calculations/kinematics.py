"""
Kinematic helpers for candidate construction.

Thin wrappers around ``vector`` objects so callers never deal with
coordinate systems directly.
"""
import vector

from domain.candidates import CaloHit, Track


def delta_r(eta1: float, phi1: float, eta2: float, phi2: float) -> float:
    """Angular distance with the phi difference wrapped into [-pi, pi)."""
    first = vector.obj(rho=1.0, eta=eta1, phi=phi1)
    second = vector.obj(rho=1.0, eta=eta2, phi=phi2)
    return first.deltaR(second)


def tracks_in_cone(
    tracks: tuple[Track, ...],
    axis_eta: float,
    axis_phi: float,
    cone_size: float,
    min_pt: float = 0.0,
) -> list[Track]:
    """
    Select tracks inside a cone, keeping input order.

    Args:
        tracks: Candidate tracks
        axis_eta: Cone axis pseudorapidity
        axis_phi: Cone axis azimuth
        cone_size: Cone radius in delta R (inclusive)
        min_pt: Minimum track pt (inclusive)

    Returns:
        Selected tracks
    """
    return [
        track for track in tracks
        if track.pt >= min_pt and delta_r(axis_eta, axis_phi, track.eta, track.phi) <= cone_size
    ]


def hits_in_cone(
    hits: tuple[CaloHit, ...],
    axis_eta: float,
    axis_phi: float,
    cone_size: float,
    min_et: float = 0.0,
) -> list[CaloHit]:
    """Select calorimeter hits inside a cone, keeping input order."""
    return [
        hit for hit in hits
        if hit.et >= min_et and delta_r(axis_eta, axis_phi, hit.eta, hit.phi) <= cone_size
    ]

