"""
CaloTauBuilder - Reference candidate builder.

Seeds a tau candidate from the tag info jet, finds a leading track in the
matching cone, counts signal and isolation tracks around it and sums ECAL
transverse energy in signal and isolation cones. The hits entering the
ECAL sums are the identifiers selected by the call.
"""

from typing import Optional

from domain.candidates import CaloTau, Track, TauTagInfo
from domain.config import CaloTauBuilderConfig
from domain.vertex import ReferencePoint
from services.calculations.kinematics import delta_r, hits_in_cone, tracks_in_cone
from services.setup.records import TRACK_BUILDER, TransientTrack
from .base import BuildResult, CandidateBuilder


class CaloTauBuilder(CandidateBuilder):
    """Builds CaloTau candidates with simple cone-based quantities."""

    name = "calo_tau"
    required_records = (TRACK_BUILDER,)

    def __init__(self, config: Optional[CaloTauBuilderConfig] = None):
        super().__init__()
        self.config = config if config is not None else CaloTauBuilderConfig()

    def build(self, item: TauTagInfo, reference_point: ReferencePoint, index: int) -> BuildResult:
        cfg = self.config
        jet = item.jet

        lead_track = self._find_lead_track(item)
        if lead_track is not None:
            axis_eta, axis_phi = lead_track.eta, lead_track.phi
        else:
            axis_eta, axis_phi = jet.eta, jet.phi

        signal_tracks: list[Track] = []
        isolation_tracks: list[Track] = []
        lead_ip = None
        if lead_track is not None:
            lead_transient = self.record(TRACK_BUILDER).build(lead_track)
            signal_tracks, isolation_tracks = self._split_tracks(item.tracks, lead_transient)
            lead_ip = lead_transient.signed_transverse_impact_parameter(reference_point, jet.phi)

        selected_hits = hits_in_cone(item.hits, axis_eta, axis_phi, cfg.ecal_isolation_cone_size, cfg.ecal_hit_min_et)
        signal_ecal_et = 0.0
        isolation_ecal_et = 0.0
        for hit in selected_hits:
            if delta_r(axis_eta, axis_phi, hit.eta, hit.phi) <= cfg.ecal_signal_cone_size:
                signal_ecal_et += hit.et
            else:
                isolation_ecal_et += hit.et

        candidate = CaloTau(
            pt=jet.pt,
            eta=jet.eta,
            phi=jet.phi,
            mass=jet.mass,
            charge=sum(track.charge for track in signal_tracks),
            tag_info_index=index,
            vertex=reference_point,
            lead_track_pt=lead_track.pt if lead_track is not None else None,
            lead_track_signed_ip=lead_ip,
            n_signal_tracks=len(signal_tracks),
            n_isolation_tracks=len(isolation_tracks),
            isolation_track_pt_sum=sum(track.pt for track in isolation_tracks),
            signal_ecal_et=signal_ecal_et,
            isolation_ecal_et=isolation_ecal_et,
        )
        return BuildResult(
            candidate=candidate,
            aux_identifiers=tuple(hit.det_id for hit in selected_hits),
        )

    def _find_lead_track(self, item: TauTagInfo) -> Optional[Track]:
        """Highest-pt track in the matching cone; the first one wins ties."""
        matched = tracks_in_cone(
            item.tracks,
            item.jet.eta,
            item.jet.phi,
            self.config.matching_cone_size,
            self.config.lead_track_min_pt,
        )
        lead = None
        for track in matched:
            if lead is None or track.pt > lead.pt:
                lead = track
        return lead

    def _split_tracks(self, tracks: tuple[Track, ...], lead_transient: TransientTrack) -> tuple[list[Track], list[Track]]:
        """Signal tracks inside the signal cone and isolation tracks in the annulus around it."""
        cfg = self.config
        track_builder = self.record(TRACK_BUILDER)
        lead_track = lead_transient.track
        signal, isolation = [], []
        for track in tracks:
            if (cfg.use_lead_track_dz_constraint
                    and lead_transient.longitudinal_distance(track_builder.build(track)) > cfg.track_lead_track_max_dz):
                continue
            distance = delta_r(lead_track.eta, lead_track.phi, track.eta, track.phi)
            if distance <= cfg.track_signal_cone_size:
                if track.pt >= cfg.track_min_pt:
                    signal.append(track)
            elif distance <= cfg.track_isolation_cone_size:
                if track.pt >= cfg.isolation_track_min_pt and track.n_hits >= cfg.isolation_track_min_hits:
                    isolation.append(track)
        return signal, isolation
