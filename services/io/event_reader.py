"""
Event readers - Convert stored events into EventRecords.

Two layouts are supported:
  - nested records (JSON lines or any awkward array of the same shape):
        {"event_id", "tag_infos": [{"jet", "tracks", "hits"}], "vertices": [...]}
  - flat ntuple branches (ROOT trees read with uproot):
        jet_pt, jet_eta, jet_phi, jet_mass
        track_tag_index, track_pt, track_eta, track_phi, track_charge,
        track_vx, track_vy, track_vz, track_n_hits
        hit_tag_index, hit_det_id, hit_energy, hit_eta, hit_phi
        vtx_x, vtx_y, vtx_z, vtx_cov_xx ... vtx_cov_zz, vtx_chi2, vtx_ndof, vtx_n_tracks
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

import awkward as ak
import numpy as np
import uproot

from domain.candidates import CaloHit, DetId, Jet, TauTagInfo, Track
from domain.errors import InvalidEventData
from domain.events import EventRecord
from domain.vertex import ReferencePoint

logger = logging.getLogger(__name__)

_COVARIANCE_BRANCHES = {
    (0, 0): "vtx_cov_xx", (0, 1): "vtx_cov_xy", (0, 2): "vtx_cov_xz",
    (1, 1): "vtx_cov_yy", (1, 2): "vtx_cov_yz", (2, 2): "vtx_cov_zz",
}


def _optional(data: dict, key: str, default):
    value = data.get(key)
    return default if value is None else value


def _track_from_dict(data: dict) -> Track:
    return Track(
        pt=float(data["pt"]),
        eta=float(data["eta"]),
        phi=float(data["phi"]),
        charge=int(_optional(data, "charge", 0)),
        vx=float(_optional(data, "vx", 0.0)),
        vy=float(_optional(data, "vy", 0.0)),
        vz=float(_optional(data, "vz", 0.0)),
        n_hits=int(_optional(data, "n_hits", 0)),
    )


def _hit_from_dict(data: dict) -> CaloHit:
    return CaloHit(
        det_id=DetId(int(data["det_id"])),
        energy=float(data["energy"]),
        eta=float(data["eta"]),
        phi=float(data["phi"]),
    )


def _tag_info_from_dict(data: dict) -> TauTagInfo:
    jet = data["jet"]
    return TauTagInfo(
        jet=Jet(
            pt=float(jet["pt"]),
            eta=float(jet["eta"]),
            phi=float(jet["phi"]),
            mass=float(_optional(jet, "mass", 0.0)),
        ),
        tracks=tuple(_track_from_dict(track) for track in data.get("tracks") or []),
        hits=tuple(_hit_from_dict(hit) for hit in data.get("hits") or []),
    )


def event_from_dict(data: dict, default_event_id: int = 0) -> EventRecord:
    """
    Convert one nested event record.

    Args:
        data: Event as plain Python structures
        default_event_id: Used when the record carries no event_id

    Returns:
        EventRecord

    Raises:
        InvalidEventData: If a required field is missing or malformed
    """
    event_id = data.get("event_id")
    if event_id is None:
        event_id = default_event_id
    try:
        return EventRecord(
            event_id=int(event_id),
            tag_infos=tuple(_tag_info_from_dict(info) for info in data.get("tag_infos") or []),
            vertices=tuple(ReferencePoint.from_dict(vtx) for vtx in data.get("vertices") or []),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidEventData(f"Event {event_id}: {e}") from e


def events_from_awkward(events: ak.Array, first_event_id: int = 0) -> Iterator[EventRecord]:
    """Yield EventRecords from an awkward array of nested event records."""
    for offset, event in enumerate(ak.to_list(events)):
        yield event_from_dict(event, default_event_id=first_event_id + offset)


def _flat_field(event: dict, name: str) -> list:
    values = event.get(name)
    return [] if values is None else values


def _flat_value(event: dict, name: str, index: int, default):
    values = event.get(name)
    return default if values is None else values[index]


def event_from_flat(event: dict, default_event_id: int = 0) -> EventRecord:
    """
    Convert one event stored as flat ntuple branches.

    Tracks and hits point at their tag info through ``*_tag_index``; entries
    pointing outside the jet collection are rejected.
    """
    event_id = event.get("event_id")
    if event_id is None:
        event_id = default_event_id

    try:
        n_jets = len(_flat_field(event, "jet_pt"))
        tracks = [[] for _ in range(n_jets)]
        for i, tag_index in enumerate(_flat_field(event, "track_tag_index")):
            if not 0 <= tag_index < n_jets:
                raise ValueError(f"track {i} points at tag info {tag_index} of {n_jets}")
            tracks[tag_index].append(Track(
                pt=float(event["track_pt"][i]),
                eta=float(event["track_eta"][i]),
                phi=float(event["track_phi"][i]),
                charge=int(_flat_value(event, "track_charge", i, 0)),
                vx=float(_flat_value(event, "track_vx", i, 0.0)),
                vy=float(_flat_value(event, "track_vy", i, 0.0)),
                vz=float(_flat_value(event, "track_vz", i, 0.0)),
                n_hits=int(_flat_value(event, "track_n_hits", i, 0)),
            ))

        hits = [[] for _ in range(n_jets)]
        for i, tag_index in enumerate(_flat_field(event, "hit_tag_index")):
            if not 0 <= tag_index < n_jets:
                raise ValueError(f"hit {i} points at tag info {tag_index} of {n_jets}")
            hits[tag_index].append(CaloHit(
                det_id=DetId(int(event["hit_det_id"][i])),
                energy=float(event["hit_energy"][i]),
                eta=float(event["hit_eta"][i]),
                phi=float(event["hit_phi"][i]),
            ))

        tag_infos = tuple(
            TauTagInfo(
                jet=Jet(
                    pt=float(event["jet_pt"][j]),
                    eta=float(event["jet_eta"][j]),
                    phi=float(event["jet_phi"][j]),
                    mass=float(_flat_value(event, "jet_mass", j, 0.0)),
                ),
                tracks=tuple(tracks[j]),
                hits=tuple(hits[j]),
            )
            for j in range(n_jets)
        )

        vertices = []
        for v in range(len(_flat_field(event, "vtx_x"))):
            covariance = np.zeros((3, 3))
            for (row, col), branch in _COVARIANCE_BRANCHES.items():
                if branch in event:
                    covariance[row, col] = covariance[col, row] = float(event[branch][v])
            vertices.append(ReferencePoint(
                x=float(event["vtx_x"][v]),
                y=float(event["vtx_y"][v]),
                z=float(event["vtx_z"][v]),
                covariance=covariance,
                chi2=float(_flat_value(event, "vtx_chi2", v, 0.0)),
                ndof=float(_flat_value(event, "vtx_ndof", v, 0.0)),
                n_tracks=int(_flat_value(event, "vtx_n_tracks", v, 0)),
            ))
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise InvalidEventData(f"Event {event_id}: {e}") from e

    return EventRecord(event_id=int(event_id), tag_infos=tag_infos, vertices=tuple(vertices))


def events_from_flat_arrays(arrays: ak.Array, first_event_id: int = 0) -> Iterator[EventRecord]:
    """Yield EventRecords from an awkward array of flat ntuple branches."""
    for offset, event in enumerate(ak.to_list(arrays)):
        yield event_from_flat(event, default_event_id=first_event_id + offset)


def read_json_events(path: str) -> Iterator[EventRecord]:
    """
    Read nested events from a JSON-lines file.

    Args:
        path: File with one event record per line

    Returns:
        Iterator of EventRecords
    """
    logger.info(f"Reading JSON events from {path}")
    text = Path(path).read_text()
    if not text.strip():
        logger.warning(f"No events in {path}")
        return iter(())
    events = ak.from_json(text, line_delimited=True)
    return events_from_awkward(events)


def read_root_events(path: str, tree_name: str = "events") -> Iterator[EventRecord]:
    """Read flat-branch events from a ROOT tree."""
    logger.info(f"Reading ROOT events from {path}:{tree_name}")
    with uproot.open(path) as root_file:
        if tree_name not in root_file:
            raise InvalidEventData(f"{path} has no tree named {tree_name!r}")
        arrays = root_file[tree_name].arrays(library="ak")
    return events_from_flat_arrays(arrays)


def read_events(path: str, input_format: str, tree_name: str = "events",
                max_events: Optional[int] = None) -> Iterator[EventRecord]:
    """
    Read events from one input file.

    Args:
        path: Input file path
        input_format: "json" or "root"
        tree_name: Tree name for ROOT input
        max_events: Stop after this many events

    Returns:
        Iterator of EventRecords
    """
    if input_format == "json":
        records = read_json_events(path)
    elif input_format == "root":
        records = read_root_events(path, tree_name)
    else:
        raise ValueError(f"Unsupported input format: {input_format!r}")

    for count, record in enumerate(records):
        if max_events is not None and count >= max_events:
            logger.info(f"Reached max_events={max_events} in {path}")
            return
        yield record
