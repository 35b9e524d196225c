"""
ProductWriter service - Single responsibility: write event products to ROOT.

Each event becomes one entry of the ``events`` TTree with a jagged ``tau``
record (branches ``tau_pt``, ``tau_eta``, ... sharing the counter ``ntau``)
and a jagged ``det_id`` branch.
"""

import logging
from pathlib import Path
from typing import Sequence

import awkward as ak
import numpy as np
import uproot

from domain.events import EventProducts

CANDIDATE_BRANCHES = {
    "pt": np.float64,
    "eta": np.float64,
    "phi": np.float64,
    "mass": np.float64,
    "charge": np.int32,
    "tag_info_index": np.int32,
    "lead_track_pt": np.float64,
    "lead_track_signed_ip": np.float64,
    "n_signal_tracks": np.int32,
    "n_isolation_tracks": np.int32,
    "isolation_track_pt_sum": np.float64,
    "signal_ecal_et": np.float64,
    "isolation_ecal_et": np.float64,
}


def branch_types() -> dict:
    """
    Declared TTree branch types.

    ``tau`` is a jagged record, so its fields share the ``ntau`` counter.
    """
    tau_fields = ", ".join(f"{name}: {np.dtype(dtype).name}" for name, dtype in CANDIDATE_BRANCHES.items())
    return {
        "event_id": np.dtype(np.int64),
        "synthetic_vertex": np.dtype(np.bool_),
        "tau": f"var * {{{tau_fields}}}",
        "det_id": "var * uint32",
    }


class ProductWriter:
    """Writes EventProducts to a ROOT file with uproot."""

    def __init__(self, tree_name: str = "events"):
        self.tree_name = tree_name
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def to_awkward(products: Sequence[EventProducts]) -> dict:
        """
        Build typed branch arrays from a sequence of event products.

        Typed construction keeps the layout writable even when every event
        is empty.

        Args:
            products: Products in event order

        Returns:
            Dict of branch name to array, ready for uproot
        """
        candidate_counts = np.array([len(p.candidates) for p in products], dtype=np.int64)
        rows = [candidate.to_dict() for p in products for candidate in p.candidates]

        tau_fields = {
            name: ak.unflatten(np.array([row[name] for row in rows], dtype=dtype), candidate_counts)
            for name, dtype in CANDIDATE_BRANCHES.items()
        }

        det_id_counts = np.array([len(p.selected_det_ids) for p in products], dtype=np.int64)
        raw_det_ids = np.array(
            [int(det_id) for p in products for det_id in p.selected_det_ids],
            dtype=np.uint32,
        )

        return {
            "event_id": np.array([p.event_id for p in products], dtype=np.int64),
            "synthetic_vertex": np.array([p.used_synthetic_vertex for p in products], dtype=np.bool_),
            "tau": ak.zip(tau_fields),
            "det_id": ak.unflatten(raw_det_ids, det_id_counts),
        }

    def write(self, products: Sequence[EventProducts], file_path: str) -> str:
        """
        Write products to a new ROOT file.

        Args:
            products: Products in event order
            file_path: Destination, overwritten if present

        Returns:
            The written path
        """
        if not products:
            raise ValueError("Cannot write an empty product list")

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        branches = self.to_awkward(products)

        try:
            with uproot.recreate(file_path) as root_file:
                tree = root_file.mktree(self.tree_name, branch_types())
                tree.extend(branches)
        except Exception as e:
            self.logger.error(f"Failed to write products to {file_path}: {e}")
            raise

        self.logger.info(f"Wrote {len(products)} events to {file_path}")
        return file_path
