"""
Candidate building services.

Builder interfaces, the reference variant and the name-based factory.
"""

from .base import (
    BuildResult,
    RecordConsumer,
    CandidateBuilder,
    AccumulatingBuilder,
    StatefulBuilderAdapter,
)
from .calo_tau_builder import CaloTauBuilder
from .factories import BUILDER_DICT, register_builder, build_candidate_builder

__all__ = [
    "BuildResult",
    "RecordConsumer",
    "CandidateBuilder",
    "AccumulatingBuilder",
    "StatefulBuilderAdapter",
    "CaloTauBuilder",
    "BUILDER_DICT",
    "register_builder",
    "build_candidate_builder",
]
