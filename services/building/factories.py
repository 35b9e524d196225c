"""Construct a candidate builder from its name."""

import logging
from typing import Optional

from domain.config import CaloTauBuilderConfig
from .base import AccumulatingBuilder, CandidateBuilder, StatefulBuilderAdapter
from .calo_tau_builder import CaloTauBuilder

logger = logging.getLogger(__name__)

BUILDER_DICT = {
    CaloTauBuilder.name: CaloTauBuilder,
}


def register_builder(builder_class: type):
    """
    Make a builder class selectable by its ``name``.

    Args:
        builder_class: CandidateBuilder or AccumulatingBuilder subclass
    """
    if not issubclass(builder_class, (CandidateBuilder, AccumulatingBuilder)):
        raise TypeError(f"{builder_class.__name__} is not a candidate builder")
    if not builder_class.name:
        raise ValueError(f"{builder_class.__name__} has no name")
    BUILDER_DICT[builder_class.name] = builder_class
    return builder_class


def build_candidate_builder(name: str, config: Optional[CaloTauBuilderConfig] = None) -> CandidateBuilder:
    """
    Instantiate a builder variant.

    Accumulating variants come back wrapped in a StatefulBuilderAdapter.

    Args:
        name: Registered builder name
        config: Builder parameters

    Returns:
        CandidateBuilder instance
    """
    if name not in BUILDER_DICT:
        raise ValueError(f"Unknown builder {name!r}, available: {sorted(BUILDER_DICT)}")

    builder = BUILDER_DICT[name](config)
    if isinstance(builder, AccumulatingBuilder):
        logger.info(f"Wrapping accumulating builder {name!r}")
        return StatefulBuilderAdapter(builder)
    return builder
