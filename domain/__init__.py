"""
Domain models for calo tau production.

Pure data structures with validation, no business logic.
"""

from .vertex import ReferencePoint, SYNTHETIC_QUALITY
from .candidates import Jet, Track, CaloHit, DetId, TauTagInfo, CaloTau
from .events import EventRecord, EventProducts
from .statistics import ProductionStatistics, ProductionStatisticsCollector
from .errors import ProductionError, MissingDependency, InvalidEventData
from .config import (
    PipelineConfig,
    InputConfig,
    OutputConfig,
    ProducerConfig,
    CaloTauBuilderConfig,
)

__all__ = [
    "ReferencePoint",
    "SYNTHETIC_QUALITY",
    "Jet",
    "Track",
    "CaloHit",
    "DetId",
    "TauTagInfo",
    "CaloTau",
    "EventRecord",
    "EventProducts",
    "ProductionStatistics",
    "ProductionStatisticsCollector",
    "ProductionError",
    "MissingDependency",
    "InvalidEventData",
    "PipelineConfig",
    "InputConfig",
    "OutputConfig",
    "ProducerConfig",
    "CaloTauBuilderConfig",
]
