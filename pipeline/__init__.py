"""
Pipeline execution layer.

Per-event producer and the high-level job executor.
"""

from .event_pipeline import EventPipeline
from .executor import PipelineExecutor

__all__ = ["EventPipeline", "PipelineExecutor"]
