"""
State handlers for job execution.

Each handler implements logic for a specific job state.
"""

from .base import StateHandler
from .load_events_handler import LoadEventsHandler
from .production_handler import ProductionHandler
from .write_output_handler import WriteOutputHandler

__all__ = [
    "StateHandler",
    "LoadEventsHandler",
    "ProductionHandler",
    "WriteOutputHandler",
]
