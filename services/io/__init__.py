"""
I/O services.

Event readers and the product writer.
"""

from .event_reader import (
    event_from_dict,
    event_from_flat,
    events_from_awkward,
    events_from_flat_arrays,
    read_events,
)
from .product_writer import ProductWriter

__all__ = [
    "event_from_dict",
    "event_from_flat",
    "events_from_awkward",
    "events_from_flat_arrays",
    "read_events",
    "ProductWriter",
]
