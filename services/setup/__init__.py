"""
Setup record services.

Magnetic field model, track transformation and the named record container.
"""

from .records import (
    MAGNETIC_FIELD,
    TRACK_BUILDER,
    MagneticField,
    UniformMagneticField,
    TransientTrack,
    TrackBuilder,
    FieldTrackBuilder,
    SetupRecords,
    default_setup_records,
)

__all__ = [
    "MAGNETIC_FIELD",
    "TRACK_BUILDER",
    "MagneticField",
    "UniformMagneticField",
    "TransientTrack",
    "TrackBuilder",
    "FieldTrackBuilder",
    "SetupRecords",
    "default_setup_records",
]
