"""
Vertex domain model.

Event-level reference point with its position uncertainty.
"""

from dataclasses import dataclass, field

import numpy as np

# chi2, ndof and track multiplicity given to a sampled vertex
SYNTHETIC_QUALITY = 1

_PSD_TOLERANCE = 1e-12


def _as_covariance(covariance) -> np.ndarray:
    matrix = np.array(covariance, dtype=float)
    if matrix.shape != (3, 3):
        raise ValueError(f"covariance must be 3x3, got shape {matrix.shape}")
    return matrix


@dataclass(frozen=True, eq=False)
class ReferencePoint:
    """
    Primary vertex used as origin for candidate construction.

    Either read from an upstream vertex collection or synthesized by
    ``VertexResolver`` when that collection is empty.
    """

    x: float
    y: float
    z: float
    covariance: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))
    chi2: float = 0.0
    ndof: float = 0.0
    n_tracks: int = 0

    def __post_init__(self):
        """Validate the covariance matrix and quality fields."""
        matrix = _as_covariance(self.covariance)
        if not np.allclose(matrix, matrix.T):
            raise ValueError("covariance must be symmetric")
        if np.linalg.eigvalsh(matrix).min() < -_PSD_TOLERANCE:
            raise ValueError("covariance must be positive semi-definite")
        if self.chi2 < 0:
            raise ValueError(f"chi2 must be non-negative, got {self.chi2}")
        if self.n_tracks < 0:
            raise ValueError(f"n_tracks must be non-negative, got {self.n_tracks}")

        # Read-only copy so the frozen instance cannot be mutated through the array
        matrix.setflags(write=False)
        object.__setattr__(self, "covariance", matrix)

    @property
    def position(self) -> np.ndarray:
        """Position as a length-3 array."""
        return np.array([self.x, self.y, self.z])

    @property
    def errors(self) -> np.ndarray:
        """Per-axis standard deviations from the covariance diagonal."""
        return np.sqrt(np.diag(self.covariance))

    @property
    def normalized_chi2(self) -> float:
        """chi2 / ndof, or 0 for a vertex without degrees of freedom."""
        if self.ndof == 0:
            return 0.0
        return self.chi2 / self.ndof

    @classmethod
    def from_dict(cls, data: dict) -> 'ReferencePoint':
        """
        Create a ReferencePoint from a plain record (e.g., one JSON entry).

        Args:
            data: Mapping with x, y, z and optional covariance / quality keys

        Returns:
            Validated ReferencePoint
        """
        covariance = data.get("covariance")
        if covariance is None:
            covariance = np.zeros((3, 3))
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            z=float(data["z"]),
            covariance=covariance,
            chi2=float(data.get("chi2") or 0.0),
            ndof=float(data.get("ndof") or 0.0),
            n_tracks=int(data.get("n_tracks") or 0),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "covariance": self.covariance.tolist(),
            "chi2": self.chi2,
            "ndof": self.ndof,
            "n_tracks": self.n_tracks,
        }
