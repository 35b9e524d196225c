"""
VertexResolver service - Resolves the event reference point.

Single responsibility: pick the upstream primary vertex, or sample a
synthetic one when the upstream collection is empty.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from domain.vertex import ReferencePoint, SYNTHETIC_QUALITY


def resolve_vertex(
    external_vertices: Sequence[ReferencePoint],
    fallback_sigmas: tuple[float, float, float],
    rng: np.random.Generator,
) -> ReferencePoint:
    """
    Resolve the reference point of one event.

    The first upstream vertex wins; later ones are ignored. Without any
    upstream vertex, a point is sampled from independent normal
    distributions centred on the origin, with a diagonal covariance of the
    squared sigmas and all quality fields set to ``SYNTHETIC_QUALITY``.

    Args:
        external_vertices: Upstream vertices of the event, possibly empty
        fallback_sigmas: (sigma_x, sigma_y, sigma_z) of the synthetic vertex
        rng: Random source used for sampling

    Returns:
        The resolved ReferencePoint
    """
    if len(external_vertices) > 0:
        return external_vertices[0]

    sigmas = np.asarray(fallback_sigmas, dtype=float)
    x, y, z = rng.normal(loc=0.0, scale=sigmas)

    return ReferencePoint(
        x=float(x),
        y=float(y),
        z=float(z),
        covariance=np.diag(sigmas ** 2),
        chi2=float(SYNTHETIC_QUALITY),
        ndof=float(SYNTHETIC_QUALITY),
        n_tracks=SYNTHETIC_QUALITY,
    )


class VertexResolver:
    """
    Resolves one ReferencePoint per event.

    Holds the fallback sigmas and the random source, so repeated calls on a
    seeded resolver are reproducible.
    """

    def __init__(
        self,
        sigma_x: float,
        sigma_y: float,
        sigma_z: float,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize resolver.

        Args:
            sigma_x: Synthetic vertex sigma along x
            sigma_y: Synthetic vertex sigma along y
            sigma_z: Synthetic vertex sigma along z
            rng: Random source; a fresh unseeded generator when omitted
        """
        for name, value in (("sigma_x", sigma_x), ("sigma_y", sigma_y), ("sigma_z", sigma_z)):
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        self._sigmas = (float(sigma_x), float(sigma_y), float(sigma_z))
        self._rng = rng if rng is not None else np.random.default_rng()
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, producer_config, rng: Optional[np.random.Generator] = None) -> 'VertexResolver':
        """Build a resolver from a ProducerConfig, seeding from it when no rng is given."""
        if rng is None:
            rng = np.random.default_rng(producer_config.seed)
        return cls(*producer_config.fallback_sigmas, rng=rng)

    def resolve(self, external_vertices: Sequence[ReferencePoint]) -> ReferencePoint:
        """Resolve the event reference point. Never raises."""
        if len(external_vertices) == 0:
            self.logger.debug(f"No upstream vertex, sampling synthetic vertex with sigmas {self._sigmas}")
        elif len(external_vertices) > 1:
            self.logger.debug(f"Using first of {len(external_vertices)} upstream vertices")
        return resolve_vertex(external_vertices, self._sigmas, self._rng)

    @staticmethod
    def is_synthetic(vertex: ReferencePoint) -> bool:
        """
        Check whether a vertex carries the synthetic quality signature.

        Upstream vertices may coincidentally match it; callers that need
        certainty track the branch themselves.
        """
        return (
            vertex.chi2 == SYNTHETIC_QUALITY
            and vertex.ndof == SYNTHETIC_QUALITY
            and vertex.n_tracks == SYNTHETIC_QUALITY
        )

    @property
    def sigmas(self) -> tuple[float, float, float]:
        return self._sigmas
