"""
Vertexing services.

Resolution of the per-event reference point.
"""

from .vertex_resolver import VertexResolver, resolve_vertex

__all__ = ["VertexResolver", "resolve_vertex"]
