"""
Domain exceptions for tau candidate production.

Only genuine failures live here. An event without accepted tag infos, or
without an upstream vertex, is a handled branch and never raises.
"""

from typing import Optional


class ProductionError(Exception):
    """Base class for all production failures."""
    pass


class MissingDependency(ProductionError, RuntimeError):
    """
    A required collaborator or setup record could not be obtained.

    Fatal for the event being processed. Raised before any candidate is
    built, so no partial output exists when it propagates.
    """

    def __init__(self, dependency: str, detail: Optional[str] = None):
        self.dependency = dependency
        self.detail = detail
        message = f"Missing dependency: {dependency}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidEventData(ProductionError, ValueError):
    """Raised by readers when an input record cannot be converted."""
    pass
