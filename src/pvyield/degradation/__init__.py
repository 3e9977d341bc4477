"""
Degradation Module

This module projects grid energy over the operating life of a PV plant.
"""

from .projector import DegradationProjector, ProjectionSummary, YearlyProjection

__all__ = ["DegradationProjector", "ProjectionSummary", "YearlyProjection"]
