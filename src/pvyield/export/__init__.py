"""
Export Module

This module provides tabular export of loss chain and projection results.
"""

from .data_export import DataExporter, breakdown_to_dataframe, projection_to_dataframe

__all__ = ["DataExporter", "breakdown_to_dataframe", "projection_to_dataframe"]
