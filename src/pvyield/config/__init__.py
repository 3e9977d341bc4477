"""
Configuration Module

This module provides the loss chain configuration schema and tools for
loading, templating and validating configurations.
"""

from .loss_config import ArrayLosses, IrradianceLosses, LossChainConfig, SystemLosses
from .config_manager import LossChainConfigManager

__all__ = [
    "ArrayLosses",
    "IrradianceLosses",
    "LossChainConfig",
    "LossChainConfigManager",
    "SystemLosses",
]
