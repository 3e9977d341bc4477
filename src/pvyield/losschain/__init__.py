"""
Loss Chain Module

This module provides the ordered PVsyst-style loss chain and its evaluator.
"""

from .stages import (
    CANONICAL_STAGES,
    GHI_INPUT,
    STAGE_NAMES,
    LossBreakdownItem,
    LossStage,
    StageKind,
    override_stage,
)
from .evaluator import HourlyOutput, LossChainEvaluator, LossChainResult

__all__ = [
    "CANONICAL_STAGES",
    "GHI_INPUT",
    "STAGE_NAMES",
    "HourlyOutput",
    "LossBreakdownItem",
    "LossChainEvaluator",
    "LossChainResult",
    "LossStage",
    "StageKind",
    "override_stage",
]
