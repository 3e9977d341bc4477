"""
PV Yield Loss Chain Model
=========================

Energy-yield and degradation engine for PV project analysis.

Main Components:
- PVsyst-style sequential loss chain (irradiance to grid)
- 20-year degradation projection (one-shot LID, compounding module degradation)
- Configuration templates and JSON/YAML loading
- CSV/JSON export

Usage:
    >>> from pvyield import LossChainEvaluator, DegradationProjector, LossChainConfigManager
    >>> config = LossChainConfigManager().create_from_template('pvsyst_default')
    >>> result = LossChainEvaluator().evaluate(5.5, 1000, 25, config)
    >>> projection = DegradationProjector().project(5.5, 1000, 25, config)
"""

from .exceptions import InvalidInputError
from .config import ArrayLosses, IrradianceLosses, LossChainConfig, LossChainConfigManager, SystemLosses
from .losschain import LossBreakdownItem, LossChainEvaluator, LossChainResult, override_stage
from .degradation import DegradationProjector, ProjectionSummary, YearlyProjection

__version__ = "1.0.0"

__all__ = [
    "ArrayLosses",
    "DegradationProjector",
    "InvalidInputError",
    "IrradianceLosses",
    "LossBreakdownItem",
    "LossChainConfig",
    "LossChainConfigManager",
    "LossChainEvaluator",
    "LossChainResult",
    "ProjectionSummary",
    "SystemLosses",
    "YearlyProjection",
    "override_stage",
]
