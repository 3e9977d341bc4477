"""
Loss Stages Module

Canonical ordering of the PVsyst-style loss chain and the value types that
describe each stage. The order runs from irradiance, through array-level
effects and DC-to-AC conversion, to system-level effects at the grid
connection. Losses compound on the reduced base of earlier stages, so this
order is part of the model's contract.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from ..config.loss_config import LossChainConfig
from ..exceptions import InvalidInputError


class StageKind(str, Enum):
    """Direction of a stage's effect on energy"""
    LOSS = "loss"
    GAIN = "gain"


@dataclass(frozen=True)
class StageDefinition:
    """Where a stage takes its magnitude from"""
    name: str
    group: Optional[str]          # Config group, None for derived stages
    field: Optional[str]          # Field within the group
    kind: StageKind


@dataclass(frozen=True)
class LossStage:
    """A stage with its realized magnitude for one evaluation"""
    name: str
    kind: StageKind
    magnitude_percent: float      # Always non-negative

    @property
    def is_gain(self) -> bool:
        return self.kind is StageKind.GAIN

    @property
    def factor(self) -> float:
        """Multiplier applied to the running energy"""
        if self.is_gain:
            return 1.0 + self.magnitude_percent / 100.0
        return 1.0 - self.magnitude_percent / 100.0


@dataclass(frozen=True)
class LossBreakdownItem:
    """Realized effect of one stage during one evaluation"""
    stage: str
    magnitude_percent: float      # Unsigned magnitude
    is_gain: bool
    energy_after_kwh: float       # Running energy after this stage

    @property
    def loss_percent(self) -> float:
        """Signed percentage for display (gains are negative)"""
        return -self.magnitude_percent if self.is_gain else self.magnitude_percent


GHI_INPUT = "GHI Input"
TEMPERATURE = "Temperature"

CANONICAL_STAGES: Tuple[StageDefinition, ...] = (
    StageDefinition("Transposition", "irradiance", "transposition_gain", StageKind.GAIN),
    StageDefinition("Shading", "array", "shading_loss", StageKind.LOSS),
    StageDefinition("IAM", "irradiance", "iam_loss", StageKind.LOSS),
    StageDefinition("Soiling", "array", "soiling_loss", StageKind.LOSS),
    StageDefinition("Spectral Correction", "irradiance", "spectral_loss", StageKind.LOSS),
    StageDefinition("Irradiance Level", "array", "irradiance_level_loss", StageKind.LOSS),
    # Kind decided per evaluation from the cell temperature
    StageDefinition(TEMPERATURE, None, None, StageKind.LOSS),
    StageDefinition("Module Quality", "array", "module_quality_loss", StageKind.LOSS),
    StageDefinition("LID", "array", "lid_loss", StageKind.LOSS),
    StageDefinition("Module Degradation", "array", "module_degradation_loss", StageKind.LOSS),
    StageDefinition("Mismatch", "array", "mismatch_loss", StageKind.LOSS),
    StageDefinition("Wiring", "system", "wiring_loss", StageKind.LOSS),
    StageDefinition("Inverter", "system", "inverter_loss", StageKind.LOSS),
    StageDefinition("AC Wiring", "system", "ac_wiring_loss", StageKind.LOSS),
    StageDefinition("Transformer", "system", "transformer_loss", StageKind.LOSS),
    StageDefinition("Auxiliary", "system", "auxiliary_loss", StageKind.LOSS),
    StageDefinition("Unavailability", "system", "unavailability_loss", StageKind.LOSS),
)

STAGE_NAMES: Tuple[str, ...] = (GHI_INPUT,) + tuple(s.name for s in CANONICAL_STAGES)

_BY_NAME: Dict[str, StageDefinition] = {s.name: s for s in CANONICAL_STAGES}


def configured_magnitude(definition: StageDefinition, config: LossChainConfig) -> float:
    """Read a configured stage's magnitude from the config"""
    group = getattr(config, definition.group)
    return float(getattr(group, definition.field))


def override_stage(config: LossChainConfig, stage_name: str,
                   magnitude_percent: float) -> LossChainConfig:
    """
    Produce a new configuration with one stage's magnitude replaced

    This is how an edited waterfall bar is recomputed: the caller keeps its
    current config, derives a new one here and evaluates again.

    Args:
        config: Current configuration (left untouched)
        stage_name: Canonical stage name, e.g. "Soiling"
        magnitude_percent: New non-negative magnitude in percent

    Returns:
        New validated configuration
    """
    definition = _BY_NAME.get(stage_name)
    if definition is None:
        raise InvalidInputError(f"Unknown loss stage: {stage_name}")
    if definition.group is None:
        raise InvalidInputError(
            f"Stage '{stage_name}' is derived from the operating conditions and cannot be overridden")

    return config.with_overrides(**{definition.group: {definition.field: magnitude_percent}})
