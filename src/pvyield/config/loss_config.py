"""
Loss Chain Configuration Module

This module defines the configuration schema for the PVsyst-style loss chain.
Loss parameters are grouped by subsystem (irradiance, array, system) and every
loss is stored as a non-negative percentage. Configurations are frozen: a new
scenario is always a new configuration value.

References:
- PVsyst User Manual, "Array and system losses"
- IEC 61724-1 Photovoltaic system performance monitoring
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import InvalidInputError


def _percent(description: str):
    """Required loss magnitude in percent (0-100)"""
    return Field(..., ge=0.0, le=100.0, description=description)


class _LossGroup(BaseModel):
    """Common settings for all configuration groups"""
    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)


class IrradianceLosses(_LossGroup):
    """Optical effects between horizontal irradiance and the module surface"""
    transposition_gain: float = _percent("Plane-of-array gain from tilt (%)")
    iam_loss: float = _percent("Incidence angle modifier loss (%)")
    spectral_loss: float = _percent("Spectral correction loss (%)")


class ArrayLosses(_LossGroup):
    """PV array losses, including degradation and temperature behaviour"""
    shading_loss: float = _percent("Near and electrical shading loss (%)")
    soiling_loss: float = _percent("Soiling loss (%)")
    irradiance_level_loss: float = _percent("PV loss due to irradiance level (%)")
    module_quality_loss: float = _percent("Module quality loss (%)")
    lid_loss: float = _percent("Light-induced degradation, first year only (%)")
    module_degradation_loss: float = _percent("Annual module degradation rate (%/year)")
    mismatch_loss: float = _percent("Module mismatch loss (%)")
    temperature_coefficient: float = Field(
        -0.40, description="Power temperature coefficient (%/°C), sign ignored")
    reference_temperature: float = Field(
        25.0, description="Cell temperature with no thermal loss (°C)")
    noct: Optional[float] = Field(
        None, ge=20.0, description="Nominal operating cell temperature (°C)")


class SystemLosses(_LossGroup):
    """Losses from the DC cabling through to the grid connection point"""
    wiring_loss: float = _percent("DC ohmic wiring loss (%)")
    inverter_loss: float = _percent("Inverter efficiency loss (%)")
    ac_wiring_loss: float = _percent("AC cabling loss (%)")
    transformer_loss: float = _percent("Transformer loss (%)")
    auxiliary_loss: float = _percent("Auxiliary consumption (%)")
    unavailability_loss: float = _percent("System unavailability (%)")


class LossChainConfig(_LossGroup):
    """Complete loss chain configuration"""
    irradiance: IrradianceLosses
    array: ArrayLosses
    system: SystemLosses

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LossChainConfig":
        """
        Build a validated configuration from a plain mapping

        Args:
            data: Nested mapping with irradiance, array and system sections

        Returns:
            Validated configuration

        Raises:
            InvalidInputError: If the mapping is malformed
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError(
                f"Loss chain configuration must be a mapping, got {type(data).__name__}")
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise InvalidInputError(f"Invalid loss chain configuration: {e}") from e

    @classmethod
    def lossless(cls) -> "LossChainConfig":
        """Configuration with every stage magnitude at zero"""
        return cls(
            irradiance=IrradianceLosses(transposition_gain=0.0, iam_loss=0.0, spectral_loss=0.0),
            array=ArrayLosses(
                shading_loss=0.0,
                soiling_loss=0.0,
                irradiance_level_loss=0.0,
                module_quality_loss=0.0,
                lid_loss=0.0,
                module_degradation_loss=0.0,
                mismatch_loss=0.0,
                temperature_coefficient=0.0,
            ),
            system=SystemLosses(
                wiring_loss=0.0,
                inverter_loss=0.0,
                ac_wiring_loss=0.0,
                transformer_loss=0.0,
                auxiliary_loss=0.0,
                unavailability_loss=0.0,
            ),
        )

    def with_overrides(self, **groups: Dict[str, Any]) -> "LossChainConfig":
        """
        Return a new configuration with selected fields replaced

        Args:
            **groups: Group name mapped to a dict of field overrides,
                e.g. ``array={"lid_loss": 1.5}``

        Returns:
            New validated configuration; this one is left untouched
        """
        data = self.to_dict()
        for group, fields in groups.items():
            if group not in data:
                raise InvalidInputError(f"Unknown loss group: {group}")
            if not isinstance(fields, Mapping):
                raise InvalidInputError(f"Overrides for {group} must be a mapping")
            data[group].update(fields)
        return LossChainConfig.from_dict(data)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Plain nested dictionary representation"""
        return self.model_dump()
