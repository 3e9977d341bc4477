"""
Loss Chain Evaluator Module

This module converts daily horizontal irradiance into annual grid-injected
energy through the ordered PVsyst-style loss cascade. Each stage scales the
running energy multiplicatively, so losses compound on the base left by the
stages before them.

References:
- PVsyst User Manual, "Loss diagram"
- IEC 61724-1 Photovoltaic system performance monitoring
- "Photovoltaic Systems Engineering" - Messenger & Ventre (NOCT model)
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Mapping, Sequence, Tuple, Union

import numpy as np

from ..config.loss_config import LossChainConfig
from ..exceptions import InvalidInputError
from .stages import (
    CANONICAL_STAGES,
    GHI_INPUT,
    TEMPERATURE,
    LossBreakdownItem,
    LossStage,
    StageKind,
    configured_magnitude,
)

logger = logging.getLogger(__name__)


ConfigInput = Union[LossChainConfig, Mapping]


@dataclass(frozen=True)
class LossChainResult:
    """One year's energy flow through the loss chain"""
    breakdown: Tuple[LossBreakdownItem, ...]
    performance_ratio: float          # PR (%)
    annual_e_grid_kwh: float          # E_grid (kWh/year)
    theoretical_energy_kwh: float     # GHI x capacity x 365 (kWh/year)
    specific_yield: float             # kWh/kWp/year
    total_loss_percent: float         # 100 - PR
    temperature_loss_percent: float   # Signed, negative for a gain
    cell_temperature: float           # °C

    def stage(self, name: str) -> LossBreakdownItem:
        """Look up a breakdown item by stage name"""
        for item in self.breakdown:
            if item.stage == name:
                return item
        raise KeyError(name)


@dataclass(frozen=True)
class HourlyOutput:
    """Grid energy for one hour of a daily profile"""
    hour: int
    e_grid_kwh: float
    temperature_loss: float           # Signed (%)
    cell_temperature: float           # °C


class LossChainEvaluator:
    """
    PVsyst-style sequential loss chain.

    Features:
    - Fixed canonical stage order
    - Temperature stage derived from ambient conditions (loss or gain)
    - Optional NOCT cell temperature model
    - Annual and hourly evaluation
    """

    DAYS_PER_YEAR = 365
    PEAK_SUN_HOURS = 5.0          # Spreads daily GHI for peak irradiance estimate
    NOCT_IRRADIANCE = 800.0       # W/m² at NOCT test conditions
    NOCT_AMBIENT = 20.0           # °C at NOCT test conditions

    def evaluate(self, daily_ghi: float, capacity_kwp: float, ambient_temp: float,
                 config: ConfigInput) -> LossChainResult:
        """
        Evaluate one year of the loss chain

        Args:
            daily_ghi: Daily global horizontal irradiance (kWh/m²/day)
            capacity_kwp: Installed DC capacity (kWp)
            ambient_temp: Average ambient temperature (°C)
            config: Loss chain configuration or equivalent mapping

        Returns:
            Stage breakdown, performance ratio and annual grid energy
        """
        self._check_inputs(daily_ghi, capacity_kwp, ambient_temp)
        config = self._coerce_config(config)

        theoretical = daily_ghi * capacity_kwp * self.DAYS_PER_YEAR

        peak_irradiance = daily_ghi * 1000.0 / self.PEAK_SUN_HOURS
        cell_temp = self.calculate_cell_temperature(ambient_temp, peak_irradiance, config)
        temperature_effect = self.calculate_temperature_effect(cell_temp, config)

        stages = self.build_stages(config, temperature_effect)

        running = theoretical
        breakdown = [LossBreakdownItem(GHI_INPUT, 0.0, False, running)]
        for stage in stages:
            running *= stage.factor
            breakdown.append(LossBreakdownItem(
                stage.name, stage.magnitude_percent, stage.is_gain, running))

        performance_ratio = 100.0 * running / theoretical if theoretical > 0 else 0.0

        logger.debug("Loss chain: GHI=%.3f kWh/m²/day, %.1f kWp -> E_grid=%.1f kWh, PR=%.2f%%",
                     daily_ghi, capacity_kwp, running, performance_ratio)

        return LossChainResult(
            breakdown=tuple(breakdown),
            performance_ratio=performance_ratio,
            annual_e_grid_kwh=running,
            theoretical_energy_kwh=theoretical,
            specific_yield=running / capacity_kwp,
            total_loss_percent=100.0 - performance_ratio,
            temperature_loss_percent=temperature_effect,
            cell_temperature=cell_temp,
        )

    def evaluate_hourly(self, hourly_ghi_wm2: Sequence[float], hourly_temp: Sequence[float],
                        capacity_kwp: float, config: ConfigInput) -> List[HourlyOutput]:
        """
        Evaluate the loss chain hour by hour for a daily profile

        Args:
            hourly_ghi_wm2: Hourly irradiance (W/m²)
            hourly_temp: Hourly ambient temperature (°C)
            capacity_kwp: Installed DC capacity (kWp)
            config: Loss chain configuration or equivalent mapping

        Returns:
            Grid energy per hour
        """
        try:
            ghi = np.asarray(hourly_ghi_wm2, dtype=float)
            temp = np.asarray(hourly_temp, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Hourly profiles must be numeric: {e}") from e

        if ghi.shape != temp.shape or ghi.ndim != 1:
            raise InvalidInputError("Hourly irradiance and temperature must be 1-D and the same length")
        if not (np.all(np.isfinite(ghi)) and np.all(np.isfinite(temp))):
            raise InvalidInputError("Hourly profiles must contain only finite values")
        if np.any(ghi < 0):
            raise InvalidInputError("Hourly irradiance must be non-negative")
        self._check_capacity(capacity_kwp)
        config = self._coerce_config(config)

        # Every stage except temperature is independent of the hour
        static_factor = 1.0
        for stage in self.build_stages(config, 0.0):
            if stage.name != TEMPERATURE:
                static_factor *= stage.factor

        cell_temp = np.where(ghi > 0, self.calculate_cell_temperature(temp, ghi, config), temp)
        coefficient = abs(config.array.temperature_coefficient)
        temp_effect = np.where(ghi > 0, (cell_temp - config.array.reference_temperature) * coefficient, 0.0)
        if np.any(temp_effect >= 100.0):
            raise InvalidInputError("Derived temperature loss reaches 100% or more")

        e_grid = ghi / 1000.0 * capacity_kwp * static_factor * (1.0 - temp_effect / 100.0)

        return [
            HourlyOutput(hour=i, e_grid_kwh=float(e_grid[i]),
                         temperature_loss=float(temp_effect[i]),
                         cell_temperature=float(cell_temp[i]))
            for i in range(len(ghi))
        ]

    def calculate_cell_temperature(self, ambient_temp, irradiance_wm2, config: LossChainConfig):
        """
        Estimate cell temperature

        With no NOCT configured the cell is taken to run at ambient
        temperature. Otherwise Tcell = Tamb + (NOCT - 20) x G / 800.

        Args:
            ambient_temp: Ambient temperature (°C), scalar or array
            irradiance_wm2: Plane irradiance (W/m²), scalar or array
            config: Loss chain configuration

        Returns:
            Cell temperature (°C)
        """
        noct = config.array.noct
        if noct is None:
            return ambient_temp
        return ambient_temp + (noct - self.NOCT_AMBIENT) * (irradiance_wm2 / self.NOCT_IRRADIANCE)

    def calculate_temperature_effect(self, cell_temp: float, config: LossChainConfig) -> float:
        """
        Signed temperature effect in percent (positive = loss, negative = gain)

        Args:
            cell_temp: Cell temperature (°C)
            config: Loss chain configuration

        Returns:
            Temperature effect (%)
        """
        coefficient = abs(config.array.temperature_coefficient)
        effect = (cell_temp - config.array.reference_temperature) * coefficient
        if effect >= 100.0:
            raise InvalidInputError(
                f"Derived temperature loss of {effect:.1f}% at {cell_temp:.1f} °C is not physical")
        return effect

    def build_stages(self, config: LossChainConfig, temperature_effect: float) -> List[LossStage]:
        """Realize the canonical stage list for one evaluation"""
        stages = []
        for definition in CANONICAL_STAGES:
            if definition.group is None:
                kind = StageKind.GAIN if temperature_effect < 0 else StageKind.LOSS
                stages.append(LossStage(definition.name, kind, abs(temperature_effect)))
            else:
                stages.append(LossStage(definition.name, definition.kind,
                                        configured_magnitude(definition, config)))
        return stages

    @staticmethod
    def _coerce_config(config: ConfigInput) -> LossChainConfig:
        if isinstance(config, LossChainConfig):
            return config
        return LossChainConfig.from_dict(config)

    def _check_inputs(self, daily_ghi: float, capacity_kwp: float, ambient_temp: float):
        if not self._is_finite_number(daily_ghi) or daily_ghi < 0:
            raise InvalidInputError(f"Daily GHI must be a finite non-negative number, got {daily_ghi!r}")
        self._check_capacity(capacity_kwp)
        if not self._is_finite_number(ambient_temp):
            raise InvalidInputError(f"Ambient temperature must be finite, got {ambient_temp!r}")

    def _check_capacity(self, capacity_kwp: float):
        if not self._is_finite_number(capacity_kwp) or capacity_kwp <= 0:
            raise InvalidInputError(f"Capacity must be a finite positive number, got {capacity_kwp!r}")

    @staticmethod
    def _is_finite_number(value) -> bool:
        if isinstance(value, bool):
            return False
        try:
            return math.isfinite(value)
        except TypeError:
            return False
