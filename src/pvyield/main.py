"""
PV Yield Model - Main Interface

This module provides the high-level interface for loss chain evaluation and
lifetime degradation projection. It ties together configuration management,
the loss chain evaluator, the degradation projector and result export.

Usage:
    from pvyield.main import PVYieldModel

    model = PVYieldModel()
    model.create_config_from_template('pvsyst_default')
    result = model.run_evaluation(daily_ghi=5.5, capacity_kwp=1000, ambient_temp=25)
    projection = model.run_projection(daily_ghi=5.5, capacity_kwp=1000, ambient_temp=25)
    model.export_results('results/')
"""

import argparse
import logging
import sys
import uuid
from typing import Any, Dict, List, Optional

from .config.config_manager import DEFAULT_TEMPLATE, LossChainConfigManager
from .config.loss_config import LossChainConfig
from .degradation.projector import DegradationProjector, ProjectionSummary, YearlyProjection
from .exceptions import InvalidInputError
from .export.data_export import DataExporter
from .losschain.evaluator import LossChainEvaluator, LossChainResult
from .losschain.stages import override_stage

logger = logging.getLogger(__name__)


class PVYieldModel:
    """
    Main interface for PV yield analysis.

    Features:
    - Configuration from files or templates
    - Single-year loss chain evaluation
    - Editable stage magnitudes (recompute from a new config)
    - 20-year degradation projection with lifetime summary
    - CSV and JSON export
    """

    def __init__(self, config: Optional[LossChainConfig] = None,
                 log_level: str = "INFO"):
        """
        Initialize PV yield model

        Args:
            config: Loss chain configuration
            log_level: Logging level
        """
        logger.setLevel(getattr(logging, log_level.upper()))

        self.config = config
        self.config_manager = LossChainConfigManager()
        self.evaluator = LossChainEvaluator()
        self.projector = DegradationProjector(self.evaluator)

        # Results of the most recent runs
        self.run_id = uuid.uuid4().hex
        self.inputs: Dict[str, float] = {}
        self.result: Optional[LossChainResult] = None
        self.projection: Optional[List[YearlyProjection]] = None
        self.summary: Optional[ProjectionSummary] = None

    def load_config(self, filepath: str) -> LossChainConfig:
        """
        Load loss chain configuration from file

        Args:
            filepath: Path to configuration file

        Returns:
            Loaded configuration
        """
        logger.info(f"Loading configuration from {filepath}")
        try:
            config = self.config_manager.load_config(filepath)
        except (FileNotFoundError, InvalidInputError) as e:
            logger.error(f"Failed to load configuration: {e}")
            raise
        self._set_config(config)
        return self.config

    def create_config_from_template(self, template_name: str = DEFAULT_TEMPLATE,
                                    **kwargs) -> LossChainConfig:
        """
        Create configuration from predefined template

        Args:
            template_name: Name of template
            **kwargs: Group overrides

        Returns:
            Created configuration
        """
        logger.info(f"Creating configuration from template: {template_name}")
        self._set_config(self.config_manager.create_from_template(template_name, **kwargs))
        return self.config

    def set_stage_magnitude(self, stage_name: str, magnitude_percent: float) -> LossChainConfig:
        """
        Replace one stage's magnitude, producing a new current configuration

        Args:
            stage_name: Canonical stage name
            magnitude_percent: New magnitude (%)

        Returns:
            The new configuration
        """
        self._set_config(override_stage(self._require_config(), stage_name, magnitude_percent))
        return self.config

    def run_evaluation(self, daily_ghi: float, capacity_kwp: float,
                       ambient_temp: float) -> LossChainResult:
        """
        Evaluate one year of the loss chain with the current configuration

        Args:
            daily_ghi: Daily GHI (kWh/m²/day)
            capacity_kwp: Installed capacity (kWp)
            ambient_temp: Ambient temperature (°C)

        Returns:
            Loss chain result
        """
        config = self._require_config()
        self._clear_results()
        try:
            self.result = self.evaluator.evaluate(daily_ghi, capacity_kwp, ambient_temp, config)
        except InvalidInputError as e:
            logger.error(f"Loss chain evaluation failed: {e}")
            raise

        self.inputs = self._record_inputs(daily_ghi, capacity_kwp, ambient_temp)
        logger.info(f"Year 1: E_grid={self.result.annual_e_grid_kwh:.0f} kWh, "
                    f"PR={self.result.performance_ratio:.2f}%")
        return self.result

    def run_projection(self, daily_ghi: float, capacity_kwp: float,
                       ambient_temp: float) -> List[YearlyProjection]:
        """
        Project 20 years of output with the current configuration

        The year 1 loss chain is kept as the current evaluation result, so
        exported breakdowns always belong to the same run as the projection.

        Args:
            daily_ghi: Daily GHI (kWh/m²/day)
            capacity_kwp: Installed capacity (kWp)
            ambient_temp: Ambient temperature (°C)

        Returns:
            Yearly projection records
        """
        config = self._require_config()
        self._clear_results()
        try:
            projection = self.projector.project(daily_ghi, capacity_kwp, ambient_temp, config)
            result = self.evaluator.evaluate(daily_ghi, capacity_kwp, ambient_temp,
                                             self.projector.derive_year_config(config, 1))
        except InvalidInputError as e:
            logger.error(f"Degradation projection failed: {e}")
            raise

        self.projection = projection
        self.result = result
        self.summary = self.projector.summarize(self.projection)
        self.inputs = self._record_inputs(daily_ghi, capacity_kwp, ambient_temp)
        return self.projection

    def export_results(self, output_dir: str, formats: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Export the most recent results

        Args:
            output_dir: Output directory
            formats: Export formats ("csv", "json"); both by default

        Returns:
            Mapping of format to written path(s)
        """
        if self.result is None and self.projection is None:
            raise ValueError("No results to export. Run an evaluation or projection first.")

        formats = formats or ["csv", "json"]
        exporter = DataExporter(output_dir)
        written: Dict[str, Any] = {}

        logger.info(f"Exporting results to {output_dir}...")
        for fmt in formats:
            if fmt == "csv":
                written["csv"] = exporter.export_csv(
                    self.run_id, self.projection, self.result, self.summary)
            elif fmt == "json":
                written["json"] = exporter.export_json(
                    self.run_id, self.projection, self.result, self.summary, self.inputs)
            else:
                raise ValueError(f"Unsupported export format: {fmt}")

        return written

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of the most recent results

        Returns:
            Summary dictionary
        """
        summary: Dict[str, Any] = {'inputs': dict(self.inputs)}

        if self.result is not None:
            summary['loss_chain'] = {
                'annual_e_grid_kwh': self.result.annual_e_grid_kwh,
                'performance_ratio': self.result.performance_ratio,
                'specific_yield': self.result.specific_yield,
                'total_loss_percent': self.result.total_loss_percent
            }

        if self.summary is not None:
            summary['lifetime'] = {
                'lifetime_energy_kwh': self.summary.lifetime_energy_kwh,
                'final_cumulative_degradation': self.summary.final_cumulative_degradation,
                'average_degradation_rate': self.summary.average_degradation_rate,
                'average_performance_ratio': self.summary.average_performance_ratio,
                'years_to_90_percent': self.summary.years_to_90_percent,
                'years_to_80_percent': self.summary.years_to_80_percent
            }

        return summary

    def list_available_templates(self) -> List[str]:
        """List available configuration templates"""
        return self.config_manager.list_templates()

    def _require_config(self) -> LossChainConfig:
        if self.config is None:
            raise ValueError("No configuration loaded. Load a file or create one from a template first.")
        return self.config

    def _set_config(self, config: LossChainConfig):
        # Results computed under the previous configuration no longer apply
        self.config = config
        self._clear_results()

    def _clear_results(self):
        self.inputs = {}
        self.result = None
        self.projection = None
        self.summary = None

    @staticmethod
    def _record_inputs(daily_ghi: float, capacity_kwp: float, ambient_temp: float) -> Dict[str, float]:
        return {
            'daily_ghi': daily_ghi,
            'capacity_kwp': capacity_kwp,
            'ambient_temp': ambient_temp
        }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PV Yield Loss Chain Model")
    parser.add_argument("--log-level", default="WARNING", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("evaluate", "Evaluate one year of the loss chain"),
                            ("project", "Project 20 years of degradation")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--ghi", type=float, required=True, help="Daily GHI (kWh/m²/day)")
        sub.add_argument("--capacity", type=float, required=True, help="Installed capacity (kWp)")
        sub.add_argument("--temp", type=float, default=25.0, help="Ambient temperature (°C)")
        source = sub.add_mutually_exclusive_group()
        source.add_argument("--config", help="Configuration file (JSON or YAML)")
        source.add_argument("--template", default=DEFAULT_TEMPLATE, help="Configuration template")
        sub.add_argument("--export-dir", help="Export results to this directory")
        sub.add_argument("--format", action="append", choices=["csv", "json"],
                         help="Export format (repeatable)")

    subparsers.add_parser("templates", help="List available templates")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command line interface for the PV yield model"""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper()))

    model = PVYieldModel(log_level=args.log_level)

    if args.command == "templates":
        print("Available templates:")
        for template in model.list_available_templates():
            print(f"  - {template}")
        return 0

    try:
        if args.config:
            model.load_config(args.config)
        else:
            model.create_config_from_template(args.template)

        if args.command == "evaluate":
            result = model.run_evaluation(args.ghi, args.capacity, args.temp)
            print(f"{'Stage':<22}{'Loss (%)':>10}{'Energy after (kWh)':>22}")
            for item in result.breakdown:
                print(f"{item.stage:<22}{item.loss_percent:>10.2f}{item.energy_after_kwh:>22.0f}")
            print(f"\nE_grid: {result.annual_e_grid_kwh:.0f} kWh/year")
            print(f"Performance Ratio: {result.performance_ratio:.2f}%")
        else:
            projection = model.run_projection(args.ghi, args.capacity, args.temp)
            print(f"{'Year':>4}{'E_grid (kWh)':>16}{'PR (%)':>9}{'Degradation (%)':>17}")
            for year in projection:
                print(f"{year.year:>4}{year.annual_e_grid_kwh:>16.0f}"
                      f"{year.performance_ratio:>9.2f}{year.cumulative_degradation:>17.2f}")
            print(f"\nLifetime energy: {model.summary.lifetime_energy_kwh:.0f} kWh")
            print(f"-{projection[-1].cumulative_degradation:.1f}% by Year {projection[-1].year}")
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.export_dir:
        written = model.export_results(args.export_dir, args.format)
        print(f"\nExported: {written}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
