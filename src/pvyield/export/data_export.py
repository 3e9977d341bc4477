"""
Data Export
===========

Handles tabular export of loss chain and degradation results.

Classes:
    DataExporter: CSV and JSON export of breakdowns and projections
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from ..degradation.projector import ProjectionSummary, YearlyProjection
from ..losschain.evaluator import LossChainResult

logger = logging.getLogger(__name__)


def projection_to_dataframe(projection: List[YearlyProjection]) -> pd.DataFrame:
    """Yearly projection as a DataFrame indexed by operating year"""
    df = pd.DataFrame({
        'Year': [p.year for p in projection],
        'E_Grid_kWh': [p.annual_e_grid_kwh for p in projection],
        'Performance_Ratio_percent': [p.performance_ratio for p in projection],
        'Cumulative_Degradation_percent': [p.cumulative_degradation for p in projection],
        'Specific_Yield_kWh_kWp': [p.specific_yield for p in projection],
    })
    return df.set_index('Year')


def breakdown_to_dataframe(result: LossChainResult) -> pd.DataFrame:
    """Loss breakdown as a DataFrame, one row per stage in chain order"""
    return pd.DataFrame({
        'Stage': [item.stage for item in result.breakdown],
        'Loss_percent': [item.loss_percent for item in result.breakdown],
        'Is_Gain': [item.is_gain for item in result.breakdown],
        'Energy_After_kWh': [item.energy_after_kwh for item in result.breakdown],
    })


class DataExporter:
    """Export of loss chain results"""

    def __init__(self, export_dir: Union[str, Path] = "exports"):
        """
        Initialize data exporter

        Args:
            export_dir: Directory receiving exported files
        """
        self.export_dir = Path(export_dir)
        self.export_dir.mkdir(parents=True, exist_ok=True)

    def export_csv(self, run_id: str,
                   projection: Optional[List[YearlyProjection]] = None,
                   result: Optional[LossChainResult] = None,
                   summary: Optional[ProjectionSummary] = None) -> Dict[str, str]:
        """
        Export results to CSV, one file per table

        Args:
            run_id: Identifier used in the file names
            projection: Optional yearly projection
            result: Optional single-year loss chain result
            summary: Optional projection summary

        Returns:
            Mapping of table name to written file path
        """
        stem = self._file_stem(run_id)
        written = {}

        if projection is not None:
            path = self.export_dir / f"{stem}_projection.csv"
            projection_to_dataframe(projection).to_csv(path)
            written['projection'] = str(path)

        if result is not None:
            path = self.export_dir / f"{stem}_breakdown.csv"
            breakdown_to_dataframe(result).to_csv(path, index=False)
            written['breakdown'] = str(path)

        if summary is not None:
            path = self.export_dir / f"{stem}_summary.csv"
            summary_df = pd.DataFrame(list(asdict(summary).items()), columns=['Metric', 'Value'])
            summary_df.to_csv(path, index=False)
            written['summary'] = str(path)

        logger.info("Exported %d CSV file(s) to %s", len(written), self.export_dir)
        return written

    def export_json(self, run_id: str,
                    projection: Optional[List[YearlyProjection]] = None,
                    result: Optional[LossChainResult] = None,
                    summary: Optional[ProjectionSummary] = None,
                    inputs: Optional[Dict] = None) -> str:
        """
        Export results to a single JSON document

        Args:
            run_id: Identifier used in the file name and metadata
            projection: Optional yearly projection
            result: Optional single-year loss chain result
            summary: Optional projection summary
            inputs: Optional run inputs recorded in the metadata

        Returns:
            Path to exported file
        """
        filepath = self.export_dir / f"{self._file_stem(run_id)}.json"

        export_data = {
            'metadata': {
                'run_id': run_id,
                'export_timestamp': datetime.now().isoformat(),
                'data_format_version': '1.0',
                'inputs': inputs or {}
            }
        }

        if result is not None:
            export_data['loss_chain'] = {
                'performance_ratio': result.performance_ratio,
                'annual_e_grid_kwh': result.annual_e_grid_kwh,
                'theoretical_energy_kwh': result.theoretical_energy_kwh,
                'specific_yield': result.specific_yield,
                'breakdown': [
                    {
                        'stage': item.stage,
                        'loss_percent': item.loss_percent,
                        'is_gain': item.is_gain,
                        'energy_after_kwh': item.energy_after_kwh
                    }
                    for item in result.breakdown
                ]
            }

        if projection is not None:
            export_data['projection'] = [asdict(p) for p in projection]

        if summary is not None:
            export_data['summary'] = asdict(summary)

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(export_data, f, indent=2)

        logger.info("Exported JSON results to %s", filepath)
        return str(filepath)

    @staticmethod
    def _file_stem(run_id: str) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"pvyield_{run_id[:8]}_{timestamp}"
