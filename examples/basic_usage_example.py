#!/usr/bin/env python3
"""
Basic Usage Example for the PV Yield Loss Chain Model

This example evaluates a 1 MWp plant with the default PVsyst-style losses,
edits one stage the way an interactive waterfall would, and projects
20 years of degradation.
"""

import sys
from pathlib import Path

# Add the src directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pvyield.main import PVYieldModel
import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Main example function"""
    print("=" * 60)
    print("PV Yield Loss Chain Model - Basic Usage Example")
    print("=" * 60)

    model = PVYieldModel()

    print("\n1. Available configuration templates:")
    for template in model.list_available_templates():
        print(f"   - {template}")

    print("\n2. Evaluating year 1 with the PVsyst default losses...")
    model.create_config_from_template("pvsyst_default")
    result = model.run_evaluation(daily_ghi=5.5, capacity_kwp=1000, ambient_temp=25)
    for item in result.breakdown:
        if item.loss_percent != 0 or item.stage == "GHI Input":
            print(f"   {item.stage:<22}{item.loss_percent:>8.2f}%")
    print(f"   E_grid: {result.annual_e_grid_kwh:,.0f} kWh, PR: {result.performance_ratio:.2f}%")

    print("\n3. Editing soiling to 5% and recomputing...")
    model.set_stage_magnitude("Soiling", 5.0)
    edited = model.run_evaluation(daily_ghi=5.5, capacity_kwp=1000, ambient_temp=25)
    print(f"   E_grid: {edited.annual_e_grid_kwh:,.0f} kWh, PR: {edited.performance_ratio:.2f}%")

    print("\n4. Projecting 20 years...")
    projection = model.run_projection(daily_ghi=5.5, capacity_kwp=1000, ambient_temp=25)
    for year in projection:
        if year.year == 1 or year.year % 5 == 0:
            print(f"   Year {year.year:>2}: {year.annual_e_grid_kwh:>12,.0f} kWh "
                  f"(-{year.cumulative_degradation:.1f}%)")

    summary = model.get_summary()
    print(f"\n   Lifetime energy: {summary['lifetime']['lifetime_energy_kwh']:,.0f} kWh")

    print("\n5. Exporting results...")
    written = model.export_results("results")
    print(f"   {written}")


if __name__ == "__main__":
    main()
