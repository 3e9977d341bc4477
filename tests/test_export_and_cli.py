"""
Export, model facade and command line tests.
"""

import json
import sys
from pathlib import Path

import pandas as pd
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pvyield.config import LossChainConfigManager
from pvyield.degradation import DegradationProjector
from pvyield.exceptions import InvalidInputError
from pvyield.export import DataExporter, breakdown_to_dataframe, projection_to_dataframe
from pvyield.losschain import STAGE_NAMES, LossChainEvaluator
from pvyield.main import PVYieldModel, main


@pytest.fixture
def config():
    return LossChainConfigManager().create_from_template("pvsyst_default")


class TestDataExport:
    """Test DataFrame conversion and file export"""

    def test_projection_dataframe(self, config):
        projection = DegradationProjector().project(5.5, 1000, 25, config)
        df = projection_to_dataframe(projection)

        assert len(df) == 20
        assert list(df.index) == list(range(1, 21))
        assert df.loc[1, "Cumulative_Degradation_percent"] == 0.0
        assert df["E_Grid_kWh"].iloc[-1] == pytest.approx(projection[-1].annual_e_grid_kwh)

    def test_breakdown_dataframe(self, config):
        result = LossChainEvaluator().evaluate(5.5, 1000, 25, config)
        df = breakdown_to_dataframe(result)

        assert list(df["Stage"]) == list(STAGE_NAMES)
        assert df.loc[df["Stage"] == "Transposition", "Loss_percent"].iloc[0] < 0

    def test_export_csv(self, tmp_path, config):
        projector = DegradationProjector()
        projection = projector.project(5.5, 1000, 25, config)
        result = LossChainEvaluator().evaluate(5.5, 1000, 25, config)

        exporter = DataExporter(tmp_path / "out")
        written = exporter.export_csv("abc123", projection, result, projector.summarize(projection))

        assert set(written) == {"projection", "breakdown", "summary"}
        for path in written.values():
            assert Path(path).exists()
        assert len(pd.read_csv(written["projection"])) == 20
        assert len(pd.read_csv(written["breakdown"])) == len(STAGE_NAMES)

    def test_export_json(self, tmp_path, config):
        projection = DegradationProjector().project(5.5, 1000, 25, config)

        path = DataExporter(tmp_path).export_json("abc123", projection=projection,
                                                  inputs={"daily_ghi": 5.5})
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        assert data["metadata"]["run_id"] == "abc123"
        assert data["metadata"]["inputs"] == {"daily_ghi": 5.5}
        assert len(data["projection"]) == 20
        assert "loss_chain" not in data


class TestPVYieldModel:
    """Test the high-level model interface"""

    def test_evaluate_and_project(self, tmp_path):
        model = PVYieldModel(log_level="WARNING")
        model.create_config_from_template("pvsyst_default")

        result = model.run_evaluation(5.5, 1000, 25)
        projection = model.run_projection(5.5, 1000, 25)

        assert projection[0].annual_e_grid_kwh == pytest.approx(result.annual_e_grid_kwh)
        summary = model.get_summary()
        assert summary["inputs"]["capacity_kwp"] == 1000
        assert summary["lifetime"]["lifetime_energy_kwh"] > 0

        written = model.export_results(str(tmp_path))
        assert set(written) == {"csv", "json"}

    def test_edit_stage(self):
        model = PVYieldModel(log_level="WARNING")
        original = model.create_config_from_template("pvsyst_default")
        before = model.run_evaluation(5.5, 1000, 25).annual_e_grid_kwh

        model.set_stage_magnitude("Soiling", 6.0)
        after = model.run_evaluation(5.5, 1000, 25).annual_e_grid_kwh

        assert after < before
        assert original.array.soiling_loss == 3.0

    def test_requires_config(self):
        with pytest.raises(ValueError):
            PVYieldModel(log_level="WARNING").run_evaluation(5.5, 1000, 25)

    def test_invalid_input_propagates(self):
        model = PVYieldModel(log_level="WARNING")
        model.create_config_from_template("lossless")
        with pytest.raises(InvalidInputError):
            model.run_projection(-1.0, 1000, 25)

    def test_export_without_results(self, tmp_path):
        with pytest.raises(ValueError):
            PVYieldModel(log_level="WARNING").export_results(str(tmp_path))

    def test_projection_replaces_earlier_evaluation(self, tmp_path):
        """Exported loss chain belongs to the same run as the projection"""
        model = PVYieldModel(log_level="WARNING")
        model.create_config_from_template("pvsyst_default")
        model.run_evaluation(5.5, 1000, 25)
        projection = model.run_projection(3.0, 200, 25)

        assert model.result.theoretical_energy_kwh == pytest.approx(3.0 * 200 * 365)
        assert model.result.annual_e_grid_kwh == pytest.approx(projection[0].annual_e_grid_kwh)

        written = model.export_results(str(tmp_path), ["json"])
        with open(written["json"], encoding="utf-8") as f:
            data = json.load(f)
        assert data["metadata"]["inputs"]["daily_ghi"] == 3.0
        assert data["loss_chain"]["theoretical_energy_kwh"] == pytest.approx(3.0 * 200 * 365)

    def test_evaluation_discards_earlier_projection(self):
        model = PVYieldModel(log_level="WARNING")
        model.create_config_from_template("pvsyst_default")
        model.run_projection(5.5, 1000, 25)
        model.run_evaluation(3.0, 200, 25)

        assert model.projection is None
        assert model.summary is None
        assert "lifetime" not in model.get_summary()

    def test_config_change_discards_results(self, tmp_path):
        model = PVYieldModel(log_level="WARNING")
        model.create_config_from_template("pvsyst_default")
        model.run_evaluation(5.5, 1000, 25)
        model.run_projection(5.5, 1000, 25)

        model.set_stage_magnitude("Soiling", 20.0)

        assert model.result is None
        assert model.projection is None
        assert model.inputs == {}
        with pytest.raises(ValueError):
            model.export_results(str(tmp_path))

        projection = model.run_projection(5.5, 1000, 25)
        assert model.result.annual_e_grid_kwh == pytest.approx(projection[0].annual_e_grid_kwh)


class TestCommandLine:
    """Test the command line interface"""

    def test_templates(self, capsys):
        assert main(["templates"]) == 0
        assert "pvsyst_default" in capsys.readouterr().out

    def test_evaluate(self, capsys):
        assert main(["evaluate", "--ghi", "5.5", "--capacity", "1000", "--temp", "25"]) == 0
        out = capsys.readouterr().out
        assert "Performance Ratio" in out
        assert "Unavailability" in out

    def test_project_with_export(self, tmp_path, capsys):
        code = main(["project", "--ghi", "5.5", "--capacity", "1000",
                     "--template", "utility_scale",
                     "--export-dir", str(tmp_path), "--format", "json"])

        assert code == 0
        assert "by Year 20" in capsys.readouterr().out
        assert len(list(tmp_path.glob("*.json"))) == 1

    def test_config_file(self, tmp_path, capsys, config):
        path = tmp_path / "config.yaml"
        LossChainConfigManager().save_config(config, str(path), format="yaml")

        assert main(["evaluate", "--ghi", "4.0", "--capacity", "50", "--config", str(path)]) == 0

    def test_invalid_input_exit_code(self, capsys):
        assert main(["project", "--ghi", "5.5", "--capacity", "0"]) == 2
        assert "Error" in capsys.readouterr().err

    def test_log_level_case_insensitive(self, capsys):
        assert main(["--log-level", "debug", "templates"]) == 0

    def test_unknown_log_level(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--log-level", "LOUD", "templates"])
        assert exc.value.code == 2
