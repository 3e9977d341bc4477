"""
Configuration management tests.
"""

import json
import sys
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pvyield.config import LossChainConfig, LossChainConfigManager
from pvyield.exceptions import InvalidInputError


class TestLossChainConfig:
    """Test the configuration schema"""

    def test_lossless(self):
        config = LossChainConfig.lossless()
        data = config.to_dict()

        assert set(data) == {"irradiance", "array", "system"}
        assert data["array"]["temperature_coefficient"] == 0.0
        assert data["array"]["noct"] is None

    def test_frozen(self):
        """Configurations cannot be edited in place"""
        config = LossChainConfig.lossless()
        with pytest.raises(ValidationError):
            config.array.lid_loss = 3.0

    def test_hashable(self):
        """Frozen configs can key a memoization cache"""
        cache = {LossChainConfig.lossless(): "lossless"}
        assert cache[LossChainConfig.lossless()] == "lossless"

    def test_with_overrides(self):
        config = LossChainConfig.lossless()
        edited = config.with_overrides(array={"lid_loss": 1.5}, system={"inverter_loss": 2.0})

        assert edited.array.lid_loss == 1.5
        assert edited.system.inverter_loss == 2.0
        assert config.array.lid_loss == 0.0

    def test_with_overrides_unknown_group(self):
        with pytest.raises(InvalidInputError):
            LossChainConfig.lossless().with_overrides(battery={"loss": 1.0})

    def test_from_dict_rejects_non_finite(self):
        data = LossChainConfig.lossless().to_dict()
        data["system"]["inverter_loss"] = float("nan")
        with pytest.raises(InvalidInputError):
            LossChainConfig.from_dict(data)


class TestLossChainConfigManager:
    """Test templates, file I/O and merging"""

    def setup_method(self):
        self.manager = LossChainConfigManager()

    def test_templates(self):
        templates = self.manager.list_templates()

        assert "pvsyst_default" in templates
        assert "lossless" in templates
        for name in templates:
            assert isinstance(self.manager.create_from_template(name), LossChainConfig)

    def test_default_template_values(self):
        config = self.manager.create_from_template("pvsyst_default")

        assert config.array.lid_loss == 2.0
        assert config.array.module_degradation_loss == 0.5
        assert config.system.unavailability_loss == 1.76

    def test_template_overrides(self):
        config = self.manager.create_from_template("pvsyst_default", array={"soiling_loss": 5.0})

        assert config.array.soiling_loss == 5.0
        assert config.array.lid_loss == 2.0
        # Template itself is not modified
        assert self.manager.templates["pvsyst_default"]["array"]["soiling_loss"] == 3.0

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            self.manager.create_from_template("offshore_floating")

    @pytest.mark.parametrize("suffix,fmt", [(".json", "json"), (".yaml", "yaml")])
    def test_save_and_load(self, tmp_path, suffix, fmt):
        config = self.manager.create_from_template("utility_scale")
        path = tmp_path / f"config{suffix}"

        self.manager.save_config(config, str(path), format=fmt)
        loaded = self.manager.load_config(str(path))

        assert loaded == config
        assert self.manager.config == config

    def test_load_yaml_written_by_hand(self, tmp_path):
        data = self.manager.templates["rooftop_commercial"]
        path = tmp_path / "rooftop.yml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")

        assert self.manager.load_config(str(path)).array.noct == 48.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            self.manager.load_config(str(tmp_path / "missing.json"))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(InvalidInputError):
            self.manager.load_config(str(path))

    def test_incomplete_file(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"array": {"lid_loss": 1.0}}), encoding="utf-8")
        with pytest.raises(InvalidInputError):
            self.manager.load_config(str(path))

    def test_merge_with_defaults(self):
        merged = self.manager.merge_with_defaults({"array": {"lid_loss": 1.0}})

        assert merged.array.lid_loss == 1.0
        assert merged.array.soiling_loss == 3.0
        assert merged.system.inverter_loss == 1.55

    def test_merge_with_nothing(self):
        assert self.manager.merge_with_defaults(None) == self.manager.create_from_template("pvsyst_default")

    def test_compare_configs(self):
        a = self.manager.create_from_template("pvsyst_default")
        b = a.with_overrides(system={"transformer_loss": 1.0})

        differences = self.manager.compare_configs(a, b)

        assert differences == {"system.transformer_loss": {"config1": 0.0, "config2": 1.0}}

    def test_schema(self):
        schema = self.manager.get_config_schema()
        assert set(schema["properties"]) == {"irradiance", "array", "system"}
