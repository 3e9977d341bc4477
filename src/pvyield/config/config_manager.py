"""
Loss Chain Configuration Manager

This module handles loading, saving, templating and comparison of loss chain
configurations. Files may be JSON or YAML; partial configurations saved by
older versions of a project are merged onto the default template.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ..exceptions import InvalidInputError
from .loss_config import LossChainConfig

logger = logging.getLogger(__name__)


DEFAULT_TEMPLATE = "pvsyst_default"


class LossChainConfigManager:
    """
    Loss chain configuration management.

    Features:
    - JSON/YAML configuration loading and validation
    - Pre-defined loss templates
    - Deep merge of partial saved configurations with defaults
    - Configuration comparison and schema export
    """

    def __init__(self):
        """Initialize configuration manager"""
        self.config: Optional[LossChainConfig] = None
        self.templates = self._load_default_templates()

    def load_config(self, filepath: str) -> LossChainConfig:
        """
        Load configuration from file

        Args:
            filepath: Path to a .json, .yaml or .yml file

        Returns:
            Validated loss chain configuration
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise InvalidInputError(f"Error parsing configuration {filepath}: {e}") from e

        logger.debug("Loaded configuration data from %s", path)
        self.config = LossChainConfig.from_dict(data)
        return self.config

    def save_config(self, config: LossChainConfig, filepath: str, format: str = "json"):
        """
        Save configuration to file

        Args:
            config: Configuration to save
            filepath: Output file path
            format: Output format ("json" or "yaml")
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = config.to_dict()

        with open(path, 'w', encoding='utf-8') as f:
            if format.lower() in ['yaml', 'yml']:
                yaml.safe_dump(data, f, default_flow_style=False, indent=2, sort_keys=False)
            else:
                json.dump(data, f, indent=2)

        logger.info("Saved configuration to %s", path)

    def create_from_template(self, template_name: str, **kwargs) -> LossChainConfig:
        """
        Create configuration from predefined template

        Args:
            template_name: Name of template
            **kwargs: Group overrides, e.g. ``array={"lid_loss": 1.0}``

        Returns:
            Validated configuration
        """
        if template_name not in self.templates:
            raise ValueError(f"Template not found: {template_name}")

        template_data = copy.deepcopy(self.templates[template_name])
        self._deep_update(template_data, kwargs)

        return LossChainConfig.from_dict(template_data)

    def merge_with_defaults(self, saved: Optional[Mapping[str, Any]]) -> LossChainConfig:
        """
        Fill the gaps of a partial saved configuration from the default template

        Args:
            saved: Possibly incomplete configuration mapping (or None)

        Returns:
            Complete validated configuration
        """
        merged = copy.deepcopy(self.templates[DEFAULT_TEMPLATE])
        if saved:
            self._deep_update(merged, dict(saved))
        return LossChainConfig.from_dict(merged)

    def validate_config(self, config_data: Dict) -> LossChainConfig:
        """Validate a configuration mapping"""
        return LossChainConfig.from_dict(config_data)

    def get_config_schema(self) -> Dict:
        """JSON schema for the configuration"""
        return LossChainConfig.model_json_schema()

    def list_templates(self) -> List[str]:
        """List available templates"""
        return list(self.templates.keys())

    def _load_default_templates(self) -> Dict[str, Dict]:
        """Load default loss templates"""
        return {
            "pvsyst_default": {
                "irradiance": {
                    "transposition_gain": 8.0,
                    "iam_loss": 2.29,
                    "spectral_loss": 0.5
                },
                "array": {
                    "shading_loss": 3.78,
                    "soiling_loss": 3.0,
                    "irradiance_level_loss": 0.8,
                    "module_quality_loss": 0.5,
                    "lid_loss": 2.0,
                    "module_degradation_loss": 0.5,
                    "mismatch_loss": 3.68,
                    "temperature_coefficient": -0.40,
                    "reference_temperature": 25.0,
                    "noct": None
                },
                "system": {
                    "wiring_loss": 1.1,
                    "inverter_loss": 1.55,
                    "ac_wiring_loss": 0.5,
                    "transformer_loss": 0.0,
                    "auxiliary_loss": 0.0,
                    "unavailability_loss": 1.76
                }
            },

            "utility_scale": {
                "irradiance": {
                    "transposition_gain": 10.0,
                    "iam_loss": 2.0,
                    "spectral_loss": 0.5
                },
                "array": {
                    "shading_loss": 1.5,
                    "soiling_loss": 2.0,
                    "irradiance_level_loss": 0.6,
                    "module_quality_loss": 0.3,
                    "lid_loss": 1.5,
                    "module_degradation_loss": 0.4,
                    "mismatch_loss": 2.0,
                    "temperature_coefficient": -0.34,
                    "reference_temperature": 25.0,
                    "noct": 45.0
                },
                "system": {
                    "wiring_loss": 1.5,
                    "inverter_loss": 1.8,
                    "ac_wiring_loss": 0.6,
                    "transformer_loss": 1.0,
                    "auxiliary_loss": 0.3,
                    "unavailability_loss": 1.0
                }
            },

            "rooftop_commercial": {
                "irradiance": {
                    "transposition_gain": 3.0,
                    "iam_loss": 2.5,
                    "spectral_loss": 0.5
                },
                "array": {
                    "shading_loss": 4.5,
                    "soiling_loss": 3.5,
                    "irradiance_level_loss": 1.0,
                    "module_quality_loss": 0.5,
                    "lid_loss": 2.0,
                    "module_degradation_loss": 0.55,
                    "mismatch_loss": 2.5,
                    "temperature_coefficient": -0.40,
                    "reference_temperature": 25.0,
                    "noct": 48.0
                },
                "system": {
                    "wiring_loss": 1.2,
                    "inverter_loss": 2.0,
                    "ac_wiring_loss": 0.5,
                    "transformer_loss": 0.0,
                    "auxiliary_loss": 0.0,
                    "unavailability_loss": 1.5
                }
            },

            "lossless": LossChainConfig.lossless().to_dict(),
        }

    def _deep_update(self, base_dict: Dict, update_dict: Dict):
        """Deep update dictionary"""
        for key, value in update_dict.items():
            if key in base_dict and isinstance(base_dict[key], dict) and isinstance(value, Mapping):
                self._deep_update(base_dict[key], value)
            else:
                base_dict[key] = value

    def compare_configs(self, config1: LossChainConfig, config2: LossChainConfig) -> Dict:
        """
        Compare two configurations field by field

        Args:
            config1: First configuration
            config2: Second configuration

        Returns:
            Mapping of "group.field" to the two differing values
        """
        differences = {}
        data1 = config1.to_dict()
        data2 = config2.to_dict()

        for group, fields in data1.items():
            for name, value in fields.items():
                other = data2[group][name]
                if value != other:
                    differences[f"{group}.{name}"] = {
                        'config1': value,
                        'config2': other
                    }

        return differences
