"""
Unit tests for RedistributionConfig.
"""

from pathlib import Path

import pytest
import yaml

from peak_optimization.config.redistribution_config import (
    RedistributionConfig,
    DEFAULT_NIGHT_HOURS,
)

EXAMPLE_CONFIG = Path(__file__).parents[2] / "configs" / "redistribution.example.yaml"


class TestRedistributionConfigDefaults:
    """Test default values."""

    def test_default_values(self):
        """Test default redistribution parameters."""
        config = RedistributionConfig()
        assert config.capacity_kwh == 10.0
        assert config.night_hours == (22, 23, 0, 1, 2, 3, 4, 5)
        assert config.peak_count == 3
        assert config.top_n == 3
        assert config.shift_fraction == 0.5
        assert config.window_size == 5
        assert config.threshold_factor == 1.1
        assert config.transfer_factor == 0.2
        assert config.max_valley_iterations == 50
        assert config.smoothing_window_size == 5
        assert config.nudge_factor == 0.1

    def test_night_hours_normalized_to_tuple(self):
        """Test list input becomes a tuple."""
        config = RedistributionConfig(night_hours=[0, 1, 2])
        assert config.night_hours == (0, 1, 2)


class TestRedistributionConfigValidation:
    """Test parameter validation."""

    @pytest.mark.parametrize("overrides", [
        {"capacity_kwh": 0},
        {"night_hours": (22, 24)},
        {"peak_count": 0},
        {"top_n": -1},
        {"shift_fraction": 0.0},
        {"shift_fraction": 1.5},
        {"window_size": 1},
        {"transfer_factor": 0.0},
        {"max_valley_iterations": 0},
        {"nudge_factor": 2.0},
    ])
    def test_invalid_values(self, overrides):
        """Test out-of-range parameters raise ValueError."""
        with pytest.raises(ValueError):
            RedistributionConfig(**overrides)

    def test_unknown_key(self):
        """Test unknown dictionary keys are rejected."""
        with pytest.raises(ValueError, match="Unknown redistribution parameters"):
            RedistributionConfig.from_dict({"capacity": 12})


class TestRedistributionConfigYaml:
    """Test YAML loading and saving."""

    def test_from_yaml_partial(self, tmp_path):
        """Test unspecified keys keep defaults."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"redistribution": {"capacity_kwh": 12.0, "top_n": 5}}))

        config = RedistributionConfig.from_yaml(path)
        assert config.capacity_kwh == 12.0
        assert config.top_n == 5
        assert config.night_hours == DEFAULT_NIGHT_HOURS

    def test_yaml_round_trip(self, tmp_path):
        """Test to_yaml output loads back."""
        config = RedistributionConfig(capacity_kwh=8.0, night_hours=(0, 1))
        path = tmp_path / "nested" / "config.yaml"
        config.to_yaml(path)

        assert RedistributionConfig.from_yaml(path) == config

    def test_missing_file(self, tmp_path):
        """Test missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            RedistributionConfig.from_yaml(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        """Test empty YAML raises ValueError."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError, match="Empty"):
            RedistributionConfig.from_yaml(path)

    def test_missing_root_key(self, tmp_path):
        """Test YAML without root key raises ValueError."""
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"capacity_kwh": 10}))
        with pytest.raises(ValueError, match="redistribution"):
            RedistributionConfig.from_yaml(path)

    @pytest.mark.parametrize("content", ["- 1\n- 2\n", "42\n", "just text\n"])
    def test_non_mapping_root(self, tmp_path, content):
        """Test list or scalar YAML root raises ValueError."""
        path = tmp_path / "bad.yaml"
        path.write_text(content)
        with pytest.raises(ValueError, match="invalid YAML"):
            RedistributionConfig.from_yaml(path)

    def test_non_mapping_section(self, tmp_path):
        """Test a list under the root key raises ValueError."""
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"redistribution": ["capacity_kwh"]}))
        with pytest.raises(ValueError, match="mapping"):
            RedistributionConfig.from_yaml(path)

    def test_example_config(self):
        """Test the shipped example configuration loads."""
        config = RedistributionConfig.from_yaml(EXAMPLE_CONFIG)
        assert config == RedistributionConfig()
