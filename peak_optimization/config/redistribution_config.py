"""
Redistribution configuration.

Policy values used by the redistribution algorithms and fee calculation:
slot capacity, night hours, Top-N shift size and the window/threshold
parameters of the other methods. Loadable from YAML.
"""

from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, Tuple, Union
import yaml

DEFAULT_NIGHT_HOURS: Tuple[int, ...] = (22, 23, 0, 1, 2, 3, 4, 5)
DEFAULT_CAPACITY_KWH = 10.0
DEFAULT_PEAK_COUNT = 3


@dataclass
class RedistributionConfig:
    """
    Parameters for all redistribution methods.

    Defaults reproduce the Ellevio-style setup: night hours 22-05,
    10 kWh maximum per slot, and three billed peaks.
    """
    # Shared
    capacity_kwh: float = DEFAULT_CAPACITY_KWH
    night_hours: Tuple[int, ...] = field(default_factory=lambda: DEFAULT_NIGHT_HOURS)
    peak_count: int = DEFAULT_PEAK_COUNT

    # Top-N peak shift
    top_n: int = 3
    shift_fraction: float = 0.5

    # Sliding-window peak shaving
    window_size: int = 5
    threshold_factor: float = 1.1
    shave_fraction: float = 0.5

    # Valley filling
    transfer_factor: float = 0.2
    max_valley_iterations: int = 50

    # Consumption smoothing
    smoothing_window_size: int = 5
    nudge_factor: float = 0.1

    def __post_init__(self):
        self.night_hours = tuple(int(h) for h in self.night_hours)
        self.validate()

    def validate(self) -> None:
        """
        Check parameter ranges.

        Raises:
            ValueError: If any parameter is out of range
        """
        if self.capacity_kwh <= 0:
            raise ValueError("capacity_kwh must be positive")
        if any(not (0 <= h <= 23) for h in self.night_hours):
            raise ValueError(f"night_hours must be within 0-23, got {self.night_hours}")
        if self.peak_count < 1:
            raise ValueError("peak_count must be at least 1")
        if self.top_n < 0:
            raise ValueError("top_n cannot be negative")
        if not (0 < self.shift_fraction <= 1):
            raise ValueError("shift_fraction must be between 0 and 1")
        if self.window_size < 2:
            raise ValueError("window_size must be at least 2")
        if self.threshold_factor <= 0:
            raise ValueError("threshold_factor must be positive")
        if not (0 < self.shave_fraction <= 1):
            raise ValueError("shave_fraction must be between 0 and 1")
        if not (0 < self.transfer_factor <= 1):
            raise ValueError("transfer_factor must be between 0 and 1")
        if self.max_valley_iterations < 1:
            raise ValueError("max_valley_iterations must be at least 1")
        if self.smoothing_window_size < 1:
            raise ValueError("smoothing_window_size must be at least 1")
        if not (0 <= self.nudge_factor <= 1):
            raise ValueError("nudge_factor must be between 0 and 1")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "RedistributionConfig":
        """
        Create configuration from a dictionary.

        Unknown keys are rejected; missing keys keep their defaults.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config_dict) - known
        if unknown:
            raise ValueError(f"Unknown redistribution parameters: {sorted(unknown)}")

        return cls(**config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary (night_hours as list)."""
        data = asdict(self)
        data["night_hours"] = list(self.night_hours)
        return data

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "RedistributionConfig":
        """
        Load configuration from a YAML file.

        The file must contain a 'redistribution' root key.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            RedistributionConfig instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If YAML is empty or missing the root key
        """
        yaml_path = Path(yaml_path)

        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if not isinstance(config_dict, dict):
            raise ValueError(f"Empty or invalid YAML file: {yaml_path}")

        if "redistribution" not in config_dict:
            raise ValueError("YAML must contain 'redistribution' root key")

        section = config_dict["redistribution"] or {}
        if not isinstance(section, dict):
            raise ValueError("'redistribution' must be a mapping of parameters")

        return cls.from_dict(section)

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump({"redistribution": self.to_dict()}, f, default_flow_style=False, sort_keys=False)
