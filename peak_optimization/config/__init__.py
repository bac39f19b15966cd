"""
Configuration module for load redistribution.

Main Components:
    - RedistributionConfig: parameters for all redistribution methods

Usage:
    >>> from peak_optimization.config import RedistributionConfig
    >>> config = RedistributionConfig.from_yaml("configs/redistribution.yaml")
    >>> print(config.capacity_kwh)
"""

from .redistribution_config import (
    RedistributionConfig,
    DEFAULT_NIGHT_HOURS,
    DEFAULT_CAPACITY_KWH,
    DEFAULT_PEAK_COUNT,
)

__all__ = [
    "RedistributionConfig",
    "DEFAULT_NIGHT_HOURS",
    "DEFAULT_CAPACITY_KWH",
    "DEFAULT_PEAK_COUNT",
]
