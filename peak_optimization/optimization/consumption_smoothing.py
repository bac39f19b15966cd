"""
Consumption smoothing.

Nudges each slot toward its moving-average baseline, then rescales so the
total is unchanged.
"""

import logging
import math

import numpy as np
import pandas as pd

from peak_optimization.optimization.base_redistributor import BaseRedistributor, RedistributionResult

logger = logging.getLogger(__name__)


class ConsumptionSmoothing(BaseRedistributor):
    """
    Soft moving-average smoothing with total preservation.

    The window for slot i covers [i - window_size // 2, i + ceil(window_size / 2))
    clipped to the series, so it shrinks near the edges.
    """

    name = "smoothing"

    def __init__(self, window_size: int = 5, nudge_factor: float = 0.1):
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        if not (0 <= nudge_factor <= 1):
            raise ValueError("nudge_factor must be between 0 and 1")

        self.window_size = window_size
        self.nudge_factor = nudge_factor

    def moving_average(self, values: np.ndarray) -> np.ndarray:
        n = len(values)
        before = self.window_size // 2
        after = math.ceil(self.window_size / 2)
        baseline = np.empty(n)
        for i in range(n):
            start = max(0, i - before)
            end = min(n, i + after)
            baseline[i] = values[start:end].mean()
        return baseline

    def redistribute(self, usage: pd.Series) -> RedistributionResult:
        values, index = self._working_buffer(usage)
        original_total = values.sum()

        baseline = self.moving_average(values)
        values += (baseline - values) * self.nudge_factor

        new_total = values.sum()
        ratio = original_total / new_total if new_total > 0 else 1.0
        values *= ratio

        logger.debug(f"Smoothing rescaled by {ratio:.6f} to keep {original_total:.3f} kWh")

        return RedistributionResult(
            usage=self._to_series(values, index),
            method=self.name,
            diagnostics={"rescale_ratio": float(ratio)},
        )

    def __repr__(self) -> str:
        return f"ConsumptionSmoothing(window={self.window_size}, nudge={self.nudge_factor:.2f})"
