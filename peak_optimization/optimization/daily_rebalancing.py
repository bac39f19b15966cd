"""
Daily rebalancing (daglig ombalansering).

Equalizes usage toward each calendar day's mean through repeated pairwise
transfers, subject to slot capacity.
"""

import logging

import numpy as np
import pandas as pd

from peak_optimization.config.redistribution_config import DEFAULT_CAPACITY_KWH
from peak_optimization.optimization.base_redistributor import BaseRedistributor, RedistributionResult

logger = logging.getLogger(__name__)


class DailyRebalancing(BaseRedistributor):
    """
    Pairwise equalization toward the daily mean.

    Within each calendar date, repeat full passes over ordered pairs (i, j)
    with usage[i] > mean and usage[j] < mean, moving
    min(excess_i, deficit_j, capacity - usage[j]) from i to j, until a pass
    moves nothing. Moves no larger than `tolerance` count as nothing.
    """

    name = "daily_rebalancing"

    def __init__(self, capacity_kwh: float = DEFAULT_CAPACITY_KWH, tolerance: float = 1e-9):
        if capacity_kwh <= 0:
            raise ValueError("capacity_kwh must be positive")
        if tolerance < 0:
            raise ValueError("tolerance cannot be negative")

        self.capacity_kwh = capacity_kwh
        self.tolerance = tolerance

    def _rebalance_day(self, values: np.ndarray, positions: np.ndarray) -> int:
        """Rebalance one day in place. Returns number of passes."""
        target = values[positions].mean()
        passes = 0

        changed = True
        while changed:
            changed = False
            passes += 1
            for i in positions:
                for j in positions:
                    if i == j:
                        continue
                    if values[i] > target and values[j] < target:
                        transferable = min(
                            values[i] - target,
                            target - values[j],
                            self.capacity_kwh - values[j],
                        )
                        if transferable > self.tolerance:
                            values[i] -= transferable
                            values[j] += transferable
                            changed = True

        return passes

    def redistribute(self, usage: pd.Series) -> RedistributionResult:
        values, index = self._working_buffer(usage)

        days = index.normalize()
        total_passes = 0
        for day in pd.unique(days):
            positions = np.flatnonzero(days == day)
            total_passes += self._rebalance_day(values, positions)

        logger.debug(f"Daily rebalancing converged after {total_passes} passes")

        return RedistributionResult(
            usage=self._to_series(values, index),
            method=self.name,
            diagnostics={"passes": total_passes},
        )

    def __repr__(self) -> str:
        return f"DailyRebalancing(capacity={self.capacity_kwh:.1f} kWh)"
