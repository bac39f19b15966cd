"""
Sliding-window peak shaving.

Trims local peaks toward the mean of their neighbours and hands the
trimmed energy to night-hour neighbours in the same window.
"""

from typing import Tuple
import logging

import numpy as np
import pandas as pd

from peak_optimization.config.redistribution_config import (
    DEFAULT_CAPACITY_KWH,
    DEFAULT_NIGHT_HOURS,
)
from peak_optimization.optimization.base_redistributor import BaseRedistributor, RedistributionResult

logger = logging.getLogger(__name__)


class SlidingWindowPeakShaving(BaseRedistributor):
    """
    Peak shaving with a centred sliding window.

    For each interior index i (the full window fits inside the series):
    1. local_mean = mean usage of the other window members
    2. If usage[i] > local_mean * threshold_factor, remove
       (usage[i] - local_mean) * shave_fraction from slot i
    3. Split the removed energy evenly over night-hour neighbours below
       capacity; each takes at most its free space and the rest goes back
       to slot i

    Indices are processed left to right on the evolving buffer.
    """

    name = "peak_shaving"

    def __init__(
        self,
        window_size: int = 5,
        threshold_factor: float = 1.1,
        shave_fraction: float = 0.5,
        night_hours: Tuple[int, ...] = DEFAULT_NIGHT_HOURS,
        capacity_kwh: float = DEFAULT_CAPACITY_KWH,
    ):
        if window_size < 2:
            raise ValueError("window_size must be at least 2")
        if threshold_factor <= 0:
            raise ValueError("threshold_factor must be positive")
        if not (0 < shave_fraction <= 1):
            raise ValueError("shave_fraction must be between 0 and 1")
        if capacity_kwh <= 0:
            raise ValueError("capacity_kwh must be positive")

        self.window_size = window_size
        self.threshold_factor = threshold_factor
        self.shave_fraction = shave_fraction
        self.night_hours = tuple(night_hours)
        self.capacity_kwh = capacity_kwh

    def redistribute(self, usage: pd.Series) -> RedistributionResult:
        values, index = self._working_buffer(usage)
        is_night = self._night_mask(index, self.night_hours)
        half = self.window_size // 2
        n = len(values)

        shaved_slots = 0
        shaved_kwh = 0.0

        for i in range(half, n - half):
            neighbours = [j for j in range(i - half, i + half + 1) if j != i]
            local_mean = values[neighbours].mean()

            if values[i] <= local_mean * self.threshold_factor:
                continue

            reduce = (values[i] - local_mean) * self.shave_fraction
            receivers = [j for j in neighbours if is_night[j] and values[j] < self.capacity_kwh]
            if not receivers:
                continue

            portion = reduce / len(receivers)
            placed = 0.0
            for j in receivers:
                accepted = min(portion, self.capacity_kwh - values[j])
                values[j] += accepted
                placed += accepted

            values[i] -= placed
            if placed > 0:
                shaved_slots += 1
                shaved_kwh += placed

        logger.debug(f"Peak shaving moved {shaved_kwh:.3f} kWh away from {shaved_slots} slots")

        return RedistributionResult(
            usage=self._to_series(values, index),
            method=self.name,
            diagnostics={"shaved_slots": shaved_slots, "shaved_kwh": shaved_kwh},
        )

    def __repr__(self) -> str:
        return (
            f"SlidingWindowPeakShaving(window={self.window_size}, "
            f"threshold={self.threshold_factor:.2f})"
        )
