"""
Valley filling.

Fills night-hour valleys with energy taken from the current global peak,
a fraction at a time, with a fixed iteration cap per valley.
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


class ValleyFilling(BaseRedistributor):
    """
    Iterative transfer from the global peak into night valleys.

    For each night slot in series order, repeat at most max_iterations times:
    1. Find the current global maximum (first position on ties)
    2. Stop if it does not exceed the valley
    3. Move min(peak * transfer_factor, capacity - valley) into the valley
    4. Stop when nothing is transferable or the valley is full
    """

    name = "valley_filling"

    def __init__(
        self,
        transfer_factor: float = 0.2,
        max_iterations: int = 50,
        night_hours: Tuple[int, ...] = DEFAULT_NIGHT_HOURS,
        capacity_kwh: float = DEFAULT_CAPACITY_KWH,
    ):
        if not (0 < transfer_factor <= 1):
            raise ValueError("transfer_factor must be between 0 and 1")
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if capacity_kwh <= 0:
            raise ValueError("capacity_kwh must be positive")

        self.transfer_factor = transfer_factor
        self.max_iterations = max_iterations
        self.night_hours = tuple(night_hours)
        self.capacity_kwh = capacity_kwh

    def redistribute(self, usage: pd.Series) -> RedistributionResult:
        values, index = self._working_buffer(usage)
        valleys = np.flatnonzero(self._night_mask(index, self.night_hours))

        max_used = 0
        capped_valleys = 0
        moved_total = 0.0

        for valley in valleys:
            iterations = 0
            while values[valley] < self.capacity_kwh and iterations < self.max_iterations:
                peak = int(np.argmax(values))
                if values[peak] <= values[valley]:
                    break

                transferable = min(values[peak] * self.transfer_factor, self.capacity_kwh - values[valley])
                if transferable <= 0:
                    break

                values[valley] += transferable
                values[peak] -= transferable
                moved_total += transferable
                iterations += 1

            max_used = max(max_used, iterations)
            if iterations == self.max_iterations and values[valley] < self.capacity_kwh:
                capped_valleys += 1

        if capped_valleys:
            logger.debug(f"Valley filling: {capped_valleys} valleys stopped at the iteration cap")
        logger.debug(f"Valley filling moved {moved_total:.3f} kWh into {len(valleys)} valleys")

        return RedistributionResult(
            usage=self._to_series(values, index),
            method=self.name,
            diagnostics={
                "max_iterations_used": max_used,
                "capped_valleys": capped_valleys,
                "moved_kwh": moved_total,
            },
        )

    def __repr__(self) -> str:
        return (
            f"ValleyFilling(transfer_factor={self.transfer_factor:.2f}, "
            f"max_iterations={self.max_iterations})"
        )
