"""
Linear (weighted) flattening.

Spreads total usage over all slots in proportion to a per-slot weight,
night hours weighted higher.
"""

from typing import Tuple
import logging

import numpy as np
import pandas as pd

from peak_optimization.config.redistribution_config import DEFAULT_NIGHT_HOURS
from peak_optimization.optimization.base_redistributor import BaseRedistributor, RedistributionResult

logger = logging.getLogger(__name__)


class LinearFlatten(BaseRedistributor):
    """
    Bulk reallocation: new_usage = weight * total / sum(weights).

    Applying it twice gives the same result as applying it once.
    """

    name = "linear_flatten"

    def __init__(
        self,
        night_hours: Tuple[int, ...] = DEFAULT_NIGHT_HOURS,
        night_weight: float = 2.0,
        day_weight: float = 1.0,
    ):
        if night_weight <= 0 or day_weight <= 0:
            raise ValueError("Weights must be positive")

        self.night_hours = tuple(night_hours)
        self.night_weight = night_weight
        self.day_weight = day_weight

    def redistribute(self, usage: pd.Series) -> RedistributionResult:
        values, index = self._working_buffer(usage)

        if len(values) == 0:
            return RedistributionResult(usage=self._to_series(values, index), method=self.name)

        weights = np.where(self._night_mask(index, self.night_hours), self.night_weight, self.day_weight)
        kwh_per_weight = values.sum() / weights.sum()
        flattened = weights * kwh_per_weight

        logger.debug(f"Linear flatten: {kwh_per_weight:.3f} kWh per weight unit over {len(values)} slots")

        return RedistributionResult(
            usage=self._to_series(flattened, index),
            method=self.name,
            diagnostics={"kwh_per_weight": float(kwh_per_weight)},
        )

    def __repr__(self) -> str:
        return f"LinearFlatten(night_weight={self.night_weight}, day_weight={self.day_weight})"
