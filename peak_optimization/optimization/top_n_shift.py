"""
Top-N peak shift.

Moves a fraction of each of the N highest billable peaks into the
cheapest slots with free capacity, lowest usage first. Every move is
recorded in the transfer log.
"""

from typing import List, Optional, Tuple
import logging

import numpy as np
import pandas as pd

from peak_optimization.config.redistribution_config import (
    DEFAULT_CAPACITY_KWH,
    DEFAULT_NIGHT_HOURS,
)
from peak_optimization.domain.readings import Transfer
from peak_optimization.infrastructure.tariffs.billing_rules import BillingRule, NightDiscountRule
from peak_optimization.optimization.base_redistributor import BaseRedistributor, RedistributionResult

logger = logging.getLogger(__name__)


class TopNPeakShift(BaseRedistributor):
    """
    Shift part of the top N peaks to low-usage target slots.

    Peaks are ranked by the billing rule's billable values (stable
    descending sort, ties broken by position); unbilled slots are never
    peaks. Targets are the slots the
    rule discounts (night hours for the default night-discount rule); when
    the rule discounts nothing, every other slot is a target.

    Peaks are processed in ranked order and targets are re-sorted by their
    current usage for each peak, so later peaks see slots topped up by
    earlier ones.

    Usage:
        >>> shift = TopNPeakShift(top_n=3)
        >>> result = shift.redistribute(usage)
        >>> print(result.transfers_dataframe())
    """

    name = "top_n"

    def __init__(
        self,
        top_n: int = 3,
        shift_fraction: float = 0.5,
        capacity_kwh: float = DEFAULT_CAPACITY_KWH,
        night_hours: Tuple[int, ...] = DEFAULT_NIGHT_HOURS,
        billing_rule: Optional[BillingRule] = None,
    ):
        """
        Initialize Top-N peak shift.

        Args:
            top_n: Number of peaks to shift
            shift_fraction: Fraction of each peak's usage to move (0-1]
            capacity_kwh: Maximum usage a target slot may reach
            night_hours: Night hours used when no billing rule is given
            billing_rule: Rule used for ranking peaks and choosing targets
        """
        if top_n < 0:
            raise ValueError("top_n cannot be negative")
        if not (0 < shift_fraction <= 1):
            raise ValueError("shift_fraction must be between 0 and 1")
        if capacity_kwh <= 0:
            raise ValueError("capacity_kwh must be positive")

        self.top_n = top_n
        self.shift_fraction = shift_fraction
        self.capacity_kwh = capacity_kwh
        self.billing_rule = billing_rule if billing_rule is not None else NightDiscountRule(hours=tuple(night_hours))

    def select_peaks(self, usage: pd.Series) -> np.ndarray:
        """
        Positions of the top N peaks by billable value.

        Slots with zero billable value never count as peaks, so a series
        with fewer billed slots than top_n yields fewer peaks.

        Returns:
            Integer positions in ranked order
        """
        billable = self.billing_rule.apply(usage).to_numpy(dtype=float)
        order = np.argsort(-billable, kind="stable")
        order = order[billable[order] > 0]
        return order[:self.top_n]

    def redistribute(self, usage: pd.Series) -> RedistributionResult:
        values, index = self._working_buffer(usage)
        peaks = self.select_peaks(usage)

        target_mask = self.billing_rule.discounted_mask(index)
        if target_mask is None:
            target_mask = np.ones(len(values), dtype=bool)
        target_positions = np.flatnonzero(target_mask)

        transfers: List[Transfer] = []
        for peak in peaks:
            to_move = values[peak] * self.shift_fraction

            candidates = target_positions[target_positions != peak]
            # Lowest current usage first, position breaks ties
            candidates = candidates[np.argsort(values[candidates], kind="stable")]

            for target in candidates:
                if to_move <= 0:
                    break
                space = self.capacity_kwh - values[target]
                if space <= 0:
                    continue

                move = min(space, to_move)
                values[target] += move
                values[peak] -= move
                to_move -= move
                transfers.append(Transfer(
                    from_timestamp=index[peak],
                    to_timestamp=index[target],
                    amount_kwh=float(move),
                ))

        moved = sum(t.amount_kwh for t in transfers)
        logger.debug(f"Top-{self.top_n} shift moved {moved:.3f} kWh in {len(transfers)} transfers")

        return RedistributionResult(
            usage=self._to_series(values, index),
            method=self.name,
            transfers=transfers,
            diagnostics={"peak_positions": [int(p) for p in peaks]},
        )

    def __repr__(self) -> str:
        return (
            f"TopNPeakShift(top_n={self.top_n}, "
            f"shift_fraction={self.shift_fraction:.2f}, "
            f"capacity={self.capacity_kwh:.1f} kWh)"
        )
