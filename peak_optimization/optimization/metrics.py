"""
Demand-fee metrics.

Computes total usage, the highest billable peaks, their average and the
resulting demand fee, for the original and the redistributed series.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

import numpy as np
import pandas as pd

from peak_optimization.config.redistribution_config import DEFAULT_PEAK_COUNT
from peak_optimization.domain.readings import Transfer, transfers_to_dataframe
from peak_optimization.infrastructure.tariffs.billing_rules import BillingRule
from peak_optimization.optimization.base_redistributor import RedistributionResult

logger = logging.getLogger(__name__)


def top_peaks(billable: pd.Series, count: int = DEFAULT_PEAK_COUNT) -> pd.Series:
    """
    Highest billable values, ties broken by original order.

    Returns:
        Series of at most `count` values in descending order
    """
    order = np.argsort(-billable.to_numpy(dtype=float), kind="stable")
    return billable.iloc[order[:count]]


@dataclass(frozen=True)
class PeakSummary:
    """Peak statistics and fee for one series."""
    total_usage: float
    top_peaks: List[float]
    average_top_peaks: float
    fee: float


def compute_peak_summary(
    raw_usage: pd.Series,
    billable: pd.Series,
    rate: float,
    peak_count: int = DEFAULT_PEAK_COUNT,
) -> PeakSummary:
    """
    Compute total usage, top peaks, their average and the fee.

    The divisor is always peak_count: with fewer readings than billed peaks
    the missing peaks count as zero.

    Args:
        raw_usage: Unmodified usage series (for total usage)
        billable: Billable values from a billing rule
        rate: Fee per kW of averaged peak
        peak_count: Number of peaks in the average

    Returns:
        PeakSummary
    """
    if len(billable) < peak_count:
        logger.warning(
            f"Only {len(billable)} readings for a {peak_count}-peak average; "
            f"missing peaks count as zero"
        )

    peaks = [float(v) for v in top_peaks(billable, peak_count)]
    average = sum(peaks) / peak_count

    return PeakSummary(
        total_usage=float(raw_usage.sum()),
        top_peaks=peaks,
        average_top_peaks=average,
        fee=average * rate,
    )


@dataclass
class EnergyMetrics:
    """
    Before/after demand-fee metrics for one provider and method.

    The original_* fields are None when no comparison was requested.
    """
    total_usage: float
    top3_peaks: List[float]
    average_top3: float
    power_fee: float
    rate: float
    data: pd.Series  # redistributed usage (kWh)
    adjusted_data: pd.Series  # billable values of the redistributed usage
    transfers: List[Transfer] = field(default_factory=list)
    original_top3_peaks: Optional[List[float]] = None
    original_average_top3: Optional[float] = None
    original_power_fee: Optional[float] = None
    method: str = ""

    @property
    def fee_savings(self) -> Optional[float]:
        if self.original_power_fee is None:
            return None
        return self.original_power_fee - self.power_fee

    def transfers_dataframe(self) -> pd.DataFrame:
        return transfers_to_dataframe(self.transfers)

    def to_dict(self) -> Dict[str, Any]:
        """Scalar metrics as a dictionary (series and transfers excluded)."""
        return {
            "method": self.method,
            "total_usage": self.total_usage,
            "top3_peaks": list(self.top3_peaks),
            "average_top3": self.average_top3,
            "power_fee": self.power_fee,
            "rate": self.rate,
            "original_top3_peaks": self.original_top3_peaks,
            "original_average_top3": self.original_average_top3,
            "original_power_fee": self.original_power_fee,
            "fee_savings": self.fee_savings,
            "transfer_count": len(self.transfers),
        }


def build_energy_metrics(
    original_usage: pd.Series,
    result: RedistributionResult,
    billing_rule: BillingRule,
    compare: bool = True,
    peak_count: int = DEFAULT_PEAK_COUNT,
) -> EnergyMetrics:
    """
    Compute metrics for a redistribution result.

    Total usage always comes from the unmodified input.

    Args:
        original_usage: Usage series before redistribution
        result: Output of a redistributor
        billing_rule: Provider billing rule
        compare: Also compute metrics for the original series
        peak_count: Number of peaks in the average

    Returns:
        EnergyMetrics
    """
    adjusted = billing_rule.apply(result.usage)
    optimized = compute_peak_summary(original_usage, adjusted, billing_rule.rate, peak_count)

    original = None
    if compare:
        original = compute_peak_summary(
            original_usage,
            billing_rule.apply(original_usage),
            billing_rule.rate,
            peak_count,
        )

    return EnergyMetrics(
        total_usage=optimized.total_usage,
        top3_peaks=optimized.top_peaks,
        average_top3=optimized.average_top_peaks,
        power_fee=optimized.fee,
        rate=billing_rule.rate,
        data=result.usage,
        adjusted_data=adjusted,
        transfers=list(result.transfers),
        original_top3_peaks=original.top_peaks if original else None,
        original_average_top3=original.average_top_peaks if original else None,
        original_power_fee=original.fee if original else None,
        method=result.method,
    )
