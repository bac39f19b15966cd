"""
Side-by-side comparison of redistribution methods.

Runs several methods on the same usage series under one provider's
billing rule and tabulates peaks and fees before and after.
"""

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple, Dict, Any
import logging

import pandas as pd

from peak_optimization.config.redistribution_config import RedistributionConfig
from peak_optimization.optimization.metrics import build_energy_metrics, compute_peak_summary
from peak_optimization.optimization.provider_registry import ProviderStrategy
from peak_optimization.optimization.redistributor_factory import RedistributorFactory

logger = logging.getLogger(__name__)

# (label, method, config overrides)
MethodSpec = Tuple[str, str, Dict[str, Any]]

DEFAULT_METHODS: Tuple[MethodSpec, ...] = (
    ("top_3", "top_n", {"top_n": 3}),
    ("top_5", "top_n", {"top_n": 5}),
    ("top_7", "top_n", {"top_n": 7}),
    ("linear_flatten", "linear_flatten", {}),
    ("peak_shaving", "peak_shaving", {}),
    ("valley_filling", "valley_filling", {}),
    ("daily_rebalancing", "daily_rebalancing", {}),
    ("smoothing", "smoothing", {}),
)

COLUMNS = [
    "method",
    "total_usage",
    "top_peaks",
    "average_top_peaks",
    "power_fee",
    "fee_savings",
    "transfer_count",
]


def compare_methods(
    usage: pd.Series,
    strategy: ProviderStrategy,
    methods: Optional[Sequence[MethodSpec]] = None,
    config: Optional[RedistributionConfig] = None,
) -> pd.DataFrame:
    """
    Compare redistribution methods under a provider's billing rule.

    Args:
        usage: Usage series (kWh) with DatetimeIndex
        strategy: Provider strategy (billing rule and peak count)
        methods: (label, method, overrides) tuples, DEFAULT_METHODS if None
        config: Base redistribution configuration (defaults with the
            rule's night hours if None)

    Returns:
        DataFrame with one 'original' row followed by one row per method
    """
    if methods is None:
        methods = DEFAULT_METHODS
    rule = strategy.billing_rule
    if config is None:
        config = RedistributionConfig(peak_count=strategy.peak_count)
        if rule.night_hours:
            config = replace(config, night_hours=rule.night_hours)

    original = compute_peak_summary(usage, rule.apply(usage), rule.rate, config.peak_count)

    rows: List[Dict[str, Any]] = [{
        "method": "original",
        "total_usage": original.total_usage,
        "top_peaks": original.top_peaks,
        "average_top_peaks": original.average_top_peaks,
        "power_fee": original.fee,
        "fee_savings": 0.0,
        "transfer_count": 0,
    }]

    for label, method, overrides in methods:
        redistributor = RedistributorFactory.create(method, config, billing_rule=rule, **overrides)
        result = redistributor.redistribute(usage)
        metrics = build_energy_metrics(
            usage, result, rule, compare=False, peak_count=config.peak_count
        )
        rows.append({
            "method": label,
            "total_usage": float(result.usage.sum()),
            "top_peaks": metrics.top3_peaks,
            "average_top_peaks": metrics.average_top3,
            "power_fee": metrics.power_fee,
            "fee_savings": original.fee - metrics.power_fee,
            "transfer_count": len(metrics.transfers),
        })

    logger.debug(f"Compared {len(methods)} methods for provider {strategy.name}")
    return pd.DataFrame(rows, columns=COLUMNS)
