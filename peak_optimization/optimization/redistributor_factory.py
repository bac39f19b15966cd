"""
Factory for creating redistributor instances from configuration.

Provides unified interface for creating different redistribution methods.
"""

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

from peak_optimization.config.redistribution_config import RedistributionConfig
from peak_optimization.infrastructure.tariffs.billing_rules import BillingRule
from peak_optimization.optimization.base_redistributor import BaseRedistributor
from peak_optimization.optimization.top_n_shift import TopNPeakShift
from peak_optimization.optimization.linear_flatten import LinearFlatten
from peak_optimization.optimization.peak_shaving import SlidingWindowPeakShaving
from peak_optimization.optimization.valley_filling import ValleyFilling
from peak_optimization.optimization.daily_rebalancing import DailyRebalancing
from peak_optimization.optimization.consumption_smoothing import ConsumptionSmoothing

METHODS: Tuple[str, ...] = (
    "top_n",
    "linear_flatten",
    "peak_shaving",
    "valley_filling",
    "daily_rebalancing",
    "smoothing",
)


class RedistributorFactory:
    """
    Factory for redistribution algorithms.

    Creates the algorithm for a method name with parameters taken from a
    RedistributionConfig.
    """

    @staticmethod
    def create(
        method: str,
        config: Optional[RedistributionConfig] = None,
        billing_rule: Optional[BillingRule] = None,
        **overrides: Any,
    ) -> BaseRedistributor:
        """
        Create redistributor for the given method.

        Args:
            method: One of METHODS
            config: Redistribution configuration (defaults if None)
            billing_rule: Rule for Top-N ranking and targets (Top-N only)
            **overrides: Config fields to override for this instance

        Returns:
            BaseRedistributor instance

        Raises:
            ValueError: If method is unknown or parameters invalid
        """
        if config is None:
            config = RedistributionConfig()
        if overrides:
            config = replace(config, **overrides)

        if method == "top_n":
            return TopNPeakShift(
                top_n=config.top_n,
                shift_fraction=config.shift_fraction,
                capacity_kwh=config.capacity_kwh,
                night_hours=config.night_hours,
                billing_rule=billing_rule,
            )

        elif method == "linear_flatten":
            return LinearFlatten(night_hours=config.night_hours)

        elif method == "peak_shaving":
            return SlidingWindowPeakShaving(
                window_size=config.window_size,
                threshold_factor=config.threshold_factor,
                shave_fraction=config.shave_fraction,
                night_hours=config.night_hours,
                capacity_kwh=config.capacity_kwh,
            )

        elif method == "valley_filling":
            return ValleyFilling(
                transfer_factor=config.transfer_factor,
                max_iterations=config.max_valley_iterations,
                night_hours=config.night_hours,
                capacity_kwh=config.capacity_kwh,
            )

        elif method == "daily_rebalancing":
            return DailyRebalancing(capacity_kwh=config.capacity_kwh)

        elif method == "smoothing":
            return ConsumptionSmoothing(
                window_size=config.smoothing_window_size,
                nudge_factor=config.nudge_factor,
            )

        else:
            raise ValueError(
                f"Invalid method '{method}'. "
                f"Must be one of: {', '.join(METHODS)}"
            )

    @staticmethod
    def create_from_parameters(
        method: str,
        parameters: Dict[str, Any],
        billing_rule: Optional[BillingRule] = None,
    ) -> BaseRedistributor:
        """
        Create redistributor from a plain parameter dictionary.

        When the parameters leave night_hours unset, a night-based rule's
        hours are used so every method agrees with the rule.

        Args:
            method: One of METHODS
            parameters: RedistributionConfig fields
            billing_rule: Rule for Top-N ranking and targets

        Returns:
            BaseRedistributor instance
        """
        if billing_rule is not None and billing_rule.night_hours and "night_hours" not in parameters:
            parameters = {**parameters, "night_hours": billing_rule.night_hours}
        config = RedistributionConfig.from_dict(parameters)
        return RedistributorFactory.create(method, config, billing_rule=billing_rule)
