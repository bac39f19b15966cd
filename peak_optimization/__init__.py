"""
Peak Optimization

Demand-fee (effektavgift) analysis for Swedish grid operators. Takes a
series of hourly consumption readings, redistributes load with one of
several strategies, and compares the fee before and after.

Main Components:
- Domain: Readings, transfers and series conversion
- Configuration: Redistribution parameters with YAML support
- Infrastructure: Billing rules per grid operator, provider definitions
- Optimization: Redistribution algorithms, fee metrics, provider registry

Quick Start:
    >>> from peak_optimization import parse_energy_data, readings_to_series
    >>> from peak_optimization import get_provider_strategy
    >>>
    >>> readings = parse_energy_data([("2024-01-15 13:00", 7.5), ...])
    >>> usage = readings_to_series(readings)
    >>>
    >>> strategy = get_provider_strategy("Ellevio")
    >>> metrics = strategy.calculate_metrics(usage)
    >>> print(f"{metrics.original_power_fee:.0f} -> {metrics.power_fee:.0f} SEK")

Public API Exports:
    Domain:
        - Reading, Transfer, parse_energy_data, readings_to_series,
          series_to_readings, transfers_to_dataframe

    Configuration:
        - RedistributionConfig

    Infrastructure:
        - NightDiscountRule, FlatRule, TimeOfUseRule, TariffLoader

    Optimization:
        - TopNPeakShift, LinearFlatten, SlidingWindowPeakShaving,
          ValleyFilling, DailyRebalancing, ConsumptionSmoothing
        - RedistributorFactory, EnergyMetrics, ProviderRegistry,
          get_provider_strategy, compare_methods
"""

__version__ = "1.0.0"

from peak_optimization.domain import (
    Reading,
    Transfer,
    parse_energy_data,
    readings_to_series,
    series_to_readings,
    transfers_to_dataframe,
)
from peak_optimization.config import RedistributionConfig
from peak_optimization.infrastructure.tariffs import (
    BillingRule,
    BillingRuleType,
    NightDiscountRule,
    FlatRule,
    TimeOfUseRule,
    TariffLoader,
)
from peak_optimization.optimization import (
    BaseRedistributor,
    RedistributionResult,
    TopNPeakShift,
    LinearFlatten,
    SlidingWindowPeakShaving,
    ValleyFilling,
    DailyRebalancing,
    ConsumptionSmoothing,
    RedistributorFactory,
    EnergyMetrics,
    ProviderRegistry,
    ProviderStrategy,
    UnknownProviderError,
    get_provider_strategy,
    compare_methods,
)

__all__ = [
    "Reading",
    "Transfer",
    "parse_energy_data",
    "readings_to_series",
    "series_to_readings",
    "transfers_to_dataframe",
    "RedistributionConfig",
    "BillingRule",
    "BillingRuleType",
    "NightDiscountRule",
    "FlatRule",
    "TimeOfUseRule",
    "TariffLoader",
    "BaseRedistributor",
    "RedistributionResult",
    "TopNPeakShift",
    "LinearFlatten",
    "SlidingWindowPeakShaving",
    "ValleyFilling",
    "DailyRebalancing",
    "ConsumptionSmoothing",
    "RedistributorFactory",
    "EnergyMetrics",
    "ProviderRegistry",
    "ProviderStrategy",
    "UnknownProviderError",
    "get_provider_strategy",
    "compare_methods",
]
