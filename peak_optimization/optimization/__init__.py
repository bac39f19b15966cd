"""
Load redistribution module.

Provides redistribution algorithms, fee metrics, provider registry and
factory for creating redistributors.
"""

from .base_redistributor import BaseRedistributor, RedistributionResult
from .top_n_shift import TopNPeakShift
from .linear_flatten import LinearFlatten
from .peak_shaving import SlidingWindowPeakShaving
from .valley_filling import ValleyFilling
from .daily_rebalancing import DailyRebalancing
from .consumption_smoothing import ConsumptionSmoothing
from .redistributor_factory import RedistributorFactory, METHODS
from .metrics import (
    EnergyMetrics,
    PeakSummary,
    build_energy_metrics,
    compute_peak_summary,
    top_peaks,
)
from .provider_registry import (
    ProviderRegistry,
    ProviderStrategy,
    StrategyType,
    UnknownProviderError,
    default_registry,
    get_provider_strategy,
)
from .comparison import compare_methods, DEFAULT_METHODS

__all__ = [
    'BaseRedistributor',
    'RedistributionResult',
    'TopNPeakShift',
    'LinearFlatten',
    'SlidingWindowPeakShaving',
    'ValleyFilling',
    'DailyRebalancing',
    'ConsumptionSmoothing',
    'RedistributorFactory',
    'METHODS',
    'EnergyMetrics',
    'PeakSummary',
    'build_energy_metrics',
    'compute_peak_summary',
    'top_peaks',
    'ProviderRegistry',
    'ProviderStrategy',
    'StrategyType',
    'UnknownProviderError',
    'default_registry',
    'get_provider_strategy',
    'compare_methods',
    'DEFAULT_METHODS',
]
