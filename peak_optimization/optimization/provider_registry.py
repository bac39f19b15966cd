"""
Provider registry for demand-fee strategies.

Binds each grid operator to its billing rule, the redistribution method
used to lower its fee, and the guidance text shown to the user. Lookup
of an unknown provider is an error; there is no fallback provider.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import logging

import pandas as pd

from peak_optimization.config.redistribution_config import DEFAULT_PEAK_COUNT
from peak_optimization.infrastructure.tariffs.billing_rules import (
    BillingRule,
    BillingRuleType,
    FlatRule,
    NightDiscountRule,
    TimeOfUseRule,
)
from peak_optimization.infrastructure.tariffs.loader import ProviderDefinition, TariffLoader
from peak_optimization.optimization.base_redistributor import BaseRedistributor, RedistributionResult
from peak_optimization.optimization.metrics import EnergyMetrics, build_energy_metrics
from peak_optimization.optimization.redistributor_factory import RedistributorFactory

logger = logging.getLogger(__name__)


class UnknownProviderError(KeyError):
    """Raised when a provider name is not registered."""


class StrategyType(Enum):
    """Optimization strategy shown to the user."""
    TOP3_PEAK = "Top-N-optimering: Minska toppar genom att fördela energi från de högsta N posterna."
    LINEAR_FLATTEN = "Linjär fördelning: Fördela total förbrukning jämnt med högre vikt för nattimmar."
    PEAK_SHAVING = "Peak shaving: Kapa lokala toppar och flytta energin till närliggande nattimmar."
    VALLEY_FILLING = "Valley filling: Fyll nattens dalar med energi från de högsta topparna."
    DAILY_REBALANCING = "Daglig ombalansering: Jämna ut förbrukningen mot dygnets medelvärde."
    SMOOTHING = "Utjämning: Knuffa förbrukningen mot ett glidande medelvärde."


_METHOD_STRATEGY_TYPES: Dict[str, StrategyType] = {
    "top_n": StrategyType.TOP3_PEAK,
    "linear_flatten": StrategyType.LINEAR_FLATTEN,
    "peak_shaving": StrategyType.PEAK_SHAVING,
    "valley_filling": StrategyType.VALLEY_FILLING,
    "daily_rebalancing": StrategyType.DAILY_REBALANCING,
    "smoothing": StrategyType.SMOOTHING,
}


@dataclass(frozen=True)
class ProviderStrategy:
    """
    A grid operator's billing rule paired with a redistribution method.

    Immutable; safe to share between concurrent calculations.
    """
    name: str
    display_name: str
    billing_rule: BillingRule
    redistributor: BaseRedistributor
    strategy_type: StrategyType = StrategyType.TOP3_PEAK
    guidance_text: Tuple[str, ...] = ()
    additional_information: Optional[str] = None
    peak_count: int = DEFAULT_PEAK_COUNT

    @property
    def rate(self) -> float:
        return self.billing_rule.rate

    @property
    def night_hours(self) -> Tuple[int, ...]:
        """Night hours for night-based rules, empty otherwise."""
        return self.billing_rule.night_hours

    def apply_billing_rule(self, usage: pd.Series) -> pd.Series:
        """Billable values of a usage series under this provider's rule."""
        return self.billing_rule.apply(usage)

    def optimize(self, usage: pd.Series) -> RedistributionResult:
        """Run this provider's redistribution method."""
        return self.redistributor.redistribute(usage)

    def calculate_metrics(self, usage: pd.Series, compare: bool = True) -> EnergyMetrics:
        """
        Optimize the series and compute before/after fee metrics.

        Args:
            usage: Usage series (kWh) with DatetimeIndex
            compare: Also compute metrics for the unmodified series

        Returns:
            EnergyMetrics
        """
        result = self.optimize(usage)
        return build_energy_metrics(
            usage, result, self.billing_rule, compare=compare, peak_count=self.peak_count
        )

    def get_guidance_text(self) -> List[str]:
        return list(self.guidance_text)


def strategy_from_definition(definition: ProviderDefinition) -> ProviderStrategy:
    """
    Build a provider strategy from a declarative definition.

    Raises:
        ValueError: If the method or its parameters are invalid
    """
    redistributor = RedistributorFactory.create_from_parameters(
        definition.method,
        definition.parameters,
        billing_rule=definition.billing_rule,
    )
    peak_count = definition.parameters.get("peak_count", DEFAULT_PEAK_COUNT)

    return ProviderStrategy(
        name=definition.name,
        display_name=definition.display_name,
        billing_rule=definition.billing_rule,
        redistributor=redistributor,
        strategy_type=_METHOD_STRATEGY_TYPES[definition.method],
        guidance_text=tuple(definition.guidance_text),
        additional_information=definition.additional_information,
        peak_count=peak_count,
    )


class ProviderRegistry:
    """
    Registry of provider strategies keyed by provider name.

    Populated once, then only read.
    """

    def __init__(self):
        self._providers: Dict[str, ProviderStrategy] = {}

    def register(self, strategy: ProviderStrategy) -> None:
        """
        Register a provider strategy.

        Raises:
            ValueError: If provider name already registered
        """
        if strategy.name in self._providers:
            raise ValueError(f"Provider '{strategy.name}' already registered")

        self._providers[strategy.name] = strategy
        logger.debug(f"Registered provider {strategy.name} ({strategy.billing_rule.rule_type.value})")

    def resolve(self, name: str) -> ProviderStrategy:
        """
        Get the strategy for a provider.

        Raises:
            UnknownProviderError: If provider not registered
        """
        if name not in self._providers:
            available = ", ".join(self._providers.keys())
            raise UnknownProviderError(
                f"No strategy found for provider '{name}'. "
                f"Available: {available}"
            )

        return self._providers[name]

    get = resolve

    def __contains__(self, name: str) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def list_all(self) -> List[ProviderStrategy]:
        return list(self._providers.values())

    def list_names(self) -> List[str]:
        return list(self._providers.keys())

    def filter_by(
        self,
        rule_type: Optional[BillingRuleType] = None,
        strategy_type: Optional[StrategyType] = None,
    ) -> List[ProviderStrategy]:
        """
        Filter providers by billing rule type and/or strategy type.
        """
        results = self.list_all()

        if rule_type is not None:
            results = [p for p in results if p.billing_rule.rule_type == rule_type]

        if strategy_type is not None:
            results = [p for p in results if p.strategy_type == strategy_type]

        return results

    def print_summary(self) -> None:
        """Print summary of all registered providers to console."""
        print("\n" + "=" * 80)
        print("REGISTERED DEMAND-FEE PROVIDERS")
        print("=" * 80)

        if not self._providers:
            print("No providers registered.")
            return

        for name, strategy in sorted(self._providers.items()):
            print(f"\n{strategy.display_name} ({name})")
            print(f"  Rule:         {strategy.billing_rule.rule_type.value}")
            print(f"  Rate:         {strategy.rate:.2f} SEK/kW")
            print(f"  Method:       {strategy.redistributor!r}")
            if strategy.night_hours:
                print(f"  Night hours:  {', '.join(str(h) for h in strategy.night_hours)}")
            if strategy.additional_information:
                print(f"  Info:         {strategy.additional_information}")
            print("-" * 80)

    @classmethod
    def from_definitions(cls, definitions: List[ProviderDefinition]) -> "ProviderRegistry":
        registry = cls()
        for definition in definitions:
            registry.register(strategy_from_definition(definition))
        return registry

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "ProviderRegistry":
        """
        Build a registry from a provider YAML file.

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If definitions are invalid
        """
        return cls.from_definitions(TariffLoader.from_yaml(yaml_path))


ELLEVIO_GUIDANCE = (
    "Ellevio räknar förbrukning mellan 22:00 och 06:00 till halva värdet i effektavgiften.",
    "Flytta energikrävande aktiviteter som tvätt, disk och elbilsladdning till natten.",
    "Undvik att starta flera stora förbrukare samtidigt under dagtid.",
    "Effektavgiften baseras på snittet av månadens tre högsta timmar, så en enda topp kostar.",
)

GE_GUIDANCE = (
    "Göteborgs Energi rekommenderar att optimera din energiförbrukning.",
    "Minska energianvändningen under högbelastningstimmar för att spara kostnader.",
    "Flytta energikrävande aktiviteter till lågbelastningstimmar.",
    "Övervaka dina energiförbrukningsmönster regelbundet.",
    "Överväg att använda energieffektiva apparater.",
    "Optimera din energianvändning för att sänka effektavgifterna.",
)

GE_TOU_INFO = (
    "Detta gäller för den nya GE elprismodellen. läs mer här: "
    "https://www.goteborgenergi.se/privat/elnat/nya-elnatsavgiftsmodellen"
)

GE_TOU_GUIDANCE = (
    "Minska energianvändningen under högprisperioder (vardagar 07:00–20:00, november–mars) för att spara kostnader.",
    "Flytta energikrävande aktiviteter till lågbelastningstimmar, helger eller röda dagar då effektavgiften är 0 kr.",
    "Överväg att välja en tidsindelad elnätsavgift om du kan planera din energianvändning till lågpristimmar.",
    "Välj en effektgräns som passar din förbrukning (6 kW, 14 kW eller 43 kW) för att optimera dina kostnader.",
    "Tänk på att om du överstiger din valda effektgräns mer än tre gånger, kommer du att flyttas tillbaka till den ordinarie prismodellen.",
    "Övervaka dina energiförbrukningsmönster regelbundet för att identifiera toppar och optimera användningen.",
    "Överväg att använda energieffektiva apparater för att minska din energiförbrukning under högprisperioder.",
    "Läs mer om den tidsindelade elnätsavgiften här: https://www.goteborgenergi.se/privat/elnat/nya-elnatsavgiftsmodellen",
)


def builtin_definitions() -> List[ProviderDefinition]:
    """Definitions of the built-in providers."""
    return [
        ProviderDefinition(
            name="Ellevio",
            display_name="Ellevio",
            billing_rule=NightDiscountRule(fee_rate=65.0),
            guidance_text=list(ELLEVIO_GUIDANCE),
        ),
        ProviderDefinition(
            name="Ellevio_inkl_moms",
            display_name="Ellevio (inkl. moms)",
            billing_rule=NightDiscountRule(fee_rate=81.25),
            guidance_text=list(ELLEVIO_GUIDANCE),
        ),
        ProviderDefinition(
            name="GE",
            display_name="Göteborg Energi",
            billing_rule=FlatRule(fee_rate=45.0),
            guidance_text=list(GE_GUIDANCE),
        ),
        ProviderDefinition(
            name="GE_TOU",
            display_name="Göteborg Energi (tidsindelad)",
            billing_rule=TimeOfUseRule(high_rate=132.0, low_rate=0.0),
            guidance_text=list(GE_TOU_GUIDANCE),
            additional_information=GE_TOU_INFO,
        ),
    ]


_DEFAULT_REGISTRY: Optional[ProviderRegistry] = None


def default_registry() -> ProviderRegistry:
    """Registry with the built-in providers, built on first use."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = ProviderRegistry.from_definitions(builtin_definitions())
    return _DEFAULT_REGISTRY


def get_provider_strategy(provider: str) -> ProviderStrategy:
    """
    Resolve a provider name against the built-in registry.

    Raises:
        UnknownProviderError: If provider not registered
    """
    return default_registry().resolve(provider)
