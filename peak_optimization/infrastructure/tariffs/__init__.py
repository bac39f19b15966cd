"""
Infrastructure module for tariff management.

Provides billing rules per grid operator and YAML-based provider definitions.
"""

from .billing_rules import (
    BillingRule,
    BillingRuleType,
    NightDiscountRule,
    FlatRule,
    TimeOfUseRule,
    billing_rule_from_dict,
)
from .loader import ProviderDefinition, TariffLoader

__all__ = [
    "BillingRule",
    "BillingRuleType",
    "NightDiscountRule",
    "FlatRule",
    "TimeOfUseRule",
    "billing_rule_from_dict",
    "ProviderDefinition",
    "TariffLoader",
]
