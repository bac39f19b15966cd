"""
Billing rules for demand-fee (effektavgift) calculation.

A billing rule maps each interval's usage to a billable value. The demand
fee is then the average of the highest billable values times the rule rate.

Variants:
- NightDiscountRule: night hours count at a reduced weight (Ellevio)
- FlatRule: every hour counts as measured (Göteborg Energi)
- TimeOfUseRule: only weekday daytime hours in the high season count
  (Göteborg Energi, time-differentiated model)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from peak_optimization.config.redistribution_config import DEFAULT_NIGHT_HOURS

DEFAULT_HOLIDAYS: Tuple[str, ...] = (
    "01-01",  # Nyårsdagen
    "01-06",  # Trettondedag jul
    "04-18",  # Långfredagen
    "04-21",  # Annandag påsk
    "12-25",  # Juldagen
    "12-26",  # Annandag jul
)


class BillingRuleType(Enum):
    """Supported billing rule variants."""
    NIGHT_DISCOUNT = "night_discount"
    FLAT = "flat"
    TIME_OF_USE = "time_of_use"


class BillingRule(ABC):
    """Base class for billing rules."""

    rule_type: BillingRuleType

    @property
    @abstractmethod
    def rate(self) -> float:
        """Fee per kW of averaged peak (SEK/kW)."""

    @property
    def night_hours(self) -> Tuple[int, ...]:
        """Hours billed at a night discount (empty for non-night rules)."""
        return ()

    @abstractmethod
    def apply(self, usage: pd.Series) -> pd.Series:
        """
        Compute billable values.

        Args:
            usage: Usage series (kWh) with DatetimeIndex

        Returns:
            Series of billable values with the same index
        """

    @abstractmethod
    def discounted_mask(self, index: pd.DatetimeIndex) -> Optional[np.ndarray]:
        """
        Slots billed below full weight.

        Returns:
            Boolean array, or None when every slot is billed alike
        """

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a definition dictionary."""


@dataclass(frozen=True)
class NightDiscountRule(BillingRule):
    """
    Night hours count with a reduced weight.

    Ellevio counts consumption between 22:00 and 06:00 at half weight
    when determining the monthly peaks.
    """
    fee_rate: float = 65.0
    hours: Tuple[int, ...] = DEFAULT_NIGHT_HOURS
    night_factor: float = 0.5

    rule_type = BillingRuleType.NIGHT_DISCOUNT

    def __post_init__(self):
        object.__setattr__(self, "hours", tuple(int(h) for h in self.hours))
        if any(not (0 <= h <= 23) for h in self.hours):
            raise ValueError(f"Night hours must be within 0-23, got {self.hours}")
        if not (0 <= self.night_factor <= 1):
            raise ValueError("night_factor must be between 0 and 1")
        if self.fee_rate < 0:
            raise ValueError("rate cannot be negative")

    @property
    def rate(self) -> float:
        return self.fee_rate

    @property
    def night_hours(self) -> Tuple[int, ...]:
        return self.hours

    def discounted_mask(self, index: pd.DatetimeIndex) -> Optional[np.ndarray]:
        return np.isin(index.hour, self.hours)

    def apply(self, usage: pd.Series) -> pd.Series:
        weights = np.where(self.discounted_mask(usage.index), self.night_factor, 1.0)
        return pd.Series(usage.to_numpy(dtype=float) * weights, index=usage.index, name="billable")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.rule_type.value,
            "rate": self.fee_rate,
            "night_hours": list(self.hours),
            "night_factor": self.night_factor,
        }


@dataclass(frozen=True)
class FlatRule(BillingRule):
    """Every slot billed as measured."""
    fee_rate: float = 45.0

    rule_type = BillingRuleType.FLAT

    def __post_init__(self):
        if self.fee_rate < 0:
            raise ValueError("rate cannot be negative")

    @property
    def rate(self) -> float:
        return self.fee_rate

    def discounted_mask(self, index: pd.DatetimeIndex) -> Optional[np.ndarray]:
        return None

    def apply(self, usage: pd.Series) -> pd.Series:
        return pd.Series(usage.to_numpy(dtype=float).copy(), index=usage.index, name="billable")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.rule_type.value, "rate": self.fee_rate}


@dataclass(frozen=True)
class TimeOfUseRule(BillingRule):
    """
    Time-differentiated demand fee.

    A slot is high-rate when all of the following hold:
    1. Month is in the high season (November-March)
    2. Day is a weekday and not a listed holiday (matched on month-day)
    3. Hour is within [high_start_hour, high_end_hour)

    Rated per slot: high-rate slots count fully, the rest are scaled by
    low_rate / high_rate, so fee = average(top peaks) * high_rate.
    """
    high_rate: float = 132.0
    low_rate: float = 0.0
    high_season_months: Tuple[int, ...] = (11, 12, 1, 2, 3)
    high_start_hour: int = 7
    high_end_hour: int = 20
    holidays: Tuple[str, ...] = DEFAULT_HOLIDAYS
    weekend_days: Tuple[int, ...] = (5, 6)  # Monday=0

    rule_type = BillingRuleType.TIME_OF_USE

    def __post_init__(self):
        object.__setattr__(self, "high_season_months", tuple(int(m) for m in self.high_season_months))
        object.__setattr__(self, "holidays", tuple(str(d) for d in self.holidays))
        object.__setattr__(self, "weekend_days", tuple(int(d) for d in self.weekend_days))
        if self.high_rate <= 0:
            raise ValueError("high_rate must be positive")
        if not (0 <= self.low_rate <= self.high_rate):
            raise ValueError("low_rate must be between 0 and high_rate")
        if not (0 <= self.high_start_hour < self.high_end_hour <= 24):
            raise ValueError("Invalid high-rate hours: 0 <= start < end <= 24")
        if any(not (1 <= m <= 12) for m in self.high_season_months):
            raise ValueError(f"Invalid months: {self.high_season_months}")

    @property
    def rate(self) -> float:
        return self.high_rate

    def is_high_season(self, timestamp: pd.Timestamp) -> bool:
        return timestamp.month in self.high_season_months

    def is_holiday_or_weekend(self, timestamp: pd.Timestamp) -> bool:
        return (
            timestamp.weekday() in self.weekend_days
            or timestamp.strftime("%m-%d") in self.holidays
        )

    def is_high_rate_hour(self, timestamp: pd.Timestamp) -> bool:
        return self.high_start_hour <= timestamp.hour < self.high_end_hour

    def is_high_rate(self, timestamp: pd.Timestamp) -> bool:
        """Check whether a single slot is billed at the high rate."""
        timestamp = pd.Timestamp(timestamp)
        return (
            self.is_high_season(timestamp)
            and not self.is_holiday_or_weekend(timestamp)
            and self.is_high_rate_hour(timestamp)
        )

    def high_rate_mask(self, index: pd.DatetimeIndex) -> np.ndarray:
        in_season = np.isin(index.month, self.high_season_months)
        is_weekend = np.isin(index.weekday, self.weekend_days)
        is_holiday = np.isin(index.strftime("%m-%d"), self.holidays)
        in_hours = (index.hour >= self.high_start_hour) & (index.hour < self.high_end_hour)
        return np.asarray(in_season & ~is_weekend & ~is_holiday & in_hours, dtype=bool)

    def discounted_mask(self, index: pd.DatetimeIndex) -> Optional[np.ndarray]:
        return ~self.high_rate_mask(index)

    def apply(self, usage: pd.Series) -> pd.Series:
        weights = np.where(self.high_rate_mask(usage.index), 1.0, self.low_rate / self.high_rate)
        return pd.Series(usage.to_numpy(dtype=float) * weights, index=usage.index, name="billable")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.rule_type.value,
            "high_rate": self.high_rate,
            "low_rate": self.low_rate,
            "high_season_months": list(self.high_season_months),
            "high_start_hour": self.high_start_hour,
            "high_end_hour": self.high_end_hour,
            "holidays": list(self.holidays),
            "weekend_days": list(self.weekend_days),
        }


def billing_rule_from_dict(rule_dict: Dict[str, Any]) -> BillingRule:
    """
    Create a billing rule from a definition dictionary.

    Args:
        rule_dict: Dictionary with a 'type' key and rule parameters

    Returns:
        BillingRule instance

    Raises:
        ValueError: If the type is missing or unknown
    """
    if "type" not in rule_dict:
        raise ValueError(f"Billing rule definition missing 'type': {rule_dict}")

    try:
        rule_type = BillingRuleType(rule_dict["type"])
    except ValueError:
        valid = ", ".join(t.value for t in BillingRuleType)
        raise ValueError(
            f"Unknown billing rule type '{rule_dict['type']}'. Valid types: {valid}"
        ) from None

    if rule_type is BillingRuleType.NIGHT_DISCOUNT:
        return NightDiscountRule(
            fee_rate=rule_dict.get("rate", 65.0),
            hours=tuple(rule_dict.get("night_hours", DEFAULT_NIGHT_HOURS)),
            night_factor=rule_dict.get("night_factor", 0.5),
        )
    elif rule_type is BillingRuleType.FLAT:
        return FlatRule(fee_rate=rule_dict.get("rate", 45.0))
    elif rule_type is BillingRuleType.TIME_OF_USE:
        defaults = TimeOfUseRule()
        return TimeOfUseRule(
            high_rate=rule_dict.get("high_rate", defaults.high_rate),
            low_rate=rule_dict.get("low_rate", defaults.low_rate),
            high_season_months=tuple(rule_dict.get("high_season_months", defaults.high_season_months)),
            high_start_hour=rule_dict.get("high_start_hour", defaults.high_start_hour),
            high_end_hour=rule_dict.get("high_end_hour", defaults.high_end_hour),
            holidays=tuple(rule_dict.get("holidays", defaults.holidays)),
            weekend_days=tuple(rule_dict.get("weekend_days", defaults.weekend_days)),
        )

    raise ValueError(f"Unhandled billing rule type: {rule_type}")
