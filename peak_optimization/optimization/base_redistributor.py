"""
Abstract base class for load redistribution algorithms.

Defines common interface for all redistribution implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple
import numpy as np
import pandas as pd

from peak_optimization.domain.readings import Transfer, transfers_to_dataframe


@dataclass
class RedistributionResult:
    """
    Common result structure for all redistribution algorithms.

    Contains the redistributed usage series and, for methods with explicit
    point-to-point moves, the transfer log.
    """
    usage: pd.Series  # Redistributed usage (kWh), same index as input
    method: str
    transfers: List[Transfer] = field(default_factory=list)
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_usage(self) -> float:
        return float(self.usage.sum())

    @property
    def total_transferred_kwh(self) -> float:
        return float(sum(t.amount_kwh for t in self.transfers))

    def transfers_dataframe(self) -> pd.DataFrame:
        return transfers_to_dataframe(self.transfers)

    def to_dataframe(self, original: pd.Series) -> pd.DataFrame:
        """
        Side-by-side view of original and redistributed usage.

        Args:
            original: Usage series the algorithm was applied to

        Returns:
            DataFrame with original_kwh, redistributed_kwh and delta_kwh
        """
        return pd.DataFrame(
            {
                "original_kwh": original.to_numpy(dtype=float),
                "redistributed_kwh": self.usage.to_numpy(dtype=float),
                "delta_kwh": self.usage.to_numpy(dtype=float) - original.to_numpy(dtype=float),
            },
            index=original.index,
        )


class BaseRedistributor(ABC):
    """
    Abstract base class for redistribution algorithms.

    Implementations hold only immutable parameters. All work happens on a
    working buffer owned by a single redistribute() call, so one instance can
    be reused across calls.
    """

    name: str = "base"

    @abstractmethod
    def redistribute(self, usage: pd.Series) -> RedistributionResult:
        """
        Redistribute energy within the series.

        Args:
            usage: Usage series (kWh) with DatetimeIndex, chronological

        Returns:
            RedistributionResult with a new series of the same total

        Raises:
            ValueError: If input is invalid
        """
        pass

    def _validate_inputs(self, usage: pd.Series) -> None:
        """
        Validate a usage series.

        Raises:
            ValueError: If index is not datetime or values are negative
        """
        if not isinstance(usage, pd.Series):
            raise ValueError(f"usage must be a pandas Series, got {type(usage).__name__}")
        if not isinstance(usage.index, pd.DatetimeIndex):
            raise ValueError("usage must have a DatetimeIndex")
        if len(usage) and np.any(usage.to_numpy(dtype=float) < 0):
            raise ValueError("usage contains negative values")

    def _working_buffer(self, usage: pd.Series) -> Tuple[np.ndarray, pd.DatetimeIndex]:
        """Validate and return an owned float copy of the values plus the index."""
        self._validate_inputs(usage)
        return usage.to_numpy(dtype=float).copy(), usage.index

    def _to_series(self, values: np.ndarray, index: pd.DatetimeIndex) -> pd.Series:
        return pd.Series(values, index=index.copy(), name="usage_kwh")

    @staticmethod
    def _night_mask(index: pd.DatetimeIndex, night_hours: Tuple[int, ...]) -> np.ndarray:
        return np.isin(index.hour, night_hours)
