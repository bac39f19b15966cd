"""
Shared fixtures for peak optimization tests.
"""

import numpy as np
import pandas as pd
import pytest


def _make_usage(values, start="2024-01-15 00:00", freq="h"):
    # 2024-01-15 is a Monday in the high season
    index = pd.date_range(start, periods=len(values), freq=freq, name="timestamp")
    return pd.Series(np.asarray(values, dtype=float), index=index, name="usage_kwh")


@pytest.fixture
def make_usage():
    """Factory for hourly usage series starting Monday 2024-01-15 00:00."""
    return _make_usage


@pytest.fixture
def single_peak_day():
    """24 hourly readings of 5 kWh with a 20 kWh peak at 13:00."""
    values = [5.0] * 24
    values[13] = 20.0
    return _make_usage(values)


@pytest.fixture
def random_week():
    """One week of hourly usage between 0 and 10 kWh."""
    rng = np.random.default_rng(42)
    return _make_usage(rng.uniform(0, 10, 24 * 7))
