"""
Tests for linear flatten, peak shaving, valley filling, daily rebalancing
and consumption smoothing.
"""

import numpy as np
import pandas as pd
import pytest

from peak_optimization.optimization.linear_flatten import LinearFlatten
from peak_optimization.optimization.peak_shaving import SlidingWindowPeakShaving
from peak_optimization.optimization.valley_filling import ValleyFilling
from peak_optimization.optimization.daily_rebalancing import DailyRebalancing
from peak_optimization.optimization.consumption_smoothing import ConsumptionSmoothing


def _usage(timestamps, values):
    return pd.Series(values, index=pd.DatetimeIndex(timestamps), dtype=float)


class TestLinearFlatten:
    """Test suite for LinearFlatten."""

    def test_weighted_shares(self, make_usage):
        """Night slots get twice the day share."""
        usage = make_usage([2.0] * 24)  # 48 kWh, 16 + 16 weight units
        values = LinearFlatten().redistribute(usage).usage.to_numpy()

        night = [0, 1, 2, 3, 4, 5, 22, 23]
        day = [h for h in range(24) if h not in night]
        np.testing.assert_array_almost_equal(values[night], 3.0)
        np.testing.assert_array_almost_equal(values[day], 1.5)

    def test_idempotent(self, random_week):
        """Flattening twice equals flattening once."""
        flatten = LinearFlatten()
        once = flatten.redistribute(random_week).usage
        twice = flatten.redistribute(once).usage

        np.testing.assert_allclose(twice.to_numpy(), once.to_numpy())

    def test_no_transfers(self, random_week):
        assert LinearFlatten().redistribute(random_week).transfers == []

    def test_empty_series(self, make_usage):
        assert len(LinearFlatten().redistribute(make_usage([])).usage) == 0


class TestSlidingWindowPeakShaving:
    """Test suite for SlidingWindowPeakShaving."""

    WINDOW = [
        "2024-01-15 20:00",
        "2024-01-15 21:00",
        "2024-01-15 22:00",
        "2024-01-15 23:00",
        "2024-01-16 00:00",
    ]

    def test_shaves_into_night_neighbours(self):
        """Half the excess moves evenly to night neighbours."""
        usage = _usage(self.WINDOW, [2.0, 2.0, 10.0, 2.0, 2.0])
        values = SlidingWindowPeakShaving().redistribute(usage).usage.to_numpy()

        # local mean 4, shave (10 - 4) * 0.5 = 3 over 23:00 and 00:00
        np.testing.assert_array_almost_equal(values, [2.0, 2.0, 7.0, 3.5, 3.5])

    def test_receivers_limited_by_capacity(self):
        """What does not fit below capacity stays in the peak slot."""
        usage = _usage(self.WINDOW, [2.0, 2.0, 10.0, 9.0, 9.0])
        values = SlidingWindowPeakShaving().redistribute(usage).usage.to_numpy()

        np.testing.assert_array_almost_equal(values, [2.0, 2.0, 8.0, 10.0, 10.0])
        assert values.sum() == pytest.approx(30.0)

    def test_no_night_neighbours(self, make_usage):
        """Without night neighbours the removed energy is restored."""
        usage = make_usage([2.0, 2.0, 10.0, 2.0, 2.0], start="2024-01-15 10:00")
        result = SlidingWindowPeakShaving().redistribute(usage)

        np.testing.assert_array_almost_equal(result.usage.to_numpy(), usage.to_numpy())
        assert result.diagnostics["shaved_slots"] == 0

    def test_boundaries_untouched(self):
        """Indices within half a window of the ends are never shaved."""
        usage = _usage(self.WINDOW, [10.0, 2.0, 2.0, 2.0, 10.0])
        values = SlidingWindowPeakShaving().redistribute(usage).usage.to_numpy()

        assert values[0] == 10.0
        assert values[4] == 10.0

    def test_below_threshold(self):
        """Slots within the threshold of the local mean are kept."""
        usage = _usage(self.WINDOW, [2.0, 2.0, 2.1, 2.0, 2.0])
        values = SlidingWindowPeakShaving().redistribute(usage).usage.to_numpy()

        np.testing.assert_array_almost_equal(values, usage.to_numpy())


class TestValleyFilling:
    """Test suite for ValleyFilling."""

    def test_fills_from_current_peak(self):
        """The global peak is recomputed on every iteration."""
        usage = _usage(["2024-01-15 00:00", "2024-01-15 12:00", "2024-01-15 13:00"], [1.0, 9.0, 5.0])
        values = ValleyFilling().redistribute(usage).usage.to_numpy()

        np.testing.assert_array_almost_equal(values, [5.392, 4.608, 5.0])

    def test_stops_at_capacity(self):
        """A valley never goes above capacity."""
        usage = _usage(["2024-01-15 00:00", "2024-01-15 12:00"], [8.0, 40.0])
        values = ValleyFilling().redistribute(usage).usage.to_numpy()

        np.testing.assert_array_almost_equal(values, [10.0, 38.0])

    def test_no_peak_above_valley(self, make_usage):
        """Equal usage everywhere terminates without transfers."""
        usage = make_usage([3.0] * 24)
        result = ValleyFilling().redistribute(usage)

        np.testing.assert_array_equal(result.usage.to_numpy(), usage.to_numpy())
        assert result.diagnostics["max_iterations_used"] == 0
        assert result.diagnostics["moved_kwh"] == 0.0

    def test_iteration_cap(self, make_usage):
        """Each valley stops after max_iterations even when not full."""
        values = [0.0] * 24
        values[12] = 1000.0
        usage = make_usage(values)
        result = ValleyFilling(transfer_factor=1e-4).redistribute(usage)

        assert result.diagnostics["max_iterations_used"] == 50
        assert result.diagnostics["capped_valleys"] == 8
        assert result.usage.sum() == pytest.approx(1000.0)
        assert result.usage.iloc[0] < 10.0

    def test_custom_iteration_cap(self, make_usage):
        values = [0.0] * 24
        values[12] = 1000.0
        result = ValleyFilling(transfer_factor=1e-4, max_iterations=5).redistribute(make_usage(values))

        assert result.diagnostics["max_iterations_used"] == 5


class TestDailyRebalancing:
    """Test suite for DailyRebalancing."""

    def test_equalizes_to_daily_mean(self, make_usage):
        usage = make_usage([8.0, 0.0, 2.0, 2.0])
        values = DailyRebalancing().redistribute(usage).usage.to_numpy()

        np.testing.assert_array_almost_equal(values, [3.0, 3.0, 3.0, 3.0])

    def test_days_are_independent(self):
        """Energy never crosses a date boundary."""
        usage = _usage(
            ["2024-01-15 10:00", "2024-01-15 11:00", "2024-01-16 10:00", "2024-01-16 11:00"],
            [6.0, 0.0, 1.0, 1.0],
        )
        values = DailyRebalancing().redistribute(usage).usage.to_numpy()

        np.testing.assert_array_almost_equal(values, [3.0, 3.0, 1.0, 1.0])

    def test_capacity_limits_receivers(self, make_usage):
        """With a daily mean above capacity, receivers stop at capacity."""
        values = DailyRebalancing().redistribute(make_usage([36.0, 0.0, 0.0])).usage.to_numpy()

        np.testing.assert_array_almost_equal(values, [16.0, 10.0, 10.0])

    def test_reaches_fixed_point(self, random_week):
        """Rebalancing an already balanced series changes nothing."""
        rebalance = DailyRebalancing()
        once = rebalance.redistribute(random_week).usage
        twice = rebalance.redistribute(once)

        np.testing.assert_allclose(twice.usage.to_numpy(), once.to_numpy())


class TestConsumptionSmoothing:
    """Test suite for ConsumptionSmoothing."""

    def test_nudge_and_rescale(self, make_usage):
        usage = make_usage([0.0, 10.0, 0.0])
        values = ConsumptionSmoothing(window_size=3, nudge_factor=0.5).redistribute(usage).usage.to_numpy()

        # Baseline [5, 10/3, 5], nudged [2.5, 20/3, 2.5], scaled by 10 / (35/3)
        np.testing.assert_array_almost_equal(values, [15 / 7, 40 / 7, 15 / 7])

    def test_constant_series_unchanged(self, make_usage):
        usage = make_usage([4.0] * 10)
        values = ConsumptionSmoothing().redistribute(usage).usage.to_numpy()

        np.testing.assert_array_almost_equal(values, 4.0)

    def test_edge_windows_shrink(self, make_usage):
        """Window is clipped at the series ends."""
        baseline = ConsumptionSmoothing(window_size=5).moving_average(np.array([1.0, 2.0, 3.0, 4.0, 5.0]))

        np.testing.assert_array_almost_equal(baseline, [2.0, 2.5, 3.0, 3.5, 4.0])

    def test_all_zero(self, make_usage):
        values = ConsumptionSmoothing().redistribute(make_usage([0.0] * 6)).usage.to_numpy()
        np.testing.assert_array_equal(values, 0.0)
