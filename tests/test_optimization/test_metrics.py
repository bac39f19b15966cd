"""
Tests for demand-fee metrics
"""

import logging

import numpy as np
import pandas as pd
import pytest

from peak_optimization.infrastructure.tariffs.billing_rules import FlatRule, NightDiscountRule
from peak_optimization.optimization.metrics import (
    build_energy_metrics,
    compute_peak_summary,
    top_peaks,
)
from peak_optimization.optimization.top_n_shift import TopNPeakShift


class TestTopPeaks:
    """Test peak selection"""

    def test_descending_order(self, make_usage):
        peaks = top_peaks(make_usage([3.0, 9.0, 1.0, 7.0]), 3)
        assert list(peaks) == [9.0, 7.0, 3.0]

    def test_ties_keep_series_order(self, make_usage):
        """Equal values are taken earliest first"""
        usage = make_usage([5.0, 8.0, 5.0, 5.0])
        peaks = top_peaks(usage, 2)

        assert list(peaks.index) == [usage.index[1], usage.index[0]]

    def test_fewer_readings_than_count(self, make_usage):
        assert len(top_peaks(make_usage([1.0, 2.0]), 3)) == 2


class TestComputePeakSummary:
    """Test fee calculation"""

    def test_flat_fee(self, make_usage):
        """[10, 5, 0] under a 45 SEK/kW flat rule: average 5, fee 225"""
        usage = make_usage([10.0, 5.0, 0.0])
        summary = compute_peak_summary(usage, FlatRule().apply(usage), 45.0)

        assert summary.top_peaks == [10.0, 5.0, 0.0]
        assert summary.average_top_peaks == pytest.approx(5.0)
        assert summary.fee == pytest.approx(225.0)
        assert summary.total_usage == pytest.approx(15.0)

    def test_few_readings_divide_by_peak_count(self, make_usage, caplog):
        """Missing peaks count as zero and a warning is logged"""
        usage = make_usage([6.0, 3.0])

        with caplog.at_level(logging.WARNING):
            summary = compute_peak_summary(usage, usage, 10.0)

        assert summary.average_top_peaks == pytest.approx(3.0)
        assert summary.fee == pytest.approx(30.0)
        assert "missing peaks count as zero" in caplog.text

    def test_empty_series(self, make_usage):
        usage = make_usage([])
        summary = compute_peak_summary(usage, usage, 65.0)

        assert summary.top_peaks == []
        assert summary.average_top_peaks == 0.0
        assert summary.fee == 0.0

    def test_total_uses_raw_usage(self, make_usage):
        """Total usage ignores the night discount"""
        usage = make_usage([4.0, 4.0])  # both night hours
        summary = compute_peak_summary(usage, NightDiscountRule().apply(usage), 65.0)

        assert summary.total_usage == pytest.approx(8.0)
        assert summary.average_top_peaks == pytest.approx(4.0 / 3)


class TestBuildEnergyMetrics:
    """Test before/after metrics"""

    def test_night_discount_before_and_after(self, single_peak_day):
        rule = NightDiscountRule(fee_rate=65.0)
        result = TopNPeakShift(top_n=3, billing_rule=rule).redistribute(single_peak_day)

        metrics = build_energy_metrics(single_peak_day, result, rule)

        assert metrics.top3_peaks == [10.0, 5.0, 5.0]
        assert metrics.power_fee == pytest.approx(433.333, abs=1e-3)
        assert metrics.original_top3_peaks == [20.0, 5.0, 5.0]
        assert metrics.original_power_fee == pytest.approx(650.0)
        assert metrics.fee_savings == pytest.approx(216.667, abs=1e-3)
        assert metrics.total_usage == pytest.approx(135.0)
        assert metrics.rate == 65.0
        assert metrics.method == "top_n"

    def test_without_comparison(self, single_peak_day):
        rule = FlatRule()
        result = TopNPeakShift(billing_rule=rule).redistribute(single_peak_day)

        metrics = build_energy_metrics(single_peak_day, result, rule, compare=False)

        assert metrics.original_power_fee is None
        assert metrics.original_top3_peaks is None
        assert metrics.fee_savings is None

    def test_adjusted_data_is_billable(self, single_peak_day):
        rule = NightDiscountRule()
        result = TopNPeakShift(top_n=1).redistribute(single_peak_day)
        metrics = build_energy_metrics(single_peak_day, result, rule)

        np.testing.assert_array_almost_equal(
            metrics.adjusted_data.to_numpy(), rule.apply(result.usage).to_numpy()
        )
        pd.testing.assert_series_equal(metrics.data, result.usage)

    def test_to_dict(self, single_peak_day):
        rule = NightDiscountRule()
        result = TopNPeakShift(top_n=1).redistribute(single_peak_day)
        data = build_energy_metrics(single_peak_day, result, rule).to_dict()

        assert data["transfer_count"] == 2
        assert data["method"] == "top_n"
        assert data["fee_savings"] == pytest.approx(data["original_power_fee"] - data["power_fee"])

    def test_transfers_dataframe(self, single_peak_day):
        rule = NightDiscountRule()
        result = TopNPeakShift(top_n=1).redistribute(single_peak_day)
        df = build_energy_metrics(single_peak_day, result, rule).transfers_dataframe()

        assert list(df.columns) == ["from_timestamp", "to_timestamp", "amount_kwh"]
        assert df["amount_kwh"].sum() == pytest.approx(10.0)
