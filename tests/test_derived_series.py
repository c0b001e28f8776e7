"""
Unit tests for the cumulative sum and year-over-year change series.
"""

import math

import pandas as pd
import pytest

from analysis import build_cumulative_series, build_global_time_series, build_pct_change_series


def _global_ts(values):
    return pd.DataFrame(
        {
            "date": [pd.Timestamp(f"{1960 + i}-01-01") for i in range(len(values))],
            "avg_co2_per_capita": values,
        }
    )


class TestCumulativeSeries:

    @pytest.fixture
    def records(self, records_factory):
        return records_factory(
            [
                ("A", "AAA", 1961, 3.0, 1.0, None),
                ("A", "AAA", 1960, 1.0, 1.0, None),
                ("B", "BBB", 1960, 2.0, 1.0, None),
                ("B", "BBB", 1961, 4.0, 1.0, None),
                ("C", "CCC", 1962, 0.5, 1.0, None),
            ]
        )

    def test_sums_not_means(self, records):
        cum = build_cumulative_series(records)
        assert cum["sum_co2_per_capita"].tolist() == [3.0, 7.0, 0.5]
        assert cum["cumulative_co2_per_capita"].tolist() == [3.0, 10.0, 10.5]

    def test_non_decreasing_and_last_equals_total(self, records):
        cum = build_cumulative_series(records)
        values = cum["cumulative_co2_per_capita"].tolist()
        assert all(b >= a for a, b in zip(values, values[1:]))
        assert values[-1] == pytest.approx(cum["sum_co2_per_capita"].sum())
        assert values[-1] == pytest.approx(records["co2_per_capita"].sum())

    def test_dates_ascending(self, records):
        cum = build_cumulative_series(records)
        assert cum["date"].is_monotonic_increasing

    def test_empty(self, records_factory):
        assert build_cumulative_series(records_factory([])).empty


class TestPctChangeSeries:

    def test_first_date_missing(self):
        pct = build_pct_change_series(_global_ts([10.0, 12.0]))
        assert math.isnan(pct.iloc[0]["pct_change"])

    def test_ten_to_twelve_is_twenty_percent(self):
        pct = build_pct_change_series(_global_ts([10.0, 12.0]))
        assert pct.iloc[1]["pct_change"] == 20.0

    def test_zero_previous_is_missing_not_infinite(self):
        pct = build_pct_change_series(_global_ts([5.0, 0.0, 3.0, 6.0]))
        values = pct["pct_change"].tolist()
        assert values[1] == pytest.approx(-100.0)
        assert math.isnan(values[2])
        assert values[3] == pytest.approx(100.0)
        assert not any(math.isinf(v) for v in values)

    def test_missing_previous_is_missing(self):
        pct = build_pct_change_series(_global_ts([5.0, float("nan"), 3.0]))
        assert math.isnan(pct.iloc[1]["pct_change"])
        assert math.isnan(pct.iloc[2]["pct_change"])

    def test_unsorted_input_is_ordered_by_date(self):
        ts = _global_ts([10.0, 12.0]).iloc[::-1]
        pct = build_pct_change_series(ts)
        assert pct["date"].is_monotonic_increasing
        assert pct.iloc[1]["pct_change"] == 20.0

    def test_built_from_global_time_series(self, three_entity_records):
        ts = build_global_time_series(three_entity_records)
        pct = build_pct_change_series(ts)
        # means 16/3 -> 20/3
        assert pct.iloc[1]["pct_change"] == pytest.approx(25.0)

    def test_empty(self):
        assert build_pct_change_series(_global_ts([])).empty
