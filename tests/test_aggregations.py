"""
Unit tests for the grouped means (global time series and quartile heatmap).
"""

import math

import numpy as np
import pandas as pd
import pytest

from analysis import (
    assign_gdp_quartiles,
    build_global_time_series,
    build_quartile_heatmap_series,
    quartile_mapping,
)
from transformations import select_latest_per_entity


class TestGlobalTimeSeries:

    def test_mean_per_date_ascending(self, records_factory):
        records = records_factory(
            [
                ("A", "AAA", 1962, 3.0, 1.0, None),
                ("A", "AAA", 1960, 1.0, 1.0, None),
                ("B", "BBB", 1960, 5.0, 1.0, None),
                ("B", "BBB", 1962, 7.0, 1.0, None),
                ("C", "CCC", 1961, 2.0, 1.0, None),
            ]
        )
        ts = build_global_time_series(records)
        assert list(ts.columns) == ["date", "avg_co2_per_capita"]
        assert ts["date"].tolist() == [
            pd.Timestamp("1960-01-01"),
            pd.Timestamp("1961-01-01"),
            pd.Timestamp("1962-01-01"),
        ]
        assert ts["avg_co2_per_capita"].tolist() == [3.0, 2.0, 5.0]

    def test_missing_values_ignored(self, records_factory):
        records = records_factory(
            [
                ("A", "AAA", 1960, 4.0, 1.0, None),
                ("B", "BBB", 1960, 6.0, 1.0, None),
            ]
        )
        records.loc[1, "co2_per_capita"] = np.nan
        ts = build_global_time_series(records)
        assert ts["avg_co2_per_capita"].tolist() == [4.0]

    def test_empty(self, records_factory):
        ts = build_global_time_series(records_factory([]))
        assert ts.empty
        assert list(ts.columns) == ["date", "avg_co2_per_capita"]


class TestQuartileHeatmapSeries:

    def test_year_by_quartile_means(self, three_entity_records):
        assigned = assign_gdp_quartiles(select_latest_per_entity(three_entity_records))
        heat = build_quartile_heatmap_series(three_entity_records, quartile_mapping(assigned))

        assert list(heat.columns) == ["year", "gdp_quartile", "avg_co2_per_capita"]
        assert list(zip(heat["year"], heat["gdp_quartile"])) == [
            (1960, 1),
            (1960, 2),
            (1960, 3),
            (1961, 1),
            (1961, 2),
            (1961, 3),
        ]
        assert heat["avg_co2_per_capita"].tolist() == [1.0, 5.0, 10.0, 2.0, 6.0, 12.0]

    def test_unmapped_entities_excluded(self, records_factory):
        records = records_factory(
            [
                ("A", "AAA", 2000, 2.0, 1.0, None),
                ("B", "BBB", 2000, 4.0, 1.0, None),
                ("World", "", 2000, 100.0, 1.0, None),
                ("Z", "ZZZ", 2000, 50.0, 1.0, None),
            ]
        )
        heat = build_quartile_heatmap_series(records, {"AAA": 1, "BBB": 1})
        assert len(heat) == 1
        assert heat.iloc[0]["avg_co2_per_capita"] == pytest.approx(3.0)

    def test_no_mapping_gives_empty_series(self, three_entity_records):
        heat = build_quartile_heatmap_series(three_entity_records, {})
        assert heat.empty

    def test_group_mean_not_duplicated_by_join(self, records_factory):
        records = records_factory(
            [
                ("A", "AAA", 2000, 2.0, 1.0, None),
                ("A", "AAA", 2001, 8.0, 1.0, None),
            ]
        )
        heat = build_quartile_heatmap_series(records, {"AAA": 4})
        assert heat["avg_co2_per_capita"].tolist() == [2.0, 8.0]
        assert not any(math.isnan(v) for v in heat["avg_co2_per_capita"])
