"""
Grouped means of CO2 per capita.

- global time series: mean co2_per_capita per date over all records
- quartile heatmap: mean co2_per_capita per (year, gdp_quartile), after an
  inner join of records to their entity's snapshot quartile

Means skip missing values; groups are returned in ascending key order.
"""

from __future__ import annotations

from typing import Mapping

import pandas as pd

from .quartiles import QUARTILE_COLUMN

GLOBAL_TS_COLUMNS = ["date", "avg_co2_per_capita"]
HEATMAP_COLUMNS = ["year", QUARTILE_COLUMN, "avg_co2_per_capita"]


def build_global_time_series(records: pd.DataFrame) -> pd.DataFrame:
    """One row per distinct date with the mean CO2 per capita, ascending by date."""
    if records.empty:
        return pd.DataFrame(columns=GLOBAL_TS_COLUMNS)

    global_ts = (
        records.groupby("date", sort=True)["co2_per_capita"]
        .mean()
        .rename("avg_co2_per_capita")
        .reset_index()
    )
    return global_ts[GLOBAL_TS_COLUMNS]


def build_quartile_heatmap_series(
    records: pd.DataFrame,
    quartiles: Mapping[str, int],
) -> pd.DataFrame:
    """
    Mean CO2 per capita by (year, gdp_quartile).

    `quartiles` maps entity_code -> quartile (see `quartile_mapping`).
    Records whose entity_code is not in the mapping are excluded from this
    series only.
    """
    if records.empty or not quartiles:
        return pd.DataFrame(columns=HEATMAP_COLUMNS)

    mapping_df = pd.DataFrame(
        {
            "entity_code": pd.Series(list(quartiles.keys()), dtype="string"),
            QUARTILE_COLUMN: pd.Series(list(quartiles.values()), dtype="int64"),
        }
    )
    codes = records[["entity_code", "year", "co2_per_capita"]].copy()
    codes["entity_code"] = codes["entity_code"].astype("string")

    joined = codes.merge(mapping_df, on="entity_code", how="inner")
    unmatched = len(codes) - len(joined)
    if unmatched:
        print(f"[analysis] {unmatched} records without a GDP quartile excluded from the heatmap series.")

    if joined.empty:
        return pd.DataFrame(columns=HEATMAP_COLUMNS)

    heat = (
        joined.groupby(["year", QUARTILE_COLUMN], sort=True)["co2_per_capita"]
        .mean()
        .rename("avg_co2_per_capita")
        .reset_index()
    )
    return heat[HEATMAP_COLUMNS]


__all__ = [
    "GLOBAL_TS_COLUMNS",
    "HEATMAP_COLUMNS",
    "build_global_time_series",
    "build_quartile_heatmap_series",
]
