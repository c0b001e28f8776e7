"""
Series derived from the per-date CO2 per capita aggregates.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

CUMULATIVE_COLUMNS = ["date", "sum_co2_per_capita", "cumulative_co2_per_capita"]
PCT_CHANGE_COLUMNS = ["date", "avg_co2_per_capita", "pct_change"]


def build_cumulative_series(records: pd.DataFrame) -> pd.DataFrame:
    """
    Per date, the sum of co2_per_capita over all records (missing values
    count as 0), and its running total over ascending dates.
    """
    if records.empty:
        return pd.DataFrame(columns=CUMULATIVE_COLUMNS)

    per_date = (
        records.groupby("date", sort=True)["co2_per_capita"]
        .sum(min_count=0)
        .rename("sum_co2_per_capita")
        .reset_index()
    )
    per_date["cumulative_co2_per_capita"] = per_date["sum_co2_per_capita"].cumsum()
    return per_date[CUMULATIVE_COLUMNS]


def build_pct_change_series(global_ts: pd.DataFrame) -> pd.DataFrame:
    """
    Year-over-year percent change of the global mean:

        pct_change = 100 * (current - previous) / previous

    The first date, and any date whose previous mean is 0 or missing, gets
    NaN instead of a value.
    """
    if global_ts.empty:
        return pd.DataFrame(columns=PCT_CHANGE_COLUMNS)

    df = global_ts.sort_values("date", kind="stable").reset_index(drop=True)
    current = df["avg_co2_per_capita"].astype("float64")
    previous = current.shift(1)

    defined = previous.notna() & (previous != 0) & current.notna()
    pct = pd.Series(np.nan, index=df.index, dtype="float64")
    pct[defined] = 100.0 * (current[defined] - previous[defined]) / previous[defined]

    out = df[["date", "avg_co2_per_capita"]].copy()
    out["pct_change"] = pct
    return out[PCT_CHANGE_COLUMNS]


__all__ = [
    "CUMULATIVE_COLUMNS",
    "PCT_CHANGE_COLUMNS",
    "build_cumulative_series",
    "build_pct_change_series",
]
