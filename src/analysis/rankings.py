from __future__ import annotations

import pandas as pd


def top_emitters_by_co2_per_capita(snapshots: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    """Snapshots with the highest CO2 per capita, descending (ties keep input order)."""
    ranked = snapshots.sort_values("co2_per_capita", ascending=False, kind="stable")
    return ranked.head(n).reset_index(drop=True)


def top_emitters_time_series(
    records: pd.DataFrame,
    top_emitters: pd.DataFrame,
    n: int = 5,
) -> pd.DataFrame:
    """
    Full record history of the first `n` entities of a ranking, ordered by
    (entity_code, date).
    """
    codes = [c for c in top_emitters["entity_code"].head(n).tolist() if isinstance(c, str) and c]
    subset = records[records["entity_code"].isin(codes)]
    return subset.sort_values(["entity_code", "date"], kind="stable").reset_index(drop=True)


__all__ = ["top_emitters_by_co2_per_capita", "top_emitters_time_series"]
