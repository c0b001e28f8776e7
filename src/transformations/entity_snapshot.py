"""
Latest record per entity ("snapshot").

For every (entity_code, entity_name) pair, keeps the emission record with
the highest year. When several records share that year, the first one in
input order wins. Output groups follow first-seen order.
"""

from __future__ import annotations

import pandas as pd

ENTITY_KEYS = ["entity_code", "entity_name"]


def select_latest_per_entity(records: pd.DataFrame) -> pd.DataFrame:
    """
    Return one row per entity: its most recent emission record.

    The input is not modified; the result has a fresh RangeIndex and the
    same columns as `records`.
    """
    if records.empty:
        return records.iloc[0:0].copy()

    df = records.reset_index(drop=True)
    # idxmax returns the first label holding the max, i.e. the earliest row.
    latest_idx = df.groupby(ENTITY_KEYS, sort=False, dropna=False)["year"].idxmax()
    snapshots = df.loc[latest_idx.to_numpy()].reset_index(drop=True)

    print(f"[snapshot] {len(snapshots)} entities selected from {len(df)} records.")
    return snapshots


__all__ = ["ENTITY_KEYS", "select_latest_per_entity"]
