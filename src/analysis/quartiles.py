"""
GDP-per-capita quartiles over the entity snapshots.

Binning follows the dplyr `ntile` convention: entities are ranked by
gdp_per_capita ascending (ties keep input order), and for N entities the
first `N % 4` bins receive `ceil(N / 4)` members while the remaining bins
receive `floor(N / 4)`. With fewer than four entities, bins 1..N are used.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd

N_QUARTILES = 4
QUARTILE_COLUMN = "gdp_quartile"


def ntile(values: pd.Series, n: int = N_QUARTILES) -> np.ndarray:
    """
    Bin `values` into `n` near-equal groups labelled 1..n.

    Ranks are positional after a stable ascending sort, so equal values are
    split across bins by input order. Missing values are not expected here
    (snapshots always carry gdp_per_capita).
    """
    size = len(values)
    if size == 0:
        return np.empty(0, dtype="int64")

    order = np.argsort(values.to_numpy(dtype="float64"), kind="stable")
    ranks = np.empty(size, dtype="int64")
    ranks[order] = np.arange(1, size + 1)

    n_larger = size % n
    larger_size = -(-size // n)
    smaller_size = size // n
    larger_threshold = larger_size * n_larger

    bins = np.empty(size, dtype="int64")
    in_larger = ranks <= larger_threshold
    bins[in_larger] = (ranks[in_larger] - 1) // larger_size + 1
    if smaller_size > 0:
        rest = ranks[~in_larger] - larger_threshold
        bins[~in_larger] = (rest - 1) // smaller_size + 1 + n_larger
    return bins


def assign_gdp_quartiles(snapshots: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy of `snapshots` with an integer `gdp_quartile` column
    (1 = lowest GDP per capita, 4 = highest). Every snapshot gets exactly one
    label.
    """
    df = snapshots.reset_index(drop=True).copy()
    df[QUARTILE_COLUMN] = pd.Series(ntile(df["gdp_per_capita"]), index=df.index, dtype="int64")
    return df


def quartile_mapping(assigned: pd.DataFrame) -> Dict[str, int]:
    """
    entity_code -> gdp_quartile, for joining records to their quartile.

    Entities without a code cannot be joined and are left out; if a code
    appears more than once, the first snapshot's label is kept.
    """
    mapping: Dict[str, int] = {}
    for code, quartile in zip(assigned["entity_code"], assigned[QUARTILE_COLUMN]):
        if pd.isna(code) or str(code) == "":
            continue
        mapping.setdefault(str(code), int(quartile))
    return mapping


__all__ = [
    "N_QUARTILES",
    "QUARTILE_COLUMN",
    "ntile",
    "assign_gdp_quartiles",
    "quartile_mapping",
]
