"""
Chart renderers for the CO2 analysis.

Each function takes a prepared table (never modified) and returns the PNG
bytes of one chart, ready for `StorageAdapter.write_raw`.
"""

from __future__ import annotations

import io
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from .quartiles import N_QUARTILES, QUARTILE_COLUMN  # noqa: E402
from .regression import RegressionResult  # noqa: E402

CO2_PC_LABEL = "t CO2 per Capita"
GDP_PC_LABEL = "GDP per Capita (USD)"


def _finish(title: str, xlabel: str, ylabel: str) -> bytes:
    plt.title(title)
    plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.grid(True, linestyle="--", alpha=0.3)
    plt.tight_layout()
    buf = io.BytesIO()
    plt.savefig(buf, format="png", dpi=150)
    plt.close()
    return buf.getvalue()


def plot_global_time_series(global_ts: pd.DataFrame) -> bytes:
    plt.figure(figsize=(10, 5))
    plt.plot(global_ts["date"], global_ts["avg_co2_per_capita"], color="forestgreen")
    return _finish("Global Average CO2 per Capita Over Time", "Date", CO2_PC_LABEL)


def plot_gdp_vs_co2(snapshots: pd.DataFrame) -> bytes:
    plt.figure(figsize=(10, 6))
    plt.scatter(snapshots["gdp_per_capita"], snapshots["co2_per_capita"], alpha=0.5, edgecolors="none")
    return _finish("GDP per Capita vs CO2 per Capita (Latest)", GDP_PC_LABEL, CO2_PC_LABEL)


def plot_regression(snapshots: pd.DataFrame, result: RegressionResult) -> bytes:
    """Scatter of the snapshots with the fitted line when the fit is defined."""
    plt.figure(figsize=(10, 6))
    x = snapshots["gdp_per_capita"].to_numpy(dtype="float64")
    y = snapshots["co2_per_capita"].to_numpy(dtype="float64")
    plt.scatter(x, y, alpha=0.3, edgecolors="none")

    title = "Linear Regression: CO2 per Capita ~ GDP per Capita"
    if result.is_defined and x.size:
        x_line = np.linspace(np.nanmin(x), np.nanmax(x), 200)
        plt.plot(x_line, result.intercept + result.slope * x_line, color="blue", linewidth=2)
        r2 = "NA" if result.r_squared is None else f"{result.r_squared:.3f}"
        p = "NA" if result.p_value is None else f"{result.p_value:.3g}"
        title = f"{title}\nR²={r2}; p={p}"
    else:
        title = f"{title}\n(fit undefined: {result.reason})"
    return _finish(title, GDP_PC_LABEL, CO2_PC_LABEL)


def plot_top_emitters(top_emitters: pd.DataFrame) -> bytes:
    # barh draws bottom-up; reverse so the largest sits on top
    ordered = top_emitters.iloc[::-1]
    plt.figure(figsize=(9, 6))
    plt.barh(ordered["entity_name"].astype(str), ordered["co2_per_capita"], color="darkslateblue")
    return _finish("Top 10 Countries by CO2 per Capita (Latest)", CO2_PC_LABEL, "")


def plot_top_emitters_time_series(series: pd.DataFrame) -> bytes:
    plt.figure(figsize=(10, 6))
    for name, df_entity in series.groupby("entity_name", sort=True):
        plt.plot(df_entity["date"], df_entity["co2_per_capita"], label=str(name))
    if not series.empty:
        plt.legend(title="Country", frameon=False)
    return _finish("CO2 per Capita Over Time: Top 5 Countries", "Date", CO2_PC_LABEL)


def _quartile_groups(assigned: pd.DataFrame) -> Dict[int, np.ndarray]:
    groups: Dict[int, np.ndarray] = {}
    for quartile in range(1, N_QUARTILES + 1):
        values = assigned.loc[assigned[QUARTILE_COLUMN] == quartile, "co2_per_capita"]
        values = values.dropna().to_numpy(dtype="float64")
        if values.size:
            groups[quartile] = values
    return groups


def plot_quartile_boxplot(assigned: pd.DataFrame) -> bytes:
    plt.figure(figsize=(8, 6))
    groups = _quartile_groups(assigned)
    if groups:
        plt.boxplot(list(groups.values()), positions=list(groups.keys()))
        plt.xticks(list(groups.keys()), [str(q) for q in groups])
    return _finish("CO2 per Capita by GDP per Capita Quartile", "GDP Quartile", CO2_PC_LABEL)


def plot_quartile_violin(assigned: pd.DataFrame) -> bytes:
    plt.figure(figsize=(8, 6))
    # the kernel density needs at least two distinct values per group
    groups = {q: v for q, v in _quartile_groups(assigned).items() if np.unique(v).size >= 2}
    if groups:
        plt.violinplot(list(groups.values()), positions=list(groups.keys()), showmedians=True)
        plt.xticks(list(groups.keys()), [str(q) for q in groups])
    return _finish("Distribution of CO2 per Capita by GDP Quartile", "GDP Quartile", CO2_PC_LABEL)


def plot_quartile_heatmap(heat: pd.DataFrame) -> bytes:
    plt.figure(figsize=(12, 4))
    if not heat.empty:
        grid = heat.pivot(index=QUARTILE_COLUMN, columns="year", values="avg_co2_per_capita")
        # imshow cells are evenly spaced, so fill year gaps with NaN
        years: List[int] = list(range(int(min(grid.columns)), int(max(grid.columns)) + 1))
        quartiles: List[int] = list(range(int(min(grid.index)), int(max(grid.index)) + 1))
        grid = grid.reindex(index=quartiles, columns=years)
        image = plt.imshow(
            grid.to_numpy(dtype="float64"),
            aspect="auto",
            origin="lower",
            cmap="viridis",
            extent=(min(years) - 0.5, max(years) + 0.5, min(quartiles) - 0.5, max(quartiles) + 0.5),
        )
        plt.colorbar(image, label="Avg t CO2 per Capita")
        plt.yticks(quartiles, [str(q) for q in quartiles])
    return _finish("Avg CO2 per Capita by Year & GDP Quartile", "Year", "GDP Quartile")


def plot_cumulative(cumulative: pd.DataFrame) -> bytes:
    plt.figure(figsize=(10, 5))
    plt.plot(cumulative["date"], cumulative["cumulative_co2_per_capita"], color="purple")
    return _finish("Cumulative Sum of CO2 per Capita Over Time", "Date", "Cumulative t CO2 per Capita")


def plot_pct_change(pct_change: pd.DataFrame) -> bytes:
    plt.figure(figsize=(10, 5))
    plt.plot(pct_change["date"], pct_change["pct_change"], color="orange")
    return _finish("Year-over-Year % Change in Global Avg CO2 per Capita", "Date", "% Change")


def plot_co2_vs_total(snapshots: pd.DataFrame) -> bytes:
    """CO2 per capita against total CO2 on a log x axis, with a fit on log10(total)."""
    plt.figure(figsize=(10, 6))
    df = snapshots[snapshots["total_co2"] > 0]
    x = df["total_co2"].to_numpy(dtype="float64")
    y = df["co2_per_capita"].to_numpy(dtype="float64")
    plt.scatter(x, y, alpha=0.5, edgecolors="none")
    if x.size:
        plt.xscale("log")
    if np.unique(x).size >= 2:
        slope, intercept = np.polyfit(np.log10(x), y, 1)
        x_line = np.logspace(np.log10(x.min()), np.log10(x.max()), 200)
        plt.plot(x_line, intercept + slope * np.log10(x_line), color="darkgreen")
    return _finish("CO2 per Capita vs Total CO2 Emissions (Latest)", "Total CO2 (Mt, log scale)", CO2_PC_LABEL)


__all__ = [
    "plot_global_time_series",
    "plot_gdp_vs_co2",
    "plot_regression",
    "plot_top_emitters",
    "plot_top_emitters_time_series",
    "plot_quartile_boxplot",
    "plot_quartile_violin",
    "plot_quartile_heatmap",
    "plot_cumulative",
    "plot_pct_change",
    "plot_co2_vs_total",
]
