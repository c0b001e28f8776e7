"""
The fixed CO2 analysis sequence over the OWID emission records.

    records (loader output)
      -> latest snapshot per entity
      -> GDP per capita quartiles
      -> global time series, year x quartile heatmap series
      -> cumulative sum, year-over-year % change
      -> OLS regression co2_per_capita ~ gdp_per_capita
      -> top emitters tables

`run_co2_analysis` is pure: it returns a `Co2AnalysisResult` holding fresh
tables. `save_co2_analysis_outputs` writes them, plus the charts, under

    analytics/owid_co2/snapshot_date=<YYYYMMDD>/
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import pandas as pd

from adapters import StorageAdapter
from transformations.entity_snapshot import select_latest_per_entity
from . import charts
from .aggregations import build_global_time_series, build_quartile_heatmap_series
from .derived_series import build_cumulative_series, build_pct_change_series
from .quartiles import assign_gdp_quartiles, quartile_mapping
from .rankings import top_emitters_by_co2_per_capita, top_emitters_time_series
from .regression import RegressionResult, fit_co2_gdp_regression, format_regression_summary

ANALYTICS_BASE_PREFIX = "analytics/owid_co2"
REGRESSION_JSON_NAME = "regression_summary.json"
REGRESSION_TXT_NAME = "regression_summary.txt"

TOP_EMITTERS_N = 10
TOP_EMITTERS_SERIES_N = 5


@dataclass(frozen=True)
class Co2AnalysisResult:
    snapshots: pd.DataFrame
    quartiles: pd.DataFrame
    global_time_series: pd.DataFrame
    quartile_heatmap: pd.DataFrame
    cumulative: pd.DataFrame
    pct_change: pd.DataFrame
    regression: RegressionResult
    top_emitters: pd.DataFrame
    top_emitters_series: pd.DataFrame

    def tables(self) -> Dict[str, pd.DataFrame]:
        """Artefact name -> table, in output order."""
        return {
            "entity_snapshots": self.snapshots,
            "gdp_quartiles": self.quartiles,
            "global_time_series": self.global_time_series,
            "quartile_heatmap": self.quartile_heatmap,
            "cumulative_co2_per_capita": self.cumulative,
            "yoy_pct_change": self.pct_change,
            "top_emitters": self.top_emitters,
            "top_emitters_series": self.top_emitters_series,
        }


def run_co2_analysis(records: pd.DataFrame) -> Co2AnalysisResult:
    """Run the whole analysis sequence over the emission records."""
    snapshots = select_latest_per_entity(records)
    assigned = assign_gdp_quartiles(snapshots)

    global_ts = build_global_time_series(records)
    heat = build_quartile_heatmap_series(records, quartile_mapping(assigned))

    cumulative = build_cumulative_series(records)
    pct_change = build_pct_change_series(global_ts)

    regression = fit_co2_gdp_regression(snapshots)

    top = top_emitters_by_co2_per_capita(snapshots, n=TOP_EMITTERS_N)
    top_series = top_emitters_time_series(records, top, n=TOP_EMITTERS_SERIES_N)

    return Co2AnalysisResult(
        snapshots=snapshots,
        quartiles=assigned,
        global_time_series=global_ts,
        quartile_heatmap=heat,
        cumulative=cumulative,
        pct_change=pct_change,
        regression=regression,
        top_emitters=top,
        top_emitters_series=top_series,
    )


def render_charts(result: Co2AnalysisResult) -> Dict[str, bytes]:
    """PNG file name -> image bytes, one entry per chart."""
    renderers: Dict[str, Callable[[], bytes]] = {
        "global_time_series.png": lambda: charts.plot_global_time_series(result.global_time_series),
        "gdp_vs_co2_scatter.png": lambda: charts.plot_gdp_vs_co2(result.snapshots),
        "regression.png": lambda: charts.plot_regression(result.snapshots, result.regression),
        "top_emitters.png": lambda: charts.plot_top_emitters(result.top_emitters),
        "top_emitters_series.png": lambda: charts.plot_top_emitters_time_series(result.top_emitters_series),
        "gdp_quartile_boxplot.png": lambda: charts.plot_quartile_boxplot(result.quartiles),
        "gdp_quartile_violin.png": lambda: charts.plot_quartile_violin(result.quartiles),
        "quartile_heatmap.png": lambda: charts.plot_quartile_heatmap(result.quartile_heatmap),
        "cumulative_co2_per_capita.png": lambda: charts.plot_cumulative(result.cumulative),
        "yoy_pct_change.png": lambda: charts.plot_pct_change(result.pct_change),
        "co2_vs_total_co2.png": lambda: charts.plot_co2_vs_total(result.snapshots),
    }
    return {name: render() for name, render in renderers.items()}


def save_co2_analysis_outputs(
    result: Co2AnalysisResult,
    storage: StorageAdapter,
    *,
    snapshot_date: Optional[str] = None,
    include_charts: bool = True,
) -> List[str]:
    """
    Write every table as CSV, the regression summary as JSON and text, and
    (optionally) every chart as PNG. Returns the written locations.
    """
    if snapshot_date is None:
        snapshot_date = datetime.now(timezone.utc).strftime("%Y%m%d")
    prefix = f"{ANALYTICS_BASE_PREFIX}/snapshot_date={snapshot_date}"

    locations: List[str] = []
    for name, table in result.tables().items():
        locations.append(storage.write_csv(table, f"{prefix}/{name}.csv"))

    regression_json = json.dumps(result.regression.to_dict(), indent=2)
    locations.append(storage.write_raw(f"{prefix}/{REGRESSION_JSON_NAME}", regression_json.encode("utf-8")))
    summary = format_regression_summary(result.regression) + "\n"
    locations.append(storage.write_raw(f"{prefix}/{REGRESSION_TXT_NAME}", summary.encode("utf-8")))

    if include_charts:
        for file_name, png in render_charts(result).items():
            locations.append(storage.write_raw(f"{prefix}/{file_name}", png))

    print(f"[analysis] {len(locations)} artefacts written under {prefix}.")
    return locations


__all__ = [
    "ANALYTICS_BASE_PREFIX",
    "REGRESSION_JSON_NAME",
    "REGRESSION_TXT_NAME",
    "Co2AnalysisResult",
    "run_co2_analysis",
    "render_charts",
    "save_co2_analysis_outputs",
]
