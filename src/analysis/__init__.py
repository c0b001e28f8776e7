"""
Analysis layer
--------------

The CO2 analysis over the emission records: snapshots, GDP quartiles,
grouped means, derived series, OLS regression, rankings and charts.
"""

from .aggregations import (  # noqa: F401
    build_global_time_series,
    build_quartile_heatmap_series,
)
from .co2_analysis import (  # noqa: F401
    ANALYTICS_BASE_PREFIX,
    Co2AnalysisResult,
    render_charts,
    run_co2_analysis,
    save_co2_analysis_outputs,
)
from .derived_series import (  # noqa: F401
    build_cumulative_series,
    build_pct_change_series,
)
from .quartiles import assign_gdp_quartiles, ntile, quartile_mapping  # noqa: F401
from .rankings import (  # noqa: F401
    top_emitters_by_co2_per_capita,
    top_emitters_time_series,
)
from .regression import (  # noqa: F401
    RegressionResult,
    fit_co2_gdp_regression,
    fit_ols,
    format_regression_summary,
)

__all__ = [
    "ANALYTICS_BASE_PREFIX",
    "Co2AnalysisResult",
    "RegressionResult",
    "assign_gdp_quartiles",
    "build_cumulative_series",
    "build_global_time_series",
    "build_pct_change_series",
    "build_quartile_heatmap_series",
    "fit_co2_gdp_regression",
    "fit_ols",
    "format_regression_summary",
    "ntile",
    "quartile_mapping",
    "render_charts",
    "run_co2_analysis",
    "save_co2_analysis_outputs",
    "top_emitters_by_co2_per_capita",
    "top_emitters_time_series",
]
