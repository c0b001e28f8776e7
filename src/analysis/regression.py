"""
Simple linear regression of CO2 per capita on GDP per capita.

Ordinary least squares with one predictor, closed form:

    slope     = Sxy / Sxx
    intercept = mean(y) - slope * mean(x)
    R²        = 1 - SSE / SST
    se(slope) = sqrt(SSE / (n - 2) / Sxx)
    p         = 2 * P(T_{n-2} > |slope / se(slope)|)

The fit is "undefined" (no exception) when fewer than 3 complete pairs are
available or when GDP per capita has no variance.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from scipy import stats

MIN_OBSERVATIONS = 3


@dataclass(frozen=True)
class RegressionResult:
    slope: Optional[float]
    intercept: Optional[float]
    r_squared: Optional[float]
    p_value: Optional[float]
    n_observations: int
    std_error: Optional[float] = None
    t_statistic: Optional[float] = None
    reason: Optional[str] = None

    @property
    def is_defined(self) -> bool:
        return self.slope is not None and self.intercept is not None

    @classmethod
    def undefined(cls, n_observations: int, reason: str) -> "RegressionResult":
        return cls(
            slope=None,
            intercept=None,
            r_squared=None,
            p_value=None,
            n_observations=n_observations,
            reason=reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["is_defined"] = self.is_defined
        return data


def fit_ols(x: np.ndarray, y: np.ndarray) -> RegressionResult:
    """Fit y = intercept + slope * x over the complete (finite) pairs."""
    x = np.asarray(x, dtype="float64")
    y = np.asarray(y, dtype="float64")
    complete = np.isfinite(x) & np.isfinite(y)
    x = x[complete]
    y = y[complete]
    n = int(x.size)

    if n < MIN_OBSERVATIONS:
        return RegressionResult.undefined(n, f"need at least {MIN_OBSERVATIONS} observations, got {n}")

    if np.ptp(x) == 0.0:
        return RegressionResult.undefined(n, "gdp_per_capita has zero variance")

    x_mean = x.mean()
    y_mean = y.mean()
    dx = x - x_mean
    sxx = float(np.dot(dx, dx))

    slope = float(np.dot(dx, y - y_mean)) / sxx
    intercept = float(y_mean - slope * x_mean)

    residuals = y - (intercept + slope * x)
    sse = float(np.dot(residuals, residuals))
    sst = float(np.dot(y - y_mean, y - y_mean))
    r_squared: Optional[float] = None if sst == 0.0 else max(0.0, 1.0 - sse / sst)

    dof = n - 2
    std_error = math.sqrt(sse / dof / sxx)
    t_statistic: Optional[float]
    p_value: Optional[float]
    if std_error > 0.0:
        t_statistic = slope / std_error
        p_value = float(2.0 * stats.t.sf(abs(t_statistic), df=dof))
    elif slope != 0.0:
        # exact fit
        t_statistic = None
        p_value = 0.0
    else:
        t_statistic = None
        p_value = None

    return RegressionResult(
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
        p_value=p_value,
        n_observations=n,
        std_error=std_error,
        t_statistic=t_statistic,
    )


def fit_co2_gdp_regression(snapshots: pd.DataFrame) -> RegressionResult:
    """Regress co2_per_capita on gdp_per_capita over the entity snapshots."""
    if snapshots.empty:
        return RegressionResult.undefined(0, "no snapshots")
    return fit_ols(
        snapshots["gdp_per_capita"].to_numpy(dtype="float64"),
        snapshots["co2_per_capita"].to_numpy(dtype="float64"),
    )


def _fmt(value: Optional[float], spec: str = ".6g") -> str:
    return "NA" if value is None else format(value, spec)


def format_regression_summary(result: RegressionResult) -> str:
    """Text block printed after the regression step."""
    lines = ["===== Regression Summary =====", "Model: co2_per_capita ~ gdp_per_capita"]
    if not result.is_defined:
        lines.append(f"Fit undefined ({result.reason}); n = {result.n_observations}")
        return "\n".join(lines)

    lines.extend(
        [
            f"{'':<16}{'Estimate':>14}{'Std. Error':>14}{'t value':>12}{'Pr(>|t|)':>12}",
            f"{'(Intercept)':<16}{_fmt(result.intercept):>14}",
            f"{'gdp_per_capita':<16}{_fmt(result.slope):>14}{_fmt(result.std_error):>14}"
            f"{_fmt(result.t_statistic, '.4g'):>12}{_fmt(result.p_value, '.3g'):>12}",
            f"R-squared: {_fmt(result.r_squared, '.4f')}",
            f"Observations: {result.n_observations}",
        ]
    )
    return "\n".join(lines)


__all__ = [
    "MIN_OBSERVATIONS",
    "RegressionResult",
    "fit_ols",
    "fit_co2_gdp_regression",
    "format_regression_summary",
]
