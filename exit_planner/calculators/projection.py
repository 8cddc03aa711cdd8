"""Forward projection of a normalized portfolio value (start = 1.0).

Monthly geometric Brownian motion with drift ``ln(1 + cagr)/12 - vol**2/24``
so the median path compounds at roughly ``cagr``.  Unlike the plan
simulators, ``cagr`` and ``volatility`` are fractions (``0.10`` is 10%).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from . import percentiles
from .random_variate import monthly_log_params, standard_normals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioProjection:
    initial_value: float
    best_case: Tuple[float, ...]    # 80th percentile per month
    median: Tuple[float, ...]
    worst_case: Tuple[float, ...]   # 20th percentile per month
    total_simulations: int

    @property
    def total_months(self) -> int:
        return len(self.median) - 1

    @property
    def final_return_range(self) -> Tuple[float, float, float]:
        """(best, median, worst) total return at the horizon."""
        def last(values):
            return (values[-1] if values else 1.0) - 1.0
        return last(self.best_case), last(self.median), last(self.worst_case)


def project_portfolio(cagr: float,
                      volatility: float,
                      years: int = 10,
                      trial_count: int = 5000,
                      seed: Optional[int] = None,
                      rng: Optional[np.random.Generator] = None) -> PortfolioProjection:
    if trial_count < 1:
        raise ValueError(f"trial_count must be at least 1 (got {trial_count})")
    rng = rng if rng is not None else np.random.default_rng(seed)

    total_months = years * 12
    monthly_mean, monthly_vol = monthly_log_params(cagr * 100, volatility * 100)
    monthly_mean -= 0.5 * (volatility * volatility) / 12.0

    log_returns = monthly_mean + standard_normals(rng, (trial_count, total_months)) * monthly_vol
    values = np.exp(np.cumsum(log_returns, axis=1))  # trials x months
    values.sort(axis=0)

    worst_idx = percentiles.percentile_index(trial_count, 20)
    median_idx = percentiles.percentile_index(trial_count, percentiles.MEDIAN)
    best_idx = percentiles.percentile_index(trial_count, 80)

    logger.debug("Projected %d portfolio paths over %d months", trial_count, total_months)
    return PortfolioProjection(
        initial_value=1.0,
        best_case=(1.0,) + tuple(values[best_idx].tolist()),
        median=(1.0,) + tuple(values[median_idx].tolist()),
        worst_case=(1.0,) + tuple(values[worst_idx].tolist()),
        total_simulations=trial_count,
    )
