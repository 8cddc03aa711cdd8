"""Monte Carlo engine for the decumulation (withdrawal) phase.

Starting from the target nest egg, every month applies a log-normal return
and then subtracts the fixed withdrawal.  Balances are snapshotted at each
year end (clamped at zero for charting) and the first year that ends at or
below zero is recorded as the trial's depletion year.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import pandas as pd

from ..config import DEFAULT_HORIZON_YEARS, DEFAULT_TRIAL_COUNT, PROGRESS_INTERVAL, PlanParameters
from . import percentiles
from .percentiles import RepresentativePaths
from .random_variate import Sampler, monthly_log_params, resolve_sampler

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

SHORT_TERM_YEARS = 10


class _ZeroVolatility:
    """Sampler that always returns the mean."""

    def sample(self, mean: float, stddev: float) -> float:
        return mean


@dataclass(frozen=True)
class RetirementPath:
    yearly_assets: Tuple[float, ...]  # year 0 is the starting balance
    depletion_year: Optional[int]

    @property
    def final_asset(self) -> float:
        return self.yearly_assets[-1] if self.yearly_assets else 0.0

    @property
    def asset_at_10_years(self) -> float:
        if len(self.yearly_assets) > SHORT_TERM_YEARS:
            return self.yearly_assets[SHORT_TERM_YEARS]
        return self.final_asset

    @property
    def is_depleted(self) -> bool:
        return self.depletion_year is not None


@dataclass(frozen=True)
class RankedPaths:
    """Five representative trials, best first."""

    very_best: RetirementPath
    lucky: RetirementPath
    median: RetirementPath
    unlucky: RetirementPath
    very_worst: RetirementPath

    def as_representative(self) -> RepresentativePaths[RetirementPath]:
        return RepresentativePaths(best=self.very_best, median=self.median, worst=self.very_worst)


@dataclass(frozen=True)
class DecumulationOutcome:
    long_term: RankedPaths
    short_term: RankedPaths
    deterministic_path: RetirementPath
    depletion_years: Tuple[Optional[int], ...]  # one entry per trial, in run order
    total_trials: int

    @property
    def representative_paths(self) -> RepresentativePaths[RetirementPath]:
        return self.long_term.as_representative()

    @property
    def best_path(self) -> RetirementPath:
        return self.long_term.very_best

    @property
    def median_path(self) -> RetirementPath:
        return self.long_term.median

    @property
    def worst_path(self) -> RetirementPath:
        return self.long_term.very_worst

    @property
    def depletion_flags(self) -> Tuple[bool, ...]:
        return tuple(year is not None for year in self.depletion_years)

    @property
    def depletion_probability(self) -> float:
        if not self.total_trials:
            return 0.0
        return sum(self.depletion_flags) / self.total_trials

    @property
    def survival_rate(self) -> float:
        return 1.0 - self.depletion_probability

    @property
    def median_depletion_year(self) -> Optional[int]:
        return self.median_path.depletion_year

    @property
    def worst_depletion_year(self) -> Optional[int]:
        return self.worst_path.depletion_year

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame({
            "best": pd.Series(self.best_path.yearly_assets, dtype=float),
            "median": pd.Series(self.median_path.yearly_assets, dtype=float),
            "worst": pd.Series(self.worst_path.yearly_assets, dtype=float),
            "deterministic": pd.Series(self.deterministic_path.yearly_assets, dtype=float),
        })
        df.index.name = "year"
        return df


def _run_trial(initial_asset: float,
               monthly_withdrawal: float,
               monthly_mean: float,
               monthly_vol: float,
               years: int,
               sampler: Sampler) -> RetirementPath:
    yearly: List[float] = [initial_asset]
    balance = initial_asset
    depletion_year = None

    for year in range(1, years + 1):
        for _ in range(12):
            r = sampler.sample(monthly_mean, monthly_vol)
            balance *= math.exp(r)
            balance -= monthly_withdrawal

        yearly.append(max(0.0, balance))
        if balance <= 0 and depletion_year is None:
            depletion_year = year

    return RetirementPath(tuple(yearly), depletion_year)


def deterministic_path(initial_asset: float,
                       monthly_withdrawal: float,
                       annual_return_pct: float,
                       years: int = DEFAULT_HORIZON_YEARS) -> RetirementPath:
    """Baseline trial: the mean return every month, no volatility."""
    monthly_mean, _ = monthly_log_params(annual_return_pct, 0.0)
    return _run_trial(initial_asset, monthly_withdrawal, monthly_mean, 0.0, years, _ZeroVolatility())


def _rank_key(balance_of: Callable[[RetirementPath], float]):
    # Higher balance first; on ties a path that never depleted beats one that
    # depleted, and later depletion beats earlier.
    def key(path: RetirementPath):
        depletion = path.depletion_year if path.depletion_year is not None else math.inf
        return (-balance_of(path), -depletion)
    return key


def rank_paths(paths: Sequence[RetirementPath],
               balance_of: Callable[[RetirementPath], float] = lambda p: p.final_asset) -> RankedPaths:
    """Sort by balance descending and pick the 10/30/50/70/90% trials."""
    ordered = sorted(paths, key=_rank_key(balance_of))
    return RankedPaths(
        very_best=percentiles.pick(ordered, percentiles.BEST),
        lucky=percentiles.pick(ordered, percentiles.LUCKY),
        median=percentiles.pick(ordered, percentiles.MEDIAN),
        unlucky=percentiles.pick(ordered, percentiles.UNLUCKY),
        very_worst=percentiles.pick(ordered, percentiles.WORST),
    )


def simulate(initial_asset: float,
             monthly_withdrawal: float,
             annual_return_pct: float,
             volatility_pct: float,
             years: int = DEFAULT_HORIZON_YEARS,
             trial_count: int = DEFAULT_TRIAL_COUNT,
             progress_callback: Optional[ProgressCallback] = None,
             seed: Optional[int] = None,
             sampler: Optional[Sampler] = None) -> DecumulationOutcome:
    """Survival of ``initial_asset`` under a fixed monthly withdrawal.

    ``progress_callback`` receives the number of completed trials every 200
    trials and once more after the last one.  The granularity is coarse on
    purpose; it is a progress hint, not a checkpoint.
    """
    if trial_count < 1:
        raise ValueError(f"trial_count must be at least 1 (got {trial_count})")
    if years < 1:
        raise ValueError(f"years must be at least 1 (got {years})")

    sampler = resolve_sampler(sampler, seed)
    monthly_mean, monthly_vol = monthly_log_params(annual_return_pct, volatility_pct)

    logger.info(
        "Decumulation: %d trials over %d years, start=%.0f withdrawal=%.0f mean=%.2f%% vol=%.2f%%",
        trial_count, years, initial_asset, monthly_withdrawal, annual_return_pct, volatility_pct,
    )

    paths: List[RetirementPath] = []
    for i in range(trial_count):
        paths.append(_run_trial(initial_asset, monthly_withdrawal, monthly_mean, monthly_vol, years, sampler))

        completed = i + 1
        if progress_callback is not None and (completed % PROGRESS_INTERVAL == 0 or completed == trial_count):
            logger.debug("Decumulation progress: %d/%d", completed, trial_count)
            progress_callback(completed)

    outcome = DecumulationOutcome(
        long_term=rank_paths(paths),
        short_term=rank_paths(paths, balance_of=lambda p: p.asset_at_10_years),
        deterministic_path=deterministic_path(initial_asset, monthly_withdrawal, annual_return_pct, years),
        depletion_years=tuple(p.depletion_year for p in paths),
        total_trials=trial_count,
    )
    logger.info("Decumulation finished: depletion probability %.1f%%", outcome.depletion_probability * 100)
    return outcome


def decumulate(plan: PlanParameters,
               progress_callback: Optional[ProgressCallback] = None,
               seed: Optional[int] = None,
               sampler: Optional[Sampler] = None) -> DecumulationOutcome:
    """Withdraw ``plan.desired_monthly_withdrawal`` from ``plan.target_assets``."""
    plan.validate()
    return simulate(
        initial_asset=plan.target_assets,
        monthly_withdrawal=plan.desired_monthly_withdrawal,
        annual_return_pct=plan.mean_return_post,
        volatility_pct=plan.volatility_post,
        years=plan.horizon_years_post,
        trial_count=plan.trial_count,
        progress_callback=progress_callback,
        seed=seed,
        sampler=sampler,
    )
