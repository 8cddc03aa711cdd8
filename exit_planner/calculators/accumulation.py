"""Monte Carlo engine for the accumulation (saving) phase.

Each trial starts from the current net worth and, month by month, adds the
fixed contribution and applies a log-normal return
``exp(Normal(ln(1 + mean) / 12, vol / sqrt(12)))``.  A trial succeeds in the
month its balance reaches the target, fails as soon as the balance drops to
zero or below, and fails by exhaustion if neither happens within
``max_months``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from ..config import DEFAULT_MAX_MONTHS, DEFAULT_TRIAL_COUNT, PROGRESS_INTERVAL, PlanParameters
from . import percentiles
from .percentiles import RepresentativePaths
from .random_variate import Sampler, monthly_log_params, resolve_sampler

logger = logging.getLogger(__name__)

# completed trials, success month counts so far, tracked paths so far
ProgressCallback = Callable[[int, Tuple[int, ...], Tuple["AssetPath", ...]], None]


@dataclass(frozen=True)
class AssetPath:
    """One trial: monthly balances (starting balance first) and its outcome."""

    monthly_assets: Tuple[float, ...]
    months_to_target: Optional[int]

    @property
    def is_success(self) -> bool:
        return self.months_to_target is not None


class ConfidenceLevel(Enum):
    VERY_HIGH = "very high"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    VERY_LOW = "very low"

    @classmethod
    def from_success_rate(cls, rate: float) -> "ConfidenceLevel":
        if rate >= 0.95:
            return cls.VERY_HIGH
        if rate >= 0.85:
            return cls.HIGH
        if rate >= 0.70:
            return cls.MODERATE
        if rate >= 0.50:
            return cls.LOW
        return cls.VERY_LOW


@dataclass(frozen=True)
class AccumulationOutcome:
    success_rate: float
    success_months: Tuple[int, ...]  # sorted ascending
    failure_count: int
    total_trials: int
    representative_paths: Optional[RepresentativePaths[AssetPath]] = field(default=None, compare=False)

    @property
    def success_count(self) -> int:
        return len(self.success_months)

    @property
    def average_months(self) -> float:
        if not self.success_months:
            return 0.0
        return sum(self.success_months) / len(self.success_months)

    def _months_at(self, percent: int) -> int:
        value = percentiles.pick(self.success_months, percent)
        return 0 if value is None else value

    @property
    def median_months(self) -> int:
        return self._months_at(percentiles.MEDIAN)

    @property
    def best_case_months(self) -> int:
        """Months to target for the luckiest 10% of successful trials."""
        return self._months_at(percentiles.BEST)

    @property
    def worst_case_months(self) -> int:
        """Months to target for the unluckiest 10% of successful trials."""
        return self._months_at(percentiles.WORST)

    @property
    def is_likely_to_succeed(self) -> bool:
        return self.success_rate >= 0.5

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_success_rate(self.success_rate)

    def year_distribution(self) -> Dict[int, int]:
        """Number of successful trials that reached the target in each whole year."""
        distribution: Dict[int, int] = {}
        for months in self.success_months:
            years = months // 12
            distribution[years] = distribution.get(years, 0) + 1
        return distribution

    def to_frame(self) -> pd.DataFrame:
        """Representative monthly balances, one column per path, NaN-padded."""
        if self.representative_paths is None:
            return pd.DataFrame(columns=["best", "median", "worst"])
        df = pd.DataFrame({
            name: pd.Series(path.monthly_assets, dtype=float)
            for name, path in self.representative_paths.as_dict().items()
        })
        df.index.name = "month"
        return df


def _run_trial(initial_asset: float,
               monthly_contribution: float,
               target_asset: float,
               monthly_mean: float,
               monthly_vol: float,
               max_months: int,
               track_path: bool,
               sampler: Sampler) -> AssetPath:
    balance = initial_asset
    months = 0
    history: List[float] = [initial_asset] if track_path else []

    while balance < target_asset and months < max_months:
        balance += monthly_contribution
        r = sampler.sample(monthly_mean, monthly_vol)
        balance *= math.exp(r)
        months += 1
        if track_path:
            history.append(balance)
        if balance <= 0:
            return AssetPath(tuple(history), None)

    reached = months if balance >= target_asset else None
    return AssetPath(tuple(history), reached)


def extract_representative_paths(paths: Sequence[AssetPath],
                                 success_months: Sequence[int]) -> Optional[RepresentativePaths[AssetPath]]:
    """Pick best/median/worst trials by months to success.

    The trial chosen for a percentile is the first stored path whose month
    count equals the percentile value; if none matches, the path at the
    same index in ``paths`` is used instead.
    """
    if not success_months or not paths:
        return None

    ordered = sorted(success_months)
    chosen = []
    for percent in (percentiles.BEST, percentiles.MEDIAN, percentiles.WORST):
        index = percentiles.percentile_index(len(ordered), percent)
        months = ordered[index]
        match = next((p for p in paths if p.months_to_target == months), None)
        if match is None:
            match = paths[min(index, len(paths) - 1)]
        chosen.append(match)
    return RepresentativePaths(*chosen)


def simulate(initial_asset: float,
             monthly_contribution: float,
             target_asset: float,
             mean_return_pct: float,
             volatility_pct: float,
             trial_count: int = DEFAULT_TRIAL_COUNT,
             max_months: int = DEFAULT_MAX_MONTHS,
             track_paths: bool = True,
             progress_callback: Optional[ProgressCallback] = None,
             seed: Optional[int] = None,
             sampler: Optional[Sampler] = None) -> AccumulationOutcome:
    """Distribution of months needed to grow ``initial_asset`` to ``target_asset``.

    Parameters
    ----------
    initial_asset, monthly_contribution, target_asset : float
        Currency amounts.
    mean_return_pct, volatility_pct : float
        Annual mean return and volatility in percent.
    trial_count : int
        Number of independent trials.
    max_months : int
        Horizon after which an unfinished trial counts as a failure.
    track_paths : bool
        Keep every trial's monthly balances so representative paths can be
        extracted.
    progress_callback : callable, optional
        Called with ``(completed, success_months, paths)`` every 200 trials
        and after the last one.
    seed : int, optional
        Seed for the default sampler.  Ignored when ``sampler`` is given.
    sampler : object, optional
        Anything with ``sample(mean, stddev)``; replaces the Box–Muller sampler.
    """
    if trial_count < 1:
        raise ValueError(f"trial_count must be at least 1 (got {trial_count})")
    if max_months < 1:
        raise ValueError(f"max_months must be at least 1 (got {max_months})")

    sampler = resolve_sampler(sampler, seed)
    monthly_mean, monthly_vol = monthly_log_params(mean_return_pct, volatility_pct)

    logger.info(
        "Accumulation: %d trials, start=%.0f target=%.0f contribution=%.0f mean=%.2f%% vol=%.2f%%",
        trial_count, initial_asset, target_asset, monthly_contribution, mean_return_pct, volatility_pct,
    )

    success_months: List[int] = []
    paths: List[AssetPath] = []
    failure_count = 0

    for i in range(trial_count):
        path = _run_trial(
            initial_asset, monthly_contribution, target_asset,
            monthly_mean, monthly_vol, max_months, track_paths, sampler,
        )
        if path.is_success:
            success_months.append(path.months_to_target)
        else:
            failure_count += 1
        if track_paths:
            paths.append(path)

        completed = i + 1
        if progress_callback is not None and (completed % PROGRESS_INTERVAL == 0 or completed == trial_count):
            logger.debug("Accumulation progress: %d/%d", completed, trial_count)
            progress_callback(completed, tuple(success_months), tuple(paths))

    success_rate = len(success_months) / trial_count
    representative = extract_representative_paths(paths, success_months) if track_paths else None

    logger.info("Accumulation finished: success rate %.1f%%", success_rate * 100)
    return AccumulationOutcome(
        success_rate=success_rate,
        success_months=tuple(sorted(success_months)),
        failure_count=failure_count,
        total_trials=trial_count,
        representative_paths=representative,
    )


def accumulate(plan: PlanParameters,
               track_paths: bool = True,
               progress_callback: Optional[ProgressCallback] = None,
               seed: Optional[int] = None,
               sampler: Optional[Sampler] = None) -> AccumulationOutcome:
    """Run the accumulation simulation for a plan, targeting ``plan.target_assets``."""
    plan.validate()
    return simulate(
        initial_asset=plan.current_assets,
        monthly_contribution=plan.monthly_contribution,
        target_asset=plan.target_assets,
        mean_return_pct=plan.mean_return_pre,
        volatility_pct=plan.volatility_pre,
        trial_count=plan.trial_count,
        max_months=plan.max_months_accumulation,
        track_paths=track_paths,
        progress_callback=progress_callback,
        seed=seed,
        sampler=sampler,
    )
