"""Deterministic target and baseline calculations.

The nest egg required to fund a withdrawal follows the perpetuity rule: the
annual withdrawal divided by the post-target return rate.  A 6.5% return on
the way there is compounded monthly at ``(1 + 6.5/100) ** (1/12) - 1``.

Example
-------

>>> target_assets(3_000_000, 4.0)
900000000.0

>>> months_to_target(900_000_000, 900_000_000, 1_000_000, 6.0)
0
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import DEFAULT_MAX_MONTHS, FALLBACK_WITHDRAWAL_YEARS, PlanParameters


def target_assets(desired_monthly_withdrawal: float,
                  post_return_rate_pct: float,
                  inflation_rate_pct: float = 0.0) -> float:
    """Net worth needed to sustain ``desired_monthly_withdrawal`` indefinitely.

    Parameters
    ----------
    desired_monthly_withdrawal : float
        Monthly spending after the target is reached.
    post_return_rate_pct : float
        Annual return after the target is reached, in percent.
    inflation_rate_pct : float, optional
        Expected inflation in percent, subtracted from the return to give a
        real rate.  Defaults to 0.

    Returns
    -------
    float
        Required assets.  When the (real) rate is zero or negative the
        perpetuity rule breaks down, so fifty years of withdrawals are
        required instead.
    """
    annual = desired_monthly_withdrawal * 12
    rate = (post_return_rate_pct - inflation_rate_pct) / 100
    if rate <= 0:
        return annual * FALLBACK_WITHDRAWAL_YEARS
    return annual / rate


def required_return_rate(current_assets: float, desired_monthly_withdrawal: float) -> float:
    """Annual return (percent) at which ``current_assets`` funds the withdrawal."""
    if current_assets <= 0:
        return 0.0
    return (desired_monthly_withdrawal * 12 / current_assets) * 100


def monthly_rate(annual_return_rate_pct: float) -> float:
    """Monthly rate that compounds to the annual rate over twelve months."""
    return (1 + annual_return_rate_pct / 100) ** (1.0 / 12) - 1


def months_to_target(current_assets: float,
                     target: float,
                     monthly_contribution: float,
                     annual_return_rate_pct: float,
                     max_months: int = DEFAULT_MAX_MONTHS) -> int:
    """Months of fixed-rate compounding until ``target`` is reached.

    Each month the contribution is added first, then the month's return is
    applied.  The count stops at ``max_months`` when the target is never
    reached, so a result equal to the cap means "effectively unreachable".
    """
    if current_assets >= target:
        return 0

    rate = monthly_rate(annual_return_rate_pct)
    value = current_assets
    months = 0
    while value < target and months < max_months:
        value += monthly_contribution
        value *= (1 + rate)
        months += 1
    return months


@dataclass(frozen=True)
class RetirementCalculation:
    target_assets: float
    months_to_target: int
    progress_percent: float
    current_assets: float

    @property
    def years_to_target(self) -> int:
        return self.months_to_target // 12

    @property
    def remaining_months(self) -> int:
        return self.months_to_target % 12

    @property
    def countdown_label(self) -> str:
        """Human readable time to target, e.g. ``"6 years 8 months"``."""
        years, months = self.years_to_target, self.remaining_months
        if years == 0:
            return f"{months} months"
        if months == 0:
            return f"{years} years"
        return f"{years} years {months} months"


def progress_percent(current_assets: float, target: float) -> float:
    if target <= 0:
        return 100.0
    return min(current_assets / target * 100, 100.0)


def calculate(desired_monthly_withdrawal: float,
              current_assets: float,
              monthly_contribution: float,
              pre_return_pct: float = 6.5,
              post_return_pct: float = 5.0,
              inflation_rate_pct: float = 0.0,
              max_months: int = DEFAULT_MAX_MONTHS) -> RetirementCalculation:
    """Target, baseline time-to-target and progress in one call."""
    target = target_assets(desired_monthly_withdrawal, post_return_pct, inflation_rate_pct)
    months = months_to_target(
        current_assets,
        target,
        monthly_contribution,
        pre_return_pct,
        max_months=max_months,
    )
    return RetirementCalculation(
        target_assets=target,
        months_to_target=months,
        progress_percent=progress_percent(current_assets, target),
        current_assets=current_assets,
    )


def calculate_plan(plan: PlanParameters) -> RetirementCalculation:
    return calculate(
        plan.desired_monthly_withdrawal,
        plan.current_assets,
        plan.monthly_contribution,
        pre_return_pct=plan.mean_return_pre,
        post_return_pct=plan.mean_return_post,
        inflation_rate_pct=plan.inflation_rate,
        max_months=plan.max_months_accumulation,
    )
