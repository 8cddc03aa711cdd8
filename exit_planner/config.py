"""Plan parameters and simulation defaults.

A plan is the bundle of savings and return assumptions both simulators
work from.  Callers usually assemble one from a persisted scenario record
plus a live net-worth figure; :meth:`PlanParameters.from_dict` accepts the
same plain-dict shape.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

logger = logging.getLogger(__name__)

DEFAULT_TRIAL_COUNT = 10_000
DEFAULT_MAX_MONTHS = 12 * 100  # 100 years
DEFAULT_HORIZON_YEARS = 40
DEFAULT_VOLATILITY = 15.0
PROGRESS_INTERVAL = 200
FALLBACK_WITHDRAWAL_YEARS = 50


@dataclass(frozen=True)
class PlanParameters:
    """Inputs for one accumulation/decumulation run.

    Rates and volatilities are annual percentages (``6.5`` means 6.5%).
    """

    current_assets: float
    monthly_contribution: float
    desired_monthly_withdrawal: float
    mean_return_pre: float
    mean_return_post: float
    volatility_pre: float = DEFAULT_VOLATILITY
    volatility_post: float = DEFAULT_VOLATILITY
    inflation_rate: float = 0.0
    horizon_years_post: int = DEFAULT_HORIZON_YEARS
    trial_count: int = DEFAULT_TRIAL_COUNT
    max_months_accumulation: int = DEFAULT_MAX_MONTHS

    @classmethod
    def from_dict(cls, plan: Dict) -> "PlanParameters":
        return cls(
            current_assets=float(plan.get("current_assets", 0.0)),
            monthly_contribution=float(plan.get("monthly_contribution", 0.0)),
            desired_monthly_withdrawal=float(plan.get("desired_monthly_withdrawal", 0.0)),
            mean_return_pre=float(plan.get("mean_return_pre", 6.5)),
            mean_return_post=float(plan.get("mean_return_post", 5.0)),
            volatility_pre=float(plan.get("volatility_pre", DEFAULT_VOLATILITY)),
            volatility_post=float(plan.get("volatility_post", DEFAULT_VOLATILITY)),
            inflation_rate=float(plan.get("inflation_rate", 0.0)),
            horizon_years_post=int(plan.get("horizon_years_post", DEFAULT_HORIZON_YEARS)),
            trial_count=int(plan.get("trial_count", DEFAULT_TRIAL_COUNT)),
            max_months_accumulation=int(plan.get("max_months_accumulation", DEFAULT_MAX_MONTHS)),
        )

    @property
    def target_assets(self) -> float:
        """Nest egg needed to fund the desired withdrawal after the target is reached."""
        from .calculators.target import target_assets

        return target_assets(
            self.desired_monthly_withdrawal,
            self.mean_return_post,
            inflation_rate_pct=self.inflation_rate,
        )

    def validate(self) -> None:
        """Raise ``ValueError`` listing every structurally invalid field.

        Degenerate but meaningful values (zero assets, non-positive return
        rates) are accepted; the calculators define outputs for them.
        """
        errors = []
        if self.trial_count < 1:
            errors.append(f"trial_count must be at least 1 (got {self.trial_count})")
        if self.max_months_accumulation < 1:
            errors.append(f"max_months_accumulation must be at least 1 (got {self.max_months_accumulation})")
        if self.horizon_years_post < 1:
            errors.append(f"horizon_years_post must be at least 1 (got {self.horizon_years_post})")
        if self.volatility_pre < 0 or self.volatility_post < 0:
            errors.append("volatilities must be non-negative")
        if errors:
            raise ValueError("Plan validation failed:\n" + "\n".join(errors))
        logger.debug("Plan parameters validated")
