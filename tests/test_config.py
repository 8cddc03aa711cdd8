"""Tests for plan parameters."""

import pytest

from exit_planner import PlanParameters
from exit_planner.config import DEFAULT_MAX_MONTHS, DEFAULT_TRIAL_COUNT


def test_from_dict_applies_defaults():
    plan = PlanParameters.from_dict({
        "current_assets": "1000",
        "monthly_contribution": 50,
        "desired_monthly_withdrawal": 3_000_000,
        "mean_return_post": 4,
    })
    assert plan.current_assets == 1000.0
    assert plan.mean_return_pre == 6.5
    assert plan.volatility_pre == 15.0
    assert plan.horizon_years_post == 40
    assert plan.trial_count == DEFAULT_TRIAL_COUNT
    assert plan.max_months_accumulation == DEFAULT_MAX_MONTHS
    assert plan.target_assets == pytest.approx(900_000_000.0)


def test_target_assets_fallback_for_negative_real_rate():
    plan = PlanParameters(0, 0, 1_000, mean_return_pre=5, mean_return_post=2, inflation_rate=3)
    assert plan.target_assets == pytest.approx(1_000 * 12 * 50)


def test_validate_collects_all_errors():
    plan = PlanParameters(0, 0, 0, 5, 4, volatility_pre=-1, horizon_years_post=0, trial_count=0)
    with pytest.raises(ValueError) as exc:
        plan.validate()
    message = str(exc.value)
    assert "trial_count" in message
    assert "horizon_years_post" in message
    assert "volatilities" in message


def test_validate_accepts_degenerate_amounts():
    PlanParameters(0, 0, 0, -5, 0).validate()


def test_plan_is_immutable():
    plan = PlanParameters(0, 0, 0, 5, 4)
    with pytest.raises(AttributeError):
        plan.trial_count = 5
