"""Tests for the accumulation Monte Carlo engine."""

import pytest

from exit_planner.calculators import accumulation, target
from exit_planner.calculators.accumulation import ConfidenceLevel
from exit_planner.config import PlanParameters


class _MeanSampler:
    """Stand-in sampler with no variance."""

    def sample(self, mean, stddev):
        return mean


def _run(**overrides):
    kwargs = dict(
        initial_asset=0.0,
        monthly_contribution=1_000.0,
        target_asset=150_000.0,
        mean_return_pct=7.0,
        volatility_pct=15.0,
        trial_count=300,
        max_months=240,
        seed=123,
    )
    kwargs.update(overrides)
    return accumulation.simulate(**kwargs)


def test_repeatability_with_seed():
    """Simulations should be repeatable when the same seed is provided."""
    first = _run()
    second = _run()
    assert first.success_rate == second.success_rate
    assert first.success_months == second.success_months


def test_success_rate_bounds_and_counts():
    res = _run()
    assert 0.0 <= res.success_rate <= 1.0
    assert res.success_count + res.failure_count == res.total_trials == 300
    assert round(res.success_rate * res.total_trials) == res.success_count
    assert list(res.success_months) == sorted(res.success_months)


def test_already_at_target_succeeds_immediately():
    res = _run(initial_asset=200_000.0, trial_count=50)
    assert res.success_rate == 1.0
    assert set(res.success_months) == {0}
    assert res.failure_count == 0
    assert res.representative_paths.median.monthly_assets == (200_000.0,)


def test_zero_volatility_matches_deterministic_months():
    expected = target.months_to_target(0, 100_000_000, 1_000_000, 6.0)
    res = accumulation.simulate(
        initial_asset=0.0,
        monthly_contribution=1_000_000.0,
        target_asset=100_000_000.0,
        mean_return_pct=6.0,
        volatility_pct=0.0,
        trial_count=20,
    )
    assert res.success_rate == 1.0
    assert set(res.success_months) == {expected}


def test_injected_sampler_matches_deterministic_months():
    expected = target.months_to_target(5_000_000, 80_000_000, 700_000, 5.0)
    res = accumulation.simulate(
        initial_asset=5_000_000.0,
        monthly_contribution=700_000.0,
        target_asset=80_000_000.0,
        mean_return_pct=5.0,
        volatility_pct=25.0,
        trial_count=10,
        sampler=_MeanSampler(),
    )
    assert set(res.success_months) == {expected}


def test_representative_paths_are_ordered():
    res = _run()
    paths = res.representative_paths
    assert paths is not None
    assert paths.best.months_to_target <= paths.median.months_to_target <= paths.worst.months_to_target
    assert paths.best.months_to_target == res.best_case_months
    assert paths.median.months_to_target == res.median_months
    assert paths.worst.months_to_target == res.worst_case_months
    # history starts at the initial balance and has one entry per month
    assert paths.median.monthly_assets[0] == 0.0
    assert len(paths.median.monthly_assets) == paths.median.months_to_target + 1
    assert paths.median.monthly_assets[-1] >= 150_000.0


def test_no_paths_when_not_tracked():
    res = _run(track_paths=False)
    assert res.representative_paths is None
    assert res.success_count > 0


def test_balance_collapse_is_a_failure():
    # nothing saved and nothing invested: the balance is zero after month one
    res = _run(monthly_contribution=0.0, trial_count=20)
    assert res.success_rate == 0.0
    assert res.failure_count == 20
    assert res.representative_paths is None
    assert res.average_months == 0.0
    assert res.median_months == 0
    assert res.best_case_months == 0
    assert res.worst_case_months == 0
    assert res.year_distribution() == {}


def test_exhaustion_is_a_failure():
    res = _run(target_asset=10_000_000.0, max_months=36, trial_count=25)
    assert res.success_rate == 0.0
    assert res.failure_count == 25


def test_extract_representative_paths_falls_back_to_index():
    paths = [
        accumulation.AssetPath((0.0, 1.0), None),
        accumulation.AssetPath((0.0, 1.0, 2.0), None),
    ]
    chosen = accumulation.extract_representative_paths(paths, [5, 6])
    assert chosen.best is paths[0]
    assert chosen.median is paths[1]
    assert chosen.worst is paths[1]
    assert accumulation.extract_representative_paths(paths, []) is None


def test_higher_mean_return_raises_success_rate():
    low = _run(mean_return_pct=2.0, max_months=120, trial_count=400)
    high = _run(mean_return_pct=8.0, max_months=120, trial_count=400)
    assert high.success_rate > low.success_rate


def test_progress_callback_every_200_trials_and_last():
    calls = []
    _run(trial_count=450, progress_callback=lambda done, months, paths: calls.append((done, len(paths))))
    assert calls == [(200, 200), (400, 400), (450, 450)]


def test_year_distribution_and_statistics():
    res = _run()
    dist = res.year_distribution()
    assert sum(dist.values()) == res.success_count
    assert res.average_months == pytest.approx(sum(res.success_months) / res.success_count)
    assert min(dist) == res.success_months[0] // 12


@pytest.mark.parametrize(
    "rate, level",
    [
        (0.99, ConfidenceLevel.VERY_HIGH),
        (0.95, ConfidenceLevel.VERY_HIGH),
        (0.9, ConfidenceLevel.HIGH),
        (0.75, ConfidenceLevel.MODERATE),
        (0.5, ConfidenceLevel.LOW),
        (0.2, ConfidenceLevel.VERY_LOW),
    ],
)
def test_confidence_levels(rate, level):
    assert ConfidenceLevel.from_success_rate(rate) is level


def test_to_frame_has_one_column_per_path():
    res = _run()
    df = res.to_frame()
    assert list(df.columns) == ["best", "median", "worst"]
    assert len(df) == res.worst_case_months + 1
    assert df["best"].isna().sum() == res.worst_case_months - res.best_case_months


def test_invalid_trial_count_raises():
    with pytest.raises(ValueError):
        _run(trial_count=0)


def test_accumulate_targets_plan_nest_egg():
    plan = PlanParameters(
        current_assets=1_000_000_000.0,
        monthly_contribution=1_000_000.0,
        desired_monthly_withdrawal=3_000_000.0,
        mean_return_pre=6.0,
        mean_return_post=4.0,
        trial_count=25,
    )
    res = accumulation.accumulate(plan, seed=5)
    assert res.success_rate == 1.0
    assert set(res.success_months) == {0}
