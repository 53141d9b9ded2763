import math

import pytest

from coldstart_lab.harness.results import CaseStatistics, ColdStartStatistics, TrialResult

from conftest import make_case, make_cold_result, make_result


def test_all_successful_trials_accumulate_cost():
    result = make_result(make_case(), [100.0, 110.0, 120.0], costs=[0.001, 0.002, 0.0015])
    stats = result.stats

    assert stats.total_cost == pytest.approx(0.0045, abs=1e-6)
    assert stats.success_rate == 100.0
    assert stats.avg_ms == pytest.approx(110.0)


def test_failures_excluded_from_latency_average():
    latencies = [100.0, None, 200.0, 300.0, None, 100.0, 200.0, None, 300.0, 200.0]
    stats = make_result(make_case(), latencies).stats

    assert stats.attempted == 10
    assert stats.successes == 7
    assert stats.success_rate == pytest.approx(70.0)
    assert stats.avg_ms == pytest.approx(1400.0 / 7)


def test_failed_trials_add_no_cost():
    result = make_result(make_case(), [100.0, None], costs=[0.01, 0.5])
    assert result.stats.total_cost == pytest.approx(0.01)


def test_running_cost_is_linear():
    costs = [0.001, 0.002, 0.0015, 0.0007, 0.003]
    result = make_result(make_case(), [50.0] * len(costs), costs=costs)

    for k, running in enumerate(result.running_costs(), start=1):
        assert running == pytest.approx(sum(costs[:k]), abs=1e-6)


def test_all_failed_case_reports_not_available():
    stats = make_result(make_case(), [None, None, None]).stats

    assert stats.success_rate == 0.0
    assert stats.avg_ms is None
    assert stats.first_ms is None
    assert stats.cold_start_penalty is None
    assert stats.total_cost == 0.0


def test_success_rate_within_bounds():
    for n in range(1, 12):
        for failures in range(n + 1):
            latencies = [None] * failures + [10.0] * (n - failures)
            rate = make_result(make_case(), latencies).stats.success_rate
            assert 0.0 <= rate <= 100.0


def test_no_trials_means_no_rate():
    stats = CaseStatistics.from_trials([])
    assert stats.success_rate is None
    assert stats.avg_ms is None


def test_first_call_penalty_relative_to_average():
    stats = make_result(make_case(), [200.0, 100.0, 100.0, 100.0]).stats

    assert stats.first_ms == 200.0
    assert stats.avg_ms == pytest.approx(125.0)
    assert stats.cold_start_penalty == pytest.approx(60.0)


def test_failed_first_trial_has_no_penalty():
    stats = make_result(make_case(), [None, 100.0, 120.0]).stats

    assert stats.first_ms is None
    assert stats.cold_start_penalty is None
    assert stats.avg_ms == pytest.approx(110.0)


def test_first_trial_found_regardless_of_order():
    trials = [
        TrialResult(index=1, elapsed_ms=100.0),
        TrialResult(index=0, elapsed_ms=300.0),
    ]
    assert CaseStatistics.from_trials(trials).first_ms == 300.0


def test_reliability_threshold():
    assert make_result(make_case(), [1.0] * 8 + [None] * 2).stats.reliable
    assert not make_result(make_case(), [1.0] * 7 + [None] * 3).stats.reliable


def test_cold_start_penalty_relative_to_warm_call():
    result = make_cold_result(make_case(), [(100.0, 70.0), (140.0, 90.0)])
    stats = result.stats

    assert stats.avg_first_ms == pytest.approx(120.0)
    assert stats.avg_second_ms == pytest.approx(80.0)
    assert f"{stats.cold_start_penalty:.4f}" == "50.0000"


def test_cold_start_failures_excluded():
    result = make_cold_result(make_case(), [(120.0, 80.0), None, None, (120.0, 80.0)])
    stats = result.stats

    assert stats.success_rate == pytest.approx(50.0)
    assert stats.cold_start_penalty == pytest.approx(50.0)
    assert stats.total_cost == pytest.approx(0.004)
    assert result.errors == ["TimeoutError", "TimeoutError"]


def test_cold_start_all_failed_is_not_nan():
    stats = make_cold_result(make_case(), [None, None]).stats

    assert stats.avg_first_ms is None
    assert stats.cold_start_penalty is None
    assert stats.success_rate == 0.0


def test_zero_warm_latency_has_no_penalty():
    stats = ColdStartStatistics.from_trials(make_cold_result(make_case(), [(10.0, 0.0)]).trials)
    assert stats.cold_start_penalty is None


def test_serialized_stats_contain_no_nan():
    result = make_result(make_case(), [None, None])
    for value in result.to_dict()["stats"].values():
        assert not (isinstance(value, float) and (math.isnan(value) or math.isinf(value)))
