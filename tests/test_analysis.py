import math

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from analysis import (
    CASE_FUNCTIONS,
    case1,
    case2,
    case3,
    case4,
    case_probability,
    case_total_probability,
    count_probability,
    total_probability_mass,
)
from rates import RateParameters


def test_cases_one_to_three_are_zero_at_n_zero(reference_rates):
    r = reference_rates
    assert case1(r.lambda0, r.lambda1, r.mu, 0) == 0.0
    assert case2(r.lambda0, r.lambda1, r.mu, 0) == 0.0
    assert case3(r.lambda0, r.lambda1, r.mu, 0) == 0.0


def test_case4_at_zero_closed_form(reference_rates, example_rates):
    for r in (reference_rates, example_rates):
        expected = r.lambda1 / (r.lambda0 + r.lambda1) * r.lambda1 / (r.lambda1 + r.mu)
        assert np.isclose(case4(r.lambda0, r.lambda1, r.mu, 0), expected, rtol=1e-12)


def test_example_case4_value():
    assert round(case4(0.005, 0.0025, 0.004, 0), 4) == 0.1282


def test_case1_at_one(reference_rates):
    r = reference_rates
    expected = r.lambda0 / (r.lambda0 + r.lambda1) * r.lambda0 / (r.lambda0 + r.mu)
    assert np.isclose(case1(r.lambda0, r.lambda1, r.mu, 1), expected)


def test_case2_and_case3_match_direct_formula(example_rates):
    r = example_rates
    n = 3
    a = r.mu / (r.lambda0 + r.mu)
    b = r.mu / (r.lambda1 + r.mu)
    expected2 = r.lambda0 / (r.lambda0 + r.lambda1) * a ** n * b ** (n - 1) * r.lambda1 / (r.lambda1 + r.mu)
    expected3 = r.lambda1 / (r.lambda0 + r.lambda1) * b ** n * a ** (n - 1) * r.lambda0 / (r.lambda0 + r.mu)
    assert np.isclose(case2(r.lambda0, r.lambda1, r.mu, n), expected2, rtol=1e-12)
    assert np.isclose(case3(r.lambda0, r.lambda1, r.mu, n), expected3, rtol=1e-12)


@pytest.mark.parametrize(
    "rates",
    [
        RateParameters(1 / 200, 1 / 400, 1 / 250),
        RateParameters(0.005, 0.0025, 0.004),
        RateParameters(1.0, 1.0, 10.0),
    ],
)
def test_total_mass_converges_to_one(rates):
    coarse = total_probability_mass(rates, 5)
    fine = total_probability_mass(rates, 400)
    assert coarse < fine
    assert abs(fine - 1.0) < 1e-9


def test_case_totals_sum_to_one(reference_rates):
    totals = [case_total_probability(case, reference_rates) for case in CASE_FUNCTIONS]
    assert np.isclose(sum(totals), 1.0, atol=1e-12)
    for case, total in zip(CASE_FUNCTIONS, totals):
        truncated = sum(case_probability(case, reference_rates, n) for n in range(300))
        assert np.isclose(truncated, total, atol=1e-10)


def test_count_probability_is_sum_of_cases(reference_rates):
    for n in range(5):
        direct = sum(fn(reference_rates.lambda0, reference_rates.lambda1, reference_rates.mu, n) for fn in CASE_FUNCTIONS.values())
        assert count_probability(reference_rates, n) == pytest.approx(direct)


def test_large_n_saturates_to_zero(reference_rates):
    r = reference_rates
    for fn in CASE_FUNCTIONS.values():
        value = fn(r.lambda0, r.lambda1, r.mu, 10**7)
        assert value == 0.0
        assert not math.isnan(value)


def test_tiny_mu_is_finite():
    for fn in CASE_FUNCTIONS.values():
        value = fn(1.0, 1.0, 1e-300, 50)
        assert math.isfinite(value)
        assert value >= 0.0


@pytest.mark.parametrize("fn", [case1, case2, case3, case4])
def test_cases_reject_bad_inputs(fn):
    with pytest.raises(ValueError):
        fn(0.0, 1.0, 1.0, 1)
    with pytest.raises(ValueError, match="non-negative"):
        fn(1.0, 1.0, 1.0, -1)
    with pytest.raises(ValueError, match="integer"):
        fn(1.0, 1.0, 1.0, 1.5)


def test_case_probability_rejects_unknown_case(reference_rates):
    with pytest.raises(ValueError, match="Unknown case"):
        case_probability("case5", reference_rates, 1)


@pytest.mark.parametrize(
    "rates",
    [(1e-200, 1e-200, 1e-200), (1.0, 1.0, 1e200), (1e200, 1e200, 1e200), (1e-300, 2e-300, 3e-300)],
)
def test_extreme_rates_depend_only_on_ratios(rates):
    lambda0, lambda1, mu = rates
    scaled = RateParameters(lambda0, lambda1, mu)
    for fn in CASE_FUNCTIONS.values():
        for n in (0, 1, 5):
            value = fn(lambda0, lambda1, mu, n)
            assert math.isfinite(value)
            assert 0.0 <= value <= 1.0
    totals = [case_total_probability(case, scaled) for case in CASE_FUNCTIONS]
    assert np.isclose(sum(totals), 1.0)


def test_equal_rates_give_scale_free_values():
    for scale in (1e-200, 1.0, 1e200):
        assert case4(scale, scale, scale, 0) == pytest.approx(0.25)
        assert case1(scale, scale, scale, 1) == pytest.approx(0.25)


def test_huge_mu_pushes_mass_into_the_tail():
    # Absorption almost never wins, so each round trip is nearly certain.
    assert case4(1.0, 1.0, 1e200, 3) == pytest.approx(0.5 * 1e-200, rel=1e-9)
    assert case_total_probability("case4", RateParameters(1.0, 1.0, 1e200)) == pytest.approx(0.25)
