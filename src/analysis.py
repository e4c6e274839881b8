from __future__ import annotations

import math
from typing import Callable, Dict

from rates import RateParameters


def _check_count(n: int) -> int:
    if isinstance(n, bool) or int(n) != n:
        raise ValueError(f"n must be an integer. Found {n!r}.")
    n = int(n)
    if n < 0:
        raise ValueError(f"n must be non-negative. Found {n}.")
    return n


def _power(base: float, exponent: int) -> float:
    # Log space: large exponents underflow to 0.0 instead of overflowing.
    if exponent == 0:
        return 1.0
    if base <= 0.0:
        # Round trips underflow for tiny mu relative to the other rates.
        return 0.0
    return math.exp(exponent * math.log(base))


def _round_trip(r: RateParameters) -> float:
    """P01 * P10: probability of leaving state 0 for 1 and coming back."""
    # Product of ratios: mu ** 2 alone under- or overflows for extreme rates.
    return (r.mu / (r.lambda0 + r.mu)) * (r.mu / (r.lambda1 + r.mu))


def case1(lambda0: float, lambda1: float, mu: float, n: int) -> float:
    """Start in 1, end in 1, n visits to state 1."""
    r = RateParameters(lambda0, lambda1, mu)
    n = _check_count(n)
    if n == 0:
        return 0.0
    loop = _round_trip(r)
    return (
        (r.lambda0 / (r.lambda0 + r.lambda1))
        * _power(loop, n - 1)
        * (r.lambda0 / (r.lambda0 + r.mu))
    )


def case2(lambda0: float, lambda1: float, mu: float, n: int) -> float:
    """Start in 1, end in 0, n visits to state 1."""
    r = RateParameters(lambda0, lambda1, mu)
    n = _check_count(n)
    if n == 0:
        return 0.0
    return (
        (r.lambda0 / (r.lambda0 + r.lambda1))
        * _power(r.mu / (r.lambda0 + r.mu), n)
        * _power(r.mu / (r.lambda1 + r.mu), n - 1)
        * (r.lambda1 / (r.lambda1 + r.mu))
    )


def case3(lambda0: float, lambda1: float, mu: float, n: int) -> float:
    """Start in 0, end in 1, n visits to state 1."""
    r = RateParameters(lambda0, lambda1, mu)
    n = _check_count(n)
    if n == 0:
        return 0.0
    return (
        (r.lambda1 / (r.lambda0 + r.lambda1))
        * _power(r.mu / (r.lambda1 + r.mu), n)
        * _power(r.mu / (r.lambda0 + r.mu), n - 1)
        * (r.lambda0 / (r.lambda0 + r.mu))
    )


def case4(lambda0: float, lambda1: float, mu: float, n: int) -> float:
    """Start in 0, end in 0, n visits to state 1 (defined at n = 0)."""
    r = RateParameters(lambda0, lambda1, mu)
    n = _check_count(n)
    loop = _round_trip(r)
    return (
        (r.lambda1 / (r.lambda0 + r.lambda1))
        * _power(loop, n)
        * (r.lambda1 / (r.lambda1 + r.mu))
    )


CASE_FUNCTIONS: Dict[str, Callable[[float, float, float, int], float]] = {
    "case1": case1,
    "case2": case2,
    "case3": case3,
    "case4": case4,
}


def case_probability(case: str, rates: RateParameters, n: int) -> float:
    if case not in CASE_FUNCTIONS:
        raise ValueError(f"Unknown case '{case}'. Expected one of {list(CASE_FUNCTIONS)}.")
    return CASE_FUNCTIONS[case](rates.lambda0, rates.lambda1, rates.mu, n)


def count_probability(rates: RateParameters, n: int) -> float:
    """P(a path visits state 1 exactly n times), summed over the four cases."""
    return sum(case_probability(case, rates, n) for case in CASE_FUNCTIONS)


def total_probability_mass(rates: RateParameters, n_max: int) -> float:
    """Truncated sum of all cases for n = 0..n_max. Tends to 1 as n_max grows."""
    n_max = _check_count(n_max)
    return sum(count_probability(rates, n) for n in range(n_max + 1))


def case_total_probability(case: str, rates: RateParameters) -> float:
    """
    Probability that a path falls into `case` for any n.

    Each case is a geometric series in the round-trip probability
    q = mu/(lambda0 + mu) * mu/(lambda1 + mu), so the sum over n is the
    first term divided by (1 - q). The four totals add up to 1.
    """
    if case not in CASE_FUNCTIONS:
        raise ValueError(f"Unknown case '{case}'. Expected one of {list(CASE_FUNCTIONS)}.")
    p10 = rates.mu / (rates.lambda0 + rates.mu)
    # 1 - q as P1T + P10 * P0T, which does not cancel when q is close to 1.
    escape = rates.lambda0 / (rates.lambda0 + rates.mu) + p10 * (rates.lambda1 / (rates.lambda1 + rates.mu))
    first_n = 0 if case == "case4" else 1
    return case_probability(case, rates, first_n) / escape
