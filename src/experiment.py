from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.stats import chi2

from analysis import CASE_FUNCTIONS, case_probability, count_probability
from config import SimConfig
from rates import DerivedProbabilities, RateParameters, derive_probabilities
from simulator import (
    CASES,
    TransitionCounters,
    classify_path,
    count_of_ones,
    draw_initial_state,
    simulate_path,
)


logger = logging.getLogger(__name__)

ZERO_TOL = 1e-10
# Sentinel for a percent error against an empirical probability of zero.
UNBOUNDED_ERROR = math.inf
MIN_EXPECTED = 5.0


@dataclass
class TrialTally:
    """Counts produced by one random stream. Tallies combine by summation."""
    frequency: Counter = field(default_factory=Counter)
    case_counts: Counter = field(default_factory=Counter)
    counters: TransitionCounters = field(default_factory=TransitionCounters)
    trials: int = 0

    def record(self, path: List[int]) -> None:
        n = count_of_ones(path)
        self.frequency[n] += 1
        self.case_counts[(classify_path(path), n)] += 1
        self.trials += 1

    def merge(self, other: "TrialTally") -> "TrialTally":
        return TrialTally(
            frequency=self.frequency + other.frequency,
            case_counts=self.case_counts + other.case_counts,
            counters=self.counters.merge(other.counters),
            trials=self.trials + other.trials,
        )


@dataclass
class ExperimentResult:
    rates: RateParameters
    probs: DerivedProbabilities
    trials: int
    frequency: Dict[int, int]                 # n -> paths with n visits to state 1
    case_counts: Dict[Tuple[str, int], int]   # (case, n) -> paths
    counters: TransitionCounters

    @property
    def max_count(self) -> int:
        return max(self.frequency) if self.frequency else 0

    @property
    def truncated_paths(self) -> int:
        return self.counters.truncated_paths


def _split_trials(trials: int, n_streams: int) -> List[int]:
    base, extra = divmod(trials, n_streams)
    return [base + (1 if i < extra else 0) for i in range(n_streams)]


def run_trials(
    trials: int,
    probs: DerivedProbabilities,
    rng: np.random.Generator,
    max_steps: Optional[int] = None,
) -> TrialTally:
    """Run `trials` paths on one random stream, each after an initial-state draw."""
    tally = TrialTally()
    for _ in range(trials):
        initial = draw_initial_state(rng, probs.P0)
        path = simulate_path(initial, probs, tally.counters, rng, max_steps=max_steps)
        tally.record(path)
    return tally


def run_experiment(config: SimConfig) -> ExperimentResult:
    """
    Simulate `config.trials` independent paths and fold them into histograms
    and transition counters.

    Trials are split over `config.n_streams` generators spawned from a single
    SeedSequence. Each stream fills its own tally and the tallies are summed
    at the end, so the result depends only on (seed, n_streams, trials).
    """
    rates = config.rates
    probs = derive_probabilities(rates)

    logger.info(
        "Running %d trials on %d stream(s): lambda0=%.6g lambda1=%.6g mu=%.6g seed=%s",
        config.trials,
        config.n_streams,
        rates.lambda0,
        rates.lambda1,
        rates.mu,
        config.seed,
    )

    seed_seq = np.random.SeedSequence(config.seed)
    streams = seed_seq.spawn(config.n_streams)

    total = TrialTally()
    for idx, (child, n_trials) in enumerate(zip(streams, _split_trials(config.trials, config.n_streams))):
        rng = np.random.default_rng(child)
        tally = run_trials(n_trials, probs, rng, max_steps=config.max_steps)
        logger.debug("Stream %d finished %d trials (%d transitions).", idx, tally.trials, tally.counters.total)
        total = total.merge(tally)

    if total.counters.truncated_paths:
        logger.warning(
            "%d path(s) hit max_steps=%s; tail probabilities are biased.",
            total.counters.truncated_paths,
            config.max_steps,
        )
    logger.info("Experiment finished: %d paths, max visits to state 1 = %d.", total.trials, max(total.frequency))

    return ExperimentResult(
        rates=rates,
        probs=probs,
        trials=total.trials,
        frequency=dict(sorted(total.frequency.items())),
        case_counts=dict(total.case_counts),
        counters=total.counters,
    )


def percent_error(simulation: float, analysis: float) -> float:
    """
    |sim - analysis| / sim * 100.

    An empirical zero against a non-zero analytical value has no finite
    relative error and returns UNBOUNDED_ERROR. Both zero is 0.0.
    """
    if simulation > ZERO_TOL:
        return abs(simulation - analysis) / simulation * 100.0
    if analysis > ZERO_TOL:
        return UNBOUNDED_ERROR
    return 0.0


def frequency_table(result: ExperimentResult) -> pd.DataFrame:
    n_values = np.arange(result.max_count + 1)
    freq = np.array([result.frequency.get(int(n), 0) for n in n_values], dtype=int)
    return pd.DataFrame(
        {
            "n": n_values,
            "frequency": freq,
            "probability": freq / float(result.trials),
        }
    )


def case_comparison_table(result: ExperimentResult, case: str) -> pd.DataFrame:
    if case not in CASE_FUNCTIONS:
        raise ValueError(f"Unknown case '{case}'. Expected one of {list(CASE_FUNCTIONS)}.")

    rows = []
    for n in range(result.max_count + 1):
        analysis = case_probability(case, result.rates, n)
        simulation = result.case_counts.get((case, n), 0) / float(result.trials)
        rows.append(
            {
                "n": n,
                "analysis": analysis,
                "simulation": simulation,
                "pct_error": percent_error(simulation, analysis),
            }
        )
    return pd.DataFrame(rows, columns=["n", "analysis", "simulation", "pct_error"])


def case_sum_table(result: ExperimentResult) -> pd.DataFrame:
    """Per n, the four cases summed: reproduces P(count = n) both ways."""
    tables = [case_comparison_table(result, case) for case in CASES]
    analysis = sum(t["analysis"].to_numpy() for t in tables)
    simulation = sum(t["simulation"].to_numpy() for t in tables)
    return pd.DataFrame(
        {
            "n": tables[0]["n"].to_numpy(),
            "analysis": analysis,
            "simulation": simulation,
            "pct_error": [percent_error(s, a) for s, a in zip(simulation, analysis)],
        }
    )


def transition_count_table(result: ExperimentResult) -> pd.DataFrame:
    counts = result.counters.as_dict()
    df = pd.DataFrame({"transition": list(counts), "count": list(counts.values())})
    total = pd.DataFrame({"transition": ["total"], "count": [result.counters.total]})
    return pd.concat([df, total], ignore_index=True)


def transition_probability_table(result: ExperimentResult) -> pd.DataFrame:
    """
    Empirical transition probabilities conditioned on the source state,
    next to the theoretical ones. A source state that was never left has
    no rows.
    """
    c = result.counters
    p = result.probs
    rows = []

    from1 = c.P10 + c.P1T
    if from1 > 0:
        rows.append({"transition": "1->0", "empirical": c.P10 / from1, "theoretical": p.P10})
        rows.append({"transition": "1->T", "empirical": c.P1T / from1, "theoretical": p.P1T})

    from0 = c.P01 + c.P0T
    if from0 > 0:
        rows.append({"transition": "0->1", "empirical": c.P01 / from0, "theoretical": p.P01})
        rows.append({"transition": "0->T", "empirical": c.P0T / from0, "theoretical": p.P0T})

    return pd.DataFrame(rows, columns=["transition", "empirical", "theoretical"])


@dataclass
class GoodnessOfFit:
    statistic: float
    dof: int
    p_value: float    # nan when fewer than 2 cells remain after pooling


def _pool_cells(observed: np.ndarray, expected: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Merge adjacent bins left to right until each expects at least MIN_EXPECTED paths."""
    obs_cells: List[float] = []
    exp_cells: List[float] = []
    acc_obs = 0.0
    acc_exp = 0.0
    for o, e in zip(observed, expected):
        acc_obs += o
        acc_exp += e
        if acc_exp >= MIN_EXPECTED:
            obs_cells.append(acc_obs)
            exp_cells.append(acc_exp)
            acc_obs = 0.0
            acc_exp = 0.0
    if acc_exp > 0 or acc_obs > 0:
        # Leftover tail joins the last full cell.
        if exp_cells:
            obs_cells[-1] += acc_obs
            exp_cells[-1] += acc_exp
        else:
            obs_cells.append(acc_obs)
            exp_cells.append(acc_exp)
    return np.array(obs_cells, dtype=float), np.array(exp_cells, dtype=float)


def goodness_of_fit(result: ExperimentResult) -> GoodnessOfFit:
    """
    Pearson chi-square of the observed count histogram against the
    analytical count distribution.

    Mass beyond the largest observed n goes into the last bin so expected
    counts sum to `trials`. Adjacent bins are pooled until every cell
    expects at least MIN_EXPECTED paths; with fewer than two cells left
    the test is skipped (dof 0, p-value nan).
    """
    n_max = result.max_count
    observed = np.array([result.frequency.get(n, 0) for n in range(n_max + 1)], dtype=float)
    expected_p = np.array([count_probability(result.rates, n) for n in range(n_max + 1)], dtype=float)
    expected_p[-1] += max(0.0, 1.0 - float(expected_p.sum()))
    expected = expected_p * result.trials

    observed, expected = _pool_cells(observed, expected)
    if len(expected) < 2:
        return GoodnessOfFit(statistic=0.0, dof=0, p_value=math.nan)

    stat = float(np.sum((observed - expected) ** 2 / expected))
    dof = len(expected) - 1
    p_val = float(1 - chi2.cdf(stat, dof))
    return GoodnessOfFit(statistic=stat, dof=dof, p_value=p_val)
