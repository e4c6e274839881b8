"""Console rendering of experiment results.

Every number shown here is computed in `experiment`; this module only
formats.
"""

from __future__ import annotations

import math
from typing import List

import pandas as pd

from experiment import (
    ZERO_TOL,
    ExperimentResult,
    GoodnessOfFit,
    case_comparison_table,
    case_sum_table,
    frequency_table,
    transition_count_table,
    transition_probability_table,
)
from simulator import CASES

TRANSITION_LABELS = {
    "P10": "P10 (1→0)",
    "P01": "P01 (0→1)",
    "P1T": "P1T (1→T)",
    "P0T": "P0T (0→T)",
}


def format_pct_error(value: float, both_zero: bool = False) -> str:
    if math.isinf(value):
        return ">100% (sim=0)"
    if both_zero:
        return "0.00%"
    return f"{value:.4f}%"


def _comparison_block(title: str, df: pd.DataFrame, analysis_label: str, sim_label: str) -> List[str]:
    lines = [title, f"{'n1':<4} {analysis_label:<15} {sim_label:<15} {'%error':<12}", "-" * 55]
    for row in df.itertuples(index=False):
        both_zero = row.simulation <= ZERO_TOL and row.analysis <= ZERO_TOL
        lines.append(
            f"{int(row.n):<4d} {row.analysis:<15.8f} {row.simulation:<15.8f} "
            f"{format_pct_error(row.pct_error, both_zero)}"
        )
    return lines


def render_parameters(result: ExperimentResult) -> str:
    p = result.probs
    probs = p.as_dict()
    lines = [
        "Parameters:",
        f"ET0: {p.ET0:.2f}, ET1: {p.ET1:.2f}, ETmu: {p.ETmu:.2f}",
    ]
    for name, label in TRANSITION_LABELS.items():
        lines.append(f"{label}: {probs[name]:.4f}")
    return "\n".join(lines)


def render_frequencies(result: ExperimentResult) -> str:
    df = frequency_table(result)
    lines = [
        f"Results from {result.trials} simulations:",
        f"Frequency count: {result.frequency}",
        "",
        "Probabilities:",
        f"{'n1':<8} {'Frequency':<10} {'P(n1 = x)':<15}",
        "-" * 35,
    ]
    for row in df.itertuples(index=False):
        lines.append(f"{int(row.n):<8d} {int(row.frequency):<10d} {row.probability:<15.6f}")
    lines.append(f"{'Total':<8} {'':<10} {df['probability'].sum():<15.6f}")
    return "\n".join(lines)


def render_case_comparisons(result: ExperimentResult) -> str:
    blocks = []
    for case in CASES:
        title = f"{case} (Analysis vs Simulation): n1 from 0 to {result.max_count}"
        blocks.append("\n".join(_comparison_block(title, case_comparison_table(result, case), "Analysis P", "Sim P")))

    sums = _comparison_block("SUM OF ALL CASES FOR EACH n1", case_sum_table(result), "Analysis Sum", "Sim Sum")
    blocks.append("\n".join(["=" * 65] + sums + ["=" * 65]))
    return "\n\n".join(blocks)


def render_transitions(result: ExperimentResult) -> str:
    counts = transition_count_table(result)
    labels = dict(TRANSITION_LABELS, total="Total transitions")
    lines = ["Transition Counts:"]
    for name, count in zip(counts["transition"], counts["count"]):
        lines.append(f"{labels[name]}: {int(count)}")

    lines += ["", "Empirical Transition Probabilities:"]
    for row in transition_probability_table(result).itertuples(index=False):
        lines.append(f"P({row.transition.replace('->', '→')}): {row.empirical:.6f} (expected: {row.theoretical:.4f})")

    if result.truncated_paths:
        lines += ["", f"WARNING: {result.truncated_paths} path(s) were cut by max_steps."]
    return "\n".join(lines)


def render_goodness_of_fit(gof: GoodnessOfFit) -> str:
    if gof.dof == 0:
        return "Chi-square goodness of fit: skipped (fewer than 2 cells with enough expected paths)"
    return f"Chi-square goodness of fit: stat={gof.statistic:.4f}, dof={gof.dof}, p-value={gof.p_value:.4f}"


def render_report(result: ExperimentResult, gof: GoodnessOfFit) -> str:
    return "\n\n".join(
        [
            render_parameters(result),
            render_frequencies(result),
            render_case_comparisons(result),
            render_transitions(result),
            render_goodness_of_fit(gof),
        ]
    )
