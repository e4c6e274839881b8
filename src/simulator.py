from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from rates import DerivedProbabilities


logger = logging.getLogger(__name__)

TRANSITIONS = ("P10", "P01", "P1T", "P0T")
CASES = ("case1", "case2", "case3", "case4")

# (start state, end state) -> case
_CASE_BY_ENDPOINTS = {
    (1, 1): "case1",
    (1, 0): "case2",
    (0, 1): "case3",
    (0, 0): "case4",
}


@dataclass
class TransitionCounters:
    P10: int = 0
    P01: int = 0
    P1T: int = 0
    P0T: int = 0
    # Paths cut by a max_steps bound. Not a transition.
    truncated_paths: int = 0

    def increment(self, name: str) -> None:
        if name not in TRANSITIONS:
            raise ValueError(f"Unknown transition '{name}'.")
        setattr(self, name, getattr(self, name) + 1)

    def merge(self, other: "TransitionCounters") -> "TransitionCounters":
        """Element-wise sum; order of merging does not matter."""
        return TransitionCounters(
            P10=self.P10 + other.P10,
            P01=self.P01 + other.P01,
            P1T=self.P1T + other.P1T,
            P0T=self.P0T + other.P0T,
            truncated_paths=self.truncated_paths + other.truncated_paths,
        )

    @property
    def total(self) -> int:
        return self.P10 + self.P01 + self.P1T + self.P0T

    def as_dict(self) -> Dict[str, int]:
        return {name: int(getattr(self, name)) for name in TRANSITIONS}


def draw_initial_state(rng: np.random.Generator, p0: float) -> int:
    """Start in state 0 with probability p0 = ET0 / (ET0 + ET1), else state 1."""
    u = rng.random()
    if u <= p0:
        return 0
    return 1


def simulate_path(
    initial_state: int,
    probs: DerivedProbabilities,
    counters: TransitionCounters,
    rng: np.random.Generator,
    max_steps: Optional[int] = None,
) -> List[int]:
    """
    Walk the embedded jump chain from `initial_state` until absorption.

    One uniform draw per step decides between the move to the other state
    and absorption into T. Every event increments `counters`. The returned
    path holds the visited states only; absorption is implicit.

    Parameters
    ----------
    initial_state : int
        0 or 1.
    probs : DerivedProbabilities
        Supplies P01 and P10.
    counters : TransitionCounters
        Accumulator owned by the caller for the duration of the call.
    rng : np.random.Generator
        Source of the uniform draws.
    max_steps : int, optional
        Safety bound on the number of moves. None (default) never cuts a path.

    Returns
    -------
    list[int]
    """
    if initial_state not in (0, 1):
        raise ValueError(f"initial_state must be 0 or 1. Found {initial_state!r}.")

    state = initial_state
    path = [state]
    steps = 0

    while True:
        if max_steps is not None and steps >= max_steps:
            counters.truncated_paths += 1
            logger.warning(
                "Path starting in state %d reached max_steps=%d without absorption; cutting it.",
                initial_state,
                max_steps,
            )
            break

        u = rng.random()
        if state == 0:
            if u <= probs.P01:
                state = 1
                path.append(state)
                counters.increment("P01")
            else:
                counters.increment("P0T")
                break
        else:
            if u <= probs.P10:
                state = 0
                path.append(state)
                counters.increment("P10")
            else:
                counters.increment("P1T")
                break
        steps += 1

    return path


def count_of_ones(path: Sequence[int]) -> int:
    return sum(1 for state in path if state == 1)


def classify_path(path: Sequence[int]) -> str:
    if len(path) == 0:
        raise ValueError("Cannot classify an empty path.")
    key = (path[0], path[-1])
    if key not in _CASE_BY_ENDPOINTS:
        raise ValueError(f"Path endpoints must be states 0 or 1. Found {key}.")
    return _CASE_BY_ENDPOINTS[key]
