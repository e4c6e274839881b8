from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class RateParameters:
    """Base rates of the renewal process (each the inverse of a mean time)."""
    lambda0: float
    lambda1: float
    mu: float

    def __post_init__(self) -> None:
        for name in ("lambda0", "lambda1", "mu"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite rate. Found {value!r}.")
            object.__setattr__(self, name, value)

    @classmethod
    def from_mean_times(cls, et0: float, et1: float, et_mu: float) -> "RateParameters":
        for name, value in (("ET0", et0), ("ET1", et1), ("ETmu", et_mu)):
            if not math.isfinite(float(value)) or float(value) <= 0:
                raise ValueError(f"{name} must be a positive finite mean time. Found {value!r}.")
        return cls(lambda0=1.0 / float(et0), lambda1=1.0 / float(et1), mu=1.0 / float(et_mu))


@dataclass(frozen=True)
class DerivedProbabilities:
    P01: float    # 0 -> 1
    P0T: float    # 0 -> T
    P10: float    # 1 -> 0
    P1T: float    # 1 -> T
    ET0: float
    ET1: float
    ETmu: float

    @property
    def P0(self) -> float:
        """Probability of starting a path in state 0."""
        return self.ET0 / (self.ET0 + self.ET1)

    def as_dict(self) -> dict[str, float]:
        return {
            "P01": self.P01,
            "P0T": self.P0T,
            "P10": self.P10,
            "P1T": self.P1T,
        }


def derive_probabilities(rates: RateParameters) -> DerivedProbabilities:
    """
    Each sojourn races the stay clock of the current state against the
    absorption clock mu. Memorylessness makes the winner probabilities
    constant:
      P01 = mu / (lambda1 + mu)
      P10 = mu / (lambda0 + mu)
    and the absorption probabilities are their complements.
    """
    p01 = rates.mu / (rates.lambda1 + rates.mu)
    p10 = rates.mu / (rates.lambda0 + rates.mu)

    return DerivedProbabilities(
        P01=p01,
        P0T=1.0 - p01,
        P10=p10,
        P1T=1.0 - p10,
        ET0=1.0 / rates.lambda0,
        ET1=1.0 / rates.lambda1,
        ETmu=1.0 / rates.mu,
    )
