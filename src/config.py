import numbers
from dataclasses import dataclass
from typing import Optional

from rates import RateParameters


def _is_whole(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Integral):
        return True
    return isinstance(value, float) and value.is_integer()


@dataclass(frozen=True)
class SimConfig:
    lambda0: float = 1 / 200
    lambda1: float = 1 / 400
    mu: float = 1 / 250
    trials: int = 100000
    seed: Optional[int] = 42
    # Independent random streams spawned from `seed`; tallies are summed afterwards.
    n_streams: int = 1
    # None keeps the path loop unbounded. A bound only guards against runaway paths.
    max_steps: Optional[int] = None

    def __post_init__(self) -> None:
        # Raises on non-positive rates.
        RateParameters(lambda0=self.lambda0, lambda1=self.lambda1, mu=self.mu)
        if not _is_whole(self.trials) or self.trials <= 0:
            raise ValueError("trials must be a positive integer.")
        if not _is_whole(self.n_streams) or self.n_streams <= 0:
            raise ValueError("n_streams must be a positive integer.")
        if self.n_streams > self.trials:
            raise ValueError("n_streams cannot exceed trials.")
        if self.max_steps is not None and (not _is_whole(self.max_steps) or self.max_steps <= 0):
            raise ValueError("max_steps must be a positive integer or None.")
        if self.seed is not None and (not _is_whole(self.seed) or self.seed < 0):
            raise ValueError("seed must be a non-negative integer or None.")

        # SeedSequence and range() need real ints.
        for name in ("trials", "n_streams", "max_steps", "seed"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, int(value))

    @property
    def rates(self) -> RateParameters:
        return RateParameters(lambda0=self.lambda0, lambda1=self.lambda1, mu=self.mu)
