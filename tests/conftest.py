import json
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from config import SimConfig
from rates import RateParameters


@pytest.fixture
def reference_rates() -> RateParameters:
    # Mean times 200 / 400 / 250.
    return RateParameters(lambda0=1 / 200, lambda1=1 / 400, mu=1 / 250)


@pytest.fixture
def example_rates() -> RateParameters:
    return RateParameters(lambda0=0.005, lambda1=0.0025, mu=0.004)


@pytest.fixture
def small_config() -> SimConfig:
    return SimConfig(trials=5000, seed=123)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(2024)


@pytest.fixture
def mini_params() -> dict:
    return {
        "mean_time_state0": 200,
        "mean_time_state1": 400,
        "mean_time_absorption": 250,
        "simulation_trials": 2000,
        "random_seed": 7,
    }


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def write_json():
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    return _write
