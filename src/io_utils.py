import json
from pathlib import Path
from typing import Any, Dict

from config import SimConfig
from rates import RateParameters

RATE_KEYS = ("lambda0", "lambda1", "mu")
MEAN_TIME_KEYS = ("mean_time_state0", "mean_time_state1", "mean_time_absorption")


def load_params(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Parameter file not found: {p.resolve()}")
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _as_number(params: Dict[str, Any], key: str) -> float:
    try:
        return float(params[key])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Parameter '{key}' must be numeric. Found {params[key]!r}.") from exc


def _as_int(params: Dict[str, Any], key: str) -> int:
    value = _as_number(params, key)
    if not value.is_integer():
        raise ValueError(f"Parameter '{key}' must be an integer. Found {params[key]!r}.")
    return int(value)


def validate_params(params: Dict[str, Any]) -> SimConfig:
    """
    Expected structure (flexible):
      either the rates {"lambda0", "lambda1", "mu"}
      or the mean times {"mean_time_state0", "mean_time_state1", "mean_time_absorption"},
      plus "simulation_trials" and optionally "random_seed", "n_streams", "max_steps".
    Returns a validated SimConfig.
    """
    if not isinstance(params, dict):
        raise ValueError("Parameters must be a JSON object.")

    has_rates = any(k in params for k in RATE_KEYS)
    has_times = any(k in params for k in MEAN_TIME_KEYS)
    if has_rates and has_times:
        raise ValueError("Give either rates (lambda0, lambda1, mu) or mean times, not both.")

    if has_rates:
        missing = [k for k in RATE_KEYS if k not in params]
        if missing:
            raise ValueError(f"Missing rate parameters: {missing}")
        rates = RateParameters(*(_as_number(params, k) for k in RATE_KEYS))
    elif has_times:
        missing = [k for k in MEAN_TIME_KEYS if k not in params]
        if missing:
            raise ValueError(f"Missing mean time parameters: {missing}")
        rates = RateParameters.from_mean_times(*(_as_number(params, k) for k in MEAN_TIME_KEYS))
    else:
        raise ValueError(
            "Parameters must contain either lambda0/lambda1/mu or "
            "mean_time_state0/mean_time_state1/mean_time_absorption."
        )

    if "simulation_trials" not in params:
        raise ValueError("Missing simulation_trials.")

    kwargs: Dict[str, Any] = {
        "lambda0": rates.lambda0,
        "lambda1": rates.lambda1,
        "mu": rates.mu,
        "trials": _as_int(params, "simulation_trials"),
    }
    if "random_seed" in params:
        kwargs["seed"] = None if params["random_seed"] is None else _as_int(params, "random_seed")
    if "n_streams" in params:
        kwargs["n_streams"] = _as_int(params, "n_streams")
    if params.get("max_steps") is not None:
        kwargs["max_steps"] = _as_int(params, "max_steps")

    return SimConfig(**kwargs)
