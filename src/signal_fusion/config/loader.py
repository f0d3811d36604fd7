"""Config loader — reads YAML, applies SIGNAL_FUSION_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

import yaml

from signal_fusion.config.schema import AppConfig

# env var -> (section, key, cast)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "SIGNAL_FUSION_LOG_LEVEL": ("logging", "level", str),
    "SIGNAL_FUSION_LOG_FORMAT": ("logging", "format", str),
    "SIGNAL_FUSION_STATUS_INTERVAL": ("logging", "status_interval_s", float),
    "SIGNAL_FUSION_MIN_CONFIDENCE": ("aggregation", "min_confidence", float),
    "SIGNAL_FUSION_NEUTRAL_BAND": ("aggregation", "neutral_band", float),
    "SIGNAL_FUSION_EVAL_INTERVAL": ("aggregation", "evaluation_interval_s", float),
    "SIGNAL_FUSION_EQUITY": ("execution", "equity", float),
}


def apply_env_overrides(data: dict, environ: dict[str, str] | None = None) -> dict:
    """Write every set SIGNAL_FUSION_* variable into *data*, in place."""
    environ = os.environ if environ is None else environ
    for var, (section, key, cast) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw:
            data.setdefault(section, {})[key] = cast(raw)
    return data


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.
    Overrides are listed in ``ENV_OVERRIDES``; out-of-range values are
    rejected by the schema like any YAML value.
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    apply_env_overrides(data)
    return AppConfig.model_validate(data)
