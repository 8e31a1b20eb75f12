# This file defines runtime configuration for the price-elasticity reconciliation engine.
# It exists so the dashboard, the query client, and the normalizer all read one policy surface.
# The loader merges YAML defaults with ELASTICITY_* environment overrides and validates them.
# The placeholder elasticity table is policy, not an estimate, so it lives here rather than in code.

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = "configs/elasticity_policy.yaml"
DEFAULT_PLACEHOLDER_ELASTICITIES = (-0.156, -0.234, -0.342, -0.456, -0.567, -0.678, -0.789, -0.891)


def _load_yaml(path: str) -> dict[str, Any]:
    if not Path(path).exists():
        return {}
    with open(path, encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config at {path} must be a mapping, got: {type(loaded).__name__}")
    return dict(loaded)


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value


def _env_float(name: str, default: float | None = None) -> float | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _env_int(name: str, default: int | None = None) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


def _env_float_list(name: str, default: list[float]) -> list[float]:
    return [float(item) for item in _env_list(name, [str(item) for item in default])]


@dataclass(frozen=True)
class ElasticityConfig:
    api_base_url: str
    elasticity_path: str
    price_column: str
    group_columns: tuple[str, ...]
    default_secondary_value: str | None

    default_sweep_percent: float
    default_num_points: int
    min_sweep_percent: float
    max_sweep_percent: float
    min_num_points: int
    max_num_points: int

    elasticity_epsilon: float
    placeholder_elasticities: tuple[float, ...]

    request_timeout_seconds: float
    fallback_timeout_seconds: float
    max_fallback_attempts: int
    max_concurrent_months: int
    fallback_filename: str

    @property
    def elasticity_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/{self.elasticity_path.lstrip('/')}"

    def clamp_sweep_percent(self, requested: float | None) -> float:
        if requested is None:
            return self.default_sweep_percent
        return max(self.min_sweep_percent, min(float(requested), self.max_sweep_percent))

    def clamp_num_points(self, requested: int | None) -> int:
        if requested is None:
            return self.default_num_points
        return max(self.min_num_points, min(int(requested), self.max_num_points))

    def to_dict(self) -> dict[str, Any]:
        return {
            "api_base_url": self.api_base_url,
            "elasticity_path": self.elasticity_path,
            "price_column": self.price_column,
            "group_columns": list(self.group_columns),
            "default_secondary_value": self.default_secondary_value,
            "default_sweep_percent": self.default_sweep_percent,
            "default_num_points": self.default_num_points,
            "min_sweep_percent": self.min_sweep_percent,
            "max_sweep_percent": self.max_sweep_percent,
            "min_num_points": self.min_num_points,
            "max_num_points": self.max_num_points,
            "elasticity_epsilon": self.elasticity_epsilon,
            "placeholder_elasticities": list(self.placeholder_elasticities),
            "request_timeout_seconds": self.request_timeout_seconds,
            "fallback_timeout_seconds": self.fallback_timeout_seconds,
            "max_fallback_attempts": self.max_fallback_attempts,
            "max_concurrent_months": self.max_concurrent_months,
            "fallback_filename": self.fallback_filename,
        }


def validate_elasticity_config(config: ElasticityConfig) -> ElasticityConfig:
    if not config.api_base_url:
        raise ValueError("api_base_url must be set")
    if not config.group_columns:
        raise ValueError("group_columns must contain at least one column name")
    if not (0 < config.min_sweep_percent <= config.max_sweep_percent):
        raise ValueError("min_sweep_percent must be > 0 and <= max_sweep_percent")
    if not (0 < config.min_num_points <= config.max_num_points):
        raise ValueError("min_num_points must be > 0 and <= max_num_points")
    if not (config.min_sweep_percent <= config.default_sweep_percent <= config.max_sweep_percent):
        raise ValueError("default_sweep_percent must be within [min_sweep_percent, max_sweep_percent]")
    if not (config.min_num_points <= config.default_num_points <= config.max_num_points):
        raise ValueError("default_num_points must be within [min_num_points, max_num_points]")
    if config.elasticity_epsilon <= 0:
        raise ValueError("elasticity_epsilon must be > 0")
    if not config.placeholder_elasticities:
        raise ValueError("placeholder_elasticities must not be empty")
    for value in config.placeholder_elasticities:
        if value >= 0 or abs(value) < config.elasticity_epsilon:
            raise ValueError(
                "placeholder_elasticities must be negative with magnitude >= elasticity_epsilon, "
                f"got: {value}"
            )
    if config.request_timeout_seconds <= 0 or config.fallback_timeout_seconds <= 0:
        raise ValueError("request_timeout_seconds and fallback_timeout_seconds must be > 0")
    if config.max_fallback_attempts not in (0, 1):
        raise ValueError("max_fallback_attempts must be 0 or 1")
    if config.max_concurrent_months < 1:
        raise ValueError("max_concurrent_months must be >= 1")
    return config


def load_elasticity_config(*, config_path: str = DEFAULT_CONFIG_PATH) -> ElasticityConfig:
    cfg = _load_yaml(config_path)
    sweep_cfg = dict(cfg.get("sweep", {}))
    normalization_cfg = dict(cfg.get("normalization", {}))
    transport_cfg = dict(cfg.get("transport", {}))

    api_base_url = _env_str("ELASTICITY_API_BASE_URL", cfg.get("api_base_url"))
    if not api_base_url:
        api_host = os.getenv("API_HOST", "localhost")
        api_port = os.getenv("API_PORT", "8000")
        api_base_url = f"http://{api_host}:{api_port}"

    elasticity_path = str(
        _env_str(
            "ELASTICITY_API_PATH",
            str(cfg.get("elasticity_path", "/api/sarimax/sarimax-price-elasticity/")),
        )
    )
    price_column = str(_env_str("ELASTICITY_PRICE_COLUMN", str(cfg.get("price_column", "Price"))))
    group_columns = tuple(
        _env_list("ELASTICITY_GROUP_COLUMNS", [str(item) for item in cfg.get("group_columns", ["StoreID", "ProductID"])])
    )
    default_secondary_value = _env_str("ELASTICITY_DEFAULT_SECONDARY_VALUE", cfg.get("default_secondary_value", "P001"))

    default_sweep_percent = float(_env_float("ELASTICITY_SWEEP_PERCENT", float(sweep_cfg.get("default_percent", 30))) or 30)
    default_num_points = int(_env_int("ELASTICITY_NUM_POINTS", int(sweep_cfg.get("default_num_points", 13))) or 13)
    min_sweep_percent = float(sweep_cfg.get("min_percent", 1))
    max_sweep_percent = float(sweep_cfg.get("max_percent", 80))
    min_num_points = int(sweep_cfg.get("min_num_points", 5))
    max_num_points = int(sweep_cfg.get("max_num_points", 51))

    elasticity_epsilon = float(
        _env_float("ELASTICITY_EPSILON", float(normalization_cfg.get("epsilon", 0.001))) or 0.001
    )
    placeholder_elasticities = tuple(
        _env_float_list(
            "ELASTICITY_PLACEHOLDER_VALUES",
            [float(item) for item in normalization_cfg.get("placeholder_elasticities", DEFAULT_PLACEHOLDER_ELASTICITIES)],
        )
    )

    request_timeout_seconds = float(
        _env_float("ELASTICITY_REQUEST_TIMEOUT_SECONDS", float(transport_cfg.get("request_timeout_seconds", 30))) or 30
    )
    fallback_timeout_seconds = float(
        _env_float("ELASTICITY_FALLBACK_TIMEOUT_SECONDS", float(transport_cfg.get("fallback_timeout_seconds", 60))) or 60
    )
    max_fallback_attempts = int(_env_int("ELASTICITY_MAX_FALLBACK_ATTEMPTS", int(transport_cfg.get("max_fallback_attempts", 1))) or 0)
    max_concurrent_months = int(
        _env_int("ELASTICITY_MAX_CONCURRENT_MONTHS", int(transport_cfg.get("max_concurrent_months", 6))) or 6
    )
    fallback_filename = str(transport_cfg.get("fallback_filename", "sarimax_forecast.csv"))

    return validate_elasticity_config(
        ElasticityConfig(
            api_base_url=api_base_url.rstrip("/"),
            elasticity_path=elasticity_path,
            price_column=price_column,
            group_columns=group_columns,
            default_secondary_value=default_secondary_value,
            default_sweep_percent=default_sweep_percent,
            default_num_points=default_num_points,
            min_sweep_percent=min_sweep_percent,
            max_sweep_percent=max_sweep_percent,
            min_num_points=min_num_points,
            max_num_points=max_num_points,
            elasticity_epsilon=elasticity_epsilon,
            placeholder_elasticities=placeholder_elasticities,
            request_timeout_seconds=request_timeout_seconds,
            fallback_timeout_seconds=fallback_timeout_seconds,
            max_fallback_attempts=max_fallback_attempts,
            max_concurrent_months=max_concurrent_months,
            fallback_filename=fallback_filename,
        )
    )
