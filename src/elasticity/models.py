# This file defines the value types shared by the price-elasticity reconciliation engine.
# Forecast points come from the forecasting collaborator; curves come from the pricing collaborator.
# Every type is a frozen dataclass so results are replaced wholesale instead of edited in place.
# Validation lives in __post_init__ so malformed selections fail before any request is issued.

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from datetime import date
from typing import Any

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def validate_month(month: str) -> str:
    if not isinstance(month, str) or not MONTH_PATTERN.match(month):
        raise ValueError(f"month must use the YYYY-MM format, got: {month!r}")
    return month


def finite_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class ForecastPoint:
    date: date
    predicted_demand: float
    upper_bound: float | None = None
    lower_bound: float | None = None

    @property
    def month(self) -> str:
        return month_key(self.date)


@dataclass(frozen=True)
class EntitySelection:
    """One (entity, month) elasticity query target.

    `group_values` pairs positionally with `group_keys`; both are kept as tuples
    so a selection can be hashed and compared across analysis runs.
    """

    group_keys: tuple[str, ...]
    group_values: tuple[str, ...]
    month: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "group_keys", tuple(str(key) for key in self.group_keys))
        object.__setattr__(self, "group_values", tuple(str(value) for value in self.group_values))
        if not self.group_keys:
            raise ValueError("group_keys must contain at least one dimension name")
        if len(self.group_keys) != len(self.group_values):
            raise ValueError(
                "group_values must match group_keys in length, "
                f"got {len(self.group_values)} values for {len(self.group_keys)} keys"
            )
        validate_month(self.month)

    def with_month(self, month: str) -> EntitySelection:
        return replace(self, month=month)

    def describe(self) -> str:
        pairs = ", ".join(f"{key}={value}" for key, value in zip(self.group_keys, self.group_values))
        return f"{pairs} @ {self.month}"


@dataclass(frozen=True)
class CurvePoint:
    price: float
    demand: float
    revenue: float


@dataclass(frozen=True)
class ElasticityCurve:
    points: tuple[CurvePoint, ...]
    optimal_price: float | None = None
    optimal_revenue: float | None = None
    elasticity: float | None = None

    @property
    def current_price(self) -> float | None:
        # The first sweep point is the unperturbed price.
        if not self.points:
            return None
        return finite_or_none(self.points[0].price)

    def with_elasticity(self, elasticity: float | None) -> ElasticityCurve:
        return replace(self, elasticity=elasticity)


@dataclass(frozen=True)
class MonthlyPriceRecord:
    month: str
    optimal_price: float
    current_price: float
    elasticity: float | None = None


@dataclass(frozen=True)
class TimeSeriesRow:
    date: date
    current_price: float
    optimal_price: float
    upper_bound: float
    lower_bound: float
    revenue_at_optimal: float
    elasticity: float | None = None


@dataclass(frozen=True)
class QueryOutcome:
    curve: ElasticityCurve
    selection: EntitySelection
    used_fallback: bool = False
