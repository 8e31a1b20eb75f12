# This file provides shared fakes and builders for elasticity engine tests.
# It exists so query, aggregation, and service tests drive the engine without a live pricing service.
# The fake session records every form post so tests can assert request shape and call counts.
# Responses are matched by month when a test needs per-month behavior under concurrency.

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from typing import Any

from src.elasticity.models import CurvePoint, ElasticityCurve, EntitySelection

FORECAST_CSV = """StoreID,ProductID,Date,PredictedMonthlyDemand,UpperConfidenceBound,LowerConfidenceBound
S001,P001,2024-01-31,120,140,100
S001,P001,2024-02-29,110,130,90
S001,P001,2024-03-31,130,150,110
S001,P002,2024-01-31,50,60,40
S002,P003,2024-02-29,70,80,60
"""

ORIGINAL_CSV = """Date,StoreID,ProductID,Sales,Price
2023-01-01,S001,P001,12,9.99
2023-01-01,S001,P002,4,19.99
2023-01-01,S002,P003,7,4.50
2023-01-01,S002,P004,3,5.25
"""


class _FakeResponse:
    def __init__(self, *, status_code: int, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload) if payload is not None else ""

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class _FakeSession:
    def __init__(
        self,
        responses: list[_FakeResponse] | None = None,
        raise_error: Exception | None = None,
        responder: Callable[[list[tuple[str, str]], Any], _FakeResponse] | None = None,
    ) -> None:
        self.responses = responses or []
        self.raise_error = raise_error
        self.responder = responder
        self.calls: list[tuple[str, list[tuple[str, str]], Any, float]] = []
        self._lock = threading.Lock()

    def post(self, url: str, data: list[tuple[str, str]], files: Any, timeout: float) -> _FakeResponse:
        with self._lock:
            self.calls.append((url, list(data), files, timeout))
            if self.raise_error is not None:
                raise self.raise_error
            if self.responder is not None:
                return self.responder(data, files)
            return self.responses.pop(0)


def curve_payload(
    *,
    prices: tuple[float, ...] = (10.0, 13.0),
    demands: tuple[float, ...] = (100.0, 80.0),
    optimal_price: float | None = 13.0,
    optimal_revenue: float | None = 1040.0,
    elasticity: float | None = -0.8,
) -> dict[str, Any]:
    return {
        "result": {
            "curve": [
                {"price": price, "demand": demand, "revenue": price * demand}
                for price, demand in zip(prices, demands)
            ],
            "optimal_price": optimal_price,
            "optimal_revenue": optimal_revenue,
            "elasticity": elasticity,
        }
    }


def ok(**kwargs: Any) -> _FakeResponse:
    return _FakeResponse(status_code=200, payload=curve_payload(**kwargs))


def error(message: str, *, status_code: int = 400) -> _FakeResponse:
    return _FakeResponse(status_code=status_code, payload={"error": message})


def field_values(fields: list[tuple[str, str]], name: str) -> list[str]:
    return [value for key, value in fields if key == name]


def build_selection(month: str = "2024-01") -> EntitySelection:
    return EntitySelection(group_keys=("StoreID", "ProductID"), group_values=("S001", "P001"), month=month)


def build_curve(
    points: tuple[tuple[float, float], ...] = ((10.0, 100.0), (13.0, 80.0)),
    *,
    optimal_price: float | None = 13.0,
    elasticity: float | None = None,
) -> ElasticityCurve:
    return ElasticityCurve(
        points=tuple(CurvePoint(price=price, demand=demand, revenue=price * demand) for price, demand in points),
        optimal_price=optimal_price,
        optimal_revenue=None,
        elasticity=elasticity,
    )
