# This file fuses per-month optimal prices with the demand forecast timeline.
# It produces exactly one row per forecast date, used for both the on-screen chart and file export.
# Months without a monthly record reuse the single-month values from the latest curve.
# The price band is a flat +/-10% around the optimal price; it is not estimated from the curve.

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from src.elasticity.models import ElasticityCurve, ForecastPoint, MonthlyPriceRecord, TimeSeriesRow

UPPER_BAND_FACTOR = 1.1
LOWER_BAND_FACTOR = 0.9

TIME_SERIES_COLUMNS = [
    "date",
    "currentPrice",
    "optimalPrice",
    "upperBound",
    "lowerBound",
    "revenueAtOptimal",
    "elasticity",
]
CURVE_COLUMNS = ["price", "demand", "revenue"]


def synthesize(
    forecast: Sequence[ForecastPoint],
    single_month_current_price: float | None,
    single_month_optimal_price: float | None,
    monthly_table: Mapping[str, MonthlyPriceRecord] | None = None,
) -> list[TimeSeriesRow]:
    table = monthly_table or {}
    fallback_current = single_month_current_price if single_month_current_price is not None else 0.0
    fallback_optimal = single_month_optimal_price if single_month_optimal_price is not None else 0.0

    rows: list[TimeSeriesRow] = []
    for point in forecast:
        record = table.get(point.month)
        if record is not None:
            current = record.current_price
            optimal = record.optimal_price
            elasticity = record.elasticity
        else:
            current = fallback_current
            optimal = fallback_optimal
            elasticity = None
        rows.append(
            TimeSeriesRow(
                date=point.date,
                current_price=current,
                optimal_price=optimal,
                upper_bound=optimal * UPPER_BAND_FACTOR,
                lower_bound=optimal * LOWER_BAND_FACTOR,
                revenue_at_optimal=point.predicted_demand * optimal,
                elasticity=elasticity,
            )
        )
    return rows


def synthesize_from_curve(
    forecast: Sequence[ForecastPoint],
    curve: ElasticityCurve | None,
    monthly_table: Mapping[str, MonthlyPriceRecord] | None = None,
) -> list[TimeSeriesRow]:
    return synthesize(
        forecast,
        curve.current_price if curve is not None else None,
        curve.optimal_price if curve is not None else None,
        monthly_table,
    )


def time_series_frame(rows: Sequence[TimeSeriesRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "date": row.date,
                "currentPrice": row.current_price,
                "optimalPrice": row.optimal_price,
                "upperBound": row.upper_bound,
                "lowerBound": row.lower_bound,
                "revenueAtOptimal": row.revenue_at_optimal,
                "elasticity": row.elasticity,
            }
            for row in rows
        ],
        columns=TIME_SERIES_COLUMNS,
    )


def curve_frame(curve: ElasticityCurve | None) -> pd.DataFrame:
    if curve is None:
        return pd.DataFrame(columns=CURVE_COLUMNS)
    return pd.DataFrame(
        [{"price": point.price, "demand": point.demand, "revenue": point.revenue} for point in curve.points],
        columns=CURVE_COLUMNS,
    )
