# This file turns the forecasting collaborator's exported CSV into per-entity forecast timelines.
# It also discovers which secondary values (products) exist under each primary value (store).
# Header matching is case-insensitive because exported files are not consistent about casing.
# The ForecastPoint timeline built here is the authoritative axis every other structure aligns to.

from __future__ import annotations

import io
import math

import pandas as pd

from src.elasticity.models import ForecastPoint

FORECAST_COLUMN_ALIASES = {
    "storeid": "primary",
    "productid": "secondary",
    "date": "date",
    "predictedmonthlydemand": "predicted_demand",
    "upperconfidencebound": "upper_bound",
    "lowerconfidencebound": "lower_bound",
}
FORECAST_COLUMNS = ["primary", "secondary", "date", "predicted_demand", "upper_bound", "lower_bound"]


def _read_text_frame(text: str) -> pd.DataFrame:
    if not text or not text.strip():
        return pd.DataFrame()
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skipinitialspace=True)


def _clean_str(series: pd.Series) -> pd.Series:
    return series.astype(str).str.strip().str.strip('"').str.strip()


def parse_forecast_csv(
    text: str,
    *,
    primary_column: str = "StoreID",
    secondary_column: str = "ProductID",
) -> pd.DataFrame:
    raw = _read_text_frame(text)
    if raw.empty:
        return pd.DataFrame(columns=FORECAST_COLUMNS)

    aliases = dict(FORECAST_COLUMN_ALIASES)
    aliases[primary_column.lower()] = "primary"
    aliases[secondary_column.lower()] = "secondary"
    renamed = raw.rename(columns=lambda name: aliases.get(str(name).strip().lower(), str(name)))
    required = {"primary", "secondary", "date", "predicted_demand"}
    if not required.issubset(renamed.columns):
        return pd.DataFrame(columns=FORECAST_COLUMNS)

    frame = pd.DataFrame(
        {
            "primary": _clean_str(renamed["primary"]),
            "secondary": _clean_str(renamed["secondary"]),
            "date": pd.to_datetime(_clean_str(renamed["date"]), errors="coerce", format="mixed"),
            "predicted_demand": pd.to_numeric(_clean_str(renamed["predicted_demand"]), errors="coerce").fillna(0.0),
        }
    )
    for bound in ("upper_bound", "lower_bound"):
        if bound in renamed.columns:
            frame[bound] = pd.to_numeric(_clean_str(renamed[bound]), errors="coerce")
        else:
            frame[bound] = float("nan")

    frame = frame[frame["date"].notna() & (frame["primary"] != "") & (frame["secondary"] != "")]
    return frame.sort_values("date", kind="stable").reset_index(drop=True)[FORECAST_COLUMNS]


def _optional_bound(value: float | None) -> float | None:
    if value is None:
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def forecast_points_for(frame: pd.DataFrame, primary: str, secondary: str) -> list[ForecastPoint]:
    if frame.empty:
        return []
    subset = frame[(frame["primary"] == str(primary)) & (frame["secondary"] == str(secondary))]
    subset = subset.sort_values("date", kind="stable")
    return [
        ForecastPoint(
            date=row.date.date(),
            predicted_demand=float(row.predicted_demand),
            upper_bound=_optional_bound(row.upper_bound),
            lower_bound=_optional_bound(row.lower_bound),
        )
        for row in subset.itertuples(index=False)
    ]


def entity_map_from_frame(frame: pd.DataFrame) -> dict[str, set[str]]:
    entity_map: dict[str, set[str]] = {}
    if frame.empty:
        return entity_map
    for primary, secondary in frame[["primary", "secondary"]].drop_duplicates().itertuples(index=False):
        entity_map.setdefault(str(primary), set()).add(str(secondary))
    return entity_map


def discover_entity_map(text: str, *, primary_column: str, secondary_column: str) -> dict[str, set[str]]:
    """Build primary -> secondaries from the raw upload; empty when either column is absent."""

    raw = _read_text_frame(text)
    if raw.empty:
        return {}
    columns = {str(name).strip(): name for name in raw.columns}
    if primary_column not in columns or secondary_column not in columns:
        return {}

    pairs = pd.DataFrame(
        {
            "primary": _clean_str(raw[columns[primary_column]]),
            "secondary": _clean_str(raw[columns[secondary_column]]),
        }
    )
    pairs = pairs[(pairs["primary"] != "") & (pairs["secondary"] != "")]
    return entity_map_from_frame(pairs)
