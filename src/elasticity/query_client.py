# This file implements the price-elasticity client used by the forecast results view.
# It issues the session-backed request first and, only when the collaborator reports missing session data,
# resubmits one degraded request built from the cached raw dataset without a session identifier.
# Both paths feed the same normalizer, so callers see one curve contract or one classified error.

from __future__ import annotations

import logging
from typing import Any

import requests

from src.elasticity.elasticity_config import ElasticityConfig
from src.elasticity.error_classifier import (
    ElasticityQueryError,
    ErrorCategory,
    classify_error,
    missing_session_error,
    unknown_error,
)
from src.elasticity.models import (
    CurvePoint,
    ElasticityCurve,
    EntitySelection,
    QueryOutcome,
    finite_or_none,
)
from src.elasticity.normalizer import ElasticityNormalizer
from src.elasticity.raw_dataset_cache import RawDatasetCache

LOGGER = logging.getLogger("elasticity.query")

FormFields = list[tuple[str, str]]


def _format_number(value: float | int) -> str:
    # Passed through as given; integral floats are sent without a trailing ".0".
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_curve_payload(payload: Any) -> ElasticityCurve:
    if not isinstance(payload, dict):
        raise unknown_error("Unexpected payload shape from elasticity service")
    result = payload.get("result")
    if not isinstance(result, dict):
        raise unknown_error("No elasticity data returned from server")

    raw_points = result.get("curve") or []
    points: list[CurvePoint] = []
    if isinstance(raw_points, list):
        for item in raw_points:
            if not isinstance(item, dict):
                continue
            price = finite_or_none(item.get("price"))
            demand = finite_or_none(item.get("demand"))
            revenue = finite_or_none(item.get("revenue"))
            if price is None or demand is None:
                continue
            points.append(
                CurvePoint(price=price, demand=demand, revenue=revenue if revenue is not None else price * demand)
            )
    if not points:
        raise unknown_error("No elasticity data returned from server")

    return ElasticityCurve(
        points=tuple(points),
        optimal_price=finite_or_none(result.get("optimal_price")),
        optimal_revenue=finite_or_none(result.get("optimal_revenue")),
        elasticity=finite_or_none(result.get("elasticity")),
    )


class ElasticityQueryClient:
    def __init__(
        self,
        *,
        config: ElasticityConfig,
        raw_dataset: RawDatasetCache | None = None,
        normalizer: ElasticityNormalizer | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.raw_dataset = raw_dataset or RawDatasetCache.empty()
        self.normalizer = normalizer or ElasticityNormalizer.from_config(config)
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return self.config.elasticity_url

    def query(
        self,
        selection: EntitySelection,
        session_id: str | None,
        sweep_percent: float,
        num_points: int,
    ) -> ElasticityCurve:
        return self.query_with_outcome(selection, session_id, sweep_percent, num_points).curve

    def query_with_outcome(
        self,
        selection: EntitySelection,
        session_id: str | None,
        sweep_percent: float,
        num_points: int,
    ) -> QueryOutcome:
        if not session_id:
            LOGGER.info("No session id for %s; using raw dataset recomputation", selection.describe())
            curve = self._fallback(selection, sweep_percent, num_points, reason=missing_session_error())
            return QueryOutcome(curve=self.normalizer.normalize(curve), selection=selection, used_fallback=True)

        LOGGER.info("Requesting price elasticity for %s", selection.describe())
        try:
            curve = self._post(
                self.primary_fields(selection, session_id, sweep_percent, num_points),
                files=None,
                timeout=self.config.request_timeout_seconds,
            )
        except ElasticityQueryError as exc:
            if exc.category is not ErrorCategory.MISSING_SESSION:
                raise
            LOGGER.warning("Session data expired for %s; retrying from raw dataset", selection.describe())
            curve = self._fallback(selection, sweep_percent, num_points, reason=exc)
            return QueryOutcome(curve=self.normalizer.normalize(curve), selection=selection, used_fallback=True)

        return QueryOutcome(curve=self.normalizer.normalize(curve), selection=selection, used_fallback=False)

    def primary_fields(
        self,
        selection: EntitySelection,
        session_id: str,
        sweep_percent: float,
        num_points: int,
    ) -> FormFields:
        fields: FormFields = [
            ("session_id", session_id),
            ("group_cols", ",".join(selection.group_keys)),
        ]
        # Repeated fields keep values containing commas unambiguous.
        fields.extend(("group_values", value) for value in selection.group_values)
        fields.extend(
            [
                ("month", selection.month),
                ("price_col", self.config.price_column),
                ("sweep_percent", _format_number(sweep_percent)),
                ("num_points", _format_number(num_points)),
            ]
        )
        return fields

    def fallback_fields(self, selection: EntitySelection, sweep_percent: float, num_points: int) -> FormFields:
        return [
            ("month", selection.month),
            ("price_col", self.config.price_column),
            ("sweep_percent", _format_number(sweep_percent)),
            ("num_points", _format_number(num_points)),
        ]

    def _fallback(
        self,
        selection: EntitySelection,
        sweep_percent: float,
        num_points: int,
        *,
        reason: ElasticityQueryError,
    ) -> ElasticityCurve:
        content = self.raw_dataset.fallback_bytes()
        if content is None or self.config.max_fallback_attempts < 1:
            raise reason

        files = {"file": (self.config.fallback_filename, content, "text/csv")}
        try:
            return self._post(
                self.fallback_fields(selection, sweep_percent, num_points),
                files=files,
                timeout=self.config.fallback_timeout_seconds,
            )
        except ElasticityQueryError as exc:
            LOGGER.warning(
                "Raw dataset recomputation failed for %s: %s", selection.describe(), exc.raw_message
            )
            raise

    def _post(
        self,
        fields: FormFields,
        *,
        files: dict[str, tuple[str, bytes, str]] | None,
        timeout: float,
    ) -> ElasticityCurve:
        try:
            response = self.session.post(self.url, data=fields, files=files, timeout=timeout)
        except requests.RequestException as exc:
            raise unknown_error(f"Elasticity request failed for {self.url}: {exc}") from exc

        if response.status_code >= 400:
            raise classify_error(response.text or "")

        try:
            payload = response.json()
        except ValueError as exc:
            raise unknown_error(f"Elasticity service did not return valid JSON for {self.url}") from exc
        return parse_curve_payload(payload)
