# This test file validates the all-months elasticity aggregation.
# It exists so a partial failure across months never aborts the batch or corrupts the table.
# Months run concurrently, so the fake session answers by the month field of each request.
# The resulting table must not depend on completion order.

from __future__ import annotations

import pytest

from src.elasticity.elasticity_config import ElasticityConfig
from src.elasticity.error_classifier import ElasticityQueryError, ErrorCategory
from src.elasticity.monthly_aggregator import MonthlyOptimalPriceAggregator, record_from_curve
from src.elasticity.query_client import ElasticityQueryClient
from src.elasticity.raw_dataset_cache import RawDatasetCache
from tests.elasticity.support import ORIGINAL_CSV, _FakeSession, build_curve, build_selection, error, field_values, ok

OPTIMAL_BY_MONTH = {"2024-01": 12.0, "2024-02": 11.0, "2024-03": 9.0}


def _responder(failing_months: set[str]):
    def respond(fields, files):
        month = field_values(fields, "month")[0]
        if month in failing_months:
            return error("Selected month is outside the forecast range")
        return ok(prices=(10.0, 13.0), optimal_price=OPTIMAL_BY_MONTH[month], elasticity=-0.5)

    return respond


def _aggregator(config: ElasticityConfig, session: _FakeSession, raw_dataset: RawDatasetCache | None = None):
    client = ElasticityQueryClient(config=config, raw_dataset=raw_dataset, session=session)
    return MonthlyOptimalPriceAggregator(client=client, max_workers=3)


def test_all_months_succeed(elasticity_config: ElasticityConfig) -> None:
    session = _FakeSession(responder=_responder(set()))
    aggregator = _aggregator(elasticity_config, session)

    table = aggregator.aggregate_all_months(
        build_selection(), ["2024-03", "2024-01", "2024-02"], 30, 13, session_id="abc-123"
    )

    assert sorted(table) == ["2024-01", "2024-02", "2024-03"]
    assert table["2024-03"].optimal_price == 9.0
    assert table["2024-01"].current_price == 10.0
    assert table["2024-02"].elasticity == -0.5
    assert len(session.calls) == 3


def test_failed_months_are_left_out(elasticity_config: ElasticityConfig) -> None:
    session = _FakeSession(responder=_responder({"2024-02"}))
    aggregator = _aggregator(elasticity_config, session)

    aggregation = aggregator.aggregate(
        build_selection(), ["2024-01", "2024-02", "2024-03"], 30, 13, session_id="abc-123"
    )

    assert sorted(aggregation.records) == ["2024-01", "2024-03"]
    assert list(aggregation.failures) == ["2024-02"]
    assert not aggregation.all_failed


def test_every_month_failing_is_reported(elasticity_config: ElasticityConfig) -> None:
    session = _FakeSession(responder=_responder(set(OPTIMAL_BY_MONTH)))
    aggregator = _aggregator(elasticity_config, session)

    aggregation = aggregator.aggregate(
        build_selection(), list(OPTIMAL_BY_MONTH), 30, 13, session_id="abc-123"
    )

    assert aggregation.records == {}
    assert aggregation.all_failed


def test_duplicate_months_are_queried_once(elasticity_config: ElasticityConfig) -> None:
    session = _FakeSession(responder=_responder(set()))
    aggregator = _aggregator(elasticity_config, session)

    table = aggregator.aggregate_all_months(
        build_selection(), ["2024-01", "2024-01"], 30, 13, session_id="abc-123"
    )

    assert list(table) == ["2024-01"]
    assert len(session.calls) == 1


def test_no_session_and_empty_cache_fails_once(elasticity_config: ElasticityConfig) -> None:
    session = _FakeSession(responder=_responder(set()))
    aggregator = _aggregator(elasticity_config, session)

    with pytest.raises(ElasticityQueryError) as exc_info:
        aggregator.aggregate(build_selection(), list(OPTIMAL_BY_MONTH), 30, 13, session_id=None)

    assert exc_info.value.category is ErrorCategory.MISSING_SESSION
    assert session.calls == []


def test_no_session_with_cache_uses_raw_dataset_for_each_month(elasticity_config: ElasticityConfig) -> None:
    session = _FakeSession(responder=_responder(set()))
    aggregator = _aggregator(elasticity_config, session, RawDatasetCache(original_text=ORIGINAL_CSV))

    table = aggregator.aggregate_all_months(build_selection(), list(OPTIMAL_BY_MONTH), 30, 13, session_id=None)

    assert len(table) == 3
    assert all(files is not None for _, _, files, _ in session.calls)


def test_empty_month_list_returns_empty_table(elasticity_config: ElasticityConfig) -> None:
    session = _FakeSession(responder=_responder(set()))

    assert _aggregator(elasticity_config, session).aggregate_all_months(
        build_selection(), [], 30, 13, session_id="abc-123"
    ) == {}


def test_record_from_curve_requires_prices() -> None:
    assert record_from_curve("2024-01", build_curve(optimal_price=None)) is None

    record = record_from_curve("2024-01", build_curve(optimal_price=12.0, elasticity=-0.2))

    assert record is not None
    assert (record.current_price, record.optimal_price, record.elasticity) == (10.0, 12.0, -0.2)
