# This file repeats the single-month elasticity query across every forecast month for one entity.
# Months are queried concurrently on a small thread pool and joined once all of them settle.
# A month that fails after its own fallback is logged and left out of the table; the batch still succeeds.
# The merge is keyed by month, so the resulting table does not depend on completion order.

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field

from src.elasticity.error_classifier import ElasticityQueryError, missing_session_error
from src.elasticity.models import ElasticityCurve, EntitySelection, MonthlyPriceRecord, validate_month
from src.elasticity.query_client import ElasticityQueryClient

LOGGER = logging.getLogger("elasticity.monthly")


@dataclass(frozen=True)
class MonthlyAggregation:
    records: dict[str, MonthlyPriceRecord]
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return not self.records and bool(self.failures)


def record_from_curve(month: str, curve: ElasticityCurve) -> MonthlyPriceRecord | None:
    current_price = curve.current_price
    if curve.optimal_price is None or current_price is None:
        return None
    return MonthlyPriceRecord(
        month=month,
        optimal_price=curve.optimal_price,
        current_price=current_price,
        elasticity=curve.elasticity,
    )


class MonthlyOptimalPriceAggregator:
    def __init__(self, *, client: ElasticityQueryClient, max_workers: int | None = None) -> None:
        self.client = client
        self.max_workers = max_workers or client.config.max_concurrent_months

    def aggregate_all_months(
        self,
        selection: EntitySelection,
        available_months: list[str],
        sweep_percent: float,
        num_points: int,
        *,
        session_id: str | None,
    ) -> dict[str, MonthlyPriceRecord]:
        return self.aggregate(
            selection,
            available_months,
            sweep_percent,
            num_points,
            session_id=session_id,
        ).records

    def aggregate(
        self,
        selection: EntitySelection,
        available_months: list[str],
        sweep_percent: float,
        num_points: int,
        *,
        session_id: str | None,
    ) -> MonthlyAggregation:
        """Query every month concurrently; `selection.month` is ignored and replaced per month."""

        if not session_id and not self.client.raw_dataset.is_populated:
            # Every month would fail the same way; surface it once instead.
            raise missing_session_error()

        months = sorted({validate_month(month) for month in available_months})
        if not months:
            return MonthlyAggregation(records={})

        records: dict[str, MonthlyPriceRecord] = {}
        failures: dict[str, str] = {}
        workers = max(1, min(self.max_workers, len(months)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="elasticity-month") as pool:
            futures: dict[str, Future[ElasticityCurve]] = {
                month: pool.submit(
                    self.client.query,
                    selection.with_month(month),
                    session_id,
                    sweep_percent,
                    num_points,
                )
                for month in months
            }
            for month, future in futures.items():
                try:
                    curve = future.result()
                except ElasticityQueryError as exc:
                    LOGGER.warning(
                        "Monthly elasticity failed for %s (%s): %s",
                        month,
                        exc.category.value,
                        exc.raw_message or exc.user_message,
                    )
                    failures[month] = exc.user_message
                    continue
                record = record_from_curve(month, curve)
                if record is None:
                    LOGGER.warning("Monthly elasticity for %s returned no optimal or current price", month)
                    failures[month] = "No optimal price returned for this month."
                    continue
                records[month] = record

        LOGGER.info(
            "Monthly elasticity finished for %s: %d succeeded, %d failed",
            ",".join(selection.group_values),
            len(records),
            len(failures),
        )
        return MonthlyAggregation(records=records, failures=failures)
