# This file is the single entry point the results view uses to run elasticity analyses.
# It wires selection, query client, monthly aggregation, and time-series synthesis around one state holder.
# Every action takes a token before suspending on the network and commits only if it is still current.
# Pages call these methods and render `holder.state`; they never touch the collaborators directly.

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import pandas as pd

from src.elasticity.analysis_state import ActionKind, AnalysisState, AnalysisStateHolder
from src.elasticity.elasticity_config import ElasticityConfig
from src.elasticity.error_classifier import ElasticityQueryError
from src.elasticity.forecast_series import discover_entity_map, parse_forecast_csv
from src.elasticity.monthly_aggregator import MonthlyOptimalPriceAggregator
from src.elasticity.query_client import ElasticityQueryClient
from src.elasticity.raw_dataset_cache import RawDatasetCache
from src.elasticity.selection import SelectionResolver, SelectionState
from src.elasticity.synthesizer import synthesize_from_curve

LOGGER = logging.getLogger("elasticity")

FALLBACK_NOTE = "Session expired; used CSV-based elasticity instead."


@dataclass(frozen=True)
class ResultsSession:
    """One forecast run's inputs; discarded when the user starts a new run."""

    session_id: str | None
    forecast_frame: pd.DataFrame
    raw_dataset: RawDatasetCache


def build_results_session(
    *,
    config: ElasticityConfig,
    session_id: str | None,
    forecast_text: str | None,
    original_text: str | None,
    entity_map: Mapping[str, Iterable[str]] | None = None,
) -> tuple[ResultsSession, SelectionResolver]:
    """Build one results session; entities come from the forecasting run, else the upload, else the forecast rows."""

    primary_column, secondary_column = config.group_columns[0], config.group_columns[-1]
    forecast_frame = parse_forecast_csv(
        forecast_text or "",
        primary_column=primary_column,
        secondary_column=secondary_column,
    )
    if not entity_map and original_text:
        entity_map = discover_entity_map(original_text, primary_column=primary_column, secondary_column=secondary_column)
    session = ResultsSession(
        session_id=session_id,
        forecast_frame=forecast_frame,
        raw_dataset=RawDatasetCache(original_text=original_text, forecast_text=forecast_text),
    )
    resolver = SelectionResolver(
        forecast_frame=forecast_frame,
        group_columns=config.group_columns,
        entity_map=entity_map,
        default_secondary_value=config.default_secondary_value,
    )
    return session, resolver


class ElasticityAnalysisService:
    def __init__(
        self,
        *,
        config: ElasticityConfig,
        results_session: ResultsSession,
        resolver: SelectionResolver,
        client: ElasticityQueryClient | None = None,
        holder: AnalysisStateHolder | None = None,
    ) -> None:
        self.config = config
        self.results_session = results_session
        self.resolver = resolver
        self.client = client or ElasticityQueryClient(config=config, raw_dataset=results_session.raw_dataset)
        self.aggregator = MonthlyOptimalPriceAggregator(client=self.client)
        self.holder = holder or AnalysisStateHolder(AnalysisState(selection=resolver.initial_state()))

    @property
    def state(self) -> AnalysisState:
        return self.holder.state

    def select_primary(self, primary: str) -> AnalysisState:
        return self.holder.select(self.resolver.select_primary(self.state.selection, primary))

    def select_secondary(self, secondary: str) -> AnalysisState:
        return self.holder.select(self.resolver.select_secondary(self.state.selection, secondary))

    def select_month(self, month: str) -> AnalysisState:
        return self.holder.select(self.resolver.select_month(self.state.selection, month))

    def available_months(self) -> list[str]:
        return self.resolver.months_for(self.state.selection)

    def run_single_month(self, *, sweep_percent: float, num_points: int) -> AnalysisState:
        selection_state = self.state.selection
        token = self.holder.begin(ActionKind.SINGLE_MONTH)
        try:
            selection = self.resolver.to_entity_selection(selection_state)
        except ValueError as exc:
            self.holder.fail(token, str(exc))
            return self.state

        try:
            outcome = self.client.query_with_outcome(
                selection,
                self.results_session.session_id,
                sweep_percent,
                num_points,
            )
        except ElasticityQueryError as exc:
            LOGGER.warning("Price elasticity failed for %s: %s", selection.describe(), exc.user_message)
            self.holder.fail(token, exc.user_message)
            return self.state

        forecast = self.resolver.forecast_for(selection_state)
        self.holder.commit(
            token,
            curve=outcome.curve,
            used_fallback=outcome.used_fallback,
            time_series=tuple(synthesize_from_curve(forecast, outcome.curve, self.state.monthly_table)),
        )
        return self.state

    def run_all_months(self, *, sweep_percent: float, num_points: int) -> AnalysisState:
        selection_state = self.state.selection
        months = self.resolver.months_for(selection_state)
        token = self.holder.begin(ActionKind.ALL_MONTHS)
        if not selection_state.primary or not selection_state.secondary or not months:
            self.holder.fail(token, "Choose a primary value and a secondary value with forecast months first.")
            return self.state

        selection = self.resolver.to_entity_selection(
            SelectionState(selection_state.primary, selection_state.secondary, months[0])
        )
        try:
            aggregation = self.aggregator.aggregate(
                selection,
                months,
                sweep_percent,
                num_points,
                session_id=self.results_session.session_id,
            )
        except ElasticityQueryError as exc:
            self.holder.fail(token, exc.user_message)
            return self.state

        if aggregation.all_failed:
            first_failure = next(iter(aggregation.failures.values()))
            self.holder.fail(token, f"Monthly analysis failed: {first_failure}")
            return self.state

        forecast = self.resolver.forecast_for(selection_state)
        self.holder.commit(
            token,
            monthly_table=dict(aggregation.records),
            time_series=tuple(synthesize_from_curve(forecast, self.state.curve, aggregation.records)),
        )
        return self.state
