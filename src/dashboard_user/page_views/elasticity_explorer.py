# This file renders the price elasticity section of the forecast results view.
# It exists so users can pick a store, product and month, run the analysis, and read the outcome in plain language.
# All state lives in the analysis service; the page only renders `service.state` and forwards widget events.
# Failures show an inline notification and leave previously computed results on screen.

from __future__ import annotations

import streamlit as st

from src.dashboard_user.components.charts import render_elasticity_curve, render_price_over_time
from src.dashboard_user.components.inputs import render_sweep_inputs
from src.dashboard_user.ui_text import (
    EMPTY_ENTITIES,
    MONTHLY_SUCCESS,
    SINGLE_MONTH_SUCCESS,
)
from src.elasticity.analysis_service import FALLBACK_NOTE, ElasticityAnalysisService
from src.elasticity.synthesizer import curve_frame, time_series_frame


def _render_selection(service: ElasticityAnalysisService) -> None:
    options = service.resolver.entity_options()
    total_primary, total_secondary = service.resolver.totals()
    st.caption(f"{total_primary} stores and {total_secondary} products in this forecast.")

    selection = service.state.selection
    labels = {f"{option.primary} ({option.secondary_count} products)": option.primary for option in options}
    primary_values = list(labels.values())
    primary_index = primary_values.index(selection.primary) if selection.primary in primary_values else 0
    columns = st.columns(3)

    primary_label = columns[0].selectbox("Store", options=list(labels.keys()), index=primary_index)
    if labels[primary_label] != selection.primary:
        service.select_primary(labels[primary_label])

    secondaries = service.resolver.secondary_options(service.state.selection.primary)
    secondary = service.state.selection.secondary
    chosen_secondary = columns[1].selectbox(
        "Product",
        options=secondaries,
        index=secondaries.index(secondary) if secondary in secondaries else 0,
        disabled=not secondaries,
    )
    if chosen_secondary and chosen_secondary != service.state.selection.secondary:
        service.select_secondary(chosen_secondary)

    months = service.available_months()
    month = service.state.selection.month
    chosen_month = columns[2].selectbox(
        "Month",
        options=months,
        index=months.index(month) if month in months else 0,
        disabled=not months,
    )
    if chosen_month and chosen_month != service.state.selection.month:
        service.select_month(chosen_month)


def _render_results(service: ElasticityAnalysisService, tooltips: dict[str, str]) -> None:
    state = service.state
    curve = state.curve
    if curve is not None:
        if state.used_fallback:
            st.info(FALLBACK_NOTE)
        columns = st.columns(3)
        if curve.optimal_price is not None:
            columns[0].metric("Optimal Price", f"${curve.optimal_price:,.2f}", help=tooltips["optimal_price"])
        if curve.optimal_revenue is not None:
            columns[1].metric("Expected Revenue", f"${curve.optimal_revenue:,.2f}")
        if curve.elasticity is not None:
            columns[2].metric(
                "Price Elasticity",
                f"{curve.elasticity:.3f}",
                help=tooltips["price_elasticity"],
            )
            st.caption(f"{abs(curve.elasticity):.2f}% demand change per 1% price change")

    curve_export = curve_frame(curve)
    series_export = time_series_frame(state.time_series)
    render_elasticity_curve(
        curve_export,
        optimal_price=curve.optimal_price if curve is not None else None,
        help_text=tooltips["elasticity_curve"],
    )
    render_price_over_time(series_export, help_text=tooltips["price_over_time"])

    if not series_export.empty:
        st.download_button(
            "Download price series (CSV)",
            data=series_export.to_csv(index=False),
            file_name="elasticity_price_series.csv",
            mime="text/csv",
        )
    if not curve_export.empty:
        st.download_button(
            "Download elasticity curve (CSV)",
            data=curve_export.to_csv(index=False),
            file_name="elasticity_curve.csv",
            mime="text/csv",
        )


def render(*, service: ElasticityAnalysisService, tooltips: dict[str, str]) -> None:
    st.header("Price Elasticity Analysis")

    if not service.resolver.entity_options():
        st.info(EMPTY_ENTITIES)
        return

    _render_selection(service)
    sweep = render_sweep_inputs(config=service.config, tooltips=tooltips)

    buttons = st.columns(2)
    selection = service.state.selection
    if buttons[0].button("Run Price Elasticity", disabled=not selection.is_complete):
        with st.spinner("Analyzing..."):
            state = service.run_single_month(sweep_percent=sweep.sweep_percent, num_points=sweep.num_points)
        if state.last_error:
            st.error(state.last_error)
        else:
            st.success(SINGLE_MONTH_SUCCESS)

    if buttons[1].button(
        "Compute Monthly Optimal Prices",
        disabled=not service.available_months(),
        help=tooltips["monthly_optimal"],
    ):
        with st.spinner("Analyzing months..."):
            state = service.run_all_months(sweep_percent=sweep.sweep_percent, num_points=sweep.num_points)
        if state.last_error:
            st.error(state.last_error)
        else:
            st.success(MONTHLY_SUCCESS)

    _render_results(service, tooltips)
