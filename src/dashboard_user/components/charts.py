# This file contains reusable chart renderers for the elasticity results view.
# It exists so chart logic is shared and consistently handles empty datasets.
# The inputs are the same frames handed to the export writer, so the chart and the file never disagree.
# The charts use Altair because it integrates cleanly with Streamlit and supports layered visuals.

from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st


def render_elasticity_curve(
    dataframe: pd.DataFrame,
    *,
    optimal_price: float | None,
    help_text: str,
) -> None:
    st.subheader("Demand and Revenue Across the Price Sweep", help=help_text)
    if dataframe.empty:
        st.info("Run price elasticity to see the demand and revenue curve.")
        return

    base = alt.Chart(dataframe).encode(x=alt.X("price:Q", title="Price"))
    demand = base.mark_line(point=True, color="#0e7490").encode(
        y=alt.Y("demand:Q", title="Demand"),
        tooltip=[
            alt.Tooltip("price:Q", format=".2f"),
            alt.Tooltip("demand:Q", format=".2f"),
            alt.Tooltip("revenue:Q", format=".2f"),
        ],
    )
    revenue = base.mark_line(strokeDash=[4, 3], color="#b45309").encode(
        y=alt.Y("revenue:Q", title="Revenue"),
    )
    layers = alt.layer(demand, revenue).resolve_scale(y="independent")
    if optimal_price is not None:
        rule = (
            alt.Chart(pd.DataFrame({"price": [optimal_price]}))
            .mark_rule(color="#15803d")
            .encode(x="price:Q")
        )
        layers = alt.layer(demand, revenue, rule).resolve_scale(y="independent")

    st.altair_chart(layers.properties(height=300), use_container_width=True)


def render_price_over_time(dataframe: pd.DataFrame, *, help_text: str) -> None:
    st.subheader("Price Bounds Over the Forecast Horizon", help=help_text)
    if dataframe.empty:
        st.info("No forecast rows available for the selected store and product.")
        return

    prices = dataframe.melt(
        id_vars=["date"],
        value_vars=["currentPrice", "optimalPrice", "upperBound", "lowerBound"],
        var_name="series",
        value_name="price",
    )
    lines = (
        alt.Chart(prices)
        .mark_line()
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("price:Q", title="Price"),
            color=alt.Color("series:N", title="Series"),
            tooltip=[alt.Tooltip("date:T"), "series:N", alt.Tooltip("price:Q", format=".2f")],
        )
    )
    revenue = (
        alt.Chart(dataframe)
        .mark_bar(opacity=0.2, color="#64748b")
        .encode(
            x=alt.X("date:T"),
            y=alt.Y("revenueAtOptimal:Q", title="Revenue at optimal"),
            tooltip=[alt.Tooltip("revenueAtOptimal:Q", format=",.2f")],
        )
    )
    chart = alt.layer(revenue, lines).resolve_scale(y="independent").properties(height=320)
    st.altair_chart(chart, use_container_width=True)
