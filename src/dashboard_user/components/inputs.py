# This file renders the sidebar inputs for the elasticity results view.
# The forecast export, the original upload, and the session id normally arrive from the forecasting run;
# the sidebar lets a user supply them directly when the view is opened on its own.
# Sweep parameters are clamped to the configured practical ranges before they reach the engine.

from __future__ import annotations

from dataclasses import dataclass

import streamlit as st

from src.elasticity.elasticity_config import ElasticityConfig


@dataclass(frozen=True)
class ResultsInputs:
    session_id: str | None
    forecast_text: str | None
    original_text: str | None


@dataclass(frozen=True)
class SweepInputs:
    sweep_percent: float
    num_points: int


def _read_upload(label: str, *, key: str) -> str | None:
    uploaded = st.sidebar.file_uploader(label, type=["csv"], key=key)
    if uploaded is None:
        return None
    return uploaded.getvalue().decode("utf-8", errors="replace")


def render_results_inputs() -> ResultsInputs:
    st.sidebar.header("Forecast Run")
    forecast_text = _read_upload("Forecast export (CSV)", key="forecast_csv")
    original_text = _read_upload("Original dataset (CSV)", key="original_csv")
    session_id = st.sidebar.text_input("Session id", value="", key="session_id").strip()
    return ResultsInputs(
        session_id=session_id or None,
        forecast_text=forecast_text,
        original_text=original_text,
    )


def render_sweep_inputs(*, config: ElasticityConfig, tooltips: dict[str, str]) -> SweepInputs:
    columns = st.columns(2)
    sweep_percent = columns[0].number_input(
        "Sweep (%)",
        min_value=float(config.min_sweep_percent),
        max_value=float(config.max_sweep_percent),
        value=float(config.default_sweep_percent),
        step=1.0,
        help=tooltips["sweep_percent"],
    )
    num_points = columns[1].number_input(
        "Points",
        min_value=int(config.min_num_points),
        max_value=int(config.max_num_points),
        value=int(config.default_num_points),
        step=2,
        help=tooltips["num_points"],
    )
    return SweepInputs(
        sweep_percent=config.clamp_sweep_percent(sweep_percent),
        num_points=config.clamp_num_points(num_points),
    )
