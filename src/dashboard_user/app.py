# This file is the Streamlit entrypoint for the forecast results view with price elasticity.
# It exists to combine run inputs, the elasticity engine, and page-level storytelling in one app.
# A new analysis service is built whenever the forecast run inputs change, which discards the previous
# raw dataset cache and any results computed against it.

from __future__ import annotations

import hashlib

import streamlit as st

from src.common.logging import configure_logging
from src.common.settings import get_settings
from src.dashboard_user.components.inputs import ResultsInputs, render_results_inputs
from src.dashboard_user.page_views import elasticity_explorer
from src.dashboard_user.tooltips import TOOLTIPS
from src.dashboard_user.ui_text import APP_SUBTITLE, APP_TITLE, EMPTY_FORECAST
from src.elasticity.analysis_service import ElasticityAnalysisService, build_results_session
from src.elasticity.elasticity_config import ElasticityConfig, load_elasticity_config


@st.cache_resource
def get_config() -> ElasticityConfig:
    return load_elasticity_config(config_path=get_settings().ELASTICITY_CONFIG_PATH)


def _run_fingerprint(inputs: ResultsInputs) -> str:
    digest = hashlib.sha256()
    for part in (inputs.session_id, inputs.forecast_text, inputs.original_text):
        digest.update((part or "").encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


def get_service(config: ElasticityConfig, inputs: ResultsInputs) -> ElasticityAnalysisService:
    fingerprint = _run_fingerprint(inputs)
    if st.session_state.get("elasticity_run_fingerprint") != fingerprint:
        results_session, resolver = build_results_session(
            config=config,
            session_id=inputs.session_id,
            forecast_text=inputs.forecast_text,
            original_text=inputs.original_text,
        )
        st.session_state["elasticity_service"] = ElasticityAnalysisService(
            config=config,
            results_session=results_session,
            resolver=resolver,
        )
        st.session_state["elasticity_run_fingerprint"] = fingerprint
    return st.session_state["elasticity_service"]


def main() -> None:
    configure_logging()
    st.set_page_config(page_title=APP_TITLE, layout="wide")
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)

    config = get_config()
    inputs = render_results_inputs()
    if not inputs.forecast_text:
        st.info(EMPTY_FORECAST)
        return

    service = get_service(config, inputs)
    elasticity_explorer.render(service=service, tooltips=TOOLTIPS)


if __name__ == "__main__":
    main()
