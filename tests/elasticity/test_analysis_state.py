# This test file validates the generation-token rules of the analysis state holder.
# It exists so a slow response for an old selection can never overwrite the current view.
# Failures must keep the last good results on screen.

from __future__ import annotations

from src.elasticity.analysis_state import ActionKind, AnalysisState, AnalysisStateHolder
from src.elasticity.models import MonthlyPriceRecord
from src.elasticity.selection import SelectionState
from tests.elasticity.support import build_curve

FIRST = SelectionState(primary="S001", secondary="P001", month="2024-01")
SECOND = SelectionState(primary="S002", secondary="P003", month="2024-02")


def test_commit_replaces_state_and_clears_busy() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    token = holder.begin(ActionKind.SINGLE_MONTH)
    assert holder.state.is_busy

    assert holder.commit(token, curve=build_curve(), used_fallback=True)

    assert holder.state.curve == build_curve()
    assert holder.state.used_fallback
    assert not holder.state.is_busy


def test_response_for_previous_selection_is_discarded() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    token = holder.begin(ActionKind.SINGLE_MONTH)

    holder.select(SECOND)

    assert not holder.commit(token, curve=build_curve())
    assert holder.state.curve is None
    assert holder.state.selection == SECOND


def test_older_request_of_same_kind_is_discarded() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    older = holder.begin(ActionKind.SINGLE_MONTH)
    newer = holder.begin(ActionKind.SINGLE_MONTH)

    assert not holder.commit(older, curve=build_curve(optimal_price=1.0))
    assert holder.commit(newer, curve=build_curve(optimal_price=2.0))
    assert holder.state.curve.optimal_price == 2.0


def test_actions_of_different_kinds_do_not_invalidate_each_other() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    single = holder.begin(ActionKind.SINGLE_MONTH)
    monthly = holder.begin(ActionKind.ALL_MONTHS)

    assert holder.commit(single, curve=build_curve())
    assert holder.commit(monthly, monthly_table={})


def test_failure_keeps_previous_results() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    holder.commit(holder.begin(ActionKind.SINGLE_MONTH), curve=build_curve())

    assert holder.fail(holder.begin(ActionKind.SINGLE_MONTH), "Price elasticity analysis failed")

    assert holder.state.curve == build_curve()
    assert holder.state.last_error == "Price elasticity analysis failed"
    assert not holder.state.is_busy


def test_selecting_same_value_keeps_results() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    holder.commit(holder.begin(ActionKind.SINGLE_MONTH), curve=build_curve())

    holder.select(FIRST)

    assert holder.state.curve == build_curve()


def test_invalidate_drops_in_flight_actions() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    token = holder.begin(ActionKind.ALL_MONTHS)

    holder.invalidate()

    assert not holder.is_current(token)
    assert not holder.fail(token, "late")
    assert holder.state.last_error is None
    assert not holder.state.is_busy


def test_month_only_change_keeps_monthly_table() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    record = MonthlyPriceRecord(month="2024-01", optimal_price=12.0, current_price=10.0)
    holder.commit(holder.begin(ActionKind.ALL_MONTHS), monthly_table={"2024-01": record})
    in_flight = holder.begin(ActionKind.SINGLE_MONTH)

    state = holder.select(SelectionState(primary="S001", secondary="P001", month="2024-02"))

    assert state.monthly_table == {"2024-01": record}
    assert state.curve is None
    assert not holder.is_current(in_flight)


def test_entity_change_drops_monthly_table() -> None:
    holder = AnalysisStateHolder(AnalysisState(selection=FIRST))
    record = MonthlyPriceRecord(month="2024-01", optimal_price=12.0, current_price=10.0)
    holder.commit(holder.begin(ActionKind.ALL_MONTHS), monthly_table={"2024-01": record})

    state = holder.select(SelectionState(primary="S001", secondary="P002", month="2024-01"))

    assert state.monthly_table == {}
