# This test file validates how the results view resolves store, product, and month selections.
# It exists so widget changes never leave the view pointing at a product or month that does not exist.
# The default product preference and month reconciliation are the main behaviors under test.

from __future__ import annotations

import pytest

from src.elasticity.forecast_series import discover_entity_map, parse_forecast_csv
from src.elasticity.selection import EntityOption, SelectionResolver, SelectionState, reconcile_month
from tests.elasticity.support import FORECAST_CSV, ORIGINAL_CSV


def _resolver(*, with_original: bool = True, default_secondary_value: str | None = "P001") -> SelectionResolver:
    entity_map = (
        discover_entity_map(ORIGINAL_CSV, primary_column="StoreID", secondary_column="ProductID")
        if with_original
        else None
    )
    return SelectionResolver(
        forecast_frame=parse_forecast_csv(FORECAST_CSV),
        entity_map=entity_map,
        default_secondary_value=default_secondary_value,
    )


def test_entity_options_and_totals_come_from_original_upload() -> None:
    resolver = _resolver()

    assert resolver.entity_options() == [EntityOption("S001", 2), EntityOption("S002", 2)]
    assert resolver.totals() == (2, 4)


def test_entity_options_fall_back_to_forecast_pairs() -> None:
    resolver = _resolver(with_original=False)

    assert resolver.secondary_options("S002") == ["P003"]
    assert resolver.totals() == (2, 3)


def test_initial_state_prefers_default_product() -> None:
    state = _resolver().initial_state()

    assert state == SelectionState(primary="S001", secondary="P001", month="2024-01")
    assert state.is_complete


def test_default_product_falls_back_to_first_alphabetical() -> None:
    resolver = _resolver()

    assert resolver.default_secondary("S002") == "P003"
    assert _resolver(default_secondary_value=None).default_secondary("S001") == "P001"
    assert resolver.default_secondary("S404") is None


def test_switching_store_keeps_month_when_still_valid() -> None:
    resolver = _resolver()
    state = resolver.select_month(resolver.initial_state(), "2024-02")

    switched = resolver.select_primary(state, "S002")

    assert switched == SelectionState(primary="S002", secondary="P003", month="2024-02")


def test_switching_product_reconciles_invalid_month() -> None:
    resolver = _resolver()
    state = resolver.select_month(resolver.initial_state(), "2024-03")

    switched = resolver.select_secondary(state, "P002")

    assert switched.month == "2024-01"


def test_product_without_forecast_has_no_month() -> None:
    resolver = _resolver()
    state = resolver.select_primary(SelectionState(), "S002")

    switched = resolver.select_secondary(state, "P004")

    assert switched.month is None
    assert not switched.is_complete
    with pytest.raises(ValueError, match="Choose a primary value"):
        resolver.to_entity_selection(switched)


def test_unknown_month_is_reconciled_to_first_available() -> None:
    resolver = _resolver()

    assert resolver.select_month(resolver.initial_state(), "2030-01").month == "2024-01"
    assert reconcile_month("2024-02", ["2024-01", "2024-02"]) == "2024-02"
    assert reconcile_month("2024-02", []) is None


def test_to_entity_selection_pairs_values_with_group_columns() -> None:
    resolver = _resolver()

    selection = resolver.to_entity_selection(resolver.initial_state())

    assert selection.group_keys == ("StoreID", "ProductID")
    assert selection.group_values == ("S001", "P001")
    assert selection.month == "2024-01"


def test_resolver_requires_two_group_columns() -> None:
    with pytest.raises(ValueError, match="exactly two group columns"):
        SelectionResolver(forecast_frame=parse_forecast_csv(FORECAST_CSV), group_columns=("StoreID",))
