# This file derives the valid (entity, month) selection space for the elasticity results view.
# It exists so widget callbacks never leave the view pointing at a product or month that does not exist.
# Entities come from the uploaded dataset when available, otherwise from the forecast export itself.
# Every transition returns a new SelectionState instead of mutating the previous one.

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import pandas as pd

from src.elasticity.forecast_series import entity_map_from_frame, forecast_points_for
from src.elasticity.models import EntitySelection, ForecastPoint


@dataclass(frozen=True)
class EntityOption:
    primary: str
    secondary_count: int


@dataclass(frozen=True)
class SelectionState:
    primary: str | None = None
    secondary: str | None = None
    month: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.primary) and bool(self.secondary) and bool(self.month)


def available_months(points: Iterable[ForecastPoint]) -> list[str]:
    return sorted({point.month for point in points})


def reconcile_month(selected: str | None, months: list[str]) -> str | None:
    if selected in months:
        return selected
    return months[0] if months else None


class SelectionResolver:
    def __init__(
        self,
        *,
        forecast_frame: pd.DataFrame,
        group_columns: tuple[str, ...] = ("StoreID", "ProductID"),
        entity_map: Mapping[str, Iterable[str]] | None = None,
        default_secondary_value: str | None = "P001",
    ) -> None:
        if len(group_columns) != 2:
            raise ValueError("SelectionResolver expects exactly two group columns (primary, secondary)")
        self.forecast_frame = forecast_frame
        self.group_columns = tuple(group_columns)
        self.default_secondary_value = default_secondary_value
        source = entity_map if entity_map else entity_map_from_frame(forecast_frame)
        self._entity_map: dict[str, frozenset[str]] = {
            str(primary): frozenset(str(value) for value in secondaries)
            for primary, secondaries in source.items()
        }

    def entity_options(self) -> list[EntityOption]:
        return [
            EntityOption(primary=primary, secondary_count=len(secondaries))
            for primary, secondaries in sorted(self._entity_map.items())
        ]

    def secondary_options(self, primary: str | None) -> list[str]:
        if not primary:
            return []
        return sorted(self._entity_map.get(primary, frozenset()))

    def totals(self) -> tuple[int, int]:
        distinct_secondaries: set[str] = set()
        for secondaries in self._entity_map.values():
            distinct_secondaries.update(secondaries)
        return len(self._entity_map), len(distinct_secondaries)

    def default_secondary(self, primary: str | None) -> str | None:
        options = self.secondary_options(primary)
        if not options:
            return None
        if self.default_secondary_value and self.default_secondary_value in options:
            return self.default_secondary_value
        return options[0]

    def forecast_for(self, state: SelectionState) -> list[ForecastPoint]:
        if not state.primary or not state.secondary:
            return []
        return forecast_points_for(self.forecast_frame, state.primary, state.secondary)

    def months_for(self, state: SelectionState) -> list[str]:
        return available_months(self.forecast_for(state))

    def initial_state(self) -> SelectionState:
        options = self.entity_options()
        if not options:
            return SelectionState()
        return self.select_primary(SelectionState(), options[0].primary)

    def select_primary(self, state: SelectionState, primary: str) -> SelectionState:
        if primary not in self._entity_map:
            return SelectionState()
        if primary == state.primary and state.secondary in self._entity_map[primary]:
            return self._with_valid_month(state)
        return self._with_valid_month(
            SelectionState(primary=primary, secondary=self.default_secondary(primary), month=state.month)
        )

    def select_secondary(self, state: SelectionState, secondary: str) -> SelectionState:
        if secondary not in self.secondary_options(state.primary):
            return self._with_valid_month(
                SelectionState(primary=state.primary, secondary=self.default_secondary(state.primary))
            )
        return self._with_valid_month(SelectionState(primary=state.primary, secondary=secondary, month=state.month))

    def select_month(self, state: SelectionState, month: str) -> SelectionState:
        return self._with_valid_month(SelectionState(primary=state.primary, secondary=state.secondary, month=month))

    def _with_valid_month(self, state: SelectionState) -> SelectionState:
        months = self.months_for(state)
        return SelectionState(
            primary=state.primary,
            secondary=state.secondary,
            month=reconcile_month(state.month, months),
        )

    def to_entity_selection(self, state: SelectionState) -> EntitySelection:
        if not state.is_complete:
            raise ValueError("Choose a primary value, a secondary value and a month first.")
        return EntitySelection(
            group_keys=self.group_columns,
            group_values=(str(state.primary), str(state.secondary)),
            month=str(state.month),
        )
