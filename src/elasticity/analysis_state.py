# This file holds the elasticity view's analysis state as one immutable value.
# Each user-triggered action takes a generation token; only the latest token for its kind may commit.
# Responses that arrive after the selection changed are dropped instead of overwriting the view.
# Failed actions record a message but leave the previously computed results visible.

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from src.elasticity.models import ElasticityCurve, MonthlyPriceRecord, TimeSeriesRow
from src.elasticity.selection import SelectionState

LOGGER = logging.getLogger("elasticity.state")


class ActionKind(str, Enum):
    SINGLE_MONTH = "single_month"
    ALL_MONTHS = "all_months"


@dataclass(frozen=True)
class AnalysisToken:
    kind: ActionKind
    generation: int
    sequence: int


@dataclass(frozen=True)
class AnalysisState:
    selection: SelectionState = field(default_factory=SelectionState)
    curve: ElasticityCurve | None = None
    used_fallback: bool = False
    monthly_table: dict[str, MonthlyPriceRecord] = field(default_factory=dict)
    time_series: tuple[TimeSeriesRow, ...] = ()
    last_error: str | None = None
    busy: frozenset[ActionKind] = frozenset()

    @property
    def is_busy(self) -> bool:
        return bool(self.busy)


class AnalysisStateHolder:
    """Owns the current AnalysisState and replaces it atomically."""

    def __init__(self, initial: AnalysisState | None = None) -> None:
        self._state = initial or AnalysisState()
        self._generation = 0
        self._sequence = 0
        self._latest: dict[ActionKind, AnalysisToken] = {}
        self._lock = threading.Lock()

    @property
    def state(self) -> AnalysisState:
        return self._state

    def select(self, selection: SelectionState) -> AnalysisState:
        """Switch selection and invalidate in-flight actions.

        A month-only change keeps the monthly table and the series built from it,
        since both cover every month of the entity. Any other change drops all results.
        """

        with self._lock:
            previous = self._state
            if selection == previous.selection:
                return previous
            self._invalidate_locked()
            same_entity = (selection.primary, selection.secondary) == (
                previous.selection.primary,
                previous.selection.secondary,
            )
            if same_entity:
                self._state = AnalysisState(
                    selection=selection,
                    monthly_table=previous.monthly_table,
                    time_series=previous.time_series,
                )
            else:
                self._state = AnalysisState(selection=selection)
            return self._state

    def invalidate(self) -> None:
        with self._lock:
            self._invalidate_locked()

    def _invalidate_locked(self) -> None:
        self._generation += 1
        self._latest.clear()
        self._state = replace(self._state, busy=frozenset())

    def begin(self, kind: ActionKind) -> AnalysisToken:
        with self._lock:
            self._sequence += 1
            token = AnalysisToken(kind=kind, generation=self._generation, sequence=self._sequence)
            self._latest[kind] = token
            self._state = replace(self._state, busy=self._state.busy | {kind}, last_error=None)
            return token

    def is_current(self, token: AnalysisToken) -> bool:
        return token.generation == self._generation and self._latest.get(token.kind) == token

    def commit(self, token: AnalysisToken, **changes: Any) -> bool:
        with self._lock:
            if not self.is_current(token):
                LOGGER.debug("Discarded stale %s result (sequence %d)", token.kind.value, token.sequence)
                return False
            self._state = replace(self._state, busy=self._state.busy - {token.kind}, **changes)
            return True

    def fail(self, token: AnalysisToken, message: str) -> bool:
        with self._lock:
            if not self.is_current(token):
                LOGGER.debug("Discarded stale %s failure (sequence %d)", token.kind.value, token.sequence)
                return False
            self._state = replace(self._state, busy=self._state.busy - {token.kind}, last_error=message)
            return True
