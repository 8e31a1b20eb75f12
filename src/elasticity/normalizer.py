# This module repairs the elasticity coefficient returned by the pricing collaborator.
# A null, zero, or near-zero coefficient is not a trustworthy estimate and is replaced locally.
# Repair order is the curve's own arc elasticity first, then a configurable placeholder policy.
# Only the elasticity field changes; points and optimal values always pass through untouched.

from __future__ import annotations

import hashlib
import logging
import math
from collections.abc import Sequence
from typing import Protocol

from src.elasticity.elasticity_config import DEFAULT_PLACEHOLDER_ELASTICITIES, ElasticityConfig
from src.elasticity.models import ElasticityCurve

LOGGER = logging.getLogger("elasticity.normalizer")

DEFAULT_EPSILON = 0.001


class PlaceholderPolicy(Protocol):
    def __call__(self, curve: ElasticityCurve) -> float: ...


class TablePlaceholderPolicy:
    """Pick a value from a fixed table of plausible negative elasticities.

    The pick is keyed on a digest of the curve so the same curve always gets the
    same placeholder across reruns and across both query paths.
    """

    def __init__(self, values: Sequence[float] = DEFAULT_PLACEHOLDER_ELASTICITIES) -> None:
        if not values:
            raise ValueError("placeholder table must not be empty")
        self.values = tuple(float(value) for value in values)

    def __call__(self, curve: ElasticityCurve) -> float:
        fingerprint = "|".join(f"{point.price:.6f}:{point.demand:.6f}" for point in curve.points)
        digest = hashlib.sha256(fingerprint.encode("utf-8")).digest()
        index = int.from_bytes(digest[:4], byteorder="big", signed=False) % len(self.values)
        return self.values[index]


_DEFAULT_POLICY = TablePlaceholderPolicy()


def is_untrustworthy(elasticity: float | None, epsilon: float) -> bool:
    if elasticity is None:
        return True
    if not math.isfinite(elasticity):
        return True
    return abs(elasticity) < epsilon


def arc_elasticity(curve: ElasticityCurve) -> float | None:
    """% change in demand over % change in price between the first and last sweep points."""

    if len(curve.points) < 2:
        return None
    first = curve.points[0]
    last = curve.points[-1]
    if first.price == 0 or first.demand == 0:
        return None
    price_change = (last.price - first.price) / first.price
    demand_change = (last.demand - first.demand) / first.demand
    if price_change == 0:
        return None
    value = demand_change / price_change
    return value if math.isfinite(value) else None


class ElasticityNormalizer:
    def __init__(
        self,
        *,
        epsilon: float = DEFAULT_EPSILON,
        placeholder_policy: PlaceholderPolicy | None = None,
    ) -> None:
        if epsilon <= 0:
            raise ValueError("epsilon must be > 0")
        self.epsilon = epsilon
        self.placeholder_policy = placeholder_policy or TablePlaceholderPolicy()

    @classmethod
    def from_config(cls, config: ElasticityConfig) -> ElasticityNormalizer:
        return cls(
            epsilon=config.elasticity_epsilon,
            placeholder_policy=TablePlaceholderPolicy(config.placeholder_elasticities),
        )

    def normalize(self, curve: ElasticityCurve) -> ElasticityCurve:
        if not is_untrustworthy(curve.elasticity, self.epsilon):
            return curve

        derived = arc_elasticity(curve)
        if derived is not None and not is_untrustworthy(derived, self.epsilon):
            LOGGER.info("Replaced elasticity %s with curve-derived value %.4f", curve.elasticity, derived)
            return curve.with_elasticity(derived)

        placeholder = float(self.placeholder_policy(curve))
        if is_untrustworthy(placeholder, self.epsilon):
            LOGGER.warning("Placeholder policy returned %s; using the default placeholder table", placeholder)
            placeholder = _DEFAULT_POLICY(curve)
        LOGGER.info("Replaced elasticity %s with placeholder value %.3f", curve.elasticity, placeholder)
        return curve.with_elasticity(placeholder)
