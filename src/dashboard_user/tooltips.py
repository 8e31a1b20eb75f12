# This file defines narrative tooltip text for the elasticity results view.
# It exists so dashboard users can interpret price sweeps and optimal prices without technical background.
# A single dictionary keeps explanations consistent between pages and tests.

from __future__ import annotations

TOOLTIPS: dict[str, str] = {
    "elasticity_curve": "Each point is one candidate price from the sweep; the first point is the current price.",
    "optimal_price": "The price in the sweep with the highest expected revenue for the selected month.",
    "price_elasticity": "Percent change in demand for a 1% change in price; negative values mean demand falls as price rises.",
    "price_over_time": "Optimal price per forecast date with a flat +/-10% band; months without their own analysis reuse the single-month result.",
    "sweep_percent": "How far above and below the current price the sweep explores, in percent.",
    "num_points": "How many candidate prices the sweep evaluates; odd counts keep the current price in the middle.",
    "monthly_optimal": "Runs the analysis for every forecast month so the over-time chart reflects month-specific prices.",
}
