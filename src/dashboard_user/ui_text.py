# This file stores copy blocks for headings, section descriptions, and notification messages.
# It exists so narrative wording stays consistent across the results view.
# Centralizing text also makes future wording reviews easier without touching rendering logic.

from __future__ import annotations

APP_TITLE = "Seasonal Forecast Results"
APP_SUBTITLE = "Forecast output aggregated to monthly demand, with price elasticity and optimal pricing."

EMPTY_FORECAST = "Upload a forecast export to explore price elasticity."
EMPTY_ENTITIES = "No store/product pairs were found in the forecast or the uploaded dataset."
SINGLE_MONTH_SUCCESS = "Price elasticity analysis completed."
MONTHLY_SUCCESS = "Monthly optimal pricing ready. The over-time chart now reflects month-specific optimal prices."
