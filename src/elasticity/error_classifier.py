# This module is the single implementation of the elasticity error taxonomy.
# The pricing collaborator reports failures as free-form text, so classification happens here and nowhere else.
# A structured `code` field in the error body wins over substring rules when the collaborator sends one.
# Each category maps to one user-facing message shown by the dashboard notification.

from __future__ import annotations

import json
from enum import Enum
from typing import Any

DEFAULT_FAILURE_MESSAGE = "Price elasticity analysis failed"
SESSION_MISSING_MARKER = "No stored session data"


class ErrorCategory(str, Enum):
    MISSING_SESSION = "missing_session"
    MISSING_PRICE_COLUMN = "missing_price_column"
    MONTH_OUT_OF_RANGE = "month_out_of_range"
    AMBIGUOUS_AGGREGATION = "ambiguous_aggregation"
    UNKNOWN = "unknown"


USER_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.MISSING_PRICE_COLUMN: (
        "Your dataset doesn't include price information. "
        "Please add a 'Price' column to your CSV file and re-upload."
    ),
    ErrorCategory.MISSING_SESSION: "Session data not found. Please re-run the forecast first.",
    ErrorCategory.AMBIGUOUS_AGGREGATION: (
        "Data processing error. Please try again with a different month or contact support."
    ),
    ErrorCategory.MONTH_OUT_OF_RANGE: (
        "The selected month is not available in your forecast data. Please choose a different month."
    ),
}


class ElasticityQueryError(RuntimeError):
    """Raised when an elasticity query cannot produce a usable curve."""

    def __init__(self, category: ErrorCategory, user_message: str, raw_message: str = "") -> None:
        super().__init__(user_message)
        self.category = category
        self.user_message = user_message
        self.raw_message = raw_message


def _error_body(payload_text: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(payload_text)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _message_from_body(body: dict[str, Any] | None, payload_text: str) -> str:
    if body is None:
        return payload_text.strip()
    for key in ("error", "detail", "message"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return payload_text.strip()


def _category_from_code(body: dict[str, Any] | None) -> ErrorCategory | None:
    if body is None:
        return None
    code = body.get("code")
    if not isinstance(code, str):
        return None
    try:
        return ErrorCategory(code.strip().lower())
    except ValueError:
        return None


def _category_from_message(message: str) -> ErrorCategory:
    if "No price column found" in message:
        return ErrorCategory.MISSING_PRICE_COLUMN
    if SESSION_MISSING_MARKER in message:
        return ErrorCategory.MISSING_SESSION
    if "ambiguous" in message and "array" in message:
        return ErrorCategory.AMBIGUOUS_AGGREGATION
    if "Selected month is outside" in message:
        return ErrorCategory.MONTH_OUT_OF_RANGE
    return ErrorCategory.UNKNOWN


def user_message_for(category: ErrorCategory, raw_message: str) -> str:
    if category in USER_MESSAGES:
        return USER_MESSAGES[category]
    return raw_message or DEFAULT_FAILURE_MESSAGE


def classify_error(payload_text: str) -> ElasticityQueryError:
    """Map a collaborator error body (JSON or plain text) onto the error taxonomy."""

    body = _error_body(payload_text)
    raw_message = _message_from_body(body, payload_text or "")
    category = _category_from_code(body) or _category_from_message(raw_message)
    return ElasticityQueryError(category, user_message_for(category, raw_message), raw_message)


def unknown_error(raw_message: str) -> ElasticityQueryError:
    return ElasticityQueryError(
        ErrorCategory.UNKNOWN,
        user_message_for(ErrorCategory.UNKNOWN, raw_message),
        raw_message,
    )


def missing_session_error(raw_message: str = SESSION_MISSING_MARKER) -> ElasticityQueryError:
    return ElasticityQueryError(
        ErrorCategory.MISSING_SESSION,
        user_message_for(ErrorCategory.MISSING_SESSION, raw_message),
        raw_message,
    )
