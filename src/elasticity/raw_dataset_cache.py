# This file retains the uploaded dataset for the lifetime of one results session.
# It exists so a degraded elasticity recomputation can run without asking the user for the file again.
# The cache is populated once after a successful upload and is read-only afterwards.
# Concurrent month queries read it without locking because nothing mutates it after construction.

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass


def encode_text(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_text(encoded: str) -> str:
    try:
        return base64.b64decode(encoded.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise ValueError("Cached dataset is not valid base64-encoded UTF-8 text") from exc


@dataclass(frozen=True)
class RawDatasetCache:
    """Session-scoped copy of the original upload and the exported forecast."""

    original_text: str | None = None
    forecast_text: str | None = None

    @classmethod
    def empty(cls) -> RawDatasetCache:
        return cls()

    @classmethod
    def from_base64(
        cls, *, original_b64: str | None = None, forecast_b64: str | None = None
    ) -> RawDatasetCache:
        return cls(
            original_text=decode_text(original_b64) if original_b64 else None,
            forecast_text=decode_text(forecast_b64) if forecast_b64 else None,
        )

    @property
    def is_populated(self) -> bool:
        return bool(self.original_text) or bool(self.forecast_text)

    def fallback_text(self) -> str | None:
        """Text used for the fallback request; the original upload carries the price column."""

        if self.original_text:
            return self.original_text
        if self.forecast_text:
            return self.forecast_text
        return None

    def fallback_bytes(self) -> bytes | None:
        text = self.fallback_text()
        return text.encode("utf-8") if text is not None else None
