"""Normalization helpers.

Centralizes defensive parsing and placeholder handling for server payloads.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def non_negative_or_zero(value: Any) -> int:
    parsed = safe_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def non_negative_float_or_zero(value: Any) -> float:
    parsed = safe_float(value)
    if parsed is None or parsed < 0:
        return 0.0
    return parsed


def normalize_timestamp_seconds(value: Any) -> float | None:
    """Normalize epoch timestamps to seconds.

    - Empty/missing -> None
    - <= 0 -> None
    - Milliseconds (> 1e11) -> seconds
    """

    ts = safe_float(value)
    if ts is None or ts <= 0:
        return None
    if ts > 1e11:
        ts /= 1000.0
    return ts


def _from_epoch(value: Any) -> datetime | None:
    ts = normalize_timestamp_seconds(value)
    if ts is None:
        return None
    try:
        return datetime.fromtimestamp(ts, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def parse_instant(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch number into an aware UTC datetime.

    The tracking server serializes ``lastUpdated`` as a JavaScript
    ``Date`` (ISO string with a trailing ``Z``); rosters seeded from other
    sources may carry epoch milliseconds instead. Epoch values outside the
    platform's datetime range yield ``None``.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return _from_epoch(text)
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return _from_epoch(value)
