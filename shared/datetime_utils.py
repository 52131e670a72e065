"""
Date/time helpers and analytics window parsing — framework-agnostic.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

Days = Union[int, float]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as an aware UTC datetime.

    Naive datetimes (as returned by a non tz-aware Mongo client) are assumed
    to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_positive_number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def clamp_window_days(raw: Any, default: int, maximum: int) -> Days:
    """Parse a ``days`` parameter.

    - missing, non-numeric, non-finite or ``<= 0`` → *default*
    - larger than *maximum* → *maximum*
    - fractional values are kept (``0.5`` is a 12 hour window)
    """
    value = _parse_positive_number(raw)
    if value is None:
        return default
    value = min(value, float(maximum))
    return int(value) if value.is_integer() else value


def clamp_top_n(raw: Any, default: int, maximum: int) -> int:
    """Parse a top-N parameter into the range ``[1, maximum]``."""
    value = _parse_positive_number(raw)
    if value is None:
        return default
    return max(1, min(int(value), maximum))


def window_start(days: Days, now: Optional[datetime] = None) -> datetime:
    """Start of a lookback window of *days* ending at *now*."""
    return (now or utc_now()) - timedelta(days=days)
