# fasttrack_leaderboard/fasttrack/services/scoring/utils.py

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3).

    Builtin round() uses banker's rounding, which would turn 62.5 into 62.
    """
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def safe_ratio(numerator: Optional[float], denominator: Optional[float]) -> float:
    """numerator / denominator, or 0.0 when the denominator is missing or non-positive."""
    if denominator is None or denominator <= 0:
        return 0.0
    if numerator is None:
        return 0.0
    return numerator / denominator


def clamp(value: Optional[float], min_value: float, max_value: float) -> float:
    """Clamp a possibly None float into [min_value, max_value]. None -> min_value."""
    if value is None:
        return min_value
    return max(min_value, min(max_value, value))


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite hands them back without tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


__all__ = ["round_half_up", "safe_ratio", "clamp", "as_utc"]
