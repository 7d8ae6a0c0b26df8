# fasttrack_leaderboard/fasttrack/services/scoring/calculator.py
"""
Display metrics derived from a ClientProgress snapshot.

Every function here is total: empty histories and zero totals degrade to 0
instead of raising, because the dashboard renders these values for every
client unconditionally.
"""

from __future__ import annotations

from typing import Sequence

from fasttrack.services.scoring.interfaces import ClientMetrics, ClientProgress, QualityTrend
from fasttrack.services.scoring.utils import clamp, round_half_up, safe_ratio

# Combined score weights (ranking only)
SPEED_WEIGHT = 0.6
QUALITY_WEIGHT = 0.4

# Quality trend window and threshold
TREND_WINDOW = 3
TREND_THRESHOLD = 5


def speed_score(completed: int, total: int) -> int:
    """Percentage of submissions delivered on or before the deadline (0-100)."""
    if not total:
        return 0
    return int(clamp(round_half_up(100 * safe_ratio(completed, total)), 0, 100))


def quality_average(scores: Sequence[int]) -> int:
    """Rounded mean of all recorded sprint quality scores; 0 when none."""
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def quality_trend(scores: Sequence[int]) -> QualityTrend:
    """Compare the mean of the last 3 scores against the 3 before them.

    A deliberately coarse two-window heuristic, not a statistical test.
    Needs at least 6 scores, otherwise UNKNOWN.
    """
    if len(scores) < 2 * TREND_WINDOW:
        return QualityTrend.UNKNOWN

    last = scores[-TREND_WINDOW:]
    previous = scores[-2 * TREND_WINDOW:-TREND_WINDOW]
    difference = sum(last) / TREND_WINDOW - sum(previous) / TREND_WINDOW

    if difference > TREND_THRESHOLD:
        return QualityTrend.IMPROVING
    if difference < -TREND_THRESHOLD:
        return QualityTrend.DECLINING
    return QualityTrend.STABLE


def combined_score(speed: float, quality: float) -> float:
    """Weighted blend of speed and quality. Ranking sorts on ranking_key instead."""
    return SPEED_WEIGHT * speed + QUALITY_WEIGHT * quality


def overall_score(speed: float, quality: float) -> int:
    """Combined score rounded for display on the client dashboard."""
    return round_half_up(combined_score(speed, quality))


def ranking_key(client: ClientProgress) -> int:
    """Integer sort key, exactly 5x the combined score.

    Speed and quality are whole numbers, so 3*speed + 2*quality orders
    clients like 0.6*speed + 0.4*quality without float noise. Equal combined
    scores always compare equal here.
    """
    speed = speed_score(client.on_time_completed, client.on_time_total)
    quality = quality_average(client.quality_scores)
    return 3 * speed + 2 * quality


def client_metrics(client: ClientProgress) -> ClientMetrics:
    speed = speed_score(client.on_time_completed, client.on_time_total)
    quality = quality_average(client.quality_scores)
    return ClientMetrics(
        speed_score=speed,
        quality_average=quality,
        quality_trend=quality_trend(client.quality_scores),
        combined_score=combined_score(speed, quality),
        overall_score=overall_score(speed, quality),
        rank=client.rank,
        previous_rank=client.previous_rank,
    )


__all__ = [
    "SPEED_WEIGHT",
    "QUALITY_WEIGHT",
    "speed_score",
    "quality_average",
    "quality_trend",
    "combined_score",
    "overall_score",
    "ranking_key",
    "client_metrics",
]
