# fasttrack_leaderboard/fasttrack/services/scoring/interfaces.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from fasttrack.services.scoring.utils import as_utc

MAX_SPRINT_NUMBER = 30
MIN_SPRINT_NUMBER = 1
MIN_QUALITY_SCORE = 0
MAX_QUALITY_SCORE = 100


class ClientStatus(str, Enum):
    """Closed set of client program states."""
    ON_TIME = "ON_TIME"
    DELAYED = "DELAYED"
    GRADUATED = "GRADUATED"
    PROGRESS_MEETING = "PROGRESS_MEETING"
    STARTING_SOON = "STARTING_SOON"


class QualityTrend(str, Enum):
    IMPROVING = "IMPROVING"
    DECLINING = "DECLINING"
    STABLE = "STABLE"
    UNKNOWN = "UNKNOWN"


@dataclass
class ClientProgress:
    """Ranking-relevant slice of a client record.

    rank / previous_rank are None while a client is unranked (freshly
    enrolled, no recompute has run yet).
    """
    id: int
    on_time_completed: int = 0
    on_time_total: int = 0
    quality_scores: List[int] = field(default_factory=list)
    completed_sprints: List[int] = field(default_factory=list)
    rank: Optional[int] = None
    previous_rank: Optional[int] = None
    status: ClientStatus = ClientStatus.STARTING_SOON
    graduation_date: Optional[date] = None
    associate_id: Optional[int] = None

    def __post_init__(self):
        if self.on_time_completed < 0 or self.on_time_total < 0:
            raise ValueError("on-time counters must be non-negative")
        if self.on_time_completed > self.on_time_total:
            raise ValueError(
                f"on_time_completed ({self.on_time_completed}) exceeds on_time_total ({self.on_time_total})"
            )


@dataclass(frozen=True)
class SubmissionEvent:
    """One sprint submission for one client.

    Range checks live in the ranking engine so that out-of-range values are
    reported as InvalidRangeError rather than failing at construction.
    """
    client_id: int
    sprint_number: int
    quality_score: int
    deadline: datetime
    submission_timestamp: datetime
    manual_on_time_override: Optional[bool] = None

    @property
    def is_on_time(self) -> bool:
        if self.manual_on_time_override is not None:
            return self.manual_on_time_override
        # Inclusive: submitting exactly at the deadline counts as on time
        return as_utc(self.submission_timestamp) <= as_utc(self.deadline)


@dataclass(frozen=True)
class ClientMetrics:
    """Derived values the display layer renders for one client."""
    speed_score: int
    quality_average: int
    quality_trend: QualityTrend
    combined_score: float
    overall_score: int
    rank: Optional[int]
    previous_rank: Optional[int]


__all__ = [
    "MAX_SPRINT_NUMBER",
    "MIN_SPRINT_NUMBER",
    "MIN_QUALITY_SCORE",
    "MAX_QUALITY_SCORE",
    "ClientStatus",
    "QualityTrend",
    "ClientProgress",
    "SubmissionEvent",
    "ClientMetrics",
]
