# fasttrack_leaderboard/fasttrack/utils/dates.py
from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Literal, Optional, Sequence

from fasttrack.services.scoring.interfaces import ClientStatus
from fasttrack.services.scoring.utils import as_utc

RankChange = Literal["up", "down", "same", "new"]

SECONDS_PER_DAY = 24 * 3600


def days_ahead_behind(
    deadline: datetime,
    submitted: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> int:
    """Whole days between deadline and submission (or now), rounded up.

    Positive: ahead of schedule. Negative: behind. 0: on the day.
    """
    reference = submitted or now or datetime.now(timezone.utc)
    seconds = (as_utc(deadline) - as_utc(reference)).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def determine_client_status(
    completed_sprints: Sequence[int],
    current_deadline: Optional[datetime],
    is_paused: bool = False,
    now: Optional[datetime] = None,
) -> ClientStatus:
    if is_paused:
        return ClientStatus.PROGRESS_MEETING
    if not completed_sprints:
        return ClientStatus.STARTING_SOON
    if current_deadline is not None and days_ahead_behind(current_deadline, now=now) < 0:
        return ClientStatus.DELAYED
    return ClientStatus.ON_TIME


def rank_change(current_rank: Optional[int], previous_rank: Optional[int]) -> RankChange:
    """Leaderboard arrow. A lower rank number is better."""
    if previous_rank is None or current_rank is None:
        return "new"
    if current_rank < previous_rank:
        return "up"
    if current_rank > previous_rank:
        return "down"
    return "same"


def today_utc() -> date:
    return datetime.now(timezone.utc).date()
