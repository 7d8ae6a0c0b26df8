# fasttrack_leaderboard/fasttrack/db/models/ranking_state.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer

from fasttrack.db.base import Base

RANKING_STATE_ID = 1


class RankingState(Base):
    """Single-row version counter guarding writes of the ranked population.

    Every population write-back locks this row and bumps `version` with a
    compare-and-swap, so two concurrent rank recomputations cannot interleave.
    """

    __tablename__ = "ranking_state"

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
