# fasttrack_leaderboard/fasttrack/db/models/activity_log.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from fasttrack.db.base import Base


class ActivityLog(Base):
    """Audit trail of associate actions shown on the associate dashboard."""

    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, index=True)
    associate_id = Column(Integer, ForeignKey("associates.id"), nullable=True, index=True)
    client_name = Column(String(255), nullable=True)
    action = Column(String(255), nullable=False)

    timestamp = Column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )
