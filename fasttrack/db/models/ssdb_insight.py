# fasttrack_leaderboard/fasttrack/db/models/ssdb_insight.py

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from fasttrack.db.base import Base


class SsdbInsight(Base):
    """
    Start / Stop / Do Better coaching notes for a client.
    Append-only: the dashboard shows the most recent row.
    """

    __tablename__ = "ssdb_insights"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)

    start_insight = Column(Text, nullable=True)
    stop_insight = Column(Text, nullable=True)
    do_better_insight = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("associates.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    client = relationship("Client", back_populates="ssdb_insights")
