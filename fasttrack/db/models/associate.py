# fasttrack_leaderboard/fasttrack/db/models/associate.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from fasttrack.db.base import Base


class Associate(Base):
    """Program associate (guru) who manages a set of clients."""

    __tablename__ = "associates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    access_code = Column(String(100), unique=True, index=True, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    clients = relationship("Client", back_populates="associate")
