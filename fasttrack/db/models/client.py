# fasttrack_leaderboard/fasttrack/db/models/client.py

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
)
from sqlalchemy.orm import relationship

from fasttrack.db.base import Base


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (
        CheckConstraint("on_time_completed <= on_time_total", name="ck_clients_on_time_le_total"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # A. Identity & access
    name = Column(String(255), nullable=False)
    access_code = Column(String(100), unique=True, index=True, nullable=False)
    country_code = Column(String(2), nullable=True)  # ISO 3166-1 alpha-2
    program_champion = Column(String(255), nullable=True)

    # B. Ownership
    associate_id = Column(Integer, ForeignKey("associates.id"), nullable=True, index=True)

    # C. Program position
    week_number = Column(Integer, nullable=False, default=1)
    current_sprint_number = Column(Integer, nullable=False, default=1)
    current_sprint_name = Column(String(255), nullable=True)
    sprint_deadline = Column(DateTime(timezone=True), nullable=True)
    start_date = Column(Date, nullable=True)
    graduation_date = Column(Date, nullable=True)
    is_paused = Column(Boolean, nullable=False, default=False)
    status = Column(String(30), nullable=False, default="STARTING_SOON", index=True)

    # D. Cumulative counters (written only through the ranking engine)
    on_time_completed = Column(Integer, nullable=False, default=0)
    on_time_total = Column(Integer, nullable=False, default=0)
    quality_scores = Column(JSON, nullable=False, default=list)  # ints 0-100, append-only
    completed_sprints = Column(JSON, nullable=False, default=list)  # unique sprint numbers 1-30

    # E. Leaderboard position (None = unranked until the next recompute)
    rank = Column(Integer, nullable=True, index=True)
    previous_rank = Column(Integer, nullable=True)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    associate = relationship("Associate", back_populates="clients")
    ssdb_insights = relationship(
        "SsdbInsight",
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="SsdbInsight.created_at.desc()",
    )
