# fasttrack_leaderboard/fasttrack/api/schemas/associates.py

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from fasttrack.api.schemas.clients import ManagedClient, MetricsOut


class AnalyticsOut(BaseModel):
    total_clients: int
    on_time_clients: int
    delayed_clients: int
    graduated_clients: int
    average_quality: int


class ActivityOut(BaseModel):
    client_name: Optional[str] = None
    action: str
    timestamp: str


class AssociateOut(BaseModel):
    id: int
    name: str


class AssociateDashboardResponse(BaseModel):
    associate: AssociateOut
    clients: List[ManagedClient]
    analytics: AnalyticsOut
    activity: List[ActivityOut]


class SubmissionRequest(BaseModel):
    """Score form payload.

    sprint_number / quality_score are range-checked by the ranking engine,
    not here, so out-of-range input surfaces as a domain error (400).
    """
    client_id: int
    sprint_number: int
    quality_score: int
    deadline: datetime
    submission_timestamp: datetime
    manual_on_time_override: Optional[bool] = None


class SubmissionResponse(BaseModel):
    client_id: int
    sprint_number: int
    is_on_time: bool
    status: str
    metrics: MetricsOut


class SubmissionPreviewResponse(BaseModel):
    client_id: int
    is_on_time: bool
    predicted_rank: int
    speed_score: int
    quality_average: int
    quality_trend: str
    combined_score: float
