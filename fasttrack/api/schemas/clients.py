# fasttrack_leaderboard/fasttrack/api/schemas/clients.py

from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    access_code: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    role: Literal["admin", "client", "associate"]
    redirect: str


class MetricsOut(BaseModel):
    speed_score: int
    quality_average: int
    quality_trend: Literal["IMPROVING", "DECLINING", "STABLE", "UNKNOWN"]
    combined_score: float
    overall_score: int
    rank: Optional[int] = None
    previous_rank: Optional[int] = None
    rank_change: Literal["up", "down", "same", "new"]


class SsdbInsightOut(BaseModel):
    start_insight: Optional[str] = None
    stop_insight: Optional[str] = None
    do_better_insight: Optional[str] = None
    created_at: str


class ClientSummary(BaseModel):
    id: int
    name: str
    country_code: Optional[str] = None
    status: str
    week_number: int
    current_sprint_number: int
    current_sprint_name: Optional[str] = None
    completed_sprints: List[int] = Field(default_factory=list)
    quality_scores: List[int] = Field(default_factory=list)
    on_time_completed: int
    on_time_total: int
    graduation_date: Optional[date] = None
    metrics: MetricsOut


class ClientDetailResponse(ClientSummary):
    program_champion: Optional[str] = None
    current_guru: Optional[str] = None
    sprint_deadline: Optional[str] = None
    days_ahead_behind: Optional[int] = None
    start_date: Optional[date] = None
    total_clients: int
    latest_insight: Optional[SsdbInsightOut] = None


class LeaderboardResponse(BaseModel):
    total_clients: int
    clients: List[ClientSummary]


class ManagedClient(ClientSummary):
    access_code: str
    is_paused: bool
    latest_insight: Optional[SsdbInsightOut] = None


class CreateClientRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    country_code: Optional[str] = Field(default=None, max_length=2)
    program_champion: Optional[str] = None


class SsdbInsightRequest(BaseModel):
    start_insight: Optional[str] = None
    stop_insight: Optional[str] = None
    do_better_insight: Optional[str] = None


class ProgressUpdateRequest(BaseModel):
    sprint_deadline: Optional[datetime] = None
    is_paused: Optional[bool] = None
    current_sprint_number: Optional[int] = Field(default=None, ge=1, le=30)
    current_sprint_name: Optional[str] = None
    week_number: Optional[int] = Field(default=None, ge=1)
