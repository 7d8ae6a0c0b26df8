# fasttrack_leaderboard/fasttrack/api/presenters.py
"""ORM rows -> response schemas, with derived leaderboard metrics."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fasttrack.api.schemas.clients import (
    ClientDetailResponse,
    ClientSummary,
    ManagedClient,
    MetricsOut,
    SsdbInsightOut,
)
from fasttrack.db.models.client import Client
from fasttrack.db.models.ssdb_insight import SsdbInsight
from fasttrack.services.population_store import to_progress
from fasttrack.services.scoring import ClientProgress, client_metrics
from fasttrack.services.scoring.utils import as_utc
from fasttrack.utils.dates import days_ahead_behind, rank_change


def iso(dt: Optional[datetime]) -> Optional[str]:
    return as_utc(dt).isoformat() if dt else None


def metrics_out(progress: ClientProgress) -> MetricsOut:
    m = client_metrics(progress)
    return MetricsOut(
        speed_score=m.speed_score,
        quality_average=m.quality_average,
        quality_trend=m.quality_trend.value,
        combined_score=m.combined_score,
        overall_score=m.overall_score,
        rank=m.rank,
        previous_rank=m.previous_rank,
        rank_change=rank_change(m.rank, m.previous_rank),
    )


def insight_out(insight: Optional[SsdbInsight]) -> Optional[SsdbInsightOut]:
    if insight is None:
        return None
    return SsdbInsightOut(
        start_insight=insight.start_insight,  # type: ignore[arg-type]
        stop_insight=insight.stop_insight,  # type: ignore[arg-type]
        do_better_insight=insight.do_better_insight,  # type: ignore[arg-type]
        created_at=iso(insight.created_at) or "",  # type: ignore[arg-type]
    )


def _summary_fields(row: Client) -> dict:
    progress = to_progress(row)
    return dict(
        id=row.id,
        name=row.name,
        country_code=row.country_code,
        status=row.status,
        week_number=row.week_number,
        current_sprint_number=row.current_sprint_number,
        current_sprint_name=row.current_sprint_name,
        completed_sprints=sorted(progress.completed_sprints),
        quality_scores=progress.quality_scores,
        on_time_completed=progress.on_time_completed,
        on_time_total=progress.on_time_total,
        graduation_date=row.graduation_date,
        metrics=metrics_out(progress),
    )


def client_summary(row: Client) -> ClientSummary:
    return ClientSummary(**_summary_fields(row))


def managed_client(row: Client, insight: Optional[SsdbInsight]) -> ManagedClient:
    return ManagedClient(
        **_summary_fields(row),
        access_code=row.access_code,
        is_paused=bool(row.is_paused),
        latest_insight=insight_out(insight),
    )


def client_detail(
    row: Client,
    total_clients: int,
    insight: Optional[SsdbInsight],
    now: Optional[datetime] = None,
) -> ClientDetailResponse:
    deadline = row.sprint_deadline
    return ClientDetailResponse(
        **_summary_fields(row),
        program_champion=row.program_champion,
        current_guru=row.associate.name if row.associate is not None else None,
        sprint_deadline=iso(deadline),  # type: ignore[arg-type]
        days_ahead_behind=days_ahead_behind(deadline, now=now) if deadline is not None else None,  # type: ignore[arg-type]
        start_date=row.start_date,
        total_clients=total_clients,
        latest_insight=insight_out(insight),
    )
