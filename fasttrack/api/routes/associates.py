# fasttrack_leaderboard/fasttrack/api/routes/associates.py

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fasttrack.api.deps import get_db, require_associate
from fasttrack.api.presenters import insight_out, iso, managed_client, metrics_out
from fasttrack.api.schemas.associates import (
    ActivityOut,
    AnalyticsOut,
    AssociateDashboardResponse,
    AssociateOut,
    SubmissionPreviewResponse,
    SubmissionRequest,
    SubmissionResponse,
)
from fasttrack.api.schemas.clients import (
    CreateClientRequest,
    ManagedClient,
    ProgressUpdateRequest,
    SsdbInsightOut,
    SsdbInsightRequest,
)
from fasttrack.db.models.associate import Associate
from fasttrack.services.access_service import ClientAccessDenied
from fasttrack.services.client_service import ClientService
from fasttrack.services.population_store import StaleWriteError
from fasttrack.services.scoring import (
    DuplicateSprintError,
    InvalidRangeError,
    UnknownClientError,
    client_metrics,
)
from fasttrack.services.submission_service import SubmissionService


router = APIRouter(prefix="/associate", tags=["associate"])


def _to_http(e: Exception) -> HTTPException:
    """Map domain failures to HTTP status codes."""
    if isinstance(e, UnknownClientError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DuplicateSprintError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, InvalidRangeError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, ClientAccessDenied):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, StaleWriteError):
        return HTTPException(status_code=409, detail="Leaderboard changed concurrently, please retry")
    return HTTPException(status_code=400, detail=str(e))


@router.get("/me", response_model=AssociateDashboardResponse)
def get_dashboard(
    associate: Associate = Depends(require_associate),
    db: Session = Depends(get_db),
) -> AssociateDashboardResponse:
    """
    Associate view: assigned clients (best rank first), analytics, recent activity.
    """
    service = ClientService(db)
    clients = service.clients_for_associate(associate)
    a = service.analytics(clients)

    return AssociateDashboardResponse(
        associate=AssociateOut(id=associate.id, name=associate.name),  # type: ignore[arg-type]
        clients=[managed_client(c, service.latest_insight(c)) for c in clients],
        analytics=AnalyticsOut(
            total_clients=a.total_clients,
            on_time_clients=a.on_time_clients,
            delayed_clients=a.delayed_clients,
            graduated_clients=a.graduated_clients,
            average_quality=a.average_quality,
        ),
        activity=[
            ActivityOut(client_name=x.client_name, action=x.action, timestamp=iso(x.timestamp) or "")  # type: ignore[arg-type]
            for x in service.recent_activity(associate)
        ],
    )


@router.post("/clients", response_model=ManagedClient, status_code=201)
def create_client(
    req: CreateClientRequest,
    associate: Associate = Depends(require_associate),
    db: Session = Depends(get_db),
) -> ManagedClient:
    try:
        client = ClientService(db).create_client(
            associate,
            name=req.name,
            country_code=req.country_code,
            program_champion=req.program_champion,
        )
    except ValueError as e:
        raise _to_http(e) from e
    return managed_client(client, None)


@router.post("/clients/{client_id}/access-code", response_model=ManagedClient)
def regenerate_access_code(
    client_id: int,
    associate: Associate = Depends(require_associate),
    db: Session = Depends(get_db),
) -> ManagedClient:
    service = ClientService(db)
    try:
        client = service.regenerate_access_code(associate, client_id)
    except (ValueError, ClientAccessDenied) as e:
        raise _to_http(e) from e
    return managed_client(client, service.latest_insight(client))


@router.post("/clients/{client_id}/deactivate", response_model=ManagedClient)
def deactivate_client(
    client_id: int,
    associate: Associate = Depends(require_associate),
    db: Session = Depends(get_db),
) -> ManagedClient:
    service = ClientService(db)
    try:
        client = service.deactivate_client(associate, client_id)
    except (ValueError, ClientAccessDenied) as e:
        raise _to_http(e) from e
    return managed_client(client, service.latest_insight(client))


@router.post("/clients/{client_id}/ssdb", response_model=SsdbInsightOut, status_code=201)
def save_ssdb_insight(
    client_id: int,
    req: SsdbInsightRequest,
    associate: Associate = Depends(require_associate),
    db: Session = Depends(get_db),
) -> SsdbInsightOut:
    try:
        insight = ClientService(db).save_ssdb_insight(
            associate,
            client_id,
            start_insight=req.start_insight,
            stop_insight=req.stop_insight,
            do_better_insight=req.do_better_insight,
        )
    except (ValueError, ClientAccessDenied) as e:
        raise _to_http(e) from e
    out = insight_out(insight)
    assert out is not None
    return out


@router.patch("/clients/{client_id}/progress", response_model=ManagedClient)
def update_progress(
    client_id: int,
    req: ProgressUpdateRequest,
    associate: Associate = Depends(require_associate),
    db: Session = Depends(get_db),
) -> ManagedClient:
    service = ClientService(db)
    changes = req.model_dump(exclude_unset=True)
    try:
        client = service.update_progress(associate, client_id, **changes)
    except (ValueError, ClientAccessDenied) as e:
        raise _to_http(e) from e
    return managed_client(client, service.latest_insight(client))


@router.post("/submissions", response_model=SubmissionResponse)
def submit_scores(
    req: SubmissionRequest,
    associate: Associate = Depends(require_associate),
    db: Session = Depends(get_db),
) -> SubmissionResponse:
    """
    Record a sprint submission and re-rank every client.
    """
    service = SubmissionService(db)
    event = service.build_event(**req.model_dump())
    try:
        updated = service.submit(associate, event)
    except (ValueError, ClientAccessDenied, StaleWriteError) as e:
        raise _to_http(e) from e

    return SubmissionResponse(
        client_id=updated.id,
        sprint_number=event.sprint_number,
        is_on_time=event.is_on_time,
        status=updated.status.value,
        metrics=metrics_out(updated),
    )


@router.post("/submissions/preview", response_model=SubmissionPreviewResponse)
def preview_scores(
    req: SubmissionRequest,
    associate: Associate = Depends(require_associate),
    db: Session = Depends(get_db),
) -> SubmissionPreviewResponse:
    """
    Predicted rank and scores for a submission, without saving it.
    """
    service = SubmissionService(db)
    event = service.build_event(**req.model_dump())
    try:
        projected = service.preview(associate, event)
    except (ValueError, ClientAccessDenied) as e:
        raise _to_http(e) from e

    m = client_metrics(projected)
    return SubmissionPreviewResponse(
        client_id=projected.id,
        is_on_time=event.is_on_time,
        predicted_rank=projected.rank,  # type: ignore[arg-type]
        speed_score=m.speed_score,
        quality_average=m.quality_average,
        quality_trend=m.quality_trend.value,
        combined_score=m.combined_score,
    )
