# fasttrack_leaderboard/fasttrack/api/routes/clients.py

from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fasttrack.api.deps import get_db, require_client, require_viewer
from fasttrack.api.presenters import client_detail, client_summary
from fasttrack.api.schemas.clients import ClientDetailResponse, LeaderboardResponse
from fasttrack.db.models.associate import Associate
from fasttrack.db.models.client import Client
from fasttrack.services.client_service import ClientService


router = APIRouter(tags=["clients"])


@router.get("/client/me", response_model=ClientDetailResponse)
def get_my_progress(
    client: Client = Depends(require_client),
    db: Session = Depends(get_db),
) -> ClientDetailResponse:
    """
    Client view: own progress, rank and latest coaching notes.
    """
    service = ClientService(db)
    return client_detail(
        client,
        total_clients=service.total_clients(),
        insight=service.latest_insight(client),
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(
    viewer: Union[Client, Associate] = Depends(require_viewer),
    db: Session = Depends(get_db),
) -> LeaderboardResponse:
    """
    Global leaderboard, best rank first.
    """
    rows = ClientService(db).leaderboard()
    return LeaderboardResponse(
        total_clients=len(rows),
        clients=[client_summary(r) for r in rows],
    )
