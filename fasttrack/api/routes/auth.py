# fasttrack_leaderboard/fasttrack/api/routes/auth.py

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fasttrack.api.deps import get_db
from fasttrack.api.schemas.clients import LoginRequest, LoginResponse
from fasttrack.services.access_service import InvalidAccessCode, resolve_login


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """
    Resolve an access code to the view it opens.
    """
    try:
        result = resolve_login(db, req.access_code)
    except InvalidAccessCode as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    return LoginResponse(role=result.role, redirect=result.redirect)
