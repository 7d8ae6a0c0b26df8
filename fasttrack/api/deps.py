from __future__ import annotations

from typing import Generator, Union

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from fasttrack.db.models.associate import Associate
from fasttrack.db.models.client import Client
from fasttrack.db.session import SessionLocal
from fasttrack.services.access_service import find_associate_by_code, find_client_by_code


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def require_client(
    x_access_code: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Client:
    """
    Client view gate.
    Header name: X-Access-Code
    """
    client = find_client_by_code(db, x_access_code)
    if client is None:
        raise HTTPException(status_code=401, detail="Invalid access code")
    return client


def require_associate(
    x_access_code: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Associate:
    associate = find_associate_by_code(db, x_access_code)
    if associate is None:
        raise HTTPException(status_code=401, detail="Invalid access code")
    return associate


def require_viewer(
    x_access_code: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Union[Client, Associate]:
    """Either a client or an associate may read the leaderboard."""
    viewer = find_client_by_code(db, x_access_code) or find_associate_by_code(db, x_access_code)
    if viewer is None:
        raise HTTPException(status_code=401, detail="Invalid access code")
    return viewer
