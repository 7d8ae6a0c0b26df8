# In-memory database and API client fixtures for the test suite
from __future__ import annotations

import os

# Must be set before fasttrack.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")

import logging
from typing import Iterator, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fasttrack.db.base import Base
from fasttrack.db import models  # side-effect: register all models
from fasttrack.db.models.associate import Associate
from fasttrack.db.models.client import Client

logger = logging.getLogger(__name__)


@pytest.fixture()
def db_session() -> Iterator[Session]:
    """Fresh in-memory SQLite schema per test.
    StaticPool keeps one connection so TestClient worker threads see the same data.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def make_associate(db_session: Session):
    def _make(name: str = "Guru One", access_code: str = "ASSOC001") -> Associate:
        associate = Associate(name=name, access_code=access_code)
        db_session.add(associate)
        db_session.commit()
        db_session.refresh(associate)
        return associate

    return _make


@pytest.fixture()
def make_client(db_session: Session):
    counter = {"n": 0}

    def _make(
        associate: Optional[Associate] = None,
        name: Optional[str] = None,
        access_code: Optional[str] = None,
        on_time_completed: int = 0,
        on_time_total: int = 0,
        quality_scores: Optional[List[int]] = None,
        completed_sprints: Optional[List[int]] = None,
        rank: Optional[int] = None,
        previous_rank: Optional[int] = None,
        status: str = "ON_TIME",
        **extra,
    ) -> Client:
        counter["n"] += 1
        n = counter["n"]
        client = Client(
            name=name or f"Client {n}",
            access_code=access_code or f"CLIENTTEST{n}",
            associate_id=associate.id if associate is not None else None,
            on_time_completed=on_time_completed,
            on_time_total=on_time_total,
            quality_scores=list(quality_scores or []),
            completed_sprints=list(completed_sprints or []),
            rank=rank,
            previous_rank=previous_rank,
            status=status,
            week_number=1,
            current_sprint_number=1,
            is_paused=False,
            **extra,
        )
        db_session.add(client)
        db_session.commit()
        db_session.refresh(client)
        return client

    return _make


@pytest.fixture()
def api_client(db_session: Session):
    from fastapi.testclient import TestClient

    from fasttrack.api.deps import get_db
    from fasttrack.main import app

    def _override_get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_db, None)
