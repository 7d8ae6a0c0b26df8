# fasttrack_leaderboard/fasttrack/main.py

from __future__ import annotations

import logging

from fastapi import FastAPI

from fasttrack.config import setup_json_logging, settings
from fasttrack.api.routes.auth import router as auth_router
from fasttrack.api.routes.clients import router as clients_router
from fasttrack.api.routes.associates import router as associates_router


def create_app() -> FastAPI:
    setup_json_logging(log_level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))

    app = FastAPI(
        title="FAST TRACK - Leaderboard API",
        version="0.1.0",
    )

    app.include_router(auth_router)
    app.include_router(clients_router)
    app.include_router(associates_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()
