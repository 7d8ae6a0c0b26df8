# fasttrack_leaderboard/fasttrack/services/access_service.py
"""
Access-code login.

Codes are looked up in order: admin codes from settings, then clients, then
associates. Deactivated clients keep the sentinel code and can never log in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fasttrack.config import settings
from fasttrack.db.models.associate import Associate
from fasttrack.db.models.client import Client

logger = logging.getLogger("fasttrack.services.access")

Role = Literal["admin", "client", "associate"]


class InvalidAccessCode(PermissionError):
    def __init__(self):
        super().__init__("Invalid access code")


class ClientAccessDenied(PermissionError):
    """Associate tried to act on a client assigned to someone else."""

    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"Client {client_id} is not assigned to this associate")


@dataclass(frozen=True)
class LoginResult:
    role: Role
    redirect: str


def _normalize(access_code: Optional[str]) -> str:
    return (access_code or "").strip()


def find_client_by_code(db: Session, access_code: Optional[str]) -> Optional[Client]:
    code = _normalize(access_code)
    if not code or code == settings.DEACTIVATED_ACCESS_CODE:
        return None
    return db.execute(select(Client).where(Client.access_code == code)).scalars().first()


def find_associate_by_code(db: Session, access_code: Optional[str]) -> Optional[Associate]:
    code = _normalize(access_code)
    if not code:
        return None
    return db.execute(select(Associate).where(Associate.access_code == code)).scalars().first()


def resolve_login(db: Session, access_code: Optional[str]) -> LoginResult:
    """Work out which view an access code opens. Raises InvalidAccessCode."""
    code = _normalize(access_code)
    if not code:
        raise InvalidAccessCode()

    if code in settings.ADMIN_ACCESS_CODES:
        logger.info("access.login", extra={"role": "admin"})
        return LoginResult(role="admin", redirect="/admin")

    client = find_client_by_code(db, code)
    if client is not None:
        logger.info("access.login", extra={"role": "client", "client_id": client.id})
        return LoginResult(role="client", redirect=f"/client?code={code}")

    associate = find_associate_by_code(db, code)
    if associate is not None:
        logger.info("access.login", extra={"role": "associate", "associate_id": associate.id})
        return LoginResult(role="associate", redirect=f"/associate?code={code}")

    logger.info("access.login_failed", extra={"reason": "unknown_code"})
    raise InvalidAccessCode()


__all__ = [
    "Role",
    "InvalidAccessCode",
    "ClientAccessDenied",
    "LoginResult",
    "find_client_by_code",
    "find_associate_by_code",
    "resolve_login",
]
