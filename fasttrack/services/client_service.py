# fasttrack_leaderboard/fasttrack/services/client_service.py
"""
Associate-facing client management and dashboard read models.

Counters, ranks and graduation are owned by the ranking engine and only
change through SubmissionService. Everything here touches profile fields,
access codes, SSDB notes and the activity log.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fasttrack.config import settings
from fasttrack.db.models.activity_log import ActivityLog
from fasttrack.db.models.associate import Associate
from fasttrack.db.models.client import Client
from fasttrack.db.models.ssdb_insight import SsdbInsight
from fasttrack.services.access_service import ClientAccessDenied
from fasttrack.services.population_store import StaleWriteError
from fasttrack.services.scoring import ClientStatus, UnknownClientError, quality_average
from fasttrack.services.submission_service import SubmissionService
from fasttrack.utils.activity import ActivityAction, describe
from fasttrack.utils.dates import determine_client_status, today_utc

logger = logging.getLogger("fasttrack.services.clients")

_UNSET: Any = object()


@dataclass(frozen=True)
class AssociateAnalytics:
    total_clients: int
    on_time_clients: int
    delayed_clients: int
    graduated_clients: int
    average_quality: int


class ClientService:
    def __init__(self, db: Session, submissions: Optional[SubmissionService] = None):
        self.db = db
        self.submissions = submissions or SubmissionService(db)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_owned_client(self, associate: Associate, client_id: int) -> Client:
        row = self.db.get(Client, client_id)
        if row is None:
            raise UnknownClientError(client_id)
        if row.associate_id != associate.id:
            raise ClientAccessDenied(client_id)
        return row

    def clients_for_associate(self, associate: Associate) -> List[Client]:
        stmt = (
            select(Client)
            .where(Client.associate_id == associate.id)
            .order_by(Client.rank.is_(None), Client.rank, Client.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def leaderboard(self) -> List[Client]:
        stmt = select(Client).order_by(Client.rank.is_(None), Client.rank, Client.id)
        return list(self.db.execute(stmt).scalars().all())

    def total_clients(self) -> int:
        return int(self.db.execute(select(func.count(Client.id))).scalar_one())

    def latest_insight(self, client: Client) -> Optional[SsdbInsight]:
        stmt = (
            select(SsdbInsight)
            .where(SsdbInsight.client_id == client.id)
            .order_by(SsdbInsight.created_at.desc(), SsdbInsight.id.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def recent_activity(self, associate: Associate, limit: Optional[int] = None) -> List[ActivityLog]:
        stmt = (
            select(ActivityLog)
            .where(ActivityLog.associate_id == associate.id)
            .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
            .limit(limit or settings.ACTIVITY_LOG_LIMIT)
        )
        return list(self.db.execute(stmt).scalars().all())

    def analytics(self, clients: List[Client]) -> AssociateAnalytics:
        all_scores: List[int] = []
        for c in clients:
            all_scores.extend(c.quality_scores or [])
        return AssociateAnalytics(
            total_clients=len(clients),
            on_time_clients=sum(1 for c in clients if c.status == ClientStatus.ON_TIME.value),
            delayed_clients=sum(1 for c in clients if c.status == ClientStatus.DELAYED.value),
            graduated_clients=sum(1 for c in clients if c.status == ClientStatus.GRADUATED.value),
            average_quality=quality_average(all_scores),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _log(self, associate: Associate, client_name: Optional[str], action: ActivityAction, detail: Optional[str] = None) -> None:
        self.db.add(
            ActivityLog(
                associate_id=associate.id,
                client_name=client_name,
                action=describe(action, detail),
            )
        )

    def _new_access_code(self) -> str:
        code = f"{settings.CLIENT_ACCESS_CODE_PREFIX}{int(time.time() * 1000)}"
        exists = self.db.execute(select(Client.id).where(Client.access_code == code)).first()
        if exists:
            # Two codes minted in the same millisecond
            code = f"{code}{uuid.uuid4().hex[:4].upper()}"
        return code

    def create_client(
        self,
        associate: Associate,
        name: str,
        country_code: Optional[str] = None,
        program_champion: Optional[str] = None,
    ) -> Client:
        """Enroll a client under this associate and place them on the leaderboard.

        The row is committed unranked (rank=None), then a global recompute
        assigns its rank in a separate serialized write cycle. If that cycle
        keeps losing the compare-and-swap, the client is returned unranked
        rather than failing the enrolment.
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Client name is required")

        client = Client(
            name=name,
            access_code=self._new_access_code(),
            country_code=(country_code or "").strip().upper() or None,
            program_champion=(program_champion or "").strip() or None,
            associate_id=associate.id,
            status=ClientStatus.STARTING_SOON.value,
            week_number=1,
            on_time_completed=0,
            on_time_total=0,
            quality_scores=[],
            completed_sprints=[],
            current_sprint_number=1,
            current_sprint_name=settings.DEFAULT_FIRST_SPRINT_NAME,
            start_date=today_utc(),
            rank=None,
            previous_rank=None,
        )
        self.db.add(client)
        self._log(associate, name, ActivityAction.CLIENT_CREATED)
        self.db.commit()
        self.db.refresh(client)

        logger.info("clients.created", extra={"client_id": client.id, "associate_id": associate.id})

        try:
            self.submissions.recompute_all()
        except StaleWriteError:
            # Enrolment stands; the next successful write cycle ranks the client
            logger.warning("clients.rank_pending", extra={"client_id": client.id})
        self.db.refresh(client)
        return client

    def regenerate_access_code(self, associate: Associate, client_id: int) -> Client:
        client = self.get_owned_client(associate, client_id)
        client.access_code = self._new_access_code()  # type: ignore[assignment]
        self._log(associate, client.name, ActivityAction.ACCESS_CODE_REGENERATED)  # type: ignore[arg-type]
        self.db.commit()
        self.db.refresh(client)
        logger.info("clients.access_code_regenerated", extra={"client_id": client.id})
        return client

    def deactivate_client(self, associate: Associate, client_id: int) -> Client:
        """Lock the client out. They stay in the population and keep their rank."""
        client = self.get_owned_client(associate, client_id)
        client.access_code = settings.DEACTIVATED_ACCESS_CODE  # type: ignore[assignment]
        self._log(associate, client.name, ActivityAction.CLIENT_DEACTIVATED)  # type: ignore[arg-type]
        self.db.commit()
        self.db.refresh(client)
        logger.info("clients.deactivated", extra={"client_id": client.id})
        return client

    def save_ssdb_insight(
        self,
        associate: Associate,
        client_id: int,
        start_insight: Optional[str] = None,
        stop_insight: Optional[str] = None,
        do_better_insight: Optional[str] = None,
    ) -> SsdbInsight:
        client = self.get_owned_client(associate, client_id)

        fields: Dict[str, str] = {
            "start_insight": (start_insight or "").strip(),
            "stop_insight": (stop_insight or "").strip(),
            "do_better_insight": (do_better_insight or "").strip(),
        }
        if not any(fields.values()):
            raise ValueError("Please fill at least one insight field.")
        too_long = [k for k, v in fields.items() if len(v) > settings.SSDB_MAX_CHARS]
        if too_long:
            raise ValueError(
                f"Each insight field must be {settings.SSDB_MAX_CHARS} characters or less "
                f"({', '.join(too_long)})"
            )

        insight = SsdbInsight(
            client_id=client.id,
            start_insight=fields["start_insight"] or None,
            stop_insight=fields["stop_insight"] or None,
            do_better_insight=fields["do_better_insight"] or None,
            created_by=associate.id,
        )
        self.db.add(insight)
        self._log(associate, client.name, ActivityAction.SSDB_UPDATED)  # type: ignore[arg-type]
        self.db.commit()
        self.db.refresh(insight)
        return insight

    def update_progress(
        self,
        associate: Associate,
        client_id: int,
        sprint_deadline: Optional[datetime] = _UNSET,
        is_paused: Optional[bool] = None,
        current_sprint_number: Optional[int] = None,
        current_sprint_name: Optional[str] = None,
        week_number: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Client:
        """Update schedule fields and re-derive the status.

        A graduated client stays GRADUATED; only the ranking engine sets or
        clears that state.
        """
        client = self.get_owned_client(associate, client_id)

        if sprint_deadline is not _UNSET:
            client.sprint_deadline = sprint_deadline  # type: ignore[assignment]
        if is_paused is not None:
            client.is_paused = is_paused  # type: ignore[assignment]
        if current_sprint_number is not None:
            client.current_sprint_number = current_sprint_number  # type: ignore[assignment]
        if current_sprint_name is not None:
            client.current_sprint_name = current_sprint_name  # type: ignore[assignment]
        if week_number is not None:
            client.week_number = week_number  # type: ignore[assignment]

        if client.status != ClientStatus.GRADUATED.value:
            client.status = determine_client_status(  # type: ignore[assignment]
                client.completed_sprints or [],  # type: ignore[arg-type]
                client.sprint_deadline,  # type: ignore[arg-type]
                is_paused=bool(client.is_paused),
                now=now,
            ).value

        self._log(associate, client.name, ActivityAction.PROGRESS_UPDATED)  # type: ignore[arg-type]
        self.db.commit()
        self.db.refresh(client)
        logger.info("clients.progress_updated", extra={"client_id": client.id})
        return client


__all__ = ["AssociateAnalytics", "ClientService"]
