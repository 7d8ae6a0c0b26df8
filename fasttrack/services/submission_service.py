# fasttrack_leaderboard/fasttrack/services/submission_service.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from fasttrack.config import settings
from fasttrack.db.models.activity_log import ActivityLog
from fasttrack.db.models.associate import Associate
from fasttrack.db.models.client import Client
from fasttrack.services.access_service import ClientAccessDenied
from fasttrack.services.population_store import (
    PopulationScope,
    PopulationStore,
    SqlAlchemyPopulationStore,
    StaleWriteError,
)
from fasttrack.services.scoring import (
    ClientProgress,
    RankingEngine,
    SubmissionEvent,
    SubmissionRejected,
    UnknownClientError,
)
from fasttrack.utils.activity import ActivityAction, describe

logger = logging.getLogger("fasttrack.services.submission")

Mutation = Callable[[List[ClientProgress]], List[ClientProgress]]


class SubmissionService:
    """Submission intake around the ranking engine.

    Responsibilities:
    - Check the associate owns the client
    - Build a SubmissionEvent from form input
    - Run the engine inside one serialized population write cycle
    - Retry the whole cycle when the version compare-and-swap is lost
    - Record the action in the activity log

    Validation failures (SubmissionRejected) are never retried.
    """

    def __init__(
        self,
        db: Session,
        engine: Optional[RankingEngine] = None,
        store: Optional[PopulationStore] = None,
        max_retries: Optional[int] = None,
    ):
        self.db = db
        self.engine = engine or RankingEngine()
        self.store = store or SqlAlchemyPopulationStore(db)
        self.max_retries = settings.RANKING_WRITE_MAX_RETRIES if max_retries is None else max_retries
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    @staticmethod
    def build_event(
        client_id: int,
        sprint_number: int,
        quality_score: int,
        deadline: datetime,
        submission_timestamp: datetime,
        manual_on_time_override: Optional[bool] = None,
    ) -> SubmissionEvent:
        return SubmissionEvent(
            client_id=client_id,
            sprint_number=sprint_number,
            quality_score=quality_score,
            deadline=deadline,
            submission_timestamp=submission_timestamp,
            manual_on_time_override=manual_on_time_override,
        )

    def _owned_client(self, associate: Associate, client_id: int) -> Client:
        row = self.db.get(Client, client_id)
        if row is None:
            raise UnknownClientError(client_id)
        if row.associate_id != associate.id:
            raise ClientAccessDenied(client_id)
        return row

    def submit(self, associate: Associate, event: SubmissionEvent) -> ClientProgress:
        """Apply one submission and persist the re-ranked population.

        Returns the submitting client's updated record.
        """
        client = self._owned_client(associate, event.client_id)
        client_name = client.name

        def mutate(population: List[ClientProgress]) -> List[ClientProgress]:
            return self.engine.apply_submission(population, event)

        def record_activity() -> None:
            self.db.add(
                ActivityLog(
                    associate_id=associate.id,
                    client_name=client_name,
                    action=describe(ActivityAction.SCORES_SUBMITTED, f"sprint {event.sprint_number}"),
                )
            )

        updated = self._serialized(mutate, after_write=record_activity)
        result = next(c for c in updated if c.id == event.client_id)

        logger.info(
            "submission.applied",
            extra={
                "client_id": result.id,
                "associate_id": associate.id,
                "sprint_number": event.sprint_number,
                "rank": result.rank,
                "previous_rank": result.previous_rank,
            },
        )
        return result

    def preview(self, associate: Associate, event: SubmissionEvent) -> ClientProgress:
        """Projected record (rank = predicted rank) for a submission; nothing is written."""
        self._owned_client(associate, event.client_id)
        population = self.store.fetch_population(PopulationScope.ALL)
        return self.engine.preview(population, event)

    def recompute_all(self) -> List[ClientProgress]:
        """Re-rank every client (e.g. after enrolling a new one)."""
        return self._serialized(self.engine.recompute_ranks)

    def _serialized(
        self,
        mutate: Mutation,
        after_write: Optional[Callable[[], None]] = None,
    ) -> List[ClientProgress]:
        """lock -> read -> mutate -> compare-and-swap write -> commit, with retries."""
        for attempt in range(1, self.max_retries + 1):
            try:
                version = self.store.lock()
                population = self.store.fetch_population(PopulationScope.ALL)
                updated = mutate(population)
                self.store.write_back(updated, expected_version=version)
                if after_write is not None:
                    after_write()
                self.db.commit()
                return updated
            except SubmissionRejected:
                self.db.rollback()
                raise
            except StaleWriteError:
                self.db.rollback()
                logger.warning("submission.stale_write_retry", extra={"attempt": attempt})
                if attempt >= self.max_retries:
                    raise
        raise RuntimeError("unreachable")  # pragma: no cover


__all__ = ["SubmissionService"]
