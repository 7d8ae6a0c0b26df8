# fasttrack_leaderboard/fasttrack/services/population_store.py
"""
Population store: reads and writes the ranked client population.

The ranking engine is pure; this module owns the read-modify-write cycle
around the shared `clients` table. Writers serialize on the single
`ranking_state` row:

    version = store.lock()                       # SELECT ... FOR UPDATE
    population = store.fetch_population(ALL)
    updated = engine.apply_submission(population, event)
    store.write_back(updated, expected_version=version)   # compare-and-swap
    db.commit()

On PostgreSQL the row lock alone serializes writers. The version
compare-and-swap additionally catches writers on databases where FOR UPDATE
is a no-op (SQLite) or callers that skipped lock().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import ClassVar, List, Optional, Protocol, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from fasttrack.db.models.client import Client
from fasttrack.db.models.ranking_state import RANKING_STATE_ID, RankingState
from fasttrack.services.scoring.interfaces import ClientProgress, ClientStatus

logger = logging.getLogger("fasttrack.services.population_store")


class StaleWriteError(RuntimeError):
    """The population changed between read and write-back. Retry the cycle."""

    def __init__(self, expected_version: int):
        self.expected_version = expected_version
        super().__init__(f"Population version {expected_version} is stale")


@dataclass(frozen=True)
class PopulationScope:
    """Which clients to read. associate_id=None means every client."""
    associate_id: Optional[int] = None

    ALL: ClassVar["PopulationScope"]

    @classmethod
    def for_associate(cls, associate_id: int) -> "PopulationScope":
        return cls(associate_id=associate_id)

    @property
    def is_global(self) -> bool:
        return self.associate_id is None


PopulationScope.ALL = PopulationScope()


class PopulationStore(Protocol):
    """Persistence interface the submission flow depends on."""

    def lock(self) -> int:  # pragma: no cover - interface only
        ...

    def current_version(self) -> int:  # pragma: no cover - interface only
        ...

    def fetch_population(self, scope: PopulationScope) -> List[ClientProgress]:  # pragma: no cover - interface only
        ...

    def fetch_one(self, client_id: int) -> Optional[ClientProgress]:  # pragma: no cover - interface only
        ...

    def write_back(self, records: Sequence[ClientProgress], expected_version: int) -> int:  # pragma: no cover - interface only
        ...


def to_progress(row: Client) -> ClientProgress:
    """Map a Client ORM row to the engine's ClientProgress record."""
    return ClientProgress(
        id=row.id,  # type: ignore[arg-type]
        on_time_completed=row.on_time_completed or 0,  # type: ignore[arg-type]
        on_time_total=row.on_time_total or 0,  # type: ignore[arg-type]
        quality_scores=list(row.quality_scores or []),
        completed_sprints=list(row.completed_sprints or []),
        rank=row.rank,  # type: ignore[arg-type]
        previous_rank=row.previous_rank,  # type: ignore[arg-type]
        status=ClientStatus(row.status),
        graduation_date=row.graduation_date,  # type: ignore[arg-type]
        associate_id=row.associate_id,  # type: ignore[arg-type]
    )


class SqlAlchemyPopulationStore:
    """PopulationStore over the `clients` table.

    Does not commit; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def _state(self, for_update: bool) -> RankingState:
        stmt = (
            select(RankingState)
            .where(RankingState.id == RANKING_STATE_ID)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        state = self.db.execute(stmt).scalars().first()
        if state is None:
            # First write on a fresh database
            state = RankingState(id=RANKING_STATE_ID, version=0, updated_at=datetime.now(timezone.utc))
            self.db.add(state)
            self.db.flush()
        return state

    def lock(self) -> int:
        """Lock the ranking state row for this transaction and return its version."""
        version = int(self._state(for_update=True).version)  # type: ignore[arg-type]
        logger.debug("population.locked", extra={"version": version})
        return version

    def current_version(self) -> int:
        return int(self._state(for_update=False).version)  # type: ignore[arg-type]

    def fetch_population(self, scope: PopulationScope = PopulationScope.ALL) -> List[ClientProgress]:
        """Clients in scope, ordered by current rank (unranked last), then id.

        This order is what makes exact-score ties stable across recomputes.
        """
        stmt = select(Client).order_by(Client.rank.is_(None), Client.rank, Client.id)
        if not scope.is_global:
            stmt = stmt.where(Client.associate_id == scope.associate_id)
        rows = self.db.execute(stmt).scalars().all()
        return [to_progress(r) for r in rows]

    def fetch_one(self, client_id: int) -> Optional[ClientProgress]:
        row = self.db.get(Client, client_id)
        return to_progress(row) if row is not None else None

    def write_back(self, records: Sequence[ClientProgress], expected_version: int) -> int:
        """Persist engine output if nobody wrote since expected_version.

        Returns the new version. Raises StaleWriteError (writing nothing)
        when the compare-and-swap on ranking_state fails.
        """
        self._state(for_update=False)  # make sure the row exists

        result = self.db.execute(
            update(RankingState)
            .where(RankingState.id == RANKING_STATE_ID, RankingState.version == expected_version)
            .values(version=expected_version + 1, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning("population.stale_write", extra={"version": expected_version})
            raise StaleWriteError(expected_version)

        for record in records:
            row = self.db.get(Client, record.id)
            if row is None:
                # Client row vanished mid-cycle; nothing to write for it
                logger.warning("population.write_back_missing", extra={"client_id": record.id})
                continue
            row.on_time_completed = record.on_time_completed  # type: ignore[assignment]
            row.on_time_total = record.on_time_total  # type: ignore[assignment]
            # Fresh lists so the JSON columns are flagged dirty
            row.quality_scores = list(record.quality_scores)  # type: ignore[assignment]
            row.completed_sprints = list(record.completed_sprints)  # type: ignore[assignment]
            row.rank = record.rank  # type: ignore[assignment]
            row.previous_rank = record.previous_rank  # type: ignore[assignment]
            row.status = record.status.value  # type: ignore[assignment]
            row.graduation_date = record.graduation_date  # type: ignore[assignment]

        self.db.flush()

        new_version = expected_version + 1
        logger.info(
            "population.written",
            extra={"population": len(records), "version": new_version},
        )
        return new_version


__all__ = [
    "StaleWriteError",
    "PopulationScope",
    "PopulationStore",
    "SqlAlchemyPopulationStore",
    "to_progress",
]
