# fasttrack_leaderboard/fasttrack/services/scoring/ranking.py

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from fasttrack.services.scoring.calculator import ranking_key
from fasttrack.services.scoring.errors import (
    DuplicateSprintError,
    InvalidRangeError,
    SubmissionRejected,
    UnknownClientError,
)
from fasttrack.services.scoring.interfaces import (
    MAX_QUALITY_SCORE,
    MAX_SPRINT_NUMBER,
    MIN_QUALITY_SCORE,
    MIN_SPRINT_NUMBER,
    ClientProgress,
    ClientStatus,
    SubmissionEvent,
)

default_logger = logging.getLogger("fasttrack.services.ranking")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RankingEngine:
    """Applies submissions to client counters and re-derives global ranks.

    The engine is pure with respect to its inputs: every operation works on a
    deep copy of the population it is given and returns the new list. It holds
    no shared state, so serializing writes to the stored population is the
    caller's job (see PopulationStore).

    Ranking order:
        combined score descending (via the exact integer ranking_key), stable on
        ties (input order wins).
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.logger = logger or default_logger
        self.clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def apply_submission(
        self,
        population: Sequence[ClientProgress],
        event: SubmissionEvent,
    ) -> List[ClientProgress]:
        """Record one sprint submission, then recompute every client's rank.

        Raises:
            InvalidRangeError: sprint outside 1..30 or quality outside 0..100
            UnknownClientError: event.client_id is not in the population
            DuplicateSprintError: sprint already completed by this client

        On any of these the input population is left untouched.
        """
        try:
            updated = copy.deepcopy(list(population))
            target = self._validate(updated, event)
        except SubmissionRejected as e:
            self.logger.warning(
                "ranking.submission_rejected",
                extra={
                    "client_id": event.client_id,
                    "sprint_number": event.sprint_number,
                    "reason": str(e),
                },
            )
            raise

        is_on_time = self._record(target, event)

        if event.sprint_number == MAX_SPRINT_NUMBER:
            target.status = ClientStatus.GRADUATED
            target.graduation_date = self.clock().date()
            self.logger.info("ranking.graduated", extra={"client_id": target.id})

        self.logger.info(
            "ranking.submission_applied",
            extra={
                "client_id": target.id,
                "sprint_number": event.sprint_number,
                "quality_score": event.quality_score,
                "is_on_time": is_on_time,
            },
        )

        return self._rank_in_place(updated)

    def preview(
        self,
        population: Sequence[ClientProgress],
        event: SubmissionEvent,
    ) -> ClientProgress:
        """The client's record as it would look if the submission were applied.

        Same validation as apply_submission. Returns a detached copy whose
        rank is the predicted rank and previous_rank the current one; the
        input population is not touched and nothing is logged as applied.
        """
        updated = copy.deepcopy(list(population))
        target = self._validate(updated, event)
        self._record(target, event)

        ordered = self._sorted(updated)
        predicted = next(i for i, c in enumerate(ordered, start=1) if c.id == target.id)
        target.previous_rank = target.rank
        target.rank = predicted
        return target

    def preview_rank(self, population: Sequence[ClientProgress], event: SubmissionEvent) -> int:
        rank = self.preview(population, event).rank
        assert rank is not None
        return rank

    @staticmethod
    def _record(target: ClientProgress, event: SubmissionEvent) -> bool:
        """Bump the target's counters for one submission. Returns is_on_time."""
        is_on_time = event.is_on_time
        target.on_time_total += 1
        if is_on_time:
            target.on_time_completed += 1
        target.quality_scores.append(event.quality_score)
        target.completed_sprints.append(event.sprint_number)
        return is_on_time

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    def recompute_ranks(self, population: Sequence[ClientProgress]) -> List[ClientProgress]:
        """Assign dense ranks 1..N by combined score.

        Each client's current rank moves into previous_rank first, so running
        this twice on unchanged scores leaves previous_rank == rank ("no change").
        """
        return self._rank_in_place(copy.deepcopy(list(population)))

    def _rank_in_place(self, population: List[ClientProgress]) -> List[ClientProgress]:
        ordered = self._sorted(population)
        for position, client in enumerate(ordered, start=1):
            client.previous_rank = client.rank
            client.rank = position

        self.logger.info("ranking.recomputed", extra={"population": len(ordered)})
        return ordered

    @staticmethod
    def _sorted(population: List[ClientProgress]) -> List[ClientProgress]:
        # sorted() is stable: exact ties keep their incoming order
        return sorted(population, key=ranking_key, reverse=True)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(population: List[ClientProgress], event: SubmissionEvent) -> ClientProgress:
        if not MIN_SPRINT_NUMBER <= event.sprint_number <= MAX_SPRINT_NUMBER:
            raise InvalidRangeError("sprint_number", event.sprint_number, MIN_SPRINT_NUMBER, MAX_SPRINT_NUMBER)
        if not MIN_QUALITY_SCORE <= event.quality_score <= MAX_QUALITY_SCORE:
            raise InvalidRangeError("quality_score", event.quality_score, MIN_QUALITY_SCORE, MAX_QUALITY_SCORE)

        target = next((c for c in population if c.id == event.client_id), None)
        if target is None:
            raise UnknownClientError(event.client_id)

        if event.sprint_number in target.completed_sprints:
            raise DuplicateSprintError(event.sprint_number, event.client_id)

        return target


__all__ = ["RankingEngine"]
