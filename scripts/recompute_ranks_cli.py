#!/usr/bin/env python3
"""
CLI entrypoint for a full leaderboard re-rank.

Usage examples:
    python -m scripts.recompute_ranks_cli
    python -m scripts.recompute_ranks_cli --dry-run --log-level DEBUG

Flags:
    --dry-run             Compute and print the new ranking without writing it
    --log-level LEVEL     Logging level (INFO, DEBUG, etc.)
"""

from __future__ import annotations

import argparse
import logging
import sys

from fasttrack.db.session import SessionLocal
from fasttrack.services.population_store import PopulationScope, SqlAlchemyPopulationStore
from fasttrack.services.scoring import RankingEngine, client_metrics
from fasttrack.services.submission_service import SubmissionService


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recompute ranks for every client.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the ranking that would be written, without writing it.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (e.g. INFO, DEBUG).",
    )
    return parser.parse_args()


def configure_logging(level: str) -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    )


def main() -> int:
    args = parse_args()
    configure_logging(args.log_level)
    logger = logging.getLogger(__name__)
    logger.info("ranking.cli.start")

    db = SessionLocal()
    try:
        if args.dry_run:
            population = SqlAlchemyPopulationStore(db).fetch_population(PopulationScope.ALL)
            ranked = RankingEngine().recompute_ranks(population)
        else:
            ranked = SubmissionService(db).recompute_all()
    except Exception:
        logger.exception("ranking.cli.failed")
        return 1
    finally:
        db.close()

    for client in ranked:
        m = client_metrics(client)
        print(
            f"#{client.rank:<3} client={client.id:<6} prev={client.previous_rank} "
            f"speed={m.speed_score:>3} quality={m.quality_average:>3} combined={m.combined_score:.1f}"
        )
    logger.info("ranking.cli.done", extra={"population": len(ranked)})
    return 0


if __name__ == "__main__":
    sys.exit(main())
