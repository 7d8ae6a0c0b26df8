# fasttrack_leaderboard/scripts/init_db.py

"""
Initialize database schema by creating all tables defined by SQLAlchemy models.
Development shortcut; production uses the Alembic migration.
"""

from fasttrack.db.base import Base
from fasttrack.db.session import SessionLocal, engine
from fasttrack.services.population_store import SqlAlchemyPopulationStore


def main() -> None:
    print("Creating all tables using SQLAlchemy metadata...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        # Ensures the single ranking_state row exists
        version = SqlAlchemyPopulationStore(db).current_version()
        db.commit()
    finally:
        db.close()
    print(f"Done. ranking_state version={version}")


if __name__ == "__main__":
    main()
