# fasttrack_leaderboard/fasttrack/db/session.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fasttrack.config import settings  # expects DATABASE_URL

engine = create_engine(settings.DATABASE_URL, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
