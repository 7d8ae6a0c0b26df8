# fasttrack_leaderboard/fasttrack/db/base.py

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# IMPORTANT: import all model modules so they register with Base.metadata
# and their string-based relationships (like "Associate") can be resolved.

from fasttrack.db import models  # noqa: F401  (we don't directly use `models`, we just want the side-effects)
