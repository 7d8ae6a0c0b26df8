# fasttrack/db/models/__init__.py

from .associate import Associate
from .client import Client
from .activity_log import ActivityLog
from .ssdb_insight import SsdbInsight
from .ranking_state import RankingState

__all__ = [
    "Associate",
    "Client",
    "ActivityLog",
    "SsdbInsight",
    "RankingState",
]
