from .interfaces import (
    ClientMetrics,
    ClientProgress,
    ClientStatus,
    QualityTrend,
    SubmissionEvent,
)
from .errors import (
    DuplicateSprintError,
    InvalidRangeError,
    SubmissionRejected,
    UnknownClientError,
)
from .calculator import (
    QUALITY_WEIGHT,
    SPEED_WEIGHT,
    client_metrics,
    combined_score,
    overall_score,
    quality_average,
    quality_trend,
    speed_score,
)
from .ranking import RankingEngine

__all__ = [
    "ClientMetrics",
    "ClientProgress",
    "ClientStatus",
    "QualityTrend",
    "SubmissionEvent",
    "DuplicateSprintError",
    "InvalidRangeError",
    "SubmissionRejected",
    "UnknownClientError",
    "QUALITY_WEIGHT",
    "SPEED_WEIGHT",
    "client_metrics",
    "combined_score",
    "overall_score",
    "quality_average",
    "quality_trend",
    "speed_score",
    "RankingEngine",
]
