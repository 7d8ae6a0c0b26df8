# fasttrack_leaderboard/fasttrack/utils/activity.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class ActivityAction(str, Enum):
    """Canonical activity log messages for associate actions."""

    CLIENT_CREATED = "Client created"
    ACCESS_CODE_REGENERATED = "Access code regenerated"
    CLIENT_DEACTIVATED = "Client deactivated"
    SSDB_UPDATED = "SSDB insights updated"
    PROGRESS_UPDATED = "Progress updated"
    SCORES_SUBMITTED = "Sprint scores submitted"


def describe(action: ActivityAction, detail: Optional[str] = None) -> str:
    """Render an activity message, optionally with a short detail suffix."""

    return action.value if not detail else f"{action.value} ({detail})"


__all__ = ["ActivityAction", "describe"]
