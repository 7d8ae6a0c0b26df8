# fasttrack_leaderboard/fasttrack/services/scoring/errors.py

from __future__ import annotations

from typing import Any


class SubmissionRejected(ValueError):
    """Base class for validation failures of a submission.

    Never retryable: the same input always fails the same way.
    """


class DuplicateSprintError(SubmissionRejected):
    def __init__(self, sprint_number: int, client_id: Any):
        self.sprint_number = sprint_number
        self.client_id = client_id
        super().__init__(
            f"Sprint {sprint_number} has already been completed for client {client_id}"
        )


class UnknownClientError(SubmissionRejected):
    def __init__(self, client_id: Any):
        self.client_id = client_id
        super().__init__(f"Client {client_id} not found in population")


class InvalidRangeError(SubmissionRejected):
    def __init__(self, field: str, value: Any, low: int, high: int):
        self.field = field
        self.value = value
        self.low = low
        self.high = high
        super().__init__(f"{field} must be between {low} and {high}, got {value}")


__all__ = [
    "SubmissionRejected",
    "DuplicateSprintError",
    "UnknownClientError",
    "InvalidRangeError",
]
