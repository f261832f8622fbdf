"""Exceptions and request outcomes for threadpause."""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class RequestOutcome(str, Enum):
    """Value a request completion future resolves with."""

    ISSUED = "issued"
    ALREADY_PAUSED = "already_paused"
    NOT_PAUSED = "not_paused"


class PauseCoordinatorError(RuntimeError):
    """Base class for coordinator failures surfaced to callers."""


class ResumeBlockedError(PauseCoordinatorError):
    """Raised when user pauses layered above a thread prevent resuming it."""

    def __init__(self, thread_name: str, hindering: Sequence[str]) -> None:
        self.thread_name = thread_name
        self.hindering = list(hindering)
        super().__init__(
            f"{thread_name} can't be resumed because you need to resume {', '.join(self.hindering)} first"
        )
