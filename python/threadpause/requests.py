"""Pending pause/resume request queues."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar

from .state import PauseType, ThreadId


@dataclass
class PauseRequest:
    thread_id: ThreadId
    thread_name: str
    pause_type: PauseType
    completion: Future = field(default_factory=Future, repr=False)

    def describe(self) -> str:
        return f"{self.thread_name}/{self.pause_type.value}"


@dataclass
class ResumeRequest:
    thread_id: ThreadId
    thread_name: str
    completion: Future = field(default_factory=Future, repr=False)

    def describe(self) -> str:
        return self.thread_name


_T = TypeVar("_T")


def _find_index(items: List[_T], predicate: Callable[[_T], bool]) -> Optional[int]:
    for index, item in enumerate(items):
        if predicate(item):
            return index
    return None


@dataclass
class RequestQueues:
    """Insertion-ordered pause and resume requests awaiting dispatch.

    Neither queue is consumed FIFO: the dispatcher takes the newest pause
    request, or searches by pause type or by thread id.
    """

    pauses: List[PauseRequest] = field(default_factory=list)
    resumes: List[ResumeRequest] = field(default_factory=list)

    def enqueue_pause(self, request: PauseRequest) -> None:
        self.pauses.append(request)

    def enqueue_resume(self, request: ResumeRequest) -> None:
        self.resumes.append(request)

    def take_pause(self, index: int) -> PauseRequest:
        return self.pauses.pop(index)

    def take_resume(self, index: int) -> ResumeRequest:
        return self.resumes.pop(index)

    def find_automatic_pause(self) -> Optional[int]:
        return _find_index(self.pauses, lambda req: req.pause_type is PauseType.AUTOMATIC)

    def find_resume(self, thread_id: ThreadId) -> Optional[int]:
        return _find_index(self.resumes, lambda req: req.thread_id == thread_id)

    def latest_pause_index(self) -> Optional[int]:
        return len(self.pauses) - 1 if self.pauses else None

    def has_pause(self, thread_id: ThreadId) -> bool:
        return _find_index(self.pauses, lambda req: req.thread_id == thread_id) is not None

    def has_resume(self, thread_id: ThreadId) -> bool:
        return self.find_resume(thread_id) is not None
