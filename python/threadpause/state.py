"""Pause state store: the ordered stack of currently paused threads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Iterator, List, Optional, Union


logger = logging.getLogger(__name__)

ThreadId = Hashable


class PauseType(str, Enum):
    AUTOMATIC = "automatic"
    USER = "user"

    @classmethod
    def coerce(cls, value: Union["PauseType", str]) -> "PauseType":
        """Accept the enum, its value, or the short ``auto`` spelling."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text == "auto":
            return cls.AUTOMATIC
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"unknown pause type: {value!r}") from None


@dataclass(frozen=True)
class PauseRecord:
    thread_id: ThreadId
    thread_name: str
    pause_type: PauseType

    def describe(self) -> str:
        return f"{self.thread_name}/{self.pause_type.value}"


class PauseStack:
    """Paused threads ordered by recency (last element = most recent pause).

    Holds at most one record per thread id.
    """

    def __init__(self) -> None:
        self._records: List[PauseRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __iter__(self) -> Iterator[PauseRecord]:
        return iter(self._records)

    def __contains__(self, thread_id: object) -> bool:
        return self.find(thread_id) is not None

    def find(self, thread_id: object) -> Optional[int]:
        for index in range(len(self._records) - 1, -1, -1):
            if self._records[index].thread_id == thread_id:
                return index
        return None

    def get(self, thread_id: object) -> Optional[PauseRecord]:
        index = self.find(thread_id)
        return None if index is None else self._records[index]

    def peek(self) -> Optional[PauseRecord]:
        return self._records[-1] if self._records else None

    def is_top(self, thread_id: object) -> bool:
        top = self.peek()
        return top is not None and top.thread_id == thread_id

    def push(self, record: PauseRecord) -> bool:
        if self.find(record.thread_id) is not None:
            logger.warning("refusing duplicate pause record for %s", record.thread_name)
            return False
        self._records.append(record)
        return True

    def pop(self) -> Optional[PauseRecord]:
        return self._records.pop() if self._records else None

    def remove(self, thread_id: object) -> Optional[PauseRecord]:
        """Remove the record for ``thread_id``; a missing record is a no-op."""
        index = self.find(thread_id)
        if index is None:
            return None
        return self._records.pop(index)

    def hindering_pauses(self, thread_id: object) -> List[PauseRecord]:
        """User pauses layered above the target thread's own record, top first."""
        hindering: List[PauseRecord] = []
        for record in reversed(self._records):
            if record.thread_id == thread_id:
                break
            if record.pause_type is PauseType.USER:
                hindering.append(record)
        return hindering

    def top_first(self) -> List[PauseRecord]:
        return list(reversed(self._records))

    def describe(self) -> str:
        return ",".join(record.describe() for record in self._records)
