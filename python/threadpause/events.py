"""Coordinator events and a small fan-out bus.

Completion futures tell a caller that a command was handed to the backend;
the events published here tell observers what the backend confirmed.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .state import PauseType, ThreadId


logger = logging.getLogger(__name__)

EventHandler = Callable[["PauseEvent"], None]


@dataclass
class PauseEvent:
    category: str
    thread_id: ThreadId
    thread_name: str


@dataclass
class CommandIssuedEvent(PauseEvent):
    command: str = "pause"


@dataclass
class ThreadInterruptedEvent(PauseEvent):
    pause_type: PauseType = PauseType.USER
    # False when the backend paused the thread without a preceding request.
    solicited: bool = True


@dataclass
class InterruptFailedEvent(PauseEvent):
    rolled_back: bool = False


@dataclass
class ThreadResumedEvent(PauseEvent):
    out_of_order: bool = False


@dataclass
class ResumeFailedEvent(PauseEvent):
    pass


@dataclass
class DesyncEvent(PauseEvent):
    reason: str = ""
    expected_thread_id: Optional[ThreadId] = None


@dataclass
class EventSubscription:
    categories: Optional[List[str]] = None
    thread_id: Optional[ThreadId] = None
    queue_size: int = 256
    handler: EventHandler = lambda event: None
    _queue: queue.Queue = field(init=False)

    def __post_init__(self) -> None:
        self._queue = queue.Queue(maxsize=self.queue_size)

    def matches(self, event: PauseEvent) -> bool:
        cat_ok = not self.categories or event.category in self.categories
        thread_ok = self.thread_id is None or event.thread_id == self.thread_id
        return cat_ok and thread_ok

    def push(self, event: PauseEvent) -> None:
        """Queue ``event``; a full queue discards its oldest event."""
        while True:
            try:
                self._queue.put_nowait(event)
                return
            except queue.Full:
                try:
                    dropped = self._queue.get_nowait()
                except queue.Empty:
                    continue
                logger.debug("dropping %s event for %s", dropped.category, dropped.thread_name)

    def dispatch(self) -> int:
        delivered = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return delivered
            delivered += 1
            try:
                self.handler(event)
            except Exception:
                logger.exception("pause event handler failed for %s", event.category)


class EventBus:
    """Fan pause events out to matching subscriptions.

    Events are queued per subscription; handlers only run from :meth:`pump`,
    so the owner decides which thread observes confirmations.
    """

    def __init__(self) -> None:
        self._subs: Dict[int, EventSubscription] = {}
        self._lock = threading.Lock()
        self._next_token = 1

    def subscribe(self, sub: EventSubscription) -> int:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subs[token] = sub
            return token

    def unsubscribe(self, token: int) -> None:
        with self._lock:
            self._subs.pop(token, None)

    def publish(self, event: PauseEvent) -> None:
        with self._lock:
            matching = [sub for sub in self._subs.values() if sub.matches(event)]
        for sub in matching:
            sub.push(event)

    def pump(self) -> int:
        """Run handlers for every queued event; returns how many were delivered."""
        with self._lock:
            subscriptions = list(self._subs.values())
        return sum(sub.dispatch() for sub in subscriptions)
