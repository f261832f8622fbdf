"""Glue between the coordinator, a command client and executive events.

The command client is anything exposing ``pause(pid)`` and ``resume(pid)``
returning ``{"status": "ok", ...}`` style dictionaries.  Backend confirmations
arrive as raw executive events (``task_state`` / ``debug_break``) and are fed
through :meth:`ThreadPauseDriver.handle_event`.

Every issued command holds the coordinator's in-flight slot until a matching
``task_state`` event or a client failure releases it.  That includes a pause
issued for a task that is already paused.  An executive that accepts such a
pause but emits no ``task_state`` event stalls all later dispatch.  The
driver has no timeout for this, so the client or its owner must supply one,
by calling ``notify_interrupt_failed`` when it gives up.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional, Union

from .coordinator import ThreadPauseCoordinator
from .errors import RequestOutcome
from .state import PauseType, ThreadId


logger = logging.getLogger(__name__)

PAUSED_STATES = {"paused", "stopped"}
RUNNING_STATES = {"running", "ready"}
BREAK_REASONS = {"breakpoint", "debug_break", "watchpoint", "step"}


def _to_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


class ThreadPauseDriver:
    """Sends issued commands to the backend and reports its answers back."""

    def __init__(self, coordinator: ThreadPauseCoordinator, client: Any) -> None:
        self.coordinator = coordinator
        self.client = client
        self._names: Dict[ThreadId, str] = {}

    def register_thread(self, thread_id: ThreadId, name: Optional[str] = None) -> None:
        if name:
            self._names[thread_id] = name
        else:
            self._names.pop(thread_id, None)

    def thread_name(self, thread_id: ThreadId) -> str:
        return self._names.get(thread_id) or f"PID {thread_id}"

    def interrupt(self, thread_id: ThreadId, pause_type: Union[PauseType, str] = PauseType.USER) -> Future:
        name = self.thread_name(thread_id)
        future = self.coordinator.request_interrupt(thread_id, name, pause_type)
        future.add_done_callback(self._on_issued("pause", thread_id, name))
        return future

    def resume(self, thread_id: ThreadId) -> Future:
        name = self.thread_name(thread_id)
        future = self.coordinator.request_resume(thread_id, name)
        future.add_done_callback(self._on_issued("resume", thread_id, name))
        return future

    def handle_event(self, event: Dict[str, Any]) -> bool:
        """Translate a raw executive event into a coordinator notification.

        Returns True when the event was consumed.
        """
        event_type = str(event.get("type") or "")
        pid = event.get("pid")
        if isinstance(pid, str):
            pid = _to_int(pid)
        if pid is None:
            return False
        data = event.get("data") or {}
        name = self.thread_name(pid)

        if event_type == "debug_break":
            self.coordinator.notify_interrupted(pid, name, PauseType.AUTOMATIC)
            return True
        if event_type != "task_state":
            return False
        new_state = str(data.get("new_state") or "").lower()
        if new_state in PAUSED_STATES:
            reason = str(data.get("reason") or "").lower()
            pause_type = PauseType.AUTOMATIC if reason in BREAK_REASONS else PauseType.USER
            self.coordinator.notify_interrupted(pid, name, pause_type)
            return True
        if new_state in RUNNING_STATES:
            if not self.coordinator.is_paused(pid):
                return False
            self.coordinator.notify_resumed(pid, name)
            return True
        return False

    def _on_issued(self, command: str, thread_id: ThreadId, name: str) -> Callable[[Future], None]:
        def callback(future: Future) -> None:
            if future.cancelled() or future.exception() is not None:
                return
            if future.result() is not RequestOutcome.ISSUED:
                return
            self._send(command, thread_id, name)

        return callback

    def _send(self, command: str, thread_id: ThreadId, name: str) -> None:
        if command == "pause":
            sender, on_failure = self.client.pause, self.coordinator.notify_interrupt_failed
        else:
            sender, on_failure = self.client.resume, self.coordinator.notify_resume_failed
        try:
            response = sender(thread_id)
        except Exception as exc:
            logger.warning("%s command for %s failed: %s", command, name, exc)
            on_failure(thread_id, name)
            return
        if not isinstance(response, dict) or response.get("status") != "ok":
            logger.warning("%s command for %s rejected: %s", command, name, response)
            on_failure(thread_id, name)
