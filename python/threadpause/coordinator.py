"""Thread pause coordinator.

Serialises pause ("interrupt") and resume commands for a backend that accepts
only one outstanding pause/resume command across all threads.  Callers queue
requests with :meth:`ThreadPauseCoordinator.request_interrupt` and
:meth:`ThreadPauseCoordinator.request_resume`; the backend collaborator reports
outcomes through the ``notify_*`` methods.

A request future resolving with :attr:`RequestOutcome.ISSUED` means the command
may now be sent to the backend, not that the backend carried it out.
Confirmations are observed through the ``notify_*`` calls and the events
published on the optional :class:`EventBus`.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional, Tuple, Union

from .config import CoordinatorConfig
from .dispatch import DispatchAction, DispatchDecision, decide
from .errors import RequestOutcome, ResumeBlockedError
from .events import (
    CommandIssuedEvent,
    DesyncEvent,
    EventBus,
    InterruptFailedEvent,
    PauseEvent,
    ResumeFailedEvent,
    ThreadInterruptedEvent,
    ThreadResumedEvent,
)
from .requests import PauseRequest, RequestQueues, ResumeRequest
from .state import PauseRecord, PauseStack, PauseType, ThreadId


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoordinatorSnapshot:
    pauses: Tuple[PauseRecord, ...]
    requested_pauses: Tuple[Tuple[ThreadId, str, PauseType], ...]
    requested_resumes: Tuple[Tuple[ThreadId, str], ...]
    in_flight: Optional[ThreadId]

    @property
    def paused_thread_ids(self) -> List[ThreadId]:
        return [record.thread_id for record in self.pauses]


class ThreadPauseCoordinator:
    """Arbitrates pause/resume requests for one debugging session."""

    def __init__(
        self,
        *,
        config: Optional[CoordinatorConfig] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.config = config or CoordinatorConfig()
        self.event_bus = event_bus
        self._pauses = PauseStack()
        self._queues = RequestQueues()
        self._in_flight: Optional[ThreadId] = None
        self._lock = threading.RLock()
        self._completions: Deque[Tuple[Future, Optional[RequestOutcome], Optional[BaseException]]] = deque()
        self._pending_events: Deque[PauseEvent] = deque()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def in_flight(self) -> Optional[ThreadId]:
        return self._in_flight

    def is_paused(self, thread_id: ThreadId) -> bool:
        with self._lock:
            return thread_id in self._pauses

    def paused_threads(self) -> List[PauseRecord]:
        """Currently paused threads, most recent first."""
        with self._lock:
            return self._pauses.top_first()

    def snapshot(self) -> CoordinatorSnapshot:
        with self._lock:
            return CoordinatorSnapshot(
                pauses=tuple(self._pauses),
                requested_pauses=tuple(
                    (req.thread_id, req.thread_name, req.pause_type) for req in self._queues.pauses
                ),
                requested_resumes=tuple((req.thread_id, req.thread_name) for req in self._queues.resumes),
                in_flight=self._in_flight,
            )

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request_interrupt(
        self,
        thread_id: ThreadId,
        thread_name: str,
        pause_type: Union[PauseType, str] = PauseType.USER,
    ) -> Future:
        pause_type = PauseType.coerce(pause_type)
        with self._entry():
            logger.debug("Requesting %s interrupt for %s", pause_type.value, thread_name)
            if thread_id in self._pauses:
                logger.warning("Requesting %s to be interrupted but it seems to be paused already", thread_name)
                future: Future = Future()
                self._resolve(future, RequestOutcome.ALREADY_PAUSED)
            else:
                request = PauseRequest(thread_id, thread_name, pause_type)
                self._queues.enqueue_pause(request)
                future = request.completion
                self._run_dispatch()
        return future

    def request_resume(self, thread_id: ThreadId, thread_name: str) -> Future:
        with self._entry():
            logger.debug("Requesting resume for %s", thread_name)
            record = self._pauses.get(thread_id)
            if record is None:
                logger.warning("Requesting %s to be resumed but it doesn't seem to be paused", thread_name)
                future: Future = Future()
                self._resolve(future, RequestOutcome.NOT_PAUSED)
                return future
            if record.pause_type is PauseType.USER:
                hindering = self._pauses.hindering_pauses(thread_id)
                if hindering:
                    error = ResumeBlockedError(thread_name, [pause.thread_name for pause in hindering])
                    logger.info("%s", error)
                    future = Future()
                    self._fail(future, error)
                    return future
            request = ResumeRequest(thread_id, thread_name)
            self._queues.enqueue_resume(request)
            self._run_dispatch()
            return request.completion

    # ------------------------------------------------------------------
    # Backend notifications
    # ------------------------------------------------------------------

    def notify_interrupted(
        self,
        thread_id: ThreadId,
        thread_name: str,
        pause_type: Union[PauseType, str] = PauseType.AUTOMATIC,
    ) -> None:
        pause_type = PauseType.coerce(pause_type)
        with self._entry():
            logger.debug("%s interrupted, type %s", thread_name, pause_type.value)
            self._clear_in_flight(thread_id)
            solicited = thread_id in self._pauses
            if not solicited:
                self._pauses.push(PauseRecord(thread_id, thread_name, pause_type))
            if self._in_flight is not None:
                logger.warning(
                    "Received paused notification from %s while waiting for a notification from another thread",
                    thread_name,
                )
                self._emit(
                    DesyncEvent(
                        "desync",
                        thread_id,
                        thread_name,
                        reason="interrupted_while_waiting",
                        expected_thread_id=self._in_flight,
                    )
                )
            self._emit(ThreadInterruptedEvent("interrupted", thread_id, thread_name, pause_type, solicited))
            self._run_dispatch()

    def notify_interrupt_failed(self, thread_id: ThreadId, thread_name: str) -> None:
        with self._entry():
            logger.debug("Interrupting %s failed", thread_name)
            self._clear_in_flight(thread_id)
            removed = self._pauses.remove(thread_id)
            self._emit(InterruptFailedEvent("interrupt_failed", thread_id, thread_name, removed is not None))
            if self.config.redispatch_on_failure:
                self._run_dispatch()

    def notify_resumed(self, thread_id: ThreadId, thread_name: str) -> None:
        with self._entry():
            logger.debug("%s resumed", thread_name)
            out_of_order = False
            if thread_id not in self._pauses:
                logger.warning("Received resumed notification from %s but it doesn't seem to be paused", thread_name)
            elif self._pauses.is_top(thread_id):
                self._pauses.pop()
            else:
                out_of_order = True
                logger.warning(
                    "Received resumed notification from %s even though it is not the most recently paused thread",
                    thread_name,
                )
                self._pauses.remove(thread_id)
                self._emit(DesyncEvent("desync", thread_id, thread_name, reason="resumed_out_of_order"))

            if self._in_flight == thread_id:
                self._in_flight = None
            elif self._in_flight is not None:
                logger.warning(
                    "Received resumed notification from %s while waiting for a notification from another thread",
                    thread_name,
                )
                self._emit(
                    DesyncEvent(
                        "desync",
                        thread_id,
                        thread_name,
                        reason="resumed_while_waiting",
                        expected_thread_id=self._in_flight,
                    )
                )
            self._emit(ThreadResumedEvent("resumed", thread_id, thread_name, out_of_order))
            self._run_dispatch()

    def notify_resume_failed(self, thread_id: ThreadId, thread_name: str) -> None:
        with self._entry():
            logger.debug("Resuming %s failed", thread_name)
            self._clear_in_flight(thread_id)
            self._emit(ResumeFailedEvent("resume_failed", thread_id, thread_name))
            if self.config.redispatch_on_failure:
                self._run_dispatch()

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------

    def _decide(self) -> DispatchDecision:
        top = self._pauses.peek()
        return decide(
            in_flight=self._in_flight is not None,
            top=top,
            resume_for_top=self._queues.find_resume(top.thread_id) if top is not None else None,
            automatic_pause=self._queues.find_automatic_pause(),
            latest_pause=self._queues.latest_pause_index(),
        )

    def _run_dispatch(self) -> None:
        # Loops only to skip requests whose futures were cancelled by the caller.
        while True:
            if self._in_flight is None:
                self._log_state()
            decision = self._decide()
            if decision.action is DispatchAction.PAUSE:
                issued = self._issue_pause(decision.index)
            elif decision.action is DispatchAction.RESUME:
                issued = self._issue_resume(decision.index)
            else:
                return
            if issued:
                return

    def _issue_pause(self, index: Optional[int]) -> bool:
        assert index is not None
        request = self._queues.take_pause(index)
        if not request.completion.set_running_or_notify_cancel():
            logger.debug("Dropping cancelled pause request for %s", request.thread_name)
            return False
        logger.debug("Interrupting %s", request.thread_name)
        if request.thread_id in self._pauses:
            logger.warning("Executing pause request for %s but it seems to be paused already", request.thread_name)
        else:
            self._pauses.push(PauseRecord(request.thread_id, request.thread_name, request.pause_type))
        self._in_flight = request.thread_id
        self._resolve(request.completion, RequestOutcome.ISSUED)
        self._emit(CommandIssuedEvent("command_issued", request.thread_id, request.thread_name, "pause"))
        return True

    def _issue_resume(self, index: Optional[int]) -> bool:
        assert index is not None
        request = self._queues.take_resume(index)
        if not request.completion.set_running_or_notify_cancel():
            logger.debug("Dropping cancelled resume request for %s", request.thread_name)
            return False
        logger.debug("Resuming %s", request.thread_name)
        self._in_flight = request.thread_id
        self._resolve(request.completion, RequestOutcome.ISSUED)
        self._emit(CommandIssuedEvent("command_issued", request.thread_id, request.thread_name, "resume"))
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _entry(self) -> Iterator[None]:
        with self._lock:
            yield
            if self.config.check_invariants:
                self._check_invariants()
            completions, self._completions = self._completions, deque()
            events, self._pending_events = self._pending_events, deque()
        self._flush(completions, events)

    def _clear_in_flight(self, thread_id: ThreadId) -> None:
        if self._in_flight == thread_id:
            self._in_flight = None

    def _resolve(self, future: Future, outcome: RequestOutcome) -> None:
        self._completions.append((future, outcome, None))

    def _fail(self, future: Future, error: BaseException) -> None:
        self._completions.append((future, None, error))

    def _emit(self, event: PauseEvent) -> None:
        if self.event_bus is not None and self.config.publish_events:
            self._pending_events.append(event)

    def _flush(
        self,
        completions: Deque[Tuple[Future, Optional[RequestOutcome], Optional[BaseException]]],
        events: Deque[PauseEvent],
    ) -> None:
        # Runs outside the lock: done-callbacks may call back into the coordinator.
        for future, outcome, error in completions:
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(outcome)
        bus = self.event_bus
        if bus is None:
            return
        for event in events:
            bus.publish(event)

    def _log_state(self) -> None:
        if not self.config.log_state_snapshots or not logger.isEnabledFor(logging.DEBUG):
            return
        logger.debug(
            "Current pauses: [%s], requested pauses: [%s], requested resumes: [%s]",
            self._pauses.describe(),
            ",".join(req.describe() for req in self._queues.pauses),
            ",".join(req.describe() for req in self._queues.resumes),
        )

    def _check_invariants(self) -> None:
        thread_ids = [record.thread_id for record in self._pauses]
        assert len(thread_ids) == len(set(thread_ids)), f"duplicate pause records: {thread_ids}"
        for req in [*self._queues.pauses, *self._queues.resumes]:
            assert not req.completion.done() or req.completion.cancelled(), (
                f"queued request for {req.thread_name} already resolved"
            )
