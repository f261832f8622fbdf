"""
threadpause - pause/resume arbitration for HSX debugger front-ends.

The executive accepts a single outstanding pause or resume command across all
tasks.  This package queues pause/resume requests coming from breakpoints and
from the user, decides which command may be sent next and reconciles the
executive's confirmations with the requests that caused them:

    state.py        → stack of paused threads
    requests.py     → pending pause/resume request queues
    dispatch.py     → dispatch policy (which command goes next)
    coordinator.py  → request entry points and backend notifications
    events.py       → confirmation events and fan-out bus
    driver.py       → wiring to a command client and executive events
"""

from .config import CoordinatorConfig  # noqa: F401
from .coordinator import CoordinatorSnapshot, ThreadPauseCoordinator  # noqa: F401
from .dispatch import DispatchAction, DispatchDecision, decide  # noqa: F401
from .driver import ThreadPauseDriver  # noqa: F401
from .errors import PauseCoordinatorError, RequestOutcome, ResumeBlockedError  # noqa: F401
from .events import (  # noqa: F401
    CommandIssuedEvent,
    DesyncEvent,
    EventBus,
    EventSubscription,
    InterruptFailedEvent,
    PauseEvent,
    ResumeFailedEvent,
    ThreadInterruptedEvent,
    ThreadResumedEvent,
)
from .requests import PauseRequest, RequestQueues, ResumeRequest  # noqa: F401
from .state import PauseRecord, PauseStack, PauseType  # noqa: F401

__all__ = [
    "CoordinatorConfig",
    "CoordinatorSnapshot",
    "ThreadPauseCoordinator",
    "DispatchAction",
    "DispatchDecision",
    "decide",
    "ThreadPauseDriver",
    "PauseCoordinatorError",
    "RequestOutcome",
    "ResumeBlockedError",
    "EventBus",
    "EventSubscription",
    "PauseEvent",
    "CommandIssuedEvent",
    "ThreadInterruptedEvent",
    "InterruptFailedEvent",
    "ThreadResumedEvent",
    "ResumeFailedEvent",
    "DesyncEvent",
    "PauseRequest",
    "ResumeRequest",
    "RequestQueues",
    "PauseRecord",
    "PauseStack",
    "PauseType",
]

__version__ = "0.1.0-dev"
