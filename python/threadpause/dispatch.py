"""Dispatch policy: choose the single next pause/resume command to issue.

The policy is kept free of queue and stack mechanics so that the priority
rules can be checked on their own.  Rules are evaluated in order and the
first match wins:

    in_flight      a command is unconfirmed         -> wait
    resume_top     resume queued for the top pause  -> resume it
    automatic_top  top pause is automatic           -> next automatic pause, or nothing
    latest_pause   any pause queued                 -> newest pause request
    idle           nothing to do
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .state import PauseRecord, PauseType


class DispatchAction(str, Enum):
    WAIT = "wait"
    NONE = "none"
    PAUSE = "pause"
    RESUME = "resume"


@dataclass(frozen=True)
class DispatchDecision:
    action: DispatchAction
    rule: str
    index: Optional[int] = None

    @property
    def issues_command(self) -> bool:
        return self.action in (DispatchAction.PAUSE, DispatchAction.RESUME)


def decide(
    *,
    in_flight: bool,
    top: Optional[PauseRecord],
    resume_for_top: Optional[int],
    automatic_pause: Optional[int],
    latest_pause: Optional[int],
) -> DispatchDecision:
    """Return the next action given queue positions computed by the caller.

    ``resume_for_top`` is the resume queue index targeting ``top``,
    ``automatic_pause`` the first automatic pause request and ``latest_pause``
    the tail of the pause queue; each is ``None`` when absent.
    """

    if in_flight:
        return DispatchDecision(DispatchAction.WAIT, "in_flight")
    if top is not None:
        if resume_for_top is not None:
            return DispatchDecision(DispatchAction.RESUME, "resume_top", resume_for_top)
        if top.pause_type is PauseType.AUTOMATIC:
            # User pauses stay queued until the automatic pause is gone.
            if automatic_pause is not None:
                return DispatchDecision(DispatchAction.PAUSE, "automatic_top", automatic_pause)
            return DispatchDecision(DispatchAction.NONE, "automatic_top")
    if latest_pause is not None:
        return DispatchDecision(DispatchAction.PAUSE, "latest_pause", latest_pause)
    return DispatchDecision(DispatchAction.NONE, "idle")
