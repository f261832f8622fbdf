"""Coordinator configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CoordinatorConfig:
    # Run the dispatcher again after a pause/resume command failed.
    redispatch_on_failure: bool = True
    # Dump stack and queues at DEBUG level before every dispatch decision.
    log_state_snapshots: bool = True
    check_invariants: bool = True
    publish_events: bool = True
