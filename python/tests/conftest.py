"""
Pytest configuration and fixtures for threadpause tests.
"""
import pytest

from python.threadpause import EventBus, EventSubscription, ThreadPauseCoordinator


@pytest.fixture
def coordinator():
    return ThreadPauseCoordinator()


@pytest.fixture
def recorded_events():
    """Coordinator wired to an EventBus; yields (coordinator, bus, received)."""
    bus = EventBus()
    received = []
    bus.subscribe(EventSubscription(handler=received.append))
    coord = ThreadPauseCoordinator(event_bus=bus)
    return coord, bus, received
