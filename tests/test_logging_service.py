import logging

import pytest

from console.services.event_bus import EventBus, ViewEvent
from console.services.logging_service import LoggingService


@pytest.fixture()
def setup_logging():
    bus = EventBus()
    svc = LoggingService(capacity=5, event_bus=bus)
    svc.attach_root()
    yield svc, bus
    svc.detach_root()


def test_logging_capture_and_retrieve(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("alpha").info("Hello World")
    assert any(e.message == "Hello World" for e in svc.recent())


def test_logging_capacity_eviction(setup_logging):
    svc, _ = setup_logging
    for i in range(10):
        logging.getLogger("cap").info("M%d", i)
    recents = svc.recent()
    assert len(recents) == 5  # capacity
    assert recents[0].message.endswith("5")  # first retained after evictions
    assert [e.message for e in svc.recent(2)] == ["M8", "M9"]


def test_logging_filtering(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("console.viewmodels.collection_view").error("bulk delete failed")
    logging.getLogger("other").warning("unrelated")
    errors = svc.filter(level="ERROR")
    assert [e.message for e in errors] == ["bulk delete failed"]
    assert [e.message for e in svc.filter(name_contains="viewmodels")] == ["bulk delete failed"]
    svc.clear()
    assert svc.recent() == []


def test_logging_publishes_event(setup_logging):
    svc, bus = setup_logging
    received = []
    bus.subscribe(ViewEvent.LOG_RECORD_ADDED, lambda e: received.append(e.payload))
    logging.getLogger("beta").warning("Careful")
    assert {"level": "WARNING", "name": "beta", "message": "Careful"} in received


def test_detach_stops_capture():
    svc = LoggingService(capacity=5)
    svc.attach_root()
    svc.detach_root()
    logging.getLogger("gamma").warning("not captured")
    assert svc.recent() == []


def test_recent_limit_bounds(setup_logging):
    svc, _ = setup_logging
    for i in range(3):
        logging.getLogger("lim").info("L%d", i)
    assert svc.recent(0) == []
    assert [e.message for e in svc.recent(10)] == ["L0", "L1", "L2"]
