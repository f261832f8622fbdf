import logging

import pytest

from python.threadpause.requests import PauseRequest, RequestQueues, ResumeRequest
from python.threadpause.state import PauseRecord, PauseStack, PauseType


def _stack(*entries):
    stack = PauseStack()
    for thread_id, name, pause_type in entries:
        stack.push(PauseRecord(thread_id, name, pause_type))
    return stack


def test_pause_type_coerce_accepts_short_and_long_forms():
    assert PauseType.coerce("auto") is PauseType.AUTOMATIC
    assert PauseType.coerce("automatic") is PauseType.AUTOMATIC
    assert PauseType.coerce("USER") is PauseType.USER
    assert PauseType.coerce(PauseType.USER) is PauseType.USER
    with pytest.raises(ValueError):
        PauseType.coerce("step")


def test_push_rejects_duplicate_thread(caplog):
    stack = _stack((1, "A", PauseType.USER))
    caplog.set_level(logging.WARNING)

    assert stack.push(PauseRecord(1, "A", PauseType.AUTOMATIC)) is False

    assert len(stack) == 1
    assert stack.peek().pause_type is PauseType.USER
    assert any("duplicate" in record.getMessage() for record in caplog.records)


def test_peek_and_top_track_most_recent_pause():
    stack = _stack((1, "A", PauseType.USER), (2, "B", PauseType.AUTOMATIC))
    assert stack.peek().thread_id == 2
    assert stack.is_top(2)
    assert not stack.is_top(1)
    assert stack.find(1) == 0
    assert 2 in stack
    assert 3 not in stack
    assert [record.thread_name for record in stack.top_first()] == ["B", "A"]


def test_remove_is_idempotent():
    stack = _stack((1, "A", PauseType.USER), (2, "B", PauseType.USER))
    removed = stack.remove(1)
    assert removed is not None and removed.thread_name == "A"
    assert stack.remove(1) is None
    assert [record.thread_id for record in stack] == [2]


def test_hindering_pauses_stop_at_target_and_skip_automatic():
    stack = _stack(
        (1, "A", PauseType.USER),
        (2, "B", PauseType.USER),
        (3, "C", PauseType.AUTOMATIC),
        (4, "D", PauseType.USER),
    )
    assert [record.thread_name for record in stack.hindering_pauses(1)] == ["D", "B"]
    assert [record.thread_name for record in stack.hindering_pauses(2)] == ["D"]
    assert stack.hindering_pauses(4) == []


def test_describe_lists_name_and_type():
    stack = _stack((1, "A", PauseType.USER), (2, "B", PauseType.AUTOMATIC))
    assert stack.describe() == "A/user,B/automatic"


def test_request_queue_searches():
    queues = RequestQueues()
    queues.enqueue_pause(PauseRequest(1, "A", PauseType.USER))
    queues.enqueue_pause(PauseRequest(2, "B", PauseType.AUTOMATIC))
    queues.enqueue_pause(PauseRequest(3, "C", PauseType.AUTOMATIC))
    queues.enqueue_resume(ResumeRequest(7, "G"))
    queues.enqueue_resume(ResumeRequest(8, "H"))

    assert queues.find_automatic_pause() == 1
    assert queues.latest_pause_index() == 2
    assert queues.find_resume(8) == 1
    assert queues.find_resume(9) is None
    assert queues.has_pause(1)
    assert queues.has_resume(7)

    taken = queues.take_pause(2)
    assert taken.thread_name == "C"
    assert queues.latest_pause_index() == 1
    assert queues.take_resume(0).thread_name == "G"
    assert not queues.has_resume(7)


def test_empty_queues_have_no_candidates():
    queues = RequestQueues()
    assert queues.find_automatic_pause() is None
    assert queues.latest_pause_index() is None
    assert queues.find_resume(1) is None
