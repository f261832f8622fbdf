from unittest.mock import MagicMock

from python.threadpause import PauseType, RequestOutcome, ThreadPauseCoordinator, ThreadPauseDriver


def _make_driver():
    client = MagicMock()
    client.pause.return_value = {"status": "ok"}
    client.resume.return_value = {"status": "ok"}
    coordinator = ThreadPauseCoordinator()
    return ThreadPauseDriver(coordinator, client), coordinator, client


def _task_state(pid, new_state, reason=None):
    data = {"new_state": new_state}
    if reason is not None:
        data["reason"] = reason
    return {"seq": 1, "ts": 0.0, "type": "task_state", "pid": pid, "data": data}


def test_issued_pause_is_sent_to_client():
    driver, coordinator, client = _make_driver()

    future = driver.interrupt(1)

    assert future.result(timeout=0) is RequestOutcome.ISSUED
    client.pause.assert_called_once_with(1)
    assert coordinator.in_flight == 1


def test_queued_pause_is_sent_once_issued():
    driver, coordinator, client = _make_driver()
    driver.interrupt(1)
    driver.interrupt(2)
    client.pause.assert_called_once_with(1)

    assert driver.handle_event(_task_state(1, "paused", reason="user_pause"))

    assert client.pause.call_count == 2
    client.pause.assert_called_with(2)
    assert coordinator.in_flight == 2


def test_pause_resume_cycle_through_events():
    driver, coordinator, client = _make_driver()
    driver.register_thread(1, "worker")

    driver.interrupt(1)
    driver.handle_event(_task_state(1, "paused"))
    assert coordinator.paused_threads()[0].thread_name == "worker"

    driver.resume(1)
    client.resume.assert_called_once_with(1)
    driver.handle_event(_task_state(1, "running"))

    assert coordinator.snapshot().pauses == ()
    assert coordinator.in_flight is None


def test_rejected_pause_rolls_back():
    driver, coordinator, client = _make_driver()
    client.pause.return_value = {"status": "error", "error": "unknown_pid"}

    driver.interrupt(1)

    assert not coordinator.is_paused(1)
    assert coordinator.in_flight is None


def test_client_exception_rolls_back():
    driver, coordinator, client = _make_driver()
    client.pause.side_effect = RuntimeError("connection lost")

    driver.interrupt(1)

    assert not coordinator.is_paused(1)
    assert coordinator.in_flight is None


def test_rejected_resume_keeps_thread_paused():
    driver, coordinator, client = _make_driver()
    driver.interrupt(1)
    driver.handle_event(_task_state(1, "paused"))
    client.resume.return_value = {"status": "error"}

    driver.resume(1)

    assert coordinator.is_paused(1)
    assert coordinator.in_flight is None


def test_noop_requests_do_not_reach_client():
    driver, coordinator, client = _make_driver()

    assert driver.resume(3).result(timeout=0) is RequestOutcome.NOT_PAUSED
    driver.interrupt(1)
    driver.handle_event(_task_state(1, "paused"))
    assert driver.interrupt(1).result(timeout=0) is RequestOutcome.ALREADY_PAUSED

    client.resume.assert_not_called()
    client.pause.assert_called_once_with(1)


def test_debug_break_records_automatic_pause():
    driver, coordinator, client = _make_driver()

    assert driver.handle_event({"type": "debug_break", "pid": "4", "data": {"pc": 16}})

    record = coordinator.paused_threads()[0]
    assert record.thread_id == 4
    assert record.thread_name == "PID 4"
    assert record.pause_type is PauseType.AUTOMATIC


def test_breakpoint_reason_maps_to_automatic_pause():
    driver, coordinator, _ = _make_driver()

    driver.handle_event(_task_state(2, "stopped", reason="breakpoint"))

    assert coordinator.paused_threads()[0].pause_type is PauseType.AUTOMATIC


def test_unrelated_events_are_ignored():
    driver, coordinator, _ = _make_driver()

    assert not driver.handle_event({"type": "stdout", "pid": 1, "data": {"text": "hi"}})
    assert not driver.handle_event(_task_state(1, "running"))
    assert not driver.handle_event(_task_state(1, "terminated"))
    assert not driver.handle_event({"type": "task_state", "data": {"new_state": "paused"}})
    assert coordinator.snapshot().pauses == ()
