from __future__ import annotations

import threading

import pytest

from moto_garage.app.dispatch import HeadlessLoop, InlineDispatcher, ThreadedDispatcher
from tests.garage_fakes import api_error


def test_inline_dispatcher_routes_api_errors() -> None:
    results, errors = [], []
    dispatcher = InlineDispatcher()

    dispatcher.submit(lambda: 5, results.append, errors.append)
    dispatcher.submit(lambda: (_ for _ in ()).throw(api_error(500)), results.append, errors.append)

    assert results == [5]
    assert errors[0].status_code == 500


def test_inline_dispatcher_does_not_hide_programming_errors() -> None:
    with pytest.raises(ZeroDivisionError):
        InlineDispatcher().submit(lambda: 1 / 0, lambda _r: None, lambda _e: None)


def test_headless_loop_runs_in_due_order_and_honours_cancel() -> None:
    clock = [0.0]
    loop = HeadlessLoop(sleeper=lambda seconds: clock.__setitem__(0, clock[0] + seconds), now=lambda: clock[0])
    order = []

    loop.after(200, lambda: order.append("late"))
    cancelled = loop.after(50, lambda: order.append("cancelled"))
    loop.after(0, lambda: order.append("now"))
    loop.after_cancel(cancelled)
    assert loop.pending() == 2

    loop.drain()

    assert order == ["now", "late"]
    assert clock[0] == pytest.approx(0.2)


class _RecordingLoop:
    def __init__(self) -> None:
        self.posted = []
        self.ready = threading.Event()

    def after(self, delay_ms, callback):
        self.posted.append((delay_ms, callback))
        self.ready.set()

    def after_cancel(self, handle) -> None:
        return None


def test_threaded_dispatcher_posts_result_back_to_loop() -> None:
    loop = _RecordingLoop()
    results = []

    ThreadedDispatcher(loop).submit(lambda: "done", results.append, lambda _e: None)

    assert loop.ready.wait(timeout=5)
    assert results == []
    delay_ms, callback = loop.posted[0]
    callback()
    assert delay_ms == 0
    assert results == ["done"]


def test_threaded_dispatcher_posts_failure_back_to_loop() -> None:
    loop = _RecordingLoop()
    errors = []

    def failing() -> None:
        raise api_error(500, "down")

    ThreadedDispatcher(loop).submit(failing, lambda _r: None, errors.append)

    assert loop.ready.wait(timeout=5)
    _delay_ms, callback = loop.posted[0]
    callback()
    assert errors[0].status_code == 500
    assert errors[0].message == "down"
