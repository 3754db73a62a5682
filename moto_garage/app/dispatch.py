from __future__ import annotations

import heapq
import itertools
import threading
import time
from typing import Any, Callable, Protocol, TypeVar

from moto_garage.sdk.exceptions import ApiError

T = TypeVar("T")


class UiLoop(Protocol):
    """The slice of ``tkinter.Misc`` the stores rely on."""

    def after(self, delay_ms: int, callback: Callable[[], None]) -> Any: ...

    def after_cancel(self, handle: Any) -> None: ...


class Dispatcher(Protocol):
    def submit(
        self,
        work: Callable[[], T],
        on_success: Callable[[T], None],
        on_error: Callable[[ApiError], None],
    ) -> None: ...


class InlineDispatcher:
    """Runs work on the caller's thread; used by the console and by tests."""

    def submit(
        self,
        work: Callable[[], T],
        on_success: Callable[[T], None],
        on_error: Callable[[ApiError], None],
    ) -> None:
        try:
            result = work()
        except ApiError as exc:
            on_error(exc)
            return
        on_success(result)


class ThreadedDispatcher:
    """Runs work on a daemon thread and hands the result back to the UI loop."""

    def __init__(self, loop: UiLoop) -> None:
        self.loop = loop

    def submit(
        self,
        work: Callable[[], T],
        on_success: Callable[[T], None],
        on_error: Callable[[ApiError], None],
    ) -> None:
        def worker() -> None:
            try:
                result = work()
            except ApiError as exc:
                self.loop.after(0, lambda error=exc: on_error(error))
                return
            self.loop.after(0, lambda: on_success(result))

        threading.Thread(target=worker, daemon=True).start()


class HeadlessLoop:
    """Timer queue with the ``after``/``after_cancel`` API for non-Tk hosts."""

    def __init__(
        self,
        sleeper: Callable[[float], None] | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self._sleep = sleeper or time.sleep
        self._now = now or time.monotonic
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._timers: list[tuple[float, int, Callable[[], None]]] = []
        self._cancelled: set[int] = set()

    def after(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        due = self._now() + max(0, delay_ms) / 1000
        with self._lock:
            heapq.heappush(self._timers, (due, handle, callback))
        return handle

    def after_cancel(self, handle: Any) -> None:
        with self._lock:
            if any(timer_id == handle for _, timer_id, _ in self._timers):
                self._cancelled.add(handle)

    def pending(self) -> int:
        with self._lock:
            return sum(1 for _, handle, _ in self._timers if handle not in self._cancelled)

    def drain(self) -> None:
        """Run every scheduled callback in due order, waiting for each deadline."""
        while True:
            with self._lock:
                if not self._timers:
                    return
                due, handle, callback = heapq.heappop(self._timers)
                if handle in self._cancelled:
                    self._cancelled.discard(handle)
                    continue
            wait = due - self._now()
            if wait > 0:
                self._sleep(wait)
            callback()
