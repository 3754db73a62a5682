from __future__ import annotations

from typing import Callable

Listener = Callable[[], None]


class Observable:
    """Change-notification contract shared by the garage stores.

    Views subscribe and re-read store state when notified. After ``dispose``
    no listener is called and late network results are dropped.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispose(self) -> None:
        self._disposed = True
        self._listeners.clear()

    def _notify(self) -> None:
        if self._disposed:
            return
        for listener in list(self._listeners):
            listener()
