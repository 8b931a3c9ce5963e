from __future__ import annotations

from typing import Any, Callable

Listener = Callable[..., None]


class EventEmitter:
    """
    Minimal named-event hub (`on` / `off` / `trigger`).

    Listeners run synchronously in subscription order; exceptions propagate to the caller.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event) or []
        if listener in listeners:
            listeners.remove(listener)

    def trigger(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event) or []):
            listener(*args)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event) or [])
