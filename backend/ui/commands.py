from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class UiCommand:
    """
    One instruction for the browser side (map, search bar, result list, side panel).
    """

    target: str
    op: str
    payload: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"target": self.target, "op": self.op, "payload": self.payload}


Sink = Callable[[UiCommand], None]


class CommandRecorder:
    """
    Ordered log of UI commands shared by the recording collaborators.

    Sinks get every command as it is recorded; the HTTP layer uses this to stream.
    `history` caps how many commands are retained (None keeps everything, 0 keeps
    nothing); sinks see every command regardless.
    """

    def __init__(self, history: int | None = None) -> None:
        self.commands: deque[UiCommand] = deque(maxlen=history)
        self._sinks: list[Sink] = []

    def record(self, target: str, op: str, **payload: Any) -> UiCommand:
        cmd = UiCommand(target=target, op=op, payload=payload)
        self.commands.append(cmd)
        for sink in list(self._sinks):
            sink(cmd)
        return cmd

    def subscribe(self, sink: Sink) -> Callable[[], None]:
        self._sinks.append(sink)

        def unsubscribe() -> None:
            if sink in self._sinks:
                self._sinks.remove(sink)

        return unsubscribe

    def sink_count(self) -> int:
        return len(self._sinks)

    def ops(self, target: str | None = None) -> list[str]:
        return [c.op for c in self.commands if target is None or c.target == target]

    def since(self, index: int) -> list[UiCommand]:
        return list(self.commands)[index:]

    def clear(self) -> None:
        self.commands.clear()
