from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    search_starting = "searchStarting"
    autocomplete_starting = "autocompleteStarting"


class Resolution(Enum):
    """What a handler decided: claim the event, or pass it on."""

    STOP = "stop"
    NEXT = "next"


STOP = Resolution.STOP
NEXT = Resolution.NEXT


class ChainOutcome(str, Enum):
    # A handler claimed the event; skip the default behaviour.
    handled = "handled"
    # Every handler passed; run the default behaviour (generic geocoding).
    deferred = "deferred"
    # A newer dispatch of the same kind started meanwhile; drop this one.
    superseded = "superseded"


@dataclass
class SearchParams:
    search_string: str
    # Autocomplete sink: receives suggestions when a handler produces them.
    suggest: Callable[[list[Any]], None] | None = None


@dataclass(frozen=True)
class DispatchToken:
    kind: EventKind
    generation: int
    _chain: "ObserverChain" = field(repr=False, compare=False)

    @property
    def superseded(self) -> bool:
        return self._chain.generation(self.kind) != self.generation


Observer = Callable[[SearchParams, DispatchToken], Awaitable[Resolution]]


@dataclass(frozen=True)
class ObserverEntry:
    handler: Observer
    name: str
    default: bool = False


class ObserverChain:
    """
    Ordered, short-circuiting handler pipeline per event kind.

    Handlers run one after another in registration order. The first STOP ends the
    dispatch as `handled`; if all pass (or none are registered) the dispatch is
    `deferred`. Every dispatch carries a token; once a newer dispatch of the same
    kind begins, the older token is superseded and its outcome is discarded.
    """

    def __init__(self, defaults: dict[EventKind, Observer] | None = None):
        self._entries: dict[EventKind, list[ObserverEntry]] = {k: [] for k in EventKind}
        self._generations: dict[EventKind, int] = {k: 0 for k in EventKind}
        for kind, handler in (defaults or {}).items():
            self._entries[kind].append(
                ObserverEntry(handler=handler, name=f"default:{kind.value}", default=True)
            )

    def install_observer(
        self,
        kind: EventKind,
        handler: Observer,
        *,
        at_front: bool = False,
        name: str | None = None,
    ) -> ObserverEntry:
        entry = ObserverEntry(handler=handler, name=name or getattr(handler, "__name__", "observer"))
        if at_front:
            self._entries[kind].insert(0, entry)
        else:
            self._entries[kind].append(entry)
        return entry

    def clear_default(self, kind: EventKind) -> bool:
        """Remove the built-in handler for `kind`. Returns False if it was already gone."""
        before = len(self._entries[kind])
        self._entries[kind] = [e for e in self._entries[kind] if not e.default]
        return len(self._entries[kind]) != before

    def reset(self, kind: EventKind | None = None) -> None:
        for k in [kind] if kind is not None else list(EventKind):
            self._entries[k] = []

    def observers(self, kind: EventKind) -> list[ObserverEntry]:
        return list(self._entries[kind])

    def generation(self, kind: EventKind) -> int:
        return self._generations[kind]

    async def dispatch_event(self, kind: EventKind, params: SearchParams) -> ChainOutcome:
        self._generations[kind] += 1
        token = DispatchToken(kind=kind, generation=self._generations[kind], _chain=self)

        # Snapshot: handlers installed mid-dispatch apply to the next dispatch.
        for entry in list(self._entries[kind]):
            resolution = await entry.handler(params, token)
            if token.superseded:
                logger.debug("%s dispatch %d superseded in %s", kind.value, token.generation, entry.name)
                return ChainOutcome.superseded
            if resolution is STOP:
                logger.debug("%s handled by %s", kind.value, entry.name)
                return ChainOutcome.handled
            if resolution is not NEXT:
                raise TypeError(f"Observer {entry.name} returned {resolution!r}, expected STOP or NEXT")
        return ChainOutcome.deferred


class Resolver:
    """
    Single-use completion callback for callback-style observers.

    The first call settles the dispatch; later calls are ignored and return False.
    """

    def __init__(self, future: asyncio.Future):
        self._future = future

    def __call__(self, resolution: Resolution) -> bool:
        if self._future.done():
            logger.debug("late resolution %s ignored", resolution)
            return False
        self._future.set_result(resolution)
        return True

    @property
    def settled(self) -> bool:
        return self._future.done()


CallbackObserver = Callable[[Resolution, Resolver, SearchParams], None]


def callback_observer(fn: CallbackObserver, *, name: str | None = None) -> Observer:
    """
    Adapt an observer written as `fn(next, resolve, params)`.

    `fn` must eventually call `resolve(STOP)` or `resolve(next)`, possibly from a
    later callback; the chain waits for it.
    """

    async def observer(params: SearchParams, token: DispatchToken) -> Resolution:
        future = asyncio.get_running_loop().create_future()
        fn(NEXT, Resolver(future), params)
        return await future

    observer.__name__ = name or getattr(fn, "__name__", "callback_observer")
    return observer
