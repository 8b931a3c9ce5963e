from .observer_chain import (
    NEXT,
    STOP,
    ChainOutcome,
    DispatchToken,
    EventKind,
    ObserverChain,
    ObserverEntry,
    Resolution,
    Resolver,
    SearchParams,
    callback_observer,
)

__all__ = [
    "NEXT",
    "STOP",
    "ChainOutcome",
    "DispatchToken",
    "EventKind",
    "ObserverChain",
    "ObserverEntry",
    "Resolution",
    "Resolver",
    "SearchParams",
    "callback_observer",
]
