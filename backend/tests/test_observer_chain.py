from __future__ import annotations

import asyncio

import pytest

from chain import (
    NEXT,
    STOP,
    ChainOutcome,
    EventKind,
    ObserverChain,
    SearchParams,
    callback_observer,
)

SEARCH = EventKind.search_starting


def _recorder(calls: list[str], name: str, result):
    async def observer(params, token):
        calls.append(name)
        return result

    observer.__name__ = name
    return observer


def test_no_handlers_defers():
    assert asyncio.run(ObserverChain().dispatch_event(SEARCH, SearchParams("x"))) is ChainOutcome.deferred


def test_handlers_run_in_order_until_first_stop():
    calls: list[str] = []
    chain = ObserverChain()
    chain.install_observer(SEARCH, _recorder(calls, "a", NEXT))
    chain.install_observer(SEARCH, _recorder(calls, "b", STOP))
    chain.install_observer(SEARCH, _recorder(calls, "c", STOP))

    out = asyncio.run(chain.dispatch_event(SEARCH, SearchParams("x")))

    assert out is ChainOutcome.handled
    assert calls == ["a", "b"]


def test_all_next_defers_after_running_everyone():
    calls: list[str] = []
    chain = ObserverChain()
    for name in ("a", "b", "c"):
        chain.install_observer(SEARCH, _recorder(calls, name, NEXT))

    assert asyncio.run(chain.dispatch_event(SEARCH, SearchParams("x"))) is ChainOutcome.deferred
    assert calls == ["a", "b", "c"]


def test_at_front_and_kinds_are_independent():
    calls: list[str] = []
    chain = ObserverChain()
    chain.install_observer(SEARCH, _recorder(calls, "late", NEXT))
    chain.install_observer(SEARCH, _recorder(calls, "early", NEXT), at_front=True)
    chain.install_observer(EventKind.autocomplete_starting, _recorder(calls, "auto", STOP))

    asyncio.run(chain.dispatch_event(SEARCH, SearchParams("x")))

    assert calls == ["early", "late"]
    assert [e.name for e in chain.observers(SEARCH)] == ["early", "late"]


def test_clear_default_removes_builtin_once():
    calls: list[str] = []
    chain = ObserverChain(defaults={SEARCH: _recorder(calls, "builtin", STOP)})
    chain.install_observer(SEARCH, _recorder(calls, "mine", NEXT))

    assert chain.clear_default(SEARCH) is True
    assert chain.clear_default(SEARCH) is False
    assert asyncio.run(chain.dispatch_event(SEARCH, SearchParams("x"))) is ChainOutcome.deferred
    assert calls == ["mine"]


def test_reset_clears_handlers():
    chain = ObserverChain()
    chain.install_observer(SEARCH, _recorder([], "a", STOP))
    chain.install_observer(EventKind.autocomplete_starting, _recorder([], "b", STOP))

    chain.reset(SEARCH)
    assert chain.observers(SEARCH) == []
    assert len(chain.observers(EventKind.autocomplete_starting)) == 1

    chain.reset()
    assert chain.observers(EventKind.autocomplete_starting) == []


def test_handler_must_return_a_resolution():
    chain = ObserverChain()
    chain.install_observer(SEARCH, _recorder([], "bad", True))
    with pytest.raises(TypeError, match="bad"):
        asyncio.run(chain.dispatch_event(SEARCH, SearchParams("x")))


def test_handler_exceptions_propagate():
    async def boom(params, token):
        raise RuntimeError("boom")

    chain = ObserverChain()
    chain.install_observer(SEARCH, boom)
    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(chain.dispatch_event(SEARCH, SearchParams("x")))


def test_older_dispatch_is_superseded_by_newer_one():
    async def scenario():
        gate = asyncio.Event()
        seen: list[tuple[str, bool]] = []

        async def slow(params, token):
            if params.search_string == "first":
                await gate.wait()
            seen.append((params.search_string, token.superseded))
            return STOP

        chain = ObserverChain()
        chain.install_observer(SEARCH, slow)
        first = asyncio.create_task(chain.dispatch_event(SEARCH, SearchParams("first")))
        await asyncio.sleep(0)
        second = await chain.dispatch_event(SEARCH, SearchParams("second"))
        gate.set()
        return await first, second, seen, chain.generation(SEARCH)

    first, second, seen, generation = asyncio.run(scenario())

    assert second is ChainOutcome.handled
    assert first is ChainOutcome.superseded
    assert seen == [("second", False), ("first", True)]
    assert generation == 2


def test_callback_observer_waits_for_late_resolution_and_ignores_repeats():
    async def scenario():
        results: list[bool] = []
        holder: dict = {}

        def legacy(next_, resolve, params):
            holder["resolve"] = resolve
            holder["next"] = next_

        chain = ObserverChain()
        chain.install_observer(SEARCH, callback_observer(legacy, name="legacy"))
        task = asyncio.create_task(chain.dispatch_event(SEARCH, SearchParams("x")))
        await asyncio.sleep(0)
        assert not task.done()
        resolve = holder["resolve"]
        results.append(resolve(holder["next"]))
        results.append(resolve(STOP))
        return await task, results, resolve.settled

    outcome, results, settled = asyncio.run(scenario())

    assert outcome is ChainOutcome.deferred
    assert results == [True, False]
    assert settled is True
