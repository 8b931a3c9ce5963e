from __future__ import annotations

import asyncio
import itertools
import json
import logging
from collections import OrderedDict
from contextvars import ContextVar
from enum import Enum
from functools import lru_cache
from typing import Any

from geo.coords import classify_input
from geocode.nominatim import Geocoder
from i18n.translations import default_translations
from query.transport import QueryTransport
from search.factory import RecordingApp, build_geocoder, build_recording_app, build_transport
from search.session import SearchSession
from settings.registry import get_config
from settings.types import SearchConfig
from ui.commands import UiCommand

logger = logging.getLogger(__name__)

DEFAULT_CLIENT = "default"
MAX_CLIENTS = 256

# Id of the search run whose task is recording; None outside a streamed run.
_current_run: ContextVar[int | None] = ContextVar("search_run", default=None)
_run_ids = itertools.count(1)


class EventType(str, Enum):
    command = "command"
    outcome = "outcome"
    error = "error"


def format_event(type: EventType, data: str):
    return f"event: {type.value}\ndata: {data}\n\n"


def _command_event(cmd: UiCommand) -> str:
    return format_event(EventType.command, json.dumps(cmd.as_dict(), ensure_ascii=False))


class AppRegistry:
    """
    One search session per client id.

    Sessions own their state and command log; the transport and geocoder are
    shared. The least recently used session is dropped past `max_clients`.
    """

    def __init__(
        self,
        config: SearchConfig,
        *,
        transport: QueryTransport | None = None,
        geocoder: Geocoder | None = None,
        max_clients: int = MAX_CLIENTS,
    ):
        self.config = config
        self.transport = transport or build_transport(config)
        self.geocoder = geocoder or build_geocoder(config)
        self.translations = default_translations(config.locale)
        self.max_clients = max_clients
        self._apps: OrderedDict[str, RecordingApp] = OrderedDict()

    def get(self, client_id: str) -> RecordingApp:
        app = self._apps.get(client_id)
        if app is not None:
            self._apps.move_to_end(client_id)
            return app

        # Streams and /select capture commands through sinks; nothing is retained.
        app = build_recording_app(
            self.config,
            transport=self.transport,
            geocoder=self.geocoder,
            translations=self.translations,
            history=0,
        )
        self._apps[client_id] = app
        while len(self._apps) > self.max_clients:
            evicted, _ = self._apps.popitem(last=False)
            logger.info("dropped search session for client %s", evicted)
        return app

    def __len__(self) -> int:
        return len(self._apps)

    async def aclose(self) -> None:
        self._apps.clear()
        await self.transport.aclose()
        await self.geocoder.aclose()


@lru_cache(maxsize=1)
def get_registry() -> AppRegistry:
    return AppRegistry(get_config())


def get_app(client_id: str = DEFAULT_CLIENT) -> RecordingApp:
    return get_registry().get(client_id)


def reset_registry() -> None:
    get_registry.cache_clear()


async def close_registry() -> None:
    if get_registry.cache_info().currsize:
        await get_registry().aclose()
    reset_registry()


async def _tagged_run(session: SearchSession, text: str, run_id: int):
    _current_run.set(run_id)
    return await session.run(text)


async def handle_search(text: str, client_id: str = DEFAULT_CLIENT, app: RecordingApp | None = None):
    """
    Run one search and stream the UI commands it produces as they happen.

    Only commands recorded by this run are streamed. Ends with an `outcome`
    event (`handled` / `deferred` / `superseded`).
    """
    app = app or get_app(client_id)
    run_id = next(_run_ids)
    queue: asyncio.Queue[UiCommand] = asyncio.Queue()

    def sink(cmd: UiCommand) -> None:
        if _current_run.get() == run_id:
            queue.put_nowait(cmd)

    unsubscribe = app.recorder.subscribe(sink)
    task = asyncio.create_task(_tagged_run(app.session, text, run_id))
    try:
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
            if getter in done:
                yield _command_event(getter.result())
                continue
            getter.cancel()
            break
        while not queue.empty():
            yield _command_event(queue.get_nowait())

        outcome = task.result()
        yield format_event(
            EventType.outcome,
            json.dumps({"outcome": outcome.value, "input": classify_input(text)}),
        )
    except Exception as e:
        logger.exception("search failed for %r", text)
        yield format_event(EventType.error, json.dumps({"message": f"{type(e).__name__}: {e}"}))
    finally:
        unsubscribe()


def select_result(index: int, client_id: str = DEFAULT_CLIENT) -> dict[str, Any] | None:
    """Highlight the client's listed result at `index`; None when there is no such row."""
    app = get_app(client_id)
    if index >= len(app.session.state.results):
        return None

    captured: list[UiCommand] = []
    unsubscribe = app.recorder.subscribe(captured.append)
    try:
        highlight = app.session.select(index)
    finally:
        unsubscribe()
    return {
        "highlight": {
            "layerId": highlight.layer_id,
            "featureIds": sorted(highlight.feature_ids),
            "title": highlight.title,
            "mode": highlight.mode,
        },
        "commands": [c.as_dict() for c in captured],
    }


async def autocomplete(text: str, client_id: str = DEFAULT_CLIENT) -> list[dict[str, Any]]:
    suggestions = await get_app(client_id).session.autocomplete(text)
    return [s.as_dict() for s in suggestions]


def translations_for(locale: str) -> dict[str, Any] | None:
    t = get_registry().translations
    if locale not in t.locales():
        return None
    return t.texts(locale)
