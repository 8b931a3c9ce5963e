from __future__ import annotations

import logging
from typing import Callable, Iterator

from geo.bounds import BBox
from query.errors import ServerError, TransportError
from query.params import build_query_params, parse_response
from query.transport import QueryTransport
from query.types import QueryError, QueryStatus, ResultItem, SearchQuery
from settings.types import SearchServiceConfig
from ui.events import EventEmitter
from viewport.types import MapViewport

logger = logging.getLogger(__name__)


class QueryCollection:
    """
    Result set of one layer search plus its lifecycle status.

    Events (on `self.events`):
    - "status" (QueryStatus) on every status change
    - "update" once per executed dispatch, after the status left `pending`
    - "error" (QueryError) after "update" when the dispatch failed

    Listen to "update" and check `status()`: an error also fires "update".
    """

    def __init__(
        self,
        viewport: MapViewport,
        *,
        transport: QueryTransport,
        service: SearchServiceConfig,
    ):
        self._viewport = viewport
        self._transport = transport
        self._service = service
        self._status = QueryStatus.idle
        self._items: tuple[ResultItem, ...] = ()
        self.events = EventEmitter()
        self.view_box: BBox | None = None
        self._unsubscribe: Callable[[], None] | None = viewport.on_view_change(self._update_view_box)
        self._update_view_box(viewport.bounds())

    def status(self) -> QueryStatus:
        return self._status

    @property
    def items(self) -> tuple[ResultItem, ...]:
        return self._items

    def first(self) -> ResultItem | None:
        return self._items[0] if self._items else None

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ResultItem]:
        return iter(self._items)

    async def dispatch(self, query: SearchQuery) -> None:
        # A second dispatch while one is in flight would race on `_items`.
        if self._status is QueryStatus.pending:
            logger.debug("dispatch ignored, query still pending: %r", query.raw_text)
            return

        view_box = self.view_box if self._service.restrictToView else None
        params = build_query_params(query, self._service, view_box=view_box)
        self._set_status(QueryStatus.pending)
        try:
            resp = await self._transport.send(self._service.serverScript, params)
            items = parse_response(resp, self._service)
        except (TransportError, ServerError) as e:
            kind = "transport" if isinstance(e, TransportError) else "server"
            logger.warning("layer search failed (%s) for %r: %s", kind, query.raw_text, e)
            self._items = ()
            self._set_status(QueryStatus.error)
            self.events.trigger("update")
            self.events.trigger("error", QueryError(kind=kind, message=str(e)))
            return

        self._items = tuple(items)
        self._set_status(QueryStatus.success)
        self.events.trigger("update")

    def close(self) -> None:
        """Stop following viewport changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _set_status(self, status: QueryStatus) -> None:
        self._status = status
        self.events.trigger("status", status)

    def _update_view_box(self, bounds: BBox) -> None:
        self.view_box = bounds
