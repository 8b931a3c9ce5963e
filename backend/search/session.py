from __future__ import annotations

import logging

from chain.observer_chain import (
    NEXT,
    STOP,
    ChainOutcome,
    DispatchToken,
    EventKind,
    ObserverChain,
    Resolution,
    SearchParams,
)
from geo.coords import has_text
from geocode.nominatim import Geocoder, GeocodeResult
from highlight.highlighter import ResultHighlighter
from highlight.types import Highlight
from i18n.translations import Translations
from query.collection import QueryCollection
from query.errors import GeocoderError
from query.transport import QueryTransport
from query.types import QueryStatus, ResultItem, SearchQuery
from search.handlers import (
    Suggestion,
    coordinate_autocomplete_observer,
    coordinate_search_observer,
    search_layer_object,
    suggestion_for,
    suggestion_for_place,
)
from search.state import SessionState
from search.widgets import ResultList, SearchBar, SidePanel
from settings.types import SearchConfig
from ui.events import EventEmitter
from viewport.types import MapViewport

logger = logging.getLogger(__name__)


class SearchSession:
    """
    Drives user-initiated searches from the search bar to the map.

    Submissions go through the `searchStarting` chain: typed coordinates are
    claimed first, then the layer search; unclaimed input falls through to the
    generic geocoder. Lifecycle signals on `self.events`:
    - "before_search": result panel opened (loading)
    - "after_search": results or the not-found caption rendered
    - "repaint": layout should re-measure; fired with both of the above
    """

    def __init__(
        self,
        *,
        viewport: MapViewport,
        transport: QueryTransport,
        search_bar: SearchBar,
        result_list: ResultList,
        side_panel: SidePanel,
        geocoder: Geocoder,
        translations: Translations,
        config: SearchConfig,
        chain: ObserverChain | None = None,
    ):
        self.viewport = viewport
        self.transport = transport
        self.search_bar = search_bar
        self.result_list = result_list
        self.side_panel = side_panel
        self.geocoder = geocoder
        self.translations = translations
        self.config = config
        self.chain = chain or ObserverChain()
        self.state = SessionState()
        self.events = EventEmitter()
        self.highlighter = ResultHighlighter(viewport, config=config.highlight, service=config.service)
        self._generation = 0
        self._installed = False

    def install(self) -> None:
        """
        Replace the default plain-text search with the coordinate + layer search stages.

        Runs once; later calls are no-ops.
        """
        if self._installed:
            return
        self._installed = True
        self.search_bar.set_placeholder(self.translations.get_text("SearchControl.SearchPlaceholder"))
        self.chain.clear_default(EventKind.search_starting)
        self.chain.install_observer(
            EventKind.autocomplete_starting, coordinate_autocomplete_observer(), name="coordinates"
        )
        self.chain.install_observer(
            EventKind.search_starting,
            coordinate_search_observer(self.viewport, self.state),
            name="coordinates",
        )
        self.chain.install_observer(
            EventKind.autocomplete_starting, self._layer_autocomplete, name="layerSearch"
        )
        self.chain.install_observer(EventKind.search_starting, self._layer_search, name="layerSearch")

    async def run(self, search_string: str) -> ChainOutcome:
        if not has_text(search_string):
            return ChainOutcome.handled

        self._generation += 1
        generation = self._generation
        self.state.panel_open = False
        outcome = await self.chain.dispatch_event(
            EventKind.search_starting, SearchParams(search_string=search_string)
        )
        if outcome is ChainOutcome.deferred and generation == self._generation:
            await self._geocode(search_string, generation)
        return outcome

    async def autocomplete(self, text: str) -> list[Suggestion]:
        if not has_text(text):
            return []
        collected: list[Suggestion] = []
        outcome = await self.chain.dispatch_event(
            EventKind.autocomplete_starting, SearchParams(search_string=text, suggest=collected.extend)
        )
        if outcome is ChainOutcome.deferred:
            places = await self._geocoder_places(text)
            return [suggestion_for_place(p) for p in places]
        if outcome is ChainOutcome.superseded:
            return []
        return collected

    def select(self, index: int) -> Highlight:
        """Highlight the listed result at `index` (0-based)."""
        item = self.state.results[index]
        return self.highlighter.highlight(item.target(), self.state)

    def select_suggestion(self, suggestion: Suggestion) -> Highlight | None:
        if suggestion.item is not None:
            return self.highlighter.highlight(suggestion.item.target(), self.state)
        if suggestion.place is not None:
            self._show_place(suggestion.place)
        return None

    async def _layer_search(self, params: SearchParams, token: DispatchToken) -> Resolution:
        if not has_text(params.search_string):
            return STOP

        self._before_search()
        collection = await self._search_layer(SearchQuery(raw_text=params.search_string))
        if token.superseded:
            self._drop_stale_loading()
            return NEXT
        if collection.status() is QueryStatus.success and not collection.is_empty():
            self._show_results(collection.items)
            return STOP
        # Nothing found or the layer search failed: let the geocoder try.
        return NEXT

    async def _layer_autocomplete(self, params: SearchParams, token: DispatchToken) -> Resolution:
        if not has_text(params.search_string):
            return STOP

        collection = await self._search_layer(
            SearchQuery(
                raw_text=params.search_string,
                page_size=self.config.service.autocompletePageSize,
            )
        )
        if token.superseded:
            return NEXT
        if collection.status() is QueryStatus.success and not collection.is_empty():
            if params.suggest is not None:
                params.suggest([suggestion_for(item) for item in collection])
            return STOP
        return NEXT

    async def _search_layer(self, query: SearchQuery) -> QueryCollection:
        return await search_layer_object(
            self.viewport,
            transport=self.transport,
            service=self.config.service,
            query=query,
        )

    def _before_search(self) -> None:
        self.state.panel_open = True
        self.side_panel.open(self.config.resultTabId)
        self.result_list.show_loading()
        self.events.trigger("before_search")
        self.events.trigger("repaint")

    def _drop_stale_loading(self) -> None:
        # The newer submission never opened the panel (a coordinate jump), so
        # nothing will replace this run's loading state.
        if not self.state.panel_open:
            self.result_list.clear()
            self._after_search()

    def _after_search(self) -> None:
        self.events.trigger("after_search")
        self.events.trigger("repaint")

    def _show_results(self, items: tuple[ResultItem, ...]) -> None:
        self.state.results = items
        self.result_list.erase_markers()
        first = items[0]
        self.search_bar.set_text(first.label)
        self.highlighter.highlight(first.target(), self.state)
        self.result_list.show_results(items)
        self._after_search()

    async def _geocode(self, text: str, generation: int) -> None:
        if not self.state.panel_open:
            self._before_search()
        places = await self._geocoder_places(text)
        if generation != self._generation:
            self._drop_stale_loading()
            return

        self.state.results = ()
        self.highlighter.clear(self.state)
        if places:
            self.result_list.show_geocoded(places)
            self._show_place(places[0])
        else:
            self.result_list.show_not_found(self.translations.get_text("SearchControl.NoResult"))
        self._after_search()

    async def _geocoder_places(self, text: str) -> list[GeocodeResult]:
        try:
            return await self.geocoder.search(text, limit=self.config.geocoder.limit)
        except GeocoderError as e:
            logger.warning("geocoder failed for %r: %s", text, e)
            return []

    def _show_place(self, place: GeocodeResult) -> None:
        if place.bbox is not None:
            self.viewport.fit_bounds(place.bbox)
        else:
            self.viewport.pan_to(place.position)
