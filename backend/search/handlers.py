from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from chain.observer_chain import NEXT, STOP, DispatchToken, Observer, Resolution, SearchParams
from geo.coords import parse_coordinates
from geocode.nominatim import GeocodeResult
from query.collection import QueryCollection
from query.transport import QueryTransport
from query.types import ResultItem, SearchQuery
from search.state import SessionState
from settings.types import SearchServiceConfig
from viewport.types import MapViewport


@dataclass(frozen=True)
class Suggestion:
    """One autocomplete entry: a layer feature or a geocoded place."""

    label: str
    value: str
    item: ResultItem | None = None
    place: GeocodeResult | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "value": self.value,
            "item": self.item.as_dict() if self.item is not None else None,
            "place": self.place.as_dict() if self.place is not None else None,
        }


def suggestion_for(item: ResultItem) -> Suggestion:
    label = f"{item.id} {item.label}" if item.id else item.label
    return Suggestion(label=label, value=item.label, item=item)


def suggestion_for_place(place: GeocodeResult) -> Suggestion:
    return Suggestion(label=place.label, value=place.label, place=place)


def coordinate_autocomplete_observer() -> Observer:
    """Coordinates need no suggestions: claim them so nothing else runs."""

    async def coordinates(params: SearchParams, token: DispatchToken) -> Resolution:
        return STOP if parse_coordinates(params.search_string) is not None else NEXT

    return coordinates


def coordinate_search_observer(viewport: MapViewport, state: SessionState) -> Observer:
    """
    Jump to a typed lat/lon and drop a draggable marker there.

    Any earlier dropped marker is removed on every submission.
    """

    async def coordinates(params: SearchParams, token: DispatchToken) -> Resolution:
        pos = parse_coordinates(params.search_string)
        if state.marker is not None:
            viewport.remove_layer(state.marker)
            state.marker = None
        if pos is None:
            return NEXT
        viewport.pan_to(pos)
        state.marker = viewport.add_marker(pos, title=params.search_string, draggable=True)
        return STOP

    return coordinates


async def search_layer_object(
    viewport: MapViewport,
    *,
    transport: QueryTransport,
    service: SearchServiceConfig,
    query: SearchQuery,
) -> QueryCollection:
    """Run one layer search on a fresh collection and return it settled."""
    collection = QueryCollection(viewport, transport=transport, service=service)
    try:
        await collection.dispatch(query)
    finally:
        collection.close()
    return collection
