from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from shapely.geometry import Polygon

from geo.bounds import BBox, LatLng
from layers.types import FeatureFilter


@dataclass(frozen=True)
class MarkerHandle:
    id: str
    position: LatLng
    title: str
    draggable: bool = True


@dataclass(frozen=True)
class OverlayHandle:
    """
    A transient geometry drawn on top of the map (e.g. a highlight outline).
    """

    id: str
    geometry: Polygon
    style: dict[str, Any]


MapHandle = MarkerHandle | OverlayHandle


class MapViewport(Protocol):
    """
    Map surface the search control drives.

    - RecordingViewport: in-memory state + UI command log (tests, HTTP API)
    - a browser map: executes the streamed commands
    """

    def pan_to(self, point: LatLng) -> None: ...

    def fit_bounds(self, bounds: BBox) -> None: ...

    def bounds(self) -> BBox: ...

    def add_marker(self, point: LatLng, *, title: str, draggable: bool = True) -> MarkerHandle: ...

    def add_overlay(self, geometry: Polygon, *, style: dict[str, Any]) -> OverlayHandle: ...

    def remove_layer(self, handle: MapHandle) -> None: ...

    def add_layer(self, layer_id: str) -> None: ...

    def set_filter(self, layer_id: str, flt: FeatureFilter) -> None: ...

    # None when the layer tree has no such layer.
    def is_layer_visible(self, layer_id: str) -> bool | None: ...

    def on_view_change(self, callback: Callable[[BBox], None]) -> Callable[[], None]: ...
