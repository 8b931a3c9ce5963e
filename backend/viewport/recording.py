from __future__ import annotations

import itertools
from typing import Any, Callable

from shapely.geometry import Polygon, mapping

from geo.bounds import BBox, LatLng
from layers.types import FeatureFilter, VectorLayer
from ui.commands import CommandRecorder
from ui.events import EventEmitter
from viewport.types import MapHandle, MarkerHandle, OverlayHandle

_DEFAULT_VIEW = BBox(min_lon=-180.0, min_lat=-85.0, max_lon=180.0, max_lat=85.0)


class RecordingViewport:
    """
    Keeps map state in memory and records every change as a UI command.

    Layers come from the layer tree (`layers`); markers and overlays are the
    transient artifacts the search control adds and removes.
    """

    def __init__(
        self,
        recorder: CommandRecorder | None = None,
        *,
        layers: list[VectorLayer] | None = None,
        view: BBox | None = None,
    ):
        self.recorder = recorder or CommandRecorder()
        self.layers: dict[str, VectorLayer] = {l.id: l for l in layers or []}
        self.view = view or _DEFAULT_VIEW
        self.center: LatLng = self.view.center()
        self.markers: dict[str, MarkerHandle] = {}
        self.overlays: dict[str, OverlayHandle] = {}
        self._ids = itertools.count(1)
        self._events = EventEmitter()

    def pan_to(self, point: LatLng) -> None:
        b = self.view
        half_lon = (b.max_lon - b.min_lon) / 2.0
        half_lat = (b.max_lat - b.min_lat) / 2.0
        self.center = point
        self._set_view(
            BBox(
                min_lon=point.lon - half_lon,
                min_lat=point.lat - half_lat,
                max_lon=point.lon + half_lon,
                max_lat=point.lat + half_lat,
            )
        )
        self.recorder.record("map", "panTo", lat=point.lat, lon=point.lon)

    def fit_bounds(self, bounds: BBox) -> None:
        b = bounds.normalized()
        self.center = b.center()
        self._set_view(b)
        self.recorder.record("map", "fitBounds", bounds=b.as_dict())

    def bounds(self) -> BBox:
        return self.view

    def add_marker(self, point: LatLng, *, title: str, draggable: bool = True) -> MarkerHandle:
        handle = MarkerHandle(id=f"marker-{next(self._ids)}", position=point, title=title, draggable=draggable)
        self.markers[handle.id] = handle
        self.recorder.record(
            "map",
            "addMarker",
            id=handle.id,
            lat=point.lat,
            lon=point.lon,
            title=title,
            draggable=draggable,
        )
        return handle

    def add_overlay(self, geometry: Polygon, *, style: dict[str, Any]) -> OverlayHandle:
        handle = OverlayHandle(id=f"overlay-{next(self._ids)}", geometry=geometry, style=dict(style))
        self.overlays[handle.id] = handle
        self.recorder.record("map", "addOverlay", id=handle.id, geometry=mapping(geometry), style=dict(style))
        return handle

    def remove_layer(self, handle: MapHandle) -> None:
        removed = self.markers.pop(handle.id, None) or self.overlays.pop(handle.id, None)
        if removed is not None:
            self.recorder.record("map", "removeLayer", id=handle.id)

    def add_layer(self, layer_id: str) -> None:
        layer = self.layers.get(layer_id)
        if layer is None:
            raise KeyError(f"Unknown layer: {layer_id}")
        layer.on_map = True
        self.recorder.record("map", "addLayer", layerId=layer_id)

    def set_filter(self, layer_id: str, flt: FeatureFilter) -> None:
        layer = self.layers.get(layer_id)
        if layer is None:
            raise KeyError(f"Unknown layer: {layer_id}")
        layer.filter = flt
        self.recorder.record("map", "setFilter", layerId=layer_id, filter=flt.as_dict())

    def is_layer_visible(self, layer_id: str) -> bool | None:
        layer = self.layers.get(layer_id)
        return None if layer is None else layer.visible_in_tree

    def on_view_change(self, callback: Callable[[BBox], None]) -> Callable[[], None]:
        return self._events.on("moveend", callback)

    def view_change_listeners(self) -> int:
        return self._events.listener_count("moveend")

    def _set_view(self, bounds: BBox) -> None:
        self.view = bounds
        self._events.trigger("moveend", bounds)
