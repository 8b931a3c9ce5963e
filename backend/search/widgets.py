from __future__ import annotations

from typing import Protocol

from geocode.nominatim import GeocodeResult
from query.types import ResultItem
from ui.commands import CommandRecorder


class SearchBar(Protocol):
    def set_text(self, text: str) -> None: ...

    def set_placeholder(self, text: str) -> None: ...


class ResultList(Protocol):
    def show_loading(self) -> None: ...

    def show_results(self, items: tuple[ResultItem, ...]) -> None: ...

    def show_geocoded(self, places: list[GeocodeResult]) -> None: ...

    def show_not_found(self, caption: str) -> None: ...

    def erase_markers(self) -> None: ...

    def clear(self) -> None: ...


class SidePanel(Protocol):
    def open(self, tab_id: str) -> None: ...


class RecordingSearchBar:
    def __init__(self, recorder: CommandRecorder):
        self.recorder = recorder
        self.text = ""
        self.placeholder = ""

    def set_text(self, text: str) -> None:
        self.text = text
        self.recorder.record("searchBar", "setText", text=text)

    def set_placeholder(self, text: str) -> None:
        self.placeholder = text
        self.recorder.record("searchBar", "setPlaceholder", text=text)


class RecordingResultList:
    """
    Result list state: "empty", "loading", "results", "geocoded" or "notFound".

    Rows are numbered from 1 in display order; row N selects result N-1.
    """

    def __init__(self, recorder: CommandRecorder):
        self.recorder = recorder
        self.mode = "empty"
        self.rows: list[dict] = []
        self.caption: str | None = None

    def show_loading(self) -> None:
        self.mode, self.rows, self.caption = "loading", [], None
        self.recorder.record("resultList", "showLoading")

    def show_results(self, items: tuple[ResultItem, ...]) -> None:
        self.mode, self.caption = "results", None
        self.rows = [
            {"position": i + 1, "label": it.label, "id": it.id, "item": it.as_dict()}
            for i, it in enumerate(items)
        ]
        self.recorder.record("resultList", "showResults", rows=self.rows)

    def show_geocoded(self, places: list[GeocodeResult]) -> None:
        self.mode, self.caption = "geocoded", None
        self.rows = [{"position": i + 1, **p.as_dict()} for i, p in enumerate(places)]
        self.recorder.record("resultList", "showGeocoded", rows=self.rows)

    def show_not_found(self, caption: str) -> None:
        self.mode, self.rows, self.caption = "notFound", [], caption
        self.recorder.record("resultList", "showNotFound", caption=caption)

    def erase_markers(self) -> None:
        self.recorder.record("resultList", "eraseMarkers")

    def clear(self) -> None:
        self.mode, self.rows, self.caption = "empty", [], None
        self.recorder.record("resultList", "clear")


class RecordingSidePanel:
    def __init__(self, recorder: CommandRecorder):
        self.recorder = recorder
        self.open_tab: str | None = None

    def open(self, tab_id: str) -> None:
        self.open_tab = tab_id
        self.recorder.record("sidePanel", "open", tabId=tab_id)
