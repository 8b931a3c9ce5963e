from __future__ import annotations

import logging
from dataclasses import dataclass

from geocode.nominatim import Geocoder, NominatimGeocoder, NullGeocoder
from i18n.translations import Translations, default_translations
from layers.types import VectorLayer
from query.duckdb_transport import DuckDBQueryTransport
from query.transport import HttpQueryTransport, QueryTransport
from search.session import SearchSession
from search.widgets import RecordingResultList, RecordingSearchBar, RecordingSidePanel
from settings.config import resolve_repo_path
from settings.types import SearchConfig
from ui.commands import CommandRecorder
from viewport.recording import RecordingViewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordingApp:
    """A search session wired to recording collaborators that share one command log."""

    session: SearchSession
    recorder: CommandRecorder
    viewport: RecordingViewport
    search_bar: RecordingSearchBar
    result_list: RecordingResultList
    side_panel: RecordingSidePanel


def build_transport(config: SearchConfig) -> QueryTransport:
    if config.transport == "duckdb":
        if not config.featuresCsv:
            raise ValueError("transport 'duckdb' needs `featuresCsv`")
        path = resolve_repo_path(config.featuresCsv)
        logger.info("layer search answered locally from %s", path)
        return DuckDBQueryTransport.from_csv(path, layer_id=config.service.layerId)
    return HttpQueryTransport(timeout_s=config.service.timeoutS)


def build_geocoder(config: SearchConfig) -> Geocoder:
    g = config.geocoder
    if not g.enabled:
        return NullGeocoder()
    return NominatimGeocoder(g.url, user_agent=g.userAgent, timeout_s=g.timeoutS)


def reference_layer(config: SearchConfig) -> VectorLayer:
    # Hidden in the layer tree until a search result filters it onto the map.
    return VectorLayer(
        id=config.highlight.layerId,
        title="FSC concessions",
        visible_in_tree=False,
        on_map=False,
    )


def build_recording_app(
    config: SearchConfig,
    *,
    transport: QueryTransport | None = None,
    geocoder: Geocoder | None = None,
    translations: Translations | None = None,
    layers: list[VectorLayer] | None = None,
    history: int | None = None,
) -> RecordingApp:
    recorder = CommandRecorder(history=history)
    viewport = RecordingViewport(recorder, layers=layers if layers is not None else [reference_layer(config)])
    search_bar = RecordingSearchBar(recorder)
    result_list = RecordingResultList(recorder)
    side_panel = RecordingSidePanel(recorder)
    session = SearchSession(
        viewport=viewport,
        transport=transport or build_transport(config),
        search_bar=search_bar,
        result_list=result_list,
        side_panel=side_panel,
        geocoder=geocoder or build_geocoder(config),
        translations=translations or default_translations(config.locale),
        config=config,
    )
    session.install()
    return RecordingApp(
        session=session,
        recorder=recorder,
        viewport=viewport,
        search_bar=search_bar,
        result_list=result_list,
        side_panel=side_panel,
    )
