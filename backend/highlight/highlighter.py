from __future__ import annotations

import logging

from geo.bounds import envelope_to_bbox
from highlight.types import Highlight
from layers.types import FeatureFilter
from query.types import HighlightTarget
from search.state import SessionState
from settings.types import HighlightConfig, SearchServiceConfig
from viewport.types import MapViewport

logger = logging.getLogger(__name__)


class ResultHighlighter:
    def __init__(
        self,
        viewport: MapViewport,
        *,
        config: HighlightConfig,
        service: SearchServiceConfig,
    ):
        self._viewport = viewport
        self._config = config
        self._id_column = service.idColumn
        self._label_column = service.labelColumn

    def clear(self, state: SessionState) -> None:
        for handle in state.highlight:
            self._viewport.remove_layer(handle)
        state.highlight = []

    def highlight(self, target: HighlightTarget, state: SessionState) -> Highlight:
        """
        Zoom to the target and emphasise it on the reference layer.

        If the reference layer is hidden in the layer tree it is added to the map
        filtered down to the one matching feature; if it is visible its filter is
        reset so the whole layer shows.
        """
        self.clear(state)
        layer_id = self._config.layerId

        bounds = None
        if target.bbox is not None:
            bounds = envelope_to_bbox(target.bbox, source_crs=self._config.sourceCrs)
            self._viewport.fit_bounds(bounds)

        mode = "outline"
        visible = self._viewport.is_layer_visible(layer_id)
        if visible is None:
            logger.warning("highlight layer %s is not in the layer tree", layer_id)
        elif not visible:
            self._viewport.set_filter(
                layer_id,
                FeatureFilter.only(**{self._id_column: target.id, self._label_column: target.label}),
            )
            self._viewport.add_layer(layer_id)
            mode = "filter"
        else:
            self._viewport.set_filter(layer_id, FeatureFilter.everything())

        if bounds is not None and self._config.drawOutline:
            state.highlight.append(
                self._viewport.add_overlay(bounds.polygon(), style=dict(self._config.outlineStyle))
            )

        return Highlight(layer_id=layer_id, feature_ids={target.id}, title=target.label, mode=mode)
