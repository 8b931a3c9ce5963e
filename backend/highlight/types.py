from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Highlight:
    """
    Emphasis for a subset of features in a single layer.
    """

    layer_id: str
    feature_ids: set[str]
    title: str | None = None
    # "filter": layer was hidden and is now shown filtered to the feature.
    # "outline": layer already visible; only the outline marks the feature.
    mode: str = "filter"
