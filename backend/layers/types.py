from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class VectorFeature:
    id: str
    props: dict[str, Any]


@dataclass(frozen=True)
class FeatureFilter:
    """
    Attribute filter applied to a vector layer on the map.

    `match` maps attribute name -> required value; all entries must match.
    `None` means "render every feature".
    """

    match: dict[str, str] | None = None

    @classmethod
    def everything(cls) -> "FeatureFilter":
        return cls(match=None)

    @classmethod
    def only(cls, **attrs: str) -> "FeatureFilter":
        return cls(match={k: str(v) for k, v in attrs.items()})

    def matches(self, props: dict[str, Any]) -> bool:
        if self.match is None:
            return True
        return all(str((props or {}).get(k)) == v for k, v in self.match.items())

    def as_dict(self) -> dict[str, Any]:
        return {"match": dict(self.match) if self.match is not None else None}


@dataclass
class VectorLayer:
    """
    A map layer as seen from the layer tree: stable id, tree visibility,
    whether it is currently added to the map, and its active filter.
    """

    id: str
    title: str
    features: list[VectorFeature] = field(default_factory=list)
    visible_in_tree: bool = True
    on_map: bool = True
    filter: FeatureFilter = field(default_factory=FeatureFilter.everything)

    def rendered_features(self) -> list[VectorFeature]:
        if not self.on_map:
            return []
        return [f for f in self.features if self.filter.matches(f.props)]
