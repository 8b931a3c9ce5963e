from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pyproj import Transformer
from shapely.geometry import Polygon
from shapely.geometry import box as shapely_box


@dataclass(frozen=True)
class LatLng:
    lat: float
    lon: float


@dataclass(frozen=True)
class BBox:
    """
    WGS84 bounding box in lon/lat degrees.

    Convention used throughout this repo:
    - minLon, minLat, maxLon, maxLat
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def normalized(self) -> "BBox":
        return BBox(
            min_lon=min(self.min_lon, self.max_lon),
            min_lat=min(self.min_lat, self.max_lat),
            max_lon=max(self.min_lon, self.max_lon),
            max_lat=max(self.min_lat, self.max_lat),
        )

    def center(self) -> LatLng:
        b = self.normalized()
        return LatLng(lat=(b.min_lat + b.max_lat) / 2.0, lon=(b.min_lon + b.max_lon) / 2.0)

    def polygon(self) -> Polygon:
        b = self.normalized()
        return shapely_box(b.min_lon, b.min_lat, b.max_lon, b.max_lat)

    def as_dict(self) -> dict[str, float]:
        return {
            "minLon": self.min_lon,
            "minLat": self.min_lat,
            "maxLon": self.max_lon,
            "maxLat": self.max_lat,
        }


@dataclass(frozen=True)
class Envelope:
    """
    Axis-aligned feature envelope in the search service's native projection.
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @classmethod
    def from_row(cls, row: dict) -> "Envelope | None":
        try:
            return cls(
                xmin=float(row["xmin"]),
                ymin=float(row["ymin"]),
                xmax=float(row["xmax"]),
                ymax=float(row["ymax"]),
            )
        except (KeyError, TypeError, ValueError):
            return None


@lru_cache(maxsize=8)
def transformer_to_4326(source_crs: str) -> Transformer:
    return Transformer.from_crs(source_crs, "EPSG:4326", always_xy=True)


def envelope_to_bbox(env: Envelope, *, source_crs: str = "EPSG:3395") -> BBox:
    """
    Unproject a native envelope into lon/lat bounds.

    The service reports envelopes in World Mercator (EPSG:3395), not Web Mercator.
    """
    t = transformer_to_4326(source_crs)
    min_lon, min_lat = t.transform(float(env.xmin), float(env.ymin))
    max_lon, max_lat = t.transform(float(env.xmax), float(env.ymax))
    return BBox(
        min_lon=float(min_lon),
        min_lat=float(min_lat),
        max_lon=float(max_lon),
        max_lat=float(max_lat),
    ).normalized()
