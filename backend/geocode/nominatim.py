from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from geo.bounds import BBox, LatLng
from query.errors import GeocoderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    label: str
    position: LatLng
    bbox: BBox | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "lat": self.position.lat,
            "lon": self.position.lon,
            "bbox": self.bbox.as_dict() if self.bbox is not None else None,
        }


class Geocoder(Protocol):
    async def search(self, text: str, *, limit: int) -> list[GeocodeResult]: ...

    async def aclose(self) -> None: ...


class NullGeocoder:
    """Geocoding switched off: every lookup finds nothing."""

    async def search(self, text: str, *, limit: int) -> list[GeocodeResult]:
        return []

    async def aclose(self) -> None:
        return None


def _parse_place(item: dict[str, Any]) -> GeocodeResult | None:
    try:
        position = LatLng(lat=float(item["lat"]), lon=float(item["lon"]))
    except (KeyError, TypeError, ValueError):
        return None
    bbox = None
    # Nominatim order: [min_lat, max_lat, min_lon, max_lon]
    raw = item.get("boundingbox")
    if isinstance(raw, list) and len(raw) == 4:
        try:
            min_lat, max_lat, min_lon, max_lon = (float(v) for v in raw)
            bbox = BBox(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)
        except (TypeError, ValueError):
            bbox = None
    label = str(item.get("display_name") or item.get("name") or "")
    return GeocodeResult(label=label, position=position, bbox=bbox)


class NominatimGeocoder:
    """Free-text place lookup against an OSM Nominatim endpoint."""

    def __init__(
        self,
        url: str,
        *,
        client: httpx.AsyncClient | None = None,
        user_agent: str = "fsc-map-search",
        timeout_s: float = 10.0,
    ):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None
        self._headers = {"User-Agent": user_agent}

    async def search(self, text: str, *, limit: int) -> list[GeocodeResult]:
        try:
            resp = await self._client.get(
                self.url,
                params={"q": text, "format": "jsonv2", "limit": str(int(limit))},
                headers=self._headers,
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise GeocoderError(f"{type(e).__name__}: {e}") from e
        if not isinstance(data, list):
            raise GeocoderError(f"Unexpected geocoder reply: {type(data).__name__}")
        places = [p for p in (_parse_place(i) for i in data if isinstance(i, dict)) if p is not None]
        logger.debug("geocoder found %d places for %r", len(places), text)
        return places[:limit]

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
