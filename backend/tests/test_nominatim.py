from __future__ import annotations

import asyncio

import httpx
import pytest

from geocode.nominatim import NominatimGeocoder
from query.errors import GeocoderError

URL = "https://nominatim.example.test/search"


def test_parses_places_and_bounding_boxes():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["ua"] = request.headers.get("user-agent")
        return httpx.Response(
            200,
            json=[
                {
                    "display_name": "Arkhangelsk, Russia",
                    "lat": "64.54",
                    "lon": "40.54",
                    "boundingbox": ["64.4", "64.7", "40.3", "40.8"],
                },
                {"display_name": "broken", "lat": "n/a", "lon": "0"},
            ],
        )

    g = NominatimGeocoder(URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), user_agent="t")
    places = asyncio.run(g.search("Arkhangelsk", limit=5))

    assert seen["params"] == {"q": "Arkhangelsk", "format": "jsonv2", "limit": "5"}
    assert seen["ua"] == "t"
    assert len(places) == 1
    p = places[0]
    assert p.label == "Arkhangelsk, Russia"
    assert (p.position.lat, p.position.lon) == (64.54, 40.54)
    assert (p.bbox.min_lon, p.bbox.min_lat, p.bbox.max_lon, p.bbox.max_lat) == (40.3, 64.4, 40.8, 64.7)


def test_failures_raise_geocoder_error():
    g = NominatimGeocoder(URL, client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(503))))
    with pytest.raises(GeocoderError):
        asyncio.run(g.search("x", limit=1))

    g = NominatimGeocoder(URL, client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={}))))
    with pytest.raises(GeocoderError, match="Unexpected"):
        asyncio.run(g.search("x", limit=1))


def test_invalid_url_raises_geocoder_error_and_owned_client_closes():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.InvalidURL("Invalid port")

    g = NominatimGeocoder(URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    with pytest.raises(GeocoderError, match="InvalidURL"):
        asyncio.run(g.search("x", limit=1))

    async def close_owned():
        owned = NominatimGeocoder(URL)
        await owned.aclose()
        return owned._client.is_closed

    assert asyncio.run(close_owned()) is True
