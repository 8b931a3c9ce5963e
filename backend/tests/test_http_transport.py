from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from query.errors import TransportError
from query.transport import HttpQueryTransport

ENDPOINT = "http://maps.example.test/VectorLayer/Search.ashx"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_posts_form_params_and_decodes_json(acme_reply):
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["form"] = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        return httpx.Response(200, json=acme_reply)

    transport = HttpQueryTransport(client=_client(handler))
    out = asyncio.run(transport.send(ENDPOINT, {"layer": "L1", "query": "([A] contains 'x')"}))

    assert out == acme_reply
    assert seen["method"] == "POST"
    assert seen["url"] == ENDPOINT
    assert seen["form"] == {"layer": "L1", "query": "([A] contains 'x')"}


def test_http_status_error_becomes_transport_error():
    transport = HttpQueryTransport(client=_client(lambda r: httpx.Response(502, text="bad gateway")))
    with pytest.raises(TransportError, match="HTTPStatusError"):
        asyncio.run(transport.send(ENDPOINT, {}))


def test_network_error_becomes_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = HttpQueryTransport(client=_client(handler))
    with pytest.raises(TransportError, match="connection refused"):
        asyncio.run(transport.send(ENDPOINT, {}))


def test_non_json_reply_becomes_transport_error():
    transport = HttpQueryTransport(client=_client(lambda r: httpx.Response(200, text="<html>")))
    with pytest.raises(TransportError, match="Invalid JSON"):
        asyncio.run(transport.send(ENDPOINT, {}))


def test_invalid_url_becomes_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.InvalidURL("Invalid port")

    transport = HttpQueryTransport(client=_client(handler))
    with pytest.raises(TransportError, match="InvalidURL"):
        asyncio.run(transport.send(ENDPOINT, {}))


def test_aclose_closes_only_owned_clients():
    async def scenario():
        owned = HttpQueryTransport()
        shared_client = _client(lambda r: httpx.Response(200, json={}))
        borrowed = HttpQueryTransport(client=shared_client)
        await owned.aclose()
        await borrowed.aclose()
        closed = (owned._client.is_closed, shared_client.is_closed)
        await shared_client.aclose()
        return closed

    assert asyncio.run(scenario()) == (True, False)
