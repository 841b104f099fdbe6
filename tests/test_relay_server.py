"""Tests for the relay HTTP API and the client that talks to it."""

from __future__ import annotations

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from fetchrelay.agent.client import RelayClient, parse_headers_json
from fetchrelay.agent.relay import Relay
from fetchrelay.agent.server import create_relay_app
from fetchrelay.shared.types import RequestDescription


def _upstream(request: httpx.Request) -> httpx.Response:
    if request.url.host == "down.test":
        raise httpx.ConnectError("Connection refused", request=request)
    if request.url.path == "/json":
        return httpx.Response(200, headers={"content-type": "application/json"}, content=b'{"a":1}')
    return httpx.Response(
        200,
        headers={"content-type": "text/plain"},
        content=f"{request.method} {request.content.decode()}".encode(),
    )


def _make_app():
    return create_relay_app(Relay(transport=httpx.MockTransport(_upstream)))


def _api_client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://relay")


class TestRelayApi:
    @pytest.mark.asyncio
    async def test_post_json_upstream(self):
        async with _api_client(_make_app()) as client:
            resp = await client.post("/api/agent", json={"url": "http://api.test/json"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert body["status"] == 200
        assert body["statusText"] == "OK"
        assert body["data"] == {"a": 1}
        assert "text" not in body
        assert isinstance(body["durationMs"], int)

    @pytest.mark.asyncio
    async def test_post_relays_method_and_body(self):
        async with _api_client(_make_app()) as client:
            resp = await client.post(
                "/api/agent",
                json={"url": "http://api.test/echo", "method": "put", "body": "hello"},
            )
        assert resp.json()["text"] == "PUT hello"

    @pytest.mark.asyncio
    async def test_post_missing_url_is_400(self):
        async with _api_client(_make_app()) as client:
            resp = await client.post("/api/agent", json={"method": "GET"})
        assert resp.status_code == 400
        assert resp.json() == {
            "ok": False,
            "status": 0,
            "statusText": "BadRequest",
            "headers": {},
            "error": "Missing url",
            "durationMs": 0,
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [b"{not json", b"[1, 2]", b""])
    async def test_post_unusable_body_treated_as_empty(self, content):
        async with _api_client(_make_app()) as client:
            resp = await client.post(
                "/api/agent", content=content, headers={"content-type": "application/json"},
            )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing url"

    @pytest.mark.asyncio
    async def test_post_upstream_failure_is_200(self):
        async with _api_client(_make_app()) as client:
            resp = await client.post("/api/agent", json={"url": "http://down.test/"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is False
        assert body["statusText"] == "FetchError"
        assert "Connection refused" in body["error"]

    @pytest.mark.asyncio
    async def test_get_with_url(self):
        async with _api_client(_make_app()) as client:
            resp = await client.get("/api/agent", params={"url": "http://api.test/plain"})
        assert resp.status_code == 200
        assert resp.json()["text"] == "GET "

    @pytest.mark.asyncio
    async def test_get_without_url_is_400(self):
        async with _api_client(_make_app()) as client:
            resp = await client.get("/api/agent")
        assert resp.status_code == 400
        assert resp.json()["statusText"] == "BadRequest"

    @pytest.mark.asyncio
    async def test_health(self):
        async with _api_client(_make_app()) as client:
            resp = await client.get("/health")
        assert resp.json() == {"status": "ok"}


class TestRelayClient:
    @pytest.mark.asyncio
    async def test_fetch_through_server(self):
        client = RelayClient("http://relay/", transport=ASGITransport(app=_make_app()))
        try:
            result = await client.fetch(
                RequestDescription(url="http://api.test/json", headers={"Accept": "application/json"}),
            )
        finally:
            await client.close()
        assert result.ok is True
        assert result.data == {"a": 1}
        assert result.has_data

    @pytest.mark.asyncio
    async def test_fetch_bad_request_passes_through(self):
        client = RelayClient("http://relay", transport=ASGITransport(app=_make_app()))
        try:
            result = await client.fetch(RequestDescription(url=""))
        finally:
            await client.close()
        assert result.status_text == "BadRequest"

    @pytest.mark.asyncio
    async def test_unreachable_server_is_network_error(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = RelayClient("http://relay", transport=httpx.MockTransport(refuse))
        result = await client.fetch(RequestDescription(url="http://api.test/"))
        await client.close()

        assert result.ok is False
        assert result.status == 0
        assert result.status_text == "Network Error"
        assert result.headers == {}
        assert result.duration_ms == 0
        assert "Connection refused" in result.error

    @pytest.mark.asyncio
    async def test_non_json_reply_is_network_error(self):
        def gateway(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, headers={"content-type": "text/html"}, content=b"<h1>Bad Gateway</h1>")

        client = RelayClient("http://relay", transport=httpx.MockTransport(gateway))
        result = await client.fetch(RequestDescription(url="http://api.test/"))
        await client.close()

        assert result.status_text == "Network Error"
        assert result.error


class TestParseHeadersJson:
    def test_object(self):
        assert parse_headers_json('{"Accept": "application/json"}') == {"Accept": "application/json"}

    @pytest.mark.parametrize("text", ["", None, "not json", "[1, 2]", '"str"'])
    def test_unusable_input(self, text):
        assert parse_headers_json(text) == {}
