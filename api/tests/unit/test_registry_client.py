"""
Tests unitarios para UpstreamRegistryClient.

Se usa httpx.MockTransport para simular el registro upstream sin red.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List

import httpx
import pytest

from subregistry.infrastructure.external.registry_sync.registry_client import (
    UpstreamApiError,
    UpstreamRegistryClient,
)


BASE_URL = "https://registry.test/v0"


def _client(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> UpstreamRegistryClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return UpstreamRegistryClient(base_url=BASE_URL, client=http_client, **kwargs)


async def _collect(client: UpstreamRegistryClient, watermark=None) -> List[dict]:
    return [raw async for raw in client.fetch_since(watermark)]


class TestPagination:
    """Seguimiento del cursor de upstream."""

    @pytest.mark.asyncio
    async def test_follows_next_cursor_until_null(self) -> None:
        pages = {
            None: {"servers": [{"n": 1}, {"n": 2}], "metadata": {"nextCursor": "a/x:1.0.0"}},
            "a/x:1.0.0": {"servers": [{"n": 3}], "metadata": {"nextCursor": "b/y:2.0.0"}},
            "b/y:2.0.0": {"servers": [{"n": 4}], "metadata": {"nextCursor": None}},
        }
        seen_cursors = []

        def handler(request: httpx.Request) -> httpx.Response:
            cursor = request.url.params.get("cursor")
            seen_cursors.append(cursor)
            return httpx.Response(200, json=pages[cursor])

        records = await _collect(_client(handler))

        assert [r["n"] for r in records] == [1, 2, 3, 4]
        assert seen_cursors == [None, "a/x:1.0.0", "b/y:2.0.0"]

    @pytest.mark.asyncio
    async def test_missing_metadata_means_last_page(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"servers": [{"n": 1}]})

        assert await _collect(_client(handler)) == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_repeated_cursor_aborts(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"servers": [], "metadata": {"nextCursor": "a/x:1"}})

        with pytest.raises(UpstreamApiError, match="repitio el cursor"):
            await _collect(_client(handler))


class TestRequestParams:
    """Parametros enviados al upstream."""

    @pytest.mark.asyncio
    async def test_watermark_is_sent_as_rfc3339(self) -> None:
        captured = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"servers": [], "metadata": {}})

        watermark = datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc)
        await _collect(_client(handler, page_limit=50), watermark)

        params = captured[0].url.params
        assert params["updated_since"] == "2025-03-01T12:30:00Z"
        assert params["limit"] == "50"
        assert captured[0].url.path == "/v0/servers"
        assert captured[0].headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_watermark_means_full_fetch(self) -> None:
        captured = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"servers": []})

        await _collect(_client(handler))

        assert "updated_since" not in captured[0].url.params
        assert "limit" not in captured[0].url.params

    @pytest.mark.asyncio
    async def test_user_agent_header(self) -> None:
        captured = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"servers": []})

        await _collect(_client(handler, user_agent="Subregistry/9.9"))

        assert captured[0].headers["User-Agent"] == "Subregistry/9.9"


class TestErrors:
    """Cualquier error del upstream aborta el fetch con UpstreamApiError."""

    @pytest.mark.asyncio
    async def test_non_2xx_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(UpstreamApiError) as exc_info:
            await _collect(_client(handler))

        assert exc_info.value.status_code == 503
        assert "Failed to fetch from official registry: 503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_on_second_page_after_yielding_first(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("cursor"):
                return httpx.Response(500)
            return httpx.Response(200, json={"servers": [{"n": 1}], "metadata": {"nextCursor": "a/x:1"}})

        received = []
        with pytest.raises(UpstreamApiError):
            async for raw in _client(handler).fetch_since(None):
                received.append(raw)

        assert received == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("lento", request=request)

        with pytest.raises(UpstreamApiError, match="Timeout"):
            await _collect(_client(handler))

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("sin conexion", request=request)

        with pytest.raises(UpstreamApiError, match="transporte"):
            await _collect(_client(handler))

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>no</html>")

        with pytest.raises(UpstreamApiError, match="JSON"):
            await _collect(_client(handler))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"items": []},
            {"servers": "no-lista"},
            {"servers": [], "metadata": "x"},
            {"servers": [], "metadata": {"nextCursor": 7}},
        ],
    )
    async def test_invalid_envelope(self, payload) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=payload)

        with pytest.raises(UpstreamApiError):
            await _collect(_client(handler))
