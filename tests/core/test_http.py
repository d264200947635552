"""Tests for neighborwatch/core/http.py - outbound HTTP client factory."""

import anyio
import httpx
import pytest

from neighborwatch.core import http as http_module


def _close_and_reset_push_client() -> None:
    """Close and reset the push client singleton (for test cleanup)."""
    anyio.run(http_module.close_push_client)


class TestCreateHttpClient:
    @pytest.mark.asyncio
    async def test_default_timeouts(self):
        client = http_module.create_http_client()
        try:
            timeout = client.timeout

            assert timeout.connect == http_module.DEFAULT_CONNECT_TIMEOUT
            assert timeout.read == http_module.DEFAULT_READ_TIMEOUT
            assert timeout.write == http_module.DEFAULT_WRITE_TIMEOUT
            assert timeout.pool == http_module.DEFAULT_POOL_TIMEOUT
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_custom_timeouts_and_base_url(self):
        client = http_module.create_http_client(
            base_url="https://api.example.com",
            connect_timeout=1.0,
            read_timeout=2.0,
            write_timeout=3.0,
            pool_timeout=4.0,
        )
        try:
            assert client.base_url == httpx.URL("https://api.example.com")
            assert client.timeout.connect == 1.0
            assert client.timeout.read == 2.0
            assert client.timeout.write == 3.0
            assert client.timeout.pool == 4.0
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_override(self):
        """A mock transport receives the requests instead of the network."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"path": request.url.path})

        client = http_module.create_http_client(
            base_url="https://push.example.com", transport=httpx.MockTransport(handler)
        )
        try:
            response = await client.get("/send")
            assert response.json() == {"path": "/send"}
        finally:
            await client.aclose()


class TestPushClient:
    """The shared push client is created lazily and closed on shutdown."""

    @pytest.fixture(autouse=True)
    def reset_push_client(self):
        _close_and_reset_push_client()
        yield
        _close_and_reset_push_client()

    @pytest.mark.asyncio
    async def test_is_singleton(self):
        client1 = http_module.get_push_client()
        client2 = http_module.get_push_client()

        assert isinstance(client1, httpx.AsyncClient)
        assert client1 is client2

    @pytest.mark.asyncio
    async def test_has_push_connection_limits(self):
        client = http_module.get_push_client()
        limits = client._transport._pool._max_connections  # type: ignore[union-attr]

        assert limits == 50

    @pytest.mark.asyncio
    async def test_close_resets_singleton(self):
        client = http_module.get_push_client()

        await http_module.close_push_client()

        assert client.is_closed
        assert http_module._push_client is None

    @pytest.mark.asyncio
    async def test_close_is_safe_without_client(self):
        assert http_module._push_client is None

        await http_module.close_push_client()

        assert http_module._push_client is None

    @pytest.mark.asyncio
    async def test_new_client_after_close(self):
        client1 = http_module.get_push_client()
        await http_module.close_push_client()

        client2 = http_module.get_push_client()

        assert client1 is not client2
        assert not client2.is_closed
