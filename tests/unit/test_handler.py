"""Tests for keepalive transport module."""

import httpx
import pytest
from fakes import FakeBackend

from keepwarm.exceptions import (
    HealthCheckFailedError,
    KeepaliveTransportError,
    MalformedResponseError,
    PingFailedError,
)
from keepwarm.keepalive.handler import (
    HTTPKeepaliveClient,
    KeepaliveTransport,
    ProbeResult,
)

PING_URL = "https://board.example.com/api/ping"
HEALTH_URL = "https://board.example.com/api/health"


class TestProbeResult:
    """Tests for ProbeResult."""

    def test_success(self) -> None:
        result = ProbeResult.success({"message": "awake"})
        assert result.ok is True
        assert result.payload == {"message": "awake"}
        assert result.error is None

    def test_failure(self) -> None:
        error = PingFailedError(500)
        result = ProbeResult.failure(error)
        assert result.ok is False
        assert result.payload is None
        assert result.error is error

    def test_success_with_null_payload_is_ok(self) -> None:
        """A JSON ``null`` body is still a successful probe."""
        assert ProbeResult.success(None).ok is True


class TestKeepaliveTransportProtocol:
    """Tests for KeepaliveTransport protocol."""

    def test_http_client_is_transport(self) -> None:
        assert isinstance(HTTPKeepaliveClient(), KeepaliveTransport)


class TestHTTPKeepaliveClient:
    """Tests for HTTPKeepaliveClient."""

    @pytest.fixture
    def client(self, backend: FakeBackend) -> HTTPKeepaliveClient:
        return HTTPKeepaliveClient(backend.client())

    @pytest.mark.asyncio
    async def test_post_ping_returns_json(
        self, client: HTTPKeepaliveClient, backend: FakeBackend
    ) -> None:
        backend.on_ping = lambda request: httpx.Response(
            200, json={"message": "Server is awake", "nextPing": 1_700_000_600_000}
        )

        data = await client.post_ping(PING_URL)

        assert data == {"message": "Server is awake", "nextPing": 1_700_000_600_000}
        request = backend.requests[0]
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_post_ping_accepts_any_2xx(
        self, client: HTTPKeepaliveClient, backend: FakeBackend
    ) -> None:
        backend.on_ping = lambda request: httpx.Response(202, json={"message": "queued"})

        assert await client.post_ping(PING_URL) == {"message": "queued"}

    @pytest.mark.asyncio
    async def test_post_ping_non_2xx_raises(
        self, client: HTTPKeepaliveClient, backend: FakeBackend
    ) -> None:
        backend.on_ping = lambda request: httpx.Response(404)

        with pytest.raises(PingFailedError) as exc_info:
            await client.post_ping(PING_URL)

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == PING_URL

    @pytest.mark.asyncio
    async def test_get_health_non_2xx_raises(
        self, client: HTTPKeepaliveClient, backend: FakeBackend
    ) -> None:
        backend.on_health = lambda request: httpx.Response(500)

        with pytest.raises(HealthCheckFailedError, match="status: 500"):
            await client.get_health(HEALTH_URL)

    @pytest.mark.asyncio
    async def test_get_health_sends_get(
        self, client: HTTPKeepaliveClient, backend: FakeBackend
    ) -> None:
        data = await client.get_health(HEALTH_URL)

        assert data["status"] == "healthy"
        assert backend.requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_invalid_json_raises_malformed(
        self, client: HTTPKeepaliveClient, backend: FakeBackend
    ) -> None:
        backend.on_ping = lambda request: httpx.Response(200, content=b"{broken")

        with pytest.raises(MalformedResponseError):
            await client.post_ping(PING_URL)

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(
        self, client: HTTPKeepaliveClient, backend: FakeBackend
    ) -> None:
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        backend.on_health = slow

        with pytest.raises(KeepaliveTransportError, match="GET"):
            await client.get_health(HEALTH_URL)

    @pytest.mark.asyncio
    async def test_unsupported_scheme_raises_transport_error(self) -> None:
        client = HTTPKeepaliveClient()
        try:
            with pytest.raises(KeepaliveTransportError):
                await client.post_ping("not a url/api/ping")
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_aclose_leaves_caller_client_open(self, backend: FakeBackend) -> None:
        http = backend.client()
        client = HTTPKeepaliveClient(http)

        await client.aclose()

        assert http.is_closed is False
        await http.aclose()

    @pytest.mark.asyncio
    async def test_aclose_closes_own_client(self) -> None:
        client = HTTPKeepaliveClient(timeout=5)

        await client.aclose()

        assert client._client.is_closed is True

    @pytest.mark.asyncio
    async def test_closed_client_raises_transport_error(self, backend: FakeBackend) -> None:
        http = backend.client()
        await http.aclose()
        client = HTTPKeepaliveClient(http)

        with pytest.raises(KeepaliveTransportError, match="client is closed"):
            await client.post_ping(PING_URL)
        assert backend.requests == []
